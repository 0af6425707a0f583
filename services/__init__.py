"""
services - Business-logic layer sitting between API/importer and DB.
"""

from services.pages_service import (                       # noqa: F401
    PagesService, PageValidationError, SaveResult, StoredFile,
)
from services.name_service import unique_name              # noqa: F401
from services.file_service import FileService, FileAttachError   # noqa: F401
