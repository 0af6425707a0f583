"""
import_engine - CSV → pages import pipeline.

Public API:
    run_import(source, run_config, overrides=None) → ImportReport
    RunConfig, DuplicatePolicy
"""

from import_engine.importer import run_import, ImportConfigError     # noqa: F401
from import_engine.csv_parser import SourceError                     # noqa: F401
from import_engine.report import ImportReport, Outcome, Severity     # noqa: F401
from import_engine.run_config import RunConfig, DuplicatePolicy      # noqa: F401
