"""
import_engine.run_config - Immutable settings for one import run.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

import config

DELIMITERS = {",": ",", "comma": ",", "\t": "\t", "tab": "\t"}


class DuplicatePolicy(str, Enum):
    SKIP          = "skip"
    CREATE_UNIQUE = "create-unique"
    MODIFY        = "modify"


@dataclass(frozen=True)
class RunConfig:
    template: str
    parent: str = "/"
    delimiter: str = config.DEFAULT_DELIMITER
    quotechar: str = config.DEFAULT_QUOTECHAR
    max_rows: int = 0                     # 0 = unlimited
    duplicates: DuplicatePolicy = DuplicatePolicy.SKIP
    create_references: bool = False

    def __post_init__(self):
        if not self.template:
            raise ValueError("template is required")
        if self.delimiter not in DELIMITERS:
            raise ValueError(f"delimiter must be comma or tab, got {self.delimiter!r}")
        object.__setattr__(self, "delimiter", DELIMITERS[self.delimiter])
        if len(self.quotechar) != 1:
            raise ValueError("quotechar must be a single character")
        if self.quotechar == self.delimiter:
            raise ValueError("quotechar and delimiter must differ")
        if self.max_rows < 0:
            raise ValueError("max_rows must be 0 (unlimited) or positive")
        object.__setattr__(self, "duplicates", DuplicatePolicy(self.duplicates))
