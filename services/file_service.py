"""
services.file_service - Store files for file-type page fields.

A file token from a CSV is either an http(s) URL (downloaded) or a path
(absolute, or relative to config.FILES_SOURCE_DIR).  Stored files live in
FILES_DIR/<page id>/, so a page needs an id before anything can be attached.
"""

from __future__ import annotations

import hashlib
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional
from urllib.parse import unquote, urlparse

import requests
from sqlalchemy.orm import Session

import config
from db.models import Page
from services.pages_service import PagesService, StoredFile

logger = logging.getLogger(__name__)


class FileAttachError(Exception):
    """Raised when a single file token cannot be fetched or stored."""


@dataclass
class AttachResult:
    changed: bool = False
    failures: list[str] = field(default_factory=list)
    stale: set[str] = field(default_factory=set)      # stored files no field uses any more


def safe(s: str) -> str:
    """Make a string safe for use as a filename."""
    return "".join(c if c.isalnum() or c in "._-" else "_" for c in s).strip("._") or "file"


def is_url(token: str) -> bool:
    return urlparse(token).scheme in ("http", "https")


class FileService:

    def __init__(
        self,
        files_dir: Optional[Path] = None,
        source_dir: Optional[Path] = None,
        timeout: Optional[float] = None,
    ):
        self.files_dir = Path(files_dir or config.FILES_DIR)
        self.source_dir = Path(source_dir or config.FILES_SOURCE_DIR)
        self.timeout = timeout if timeout is not None else config.FETCH_TIMEOUT

    # ── Fetch ──────────────────────────────────────────────────────────

    def fetch(self, token: str) -> tuple[str, bytes]:
        """Return (filename, content) for a URL or path token."""
        if is_url(token):
            return self._download(token)
        path = Path(token)
        if not path.is_absolute():
            path = self.source_dir / path
        try:
            return path.name, path.read_bytes()
        except OSError as exc:
            raise FileAttachError(f"{token}: {exc.strerror or exc}") from exc

    def _download(self, url: str) -> tuple[str, bytes]:
        headers = {"User-Agent": config.USER_AGENT}
        try:
            response = requests.get(url, headers=headers, timeout=self.timeout,
                                    allow_redirects=True)
            response.raise_for_status()
        except requests.RequestException as exc:
            raise FileAttachError(f"{url}: download failed: {exc}") from exc
        filename = unquote(Path(urlparse(url).path).name) or "download"
        return filename, response.content

    # ── Store ──────────────────────────────────────────────────────────

    def page_dir(self, page: Page) -> Path:
        if page.id is None:
            raise FileAttachError("page has no id yet")
        return self.files_dir / str(page.id)

    def store(self, page: Page, filename: str, content: bytes, source: str) -> StoredFile:
        """Write content under the page's directory; identical files are reused."""
        target_dir = self.page_dir(page)
        target_dir.mkdir(parents=True, exist_ok=True)
        sha256 = hashlib.sha256(content).hexdigest()

        name = safe(filename)
        stem, suffix = Path(name).stem, Path(name).suffix
        target = target_dir / name
        n = 1
        while target.exists():
            if hashlib.sha256(target.read_bytes()).hexdigest() == sha256:
                break
            target = target_dir / f"{stem}-{n}{suffix}"
            n += 1
        else:
            target.write_bytes(content)

        return StoredFile(filename=target.name, source=source, sha256=sha256)

    # ── Attach ─────────────────────────────────────────────────────────

    def attach(
        self,
        session: Session,
        page: Page,
        field_name: str,
        tokens: list[str],
        max_files: int = 0,
    ) -> AttachResult:
        """
        Make field_name hold exactly the files named by tokens.

        Tokens that fail are reported in AttachResult.failures and left out;
        the rest are still attached.  When the existing files came from the
        same sources in the same order nothing is fetched again.

        Replaced files stay on disk and are listed in AttachResult.stale;
        call remove_stale() once the new file rows are committed.
        """
        result = AttachResult()
        if max_files and len(tokens) > max_files:
            result.failures.extend(
                f"{t}: field {field_name} holds at most {max_files} file(s)"
                for t in tokens[max_files:]
            )
            tokens = tokens[:max_files]

        current = page.files_for(field_name)
        if [f.source for f in current] == tokens:
            return result

        stored: list[StoredFile] = []
        for token in tokens:
            try:
                filename, content = self.fetch(token)
                stored.append(self.store(page, filename, content, token))
            except FileAttachError as exc:
                logger.warning("Page %s: %s", page.id, exc)
                result.failures.append(str(exc))
            except OSError as exc:
                logger.warning("Page %s: cannot store %s: %s", page.id, token, exc)
                result.failures.append(f"{token}: cannot store file: {exc}")

        if result.failures and not stored:
            return result

        old_names = {f.filename for f in current}
        result.changed = PagesService.set_files(session, page, field_name, stored)
        if result.changed:
            result.stale = old_names - {f.filename for f in page.files}
        return result

    def remove_stale(self, page: Page, filenames: set[str]) -> None:
        """Delete filenames from the page's directory; already missing files are ignored."""
        for name in filenames:
            path = self.page_dir(page) / name
            try:
                path.unlink()
            except FileNotFoundError:
                pass
