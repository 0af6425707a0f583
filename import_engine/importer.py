"""
import_engine.importer - Top-level orchestrator.

Coordinates csv_parser → field_map → row_processor → duplicates → DB
commit → deferred file writes, and produces a structured ImportReport.

Each page write is committed on its own.  Nothing raised while handling
a single row leaves the row loop; it becomes that row's message instead.
Only an unreadable source (SourceError) or an unusable destination
(ImportConfigError) aborts the run.
"""

from __future__ import annotations

import logging
from typing import Mapping, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from db.engine import get_session
from db.models import Page
from import_engine.csv_parser import Source, open_source, read_header, read_rows
from import_engine.duplicates import Decision, resolve
from import_engine.field_map import ColumnKey, bind, importable_fields
from import_engine.references import ReferenceResolver
from import_engine.report import ImportReport, Outcome, Severity
from import_engine.row_processor import DraftRecord, RowError, RowProcessor
from import_engine.run_config import RunConfig
from schema import has_template
from schema.fields import FieldType
from services.file_service import FileService
from services.name_service import unique_name
from services.pages_service import PagesService, PageValidationError, SaveResult

logger = logging.getLogger(__name__)


class ImportConfigError(ValueError):
    """Raised before the first row when the destination cannot be used."""


def run_import(
    source: Source,
    run_config: RunConfig,
    overrides: Optional[Mapping[ColumnKey, Optional[str]]] = None,
    *,
    session: Optional[Session] = None,
    files: Optional[FileService] = None,
) -> ImportReport:
    """
    Import a CSV source into pages under run_config.parent.

    Parameters
    ----------
    source     : raw CSV bytes, a path, or a binary stream
    run_config : destination, duplicate policy, CSV dialect, row limit
    overrides  : explicit column → field choices ({index or header: field or None})
    session    : use this session instead of opening (and closing) one
    files      : file service for file fields (defaults from config)
    """
    report = ImportReport()
    rows = read_rows(open_source(source), run_config.delimiter, run_config.quotechar)
    header = read_header(rows)
    if header is None:
        report.warnings.append("CSV has no header row or is empty")
        return report

    own_session = session is None
    session = session or get_session()
    try:
        importer = Importer(session, run_config, header, overrides, files or FileService(), report)
        for row_num, cells in enumerate(rows, start=1):     # row 1 = first row after the header
            if run_config.max_rows and row_num > run_config.max_rows:
                logger.info("Row limit %d reached; stopping", run_config.max_rows)
                break
            report.total_rows += 1
            importer.import_row(row_num, cells)
    finally:
        if own_session:
            session.close()

    logger.info(
        "Import into %s done: %d of %d rows imported",
        run_config.parent, report.imported, report.total_rows,
    )
    return report


class Importer:
    """Per-run state: destination parent, binding, resolver and row processor."""

    def __init__(
        self,
        session: Session,
        run_config: RunConfig,
        header: list[str],
        overrides: Optional[Mapping[ColumnKey, Optional[str]]],
        files: FileService,
        report: ImportReport,
    ):
        self.session = session
        self.config = run_config
        self.files = files
        self.report = report

        if not has_template(run_config.template):
            raise ImportConfigError(f"Unknown template {run_config.template!r}")
        parent = PagesService.get_by_path(session, run_config.parent)
        if parent is None:
            raise ImportConfigError(f"Parent page {run_config.parent!r} does not exist")
        self.parent: Page = parent

        fields = importable_fields(run_config.template)
        self.fields = {f.name: f for f in fields}
        binding = bind(header, fields, overrides)
        report.binding = binding.to_dict()
        report.warnings.extend(binding.warnings)
        if not any(self.fields[name].type is FieldType.TITLE for _, name in binding.bound()):
            report.warnings.append("No column is bound to a title field; every row will be rejected")

        self.resolver = ReferenceResolver(session, run_config.create_references)
        self.processor = RowProcessor(session, run_config.template, binding, fields, self.resolver)

    # ── One row ────────────────────────────────────────────────────────

    def import_row(self, row_num: int, cells: list[str]) -> None:
        name: Optional[str] = None
        try:
            draft = self.processor.build_draft(cells)
            decision, existing, name = resolve(
                self.session, self.parent, draft.name, self.config.duplicates)

            if decision is Decision.SKIP:
                self._record(row_num, Outcome.SKIPPED, name,
                             f"Skipped duplicate: {existing.path} already exists")
                return

            if decision is Decision.MODIFY:
                result = self.processor.merge(existing, draft)
            else:
                result = self._create(draft, name)
                name = result.page.name
            self.session.commit()

            file_changes, failures = self._apply_deferred(result.page, draft)
            self._record_written(row_num, result, file_changes, failures)

        except RowError as exc:
            self.session.rollback()
            logger.warning("Row %d rejected: %s", row_num, exc)
            self._record(row_num, Outcome.FAILED, name, str(exc))
        except (PageValidationError, SQLAlchemyError) as exc:
            self.session.rollback()
            logger.warning("Row %d not saved: %s", row_num, exc)
            self._record(row_num, Outcome.FAILED, name, f"Save failed: {exc}")
        except Exception as exc:
            self.session.rollback()
            logger.exception("Row %d: unexpected error", row_num)
            self._record(row_num, Outcome.FAILED, name, f"Unexpected: {exc}")

    def _create(self, draft: DraftRecord, name: str) -> SaveResult:
        """Create the page; a name taken since the lookup gets one retry under a unique name."""
        try:
            return self.processor.create(self.parent, draft, name)
        except IntegrityError:
            self.session.rollback()
            retry = unique_name(self.session, name, self.parent)
            logger.warning("Name %r was taken at write time; retrying as %r", name, retry)
            return self.processor.create(self.parent, draft, retry)

    def _apply_deferred(self, page: Page, draft: DraftRecord) -> tuple[list[str], list[str]]:
        """
        Second write: attach files now that page has an id.

        The page itself is already committed, so nothing raised here fails
        the row; each problem becomes a failure entry instead.  Replaced
        files are deleted from disk only after their field is committed.
        """
        changed: list[str] = []
        failures: list[str] = []
        if not draft.deferred:
            return changed, failures

        for name, value in draft.deferred.items():
            tokens = [value] if isinstance(value, str) else list(value)
            try:
                res = self.files.attach(self.session, page, name, tokens,
                                        self.fields[name].max_files)
                self.session.commit()
            except Exception as exc:
                self.session.rollback()
                logger.warning("Page %s: saving files for %s failed: %s", page.id, name, exc)
                failures.append(f"{name}: {exc}")
                continue
            if res.changed:
                changed.append(name)
            failures.extend(res.failures)
            try:
                self.files.remove_stale(page, res.stale)
            except OSError as exc:
                logger.warning("Page %s: cannot remove old files of %s: %s", page.id, name, exc)
                failures.append(f"{name}: cannot remove old file: {exc}")
        return changed, failures

    # ── Reporting ──────────────────────────────────────────────────────

    def _record_written(
        self,
        row_num: int,
        result: SaveResult,
        file_changes: list[str],
        failures: list[str],
    ) -> None:
        page = result.page
        changes = result.changes + file_changes
        if result.created:
            outcome, reason = Outcome.CREATED, f"Created page {page.path}"
        elif result.written or file_changes:
            outcome = Outcome.MODIFIED
            reason = f"Modified page {page.path} ({', '.join(changes)})"
        else:
            outcome, reason = Outcome.UNCHANGED, f"No changes to {page.path}"

        severity = None
        if failures:
            severity = Severity.WARNING
            reason += f"; {len(failures)} file problem(s)"
        logger.debug("Row %d: %s", row_num, reason)
        self._record(row_num, outcome, page.name, reason, failures, severity)

    def _record(self, row_num, outcome, name, reason, extra=(), severity=None) -> None:
        created, notes = self.resolver.drain()
        details = [f"Created referenced page {p.path}" for p in created]
        details.extend(notes)
        details.extend(extra)
        self.report.add(row_num, outcome, name, reason, details, severity)
