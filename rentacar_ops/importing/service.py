from __future__ import annotations

"""Spreadsheet import service.

Workflow
--------

- ``preview``: parse the upload and return its sheets, headers and first rows
  so the user can pick a sheet and target.
- ``run``:

  1. Parse the selected sheet and map every row with the target's mapper.
     Rows whose mapped values are all blank are dropped; rows whose mapping
     fails are recorded as errors against their spreadsheet row number
     (the header is row 1).
  2. Insert the mapped rows in batches, skipping rows whose business code
     already exists. A failing batch records an error for each of its rows
     and the import continues with the next batch.
  3. Write an ``ImportHistory`` record and emit ``import.completed``.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from ..auth import UserProvider, get_current_user, require_role
from ..core.config import ImportConfig, settings
from ..core.errors import ValidationError
from ..core.logging_config import get_logger
from ..core.models.domain import DomainEventType, ImportHistory, ImportStatus, ImportTarget, UserRole
from ..core.models.io import ImportPreview, ImportResult, ImportRowError
from ..events import EventBus, event_bus
from ..repos import ImportHistoryRepository, MasterDataRepository
from .mappers import get_mapper
from .parser import get_sheet_names, parse_file

logger = get_logger(__name__)

IMPORTABLE_TARGETS: Tuple[ImportTarget, ...] = (
    ImportTarget.company,
    ImportTarget.customer,
    ImportTarget.daily_report_dealer,
)


def _import_config() -> ImportConfig:
    return settings.import_


def _has_value(values: Dict[str, Any]) -> bool:
    return any(value not in ("", None) for value in values.values())


def _resolve_target(target: Any) -> ImportTarget:
    valid = ", ".join(t.value for t in IMPORTABLE_TARGETS)
    try:
        resolved = ImportTarget(target)
    except ValueError:
        raise ValidationError(f"Invalid import target {target!r}. Valid values: {valid}") from None
    if resolved not in IMPORTABLE_TARGETS:
        raise ValidationError(f"Invalid import target {resolved.value!r}. Valid values: {valid}")
    return resolved


@dataclass(frozen=True)
class ImportServiceDeps:
    """Dependency bundle for ``ImportService``."""

    master_data: MasterDataRepository
    import_histories: ImportHistoryRepository
    config: ImportConfig = field(default_factory=_import_config)
    events: EventBus = field(default=event_bus)
    user_provider: UserProvider = field(default=get_current_user)


class ImportService:
    """Preview and import master data spreadsheets."""

    def __init__(self, *, deps: ImportServiceDeps) -> None:
        self._deps = deps

    async def preview(self, data: bytes, file_name: str, sheet_name: Optional[str] = None) -> ImportPreview:
        """
        Describe an upload without importing it.

        Returns:
            The sheet list, the parsed sheet's headers, its first rows and its
            row count.
        """
        sheets = get_sheet_names(data, file_name)
        parsed = parse_file(data, file_name, sheet_name)
        return ImportPreview(
            file_name=file_name,
            sheets=sheets,
            current_sheet=parsed.sheet_name,
            headers=parsed.headers,
            preview_rows=parsed.rows[: self._deps.config.preview_rows],
            total_rows=parsed.total_rows,
        )

    async def run(
        self, data: bytes, file_name: str, target: ImportTarget | str, sheet_name: Optional[str] = None
    ) -> ImportResult:
        """
        Import an upload into a master data table.

        Args:
            data: Raw file content.
            file_name: Original file name, used for format detection and history.
            target: ``company``, ``customer`` or ``dailyReportDealer``.
            sheet_name: Workbook sheet to import; the first sheet when omitted.

        Returns:
            Row counts and the first row errors.

        Raises:
            PermissionDeniedError: The user is below MEMBER.
            ValidationError: Unknown or non-importable target, unreadable file,
                or missing sheet.
        """
        user = await self._deps.user_provider()
        require_role(user, UserRole.MEMBER)
        resolved = _resolve_target(target)
        config = self._deps.config

        parsed = parse_file(data, file_name, sheet_name)
        mapper = get_mapper(resolved)

        errors: List[ImportRowError] = []
        mapped: List[Tuple[int, Dict[str, Any]]] = []
        for index, row in enumerate(parsed.rows):
            row_number = index + 2
            try:
                values = mapper(row)
            except Exception as exc:
                logger.debug(f"Row {row_number} of {file_name} could not be mapped: {exc}")
                errors.append(ImportRowError(row=row_number, message=str(exc)))
                continue
            if _has_value(values):
                mapped.append((row_number, values))

        imported_rows = 0
        for start in range(0, len(mapped), config.batch_size):
            batch = mapped[start : start + config.batch_size]
            try:
                imported_rows += await self._deps.master_data.insert_many(resolved, [values for _, values in batch])
            except Exception as exc:
                logger.error(
                    f"Import batch of {len(batch)} rows into {resolved.value} failed: {exc}",
                    exc_info=exc,
                )
                errors.extend(ImportRowError(row=row_number, message=str(exc)) for row_number, _ in batch)

        if not errors:
            status = ImportStatus.SUCCESS
        elif imported_rows > 0:
            status = ImportStatus.PARTIAL
        else:
            status = ImportStatus.FAILED

        history = ImportHistory(
            target=resolved,
            file_name=file_name,
            sheet_name=parsed.sheet_name,
            record_count=imported_rows,
            status=status,
            error_log=[error.model_dump() for error in errors[: config.max_logged_errors]] or None,
        )
        await self._deps.import_histories.create(history)

        result = ImportResult(
            target=resolved,
            file_name=file_name,
            sheet_name=parsed.sheet_name,
            total_rows=parsed.total_rows,
            imported_rows=imported_rows,
            skipped_rows=parsed.total_rows - imported_rows,
            errors=errors[: config.max_reported_errors],
        )
        logger.info(
            f"Imported {file_name} into {resolved.value}: {imported_rows}/{parsed.total_rows} rows, "
            f"{len(errors)} errors, status={status.value}"
        )
        await self._deps.events.emit(
            DomainEventType.import_completed, {"history": history, "result": result, "user_id": user.id}
        )
        return result

    async def history(self, limit: int = 50) -> List[ImportHistory]:
        """Return the most recent import runs, newest first."""
        return await self._deps.import_histories.list(limit=limit)
