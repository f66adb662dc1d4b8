"""JSON-file-backed implementation of QuotaRepository."""

from aws_lambda_powertools import Logger
from pydantic import ValidationError as PydanticValidationError

from core.infrastructure.adapters.filesystem_adapter import FileSystemAdapterProtocol
from core.models.errors import QuotaLedgerError
from core.models.quota import QuotaEntry
from core.repositories.quota_repository import QuotaRepository
from core.utils.constants import QUOTA_DIR, QUOTA_HISTORY_DIR, RECORD_SUFFIX

logger = Logger(UTC=True)


class JsonFileQuotaRepository(QuotaRepository):
    """Current entry at ``quota/{owner}.json``, superseded ones under ``quota/history/{owner}/``."""

    def __init__(self, adapter: FileSystemAdapterProtocol) -> None:
        self._fs = adapter

    @staticmethod
    def entry_key(owner_id: str) -> str:
        return f"{QUOTA_DIR}/{owner_id}{RECORD_SUFFIX}"

    @staticmethod
    def history_key(entry: QuotaEntry) -> str:
        return f"{QUOTA_DIR}/{QUOTA_HISTORY_DIR}/{entry.owner_id}/{entry.entry_id}{RECORD_SUFFIX}"

    def load_entry(self, *, owner_id: str) -> QuotaEntry | None:
        try:
            raw = self._fs.read_bytes(key=self.entry_key(owner_id))
        except FileNotFoundError:
            return None

        except (OSError, ValueError) as exc:
            logger.exception("Quota entry read failed", extra={"owner_id": owner_id})
            raise QuotaLedgerError(
                message="Unable to read subscription usage",
                details={"owner_id": owner_id},
            ) from exc

        try:
            return QuotaEntry.model_validate_json(raw)
        except PydanticValidationError as exc:
            logger.error("Stored quota entry is malformed", extra={"owner_id": owner_id})
            raise QuotaLedgerError(
                message="Invalid subscription record",
                details={"owner_id": owner_id},
            ) from exc

    def save_entry(self, *, entry: QuotaEntry) -> None:
        self._write(self.entry_key(entry.owner_id), entry)
        logger.debug(
            "Quota entry saved",
            extra={"owner_id": entry.owner_id, "usage_count": entry.usage_count},
        )

    def archive_entry(self, *, entry: QuotaEntry) -> None:
        self._write(self.history_key(entry), entry)
        logger.info(
            "Quota entry archived",
            extra={"owner_id": entry.owner_id, "entry_id": entry.entry_id},
        )

    def _write(self, key: str, entry: QuotaEntry) -> None:
        try:
            self._fs.write_bytes(key=key, data=entry.model_dump_json().encode("utf-8"))
        except (OSError, ValueError) as exc:
            logger.exception("Quota entry write failed", extra={"owner_id": entry.owner_id})
            raise QuotaLedgerError(
                message="Unable to update subscription usage",
                details={"owner_id": entry.owner_id},
            ) from exc
