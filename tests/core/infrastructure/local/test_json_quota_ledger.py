from datetime import datetime, timedelta, timezone
from unittest.mock import patch

import pytest

from core.infrastructure.adapters.filesystem_adapter import FileSystemAdapter
from core.infrastructure.local.json_quota_ledger import JsonFileQuotaRepository
from core.models.errors import QuotaLedgerError
from core.models.quota import QuotaEntry, SubscriptionPlan, SubscriptionStatus

NOW = datetime(2024, 6, 1, tzinfo=timezone.utc)


def _entry(entry_id: str = "e1", usage_count: int = 0) -> QuotaEntry:
    return QuotaEntry(
        entry_id=entry_id,
        owner_id="john",
        plan=SubscriptionPlan.FREE,
        status=SubscriptionStatus.ACTIVE,
        usage_count=usage_count,
        usage_limit=10,
        period_start=NOW,
        period_end=NOW + timedelta(days=30),
        created_at=NOW,
        updated_at=NOW,
    )


class TestJsonFileQuotaRepository:
    def test_load_missing_is_none(self, quota_repository: JsonFileQuotaRepository) -> None:
        assert quota_repository.load_entry(owner_id="john") is None

    def test_save_then_load(self, quota_repository: JsonFileQuotaRepository) -> None:
        entry = _entry(usage_count=3)

        quota_repository.save_entry(entry=entry)

        assert quota_repository.load_entry(owner_id="john") == entry

    def test_save_overwrites_current(self, quota_repository: JsonFileQuotaRepository) -> None:
        quota_repository.save_entry(entry=_entry(usage_count=1))
        quota_repository.save_entry(entry=_entry(usage_count=2))

        assert quota_repository.load_entry(owner_id="john").usage_count == 2

    def test_archive_keeps_history(
        self,
        quota_repository: JsonFileQuotaRepository,
        fs_adapter: FileSystemAdapter,
    ) -> None:
        quota_repository.archive_entry(entry=_entry(entry_id="old"))

        assert fs_adapter.list_keys(prefix="quota/history/john", suffix=".json") == [
            "quota/history/john/old.json"
        ]
        assert quota_repository.load_entry(owner_id="john") is None

    def test_malformed_entry_raises(
        self,
        quota_repository: JsonFileQuotaRepository,
        fs_adapter: FileSystemAdapter,
    ) -> None:
        fs_adapter.write_bytes(key="quota/john.json", data=b'{"owner_id": "john"}')

        with pytest.raises(QuotaLedgerError):
            quota_repository.load_entry(owner_id="john")

    def test_write_failure_translated(self, quota_repository: JsonFileQuotaRepository) -> None:
        with patch.object(FileSystemAdapter, "write_bytes", side_effect=OSError("disk full")):
            with pytest.raises(QuotaLedgerError) as exc_info:
                quota_repository.save_entry(entry=_entry())

        assert exc_info.value.details == {"owner_id": "john"}
