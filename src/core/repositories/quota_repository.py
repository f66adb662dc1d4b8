"""Abstract contract for quota ledger persistence."""

from abc import ABC, abstractmethod

from core.models.quota import QuotaEntry


class QuotaRepository(ABC):
    """Contract for storing per-owner quota entries.

    Entries are never hard-deleted: a replaced entry is archived.
    """

    @abstractmethod
    def load_entry(self, *, owner_id: str) -> QuotaEntry | None:
        """Return the current entry for an owner, or None.

        Raises:
            QuotaLedgerError: If the read fails
        """

    @abstractmethod
    def save_entry(self, *, entry: QuotaEntry) -> None:
        """Write the current entry for ``entry.owner_id``.

        Raises:
            QuotaLedgerError: If the write fails
        """

    @abstractmethod
    def archive_entry(self, *, entry: QuotaEntry) -> None:
        """Keep a superseded entry in the owner's history.

        Raises:
            QuotaLedgerError: If the write fails
        """
