"""
Per-owner upload quota ledger.

The ledger tracks one current entry per owner (plan, usage counter,
validity window) and answers whether another upload is allowed.

Uploads go through a reservation: ``reserve`` checks the allowance and
holds a slot under the owner's lock, so two concurrent uploads by an
owner one slot below the limit cannot both pass. The slot is either
committed (usage incremented) once the upload is persisted, or released
if the upload aborts. Locks are per process; uploads for the same owner
from separate processes can still overshoot by the number of processes.
"""

import math
import re
import threading
from collections.abc import Callable, Iterator, Sequence
from contextlib import contextmanager
from datetime import datetime, timedelta

from aws_lambda_powertools import Logger

from core.models.errors import (
    AccountingError,
    QuotaExceededError,
    QuotaLedgerError,
    ValidationError,
)
from core.models.quota import (
    PlanConfig,
    QuotaEntry,
    QuotaUsage,
    SubscriptionPlan,
    SubscriptionStatus,
)
from core.quota.plans import DEFAULT_PLANS
from core.repositories.quota_repository import QuotaRepository
from core.utils.constants import (
    ERROR_CODE_INVALID_OWNER_ID,
    OWNER_ID_PATTERN,
    QUOTA_PERIOD_DAYS,
)
from core.utils.ids import new_object_id
from core.utils.time import utc_now

logger = Logger(UTC=True)

_OWNER_ID_RE = re.compile(OWNER_ID_PATTERN)


class QuotaReservation:
    """A held upload slot. Exactly one of commit/release takes effect."""

    def __init__(self, ledger: "QuotaLedger", owner_id: str) -> None:
        self._ledger = ledger
        self._owner_id = owner_id
        self._settled = False
        self._lock = threading.Lock()

    @property
    def owner_id(self) -> str:
        return self._owner_id

    @property
    def settled(self) -> bool:
        return self._settled

    def commit(self) -> QuotaEntry | None:
        """Record the upload against the owner's usage.

        Returns the updated entry, or None if already settled.

        Raises:
            AccountingError: If usage could not be recorded
        """
        with self._lock:
            if self._settled:
                return None
            self._settled = True

        return self._ledger._commit_reservation(self._owner_id)

    def release(self) -> None:
        """Give the slot back without touching usage."""
        with self._lock:
            if self._settled:
                return
            self._settled = True

        self._ledger._release_reservation(self._owner_id)


class QuotaLedger:
    """Application service owning quota entries and usage accounting."""

    def __init__(
        self,
        repository: QuotaRepository,
        *,
        period_days: int = QUOTA_PERIOD_DAYS,
        plans: Sequence[PlanConfig] = DEFAULT_PLANS,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._repository = repository
        self._period = timedelta(days=period_days)
        self._plans = {config.plan: config for config in plans}
        self._clock = clock

        self._locks_guard = threading.Lock()
        # owner -> (lock, number of threads holding or waiting on it)
        self._owner_locks: dict[str, tuple[threading.Lock, int]] = {}
        self._pending: dict[str, int] = {}

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def list_plans(self) -> list[PlanConfig]:
        return list(self._plans.values())

    def get_entry(self, owner_id: str) -> QuotaEntry | None:
        self._validate_owner_id(owner_id)
        return self._repository.load_entry(owner_id=owner_id)

    def is_upload_allowed(self, owner_id: str) -> bool:
        """Whether ``owner_id`` may upload one more image right now.

        An owner without an entry is allowed; the entry is created on the
        first reservation.
        """
        self._validate_owner_id(owner_id)

        with self._owner_lock(owner_id):
            entry = self._repository.load_entry(owner_id=owner_id)
            if entry is None:
                return True
            pending = self._pending.get(owner_id, 0)

        return entry.is_current(self._clock()) and entry.has_capacity(pending)

    def get_usage(self, owner_id: str) -> QuotaUsage | None:
        """Summarize the owner's current entry, or None if there is none."""
        entry = self.get_entry(owner_id)
        if entry is None:
            return None

        now = self._clock()
        status = entry.status
        if status == SubscriptionStatus.ACTIVE and now > entry.period_end:
            status = SubscriptionStatus.EXPIRED

        if entry.is_unlimited:
            percent = 0
        elif entry.usage_limit == 0:
            percent = 100
        else:
            percent = round(entry.usage_count / entry.usage_limit * 100)

        days_remaining = max(0, math.ceil((entry.period_end - now).total_seconds() / 86400))

        return QuotaUsage(
            owner_id=owner_id,
            plan=entry.plan,
            status=status,
            usage_count=entry.usage_count,
            usage_limit=entry.usage_limit,
            quota_usage_percent=percent,
            days_remaining=days_remaining,
        )

    # ------------------------------------------------------------------
    # Upload accounting
    # ------------------------------------------------------------------

    def ensure_entry(self, owner_id: str) -> QuotaEntry:
        """Return the owner's entry, creating a Free one if missing."""
        self._validate_owner_id(owner_id)
        with self._owner_lock(owner_id):
            return self._ensure_entry_locked(owner_id)

    def reserve(self, owner_id: str) -> QuotaReservation:
        """Atomically check the allowance and hold one upload slot.

        Raises:
            QuotaExceededError: If the owner cannot upload
            QuotaLedgerError: If the entry cannot be read or created
        """
        self._validate_owner_id(owner_id)

        with self._owner_lock(owner_id):
            entry = self._ensure_entry_locked(owner_id)
            pending = self._pending.get(owner_id, 0)

            if not entry.is_current(self._clock()) or not entry.has_capacity(pending):
                logger.info(
                    "Upload quota exceeded",
                    extra={
                        "owner_id": owner_id,
                        "plan": entry.plan.value,
                        "status": entry.status.value,
                        "usage_count": entry.usage_count,
                        "usage_limit": entry.usage_limit,
                        "pending": pending,
                    },
                )
                raise QuotaExceededError(
                    message="Upload quota exceeded. Please upgrade your subscription plan.",
                    details={
                        "plan": entry.plan.value,
                        "usage_count": entry.usage_count,
                        "usage_limit": entry.usage_limit,
                    },
                )

            self._pending[owner_id] = pending + 1

        logger.debug("Upload slot reserved", extra={"owner_id": owner_id})
        return QuotaReservation(self, owner_id)

    def record_upload(self, owner_id: str) -> QuotaEntry:
        """Increment usage by one. Not idempotent.

        Raises:
            QuotaExceededError: If the increment would pass a finite limit
            AccountingError: If the entry cannot be persisted
        """
        self._validate_owner_id(owner_id)
        with self._owner_lock(owner_id):
            return self._increment_locked(owner_id)

    def _commit_reservation(self, owner_id: str) -> QuotaEntry:
        with self._owner_lock(owner_id):
            self._drop_pending(owner_id)
            try:
                return self._increment_locked(owner_id)
            except QuotaExceededError as exc:
                # limit lowered by an administrator while the upload was in flight
                raise AccountingError(
                    message="Usage could not be recorded",
                    details={"owner_id": owner_id, "reason": exc.error_code},
                ) from exc

    def _release_reservation(self, owner_id: str) -> None:
        with self._owner_lock(owner_id):
            self._drop_pending(owner_id)
        logger.debug("Upload slot released", extra={"owner_id": owner_id})

    # ------------------------------------------------------------------
    # Plan management
    # ------------------------------------------------------------------

    def set_plan(
        self,
        owner_id: str,
        plan: SubscriptionPlan,
        custom_limit: int | None = None,
    ) -> QuotaEntry:
        """Supersede the owner's entry with a fresh one for ``plan``.

        Usage restarts at zero and a new period begins now.
        """
        self._validate_owner_id(owner_id)

        with self._owner_lock(owner_id):
            current = self._repository.load_entry(owner_id=owner_id)
            if current is not None:
                self._repository.archive_entry(entry=current)

            entry = self._new_entry(owner_id, plan, custom_limit)
            self._repository.save_entry(entry=entry)

        logger.info(
            "Subscription plan set",
            extra={"owner_id": owner_id, "plan": plan.value, "usage_limit": entry.usage_limit},
        )
        return entry

    def admin_set_limit(self, owner_id: str, new_limit: int) -> QuotaEntry:
        """Override the owner's limit, bypassing plan defaults."""
        self._validate_owner_id(owner_id)

        with self._owner_lock(owner_id):
            entry = self._ensure_entry_locked(owner_id)
            updated = entry.model_copy(update={"usage_limit": new_limit, "updated_at": self._clock()})
            self._repository.save_entry(entry=updated)

        logger.info(
            "Quota limit overridden",
            extra={"owner_id": owner_id, "usage_limit": new_limit},
        )
        return updated

    def admin_reset_usage(self, owner_id: str) -> QuotaEntry:
        """Reset usage to zero. The only path by which usage decreases."""
        self._validate_owner_id(owner_id)

        with self._owner_lock(owner_id):
            entry = self._ensure_entry_locked(owner_id)
            updated = entry.model_copy(update={"usage_count": 0, "updated_at": self._clock()})
            self._repository.save_entry(entry=updated)

        logger.info("Quota usage reset", extra={"owner_id": owner_id})
        return updated

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    @contextmanager
    def _owner_lock(self, owner_id: str) -> Iterator[None]:
        """Hold the owner's lock. The lock is dropped once no thread uses it."""
        with self._locks_guard:
            lock, users = self._owner_locks.get(owner_id, (threading.Lock(), 0))
            self._owner_locks[owner_id] = (lock, users + 1)

        try:
            with lock:
                yield
        finally:
            with self._locks_guard:
                lock, users = self._owner_locks[owner_id]
                if users == 1:
                    del self._owner_locks[owner_id]
                else:
                    self._owner_locks[owner_id] = (lock, users - 1)

    def _drop_pending(self, owner_id: str) -> None:
        remaining = self._pending.get(owner_id, 0) - 1
        if remaining > 0:
            self._pending[owner_id] = remaining
        else:
            self._pending.pop(owner_id, None)

    def _ensure_entry_locked(self, owner_id: str) -> QuotaEntry:
        entry = self._repository.load_entry(owner_id=owner_id)
        if entry is not None:
            return entry

        entry = self._new_entry(owner_id, SubscriptionPlan.FREE, None)
        self._repository.save_entry(entry=entry)

        logger.info(
            "Default quota entry created",
            extra={"owner_id": owner_id, "usage_limit": entry.usage_limit},
        )
        return entry

    def _increment_locked(self, owner_id: str) -> QuotaEntry:
        try:
            entry = self._ensure_entry_locked(owner_id)
        except QuotaLedgerError as exc:
            raise AccountingError(
                message="Usage could not be recorded",
                details={"owner_id": owner_id},
            ) from exc

        if not entry.has_capacity():
            raise QuotaExceededError(
                message="Upload quota exceeded. Please upgrade your subscription plan.",
                details={"usage_count": entry.usage_count, "usage_limit": entry.usage_limit},
            )

        updated = entry.model_copy(
            update={"usage_count": entry.usage_count + 1, "updated_at": self._clock()}
        )

        try:
            self._repository.save_entry(entry=updated)
        except QuotaLedgerError as exc:
            raise AccountingError(
                message="Usage could not be recorded",
                details={"owner_id": owner_id},
            ) from exc

        logger.info(
            "Upload recorded",
            extra={
                "owner_id": owner_id,
                "usage_count": updated.usage_count,
                "usage_limit": updated.usage_limit,
            },
        )
        return updated

    def _new_entry(
        self,
        owner_id: str,
        plan: SubscriptionPlan,
        custom_limit: int | None,
    ) -> QuotaEntry:
        now = self._clock()
        limit = custom_limit if custom_limit is not None else self._plans[plan].image_quota

        return QuotaEntry(
            entry_id=new_object_id(),
            owner_id=owner_id,
            plan=plan,
            status=SubscriptionStatus.ACTIVE,
            usage_count=0,
            usage_limit=limit,
            period_start=now,
            period_end=now + self._period,
            created_at=now,
            updated_at=now,
        )

    @staticmethod
    def _validate_owner_id(owner_id: str) -> None:
        if not isinstance(owner_id, str) or not _OWNER_ID_RE.fullmatch(owner_id):
            raise ValidationError(
                message="Invalid owner identifier",
                error_code=ERROR_CODE_INVALID_OWNER_ID,
                details={"owner_id": owner_id},
            )
