"""
Persistence Gateway for Daily Burnout Assessments.

One assessment is stored per user per calendar day. Two interchangeable
backends implement the AssessmentStore interface:

- SupabaseAssessmentStore: the durable store, reached over PostgREST
- LocalAssessmentCache: a bounded JSON file on the device (last 30 days)

FallbackRepository composes them. Writes always land in the local cache
first, then go to the durable store when a user is signed in. Reads prefer
the durable store and degrade to the cache when it cannot be reached.
Pre-existing guest history is migrated once, and writes that failed
remotely are re-pushed after the next successful one.
"""

import json
import logging
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import date, timedelta
from pathlib import Path
from typing import Callable, Iterable, List, Optional, Set

from .errors import MigrationConflict, RemoteUnavailable
from .models import Assessment
from .supabase_rest import PostgrestClient

logger = logging.getLogger(__name__)

DEFAULT_CACHE_DAYS = 30
ASSESSMENT_KEY = "user_id,assessment_date"


class AssessmentStore(ABC):
    """Storage keyed by (user_id, assessment date)."""

    @abstractmethod
    async def upsert(self, user_id: str, assessment: Assessment) -> Assessment:
        """Insert or overwrite the assessment for its day."""

    @abstractmethod
    async def fetch_range(self, user_id: str, start: date, end: date) -> List[Assessment]:
        """Assessments with start <= date <= end, ascending by date."""

    @abstractmethod
    async def existing_dates(self, user_id: str, dates: Iterable[date]) -> Set[date]:
        """Which of the given dates already have an assessment."""

    @abstractmethod
    async def insert_missing(self, user_id: str, assessments: List[Assessment]) -> List[date]:
        """Insert assessments whose day is not stored yet; return the days actually inserted."""


class SupabaseAssessmentStore(AssessmentStore):
    """Durable store backed by the `burnout_assessments` table."""

    def __init__(self, client: PostgrestClient, table: str = "burnout_assessments"):
        self.client = client
        self.table = table

    async def upsert(self, user_id: str, assessment: Assessment) -> Assessment:
        rows = await self.client.upsert(self.table, assessment.to_row(user_id), on_conflict=ASSESSMENT_KEY)
        return Assessment.from_row(rows[0]) if rows else assessment

    async def fetch_range(self, user_id: str, start: date, end: date) -> List[Assessment]:
        rows = await self.client.select(
            self.table,
            filters=[
                ("user_id", f"eq.{user_id}"),
                ("assessment_date", f"gte.{start.isoformat()}"),
                ("assessment_date", f"lte.{end.isoformat()}"),
            ],
            order="assessment_date.asc",
        )
        return [Assessment.from_row(row) for row in rows]

    async def existing_dates(self, user_id: str, dates: Iterable[date]) -> Set[date]:
        wanted = sorted({d.isoformat() for d in dates})
        if not wanted:
            return set()
        rows = await self.client.select(
            self.table,
            filters=[
                ("user_id", f"eq.{user_id}"),
                ("assessment_date", f"in.({','.join(wanted)})"),
            ],
            columns="assessment_date",
        )
        return {date.fromisoformat(str(row["assessment_date"])[:10]) for row in rows}

    async def insert_missing(self, user_id: str, assessments: List[Assessment]) -> List[date]:
        if not assessments:
            return []
        rows = await self.client.insert_ignoring_duplicates(
            self.table,
            [a.to_row(user_id) for a in assessments],
            on_conflict=ASSESSMENT_KEY,
        )
        return sorted(date.fromisoformat(str(row["assessment_date"])[:10]) for row in rows)


class LocalAssessmentCache(AssessmentStore):
    """
    Device-local cache of recent assessments, serialized as JSON.

    Records carry the owning user id (None for guest check-ins) and a
    `synced` flag. Entries older than `max_days` are pruned on every write.
    With `path=None` the cache lives in memory only.
    """

    def __init__(
        self,
        path: Optional[str] = None,
        max_days: int = DEFAULT_CACHE_DAYS,
        clock: Callable[[], date] = date.today,
    ):
        self.path = Path(path) if path else None
        self.max_days = max_days
        self._clock = clock
        self._lock = threading.Lock()
        self._records: List[dict] = []
        self._migrated_users: Set[str] = set()
        self._load()

    # ------------------------------------------------------------------
    # File handling
    # ------------------------------------------------------------------

    def _load(self) -> None:
        if self.path is None or not self.path.exists():
            return
        try:
            document = json.loads(self.path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError) as e:
            logger.warning(f"[CACHE] Ignoring unreadable cache {self.path}: {e}")
            return
        self._records = list(document.get("assessments", []))
        self._migrated_users = set(document.get("migrated_users", []))
        logger.debug(f"[CACHE] Loaded {len(self._records)} records from {self.path}")

    def _save(self) -> None:
        if self.path is None:
            return
        self.path.parent.mkdir(parents=True, exist_ok=True)
        document = {
            "assessments": self._records,
            "migrated_users": sorted(self._migrated_users),
        }
        self.path.write_text(json.dumps(document, indent=2), encoding="utf-8")

    def _prune(self) -> None:
        cutoff = self._clock() - timedelta(days=self.max_days)
        before = len(self._records)
        self._records = [r for r in self._records if date.fromisoformat(r["date"]) >= cutoff]
        if len(self._records) != before:
            logger.debug(f"[CACHE] Pruned {before - len(self._records)} records older than {cutoff}")

    @staticmethod
    def _matches(record: dict, user_id: Optional[str]) -> bool:
        return record.get("user_id") == user_id

    # ------------------------------------------------------------------
    # Synchronous cache operations
    # ------------------------------------------------------------------

    def put(self, user_id: Optional[str], assessment: Assessment, synced: bool = False) -> None:
        """Store an assessment, overwriting any record for the same user and day."""
        record = {**assessment.to_dict(), "user_id": user_id, "synced": synced}
        key = assessment.date.isoformat()
        with self._lock:
            self._records = [
                r for r in self._records
                if not (self._matches(r, user_id) and r["date"] == key)
            ]
            self._records.append(record)
            self._records.sort(key=lambda r: r["date"])
            self._prune()
            self._save()

    def get_range(
        self,
        user_id: Optional[str],
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> List[Assessment]:
        """Assessments for a user (None = guest) within [start, end], ascending."""
        with self._lock:
            records = [r for r in self._records if self._matches(r, user_id)]
        result = []
        for record in records:
            day = date.fromisoformat(record["date"])
            if (start is None or day >= start) and (end is None or day <= end):
                result.append(Assessment.from_dict(record))
        return sorted(result, key=lambda a: a.date)

    def pending(self, user_id: str) -> List[Assessment]:
        """Records for the user that never reached the durable store."""
        with self._lock:
            records = [r for r in self._records if self._matches(r, user_id) and not r.get("synced")]
        return [Assessment.from_dict(r) for r in records]

    def mark_synced(self, user_id: str, dates: Iterable[date]) -> None:
        keys = {d.isoformat() for d in dates}
        with self._lock:
            for record in self._records:
                if self._matches(record, user_id) and record["date"] in keys:
                    record["synced"] = True
            self._save()

    def unowned(self) -> List[Assessment]:
        """Guest check-ins recorded before anyone signed in on this device."""
        return self.get_range(None)

    def claim(self, user_id: str, copied: Iterable[date]) -> None:
        """
        Hand guest records over to a user after migration.

        Records copied to the durable store become the user's synced records;
        the rest were superseded remotely and are dropped.
        """
        copied_keys = {d.isoformat() for d in copied}
        with self._lock:
            kept = []
            for record in self._records:
                if record.get("user_id") is not None:
                    kept.append(record)
                elif record["date"] in copied_keys:
                    kept.append({**record, "user_id": user_id, "synced": True})
            self._records = kept
            self._save()

    def is_migrated(self, user_id: str) -> bool:
        with self._lock:
            return user_id in self._migrated_users

    def mark_migrated(self, user_id: str) -> None:
        with self._lock:
            self._migrated_users.add(user_id)
            self._save()

    def count(self, user_id: Optional[str] = None) -> int:
        with self._lock:
            return sum(1 for r in self._records if self._matches(r, user_id))

    def clear(self) -> None:
        """Delete every cached record on this device."""
        with self._lock:
            self._records = []
            self._migrated_users = set()
            self._save()
        logger.info("[CACHE] Local assessment cache cleared")

    # ------------------------------------------------------------------
    # AssessmentStore interface
    # ------------------------------------------------------------------

    async def upsert(self, user_id: str, assessment: Assessment) -> Assessment:
        self.put(user_id, assessment, synced=True)
        return assessment

    async def fetch_range(self, user_id: str, start: date, end: date) -> List[Assessment]:
        return self.get_range(user_id, start, end)

    async def existing_dates(self, user_id: str, dates: Iterable[date]) -> Set[date]:
        wanted = set(dates)
        return {a.date for a in self.get_range(user_id) if a.date in wanted}

    async def insert_missing(self, user_id: str, assessments: List[Assessment]) -> List[date]:
        existing = await self.existing_dates(user_id, [a.date for a in assessments])
        inserted = []
        for assessment in assessments:
            if assessment.date not in existing:
                self.put(user_id, assessment, synced=True)
                inserted.append(assessment.date)
        return inserted


@dataclass
class SaveResult:
    """Outcome of a gateway write."""

    assessment: Assessment
    synced: bool = False
    sync_pending: bool = False
    migrated: int = 0
    flushed: List[Assessment] = field(default_factory=list)

    @property
    def resynced(self) -> int:
        """How many earlier pending records reached the durable store with this write."""
        return len(self.flushed)

    def to_dict(self) -> dict:
        return {
            "assessment": self.assessment.to_dict(),
            "synced": self.synced,
            "sync_pending": self.sync_pending,
            "migrated": self.migrated,
            "resynced": self.resynced,
        }


@dataclass
class LoadResult:
    """Outcome of a gateway read: where the data came from and whether it is degraded."""

    assessments: List[Assessment] = field(default_factory=list)
    source: str = "none"  # remote, local, none
    degraded: bool = False

    @property
    def has_data(self) -> bool:
        return bool(self.assessments)


@dataclass
class MigrationReport:
    copied: int = 0
    skipped: int = 0


class FallbackRepository:
    """
    Write-local-first, read-remote-first policy over the two backends.

    Only this class (and the service above it) turns RemoteUnavailable
    into degraded results; everything else lets errors propagate.
    """

    def __init__(self, local: LocalAssessmentCache, remote: Optional[AssessmentStore] = None):
        self.local = local
        self.remote = remote

    def _remote_enabled(self, user_id: Optional[str]) -> bool:
        return bool(user_id) and self.remote is not None

    async def aclose(self) -> None:
        if isinstance(self.remote, SupabaseAssessmentStore):
            await self.remote.client.aclose()

    async def save(self, user_id: Optional[str], assessment: Assessment) -> SaveResult:
        """
        Persist one day's assessment.

        The local cache is updated before the remote write so the UI can
        show the new state immediately. A failed remote write is not an
        error: the record stays pending locally and the caller is told.
        """
        self.local.put(user_id, assessment, synced=False)

        if not self._remote_enabled(user_id):
            logger.debug("[GATEWAY] Guest or local-only save, skipping durable store")
            return SaveResult(assessment=assessment)

        try:
            stored = await self.remote.upsert(user_id, assessment)
        except RemoteUnavailable as e:
            logger.warning(f"[GATEWAY] Remote write failed for {assessment.date}, sync pending: {e.message}")
            return SaveResult(assessment=assessment, sync_pending=True)

        self.local.mark_synced(user_id, [assessment.date])
        result = SaveResult(assessment=stored, synced=True)

        try:
            result.migrated = (await self.migrate(user_id)).copied
        except RemoteUnavailable as e:
            logger.warning(f"[GATEWAY] Migration interrupted, will retry on next save: {e.message}")
            return result
        result.flushed = await self.flush_pending(user_id)

        return result

    async def load(self, user_id: Optional[str], start: date, end: date) -> LoadResult:
        """Read assessments for [start, end], preferring the durable store."""
        if not self._remote_enabled(user_id):
            local = self.local.get_range(user_id, start, end)
            return LoadResult(local, "local" if local else "none")

        try:
            remote = await self.remote.fetch_range(user_id, start, end)
        except RemoteUnavailable as e:
            logger.warning(f"[GATEWAY] Remote read failed, serving local cache: {e.message}")
            local = self.local.get_range(user_id, start, end)
            return LoadResult(local, "local" if local else "none", degraded=True)

        # Records still waiting to sync are newer than what the store holds
        pending = [a for a in self.local.pending(user_id) if start <= a.date <= end]
        merged = {a.date: a for a in remote}
        merged.update({a.date: a for a in pending})
        assessments = sorted(merged.values(), key=lambda a: a.date)
        if assessments:
            return LoadResult(assessments, "remote")
        return LoadResult([], "none")

    async def migrate(self, user_id: str) -> MigrationReport:
        """
        Copy guest history on this device into the durable store, once.

        Days already present remotely are skipped (remote wins). Safe to
        call repeatedly: after the first complete run it is a no-op.
        """
        report = MigrationReport()
        if not self._remote_enabled(user_id) or self.local.is_migrated(user_id):
            return report

        owned_days = {a.date for a in self.local.get_range(user_id)}
        candidates = [a for a in self.local.unowned() if a.date not in owned_days]
        if candidates:
            existing = await self.remote.existing_dates(user_id, [a.date for a in candidates])
            to_copy = []
            for assessment in candidates:
                if assessment.date in existing:
                    conflict = MigrationConflict(user_id, assessment.date.isoformat())
                    logger.info(f"[MIGRATION] {conflict.message}, keeping remote copy")
                    report.skipped += 1
                else:
                    to_copy.append(assessment)
            inserted = await self.remote.insert_missing(user_id, to_copy)
            report.copied = len(inserted)
            report.skipped += len(to_copy) - len(inserted)
            # Days another writer stored first are remote-owned; drop the guest copy
            self.local.claim(user_id, inserted)
            logger.info(
                f"[MIGRATION] user={user_id} copied={report.copied} skipped={report.skipped}"
            )

        self.local.mark_migrated(user_id)
        return report

    async def flush_pending(self, user_id: str) -> List[Assessment]:
        """
        Re-push records whose earlier remote write failed.

        Returns the records that reached the durable store. Stops at the first
        failure; whatever is left stays pending for the next successful write.
        """
        if not self._remote_enabled(user_id):
            return []
        flushed = []
        for assessment in self.local.pending(user_id):
            try:
                stored = await self.remote.upsert(user_id, assessment)
            except RemoteUnavailable as e:
                logger.warning(f"[GATEWAY] Re-sync stopped at {assessment.date}: {e.message}")
                break
            self.local.mark_synced(user_id, [assessment.date])
            flushed.append(stored)
        if flushed:
            logger.info(f"[GATEWAY] Re-synced {len(flushed)} pending assessments for user={user_id}")
        return flushed
