"""
Disk-persisted snapshot of the Sleeper player dataset.

Responsibilities:
- Persist the full player dump as ONE JSON file (player_id -> raw record)
- Treat the file as stale once its mtime is older than the TTL (24h default)
- Materialize the file into an in-memory PlayerSnapshot on first load
- Replace the file atomically: temp write -> re-read/verify -> rename

Non-responsibilities:
- Fetching players from Sleeper (the aggregator does that on a load() miss)
- Coordinating with other processes writing the same file
- Keeping history; a refresh discards the previous snapshot entirely

Design notes:
- The timestamp is NOT stored in the file. Filesystem mtime is the only
  source of "last updated", which keeps the file a plain player map.
- Readers never see a half-written file: they only ever open the canonical
  path, and the canonical path is only ever replaced by rename.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Dict, Iterator, List, Mapping, Optional

from venues.sleeper.models import PlayerRecord

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 24 * 60 * 60
TMP_SUFFIX = ".tmp"


class CacheCorruption(RuntimeError):
    """The snapshot on disk (or a freshly written temp file) does not parse."""


@dataclass(frozen=True)
class SnapshotStatus:
    exists: bool
    last_updated: Optional[datetime]
    is_expired: bool
    record_count: int
    size_bytes: int


class PlayerSnapshot:
    """
    Immutable player_id -> PlayerRecord mapping as of one point in time.

    A snapshot is never mutated; refreshing the dataset builds a new one and
    swaps the store's reference.
    """

    def __init__(self, records: Mapping[str, PlayerRecord], taken_at: float):
        self._records: Dict[str, PlayerRecord] = dict(records)
        self.taken_at = taken_at

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any], taken_at: float) -> "PlayerSnapshot":
        records = {
            str(pid): PlayerRecord.from_api(str(pid), raw)
            for pid, raw in payload.items()
            if isinstance(raw, dict)
        }
        return cls(records, taken_at)

    def get(self, player_id: str) -> Optional[PlayerRecord]:
        return self._records.get(str(player_id))

    def resolve(self, player_id: str) -> PlayerRecord:
        """Total lookup: a placeholder record stands in for unknown ids."""
        rec = self._records.get(str(player_id))
        if rec is None:
            return PlayerRecord.placeholder(player_id)
        return rec

    def resolve_many(self, player_ids) -> List[PlayerRecord]:
        return [self.resolve(pid) for pid in player_ids]

    def search(self, term: str, limit: int = 10) -> List[PlayerRecord]:
        """Case-insensitive substring search over full, first and last name."""
        needle = term.strip().lower()
        if not needle:
            return []

        out: List[PlayerRecord] = []
        for rec in self._records.values():
            names = (rec.full_name, rec.first_name, rec.last_name)
            if any(needle in (n or "").lower() for n in names):
                out.append(rec)
                if len(out) >= limit:
                    break
        return out

    def raw_payload(self) -> Dict[str, Dict[str, Any]]:
        return {pid: rec.raw for pid, rec in self._records.items()}

    def __iter__(self) -> Iterator[PlayerRecord]:
        return iter(self._records.values())

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, player_id: object) -> bool:
        return str(player_id) in self._records


class PlayerSnapshotStore:
    """
    Owner of the one current PlayerSnapshot and its file.

    Typical lifecycle:
    1) load() -> snapshot, or None on a miss (missing / expired / corrupt)
    2) on a miss the caller fetches players upstream and calls save(payload)
    3) refresh() drops both copies so the next load() misses

    Methods are synchronous; async callers push them onto a worker thread.
    """

    def __init__(
        self,
        path: Path,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.time,
    ):
        self.path = Path(path)
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._snapshot: Optional[PlayerSnapshot] = None

        self.path.parent.mkdir(parents=True, exist_ok=True)

    # -------------------------
    # Inspection
    # -------------------------
    def _is_expired(self, mtime: float) -> bool:
        return self._clock() - mtime > self.ttl_seconds

    def status(self) -> SnapshotStatus:
        """
        Inspect the persisted snapshot.

        record_count needs a full parse of the file unless the snapshot is
        already in memory; an expired or unparseable file reports 0.
        """
        try:
            st = os.stat(self.path)
        except FileNotFoundError:
            return SnapshotStatus(
                exists=False, last_updated=None, is_expired=True, record_count=0, size_bytes=0
            )

        last_updated = datetime.fromtimestamp(st.st_mtime, tz=timezone.utc)
        expired = self._is_expired(st.st_mtime)

        count = 0
        if not expired:
            if self._snapshot is not None:
                count = len(self._snapshot)
            else:
                try:
                    count = len(self._read_payload(self.path))
                except CacheCorruption:
                    expired = True

        return SnapshotStatus(
            exists=True,
            last_updated=last_updated,
            is_expired=expired,
            record_count=count,
            size_bytes=st.st_size,
        )

    # -------------------------
    # Load
    # -------------------------
    @staticmethod
    def _read_payload(path: Path) -> Dict[str, Any]:
        try:
            payload = json.loads(path.read_text(encoding="utf-8"))
        except (ValueError, UnicodeDecodeError) as exc:
            raise CacheCorruption(f"player snapshot {path} is not valid JSON: {exc}") from exc
        if not isinstance(payload, dict):
            raise CacheCorruption(
                f"player snapshot {path} must hold an object, got {type(payload).__name__}"
            )
        return payload

    def load(self) -> Optional[PlayerSnapshot]:
        """
        Return the current snapshot, reading it from disk on first use.

        Returns None when the file is missing, expired, or corrupt. A corrupt
        file is deleted so the next fetch can repopulate it.
        """
        if self._snapshot is not None:
            return self._snapshot

        try:
            mtime = os.stat(self.path).st_mtime
        except FileNotFoundError:
            return None

        if self._is_expired(mtime):
            logger.info("[SNAPSHOT] expired path=%s age_s=%.0f", self.path, self._clock() - mtime)
            return None

        try:
            payload = self._read_payload(self.path)
        except CacheCorruption as exc:
            logger.warning("[SNAPSHOT][WARN] deleting corrupt snapshot: %s", exc)
            self.path.unlink(missing_ok=True)
            return None

        self._snapshot = PlayerSnapshot.from_payload(payload, taken_at=mtime)
        logger.info("[SNAPSHOT] loaded path=%s records=%d", self.path, len(self._snapshot))
        return self._snapshot

    @property
    def current(self) -> Optional[PlayerSnapshot]:
        """In-memory snapshot only; never touches disk."""
        return self._snapshot

    # -------------------------
    # Save
    # -------------------------
    def save(self, players: Mapping[str, Any]) -> PlayerSnapshot:
        """
        Atomically replace the persisted snapshot with `players`.

        Each call writes its own temp file next to the target, re-reads and
        parses it, then renames it over the canonical path. Concurrent saves
        never share a temp file; the last rename wins. The in-memory snapshot
        is built from the verified copy. On any failure the previous file is
        untouched, this call's temp file is removed, and the error propagates.
        """
        logger.info("[SNAPSHOT] saving records=%d path=%s", len(players), self.path)

        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            dir=self.path.parent, prefix=self.path.name + ".", suffix=TMP_SUFFIX
        )
        tmp_path = Path(tmp_name)

        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(json.dumps(dict(players), ensure_ascii=False))
                f.flush()
                os.fsync(f.fileno())

            try:
                verified = self._read_payload(tmp_path)
            except CacheCorruption as exc:
                raise CacheCorruption("player snapshot is corrupted after writing") from exc

            os.replace(tmp_path, self.path)
        except BaseException:
            self._discard_tmp(tmp_path)
            raise

        self._snapshot = PlayerSnapshot.from_payload(verified, taken_at=self._clock())
        logger.info("[SNAPSHOT] saved records=%d", len(self._snapshot))
        return self._snapshot

    @staticmethod
    def _discard_tmp(tmp_path: Path) -> None:
        try:
            tmp_path.unlink(missing_ok=True)
        except OSError as exc:
            logger.warning("[SNAPSHOT][WARN] could not remove temp file %s: %s", tmp_path, exc)

    # -------------------------
    # Invalidation
    # -------------------------
    def refresh(self) -> None:
        """Delete the file and drop the in-memory copy; does not refetch."""
        self.path.unlink(missing_ok=True)
        self._snapshot = None
        logger.info("[SNAPSHOT] invalidated path=%s", self.path)

    def forget(self) -> None:
        """Drop only the in-memory copy; the next load() re-reads the file."""
        self._snapshot = None
