"""
Booking store contract and two simple implementations.

The engine needs only "list every booking" and "append finalized
bookings"; lifecycle operations also rewrite the whole collection.
Filtering by provider, date, and status happens in the engine, so the
store can be a JSON array behind a read/write pair.

Every successful write bumps an integer version. Writers pass the
version they read as ``expected_version``; a mismatch raises
StoreVersionConflictError instead of silently overwriting a booking
another checkout committed in between.
"""

import json
import logging
import os
import tempfile
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Optional, Union

from pydantic import ValidationError

from booking_engine.schemas.booking_schema import ConfirmedBooking

logger = logging.getLogger(__name__)


class BookingStoreError(Exception):
    """Raised when the booking collection cannot be read or written."""


class StoreVersionConflictError(BookingStoreError):
    """Raised when a write is based on a stale snapshot of the store."""

    def __init__(self, expected: int, actual: int) -> None:
        super().__init__(
            f"Booking store changed during the operation "
            f"(expected version {expected}, found {actual})"
        )
        self.expected = expected
        self.actual = actual


@dataclass
class StoreSnapshot:
    """All bookings as of one store version."""

    bookings: list[ConfirmedBooking] = field(default_factory=list)
    version: int = 0


class BookingStore(ABC):
    """Abstract persisted collection of confirmed bookings."""

    @abstractmethod
    def load(self) -> StoreSnapshot:
        """Read every booking plus the current version."""

    @abstractmethod
    def save(
        self, bookings: Iterable[ConfirmedBooking], expected_version: Optional[int] = None
    ) -> int:
        """Replace the whole collection. Returns the new version."""

    def list_bookings(self) -> list[ConfirmedBooking]:
        return self.load().bookings

    def append(
        self, records: Iterable[ConfirmedBooking], expected_version: Optional[int] = None
    ) -> int:
        """Add finalized bookings. Returns the new version."""
        snapshot = self.load()
        if expected_version is not None and expected_version != snapshot.version:
            raise StoreVersionConflictError(expected_version, snapshot.version)
        return self.save([*snapshot.bookings, *records], expected_version=snapshot.version)


class InMemoryBookingStore(BookingStore):
    """Process-local store, used by tests and embedding callers."""

    def __init__(self, bookings: Optional[Iterable[ConfirmedBooking]] = None) -> None:
        self._bookings: list[ConfirmedBooking] = [b.model_copy(deep=True) for b in bookings or []]
        self._version = 0
        self._lock = threading.RLock()

    def load(self) -> StoreSnapshot:
        with self._lock:
            return StoreSnapshot(
                bookings=[b.model_copy(deep=True) for b in self._bookings],
                version=self._version,
            )

    def save(
        self, bookings: Iterable[ConfirmedBooking], expected_version: Optional[int] = None
    ) -> int:
        with self._lock:
            if expected_version is not None and expected_version != self._version:
                raise StoreVersionConflictError(expected_version, self._version)
            self._bookings = [b.model_copy(deep=True) for b in bookings]
            self._version += 1
            logger.debug("In-memory store now holds %d bookings (v%d)",
                         len(self._bookings), self._version)
            return self._version

    def append(
        self, records: Iterable[ConfirmedBooking], expected_version: Optional[int] = None
    ) -> int:
        with self._lock:
            return super().append(records, expected_version)


class JsonFileBookingStore(BookingStore):
    """
    Bookings persisted as JSON in a single file.

    The file holds ``{"version": n, "bookings": [...]}``. A bare JSON
    array is read as version 0. A missing file is an empty store.
    Records may use snake_case or camelCase keys; writes are snake_case.
    """

    def __init__(self, path: Union[str, Path]) -> None:
        self.path = Path(path)
        self._lock = threading.RLock()

    def load(self) -> StoreSnapshot:
        with self._lock:
            try:
                raw = self.path.read_text(encoding="utf-8")
            except FileNotFoundError:
                return StoreSnapshot()
            except OSError as exc:
                raise BookingStoreError(f"Cannot read {self.path}: {exc}") from exc

            try:
                data = json.loads(raw) if raw.strip() else []
            except json.JSONDecodeError as exc:
                raise BookingStoreError(f"Corrupt booking file {self.path}: {exc}") from exc

            if isinstance(data, list):
                version, items = 0, data
            elif (
                isinstance(data, dict)
                and isinstance(data.get("bookings"), list)
                and isinstance(data.get("version", 0), int)
            ):
                version, items = data.get("version", 0), data["bookings"]
            else:
                raise BookingStoreError(f"Unexpected booking file layout in {self.path}")

            try:
                bookings = [ConfirmedBooking.model_validate(item) for item in items]
            except ValidationError as exc:
                raise BookingStoreError(f"Invalid booking record in {self.path}: {exc}") from exc
            return StoreSnapshot(bookings=bookings, version=version)

    def save(
        self, bookings: Iterable[ConfirmedBooking], expected_version: Optional[int] = None
    ) -> int:
        with self._lock:
            current = self.load().version
            if expected_version is not None and expected_version != current:
                raise StoreVersionConflictError(expected_version, current)

            new_version = current + 1
            payload = {
                "version": new_version,
                "bookings": [b.model_dump(mode="json") for b in bookings],
            }
            self._write_atomic(json.dumps(payload, indent=2))
            logger.debug("Wrote %d bookings to %s (v%d)",
                         len(payload["bookings"]), self.path, new_version)
            return new_version

    def append(
        self, records: Iterable[ConfirmedBooking], expected_version: Optional[int] = None
    ) -> int:
        with self._lock:
            return super().append(records, expected_version)

    def _write_atomic(self, text: str) -> None:
        directory = self.path.parent
        try:
            directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=directory, prefix=".bookings-", suffix=".tmp")
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(text)
            os.replace(tmp_name, self.path)
        except OSError as exc:
            raise BookingStoreError(f"Cannot write {self.path}: {exc}") from exc
