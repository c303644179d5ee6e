"""Ordered store of waiting tickets and the archive of served ones."""

import logging
from typing import List, NamedTuple, Optional, Tuple

from .tickets import EntryState, QueueEntry, Ticket

logger = logging.getLogger(__name__)


class DuplicateEnrollmentError(ValueError):
    """Raised when a ticket id is already present in the waiting collection."""

    def __init__(self, ticket_id: str):
        super().__init__(f"ticket {ticket_id!r} is already enrolled")
        self.ticket_id = ticket_id


class StoreSnapshot(NamedTuple):
    current: Optional[QueueEntry]
    waiting: Tuple[QueueEntry, ...]
    archive: Tuple[QueueEntry, ...]


class QueueStore:
    """Holds the waiting collection and the append-only archive.

    The waiting collection is kept as one list ordered by priority class
    with arrival order preserved inside each class. The current entry keeps
    its slot in that list, so demoting it puts it back where it was; it is
    reported separately from the waiting tickets.
    """

    def __init__(self):
        self._entries: List[QueueEntry] = []
        self._archive: List[QueueEntry] = []

    # ---- public API ----

    def enroll(self, ticket: Ticket) -> QueueEntry:
        if ticket.ticket_id in self:
            raise DuplicateEnrollmentError(ticket.ticket_id)
        entry = QueueEntry(ticket)
        self._entries.append(entry)
        self._resort()
        return entry

    def select_current(self, ticket_id: str) -> bool:
        index = self._index_of(ticket_id)
        if index is None:
            logger.debug("Ignoring selection of unknown ticket %s", ticket_id)
            return False

        for idx, entry in enumerate(self._entries):
            if entry.is_current and idx != index:
                self._entries[idx] = entry.with_state(EntryState.WAITING)
        self._entries[index] = self._entries[index].with_state(EntryState.CURRENT)
        return True

    def archive_current(self) -> Optional[QueueEntry]:
        for idx, entry in enumerate(self._entries):
            if entry.is_current:
                del self._entries[idx]
                self._archive.append(entry)
                return entry
        return None

    def snapshot(self) -> StoreSnapshot:
        return StoreSnapshot(
            current=self.current(),
            waiting=tuple(e for e in self._entries if not e.is_current),
            archive=tuple(self._archive),
        )

    def current(self) -> Optional[QueueEntry]:
        for entry in self._entries:
            if entry.is_current:
                return entry
        return None

    def head(self) -> Optional[QueueEntry]:
        """First waiting entry, i.e. the next one to be promoted."""
        for entry in self._entries:
            if not entry.is_current:
                return entry
        return None

    def has_waiting(self) -> bool:
        return self.head() is not None

    def __contains__(self, ticket_id) -> bool:
        return self._index_of(ticket_id) is not None

    def __len__(self) -> int:
        return len(self._entries)

    # ---- internals ----

    def _index_of(self, ticket_id: str) -> Optional[int]:
        for idx, entry in enumerate(self._entries):
            if entry.ticket_id == ticket_id:
                return idx
        return None

    def _resort(self):
        # list.sort is stable, so arrival order survives inside each class
        self._entries.sort(key=lambda entry: entry.ticket.priority_class.rank)
