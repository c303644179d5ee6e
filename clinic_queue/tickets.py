"""Ticket and queue entry value types."""

from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional


class PriorityClass(Enum):
    PRIORITY = "priority"
    NORMAL = "normal"

    @property
    def rank(self) -> int:
        # sort key: priority tickets precede normal ones
        return 0 if self is PriorityClass.PRIORITY else 1

    @property
    def prefix(self) -> str:
        return "P" if self is PriorityClass.PRIORITY else "C"


class EntryState(Enum):
    WAITING = "waiting"
    CURRENT = "current"


@dataclass(frozen=True)
class Ticket:
    ticket_id: str
    subject: str
    priority_class: PriorityClass
    counter_label: str = ""
    age: Optional[int] = None
    gender: Optional[str] = None
    specialty: Optional[str] = None

    @property
    def is_priority(self) -> bool:
        return self.priority_class is PriorityClass.PRIORITY


@dataclass(frozen=True)
class QueueEntry:
    ticket: Ticket
    state: EntryState = EntryState.WAITING

    @property
    def ticket_id(self) -> str:
        return self.ticket.ticket_id

    @property
    def is_current(self) -> bool:
        return self.state is EntryState.CURRENT

    def with_state(self, state: EntryState) -> "QueueEntry":
        return replace(self, state=state)
