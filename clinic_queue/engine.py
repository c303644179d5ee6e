"""Dispatch engine for the clinic walk-in queue driven by SimPy timers."""

from dataclasses import dataclass
from enum import Enum
import logging
from typing import Dict, Optional

import simpy

from .config import DispatchParams
from .queue_store import QueueStore
from .tickets import QueueEntry, Ticket

logger = logging.getLogger(__name__)

# absorbs float drift from many small steps, e.g. 50 x 0.1 s
TIME_EPSILON = 1e-9


class DispatchState(Enum):
    IDLE = "idle"
    WAITING_FOR_CURRENT = "waiting_for_current"
    SERVING = "serving"
    EMPTY = "empty"


class TimerKind(Enum):
    PROMOTE = "promote"
    ARCHIVE = "archive"


@dataclass
class PendingTimer:
    kind: TimerKind
    generation: int
    due_time: float  # absolute simulation time in seconds


class QueueSnapshot:
    def __init__(self, current, waiting, archive, sim_time, state, next_event_in):
        self.current = current              # QueueEntry or None
        self.waiting = waiting              # tuple of QueueEntry, dispatch order
        self.archive = archive              # tuple of QueueEntry, completion order
        self.sim_time = sim_time            # float [s]
        self.state = state                  # DispatchState
        self.next_event_in = next_event_in  # seconds until the next timer, or None

    @property
    def waiting_ids(self):
        return [entry.ticket_id for entry in self.waiting]

    @property
    def archive_ids(self):
        return [entry.ticket_id for entry in self.archive]


class DispatchEngine:
    """Owns the queue store and the promote/archive timers.

    Every public operation applies its change to the store and then
    re-arms or cancels timers before returning, so the state machine is
    always consistent between calls. Time only moves through ``step``.
    """

    def __init__(self, params: Optional[DispatchParams] = None):
        self.params = params or DispatchParams()
        self.env = simpy.Environment()
        self.store = QueueStore()

        self._active = False
        self._timers: Dict[TimerKind, PendingTimer] = {}
        self._generations: Dict[TimerKind, int] = {kind: 0 for kind in TimerKind}

    # ---- public API ----

    def enroll(self, ticket: Ticket) -> QueueEntry:
        previous_head = self.store.head()
        entry = self.store.enroll(ticket)
        logger.info(
            "Enrolled ticket %s (%s)", ticket.ticket_id, ticket.priority_class.value
        )

        if self._active and self.store.current() is None:
            head = self.store.head()
            head_changed = previous_head is None or head.ticket_id != previous_head.ticket_id
            if TimerKind.PROMOTE not in self._timers or head_changed:
                self._arm_promote()
        return entry

    def select_current(self, ticket_id: str) -> bool:
        """Call ``ticket_id`` out of order; unknown ids are ignored."""
        if not self.store.select_current(ticket_id):
            return False

        logger.info("Ticket %s called manually", ticket_id)
        if self._active:
            self._cancel(TimerKind.PROMOTE)
            self._arm(TimerKind.ARCHIVE, self.params.current_delay)
        return True

    def start(self):
        self._active = True
        # timers are always recomputed from full delays
        self._cancel_all()
        if self.store.current() is not None:
            self._arm(TimerKind.ARCHIVE, self.params.current_delay)
        else:
            self._arm_promote()
        logger.info("Dispatch started (%s)", self.state.value)

    def stop(self):
        self._active = False
        self._cancel_all()
        logger.info("Dispatch stopped")

    def is_running(self) -> bool:
        return self._active

    @property
    def state(self) -> DispatchState:
        if not self._active:
            return DispatchState.IDLE
        if self.store.current() is not None:
            return DispatchState.SERVING
        if self.store.has_waiting():
            return DispatchState.WAITING_FOR_CURRENT
        return DispatchState.EMPTY

    def promote_delay_for(self, ticket: Ticket) -> float:
        if ticket.is_priority:
            return self.params.priority_delay
        return self.params.normal_delay

    def pending_timer(self, kind: TimerKind) -> Optional[PendingTimer]:
        return self._timers.get(kind)

    def step(self, dt: float):
        """Advance the clock by ``dt`` seconds, firing timers due by then."""
        if dt <= 0:
            return

        target_time = self.env.now + dt
        # env.run(until=...) leaves events scheduled exactly at the bound
        # unprocessed, so drain them explicitly
        while self.env.peek() <= target_time + TIME_EPSILON:
            self.env.step()
        if self.env.now < target_time:
            self.env.run(until=target_time)

    def snapshot(self) -> QueueSnapshot:
        store_view = self.store.snapshot()
        next_event_in = None
        if self._timers:
            due = min(timer.due_time for timer in self._timers.values())
            next_event_in = max(due - self.env.now, 0.0)

        return QueueSnapshot(
            store_view.current,
            store_view.waiting,
            store_view.archive,
            self.env.now,
            self.state,
            next_event_in,
        )

    # ---- internals ----

    def _arm_promote(self):
        head = self.store.head()
        if head is None:
            self._cancel(TimerKind.PROMOTE)
            return
        self._arm(TimerKind.PROMOTE, self.promote_delay_for(head.ticket))

    def _arm(self, kind: TimerKind, delay: float):
        self._cancel(kind)
        generation = self._generations[kind]
        self._timers[kind] = PendingTimer(kind, generation, self.env.now + delay)
        self.env.process(self._countdown(kind, generation, delay))
        logger.debug("Armed %s timer for %.1fs", kind.value, delay)

    def _cancel(self, kind: TimerKind):
        # a bumped generation turns any in-flight countdown into a no-op
        self._generations[kind] += 1
        self._timers.pop(kind, None)

    def _cancel_all(self):
        for kind in TimerKind:
            self._cancel(kind)

    def _countdown(self, kind: TimerKind, generation: int, delay: float):
        yield self.env.timeout(delay)

        timer = self._timers.get(kind)
        if timer is None or timer.generation != generation:
            logger.debug("Dropping stale %s timer (generation %d)", kind.value, generation)
            return

        del self._timers[kind]
        if kind is TimerKind.PROMOTE:
            self._on_promote_due()
        else:
            self._on_archive_due()

    def _on_promote_due(self):
        head = self.store.head()
        if head is None:
            return
        self.store.select_current(head.ticket_id)
        logger.info(
            "Calling ticket %s to counter %s",
            head.ticket_id,
            head.ticket.counter_label or "-",
        )
        self._arm(TimerKind.ARCHIVE, self.params.current_delay)

    def _on_archive_due(self):
        entry = self.store.archive_current()
        if entry is not None:
            logger.info("Ticket %s served and archived", entry.ticket_id)
        self._arm_promote()
