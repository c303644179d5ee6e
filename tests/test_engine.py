import pytest

from clinic_queue.config import DispatchParams
from clinic_queue.engine import DispatchEngine, DispatchState, TimerKind
from clinic_queue.queue_store import DuplicateEnrollmentError
from clinic_queue.tickets import PriorityClass, Ticket


def _ticket(code: str) -> Ticket:
    priority = PriorityClass.PRIORITY if code.startswith("P") else PriorityClass.NORMAL
    return Ticket(ticket_id=code, subject=f"Patient {code}", priority_class=priority, counter_label="3")


@pytest.fixture
def engine():
    return DispatchEngine(DispatchParams(priority_delay=5.0, normal_delay=10.0, current_delay=10.0))


def _current_id(engine):
    current = engine.snapshot().current
    return current.ticket_id if current is not None else None


def test_default_params_match_clinic_timings():
    params = DispatchEngine().params
    assert (params.priority_delay, params.normal_delay, params.current_delay) == (5.0, 10.0, 10.0)


def test_enrollment_order_priority_first(engine):
    engine.enroll(_ticket("C001"))
    engine.enroll(_ticket("P001"))

    assert engine.snapshot().waiting_ids == ["P001", "C001"]
    assert engine.state is DispatchState.IDLE


def test_idle_engine_never_dispatches(engine):
    engine.enroll(_ticket("P001"))
    engine.step(100.0)

    snapshot = engine.snapshot()
    assert snapshot.current is None
    assert snapshot.waiting_ids == ["P001"]
    assert snapshot.sim_time == pytest.approx(100.0)


def test_automatic_promote_and_archive_cycle(engine):
    engine.enroll(_ticket("C001"))
    engine.enroll(_ticket("P001"))
    engine.start()
    assert engine.state is DispatchState.WAITING_FOR_CURRENT

    engine.step(4.5)
    assert _current_id(engine) is None

    engine.step(0.5)
    assert _current_id(engine) == "P001"
    assert engine.state is DispatchState.SERVING

    engine.step(10.0)
    snapshot = engine.snapshot()
    assert snapshot.archive_ids == ["P001"]
    assert snapshot.current is None
    assert snapshot.waiting_ids == ["C001"]

    engine.step(9.5)
    assert _current_id(engine) is None
    engine.step(0.5)
    assert _current_id(engine) == "C001"

    engine.step(10.0)
    snapshot = engine.snapshot()
    assert snapshot.archive_ids == ["P001", "C001"]
    assert engine.state is DispatchState.EMPTY
    assert snapshot.next_event_in is None


def test_manual_selection_demotes_current_and_restarts_archive_timer(engine):
    engine.enroll(_ticket("C001"))
    engine.enroll(_ticket("P001"))
    engine.start()
    engine.step(5.0)
    assert _current_id(engine) == "P001"

    engine.step(3.0)
    assert engine.select_current("C001")

    snapshot = engine.snapshot()
    assert snapshot.current.ticket_id == "C001"
    assert snapshot.waiting_ids == ["P001"]
    assert snapshot.archive_ids == []
    assert snapshot.next_event_in == pytest.approx(10.0)
    assert engine.pending_timer(TimerKind.PROMOTE) is None

    # the archive timer armed before the manual call must not fire
    engine.step(9.5)
    assert _current_id(engine) == "C001"
    assert engine.snapshot().archive_ids == []

    engine.step(0.5)
    snapshot = engine.snapshot()
    assert snapshot.archive_ids == ["C001"]
    assert snapshot.waiting_ids == ["P001"]
    assert snapshot.next_event_in == pytest.approx(5.0)


def test_manual_selection_while_waiting_cancels_promote(engine):
    engine.enroll(_ticket("P001"))
    engine.enroll(_ticket("C001"))
    engine.start()
    engine.step(2.0)

    engine.select_current("C001")
    engine.step(3.0)

    assert _current_id(engine) == "C001"
    assert engine.snapshot().waiting_ids == ["P001"]


def test_reselecting_current_restarts_its_countdown(engine):
    engine.enroll(_ticket("P001"))
    engine.start()
    engine.step(5.0)
    engine.step(6.0)

    engine.select_current("P001")
    engine.step(9.0)
    assert _current_id(engine) == "P001"
    engine.step(1.0)
    assert engine.snapshot().archive_ids == ["P001"]


def test_stop_and_restart_uses_full_delay(engine):
    engine.enroll(_ticket("C001"))
    engine.start()
    engine.step(7.0)
    engine.stop()
    assert engine.state is DispatchState.IDLE
    assert engine.snapshot().next_event_in is None

    engine.step(20.0)
    assert _current_id(engine) is None

    engine.start()
    engine.step(9.0)
    assert _current_id(engine) is None
    engine.step(1.0)
    assert _current_id(engine) == "C001"


def test_stop_while_serving_keeps_current_and_restart_rearms_archive(engine):
    engine.enroll(_ticket("P001"))
    engine.start()
    engine.step(5.0)
    engine.step(8.0)
    engine.stop()
    engine.step(30.0)

    assert _current_id(engine) == "P001"
    assert engine.snapshot().archive_ids == []

    engine.start()
    assert engine.state is DispatchState.SERVING
    engine.step(9.5)
    assert _current_id(engine) == "P001"
    engine.step(0.5)
    assert engine.snapshot().archive_ids == ["P001"]


def test_select_unknown_ticket_leaves_everything_unchanged(engine):
    engine.enroll(_ticket("C001"))
    engine.start()
    engine.step(3.0)
    before = engine.snapshot()

    assert engine.select_current("C999") is False

    after = engine.snapshot()
    assert after.waiting == before.waiting
    assert after.current == before.current
    assert after.archive == before.archive
    assert after.next_event_in == pytest.approx(before.next_event_in)


def test_enroll_into_empty_active_queue_arms_promote(engine):
    engine.start()
    assert engine.state is DispatchState.EMPTY

    engine.step(50.0)
    engine.enroll(_ticket("C001"))
    assert engine.state is DispatchState.WAITING_FOR_CURRENT
    assert engine.snapshot().next_event_in == pytest.approx(10.0)

    engine.step(10.0)
    assert _current_id(engine) == "C001"


def test_priority_arrival_rearms_promote_for_new_head(engine):
    engine.enroll(_ticket("C001"))
    engine.start()
    engine.step(8.0)

    engine.enroll(_ticket("P001"))
    assert engine.snapshot().next_event_in == pytest.approx(5.0)

    engine.step(2.0)
    assert _current_id(engine) is None
    engine.step(3.0)
    assert _current_id(engine) == "P001"


def test_normal_arrival_leaves_pending_promote_untouched(engine):
    engine.enroll(_ticket("C001"))
    engine.start()
    engine.step(8.0)

    engine.enroll(_ticket("C002"))
    assert engine.snapshot().next_event_in == pytest.approx(2.0)

    engine.step(2.0)
    assert _current_id(engine) == "C001"


def test_enroll_while_serving_does_not_touch_archive_timer(engine):
    engine.enroll(_ticket("C001"))
    engine.start()
    engine.step(10.0)
    engine.step(4.0)

    engine.enroll(_ticket("P001"))
    assert engine.snapshot().next_event_in == pytest.approx(6.0)
    assert engine.pending_timer(TimerKind.PROMOTE) is None


def test_manual_selection_while_idle_arms_nothing_until_start(engine):
    engine.enroll(_ticket("P001"))
    engine.enroll(_ticket("C001"))

    assert engine.select_current("C001")
    assert engine.state is DispatchState.IDLE
    assert engine.pending_timer(TimerKind.ARCHIVE) is None
    assert engine.pending_timer(TimerKind.PROMOTE) is None

    engine.step(30.0)
    assert _current_id(engine) == "C001"

    engine.start()
    assert engine.state is DispatchState.SERVING
    assert engine.snapshot().next_event_in == pytest.approx(10.0)
    engine.step(9.5)
    assert engine.snapshot().archive_ids == []
    engine.step(0.5)
    assert engine.snapshot().archive_ids == ["C001"]


def test_duplicate_enrollment_keeps_pending_promote(engine):
    engine.enroll(_ticket("C001"))
    engine.start()
    engine.step(4.0)
    before = engine.pending_timer(TimerKind.PROMOTE)

    with pytest.raises(DuplicateEnrollmentError):
        engine.enroll(_ticket("C001"))

    assert engine.pending_timer(TimerKind.PROMOTE) == before
    assert engine.snapshot().waiting_ids == ["C001"]
    engine.step(6.0)
    assert _current_id(engine) == "C001"


def test_many_small_steps_fire_timer_on_time(engine):
    engine.enroll(_ticket("P001"))
    engine.start()

    for _ in range(50):
        engine.step(0.1)

    assert _current_id(engine) == "P001"


def test_invariants_hold_through_a_busy_session(engine):
    codes = ["C001", "P001", "C002", "C003", "P002", "C004", "P003"]
    archive_sizes = []
    engine.start()
    for code in codes:
        engine.enroll(_ticket(code))
        if code == "C003":
            engine.select_current("C004")  # not enrolled yet
            engine.select_current("C002")
        for _ in range(8):
            engine.step(1.5)
            snapshot = engine.snapshot()
            classes = [entry.ticket.priority_class for entry in snapshot.waiting]
            assert classes == sorted(classes, key=lambda cls: cls.rank)
            waiting_ids = set(snapshot.waiting_ids)
            assert not waiting_ids & set(snapshot.archive_ids)
            if snapshot.current is not None:
                assert snapshot.current.ticket_id not in waiting_ids
            archive_sizes.append(len(snapshot.archive))

    assert archive_sizes == sorted(archive_sizes)
    engine.step(500.0)
    assert sorted(engine.snapshot().archive_ids) == sorted(codes)
    assert engine.state is DispatchState.EMPTY
