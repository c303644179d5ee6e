from PyQt6.QtCore import Qt
from PyQt6.QtWidgets import (
    QWidget,
    QVBoxLayout,
    QGridLayout,
    QLabel,
    QGroupBox,
)

from clinic_queue.engine import DispatchState

STATE_LABELS = {
    DispatchState.IDLE: "Stopped",
    DispatchState.WAITING_FOR_CURRENT: "Calling next",
    DispatchState.SERVING: "Serving",
    DispatchState.EMPTY: "Queue empty",
}


def _field_label(name: str) -> QLabel:
    label = QLabel(name)
    label.setAlignment(Qt.AlignmentFlag.AlignRight | Qt.AlignmentFlag.AlignVCenter)
    label.setStyleSheet("font-weight: bold;")
    return label


def _value_label() -> QLabel:
    label = QLabel("–")
    label.setAlignment(Qt.AlignmentFlag.AlignLeft | Qt.AlignmentFlag.AlignVCenter)
    return label


class StatusPanel(QWidget):
    """Shows the dispatcher state, the next timer countdown and queue counts."""

    FIELDS = [
        ("state", "State"),
        ("countdown", "Next change in"),
        ("waiting", "Waiting"),
        ("priority", "Priority waiting"),
        ("served", "Served"),
    ]

    def __init__(self, engine, parent=None):
        super().__init__(parent)
        self.engine = engine
        self._build_ui()

    def _build_ui(self):
        layout = QVBoxLayout(self)
        layout.setContentsMargins(8, 8, 8, 8)
        layout.setSpacing(10)

        group = QGroupBox("Dispatch status")
        grid = QGridLayout()
        grid.setContentsMargins(8, 8, 8, 8)
        grid.setHorizontalSpacing(12)
        grid.setVerticalSpacing(6)

        self.values = {}
        for row, (key, title) in enumerate(self.FIELDS):
            grid.addWidget(_field_label(title), row, 0)
            value = _value_label()
            self.values[key] = value
            grid.addWidget(value, row, 1)

        group.setLayout(grid)
        layout.addWidget(group)
        layout.addStretch()

    def update_from_snapshot(self, snapshot):
        priority_waiting = sum(1 for entry in snapshot.waiting if entry.ticket.is_priority)
        self.values["state"].setText(STATE_LABELS[snapshot.state])
        self.values["countdown"].setText(self._format_seconds(snapshot.next_event_in))
        self.values["waiting"].setText(str(len(snapshot.waiting)))
        self.values["priority"].setText(str(priority_waiting))
        self.values["served"].setText(str(len(snapshot.archive)))

    @staticmethod
    def _format_seconds(value):
        if value is None:
            return "–"
        return f"{value:.1f} s"
