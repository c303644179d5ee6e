"""Main application window assembling all widgets."""

from PyQt6.QtCore import QTimer
from PyQt6.QtWidgets import (
    QMainWindow,
    QWidget,
    QHBoxLayout,
    QVBoxLayout,
)

from .widgets.registration_panel import RegistrationPanel
from .widgets.queue_view import QueueView
from .widgets.status_panel import StatusPanel
from .widgets.archive_view import ArchiveView
from .widgets.history_plot import HistoryPlotWidget


class MainWindow(QMainWindow):
    def __init__(self, engine, registrar, parent=None):
        super().__init__(parent)
        self.setWindowTitle("Clinic Walk-in Queue")
        self.engine = engine
        self.registrar = registrar

        self._tick_ms = 100  # engine time follows wall-clock time

        self._build_ui()
        self._create_timer()
        self._refresh_views()

    def _build_ui(self):
        central = QWidget()
        self.setCentralWidget(central)

        layout = QHBoxLayout(central)
        layout.setContentsMargins(8, 8, 8, 8)
        layout.setSpacing(12)

        self.registration_panel = RegistrationPanel(self.engine, self.registrar)
        self.queue_view = QueueView(self.engine)
        self.status_panel = StatusPanel(self.engine)
        self.archive_view = ArchiveView(self.engine)
        self.history_plot = HistoryPlotWidget(self.engine)

        layout.addWidget(self.registration_panel, stretch=0)

        centre_panel = QVBoxLayout()
        centre_panel.setContentsMargins(0, 0, 0, 0)
        centre_panel.setSpacing(8)
        centre_panel.addWidget(self.queue_view, stretch=2)
        centre_panel.addWidget(self.history_plot, stretch=1)
        layout.addLayout(centre_panel, stretch=2)

        side_panel = QVBoxLayout()
        side_panel.setContentsMargins(0, 0, 0, 0)
        side_panel.setSpacing(8)
        side_panel.addWidget(self.status_panel)
        side_panel.addWidget(self.archive_view, stretch=1)
        layout.addLayout(side_panel, stretch=1)

        self.registration_panel.start_requested.connect(self._on_start_requested)
        self.registration_panel.stop_requested.connect(self._on_stop_requested)
        self.registration_panel.sample_requested.connect(self._on_sample_requested)
        self.registration_panel.ticket_enrolled.connect(self._refresh_views)
        self.queue_view.ticket_selected.connect(self._refresh_views)

    def _create_timer(self):
        self.dispatch_timer = QTimer(self)
        self.dispatch_timer.setInterval(self._tick_ms)
        self.dispatch_timer.timeout.connect(self._advance_clock)

    def _refresh_views(self, *_):
        snapshot = self.engine.snapshot()
        self.status_panel.update_from_snapshot(snapshot)
        self.archive_view.update_from_snapshot(snapshot)
        self.history_plot.update_from_snapshot(snapshot)
        self.queue_view.sync_once()

    def _advance_clock(self):
        if not self.engine.is_running():
            self.dispatch_timer.stop()
            return

        self.engine.step(self._tick_ms / 1000.0)

        snapshot = self.engine.snapshot()
        self.status_panel.update_from_snapshot(snapshot)
        self.archive_view.update_from_snapshot(snapshot)
        self.history_plot.update_from_snapshot(snapshot)

    def _on_start_requested(self):
        self.engine.start()
        if not self.dispatch_timer.isActive():
            self.dispatch_timer.start()
        self.queue_view.start()

    def _on_stop_requested(self):
        self.engine.stop()
        self.dispatch_timer.stop()
        self.queue_view.stop()
        self._refresh_views()

    def _on_sample_requested(self):
        self.registrar.seed(self.engine)
        self._refresh_views()
