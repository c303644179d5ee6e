"""Convenience imports for UI widgets."""

from .registration_panel import RegistrationPanel
from .queue_view import QueueView
from .status_panel import StatusPanel
from .archive_view import ArchiveView
from .history_plot import HistoryPlotWidget

__all__ = [
    "RegistrationPanel",
    "QueueView",
    "StatusPanel",
    "ArchiveView",
    "HistoryPlotWidget",
]
