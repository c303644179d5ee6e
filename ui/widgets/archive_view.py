from PyQt6.QtGui import QBrush, QColor
from PyQt6.QtWidgets import QGroupBox, QListWidget, QListWidgetItem, QVBoxLayout, QWidget

ARCHIVE_TEXT = QColor("#8a8a8a")


class ArchiveView(QWidget):
    """Served tickets in the order they left the counter, most recent first."""

    def __init__(self, engine, parent=None):
        super().__init__(parent)
        self.engine = engine
        self._shown = 0

        layout = QVBoxLayout(self)
        layout.setContentsMargins(8, 8, 8, 8)

        group = QGroupBox("History")
        group_layout = QVBoxLayout()
        self.list_widget = QListWidget()
        group_layout.addWidget(self.list_widget)
        group.setLayout(group_layout)
        layout.addWidget(group)

    def update_from_snapshot(self, snapshot):
        # the archive only grows, so append what is new
        for entry in snapshot.archive[self._shown:]:
            ticket = entry.ticket
            item = QListWidgetItem(
                f"{ticket.ticket_id}  {ticket.subject}  (room {ticket.counter_label})"
            )
            item.setForeground(QBrush(ARCHIVE_TEXT))
            self.list_widget.insertItem(0, item)
        self._shown = len(snapshot.archive)
