import math

from PyQt6.QtCore import QTimer, QPointF, pyqtSignal
from PyQt6.QtGui import QBrush, QColor, QPen, QPainter
from PyQt6.QtWidgets import (
    QWidget,
    QVBoxLayout,
    QHBoxLayout,
    QLabel,
    QGraphicsScene,
    QGraphicsView,
    QGraphicsEllipseItem,
    QGraphicsRectItem,
    QGraphicsSimpleTextItem,
)

TICKET_RADIUS = 22
QUEUE_SPACING = 56
QUEUE_Y = 130
COUNTER_POS = QPointF(0, 20)
SMOOTH_MIN_STEP = 0.12
SMOOTH_MAX_STEP = 0.45
SMOOTH_DISTANCE_SCALE = 60.0

NORMAL_COLOR = QColor("#d8ffea")
NORMAL_PEN = QColor("#5aa47b")
PRIORITY_COLOR = QColor("#ffdada")
PRIORITY_PEN = QColor("#fd4e4e")
COUNTER_PEN = QColor("#1b4f72")
COUNTER_BRUSH = QColor("#e8f0ff")


class _TicketItem(QGraphicsEllipseItem):
    def __init__(self, ticket_id: str, on_click):
        super().__init__(-TICKET_RADIUS, -TICKET_RADIUS, TICKET_RADIUS * 2, TICKET_RADIUS * 2)
        self.ticket_id = ticket_id
        self._on_click = on_click
        self.setToolTip(f"Click to call {ticket_id} now")

    def mousePressEvent(self, event):
        self._on_click(self.ticket_id)
        event.accept()


class QueueView(QWidget):
    """Waiting tickets in dispatch order with the called ticket at the counter.

    Clicking a ticket calls it out of order through the engine.
    """

    ticket_selected = pyqtSignal(str)

    def __init__(self, engine, parent=None):
        super().__init__(parent)
        self.engine = engine
        self.scene = QGraphicsScene(self)
        self.scene.setBackgroundBrush(QColor("#f9fbff"))
        self.view = QGraphicsView(self.scene)
        self.view.setRenderHints(self.view.renderHints() | QPainter.RenderHint.Antialiasing)
        self.view.setMinimumSize(360, 240)
        self.view.setSceneRect(-40, -40, 600, 320)

        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)

        self.current_label = QLabel()
        self.current_label.setStyleSheet("font-size: 18px; font-weight: 700; color: #102a43;")
        layout.addLayout(self._build_legend())
        layout.addWidget(self.current_label)
        layout.addWidget(self.view)

        self.ticket_items = {}
        self._build_counter()

        self._refresh_timer = QTimer(self)
        self._refresh_timer.setInterval(40)
        self._refresh_timer.timeout.connect(self._on_tick)

        self.sync_once()

    def _build_legend(self) -> QHBoxLayout:
        layout = QHBoxLayout()
        layout.setContentsMargins(6, 4, 6, 10)
        layout.setSpacing(12)

        def _item(color: QColor, text: str) -> QWidget:
            container = QWidget()
            row = QHBoxLayout(container)
            row.setContentsMargins(0, 0, 0, 0)
            row.setSpacing(6)
            swatch = QLabel()
            swatch.setFixedSize(18, 18)
            swatch.setStyleSheet(
                f"background: {color.name()}; border: 1px solid #d6deeb; border-radius: 5px;"
            )
            label = QLabel(text)
            label.setStyleSheet("color: #334e68; font-weight: 600;")
            row.addWidget(swatch)
            row.addWidget(label)
            return container

        layout.addWidget(_item(NORMAL_PEN, "Normal ticket"))
        layout.addWidget(_item(PRIORITY_PEN, "Priority ticket"))
        layout.addWidget(_item(QColor("#2d7dd2"), "Counter"))
        layout.addStretch()
        return layout

    def _build_counter(self):
        rect = QGraphicsRectItem(-40, -32, 80, 64)
        rect.setPen(QPen(COUNTER_PEN, 2.2))
        rect.setBrush(QBrush(COUNTER_BRUSH))
        rect.setPos(COUNTER_POS)
        self.scene.addItem(rect)

        label = QGraphicsSimpleTextItem("Now calling")
        label.setBrush(QBrush(COUNTER_PEN))
        label.setPos(COUNTER_POS.x() - label.boundingRect().width() / 2, COUNTER_POS.y() - 52)
        self.scene.addItem(label)

    def start(self):
        if not self._refresh_timer.isActive():
            self._refresh_timer.start()

    def stop(self):
        if self._refresh_timer.isActive():
            self._refresh_timer.stop()
        self.sync_once()

    def sync_once(self):
        self._update_scene(self.engine.snapshot(), immediate=True)

    def _on_tick(self):
        self._update_scene(self.engine.snapshot())

    def _update_scene(self, snapshot, immediate: bool = False):
        active_tickets = set()
        max_x = 0

        for idx, entry in enumerate(snapshot.waiting):
            pos = QPointF(idx * QUEUE_SPACING, QUEUE_Y)
            self._set_ticket_target(entry.ticket, pos, immediate)
            active_tickets.add(entry.ticket_id)
            max_x = max(max_x, pos.x())

        current = snapshot.current
        if current is not None:
            self._set_ticket_target(current.ticket, QPointF(COUNTER_POS), immediate)
            active_tickets.add(current.ticket_id)
            self.current_label.setText(
                f"{current.ticket_id} · {current.ticket.subject} → room {current.ticket.counter_label}"
            )
        else:
            self.current_label.setText("No ticket called")

        for ticket_id in list(self.ticket_items.keys()):
            if ticket_id not in active_tickets:
                self._remove_ticket(ticket_id)

        if not immediate:
            self._animate_tickets()

        width = max(420, max_x + 120)
        self.scene.setSceneRect(-80, -80, width, 340)

    def _on_ticket_clicked(self, ticket_id: str):
        if self.engine.select_current(ticket_id):
            self.ticket_selected.emit(ticket_id)
        self.sync_once()

    def _set_ticket_target(self, ticket, pos: QPointF, immediate: bool):
        ticket_id = ticket.ticket_id
        if ticket_id not in self.ticket_items:
            item = _TicketItem(ticket_id, self._on_ticket_clicked)
            self._apply_ticket_style(item, ticket.is_priority)
            self.scene.addItem(item)

            label = QGraphicsSimpleTextItem(ticket_id)
            label.setBrush(QBrush(PRIORITY_PEN if ticket.is_priority else NORMAL_PEN))
            self.scene.addItem(label)

            self.ticket_items[ticket_id] = {
                "item": item,
                "label": label,
                "target": QPointF(pos),
            }
            self._move_ticket_immediately(ticket_id)
            return

        self.ticket_items[ticket_id]["target"] = QPointF(pos)
        if immediate:
            self._move_ticket_immediately(ticket_id)

    @staticmethod
    def _apply_ticket_style(item: QGraphicsEllipseItem, is_priority: bool):
        if is_priority:
            item.setBrush(QBrush(PRIORITY_COLOR))
            item.setPen(QPen(PRIORITY_PEN, 2.0))
            return
        item.setBrush(QBrush(NORMAL_COLOR))
        item.setPen(QPen(NORMAL_PEN, 2.0))

    @staticmethod
    def _place(data, center: QPointF):
        label = data["label"]
        data["item"].setPos(center)
        label.setPos(center.x() - label.boundingRect().width() / 2, center.y() - 8)

    def _move_ticket_immediately(self, ticket_id: str):
        data = self.ticket_items[ticket_id]
        self._place(data, data["target"])

    def _animate_tickets(self):
        for ticket_id, data in self.ticket_items.items():
            current = data["item"].pos()
            delta = data["target"] - current
            if abs(delta.x()) < 0.5 and abs(delta.y()) < 0.5:
                self._move_ticket_immediately(ticket_id)
                continue

            distance = math.hypot(delta.x(), delta.y())
            step = 1.0 - math.exp(-distance / SMOOTH_DISTANCE_SCALE)
            step = max(SMOOTH_MIN_STEP, min(step, SMOOTH_MAX_STEP))
            self._place(data, current + delta * step)

    def _remove_ticket(self, ticket_id: str):
        data = self.ticket_items.pop(ticket_id, None)
        if not data:
            return
        self.scene.removeItem(data["item"])
        self.scene.removeItem(data["label"])
