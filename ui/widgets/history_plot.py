import pyqtgraph as pg
from PyQt6.QtWidgets import QVBoxLayout, QWidget


class HistoryPlotWidget(QWidget):
    """Plots waiting-line length and served count over time using pyqtgraph."""

    MAX_POINTS = 500

    def __init__(self, engine, parent=None):
        super().__init__(parent)
        self.engine = engine

        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)

        self.plot_widget = pg.PlotWidget()
        self.plot_widget.setBackground("#ffffff")
        self.plot_widget.showGrid(x=True, y=True, alpha=0.25)
        axis_pen = pg.mkPen(color="#52606d", width=1)
        for axis in ("left", "bottom"):
            ax = self.plot_widget.getAxis(axis)
            ax.setPen(axis_pen)
            ax.setTextPen(axis_pen)
        self.plot_widget.setLabel("left", "Tickets")
        self.plot_widget.setLabel("bottom", "Time", units="s")
        self.plot_widget.setTitle("Queue history", color="#102a43")
        self.plot_widget.addLegend()

        waiting_pen = pg.mkPen(color=(45, 125, 210), width=3)
        served_pen = pg.mkPen(color=(90, 164, 123), width=2)
        self._waiting_curve = self.plot_widget.plot(
            pen=waiting_pen, fillLevel=0, brush=(45, 125, 210, 40), name="Waiting"
        )
        self._served_curve = self.plot_widget.plot(pen=served_pen, name="Served")
        layout.addWidget(self.plot_widget)

        self._times = []
        self._waiting = []
        self._served = []

    def update_from_snapshot(self, snapshot):
        self._times.append(snapshot.sim_time)
        self._waiting.append(len(snapshot.waiting))
        self._served.append(len(snapshot.archive))
        if len(self._times) > self.MAX_POINTS:
            self._times = self._times[-self.MAX_POINTS:]
            self._waiting = self._waiting[-self.MAX_POINTS:]
            self._served = self._served[-self.MAX_POINTS:]
        self._waiting_curve.setData(self._times, self._waiting)
        self._served_curve.setData(self._times, self._served)
