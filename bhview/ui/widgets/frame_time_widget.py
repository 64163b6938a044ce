import logging
from typing import Sequence

import numpy as np
import pyqtgraph as pg
from PySide6.QtCore import Qt

logger = logging.getLogger(__name__)


class FrameTimeWidget(pg.PlotWidget):
    """
    Plot of recent frame times in milliseconds.
    -------------
    - set_history(): Replace the plotted frame times.
     Arguments: history_ms: sequence of frame times, average_ms: float
    """
    # Reference lines for 60 and 30 fps.
    TARGETS_MS = (1000.0 / 60.0, 1000.0 / 30.0)

    def __init__(self, parent=None, history_size: int = 60):
        super().__init__(parent)
        self.history_size = history_size

        self.plot_item = self.getPlotItem()
        self.plot_item.setLabel("left", "Frame time", units="ms")
        self.plot_item.setLabel("bottom", "Frame")
        self.plot_item.showGrid(x=False, y=True, alpha=0.3)
        self.setXRange(0, history_size - 1, padding=0)
        self.setYRange(0, 50, padding=0)
        self.getViewBox().setLimits(xMin=0, xMax=history_size - 1, yMin=0)

        for target in self.TARGETS_MS:
            self.plot_item.addItem(pg.InfiniteLine(
                pos=target, angle=0,
                pen=pg.mkPen(color=(90, 90, 90), width=1, style=Qt.PenStyle.DashLine)))

        self.curve = self.plot(
            x=[], y=[],
            pen=pg.mkPen(color=(255, 255, 255), width=1),
            symbol=None,
        )
        self.average_line = pg.InfiniteLine(
            pos=0.0, angle=0, pen=pg.mkPen(color=(255, 200, 60), width=1))
        self.plot_item.addItem(self.average_line)

    def set_history(self, history_ms: Sequence[float], average_ms: float | None = None) -> None:
        """
        Replace the plotted frame times.
        :param history_ms: Frame times, oldest first
        :param average_ms: Average shown as a horizontal line; computed when omitted
        """
        y = np.asarray(history_ms, dtype=float)[-self.history_size:]
        x = np.arange(y.size)
        self.curve.setData(x=x, y=y)

        if average_ms is None:
            average_ms = float(y.mean()) if y.size else 0.0
        self.average_line.setValue(average_ms)

        if y.size:
            self.setYRange(0, max(50.0, float(y.max()) * 1.2), padding=0)

    def clear_history(self) -> None:
        self.set_history([], 0.0)
