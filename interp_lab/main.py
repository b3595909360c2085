"""
Interpolation Error Explorer: Newton vs. staggered spline.

Plotted curves
--------------
1.  f(x)                                     one of seven test functions
2.  Newton polynomial                        divided differences, N <= 40
3.  Staggered quadratic spline               Thomas solve on the dual grid
4.  Residuals                                |P(x) - f(x)| for 2 and 3

A calibrated error (Precision) can be injected at the middle sample to watch
how each method spreads it.

Keys: 0 function, 1 mode, 2/3 zoom in/out, 4/5 raise/reduce N,
6/7 add/remove precision, Ctrl+X exit.
"""

from __future__ import annotations

import logging
import sys
from typing import Any, Callable, Optional, Sequence

import numpy as np
import pyqtgraph as pg
from PySide6.QtCore import Qt
from PySide6.QtGui import QColor, QFont, QKeySequence, QPen, QResizeEvent
from PySide6.QtWidgets import (
    QApplication,
    QLabel,
    QMainWindow,
    QMenuBar,
    QMessageBox,
    QVBoxLayout,
    QWidget,
)

from .cli import enable_float_traps, install_fatal_excepthook, parse_command_line
from .evaluators import Evaluator
from .session import InterpolationSession

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())

AXIS_PEN_WIDTH: int = 3


def pen_for(evaluator: Evaluator) -> QPen:
    return pg.mkPen(
        color=QColor(Qt.GlobalColor(evaluator.get_color())),
        width=1,
        style=Qt.PenStyle(evaluator.get_line_style()),
    )


def sample(evaluator: Evaluator, xs: np.ndarray) -> np.ndarray:
    """Evaluate *evaluator* at every point of *xs* without re-resolving it."""
    getter = evaluator.value_getter()
    return np.fromiter((getter(x) for x in xs), dtype=np.float64, count=len(xs))


# ===========================================================================
# Main window
# ===========================================================================

class GraphWindow(QMainWindow):

    def __init__(self, session: InterpolationSession) -> None:
        super().__init__()
        self.setWindowTitle("Graph")

        self._session = session
        self._curves: list[Any] = []

        self._build_ui()
        self._create_toolbar()
        self.resize(1000, 1000)
        self.redraw()

    def _build_ui(self) -> None:
        central = QWidget()
        self.setCentralWidget(central)
        layout = QVBoxLayout(central)

        self._plot_widget = pg.PlotWidget()
        self._plot_widget.setBackground("w")
        self._plot_widget.showGrid(x=True, y=True, alpha=0.3)
        vb = self._plot_widget.plotItem.vb
        vb.setMenuEnabled(False)
        vb.setMouseEnabled(x=False, y=False)
        vb.disableAutoRange()

        axis_pen = pg.mkPen("k", width=AXIS_PEN_WIDTH)
        self._plot_widget.addItem(pg.InfiniteLine(pos=0, angle=0, pen=axis_pen))
        self._plot_widget.addItem(pg.InfiniteLine(pos=0, angle=90, pen=axis_pen))
        layout.addWidget(self._plot_widget, 1)

        self._info_lbl = QLabel()
        self._info_lbl.setFont(QFont("Courier New"))
        layout.addWidget(self._info_lbl)

    def _create_toolbar(self) -> None:
        menu_bar = QMenuBar(self)
        entries: tuple[tuple[str, str, Callable[[], None]], ...] = (
            ("&Change function", "0", self.change_function),
            ("&Change mode", "1", self.change_mode),
            ("&Zoom In", "2", self.zoom_in),
            ("&Zoom Out", "3", self.zoom_out),
            ("&Raise N", "4", self.raise_n),
            ("&Reduce N", "5", self.reduce_n),
            ("&Add Precision", "6", self.add_precision),
            ("&Remove Precision", "7", self.remove_precision),
            ("Exit", "Ctrl+X", self.close),
        )
        for text, shortcut, slot in entries:
            action = menu_bar.addAction(text)
            action.setShortcut(QKeySequence(shortcut))
            action.triggered.connect(slot)
        menu_bar.setMaximumHeight(30)
        self.setMenuBar(menu_bar)

    # ------------------------------------------------------------------
    # Slots
    # ------------------------------------------------------------------

    def change_function(self) -> None:
        self._apply(self._session.change_function)

    def change_mode(self) -> None:
        self._apply(self._session.change_mode)

    def zoom_in(self) -> None:
        self._apply(self._session.zoom_in, warn=True)

    def zoom_out(self) -> None:
        self._apply(self._session.zoom_out, warn=True)

    def raise_n(self) -> None:
        self._apply(self._session.raise_n)

    def reduce_n(self) -> None:
        self._apply(self._session.reduce_n)

    def add_precision(self) -> None:
        self._apply(self._session.add_precision)

    def remove_precision(self) -> None:
        self._apply(self._session.remove_precision)

    def _apply(self, action: Callable[[], str], warn: bool = False) -> None:
        message = action()
        if message and warn:
            QMessageBox.warning(self, "Warning", message)
        self.redraw()

    def resizeEvent(self, event: QResizeEvent) -> None:  # noqa: N802
        super().resizeEvent(event)
        self.redraw()

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def redraw(self) -> None:
        session = self._session
        evaluators = session.refresh()
        limits = session.scaling_limits(evaluators[-1])

        for curve in self._curves:
            self._plot_widget.removeItem(curve)
        self._curves.clear()

        a, b = session.params.left_bound, session.params.right_bound
        xs = np.linspace(a, b, max(2, self._plot_widget.width()))
        for evaluator in evaluators:
            curve = self._plot_widget.plot(xs, sample(evaluator, xs), pen=pen_for(evaluator))
            self._curves.append(curve)

        self._plot_widget.setXRange(a, b, padding=0)
        self._plot_widget.setYRange(limits[0], limits[1], padding=0)

        lines = session.status_lines(limits)
        self._info_lbl.setText("\n".join(lines))
        for line in lines:
            logger.info(line)


# ===========================================================================
# Entry point
# ===========================================================================

def main(argv: Optional[Sequence[str]] = None) -> None:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    params = parse_command_line(argv)

    enable_float_traps()
    install_fatal_excepthook()

    app = QApplication(sys.argv[:1])
    window = GraphWindow(InterpolationSession(params))
    window.show()
    sys.exit(app.exec())


if __name__ == "__main__":
    main()
