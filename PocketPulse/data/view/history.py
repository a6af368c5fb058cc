"""7-day income/expense history chart.

This module provides:
    - paint decorator: wraps paint helpers with save/restore and error logging
    - HistoryChart: one chart instance built from a Series, with its pixel geometry
    - HistoryChartView: widget owning exactly one HistoryChart at a time

Each delivered series replaces the chart: the previous instance is disposed
before the next one is created.
"""
import logging
from dataclasses import dataclass, field
from typing import List, Optional

from PySide6 import QtCore, QtGui, QtWidgets

from ..data import Series, TransactionType
from ...settings import locale
from ...ui import ui
from ...ui.actions import signals

LINE_TENSION = 0.3


def paint(func):
    """Decorator to wrap paint helpers with save/restore + exception log."""

    def wrapper(self, painter: QtGui.QPainter) -> None:
        painter.save()
        try:
            func(self, painter)
        except Exception as ex:
            logging.error(f'HistoryChartView: error in {func.__name__}', exc_info=ex)
        painter.restore()

    return wrapper


def smooth_path(points: List[QtCore.QPointF], tension: float = LINE_TENSION) -> QtGui.QPainterPath:
    """Returns a cubic path through `points` with Catmull-Rom style control points."""
    path = QtGui.QPainterPath()
    if not points:
        return path

    path.moveTo(points[0])
    for i in range(1, len(points)):
        p0 = points[i - 2] if i > 1 else points[i - 1]
        p1 = points[i - 1]
        p2 = points[i]
        p3 = points[i + 1] if i + 1 < len(points) else points[i]

        c1 = QtCore.QPointF(p1.x() + (p2.x() - p0.x()) * tension / 2.0,
                            p1.y() + (p2.y() - p0.y()) * tension / 2.0)
        c2 = QtCore.QPointF(p2.x() - (p3.x() - p1.x()) * tension / 2.0,
                            p2.y() - (p3.y() - p1.y()) * tension / 2.0)
        path.cubicTo(c1, c2, p2)
    return path


@dataclass
class Geometry:
    """Pixel-space objects of one chart layout."""
    area: QtCore.QRectF = field(default_factory=QtCore.QRectF)
    legend: QtCore.QRectF = field(default_factory=QtCore.QRectF)
    xs: List[float] = field(default_factory=list)
    income_points: List[QtCore.QPointF] = field(default_factory=list)
    expense_points: List[QtCore.QPointF] = field(default_factory=list)
    data_max: float = 0.0


class HistoryChart:
    """A single chart over one Series.

    The y axis always starts at zero. The legend sits below the plot area.
    """

    def __init__(self, series: Series) -> None:
        self.series = series
        self.geometry = Geometry()
        self.disposed = False

    @property
    def data_max(self) -> float:
        values = list(self.series.income) + list(self.series.expense)
        return max([0.0] + [float(v) for v in values])

    def layout(self, rect: QtCore.QRectF, metrics: QtGui.QFontMetricsF) -> Geometry:
        """Compute the geometry for the given widget rectangle."""
        o = ui.Size.Margin(1.0)
        legend_height = metrics.height() + ui.Size.Indicator(2.0)
        label_height = metrics.height() + ui.Size.Indicator(1.0)

        max_label = locale.format_amount(self.data_max)
        left = metrics.horizontalAdvance(max_label) + ui.Size.Indicator(2.0)

        area = QtCore.QRectF(rect).adjusted(o + left, o, -o, -(o + legend_height + label_height))
        legend = QtCore.QRectF(rect.left() + o, rect.bottom() - o - legend_height, rect.width() - o * 2, legend_height)

        top = self.data_max or 1.0
        n = len(self.series.labels)

        geom = Geometry(area=area, legend=legend, data_max=self.data_max)
        if n == 0 or area.width() <= 0 or area.height() <= 0:
            self.geometry = geom
            return geom

        step = area.width() / (n - 1) if n > 1 else 0.0
        geom.xs = [area.left() + step * i if n > 1 else area.center().x() for i in range(n)]

        def y(value: float) -> float:
            return area.bottom() - (float(value) / top) * area.height()

        geom.income_points = [QtCore.QPointF(x, y(v)) for x, v in zip(geom.xs, self.series.income)]
        geom.expense_points = [QtCore.QPointF(x, y(v)) for x, v in zip(geom.xs, self.series.expense)]

        self.geometry = geom
        return geom

    def index_at(self, x: float) -> Optional[int]:
        """The index of the day closest to the horizontal position `x`."""
        xs = self.geometry.xs
        if not xs:
            return None
        return min(range(len(xs)), key=lambda i: abs(xs[i] - x))

    def dispose(self) -> None:
        self.series = Series()
        self.geometry = Geometry()
        self.disposed = True


class HistoryChartView(QtWidgets.QWidget):
    """Custom painted line chart of the daily income and expense totals."""

    def __init__(self, parent: Optional[QtWidgets.QWidget] = None) -> None:
        super().__init__(parent=parent)

        self._chart: Optional[HistoryChart] = None
        self._hover_index: Optional[int] = None

        self.setMouseTracking(True)
        self.setMinimumHeight(ui.Size.DefaultHeight(0.4))

        self._connect_signals()

    def _connect_signals(self) -> None:
        signals.seriesChanged.connect(self.set_series)

        @QtCore.Slot(str, object)
        def metadata_changed(key: str, value: object) -> None:
            if key in ('locale', 'currency', 'fallback_symbol', 'theme'):
                self._relayout()

        signals.metadataChanged.connect(metadata_changed)

    @property
    def chart(self) -> Optional[HistoryChart]:
        return self._chart

    @QtCore.Slot(object)
    def set_series(self, series: Series) -> None:
        """Replace the chart with a new one built from `series`."""
        if self._chart is not None:
            self._chart.dispose()
        self._chart = HistoryChart(series)
        self._hover_index = None
        self._relayout()

    @QtCore.Slot()
    def clear(self) -> None:
        if self._chart is not None:
            self._chart.dispose()
        self._chart = None
        self._hover_index = None
        self.update()

    def _font(self) -> QtGui.QFont:
        return ui.get_font(ui.Size.SmallText(1.0))

    def _relayout(self) -> None:
        if self._chart is not None:
            self._chart.layout(QtCore.QRectF(self.rect()), QtGui.QFontMetricsF(self._font()))
        self.update()

    def resizeEvent(self, event: QtGui.QResizeEvent) -> None:
        super().resizeEvent(event)
        self._relayout()

    def mouseMoveEvent(self, event: QtGui.QMouseEvent) -> None:
        if self._chart is not None and self._chart.geometry.area.contains(event.position()):
            index = self._chart.index_at(event.position().x())
        else:
            index = None
        if index != self._hover_index:
            self._hover_index = index
            self.update()
        super().mouseMoveEvent(event)

    def leaveEvent(self, event: QtCore.QEvent) -> None:
        self._hover_index = None
        self.update()
        super().leaveEvent(event)

    def sizeHint(self) -> QtCore.QSize:
        return QtCore.QSize(ui.Size.DefaultWidth(1.0), ui.Size.DefaultHeight(0.6))

    def paintEvent(self, event: QtGui.QPaintEvent) -> None:
        painter = QtGui.QPainter(self)
        painter.setFont(self._font())

        self._draw_background(painter)
        if self._chart is None or not self._chart.geometry.xs:
            painter.end()
            return

        self._draw_axes(painter)
        self._draw_lines(painter)
        self._draw_legend(painter)
        self._draw_tooltip(painter)
        painter.end()

    @paint
    def _draw_background(self, painter: QtGui.QPainter) -> None:
        painter.setRenderHint(QtGui.QPainter.Antialiasing, True)
        painter.setPen(QtCore.Qt.NoPen)
        painter.setBrush(ui.Color.VeryDarkBackground())
        o = ui.Size.Indicator(2.0)
        painter.drawRoundedRect(self.rect(), o, o)

    @paint
    def _draw_axes(self, painter: QtGui.QPainter) -> None:
        geom = self._chart.geometry
        metrics = painter.fontMetrics()

        painter.setPen(QtGui.QPen(ui.Color.LightBackground(), ui.Size.Separator(1.0)))
        painter.drawLine(QtCore.QPointF(geom.area.left(), geom.area.bottom()),
                         QtCore.QPointF(geom.area.right(), geom.area.bottom()))
        painter.drawLine(QtCore.QPointF(geom.area.left(), geom.area.top()),
                         QtCore.QPointF(geom.area.left(), geom.area.bottom()))

        painter.setPen(ui.Color.SecondaryText())
        pad = ui.Size.Indicator(1.0)

        for value, y in ((geom.data_max, geom.area.top()), (0.0, geom.area.bottom())):
            label = locale.format_amount(value)
            w = metrics.horizontalAdvance(label)
            painter.drawText(QtCore.QPointF(geom.area.left() - w - pad, y + metrics.ascent() / 2.0), label)

        for x, label in zip(geom.xs, self._chart.series.labels):
            text = label[5:]
            w = metrics.horizontalAdvance(text)
            painter.drawText(QtCore.QPointF(x - w / 2.0, geom.area.bottom() + pad + metrics.ascent()), text)

    @paint
    def _draw_lines(self, painter: QtGui.QPainter) -> None:
        geom = self._chart.geometry
        painter.setRenderHint(QtGui.QPainter.Antialiasing, True)
        painter.setBrush(QtCore.Qt.NoBrush)

        for kind, points in (
                (TransactionType.Income.value, geom.income_points),
                (TransactionType.Expense.value, geom.expense_points),
        ):
            pen = QtGui.QPen(ui.amount_color(kind), ui.Size.Separator(2.0))
            pen.setCapStyle(QtCore.Qt.RoundCap)
            pen.setJoinStyle(QtCore.Qt.RoundJoin)
            painter.setPen(pen)
            painter.drawPath(smooth_path(points))

            painter.setBrush(ui.amount_color(kind))
            r = ui.Size.Indicator(0.5)
            for p in points:
                painter.drawEllipse(p, r, r)
            painter.setBrush(QtCore.Qt.NoBrush)

    @paint
    def _draw_legend(self, painter: QtGui.QPainter) -> None:
        geom = self._chart.geometry
        metrics = painter.fontMetrics()
        painter.setRenderHint(QtGui.QPainter.Antialiasing, True)

        items = [(kind.value, kind.value.capitalize()) for kind in TransactionType]
        swatch = ui.Size.Indicator(2.0)
        gap = ui.Size.Margin(1.0)
        widths = [swatch + ui.Size.Indicator(1.0) + metrics.horizontalAdvance(label) for _, label in items]
        x = geom.legend.center().x() - (sum(widths) + gap * (len(items) - 1)) / 2.0
        cy = geom.legend.center().y()

        for (kind, label), w in zip(items, widths):
            painter.setPen(QtCore.Qt.NoPen)
            painter.setBrush(ui.amount_color(kind))
            painter.drawRoundedRect(QtCore.QRectF(x, cy - swatch / 2.0, swatch, swatch), 1, 1)
            painter.setPen(ui.Color.Text())
            painter.drawText(QtCore.QPointF(x + swatch + ui.Size.Indicator(1.0), cy + metrics.ascent() / 2.0 - 1),
                             label)
            x += w + gap

    @paint
    def _draw_tooltip(self, painter: QtGui.QPainter) -> None:
        i = self._hover_index
        if i is None:
            return

        geom = self._chart.geometry
        series = self._chart.series
        if i >= len(series.labels):
            return

        x = geom.xs[i]
        painter.setPen(QtGui.QPen(ui.Color.DisabledText(), ui.Size.Separator(1.0), QtCore.Qt.DashLine))
        painter.drawLine(QtCore.QPointF(x, geom.area.top()), QtCore.QPointF(x, geom.area.bottom()))

        lines = [
            series.labels[i],
            f'Income: {locale.format_amount(series.income[i])}',
            f'Expense: {locale.format_amount(series.expense[i])}',
        ]
        metrics = painter.fontMetrics()
        pad = ui.Size.Indicator(1.5)
        w = max(metrics.horizontalAdvance(s) for s in lines) + pad * 2
        h = metrics.height() * len(lines) + pad * 2

        left = x + pad if x + pad + w <= geom.area.right() else x - pad - w
        rect = QtCore.QRectF(left, geom.area.top(), w, h)

        painter.setRenderHint(QtGui.QPainter.Antialiasing, True)
        painter.setPen(QtCore.Qt.NoPen)
        painter.setBrush(ui.Color.DarkBackground())
        painter.drawRoundedRect(rect, pad, pad)

        painter.setPen(ui.Color.Text())
        for n, s in enumerate(lines):
            painter.drawText(QtCore.QPointF(rect.left() + pad, rect.top() + pad + metrics.ascent() + n * metrics.height()), s)
