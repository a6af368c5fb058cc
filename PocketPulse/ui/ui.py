"""UI styling utilities for PocketPulse.

This module provides:
    - Theme: supported UI themes (light, dark)
    - Size: standardized size constants and scaling logic
    - Color: standardized color palette for widgets, charts and themes
    - get_font: sized fonts based on the application font
    - init_stylesheet / apply_theme: token-expanded application style sheet
"""
import enum
import logging
import math
import os
import re
from typing import Optional

from PySide6 import QtWidgets, QtGui, QtCore

DISABLE_STYLESHEET_ENV_KEY = 'POCKETPULSE_DISABLE_STYLESHEET'


class Theme(enum.StrEnum):
    Light = 'light'
    Dark = 'dark'


class Size(enum.Enum):
    """Enumeration of size values used for UI scaling."""
    SmallText = 11.0
    MediumText = 12.0
    LargeText = 16.0
    HeadingText = 22.0
    Indicator = 4.0
    Separator = 1.0
    Margin = 18.0
    Section = 86.0
    RowHeight = 34.0
    DefaultWidth = 640.0
    DefaultHeight = 480.0

    def __new__(cls, value):
        obj = object.__new__(cls)
        obj._value_ = float(value)
        return obj

    def __eq__(self, other):
        if isinstance(other, (float, int)):
            return self._value_ == float(other)
        return super().__eq__(other)

    def __hash__(self):
        return hash(self._value_)

    def __call__(self, multiplier=1.0):
        """
        Returns the size value times `multiplier`, rounded to whole pixels.

        Args:
            multiplier (float): A multiplier to apply to the size.

        Returns:
            int: The rounded size.
        """
        return round(self.value * float(multiplier))

    @property
    def value(self):
        """float: The scaled size value."""
        return self.size(self._value_)

    @classmethod
    def size(cls, value, ui_scale_factor=1.0, dpi=72.0):
        """Scale a value by DPI and UI scale factor."""
        return math.ceil(float(value) * (float(dpi) / 72.0)) * float(ui_scale_factor)


class Color(enum.Enum):
    """Enumeration of colours used across the UI."""

    Transparent = {
        Theme.Light.value: (0, 0, 0, 0),
        Theme.Dark.value: (0, 0, 0, 0),
    }
    VeryDarkBackground = {
        Theme.Light.value: (245, 245, 245),
        Theme.Dark.value: (30, 30, 30),
    }
    DarkBackground = {
        Theme.Light.value: (220, 220, 220),
        Theme.Dark.value: (45, 45, 45),
    }
    Background = {
        Theme.Light.value: (190, 190, 190),
        Theme.Dark.value: (65, 65, 65),
    }
    LightBackground = {
        Theme.Light.value: (170, 170, 170),
        Theme.Dark.value: (85, 85, 85),
    }
    DisabledText = {
        Theme.Light.value: (120, 120, 120),
        Theme.Dark.value: (135, 135, 135),
    }
    SecondaryText = {
        Theme.Light.value: (70, 70, 70),
        Theme.Dark.value: (185, 185, 185),
    }
    Text = {
        Theme.Light.value: (30, 30, 30),
        Theme.Dark.value: (225, 225, 225),
    }
    SelectedText = {
        Theme.Light.value: (0, 0, 0),
        Theme.Dark.value: (255, 255, 255),
    }
    Blue = {
        Theme.Light.value: (0, 50, 100),
        Theme.Dark.value: (88, 138, 180),
    }
    Red = {
        Theme.Light.value: (179, 94, 94),
        Theme.Dark.value: (229, 114, 114),
    }
    Green = {
        Theme.Light.value: (60, 180, 125),
        Theme.Dark.value: (90, 200, 155),
    }

    @classmethod
    def _get_theme(cls):
        from ..settings import lib
        theme = lib.settings['theme']
        if theme not in [f.value for f in Theme]:
            theme = Theme.Dark.value
        return theme

    def __new__(cls, v):
        if not isinstance(v, dict):
            raise ValueError(f'Invalid color value: {v}. Must be a dictionary, got {type(v)}: {v}')
        obj = object.__new__(cls)
        obj._value_ = v
        return obj

    def __call__(self, qss=False):
        """
        Returns a QColor or CSS rgba string for the current theme.

        Args:
            qss (bool): If True, returns a CSS rgba string suitable for QSS.
        """
        theme = self._get_theme()
        color = QtGui.QColor(*self._value_[theme])
        if not qss:
            return color
        return self.rgb(color)

    @staticmethod
    def rgb(color):
        """Returns the CSS rgba string for a QColor."""
        rgb = [str(f) for f in color.getRgb()]
        return f'rgba({",".join(rgb)})'


def amount_color(kind):
    """Returns the color used for income or expense figures."""
    return Color.Green() if kind == 'income' else Color.Red()


def get_font(size, bold=False):
    """
    Returns the application font at the given pixel size.

    Args:
        size (int): Pixel size.
        bold (bool): Use a bold weight.

    Returns:
        QtGui.QFont: The font.
    """
    if size <= 0:
        raise ValueError(f'Font size must be greater than 0, got {size}')

    font = QtGui.QFont(QtWidgets.QApplication.font())
    font.setPixelSize(int(size))
    if bold:
        font.setWeight(QtGui.QFont.Bold)
    return font


def init_stylesheet():
    """Loads the application style sheet and expands its tokens.

    Tokens are written as ``<Name>`` in ``stylesheet.qss``. ``<FontFamily>`` is
    the application font, color tokens are the names of :class:`Color` members
    and size tokens take the form ``<Size@multiplier>``, e.g. ``<Margin@0.5>``.

    Returns:
        str: The expanded style sheet.
    """
    if not QtWidgets.QApplication.instance():
        raise RuntimeError('init_stylesheet() must be called after a QApplication is initiated.')

    from ..settings import lib
    if not os.path.isfile(lib.settings.stylesheet_path):
        raise FileNotFoundError(f'Style sheet file not found: {lib.settings.stylesheet_path}')

    with open(lib.settings.stylesheet_path, 'r', encoding='utf-8') as f:
        qss = f.read()

    kwargs = {'FontFamily': QtWidgets.QApplication.font().family()}

    for enum_ in Color:
        kwargs[enum_.name] = Color.rgb(enum_())

    for enum_ in Size:
        for i in [float(f) / 10.0 for f in range(1, 101)]:
            kwargs[f'{enum_.name}@{i:.1f}'] = round(enum_() * i)

    for key in set(re.findall(r'<(.*?)>', qss)):
        if key not in kwargs:
            raise KeyError(f'Key {key} not found in style sheet tokens!')
        qss = qss.replace(f'<{key}>', str(kwargs[key]))

    return qss


def apply_theme() -> None:
    """Set the style sheet for the entire app.

    This function should be called after the QApplication is created.
    """
    if not QtWidgets.QApplication.instance():
        raise RuntimeError('apply_theme() must be called after a QApplication is initiated.')

    if os.environ.get(DISABLE_STYLESHEET_ENV_KEY, '').lower() in ['1', 'true', 'yes']:
        logging.warning('Stylesheet disabled by environment variable.')
        return

    qss = init_stylesheet()
    QtWidgets.QApplication.instance().setStyleSheet(qss)
    logging.debug(f'Applied {Color._get_theme()} theme.')


class RoundedRowDelegate(QtWidgets.QStyledItemDelegate):
    """Delegate that draws rounded-corner backgrounds for selected rows."""

    def __init__(self, first_column: int = 0, last_column: int = -1,
                 parent: Optional[QtWidgets.QWidget] = None) -> None:
        super().__init__(parent=parent)

        self._first_column = first_column
        self._last_column = last_column

    def paint(self, painter: QtGui.QPainter, option: QtWidgets.QStyleOptionViewItem,
              index: QtCore.QModelIndex) -> None:
        selected = option.state & QtWidgets.QStyle.State_Selected
        color = Color.Background() if selected else Color.Transparent()

        painter.save()
        painter.setRenderHint(QtGui.QPainter.Antialiasing)
        painter.setPen(QtCore.Qt.NoPen)
        painter.setBrush(color)

        column = index.column()
        last_column = index.model().columnCount() + self._last_column

        o = Size.Indicator(1.5)
        half = option.rect.width() // 2
        rect1 = QtCore.QRect(option.rect)
        rect2 = QtCore.QRect(option.rect)

        if column == self._first_column:
            rect1 = rect1.adjusted(0, 0, -half + o, 0)
            painter.drawRoundedRect(rect1, o, o)
            rect2 = rect2.adjusted(half, 0, 0, 0)
            painter.fillRect(rect2, color)
        elif column == last_column:
            rect1 = rect1.adjusted(half, 0, 0, 0)
            painter.drawRoundedRect(rect1, o, o)
            rect2 = rect2.adjusted(0, 0, -half + o, 0)
            painter.fillRect(rect2, color)
        else:
            painter.fillRect(option.rect, color)

        painter.restore()

        super().paint(painter, option, index)
