"""UI styling constants for BudgetBar.

This module provides:
    - Theme: supported UI themes (light, dark)
    - Size: standardized size constants
    - Color: theme-aware colour palette
    - status_color: the bar colour of a budget status
"""
import enum
import logging
import math

from PySide6 import QtGui


class Theme(enum.StrEnum):
    Light = 'light'
    Dark = 'dark'


class Size(enum.Enum):
    """Enumeration of size values used for UI scaling."""
    SmallText = 11.0
    MediumText = 12.0
    LargeText = 16.0
    Indicator = 4.0
    Separator = 1.0
    Margin = 12.0
    RowHeight = 34.0
    BarHeight = 8.0
    DefaultWidth = 480.0
    DefaultHeight = 640.0

    def __new__(cls, value):
        obj = object.__new__(cls)
        obj._value_ = float(value)
        return obj

    def __call__(self, multiplier=1.0):
        """
        Returns the size value as a rounded integer.

        Args:
            multiplier (float): A multiplier to apply to the size.

        Returns:
            int: The scaled size.
        """
        return round(self.size(self._value_) * float(multiplier))

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
    Background = {
        Theme.Light.value: (235, 235, 235),
        Theme.Dark.value: (45, 45, 45),
    }
    LightBackground = {
        Theme.Light.value: (215, 215, 215),
        Theme.Dark.value: (70, 70, 70),
    }
    SecondaryText = {
        Theme.Light.value: (90, 90, 90),
        Theme.Dark.value: (170, 170, 170),
    }
    Text = {
        Theme.Light.value: (30, 30, 30),
        Theme.Dark.value: (225, 225, 225),
    }
    Blue = {
        Theme.Light.value: (40, 100, 170),
        Theme.Dark.value: (88, 138, 180),
    }
    Red = {
        Theme.Light.value: (179, 64, 64),
        Theme.Dark.value: (229, 114, 114),
    }
    Green = {
        Theme.Light.value: (50, 160, 105),
        Theme.Dark.value: (90, 200, 155),
    }
    Yellow = {
        Theme.Light.value: (213, 136, 1),
        Theme.Dark.value: (253, 166, 1),
    }

    @classmethod
    def _get_theme(cls):
        from ..settings import lib
        try:
            theme = lib.get_settings()['theme']
        except Exception as ex:
            logging.debug(f'Falling back to the light theme: {ex}')
            return Theme.Light.value
        if theme not in [f.value for f in Theme]:
            theme = Theme.Light.value
        return theme

    def __new__(cls, v):
        if not isinstance(v, dict):
            raise ValueError(f'Invalid color value: {v}. Must be a dictionary, got {type(v)}: {v}')
        obj = object.__new__(cls)
        obj._value_ = v
        return obj

    def __call__(self, qss=False):
        """
        Returns a QColor or CSS rgba string.

        Args:
            qss (bool): If True, returns a CSS rgba string suitable for QSS.

        Returns:
            QColor or str: A QColor instance if qss=False, otherwise a CSS rgba string.
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


def status_color(budget_status):
    """Return the bar colour for a :class:`BudgetBar.core.models.BudgetStatus`."""
    from ..core.models import BudgetStatus
    return {
        BudgetStatus.Unpaid: Color.SecondaryText,
        BudgetStatus.Underspent: Color.Blue,
        BudgetStatus.OnBudget: Color.Green,
        BudgetStatus.Overspent: Color.Red,
    }.get(budget_status, Color.SecondaryText)()
