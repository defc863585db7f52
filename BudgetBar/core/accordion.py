"""Single-expansion state for a list of budget bars.

At most one row is expanded. Toggling the expanded row collapses it, toggling
another row moves the expansion there. A context change, such as navigating to
another month, always collapses and is announced through ``contextChanged`` so
the owner can drop the data tied to the old context.

The controller only tracks keys; it never touches transaction data.
"""
import logging
from typing import Optional

from PySide6 import QtCore


class AccordionController(QtCore.QObject):
    """
    Tracks the single expanded key among a set of rows.

    Signals:
        expandedChanged (object): Emitted with the new expanded key, or None when collapsed.
        contextChanged (str): Emitted with the new context after a context change.
    """
    expandedChanged = QtCore.Signal(object)
    contextChanged = QtCore.Signal(str)

    def __init__(self, parent: Optional[QtCore.QObject] = None) -> None:
        super().__init__(parent)
        self._expanded_key: Optional[str] = None
        self._context: str = ''

    @property
    def expanded_key(self) -> Optional[str]:
        return self._expanded_key

    @property
    def context(self) -> str:
        return self._context

    def is_expanded(self, key: str) -> bool:
        return self._expanded_key is not None and self._expanded_key == key

    def _set_expanded(self, key: Optional[str]) -> None:
        if key == self._expanded_key:
            return
        logging.debug(f'Expanded row changed: {self._expanded_key} -> {key}')
        self._expanded_key = key
        self.expandedChanged.emit(key)

    @QtCore.Slot(str)
    def toggle(self, key: str) -> None:
        """Expand a collapsed row or collapse the expanded one.

        Args:
            key (str): The row key, a budget entry id.
        """
        self._set_expanded(None if self.is_expanded(key) else key)

    @QtCore.Slot()
    def collapse(self) -> None:
        self._set_expanded(None)

    @QtCore.Slot(str)
    def change_context(self, context: str) -> None:
        """Collapse unconditionally and announce the new browsing context.

        Args:
            context (str): The new context, e.g. a "YYYY-MM" month.
        """
        self._context = context
        self._set_expanded(None)
        self.contextChanged.emit(context)
