"""
UI package: application signals, application setup, styling, and widgets.

This package provides:

- :mod:`BudgetBar.ui.actions` – Application-wide Qt signals.
- :mod:`BudgetBar.ui.app` – QApplication subclass.
- :mod:`BudgetBar.ui.main` – Main window composition.
- :mod:`BudgetBar.ui.ui` – Styling constants for sizes and colors.
- :mod:`BudgetBar.ui.yearmonth` – Widgets for browsing months.
"""
