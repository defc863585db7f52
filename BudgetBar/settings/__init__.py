"""
Settings package for BudgetBar.

Modules:

- :mod:`BudgetBar.settings.lib` – Client configuration schema, SettingsAPI and shared paging constants.
- :mod:`BudgetBar.settings.locale` – Currency and date formatting helpers.
"""
