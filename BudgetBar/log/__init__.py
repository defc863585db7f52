"""
Logging subsystem for BudgetBar.

Modules:

- :mod:`BudgetBar.log.log` – Log handler integrating with Python logging and the Qt message handler.
"""
