"""
BudgetBar data package: Qt models and views.

This package provides:

- :mod:`BudgetBar.data.model` – Qt list models for month summaries and an entry's transactions.
- :mod:`BudgetBar.data.view` – The budget bar list, the transaction panel and the transaction editor.
"""
