"""
Core package for BudgetBar.

This package includes:

- :mod:`BudgetBar.core.api` – REST client and typed endpoint wrappers for the budget service.
- :mod:`BudgetBar.core.models` – Immutable records returned by the service.
- :mod:`BudgetBar.core.fetch` – Page requests and the dispatchers running them off the GUI thread.
- :mod:`BudgetBar.core.cache` – Per-entry paginated transaction cache.
- :mod:`BudgetBar.core.accordion` – Single-expansion state of the budget bar list.
- :mod:`BudgetBar.core.service` – Blocking calls run on worker threads.
"""
