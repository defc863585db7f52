"""Qt list models for the BudgetBar application.

This subpackage provides SummaryModel, one row per category budget of a month,
and TransactionsModel, the cached transactions of a single budget entry.
"""
