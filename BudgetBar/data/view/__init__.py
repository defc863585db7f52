"""Qt views for the BudgetBar application.

- BudgetBarsView: the budget bars of the browsed month
- TransactionPanel: the paginated transactions of an expanded bar
- TransactionEditorDialog: add, edit and delete a transaction
"""
