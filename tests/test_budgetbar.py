# tests/test_budgetbar.py
"""
Widget tests for BudgetBar.data.view.budgetbar
(covers row sync, single expansion, month changes and mutation refreshes).

Run:
    python -m unittest tests.test_budgetbar
"""
from unittest import mock
from unittest.mock import patch

from BudgetBar.core import api
from BudgetBar.core.fetch import FetchMode
from BudgetBar.data.view.budgetbar import BudgetBarsView
from BudgetBar.status import status
from BudgetBar.ui.actions import signals
from tests.base import BaseTestCase, DeferredDispatcher, FakeTransactionsAPI, make_summary


def emit_summary(month, **kwargs):
    summary = make_summary(month)
    signals.summaryFetched.emit(summary)
    return summary


class BudgetBarsViewTests(BaseTestCase):

    def setUp(self) -> None:
        super().setUp()
        self.api = FakeTransactionsAPI.with_counts(rent=13, food=2)
        self.dispatcher = DeferredDispatcher()
        self.view = BudgetBarsView(
            api=self.api,
            dispatcher=self.dispatcher,
            directory=object(),
            summary_api=object(),
        )
        self.view.model.init_data(make_summary('2025-05'))

    def tearDown(self) -> None:
        self.delete_widget(self.view)
        super().tearDown()

    def expand(self, entry_id: str) -> None:
        self.view.row(entry_id).header.clicked.emit()
        self.dispatcher.settle_all()

    def test_rows_follow_summary(self):
        self.assertEqual([r.entry_id for r in self.view.rows()], ['rent', 'food'])
        self.assertTrue(self.view.empty_label.isHidden())
        self.assertIn('remaining', self.view.totals_label.text())

    def test_clicking_header_expands_row(self):
        self.expand('rent')
        self.assertEqual(self.view.accordion.expanded_key, 'rent')
        row = self.view.row('rent')
        self.assertTrue(row.is_expanded())
        self.assertEqual(row.panel.key, 'rent')
        self.assertEqual(row.panel.model.rowCount(), 3)

    def test_clicking_expanded_header_collapses(self):
        self.expand('rent')
        self.expand('rent')
        self.assertIsNone(self.view.accordion.expanded_key)
        self.assertFalse(self.view.row('rent').is_expanded())

    def test_only_one_row_is_expanded(self):
        self.expand('rent')
        self.expand('food')
        self.assertFalse(self.view.row('rent').is_expanded())
        self.assertTrue(self.view.row('food').is_expanded())
        self.assertEqual(self.view.row('food').panel.model.rowCount(), 2)

    def test_switching_rows_keeps_cached_entry(self):
        self.expand('rent')
        items = self.view.cache.get_items('rent')
        self.expand('food')

        self.assertTrue(self.view.cache.get_initial_loaded('rent'))
        self.assertEqual(self.view.cache.get_items('rent'), items)

        self.expand('rent')
        self.assertEqual(len(self.api.calls_for('rent')), 1)

    def test_month_change_collapses_and_clears_cache(self):
        self.expand('rent')
        with patch('BudgetBar.core.service.fetch_summary', side_effect=emit_summary) as fetch:
            self.view.set_month('2025-06')

        fetch.assert_called_once()
        self.assertEqual(self.view.month, '2025-06')
        self.assertEqual(self.view.accordion.context, '2025-06')
        self.assertIsNone(self.view.accordion.expanded_key)
        self.assertFalse(self.view.cache.has_entry('rent'))
        self.assertFalse(any(r.is_expanded() for r in self.view.rows()))
        self.assertEqual(self.dispatcher.pending, [])

    def test_month_change_refetches_on_expand(self):
        self.expand('rent')
        with patch('BudgetBar.core.service.fetch_summary', side_effect=emit_summary):
            self.view.set_month('2025-06')
        self.expand('rent')
        self.assertEqual(len(self.api.calls_for('rent')), 2)

    def test_unavailable_summary_clears_rows(self):
        def fail(month, **kwargs):
            raise status.ServiceUnavailableException('offline')

        with patch('BudgetBar.core.service.fetch_summary', side_effect=fail):
            self.view.set_month('2025-06')

        self.assertEqual(self.view.rows(), [])
        self.assertIsNone(self.view.model.summary)
        self.assertEqual(self.view.totals_label.text(), '')

    def test_refreshed_summary_keeps_expanded_panel(self):
        self.expand('rent')
        panel = self.view.row('rent').panel
        self.view.model.init_data(make_summary('2025-05'))

        self.assertIs(self.view.row('rent').panel, panel)
        self.assertEqual(self.view.accordion.expanded_key, 'rent')

    def test_removed_entry_collapses(self):
        self.expand('rent')
        self.view.model.init_data(make_summary('2025-05', entry_ids=('food',)))
        self.assertIsNone(self.view.accordion.expanded_key)
        self.assertEqual([r.entry_id for r in self.view.rows()], ['food'])

    def test_reordered_entries_keep_expansion(self):
        self.expand('food')
        self.view.model.init_data(make_summary('2025-05', entry_ids=('food', 'rent')))
        self.assertTrue(self.view.row('food').is_expanded())
        self.assertFalse(self.view.row('rent').is_expanded())
        self.assertEqual(len(self.api.calls_for('food')), 1)

    def test_empty_month(self):
        self.view.model.init_data(make_summary('2025-05', entry_ids=()))
        self.assertEqual(self.view.rows(), [])
        self.assertFalse(self.view.empty_label.isHidden())

    def test_mutation_invalidates_loaded_entry(self):
        self.expand('rent')
        self.view.row('rent').panel.show_more()
        self.dispatcher.settle_all()

        signals.transactionMutated.emit('rent')
        request = self.dispatcher.requests[-1]
        self.assertEqual(request.mode, FetchMode.Refresh)
        self.assertEqual((request.limit, request.offset), (13, 0))

        self.dispatcher.settle_all()
        self.assertTrue(self.view.cache.get_revealed('rent'))
        self.assertEqual(self.view.row('rent').panel.model.rowCount(), 13)

    def test_mutation_of_unloaded_entry_does_not_fetch(self):
        signals.transactionMutated.emit('food')
        self.assertEqual(self.dispatcher.requests, [])
        self.assertFalse(self.view.cache.has_entry('food'))

    def test_mutation_refreshes_summary(self):
        self.view._month = '2025-05'
        with patch('BudgetBar.core.service.fetch_summary', side_effect=emit_summary) as fetch:
            signals.transactionMutated.emit('rent')
        fetch.assert_called_once()
        self.assertEqual(fetch.call_args.args[0], '2025-05')


class BudgetBarsConnectionTests(BaseTestCase):

    def test_close_connections(self):
        clients = [mock.MagicMock(spec=api.ApiClient) for _ in range(3)]
        view = BudgetBarsView(
            api=api.TransactionsAPI(client=clients[0]),
            dispatcher=DeferredDispatcher(),
            directory=api.MonthDirectory(months_api=api.MonthsAPI(client=clients[1])),
            summary_api=api.SummaryAPI(client=clients[2]),
        )
        try:
            view.close_connections()
        finally:
            self.delete_widget(view)

        for client in clients:
            client.close.assert_called_once_with()

    def test_close_connections_without_clients(self):
        view = BudgetBarsView(
            api=FakeTransactionsAPI(),
            dispatcher=DeferredDispatcher(),
            directory=object(),
            summary_api=object(),
        )
        try:
            view.close_connections()
        finally:
            self.delete_widget(view)
