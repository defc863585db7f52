# tests/test_accordion.py
"""
Unit tests for BudgetBar.core.accordion.

Run:
    python -m unittest tests.test_accordion
"""
from typing import List, Optional

from BudgetBar.core.accordion import AccordionController
from BudgetBar.core.cache import TransactionCache
from tests.base import BaseTestCase, DeferredDispatcher, FakeTransactionsAPI


class AccordionControllerTests(BaseTestCase):

    def setUp(self) -> None:
        super().setUp()
        self.accordion = AccordionController()
        self.expanded: List[Optional[str]] = []
        self.contexts: List[str] = []
        self.accordion.expandedChanged.connect(self.expanded.append)
        self.accordion.contextChanged.connect(self.contexts.append)

    def test_starts_collapsed(self):
        self.assertIsNone(self.accordion.expanded_key)
        self.assertFalse(self.accordion.is_expanded('a'))
        self.assertEqual(self.accordion.context, '')

    def test_toggle_expands_and_collapses(self):
        self.accordion.toggle('a')
        self.assertEqual(self.accordion.expanded_key, 'a')
        self.assertTrue(self.accordion.is_expanded('a'))

        self.accordion.toggle('a')
        self.assertIsNone(self.accordion.expanded_key)
        self.assertEqual(self.expanded, ['a', None])

    def test_toggle_other_row_moves_expansion(self):
        self.accordion.toggle('a')
        self.accordion.toggle('b')
        self.assertEqual(self.accordion.expanded_key, 'b')
        self.assertFalse(self.accordion.is_expanded('a'))
        self.assertEqual(self.expanded, ['a', 'b'])

    def test_collapse_when_collapsed_is_silent(self):
        self.accordion.collapse()
        self.assertEqual(self.expanded, [])

    def test_change_context_collapses(self):
        self.accordion.toggle('a')
        self.accordion.change_context('2025-06')
        self.assertIsNone(self.accordion.expanded_key)
        self.assertEqual(self.accordion.context, '2025-06')
        self.assertEqual(self.expanded, ['a', None])
        self.assertEqual(self.contexts, ['2025-06'])

    def test_change_context_announces_even_when_collapsed(self):
        self.accordion.change_context('2025-06')
        self.accordion.change_context('2025-06')
        self.assertEqual(self.contexts, ['2025-06', '2025-06'])
        self.assertEqual(self.expanded, [])


class AccordionCacheTests(BaseTestCase):
    """The accordion and the cache wired together the way the budget bars view wires them."""

    def setUp(self) -> None:
        super().setUp()
        self.api = FakeTransactionsAPI.with_counts(a=5, b=2)
        self.dispatcher = DeferredDispatcher()
        self.cache = TransactionCache(api=self.api, dispatcher=self.dispatcher)
        self.accordion = AccordionController()
        self.accordion.contextChanged.connect(self.cache.invalidate_all)
        self.accordion.expandedChanged.connect(self.on_expanded)

    def on_expanded(self, key: Optional[str]) -> None:
        if key is not None:
            self.cache.load(key)

    def test_switching_rows_keeps_previous_entry(self):
        self.accordion.toggle('a')
        self.dispatcher.settle_all()
        items_a = self.cache.get_items('a')

        self.accordion.toggle('b')
        self.dispatcher.settle_all()

        self.assertTrue(self.cache.get_initial_loaded('a'))
        self.assertEqual(self.cache.get_items('a'), items_a)
        self.assertEqual(self.accordion.expanded_key, 'b')

    def test_reexpanding_reuses_cached_entry(self):
        self.accordion.toggle('a')
        self.dispatcher.settle_all()
        self.accordion.toggle('b')
        self.dispatcher.settle_all()
        self.accordion.toggle('a')
        self.assertEqual(self.dispatcher.pending, [])
        self.assertEqual(len(self.api.calls_for('a')), 1)

    def test_in_flight_load_settles_after_switching(self):
        self.accordion.toggle('a')
        self.accordion.toggle('b')
        self.dispatcher.settle_all()
        self.assertTrue(self.cache.get_initial_loaded('a'))
        self.assertTrue(self.cache.get_initial_loaded('b'))

    def test_context_change_drops_cache(self):
        self.accordion.toggle('a')
        self.dispatcher.settle_all()
        self.accordion.change_context('2025-06')
        self.assertFalse(self.cache.has_entry('a'))

        self.accordion.toggle('a')
        self.dispatcher.settle_all()
        self.assertEqual(len(self.api.calls_for('a')), 2)
