# tests/test_panel.py
"""
Widget tests for BudgetBar.data.view.panel.TransactionPanel.

Run:
    python -m unittest tests.test_panel
"""
from PySide6 import QtCore

from BudgetBar.core.cache import TransactionCache
from BudgetBar.core.fetch import FetchMode
from BudgetBar.data.model.transaction import TransactionRole
from BudgetBar.data.view.panel import TransactionPanel
from BudgetBar.settings import lib
from tests.base import BaseTestCase, DeferredDispatcher, FakeTransactionsAPI


class PanelTestCase(BaseTestCase):

    def setUp(self) -> None:
        super().setUp()
        self.api = FakeTransactionsAPI.with_counts(
            big=13, long=30, exact=lib.INITIAL_COUNT, empty=0
        )
        self.dispatcher = DeferredDispatcher()
        self.cache = TransactionCache(api=self.api, dispatcher=self.dispatcher)
        self.panel = TransactionPanel(self.cache)

    def tearDown(self) -> None:
        self.delete_widget(self.panel)
        super().tearDown()

    def show_key(self, key: str) -> None:
        self.panel.set_key(key)
        self.dispatcher.settle_all()

    def assertShown(self, *widgets):
        for widget in widgets:
            self.assertFalse(widget.isHidden(), f'{widget} should be shown')

    def assertNotShown(self, *widgets):
        for widget in widgets:
            self.assertTrue(widget.isHidden(), f'{widget} should be hidden')


class PanelStateTests(PanelTestCase):

    def test_without_key_shows_nothing(self):
        p = self.panel
        self.assertIsNone(p.key)
        self.assertNotShown(p.loading_label, p.empty_label, p.view, p.more_button,
                            p.more_label, p.error_widget, p.add_button)

    def test_mount_starts_load(self):
        self.panel.set_key('big')
        self.assertEqual(len(self.dispatcher.pending), 1)
        self.assertTrue(self.cache.get_is_loading('big'))

    def test_loading_indicator_until_first_page(self):
        p = self.panel
        p.set_key('big')
        self.assertShown(p.loading_label)
        self.assertNotShown(p.empty_label, p.view, p.more_button, p.error_widget)

        self.dispatcher.settle_all()
        self.assertNotShown(p.loading_label)

    def test_empty_entry_shows_empty_state(self):
        p = self.panel
        self.show_key('empty')
        self.assertShown(p.empty_label, p.add_button)
        self.assertNotShown(p.loading_label, p.view, p.more_button, p.more_label)

    def test_exact_initial_count_has_no_reveal(self):
        p = self.panel
        self.show_key('exact')
        self.assertShown(p.view)
        self.assertNotShown(p.more_button, p.empty_label)
        self.assertEqual(p.model.rowCount(), lib.INITIAL_COUNT)

    def test_preview_offers_show_more(self):
        p = self.panel
        self.show_key('big')
        self.assertShown(p.view, p.more_button)
        self.assertTrue(p.more_button.isEnabled())
        self.assertEqual(p.model.rowCount(), 3)

    def test_preview_is_not_scrollable(self):
        p = self.panel
        self.show_key('big')
        self.assertEqual(p.view.verticalScrollBarPolicy(), QtCore.Qt.ScrollBarAlwaysOff)
        self.assertEqual(p.view.maximumHeight(), p.view.content_height())

    def test_remount_reads_cache_without_fetching(self):
        self.show_key('big')
        other = TransactionPanel(self.cache, key='big')
        try:
            self.assertEqual(self.dispatcher.pending, [])
            self.assertEqual(other.model.rowCount(), 3)
            self.assertTrue(other.loading_label.isHidden())
        finally:
            self.delete_widget(other)

    def test_ignores_other_keys(self):
        self.show_key('big')
        self.cache.load('exact')
        self.dispatcher.settle_all()
        self.assertEqual([t.entry_id for t in self.panel.model.items()], ['big'] * 3)


class PanelRevealTests(PanelTestCase):

    def test_show_more_reveals_and_fetches(self):
        p = self.panel
        self.show_key('big')
        p.more_button.click()

        self.assertTrue(self.cache.get_revealed('big'))
        self.assertNotShown(p.more_button)
        self.assertShown(p.more_label)

        self.dispatcher.settle_all()
        self.assertNotShown(p.more_label, p.more_button)
        self.assertEqual(p.model.rowCount(), 13)

    def test_revealed_list_is_height_bounded(self):
        p = self.panel
        self.show_key('big')
        p.show_more()
        self.dispatcher.settle_all()

        self.assertEqual(p.view.verticalScrollBarPolicy(), QtCore.Qt.ScrollBarAsNeeded)
        self.assertGreater(p.view.content_height(), lib.SCROLL_CONTAINER_MAX_HEIGHT)
        self.assertEqual(p.view.maximumHeight(), lib.SCROLL_CONTAINER_MAX_HEIGHT)

    def test_more_rows_are_appended(self):
        p = self.panel
        self.show_key('big')
        inserted = []
        resets = []
        p.model.rowsInserted.connect(lambda parent, first, last: inserted.append((first, last)))
        p.model.modelReset.connect(lambda: resets.append(True))

        p.show_more()
        self.dispatcher.settle_all()
        self.assertEqual(inserted, [(3, 12)])
        self.assertEqual(resets, [])

    def test_scroll_near_bottom_loads_next_page(self):
        p = self.panel
        self.show_key('long')
        p.show_more()
        self.dispatcher.settle_all()
        self.assertTrue(self.cache.get_has_more('long'))

        self.assertFalse(p.maybe_load_more(lib.SCROLL_LOAD_THRESHOLD + 100))
        self.assertEqual(self.dispatcher.pending, [])

        self.assertTrue(p.maybe_load_more(lib.SCROLL_LOAD_THRESHOLD - 1))
        request = self.dispatcher.requests[-1]
        self.assertEqual((request.limit, request.offset), (lib.BATCH_SIZE, 13))

        # Still in flight
        self.assertFalse(p.maybe_load_more(0))
        self.assertEqual(len(self.dispatcher.pending), 1)

        self.dispatcher.settle_all()
        self.assertEqual(p.model.rowCount(), 23)

    def test_scroll_does_not_load_before_reveal(self):
        self.show_key('long')
        self.assertFalse(self.panel.maybe_load_more(0))
        self.assertEqual(self.dispatcher.pending, [])
        self.assertFalse(self.cache.get_revealed('long'))

    def test_scroll_stops_without_more(self):
        self.show_key('big')
        self.panel.show_more()
        self.dispatcher.settle_all()
        self.assertFalse(self.panel.maybe_load_more(0))

    def test_scrolled_signal_measures_distance_to_bottom(self):
        p = self.panel
        self.show_key('long')
        p.show_more()
        self.dispatcher.settle_all()

        bar = p.view.verticalScrollBar()
        p.on_scrolled(bar.maximum())
        self.assertEqual(len(self.dispatcher.pending), 1)

    def refresh_during_show_more(self, key: str) -> None:
        self.show_key(key)
        self.panel.show_more()
        self.cache.invalidate(key)
        self.dispatcher.settle(0)  # the page requested by show_more, now stale
        self.dispatcher.settle(0)  # the refetch, back to the preview depth

    def test_short_revealed_list_loads_next_page(self):
        p = self.panel
        self.refresh_during_show_more('long')

        self.assertTrue(self.cache.get_revealed('long'))
        self.assertNotShown(p.more_button)
        self.assertLessEqual(p.view.content_height(), lib.SCROLL_CONTAINER_MAX_HEIGHT)

        self.assertEqual(len(self.dispatcher.pending), 1)
        request = self.dispatcher.requests[-1]
        self.assertEqual(request.mode, FetchMode.More)
        self.assertEqual((request.limit, request.offset), (lib.BATCH_SIZE, lib.INITIAL_COUNT))

        self.dispatcher.settle_all()
        self.assertEqual(p.model.rowCount(), 13)
        self.assertTrue(self.cache.get_has_more('long'))
        self.assertEqual(self.dispatcher.pending, [])

    def test_short_revealed_list_stops_after_failure(self):
        p = self.panel
        self.refresh_during_show_more('long')
        self.dispatcher.fail(0)

        self.assertShown(p.error_widget)
        self.assertEqual(self.dispatcher.pending, [])
        self.assertEqual(p.model.rowCount(), 3)

        p.retry()
        self.dispatcher.settle_all()
        self.assertEqual(p.model.rowCount(), 13)
        self.assertNotShown(p.error_widget)

    def test_remount_resumes_short_revealed_list(self):
        self.refresh_during_show_more('long')
        self.dispatcher.fail(0)
        self.assertEqual(self.dispatcher.pending, [])

        other = TransactionPanel(self.cache, key='long')
        try:
            self.assertEqual(len(self.dispatcher.pending), 1)
            self.assertEqual(self.dispatcher.requests[-1].mode, FetchMode.More)
        finally:
            self.delete_widget(other)

    def test_fill_view_needs_reveal(self):
        self.show_key('long')
        self.assertFalse(self.panel.fill_view())
        self.assertEqual(self.dispatcher.pending, [])


class PanelErrorTests(PanelTestCase):

    def test_failed_first_page_shows_retry(self):
        p = self.panel
        self.api.fail_next()
        self.show_key('big')
        self.assertShown(p.error_widget)
        self.assertNotShown(p.loading_label, p.view, p.empty_label)
        self.assertIn('connection reset', p.error_label.text())

    def test_retry_after_failed_first_page(self):
        p = self.panel
        self.api.fail_next()
        self.show_key('big')

        p.retry_button.click()
        self.assertNotShown(p.error_widget)
        self.assertShown(p.loading_label)

        self.dispatcher.settle_all()
        self.assertEqual(p.model.rowCount(), 3)
        self.assertNotShown(p.error_widget)

    def test_failed_next_page_keeps_rows(self):
        p = self.panel
        self.show_key('big')
        self.api.fail_next()
        p.show_more()
        self.dispatcher.settle_all()

        self.assertShown(p.error_widget, p.view)
        self.assertEqual(p.model.rowCount(), 3)

        p.retry()
        request = self.dispatcher.requests[-1]
        self.assertEqual((request.limit, request.offset), (lib.BATCH_SIZE, 3))
        self.dispatcher.settle_all()
        self.assertEqual(p.model.rowCount(), 13)
        self.assertNotShown(p.error_widget)


class PanelSignalTests(PanelTestCase):

    def test_cleared_cache_reloads_mounted_key(self):
        self.show_key('big')
        self.cache.invalidate_all()
        self.assertEqual(self.panel.model.rowCount(), 0)
        self.assertEqual(len(self.dispatcher.pending), 1)
        self.dispatcher.settle_all()
        self.assertEqual(self.panel.model.rowCount(), 3)

    def test_unmounted_panel_does_not_reload(self):
        self.show_key('big')
        self.panel.set_key(None)
        self.cache.invalidate_all()
        self.assertEqual(self.dispatcher.pending, [])

    def test_invalidate_refreshes_rows(self):
        self.show_key('big')
        self.api.create('big', 999, '2025-06-01', title='Late fee')
        self.cache.invalidate('big')
        self.dispatcher.settle_all()
        self.assertEqual(self.panel.model.index(0, 0).data(TransactionRole.Transaction).title, 'Late fee')

    def test_add_button_requests_add(self):
        self.show_key('big')
        requested = []
        self.panel.addRequested.connect(requested.append)
        self.panel.add_button.click()
        self.assertEqual(requested, ['big'])

    def test_activating_row_requests_edit(self):
        self.show_key('big')
        requested = []
        self.panel.editRequested.connect(requested.append)
        self.panel.on_activated(self.panel.model.index(1, 0))
        self.assertEqual(requested, [self.api.entries['big'][1]])
