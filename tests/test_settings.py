# tests/test_settings.py
"""
Unit tests for BudgetBar.settings.lib
(covers validators, ConfigPaths and SettingsAPI).

Run with:
    python -m unittest tests.test_settings
"""
import json
from typing import Any, Dict

from BudgetBar.settings import lib
from BudgetBar.settings.lib import SettingsAPI, is_valid_url, is_valid_yearmonth
from BudgetBar.status import status
from BudgetBar.ui.actions import signals
from tests.base import BaseTestCase


def minimal_client() -> Dict[str, Any]:
    return {
        'api': {'base_url': 'http://budget.test/api/v1', 'timeout': 5},
        'metadata': {
            'name': 'Test',
            'locale': 'en_GB',
            'currency': 'GBP',
            'yearmonth': '2025-05',
            'theme': 'dark',
        },
    }


class ValidatorTests(BaseTestCase):

    def test_yearmonth(self):
        self.assertTrue(is_valid_yearmonth(''))
        self.assertTrue(is_valid_yearmonth('2025-01'))
        self.assertTrue(is_valid_yearmonth('2025-12'))
        self.assertFalse(is_valid_yearmonth('2025-13'))
        self.assertFalse(is_valid_yearmonth('2025-1'))
        self.assertFalse(is_valid_yearmonth('25-01'))

    def test_url(self):
        self.assertTrue(is_valid_url('http://localhost:3000/api/v1'))
        self.assertTrue(is_valid_url('https://budget.example.com'))
        self.assertFalse(is_valid_url('ftp://budget.example.com'))
        self.assertFalse(is_valid_url('localhost:3000'))

    def test_paging_constants(self):
        self.assertEqual(lib.INITIAL_COUNT, 3)
        self.assertEqual(lib.BATCH_SIZE, 10)
        self.assertGreater(lib.SCROLL_CONTAINER_MAX_HEIGHT, lib.SCROLL_LOAD_THRESHOLD)


class ConfigPathsTests(BaseTestCase):

    def test_template_is_copied(self):
        self.assertTrue(self.config_paths.client_template.exists())
        self.assertTrue(lib.settings.client_path.exists())
        with lib.settings.client_path.open('r', encoding='utf-8') as f:
            data = json.load(f)
        with self.config_paths.client_template.open('r', encoding='utf-8') as f:
            self.assertEqual(data, json.load(f))

    def test_revert_client_to_template(self):
        lib.settings.client_path.write_text('{}', encoding='utf-8')
        lib.settings.revert_client_to_template()
        lib.settings.load_client()
        self.assertEqual(lib.settings['theme'], 'light')


class SettingsAPITests(BaseTestCase):

    def write_client(self, data: Any) -> None:
        with lib.settings.client_path.open('w', encoding='utf-8') as f:
            json.dump(data, f)

    def test_defaults(self):
        self.assertEqual(lib.settings['locale'], 'pl_PL')
        self.assertEqual(lib.settings['currency'], 'PLN')
        self.assertEqual(lib.settings['yearmonth'], '')
        self.assertEqual(lib.settings.get_section('api')['base_url'], 'http://localhost:3000/api/v1')

    def test_get_settings_is_shared(self):
        self.assertIs(lib.get_settings(), lib.settings)
        lib.settings = None
        created = lib.get_settings()
        self.assertIsInstance(created, SettingsAPI)
        self.assertIs(lib.get_settings(), created)

    def test_load_accepts_int_timeout(self):
        self.write_client(minimal_client())
        data = lib.settings.load_client()
        self.assertEqual(data['api']['timeout'], 5.0)
        self.assertIsInstance(data['api']['timeout'], float)
        self.assertEqual(lib.settings['theme'], 'dark')

    def test_load_missing_section(self):
        data = minimal_client()
        del data['api']
        self.write_client(data)
        with self.assertRaises(status.ClientConfigInvalidException):
            lib.settings.load_client()

    def test_load_missing_metadata_key(self):
        data = minimal_client()
        del data['metadata']['theme']
        self.write_client(data)
        with self.assertRaises(status.ClientConfigInvalidException):
            lib.settings.load_client()

    def test_load_bad_url(self):
        data = minimal_client()
        data['api']['base_url'] = 'not a url'
        self.write_client(data)
        with self.assertRaises(status.ClientConfigInvalidException):
            lib.settings.load_client()

    def test_load_bad_json(self):
        lib.settings.client_path.write_text('{', encoding='utf-8')
        with self.assertRaises(status.ClientConfigInvalidException):
            lib.settings.load_client()

    def test_load_missing_file(self):
        lib.settings.client_path.unlink()
        with self.assertRaises(status.ClientConfigNotFoundException):
            lib.settings.load_client()

    def test_setitem_persists_and_emits(self):
        changed = []
        on_changed = lambda key, value: changed.append((key, value))
        signals.metadataChanged.connect(on_changed)
        try:
            lib.settings['yearmonth'] = '2025-07'
        finally:
            signals.metadataChanged.disconnect(on_changed)

        self.assertEqual(changed, [('yearmonth', '2025-07')])
        self.assertEqual(SettingsAPI()['yearmonth'], '2025-07')

    def test_setitem_blocked_signals(self):
        changed = []
        on_changed = lambda key, value: changed.append(key)
        signals.metadataChanged.connect(on_changed)
        lib.settings.block_signals(True)
        try:
            lib.settings['name'] = 'Quiet'
        finally:
            lib.settings.block_signals(False)
            signals.metadataChanged.disconnect(on_changed)
        self.assertEqual(changed, [])
        self.assertEqual(lib.settings['name'], 'Quiet')

    def test_setitem_rejects_invalid(self):
        with self.assertRaises(KeyError):
            lib.settings['unknown'] = 'x'
        with self.assertRaises(ValueError):
            lib.settings['yearmonth'] = '2025-99'
        self.assertEqual(lib.settings['yearmonth'], '')

    def test_getitem_rejects_unknown(self):
        with self.assertRaises(KeyError):
            lib.settings['unknown']

    def test_set_section(self):
        sections = []
        on_section = lambda name: sections.append(name)
        signals.configSectionChanged.connect(on_section)
        try:
            lib.settings.set_section('api', {'base_url': 'https://budget.test', 'timeout': 3.0})
        finally:
            signals.configSectionChanged.disconnect(on_section)

        self.assertEqual(sections, ['api'])
        self.assertEqual(SettingsAPI().get_section('api')['base_url'], 'https://budget.test')

    def test_set_section_rolls_back_invalid(self):
        with self.assertRaises(ValueError):
            lib.settings.set_section('api', {'base_url': 'nope', 'timeout': 3.0})
        self.assertEqual(lib.settings.get_section('api')['base_url'], 'http://localhost:3000/api/v1')

        with self.assertRaises(ValueError):
            lib.settings.set_section('unknown', {})

    def test_revert_section(self):
        lib.settings['name'] = 'Changed'
        lib.settings.revert_section('metadata')
        self.assertEqual(lib.settings['name'], 'Household Budget')
        self.assertEqual(SettingsAPI()['name'], 'Household Budget')
