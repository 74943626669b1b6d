# tests/test_settings.py
"""
Unit tests for LogViewer.settings.lib
(covers the schema validator, JSON loading and the Settings accessors).

Run with:
    python -m unittest tests.test_settings
"""
import json
import os
import tempfile
from datetime import datetime, timedelta
from pathlib import Path
from unittest import mock

from LogViewer.core.source import StaticLogSource
from LogViewer.core.state import FilterStateReconciler
from LogViewer.settings import lib
from LogViewer.status import status
from tests.base import BaseTestCase


class ValidateSettingsTests(BaseTestCase):

    def test_defaults_are_valid(self):
        lib.validate_settings(lib.DEFAULT_SETTINGS)
        lib.validate_settings({})

    def test_rejects_non_dict(self):
        with self.assertRaises(status.ConfigInvalidException):
            lib.validate_settings(['since_seconds'])  # type: ignore[arg-type]

    def test_rejects_unknown_keys(self):
        with self.assertRaises(status.ConfigInvalidException):
            lib.validate_settings({'theme': 'dark'})

    def test_rejects_wrong_types(self):
        for data in (
                {'since_seconds': '3600'},
                {'since_seconds': True},
                {'default_subsystems': 'myapp'},
                {'category_implies_subsystem': 1},
                {'app_name': None},
        ):
            with self.subTest(data=data):
                with self.assertRaises(status.ConfigInvalidException):
                    lib.validate_settings(data)

    def test_rejects_values_below_minimum(self):
        with self.assertRaises(status.ConfigInvalidException):
            lib.validate_settings({'since_seconds': -1})
        with self.assertRaises(status.ConfigInvalidException):
            lib.validate_settings({'tank_capacity': 0})

    def test_rejects_non_string_subsystems(self):
        with self.assertRaises(status.ConfigInvalidException):
            lib.validate_settings({'default_subsystems': ['myapp', 3]})

    def test_rejects_unknown_locale(self):
        with self.assertRaises(status.ConfigInvalidException):
            lib.validate_settings({'locale': 'xx_XX'})
        lib.validate_settings({'locale': 'de_DE'})

    def test_error_carries_status(self):
        with self.assertRaises(status.ConfigInvalidException) as ctx:
            lib.validate_settings({'theme': 'dark'})
        self.assertEqual(ctx.exception.status, status.Status.ConfigInvalid)


class LoadSettingsTests(BaseTestCase):

    def _write(self, data, name='settings.json') -> Path:
        path = self.tmp_dir / name
        path.write_text(json.dumps(data), encoding='utf-8')
        return path

    def test_no_path_returns_defaults(self):
        with mock.patch.dict(os.environ, {}, clear=False):
            os.environ.pop(lib.CONFIG_ENV_KEY, None)
            self.assertEqual(lib.load_settings(), lib.DEFAULT_SETTINGS)

    def test_merges_file_over_defaults(self):
        path = self._write({'since_seconds': 60, 'default_subsystems': ['myapp']})
        data = lib.load_settings(str(path))
        self.assertEqual(data['since_seconds'], 60)
        self.assertEqual(data['default_subsystems'], ['myapp'])
        self.assertEqual(data['locale'], lib.DEFAULT_SETTINGS['locale'])

    def test_reads_path_from_environment(self):
        path = self._write({'app_name': 'Demo'})
        with mock.patch.dict(os.environ, {lib.CONFIG_ENV_KEY: str(path)}):
            self.assertEqual(lib.load_settings()['app_name'], 'Demo')

    def test_missing_file(self):
        with self.assertRaises(status.ConfigInvalidException):
            lib.load_settings(str(self.tmp_dir / 'missing.json'))

    def test_invalid_json(self):
        path = self.tmp_dir / 'broken.json'
        path.write_text('{"since_seconds": ', encoding='utf-8')
        with self.assertRaises(status.ConfigInvalidException):
            lib.load_settings(str(path))

    def test_invalid_values(self):
        path = self._write({'since_seconds': 'soon'})
        with self.assertRaises(status.ConfigInvalidException):
            lib.load_settings(str(path))

    def test_defaults_are_not_shared(self):
        data = lib.load_settings()
        data['default_subsystems'].append('changed')
        self.assertEqual(lib.DEFAULT_SETTINGS['default_subsystems'], [])


class SettingsTests(BaseTestCase):

    def test_defaults(self):
        settings = lib.Settings()
        self.assertEqual(settings.since_seconds, 3600)
        self.assertEqual(settings.default_subsystems, [])
        self.assertEqual(settings.locale, 'en_US')
        self.assertEqual(settings.app_name, '')
        self.assertTrue(settings.category_implies_subsystem)
        self.assertEqual(settings.tank_capacity, 10000)
        self.assertEqual(settings.export_dir, Path(tempfile.gettempdir()))

    def test_overrides(self):
        settings = lib.Settings({
            'since_seconds': 10,
            'default_subsystems': ['a', 'b'],
            'category_implies_subsystem': False,
            'export_dir': str(self.tmp_dir),
        })
        self.assertEqual(settings.since_seconds, 10)
        self.assertEqual(settings.default_subsystems, ['a', 'b'])
        self.assertFalse(settings.category_implies_subsystem)
        self.assertEqual(settings.export_dir, self.tmp_dir)

    def test_invalid_data(self):
        with self.assertRaises(status.ConfigInvalidException):
            lib.Settings({'since_seconds': -5})

    def test_getitem(self):
        settings = lib.Settings()
        self.assertEqual(settings['locale'], 'en_US')
        with self.assertRaises(KeyError):
            settings['theme']

    def test_load(self):
        path = self.tmp_dir / 'settings.json'
        path.write_text(json.dumps({'locale': 'fr_FR'}), encoding='utf-8')
        self.assertEqual(lib.Settings.load(str(path)).locale, 'fr_FR')

    def test_default_subsystems_seed_the_reconciler(self):
        settings = lib.Settings({'default_subsystems': ['configured']})
        reconciler = FilterStateReconciler(StaticLogSource(), default_subsystems=['given'], settings=settings)
        self.assertEqual(reconciler.state.selected_subsystems, {'configured', 'given'})
        self.assertEqual(reconciler.state.default_subsystems, frozenset({'configured', 'given'}))

    def test_since_seconds_sets_the_window(self):
        settings = lib.Settings({'since_seconds': 60})
        before = datetime.now()
        reconciler = FilterStateReconciler(StaticLogSource(), settings=settings)
        self.assertLessEqual(reconciler.since, before - timedelta(seconds=60) + timedelta(seconds=1))
        self.assertGreaterEqual(reconciler.since, before - timedelta(seconds=61))
