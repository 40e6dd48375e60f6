"""Tests for configuration loading, validation and merging."""

import argparse
import unittest

import pytest

from config_loader import (
    DEFAULT_EXCLUDED_KEYS,
    DEFAULT_EXCLUDED_SUBSTRINGS,
    ConfigLoader,
    build_export_config,
    get_nested,
    parse_list_setting
)
from models import ExportFormats


def cli_args(**overrides):
    values = {
        'source_dir': None,
        'output_dir': None,
        'collections': None,
        'yaml': None,
        'json': None,
        'txt': None,
        'batch_size': None,
        'min_wait_ms': None,
        'exclude_keys': None,
        'exclude_substrings': None,
        'report': None,
        'no_progress': False,
        'verbose': 0
    }
    values.update(overrides)
    return argparse.Namespace(**values)


def test_load_substitutes_environment(tmp_path, monkeypatch):
    monkeypatch.setenv('COMPENDIUM_SOURCE_DIR', '/data/packs')
    config_file = tmp_path / 'config.yaml'
    config_file.write_text(
        "source:\n  directory: ${COMPENDIUM_SOURCE_DIR}\nexport:\n  output_directory: ${UNSET_VARIABLE_XYZ}\n",
        encoding='utf-8'
    )

    config = ConfigLoader.load(str(config_file))

    assert config['source']['directory'] == '/data/packs'
    assert config['export']['output_directory'] == '${UNSET_VARIABLE_XYZ}'


def test_load_empty_file(tmp_path):
    config_file = tmp_path / 'config.yaml'
    config_file.write_text('', encoding='utf-8')
    assert ConfigLoader.load(str(config_file)) == {}


def test_load_rejects_non_mapping(tmp_path):
    config_file = tmp_path / 'config.yaml'
    config_file.write_text('- a\n- b\n', encoding='utf-8')
    with pytest.raises(ValueError):
        ConfigLoader.load(str(config_file))


def test_load_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        ConfigLoader.load(str(tmp_path / 'missing.yaml'))


class TestValidate(unittest.TestCase):
    def test_empty_config_is_valid(self):
        ConfigLoader.validate({})

    def test_invalid_batch_sizes(self):
        for batch_size in (0, -1, 'ten', 2.5, True):
            with self.subTest(batch_size=batch_size):
                with self.assertRaises(ValueError):
                    ConfigLoader.validate({'export': {'batch_size': batch_size}})

    def test_valid_batch_size(self):
        ConfigLoader.validate({'export': {'batch_size': 1}})

    def test_no_format_enabled(self):
        with self.assertRaises(ValueError):
            ConfigLoader.validate({'export': {'formats': {'yaml': False}}})

    def test_unknown_format(self):
        with self.assertRaises(ValueError):
            ConfigLoader.validate({'export': {'formats': {'csv': True}}})

    def test_negative_wait(self):
        with self.assertRaises(ValueError):
            ConfigLoader.validate({'export': {'min_wait_ms': -1}})

    def test_malformed_exclusion_lists(self):
        with self.assertRaises(ValueError):
            ConfigLoader.validate({'export': {'excluded_keys': 5}})
        with self.assertRaises(ValueError):
            ConfigLoader.validate({'export': {'excluded_substrings': ['ok', 3]}})

    def test_unknown_source_type(self):
        with self.assertRaises(ValueError):
            ConfigLoader.validate({'source': {'type': 'http'}})


class TestListSettings(unittest.TestCase):
    def test_parse_comma_separated(self):
        self.assertEqual(parse_list_setting(" _id, uuid,, flags "), ['_id', 'uuid', 'flags'])

    def test_parse_list_and_none(self):
        self.assertEqual(parse_list_setting([' a ', '', 'b']), ['a', 'b'])
        self.assertEqual(parse_list_setting(None), [])

    def test_default_lists(self):
        self.assertEqual(len(DEFAULT_EXCLUDED_KEYS), 31)
        self.assertEqual(len(DEFAULT_EXCLUDED_SUBSTRINGS), 10)
        self.assertIn('flags', DEFAULT_EXCLUDED_KEYS)
        self.assertIn('@UUID[', DEFAULT_EXCLUDED_SUBSTRINGS)


class TestBuildExportConfig(unittest.TestCase):
    def test_defaults(self):
        export_config = build_export_config({})

        self.assertEqual(export_config.formats, ExportFormats(yaml=True, json=False, txt=False))
        self.assertEqual(export_config.batch_size, 100)
        self.assertEqual(export_config.min_wait_ms, 0)
        self.assertEqual(export_config.exclusions.excluded_keys, DEFAULT_EXCLUDED_KEYS)
        self.assertEqual(export_config.exclusions.excluded_substrings, DEFAULT_EXCLUDED_SUBSTRINGS)

    def test_custom_lists_replace_defaults(self):
        export_config = build_export_config({
            'export': {'excluded_keys': 'secret, notes', 'excluded_substrings': ''}
        })

        self.assertEqual(export_config.exclusions.excluded_keys, ('secret', 'notes'))
        self.assertEqual(export_config.exclusions.excluded_substrings, ())

    def test_invalid_settings_raise(self):
        with self.assertRaises(ValueError):
            build_export_config({'export': {'batch_size': 0}})


class TestMergeWithArgs(unittest.TestCase):
    def test_cli_overrides_file(self):
        config = {
            'export': {'batch_size': 10, 'formats': {'yaml': True}},
            'source': {'directory': 'from-file'}
        }
        args = cli_args(
            source_dir='from-cli',
            collections='a,b',
            yaml=False,
            json=True,
            batch_size=50,
            exclude_keys='x,y',
            no_progress=True,
            verbose=2
        )

        merged = ConfigLoader.merge_with_args(config, args)

        self.assertEqual(merged['source']['directory'], 'from-cli')
        self.assertEqual(merged['export']['collections'], 'a,b')
        self.assertEqual(merged['export']['formats'], {'yaml': False, 'json': True})
        self.assertEqual(merged['export']['batch_size'], 50)
        self.assertEqual(merged['export']['excluded_keys'], 'x,y')
        self.assertFalse(merged['export']['show_progress'])
        self.assertEqual(merged['logging']['level'], 'DEBUG')
        # Original config untouched
        self.assertEqual(config['export']['batch_size'], 10)

    def test_unset_args_keep_file_values(self):
        config = {'export': {'batch_size': 10, 'min_wait_ms': 5}}

        merged = ConfigLoader.merge_with_args(config, cli_args())

        self.assertEqual(merged['export']['batch_size'], 10)
        self.assertEqual(merged['export']['min_wait_ms'], 5)
        self.assertNotIn('level', merged['logging'])


def test_get_nested():
    config = {'export': {'formats': {'txt': True}}}
    assert get_nested(config, 'export.formats.txt') is True
    assert get_nested(config, 'export.missing', 'fallback') == 'fallback'
    assert get_nested(config, 'export.formats.txt.deeper') is None
