"""Tests for the YAML, JSON and TXT serializers."""

import json
import unittest

from converters import ContentScrubber
from exporters.serializers import dump_json, dump_yaml, render_document, serialize_txt
from models import Document, ExclusionConfig, ExportFormats


class TestStructuredDumps(unittest.TestCase):
    def test_yaml_block_style_in_insertion_order(self):
        self.assertEqual(dump_yaml({'name': 'Fireball', 'level': 3}), "name: Fireball\nlevel: 3\n")

    def test_yaml_nested_and_unicode(self):
        yaml_text = dump_yaml({'name': 'Épée', 'system': {'weight': 2}})
        self.assertIn('Épée', yaml_text)
        self.assertIn('system:\n  weight: 2', yaml_text)

    def test_json_indented_and_unicode(self):
        data = {'name': 'Épée', 'tags': ['a', 'b']}
        json_text = dump_json(data)
        self.assertEqual(json.loads(json_text), data)
        self.assertIn('\n  "name": "Épée"', json_text)


class TestSerializeTxt(unittest.TestCase):
    def test_nested_mapping_and_list(self):
        tree = {'name': 'Fireball', 'system': {'level': 3, 'school': 'evo'}, 'tags': ['a', 'b']}
        self.assertEqual(
            serialize_txt(tree),
            "name: Fireball\nsystem:\n  level: 3\n  school: evo\ntags:\n  - a\n  - b"
        )

    def test_multiline_value_continuation_indented(self):
        self.assertEqual(
            serialize_txt({'description': 'Line one\n\nLine two'}),
            "description: Line one\n\n  Line two"
        )

    def test_integer_valued_float(self):
        self.assertEqual(serialize_txt({'weight': 3.0, 'ratio': 0.5}), "weight: 3\nratio: 0.5")

    def test_empty_tree(self):
        self.assertEqual(serialize_txt({}), '')


class TestRenderDocument(unittest.TestCase):
    def setUp(self):
        self.document = Document(
            id='abc123',
            data={'_id': 'abc123', 'name': 'Fireball', 'system': {'level': 3}},
            name='Fireball',
            kind='spell'
        )
        self.scrubber = ContentScrubber(ExclusionConfig(excluded_keys=('_id',)))

    def test_all_formats_in_order(self):
        rendered = render_document(self.document, ExportFormats(yaml=True, json=True, txt=True), self.scrubber)

        self.assertEqual([extension for extension, _ in rendered], ['yaml', 'json', 'txt'])
        self.assertIn('_id: abc123', rendered[0][1])
        self.assertEqual(json.loads(rendered[1][1])['_id'], 'abc123')
        self.assertEqual(rendered[2][1], "name: Fireball\nsystem:\n  level: 3")

    def test_yaml_only_by_default(self):
        rendered = render_document(self.document, ExportFormats())
        self.assertEqual([extension for extension, _ in rendered], ['yaml'])

    def test_txt_requires_scrubber(self):
        with self.assertRaises(ValueError):
            render_document(self.document, ExportFormats(yaml=False, txt=True))


if __name__ == '__main__':
    unittest.main()
