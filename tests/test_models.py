"""Tests for data models."""

import unittest

from models import ExportConfig, ExportFormats, ExportRun, BatchResult, ValueKind, value_kind


class TestValueKind(unittest.TestCase):
    def test_kinds(self):
        self.assertIs(value_kind(None), ValueKind.NULL)
        self.assertIs(value_kind(True), ValueKind.BOOLEAN)
        self.assertIs(value_kind(3), ValueKind.NUMBER)
        self.assertIs(value_kind(2.5), ValueKind.NUMBER)
        self.assertIs(value_kind('text'), ValueKind.STRING)
        self.assertIs(value_kind([1]), ValueKind.ARRAY)
        self.assertIs(value_kind({'a': 1}), ValueKind.OBJECT)

    def test_unsupported_type(self):
        with self.assertRaises(TypeError):
            value_kind({1, 2})


class TestExportConfig(unittest.TestCase):
    def test_defaults(self):
        config = ExportConfig()
        self.assertEqual(config.batch_size, 100)
        self.assertEqual(config.formats.enabled(), ['yaml'])

    def test_rejects_invalid_settings(self):
        with self.assertRaises(ValueError):
            ExportConfig(batch_size=0)
        with self.assertRaises(ValueError):
            ExportConfig(batch_size=True)
        with self.assertRaises(ValueError):
            ExportConfig(formats=ExportFormats(yaml=False))
        with self.assertRaises(ValueError):
            ExportConfig(min_wait_ms=-1)


class TestExportRun(unittest.TestCase):
    def test_batches_for_collection(self):
        run = ExportRun(collection_keys=['a', 'b'], formats=ExportFormats())
        run.batches.append(BatchResult('a', 1, 'a_batch_1.zip', 2, 2, delivered=True))
        run.batches.append(BatchResult('b', 1, 'b_batch_1.zip', 1, 1))

        self.assertEqual([batch.filename for batch in run.batches_for('a')], ['a_batch_1.zip'])
        self.assertEqual(len(run.delivered_batches), 1)


if __name__ == '__main__':
    unittest.main()
