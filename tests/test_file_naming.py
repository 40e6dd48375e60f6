"""Tests for archive and entry file names."""

import unittest

from exporters.file_naming import batch_archive_name, document_basename, entry_name, sanitize_filename_part


class TestFileNaming(unittest.TestCase):
    def test_unsafe_characters_replaced(self):
        self.assertEqual(sanitize_filename_part("Fire Bolt (Cantrip)"), "Fire_Bolt__Cantrip_")
        self.assertEqual(sanitize_filename_part("Épée/..\\x"), "_p_e____x")

    def test_missing_name_placeholder(self):
        self.assertEqual(sanitize_filename_part(None), "Unnamed")
        self.assertEqual(sanitize_filename_part(""), "Unnamed")

    def test_truncated_to_255(self):
        self.assertEqual(len(sanitize_filename_part('a' * 300)), 255)

    def test_document_basename(self):
        self.assertEqual(document_basename('Fireball', 'spell', 'abc123'), 'Fireball_spell_abc123')

    def test_document_basename_fallbacks(self):
        self.assertEqual(document_basename(None, None, None), 'Unnamed_UnknownType_UnknownID')

    def test_entry_and_archive_names(self):
        self.assertEqual(entry_name('Fireball_spell_abc123', 'yaml'), 'Fireball_spell_abc123.yaml')
        self.assertEqual(batch_archive_name('dnd5e.spells', 2), 'dnd5e_spells_batch_2.zip')


if __name__ == '__main__':
    unittest.main()
