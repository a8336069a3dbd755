#!/usr/bin/env python3
"""
Unit tests for the labdata/repositories layer.

Run with:
    python -m pytest tests/test_repositories.py
"""
import json
import os
import shutil
import sys
import tempfile
import unittest

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from labdata.entities import AppSettings, Quote, decode_quote, encode_quote
from labdata.errors import StorageError
from labdata.repositories import (
    CollectionRepository, FavoritesRepository, KeyValueRepository, SettingsRepository,
)


class TmpDirMixin(unittest.TestCase):
    """Creates a fresh temp directory for each test and cd's into it."""

    def setUp(self):
        self.tmp = tempfile.mkdtemp()
        self._orig = os.getcwd()
        os.chdir(self.tmp)

    def tearDown(self):
        os.chdir(self._orig)
        shutil.rmtree(self.tmp, ignore_errors=True)

    def _path(self, *parts: str) -> str:
        return os.path.join(self.tmp, *parts)

    def _blocked_path(self, name: str) -> str:
        """A path whose parent is a regular file, so writes always fail."""
        blocker = self._path('blocker')
        with open(blocker, 'w') as f:
            f.write('')
        return os.path.join(blocker, name)


QUOTES = [
    Quote(1, 'Life isn’t about getting and having.', 'Kevin Kruse'),
    Quote(2, 'Whatever the mind can conceive, it can achieve.', 'Napoleon Hill'),
    Quote(3, 'Ціна успіху — наполеглива праця.', 'Невідомий'),
]


# ===========================================================================
# Key-value store
# ===========================================================================

class TestKeyValueRepository(TmpDirMixin):

    def _make(self):
        return KeyValueRepository(self._path('defaults.json'))

    def test_starts_empty(self):
        self.assertEqual(self._make().data, {})

    def test_missing_key_returns_default(self):
        self.assertEqual(self._make().load('nope', 42), 42)

    def test_round_trip_across_instances(self):
        for value in ([], {}, ['a', 'b'], {'x': 1, 'y': [True, None]}, 'text', 3.5):
            self._make().save('slot', value)
            self.assertEqual(self._make().load('slot'), value)

    def test_keys_are_independent(self):
        repo = self._make()
        repo.save('a', 1)
        repo.save('b', 2)
        self.assertEqual(self._make().data, {'a': 1, 'b': 2})

    def test_delete(self):
        repo = self._make()
        repo.save('a', 1)
        self.assertTrue(repo.delete('a'))
        self.assertFalse(repo.delete('a'))
        self.assertFalse(self._make().contains('a'))

    def test_corrupt_file_returns_empty(self):
        with open(self._path('defaults.json'), 'w') as f:
            f.write('NOT JSON')
        self.assertEqual(self._make().data, {})

    def test_non_object_file_returns_empty(self):
        with open(self._path('defaults.json'), 'w') as f:
            json.dump([1, 2], f)
        self.assertEqual(self._make().data, {})

    def test_creates_parent_directory(self):
        repo = KeyValueRepository(self._path('nested', 'dir', 'defaults.json'))
        repo.save('a', 1)
        self.assertTrue(os.path.exists(self._path('nested', 'dir', 'defaults.json')))

    def test_write_failure_raises_storage_error(self):
        repo = KeyValueRepository(self._blocked_path('defaults.json'))
        with self.assertRaises(StorageError):
            repo.save('a', 1)

    def test_unserialisable_value_raises_storage_error(self):
        with self.assertRaises(StorageError):
            self._make().save('a', object())

    def test_unserialisable_value_does_not_block_later_saves(self):
        repo = self._make()
        repo.save('a', 1)
        with self.assertRaises(StorageError):
            repo.save('a', object())
        self.assertEqual(repo.load('a'), 1)
        repo.save('b', 2)
        with open(self._path('defaults.json')) as f:
            self.assertEqual(json.load(f), {'a': 1, 'b': 2})

    def test_no_temp_files_left_behind(self):
        self._make().save('a', 1)
        self.assertEqual(os.listdir(self.tmp), ['defaults.json'])


# ===========================================================================
# Typed slots
# ===========================================================================

class TestFavoritesRepository(TmpDirMixin):

    def _store(self):
        return KeyValueRepository(self._path('defaults.json'))

    def test_absent_slot_is_empty_set(self):
        self.assertEqual(FavoritesRepository(self._store()).load(), set())

    def test_round_trip(self):
        FavoritesRepository(self._store()).save({'11007', '17222'})
        self.assertEqual(FavoritesRepository(self._store()).load(), {'11007', '17222'})

    def test_stored_as_json_array_of_strings(self):
        FavoritesRepository(self._store()).save({'2', '1'})
        with open(self._path('defaults.json')) as f:
            self.assertEqual(json.load(f)['favoriteCocktails'], ['1', '2'])

    def test_legacy_integers_are_normalised(self):
        self._store().save('favoriteCocktails', [11007, '17222'])
        self.assertEqual(FavoritesRepository(self._store()).load(), {'11007', '17222'})

    def test_invalid_slot_is_empty_set(self):
        self._store().save('favoriteCocktails', {'not': 'a list'})
        self.assertEqual(FavoritesRepository(self._store()).load(), set())


class TestSettingsRepository(TmpDirMixin):

    def _store(self):
        return KeyValueRepository(self._path('defaults.json'))

    def test_absent_slot_is_default(self):
        self.assertEqual(SettingsRepository(self._store()).load(), AppSettings.default())

    def test_round_trip(self):
        s = AppSettings(primary_color='green', font_name='Serif', dark_mode=True)
        SettingsRepository(self._store()).save(s)
        self.assertEqual(SettingsRepository(self._store()).load(), s)

    def test_undecodable_slot_falls_back_to_default(self):
        self._store().save('appSettings', {'fontSize': 'huge'})
        self.assertEqual(SettingsRepository(self._store()).load(), AppSettings.default())

    def test_shares_file_with_favorites(self):
        store = self._store()
        FavoritesRepository(store).save({'1'})
        SettingsRepository(store).save(AppSettings(dark_mode=True))
        with open(self._path('defaults.json')) as f:
            data = json.load(f)
        self.assertEqual(set(data), {'favoriteCocktails', 'appSettings'})


# ===========================================================================
# Collection store
# ===========================================================================

class TestCollectionRepository(TmpDirMixin):

    def _make(self, directory=None):
        return CollectionRepository(directory or self._path('docs'), encode_quote, decode_quote)

    def test_missing_file_loads_empty(self):
        repo = self._make()
        self.assertEqual(repo.load('saved_quotes.json'), [])
        self.assertFalse(repo.exists('saved_quotes.json'))

    def test_round_trip(self):
        repo = self._make()
        self.assertTrue(repo.save(QUOTES, 'saved_quotes.json'))
        self.assertEqual(self._make().load('saved_quotes.json'), QUOTES)

    def test_empty_collection_round_trip(self):
        repo = self._make()
        self.assertTrue(repo.save([], 'saved_quotes.json'))
        self.assertTrue(repo.exists('saved_quotes.json'))
        self.assertEqual(repo.load('saved_quotes.json'), [])

    def test_order_is_preserved(self):
        repo = self._make()
        repo.save(list(reversed(QUOTES)), 'q.json')
        self.assertEqual([q.id for q in repo.load('q.json')], [3, 2, 1])

    def test_file_is_json_array(self):
        repo = self._make()
        repo.save(QUOTES[:1], 'q.json')
        with open(self._path('docs', 'q.json'), encoding='utf-8') as f:
            self.assertEqual(json.load(f), [encode_quote(QUOTES[0])])

    def test_delete(self):
        repo = self._make()
        repo.save(QUOTES, 'q.json')
        self.assertTrue(repo.delete('q.json'))
        self.assertFalse(repo.exists('q.json'))
        self.assertFalse(repo.delete('q.json'))

    def test_corrupt_file_loads_empty(self):
        os.makedirs(self._path('docs'))
        with open(self._path('docs', 'q.json'), 'w') as f:
            f.write('[{"id": 1,')
        self.assertEqual(self._make().load('q.json'), [])

    def test_wrong_record_shape_loads_empty(self):
        os.makedirs(self._path('docs'))
        with open(self._path('docs', 'q.json'), 'w') as f:
            json.dump([{'id': 'x'}], f)
        self.assertEqual(self._make().load('q.json'), [])

    def test_non_array_loads_empty(self):
        os.makedirs(self._path('docs'))
        with open(self._path('docs', 'q.json'), 'w') as f:
            json.dump({'quotes': []}, f)
        self.assertEqual(self._make().load('q.json'), [])

    def test_names_cannot_escape_directory(self):
        repo = self._make()
        for name in ('../escape.json', 'sub/dir.json', '..', ''):
            self.assertFalse(repo.save(QUOTES, name))
            self.assertEqual(repo.load(name), [])
            self.assertFalse(repo.exists(name))
        self.assertFalse(os.path.exists(self._path('escape.json')))

    def test_save_failure_returns_false(self):
        repo = self._make(self._blocked_path('docs'))
        self.assertFalse(repo.save(QUOTES, 'q.json'))

    def test_rewrite_replaces_content(self):
        repo = self._make()
        repo.save(QUOTES, 'q.json')
        repo.save(QUOTES[:1], 'q.json')
        self.assertEqual(repo.load('q.json'), QUOTES[:1])


if __name__ == '__main__':
    unittest.main()
