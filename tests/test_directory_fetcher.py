"""Tests for reading collections from a directory tree."""

import json

import pytest

from fetchers import CollectionNotFoundError, DirectoryFetcher, DocumentFetchError, FetcherFactory
from models import CollectionInfo


@pytest.fixture
def source_dir(tmp_path):
    spells = tmp_path / 'spells'
    spells.mkdir()
    (spells / 'collection.yaml').write_text("label: Spells\ndocument_kind: spell\n", encoding='utf-8')
    (spells / 'fireball.json').write_text(
        json.dumps({'_id': 'abc123', 'name': 'Fireball', 'system': {'level': 3}}), encoding='utf-8'
    )
    (spells / 'bless.yaml').write_text("name: Bless\nreleased: 2024-01-01\n", encoding='utf-8')
    (spells / 'notes.txt').write_text("not a document", encoding='utf-8')

    items = tmp_path / 'items'
    items.mkdir()
    (items / 'sword.yml').write_text("name: Longsword\ntype: weapon\n", encoding='utf-8')
    (items / 'broken.json').write_text("{not json", encoding='utf-8')
    (items / 'listing.yaml').write_text("- a\n- b\n", encoding='utf-8')

    (tmp_path / '.cache').mkdir()
    return tmp_path


@pytest.fixture
def fetcher(source_dir):
    return DirectoryFetcher({'source': {'directory': str(source_dir)}})


def test_list_collections(fetcher):
    assert fetcher.list_collections() == [
        CollectionInfo(key='items', label='items'),
        CollectionInfo(key='spells', label='Spells')
    ]


def test_resolve_collection_orders_by_filename(fetcher):
    collection = fetcher.resolve_collection('spells')

    assert collection.label == 'Spells'
    assert collection.document_ids == ('bless', 'fireball')


def test_explicit_document_order(source_dir):
    (source_dir / 'spells' / 'collection.yaml').write_text(
        "label: Spells\ndocuments: [fireball, bless]\n", encoding='utf-8'
    )
    fetcher = DirectoryFetcher({'source': {'directory': str(source_dir)}})

    assert fetcher.resolve_collection('spells').document_ids == ('fireball', 'bless')


def test_fetch_document_uses_record_identity(fetcher):
    document = fetcher.fetch_document('spells', 'fireball')

    assert document.id == 'abc123'
    assert document.name == 'Fireball'
    assert document.kind == 'spell'
    assert document.collection_key == 'spells'
    assert document.data['system'] == {'level': 3}


def test_fetch_document_falls_back_to_file_stem(fetcher):
    document = fetcher.fetch_document('items', 'sword')

    assert document.id == 'sword'
    assert document.kind == 'weapon'


@pytest.mark.parametrize('record_id', ['../../escape', 'nested/name', 'back\\slash'])
def test_record_id_with_path_separator_rejected(source_dir, fetcher, record_id):
    (source_dir / 'items' / 'shield.json').write_text(
        json.dumps({'_id': record_id, 'name': 'Shield'}), encoding='utf-8'
    )

    with pytest.raises(DocumentFetchError):
        fetcher.fetch_document('items', 'shield')


def test_yaml_dates_become_strings(fetcher):
    assert fetcher.fetch_document('spells', 'bless').data['released'] == '2024-01-01'


@pytest.mark.parametrize('key', ['missing', '../spells', '', '.'])
def test_unknown_collection(fetcher, key):
    with pytest.raises(CollectionNotFoundError):
        fetcher.resolve_collection(key)


@pytest.mark.parametrize('document_id', ['missing', 'broken', 'listing', '../spells/fireball'])
def test_unreadable_documents(fetcher, document_id):
    with pytest.raises(DocumentFetchError):
        fetcher.fetch_document('items', document_id)


def test_requires_existing_directory(tmp_path):
    with pytest.raises(ValueError):
        DirectoryFetcher({'source': {}})
    with pytest.raises(FileNotFoundError):
        DirectoryFetcher({'source': {'directory': str(tmp_path / 'absent')}})


def test_factory(source_dir):
    config = {'source': {'type': 'directory', 'directory': str(source_dir)}}
    assert isinstance(FetcherFactory.create_fetcher(config), DirectoryFetcher)

    with pytest.raises(ValueError):
        FetcherFactory.create_fetcher({'source': {'type': 'http'}})
