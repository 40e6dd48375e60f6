"""Tests for scrubbing records into their human-readable projection."""

import pytest

from config_loader import DEFAULT_EXCLUDED_KEYS, DEFAULT_EXCLUDED_SUBSTRINGS
from converters import ContentScrubber, prune_empty, scrub_record
from exporters import serialize_txt
from models import ExclusionConfig


def all_keys(value):
    """Collect every mapping key at any depth."""
    keys = set()
    if isinstance(value, dict):
        for key, item in value.items():
            keys.add(key)
            keys |= all_keys(item)
    elif isinstance(value, list):
        for item in value:
            keys |= all_keys(item)
    return keys


@pytest.fixture
def scrubber():
    return ContentScrubber(ExclusionConfig(
        excluded_keys=DEFAULT_EXCLUDED_KEYS,
        excluded_substrings=DEFAULT_EXCLUDED_SUBSTRINGS
    ))


@pytest.fixture
def item_record():
    return {
        '_id': 'a1b2c3d4e5f6g7h8',
        'name': 'Longsword',
        'type': 'weapon',
        'img': 'icons/weapons/swords/longsword.webp',
        'system': {
            'description': {'value': '<p>A versatile blade favoured by knights.</p>', 'chat': ''},
            'weight': 3,
            'equipped': True,
            'price': {'value': 0, 'denomination': 'gp'},
            'source': 'dnd5e.items'
        },
        'flags': {'midi-qol': {'onUseMacroName': 'ItemMacro'}},
        'effects': [],
        'items': [{'_id': 'q1', 'name': 'Scabbard', 'folder': None}],
        '_stats': {'coreVersion': '11.315'}
    }


def test_scrub_keeps_readable_content(scrubber, item_record):
    scrubbed = scrubber.scrub_and_prune(item_record)

    assert scrubbed == {
        'name': 'Longsword',
        'type': 'weapon',
        'system': {
            'description': 'A versatile blade favoured by knights.',
            'weight': 3,
            'price': {'denomination': 'gp'}
        },
        'items': [{'name': 'Scabbard'}]
    }


def test_excluded_keys_absent_at_every_depth(scrubber, item_record):
    scrubbed = scrubber.scrub(item_record)
    assert not all_keys(scrubbed) & set(DEFAULT_EXCLUDED_KEYS)


def test_only_excluded_and_empty_content_scrubs_to_empty(scrubber):
    record = {'_id': 'x', 'flags': {}, 'system': {'nested': {}, 'list': []}, 'sort': 100}

    scrubbed = scrubber.scrub_and_prune(record)

    assert scrubbed == {}
    assert serialize_txt(scrubbed) == ''


def test_arrays_scrubbed_element_wise(scrubber):
    record = {'tags': ['Fire damage', '@UUID[Item.abc]{Link}', 7, None, False]}
    assert scrubber.scrub(record) == {'tags': ['Fire damage', 7]}


def test_description_value_replaced_by_text(scrubber):
    record = {'description': {'value': '<h2>Effect</h2><p>The target glows.</p>', 'gm': 'Secret'}}
    assert scrubber.scrub(record) == {'description': 'Effect The target glows.'}


def test_description_without_string_value_walked_normally(scrubber):
    record = {'description': {'short': 'A brief note.'}}
    assert scrubber.scrub(record) == {'description': {'short': 'A brief note.'}}


def test_excluded_substring_drops_value():
    exclusions = ExclusionConfig(excluded_substrings=('spoiler',))
    scrubber = ContentScrubber(exclusions)
    record = {'note': 'This contains a spoiler for the finale', 'title': 'Finale'}
    assert scrubber.scrub(record) == {'title': 'Finale'}


def test_numbers_outside_range_dropped(scrubber):
    record = {'zero': 0, 'huge': 5e12, 'level': 3, 'ratio': 0.5}
    assert scrubber.scrub(record) == {'level': 3, 'ratio': 0.5}


def test_unsupported_value_type_raises(scrubber):
    with pytest.raises(TypeError):
        scrubber.scrub({'when': object()})


def test_prune_empty_is_idempotent():
    tree = {'a': {'b': []}, 'c': '   ', 'd': [{'e': {}}, 'x'], 'f': 0}

    once = prune_empty(tree)

    assert once == {'d': ['x'], 'f': 0}
    assert prune_empty(once) == once


def test_prune_empty_of_empty_tree():
    assert prune_empty({'a': {'b': {'c': []}}}) == {}


def test_scrub_record_helper():
    assert scrub_record({'_id': 'x1', 'name': 'Longsword'}, excluded_keys=['_id']) == {'name': 'Longsword'}
