from __future__ import annotations

from typing import Dict, List, Tuple

from hypothesis import given, settings
from hypothesis import strategies as st

from gitprofiles.domain.profiles import ConfigItem, ConfigScope, compare_configs

KEYS = st.text(alphabet="abcdefghij.", min_size=1, max_size=6).filter(lambda key: key.strip("."))
VALUES = st.text(alphabet="xyz01 =", max_size=4)
SCOPES = st.sampled_from(list(ConfigScope))

# listings may repeat a key, as git does for multi-valued entries
LISTINGS = st.lists(st.tuples(KEYS, SCOPES, VALUES), max_size=12)

Composite = Tuple[str, ConfigScope]


def _items(listing: List[Tuple[str, ConfigScope, str]]) -> List[ConfigItem]:
    return [ConfigItem(key=key, value=value, scope=scope) for key, scope, value in listing]


def _state(listing: List[Tuple[str, ConfigScope, str]]) -> Dict[Composite, str]:
    return {(key, scope): value for key, scope, value in listing}


@settings(max_examples=100)
@given(listing=LISTINGS)
def test_compare_against_itself_is_empty(listing: List[Tuple[str, ConfigScope, str]]) -> None:
    items = _items(listing)
    assert compare_configs(items, items).is_empty()


@settings(max_examples=100)
@given(desired_listing=LISTINGS, current_listing=LISTINGS)
def test_comparison_partitions_composite_keys(
    desired_listing: List[Tuple[str, ConfigScope, str]],
    current_listing: List[Tuple[str, ConfigScope, str]],
) -> None:
    desired, current = _state(desired_listing), _state(current_listing)
    comparison = compare_configs(_items(desired_listing), _items(current_listing))

    added = [(item.key, item.scope) for item in comparison.to_add]
    updated = [(update.key, update.scope) for update in comparison.to_update]
    removed = [(item.key, item.scope) for item in comparison.to_remove]
    unchanged = {key for key in desired.keys() & current.keys() if desired[key] == current[key]}

    for bucket in (added, updated, removed):
        assert len(bucket) == len(set(bucket))
    assert set(added) == desired.keys() - current.keys()
    assert set(updated) == {key for key in desired.keys() & current.keys() if desired[key] != current[key]}
    assert set(removed) == current.keys() - desired.keys()
    assert set(added) | set(updated) | unchanged == set(desired)
    for item in comparison.to_add:
        assert item.value == desired[(item.key, item.scope)]
    for update in comparison.to_update:
        assert update.old_value == current[(update.key, update.scope)]
        assert update.new_value == desired[(update.key, update.scope)]


@settings(max_examples=100)
@given(desired_listing=LISTINGS, current_listing=LISTINGS)
def test_applying_comparison_converges(
    desired_listing: List[Tuple[str, ConfigScope, str]],
    current_listing: List[Tuple[str, ConfigScope, str]],
) -> None:
    desired = _state(desired_listing)
    comparison = compare_configs(_items(desired_listing), _items(current_listing))

    state = _state(current_listing)
    for item in comparison.to_add:
        state[(item.key, item.scope)] = item.value
    for update in comparison.to_update:
        state[(update.key, update.scope)] = update.new_value
    for item in comparison.to_remove:
        del state[(item.key, item.scope)]

    assert state == desired
    settled = [(key, scope, value) for (key, scope), value in state.items()]
    assert compare_configs(_items(desired_listing), _items(settled)).is_empty()
