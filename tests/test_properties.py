# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Property tests: index coherence holds after every public operation."""

import string
from dataclasses import dataclass

from hypothesis import given
from hypothesis import strategies as st

from dualset import DualHashSet


@dataclass
class Entry:
    name: str
    value: int = 0

    def key(self) -> str:
        return self.name


# ---------- Strategies ----------

KEY = st.text(alphabet=string.ascii_lowercase, min_size=1, max_size=4)

ENTRIES = st.lists(
    st.builds(Entry, name=KEY, value=st.integers(0, 100)), max_size=20
)


def coherent(dual: DualHashSet) -> bool:
    return all(dual.get(item.key()) is item for item in list(dual))


# ---------- Properties ----------


@given(entries=ENTRIES)
def test_insert_keeps_one_entry_per_key(entries):
    dual = DualHashSet(entries)
    assert len(dual) == len({e.name for e in entries})
    assert coherent(dual)
    for entry in entries:
        assert dual[entry.name].name == entry.name


@given(entries=ENTRIES, new_key=KEY)
def test_modify_relocates(entries, new_key):
    dual = DualHashSet(entries)
    for key in list(dual.keys()):
        if key not in dual:
            continue
        dual.modify(key, lambda e: setattr(e, "name", new_key))
        assert new_key in dual
        if key != new_key:
            assert key not in dual
        assert coherent(dual)


@given(entries=ENTRIES, suffix=KEY)
def test_retain_keeps_exactly_accepted(entries, suffix):
    dual = DualHashSet(entries)
    expected = {
        e.name + suffix for e in dual if e.value % 3 != 0
    }

    def rename_and_filter(entry):
        entry.name += suffix
        return entry.value % 3 != 0

    dual.retain(rename_and_filter)
    assert set(dual.keys()) == expected
    assert coherent(dual)


@given(entries=ENTRIES, new_key=KEY)
def test_guard_matches_modify(entries, new_key):
    guarded = DualHashSet(entries)
    modified = guarded.copy()
    for key in list(guarded.keys())[:1]:
        with guarded.get_mut(key) as entry:
            entry.name = new_key
        modified.modify(key, lambda e: setattr(e, "name", new_key))
    assert sorted(guarded.keys()) == sorted(modified.keys())
    assert coherent(guarded)
