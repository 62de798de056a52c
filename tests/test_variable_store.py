"""Tests for VariableStore bindings."""

from ccode.vars import Interpolator, VariableStore


class TestVariableStore:

    def test_set_replaces_values(self):
        store = VariableStore()
        store.set('A', "1", "2")
        store.set('A', "3")
        assert store.get_all('A') == ["3"]

    def test_set_many_wraps_strings(self):
        store = VariableStore({'A': "x", 'B': ["y", "z"]})
        assert store.get_all('A') == ["x"]
        assert store.get_all('B') == ["y", "z"]

    def test_append_and_prepend(self):
        store = VariableStore({'A': "b"})
        store.append('A', "c", "d")
        store.prepend('A', "a")
        store.append('NEW', "x")
        store.prepend('OTHER', "y")
        assert store.get_all('A') == ["a", "b", "c", "d"]
        assert store.get_all('NEW') == ["x"]
        assert store.get_all('OTHER') == ["y"]

    def test_soft_lookup_of_missing_keys(self):
        store = VariableStore()
        assert store.get_one('MISSING') == ""
        assert store.get_all('MISSING') is None
        assert not store.has('MISSING')
        assert 'MISSING' not in store

    def test_empty_binding_differs_from_missing(self):
        store = VariableStore()
        store.set('EMPTY')
        assert store.has('EMPTY')
        assert store.get_all('EMPTY') == []
        assert store.get_one('EMPTY') == ""

    def test_get_one_returns_first_value(self):
        assert VariableStore({'L': ["first", "second"]}).get_one('L') == "first"

    def test_keys_keep_insertion_order(self):
        store = VariableStore({'B': "1", 'A': "2"})
        store.set('C', "3")
        assert store.keys() == ['B', 'A', 'C']
        assert list(store) == ['B', 'A', 'C']
        assert len(store) == 3

    def test_copy_is_independent(self):
        store = VariableStore({'A': ["1"]})
        clone = store.copy()
        clone.append('A', "2")
        clone.set('B', "x")
        assert store.get_all('A') == ["1"]
        assert not store.has('B')

    def test_merge_never_overwrites(self):
        store = VariableStore({'A': "mine"})
        store.merge(VariableStore({'A': "theirs", 'B': "new"}))
        assert store.get_all('A') == ["mine"]
        assert store.get_all('B') == ["new"]

    def test_as_dict_and_cull(self):
        store = VariableStore({'A': ["1", "2"], 'B': "3"})
        store.set('EMPTY')
        assert store.as_dict() == {'A': "1", 'B': "3"}

        store.cull()
        assert store.keys() == ['A', 'B']

    def test_resolve_values_expands_in_place(self):
        store = VariableStore({
            'NAME': "core",
            'KINDS': ["a", "b"],
            'LIBS': ["lib$(NAME)_$(KINDS)", "extra"],
        })
        store.resolve_values(Interpolator(store))
        assert store.get_all('LIBS') == ["libcore_a", "libcore_b", "extra"]
