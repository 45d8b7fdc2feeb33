"""
Tests for the variable store.
"""

import pytest

from nmri.errors import ErrorKind, StoreError
from nmri.variables import VariableStore


class TestVariableStore:
    """Test lookup, creation and in-place update."""

    def setup_method(self):
        self.store = VariableStore(max_variables=3)

    def test_empty(self):
        assert len(self.store) == 0
        assert self.store.find("x") is None
        assert self.store.get("x") is None
        assert "x" not in self.store

    def test_set_appends(self):
        assert self.store.set("x", 1.0) == 0
        assert self.store.set("y", 2.0) == 1
        assert self.store.get("y") == 2.0
        assert "x" in self.store

    def test_update_keeps_index(self):
        self.store.set("x", 1.0)
        self.store.set("y", 2.0)
        assert self.store.set("x", 5.0) == 0
        assert self.store.get("x") == 5.0
        assert len(self.store) == 2

    def test_names_are_case_sensitive(self):
        self.store.set("x", 1.0)
        assert self.store.get("X") is None

    def test_store_full(self):
        for name in ("a", "b", "c"):
            self.store.set(name, 0.0)
        with pytest.raises(StoreError) as e:
            self.store.set("d", 1.0)
        assert e.value.kind is ErrorKind.VARIABLE_STORE_FULL
        assert "d" not in self.store

    def test_update_when_full(self):
        for name in ("a", "b", "c"):
            self.store.set(name, 0.0)
        self.store.set("b", 9.0)
        assert self.store.get("b") == 9.0

    def test_snapshot_is_a_copy(self):
        self.store.set("x", 1.0)
        snapshot = self.store.snapshot()
        self.store.set("x", 2.0)
        assert snapshot == {"x": 1.0}

    def test_iteration_in_creation_order(self):
        self.store.set("b", 1.0)
        self.store.set("a", 2.0)
        assert [variable.name for variable in self.store] == ["b", "a"]
