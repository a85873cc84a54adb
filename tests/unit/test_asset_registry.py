"""
test_asset_registry.py - Unit tests for AssetRegistry

Tests:
- Registration and duplicate rejection
- Unified NotFound policy for reads
- Existence flag
"""

import pytest
from dataclasses import replace

from provenance import AssetRegistry, AlreadyExists, NotFound
from tests.builders import make_asset


class TestRegister:

    def test_register_and_get(self):
        registry = AssetRegistry()
        stored = registry.register(make_asset("A1"))
        assert registry.get("A1") is stored
        assert registry.contains("A1")
        assert len(registry) == 1

    def test_duplicate_keeps_first(self):
        registry = AssetRegistry()
        first = registry.register(make_asset("A1", quantity=10))
        with pytest.raises(AlreadyExists):
            registry.register(make_asset("A1", quantity=99))
        assert registry.get("A1") == first
        assert len(registry) == 1

    def test_exists_flag_forced_true(self):
        registry = AssetRegistry()
        stored = registry.register(replace(make_asset("A1"), exists=False))
        assert stored.exists is True

    def test_list_ids_in_registration_order(self):
        registry = AssetRegistry()
        for asset_id in ["Z", "M", "A"]:
            registry.register(make_asset(asset_id))
        assert registry.list_ids() == ["Z", "M", "A"]


class TestExistencePolicy:

    def test_get_absent_raises(self):
        with pytest.raises(NotFound, match="ghost"):
            AssetRegistry().get("ghost")

    def test_require_absent_raises(self):
        with pytest.raises(NotFound):
            AssetRegistry().require("ghost")

    def test_contains_absent(self):
        assert not AssetRegistry().contains("ghost")
