"""
conftest.py - Shared pytest fixtures for provenance tests

Provides common fixtures used across unit, conformance and functional tests:
- Empty ledgers and bare stores
- Ledgers with a registered asset, with a root, and with a small tree
"""

import pytest

from provenance import ProvenanceLedger, AssetRegistry, TransactionLedger, StageRecorder

from tests.builders import register, add_root, add_child, add_stage, make_asset


# =============================================================================
# BASIC FIXTURES
# =============================================================================

@pytest.fixture
def empty_ledger():
    """Fresh ledger with no registrations."""
    return ProvenanceLedger("test", verbose=False)


@pytest.fixture
def registered_ledger(empty_ledger):
    """Ledger with asset A1 registered and no transactions."""
    register(empty_ledger, "A1")
    return empty_ledger


@pytest.fixture
def rooted_ledger(registered_ledger):
    """Ledger with asset A1 and its root transaction T0."""
    add_root(registered_ledger, "A1", "T0")
    return registered_ledger


@pytest.fixture
def tree_ledger(rooted_ledger):
    """
    Ledger with asset A1 holding the tree

        [0] T0
         ├── [1] T1
         │    └── [3] T3
         └── [2] T2

    and one stage on T1.
    """
    add_child(rooted_ledger, 0, "A1", "T1")
    add_child(rooted_ledger, 0, "A1", "T2")
    add_child(rooted_ledger, 1, "A1", "T3")
    add_stage(rooted_ledger, 1, "A1", 1, ["temp"], ["4C"])
    return rooted_ledger


# =============================================================================
# STORE FIXTURES
# =============================================================================

@pytest.fixture
def stores():
    """Bare (registry, transactions, stages) with asset A1 registered."""
    registry = AssetRegistry()
    transactions = TransactionLedger(registry)
    stage_recorder = StageRecorder(transactions)
    registry.register(make_asset("A1"))
    return registry, transactions, stage_recorder
