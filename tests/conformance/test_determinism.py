"""
Determinism Conformance Tests

INVARIANT: Given identical inputs, the ledger produces identical outputs.

    ∀ inputs I:
        ledger1.process(I) = ledger2.process(I)

This guarantees:
- replay() reproduces every asset's provenance exactly
- Two hosts applying the same operations agree on every fingerprint
"""

from hypothesis import given, settings
from hypothesis import strategies as st

from provenance import ProvenanceLedger, ProvenanceError
from tests.builders import register, add_root, add_child, add_stage


operations = st.lists(
    st.tuples(
        st.sampled_from(["A1", "A2", "A3"]),
        st.sampled_from(["asset", "root", "child", "stage"]),
        st.integers(min_value=0, max_value=6),
    ),
    max_size=40,
)


def _process(ledger: ProvenanceLedger, ops) -> None:
    for asset_id, kind, n in ops:
        try:
            if kind == "asset":
                register(ledger, asset_id, quantity=n)
            elif kind == "root":
                add_root(ledger, asset_id)
            elif kind == "child":
                add_child(ledger, n, asset_id, f"T{n}")
            else:
                add_stage(ledger, n, asset_id, n, [f"k{n}"], [f"v{n}"])
        except ProvenanceError:
            pass


class TestDeterminismProperties:
    """Property-based determinism tests."""

    @given(operations)
    @settings(max_examples=50)
    def test_identical_sequences_produce_identical_state(self, ops):
        """
        PROPERTY: Two ledgers processing the same operations reach the same state.
        """
        ledger1 = ProvenanceLedger("host1", verbose=False)
        ledger2 = ProvenanceLedger("host2", verbose=False)
        _process(ledger1, ops)
        _process(ledger2, ops)

        assert ledger1.list_assets() == ledger2.list_assets()
        for asset_id in ledger1.list_assets():
            assert ledger1.fingerprint(asset_id) == ledger2.fingerprint(asset_id)

    @given(operations)
    @settings(max_examples=50)
    def test_replay_reproduces_fingerprints(self, ops):
        """
        PROPERTY: replay() of the operation log yields the same provenance.
        """
        ledger = ProvenanceLedger("origin", verbose=False)
        _process(ledger, ops)
        replayed = ledger.replay()

        assert replayed.list_assets() == ledger.list_assets()
        assert len(replayed.operation_log) == len(ledger.operation_log)
        for asset_id in ledger.list_assets():
            assert replayed.fingerprint(asset_id) == ledger.fingerprint(asset_id)


class TestDeterminismExamples:

    def test_fingerprint_independent_of_ledger_name(self):
        a = ProvenanceLedger("alpha", verbose=False)
        b = ProvenanceLedger("beta", verbose=False)
        for ledger in (a, b):
            register(ledger, "A1")
            add_root(ledger, "A1")
        assert a.fingerprint("A1") == b.fingerprint("A1")

    def test_interleaving_across_assets_does_not_matter(self):
        a = ProvenanceLedger("a", verbose=False)
        b = ProvenanceLedger("b", verbose=False)

        register(a, "A1")
        register(a, "A2")
        add_root(a, "A1")
        add_root(a, "A2")
        add_child(a, 0, "A1", "T1")

        register(b, "A2")
        add_root(b, "A2")
        register(b, "A1")
        add_root(b, "A1")
        add_child(b, 0, "A1", "T1")

        assert a.fingerprint("A1") == b.fingerprint("A1")
        assert a.fingerprint("A2") == b.fingerprint("A2")
