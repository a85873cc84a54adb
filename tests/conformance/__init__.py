"""
Conformance Test Suite

This suite defines the NORMATIVE behavior of the provenance ledger.
Any compliant implementation MUST pass these tests.

The tests are organized by invariant:
1. atomicity.py - All-or-nothing operation semantics
2. tree_shape.py - Append-only, cycle-free transaction trees
3. determinism.py - Reproducible behavior and replay
4. concurrency.py - Per-asset linearizability

These tests use hypothesis for property-based testing.
"""
