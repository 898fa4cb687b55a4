"""
Conformance Test Suite

This suite defines the NORMATIVE behavior of the portfolio ledger.
Any compliant implementation MUST pass these tests.

The tests are organized by invariant:
1. test_idempotency.py - Repeated balance queries are cache hits with no drift
2. test_incremental.py - Memoized computation equals one-shot computation
3. test_snapshot_isolation.py - Cached snapshots never see later mutation
4. test_floor_semantics.py - Floor toward negative infinity at the dividend's scale
5. test_atomicity.py - Rejected operations leave no trace

These tests use hypothesis for property-based testing.
"""
