# tests/property/__init__.py
"""Property-based tests for invertible.

Property-based testing validates invariants that must hold for ALL inputs,
not just the specific examples we think of. Inversion is a law over every
schema tree, so it is checked here against generated trees and values.

Test categories:
- inversion/: Round trip, double inversion, elision, failure determinism
"""
