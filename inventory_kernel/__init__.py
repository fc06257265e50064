"""
Inventory Kernel

An append-only supply stock ledger with:
- Typed, signed stock movements that are never edited or deleted
- A per-supply stock projection kept equal to the movement sum
- Row-locked, all-or-nothing movement application
- Soft-deleted supplies whose history stays readable
"""

__version__ = "0.1.0"
