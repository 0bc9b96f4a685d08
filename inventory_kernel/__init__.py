"""
Inventory Kernel - stock ledger for items held across multiple locations.

- One stock record per (item, location)
- Atomic, row-locked put / take / move
- Append-only movement trail with explicit actor attribution
"""

__version__ = "0.1.0"
