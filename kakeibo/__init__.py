"""
Kakeibo - Source Package

Household expense ledger core for a two-person household.

DESIGN PRINCIPLES:
1. One store owns the record collection
2. Bad rows are reported, never silently fixed
3. Summaries are recomputed, never cached
4. Every mutation is auditable
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Kakeibo Team"
