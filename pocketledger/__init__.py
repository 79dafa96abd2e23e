"""
PocketLedger - Source Package

A small personal finance ledger that tracks income, expenses and
transfers across two money pools: the wallet and the bank.

DESIGN PRINCIPLES:
1. The ledger core is plain data plus pure functions
2. Persistence is an injected port, never a global
3. Bad records are dropped and counted, never silently "fixed"
4. Every mutation is announced as a notice
5. Derived views are recomputed on demand
"""

__version__ = "1.0.0"
__author__ = "PocketLedger Team"
