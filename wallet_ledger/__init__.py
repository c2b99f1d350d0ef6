"""
Wallet Ledger

A ledger transfer engine that moves money between accounts with exact
Decimal arithmetic, write-intent locking and all-or-nothing transactions.
"""

__version__ = "1.0.0"
