"""
Open Banking Core

An in-memory account and card core: exact Decimal balances, closed-account
immutability, atomic two-account payments, and a hash-chained audit trail.
"""

__version__ = "1.0.0"
