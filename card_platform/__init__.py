"""
Virtual Card Platform

Virtual card balances with optimistic concurrency control and an
append-only transaction ledger. All monetary values use Decimal.
"""

__version__ = "1.0.0"
