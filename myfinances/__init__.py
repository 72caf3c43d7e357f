"""
MyFinances - Source Package

Core of a personal finance app: who is signed in, what they recorded,
and how much came in and went out.

DESIGN PRINCIPLES:
1. Identity is passed explicitly, never read from ambient state
2. Storage is written before memory is trusted
3. One bad record never hides the rest of the ledger
4. Totals are re-derived on every read
5. Storage engine is swappable
"""

__version__ = "1.0.0"
__author__ = "MyFinances Team"
