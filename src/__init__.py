"""
Budget Tracker - Source Package

A personal budget tracker: users record expenses and income, set a
monthly budget and see how much of it is left.

DESIGN PRINCIPLES:
1. Firebase owns accounts and data; this package owns forms and arithmetic
2. Fail early, fail visibly
3. No silent corrections to money amounts
4. Every change must be auditable
5. Storage layer is swappable
"""

__version__ = "0.1.0"
__author__ = "Budget Tracker Team"
