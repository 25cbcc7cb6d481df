"""
PennyWise - Source Package

A personal finance tracker: sign in, record income and expenses,
watch the running balance and see where the money goes.

DESIGN PRINCIPLES:
1. Local state changes only after the remote side confirms
2. Every failure reaches the user as a notification, never a crash
3. Loosely-typed remote data is validated once, at the boundary
4. Every user action is auditable
5. Identity provider and data store are swappable
"""

__version__ = "1.0.0"
__author__ = "PennyWise Team"
