"""
FINOVA - Source Package

A personal-finance tracker: user accounts, transaction and savings-goal
bookkeeping, and a chat assistant that answers finance questions.

DESIGN PRINCIPLES:
1. A response is always produced (remote model → rule-based fallback)
2. Aggregates are recomputed from raw history, never trusted blindly
3. Undefined ratios are reported as undefined, not as NaN
4. Every user's data lives under its own key namespace
5. Storage backend is swappable
"""

__version__ = "0.1.0"
__author__ = "FINOVA Team"
