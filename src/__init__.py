"""
Family Ledger - Source Package

A personal/family finance tracker: income and expense transactions
organised under categories, monthly planned vs. realized summaries,
and an optional LLM advisor.

DESIGN PRINCIPLES:
1. The ledger is the single source of truth
2. Summaries are pure functions of the ledger
3. Local state is updated optimistically, rolled back on failure
4. No failure is silent
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Family Ledger Team"
