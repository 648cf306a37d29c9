"""
EOR quote engine.

This package wires together:
- quotes.rate_tables (per-provider country rates, derived from the primary table)
- quotes.calc (total cost of employment)
- quotes.comparison (multi-provider reconciliation)
- quotes.validation (margin, risk and acid-test checks)
- quotes.engine (composition root used by the API and scripts)
"""
