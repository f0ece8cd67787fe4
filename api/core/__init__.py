"""
Shared, cross-cutting code for the quote service.

`core/` holds small building blocks used across features (settings, DB
wiring). Quote-specific SQL and business logic live in `quotes/`.
"""
