"""
Utilities: dates, day counts, currencies, errors, global types and helpers.
"""
