"""
Market data objects: rate indices, fixings, curves and FX rates.
"""
