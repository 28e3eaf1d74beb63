"""
StockLedger - per-user inventory with atomic sell and undo
"""
__version__ = "1.0.0"
