"""
Portview: broker ledger ingestion and monthly cashflow reporting.
"""
__version__ = "1.0.0"
