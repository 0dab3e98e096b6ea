"""
Double-entry bookkeeping ledger exposed as a REST API.
"""

__version__ = "0.1.0"
