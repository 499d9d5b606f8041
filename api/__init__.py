"""
Ledger inspection HTTP API.
"""
