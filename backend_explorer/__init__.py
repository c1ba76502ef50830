"""
Backend Explorer — account activity and token holder views over an indexed chain.

Reads the append-only upstream indexer (txs, transfer, blocks tables) and
reconstructs per-account transaction history and per-token holder ledgers.
Modular layout: indexer client, activity merger, holder ledger, RPC metadata
client, and a read-only API server.
"""

__version__ = "0.1.0"
