"""
API server package — read-only HTTP interface.

Exposes account activity, token holders, transfers, metadata, and the token
catalogue. Delegates to the activity / holders / tokens services; owns the
process-wide services container (indexer client, RPC client, ledger cache).
"""
