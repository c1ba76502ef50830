"""Token catalogue (TokenCreated factory events)."""

from backend_explorer.tokens.catalog import TokensPage, list_tokens

__all__ = ["TokensPage", "list_tokens"]
