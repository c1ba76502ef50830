"""
Account activity views.

Unified transaction history (direct + transfer-implied transactions merged,
deduplicated, ordered, paginated) and token balances replayed from
Transfer logs.
"""

from backend_explorer.activity.balances import (
    TokenBalance,
    get_account_token_balances,
    get_total_value,
)
from backend_explorer.activity.transactions import (
    DEFAULT_LIMIT,
    MAX_LIMIT,
    AccountTransactionsPage,
    list_account_transactions,
)

__all__ = [
    "AccountTransactionsPage",
    "DEFAULT_LIMIT",
    "MAX_LIMIT",
    "TokenBalance",
    "get_account_token_balances",
    "get_total_value",
    "list_account_transactions",
]
