"""
Response models.

Wire names are camelCase (blockNumber, hasMore, totalSupply); chain
integers are decimal strings in holder/transfer payloads and hex quantities
in RPC-shaped transactions.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class RpcTransaction(_CamelModel):
    block_hash: str | None = None
    block_number: str
    chain_id: str
    from_: str = Field(..., alias="from")
    gas: str
    gas_price: str
    hash: str
    input: str
    nonce: str
    to: str | None = None
    transaction_index: str | None = None
    value: str
    type: str
    v: str = "0x0"
    r: str = "0x0"
    s: str = "0x0"


class AccountTransactionsResponse(_CamelModel):
    transactions: list[RpcTransaction]
    total: int = Field(..., description="Lower bound; next offset + 1 when has_more")
    offset: int
    limit: int
    has_more: bool
    error: str | None = None


class TokenBalanceItem(_CamelModel):
    token: str
    balance: str


class AccountBalancesResponse(_CamelModel):
    address: str
    balances: list[TokenBalanceItem]


class AccountTotalValueResponse(_CamelModel):
    address: str
    total_value: float


class HolderItem(_CamelModel):
    address: str
    balance: str
    percentage: float = Field(..., ge=0, le=100)


class HoldersResponse(_CamelModel):
    holders: list[HolderItem]
    total: int
    total_supply: str
    offset: int
    limit: int


class TransferItem(_CamelModel):
    from_: str = Field(..., alias="from")
    to: str
    value: str
    transaction_hash: str | None = None
    block_number: str | None = None
    log_index: int | None = None
    timestamp: str | None = None


class TransfersResponse(_CamelModel):
    transfers: list[TransferItem]
    total: int
    offset: int
    limit: int
    has_more: bool


class TokenMetadataResponse(_CamelModel):
    address: str
    name: str
    symbol: str
    decimals: int
    total_supply: str


class TokenItem(_CamelModel):
    address: str | None = None
    symbol: str
    name: str
    currency: str
    created_at: int | None = None


class TokensResponse(_CamelModel):
    tokens: list[TokenItem]
    total: int
    offset: int
    limit: int


class LatestBlockResponse(_CamelModel):
    block_number: int
