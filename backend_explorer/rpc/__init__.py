"""
Chain RPC access — ERC20 metadata (decimals, symbol, name, totalSupply) via eth_call.
"""

from backend_explorer.rpc.client import ChainRpcClient

__all__ = ["ChainRpcClient"]
