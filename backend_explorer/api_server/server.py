"""
FastAPI server — read-only API over the upstream indexer.

Exposes account transaction history, token balances, token holders,
transfers, metadata, the token catalogue, and the latest block. Query
parameters are parsed by FastAPI; range and address validation happens in
the services and surfaces as 400. Config via env (see backend_explorer.config).
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any

from fastapi import Depends, FastAPI, HTTPException, Query, Request
from fastapi.responses import JSONResponse

from backend_explorer import __version__
from backend_explorer.activity import (
    DEFAULT_LIMIT,
    get_account_token_balances,
    get_total_value,
    list_account_transactions,
)
from backend_explorer.api_server.middleware import install_request_logging
from backend_explorer.api_server.schemas import (
    AccountBalancesResponse,
    AccountTotalValueResponse,
    AccountTransactionsResponse,
    HoldersResponse,
    LatestBlockResponse,
    TokenMetadataResponse,
    TokensResponse,
    TransfersResponse,
)
from backend_explorer.api_server.services import ExplorerServices
from backend_explorer.config import get_settings
from backend_explorer.config.env import mask_api_key
from backend_explorer.core.exceptions import (
    DataIntegrityError,
    ExplorerError,
    UpstreamError,
    ValidationError,
)
from backend_explorer.explorer_logging import get_logger
from backend_explorer.holders import list_holders, list_token_transfers
from backend_explorer.indexer import fetch_latest_block
from backend_explorer.indexer.values import normalize_address
from backend_explorer.tokens import list_tokens

logger = get_logger(__name__)

ERROR_STATUS: dict[type[ExplorerError], int] = {
    ValidationError: 400,
    UpstreamError: 502,
    DataIntegrityError: 500,
}


# -----------------------------------------------------------------------------
# Lifespan and dependency
# -----------------------------------------------------------------------------


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build the services container unless one was injected; close HTTP clients on shutdown."""
    owned = getattr(app.state, "services", None) is None
    if owned:
        settings = get_settings()
        app.state.services = ExplorerServices.from_settings(settings)
        logger.info(
            "api_services_started",
            chain_id=settings.chain_id,
            indexer_endpoint=mask_api_key(settings.indexer_endpoint),
            rpc_configured=bool(settings.chain_rpc_url),
            holders_cache_ttl_sec=settings.holders_cache_ttl_sec,
        )

    yield

    if owned:
        await app.state.services.aclose()
        app.state.services = None
        logger.info("api_services_stopped")


def get_services(request: Request) -> ExplorerServices:
    return request.app.state.services


def _error_response(exc: ExplorerError) -> JSONResponse:
    status = next(
        (code for cls, code in ERROR_STATUS.items() if isinstance(exc, cls)),
        500,
    )
    if status >= 500:
        logger.warning("api_error", code=exc.code, error=exc.message, status=status)
    return JSONResponse(status_code=status, content=exc.to_dict())


# -----------------------------------------------------------------------------
# App and routes
# -----------------------------------------------------------------------------


def create_app(services: ExplorerServices | None = None) -> FastAPI:
    """Build the API. Pass services to run against injected clients (tests)."""
    app = FastAPI(
        title="Backend Explorer API",
        description="Account activity and token holder views over the chain indexer.",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.services = services
    install_request_logging(app)

    @app.exception_handler(ExplorerError)
    def explorer_exception_handler(request: Request, exc: ExplorerError) -> JSONResponse:
        return _error_response(exc)

    @app.exception_handler(HTTPException)
    def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
        """Consistent JSON error response for HTTPException."""
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})

    @app.get("/health")
    def health() -> dict[str, str]:
        """Liveness probe: API is up."""
        return {"status": "ok"}

    @app.get("/account/{address}/transactions", response_model=AccountTransactionsResponse)
    async def account_transactions(
        address: str,
        offset: int = Query(0),
        limit: int = Query(DEFAULT_LIMIT),
        include: str = Query("all"),
        sort: str = Query("desc"),
        svc: ExplorerServices = Depends(get_services),
    ) -> dict[str, Any]:
        """
        Direct and transfer-implied transactions of an account, deduplicated and
        ordered by block. total is a lower bound (see hasMore).
        """
        page = await list_account_transactions(
            svc.indexer,
            address,
            chain_id=svc.settings.chain_id,
            offset=offset,
            limit=limit,
            include=include,
            sort=sort,
            batch_size=svc.settings.fetch_batch_size,
        )
        return page.to_dict()

    @app.get("/account/{address}/balances", response_model=AccountBalancesResponse)
    async def account_balances(
        address: str,
        svc: ExplorerServices = Depends(get_services),
    ) -> dict[str, Any]:
        address = normalize_address(address)
        held = await get_account_token_balances(svc.indexer, address, chain_id=svc.settings.chain_id)
        return {"address": address, "balances": [b.to_dict() for b in held]}

    @app.get("/account/{address}/total-value", response_model=AccountTotalValueResponse)
    async def account_total_value(
        address: str,
        svc: ExplorerServices = Depends(get_services),
    ) -> dict[str, Any]:
        address = normalize_address(address)
        total = await get_total_value(svc.indexer, svc.rpc, address, chain_id=svc.settings.chain_id)
        return {"address": address, "totalValue": total}

    @app.get("/token/{address}/holders", response_model=HoldersResponse)
    async def token_holders(
        address: str,
        offset: int = Query(0),
        limit: int = Query(100),
        svc: ExplorerServices = Depends(get_services),
    ) -> dict[str, Any]:
        """Holders by balance with floor-truncated ownership percentage. Ledger cached per token."""
        page = await list_holders(
            svc.ledger_cache,
            address,
            chain_id=svc.settings.chain_id,
            offset=offset,
            limit=limit,
        )
        return page.to_dict()

    @app.get("/token/{address}/transfers", response_model=TransfersResponse)
    async def token_transfers(
        address: str,
        offset: int = Query(0),
        limit: int = Query(100),
        account: str | None = Query(None),
        svc: ExplorerServices = Depends(get_services),
    ) -> dict[str, Any]:
        page = await list_token_transfers(
            svc.indexer,
            address,
            chain_id=svc.settings.chain_id,
            offset=offset,
            limit=limit,
            account=account,
        )
        return page.to_dict()

    @app.get("/token/{address}/metadata", response_model=TokenMetadataResponse)
    async def token_metadata(
        address: str,
        svc: ExplorerServices = Depends(get_services),
    ) -> dict[str, Any]:
        return await svc.rpc.get_token_metadata(address)

    @app.get("/tokens", response_model=TokensResponse)
    async def tokens(
        offset: int = Query(0),
        limit: int = Query(20),
        svc: ExplorerServices = Depends(get_services),
    ) -> dict[str, Any]:
        page = await list_tokens(svc.indexer, chain_id=svc.settings.chain_id, offset=offset, limit=limit)
        return page.to_dict()

    @app.get("/blocks/latest", response_model=LatestBlockResponse)
    async def latest_block(svc: ExplorerServices = Depends(get_services)) -> dict[str, Any]:
        return {"blockNumber": await fetch_latest_block(svc.indexer, svc.settings.chain_id)}

    return app


app = create_app()
