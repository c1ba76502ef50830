"""
Main entrypoint: FastAPI server for the explorer read API.

Validates settings up front so a bad environment fails before the server
binds, then runs uvicorn in the main thread. On SIGINT/SIGTERM the server
shuts down and the lifespan closes the upstream HTTP clients.

Env: INDEXER_ENDPOINT, INDEXER_API_KEY, CHAIN_ID, CHAIN_RPC_URL, API_HOST, API_PORT, etc.

Equivalent: uvicorn backend_explorer.api_server.app:app --host 0.0.0.0 --port 8000
"""

import os
import sys

# Configure structured JSON logging before other imports that may log
from backend_explorer.explorer_logging import get_logger

logger = get_logger("main")


def main() -> None:
    """Load settings, then run the FastAPI server."""
    api_host = os.getenv("API_HOST", "0.0.0.0").strip()
    api_port = int(os.getenv("API_PORT", "8000").strip() or "8000")

    from backend_explorer.config import get_settings

    try:
        settings = get_settings()
    except ValueError as e:
        logger.error("main_config_error", message=str(e))
        sys.exit(1)

    if not settings.indexer_api_key:
        logger.warning("main_indexer_key_missing", message="INDEXER_API_KEY is not set; indexer calls will fail")

    from backend_explorer.api_server.app import app
    import uvicorn

    logger.info("main_server_starting", host=api_host, port=api_port, chain_id=settings.chain_id)
    uvicorn.run(app, host=api_host, port=api_port, log_level=os.getenv("LOG_LEVEL", "info").lower())


if __name__ == "__main__":
    main()
