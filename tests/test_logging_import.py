"""
Test that explorer_logging can be imported without circular import and logger works.
"""

from __future__ import annotations


def test_logging_import():
    """Import get_logger from explorer_logging and use the logger."""
    from backend_explorer.explorer_logging import get_logger

    logger = get_logger("test")
    assert logger is not None
    assert hasattr(logger, "info")
    assert hasattr(logger, "debug")
    assert hasattr(logger, "warning")
    assert hasattr(logger, "error")
    # Smoke test: call info (should not raise)
    logger.info("test_message", key="value")


def test_bind_request_does_not_raise():
    from backend_explorer.explorer_logging import bind_request, get_logger

    bind_request("req-123")
    get_logger("test").info("bound_message")


def test_event_is_renamed_to_event_type():
    from backend_explorer.explorer_logging.logger import _rename_event

    out = _rename_event(None, "info", {"event": "ledger_recomputed", "token": "0xabc"})

    assert out == {"event_type": "ledger_recomputed", "token": "0xabc"}
