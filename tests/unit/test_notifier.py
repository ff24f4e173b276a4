"""Unit tests for settlement notification webhook client"""

import asyncio
import httpx
import pytest
from decimal import Decimal
from unittest.mock import AsyncMock, patch
from splitledger.domain.models import Settlement, SettlementStatus
from splitledger.infrastructure.clients.notifier import SettlementNotifier, settlement_event

HOOK_URL = "http://hooks.test/settlements"


def _ok() -> httpx.Response:
    return httpx.Response(200, request=httpx.Request("POST", HOOK_URL))


def _server_error() -> httpx.Response:
    return httpx.Response(503, request=httpx.Request("POST", HOOK_URL))


def test_settlement_event_payload():
    settlement = Settlement(
        from_member="bob",
        to_member="alice",
        amount=Decimal("12.50"),
        status=SettlementStatus.PENDING,
        settlement_id="s1",
        group_id="g1",
    )

    payload = settlement_event("SETTLEMENT_PROPOSED", settlement)

    assert payload == {
        "event": "SETTLEMENT_PROPOSED",
        "settlement_id": "s1",
        "group_id": "g1",
        "from_member": "bob",
        "to_member": "alice",
        "amount": "12.50",
        "status": "pending",
    }


def test_no_webhook_configured_is_noop():
    notifier = SettlementNotifier()
    notifier.webhook_url = None

    with patch("httpx.AsyncClient.post", new=AsyncMock()) as mock_post:
        asyncio.run(notifier.send_event({"event": "x"}))

    mock_post.assert_not_called()


@patch("splitledger.infrastructure.clients.notifier.asyncio.sleep", new_callable=AsyncMock)
def test_retries_with_exponential_backoff(mock_sleep: AsyncMock):
    """Network error and 5xx are retried; success stops the loop"""
    notifier = SettlementNotifier(webhook_url=HOOK_URL)
    notifier.backoff_base = 1.0
    responses = [httpx.ConnectError("down"), _server_error(), _ok()]

    with patch("httpx.AsyncClient.post", new=AsyncMock(side_effect=responses)) as mock_post:
        asyncio.run(notifier.send_event({"event": "SETTLEMENT_PROPOSED"}))

    assert mock_post.call_count == 3
    assert [c.args[0] for c in mock_sleep.call_args_list] == [1.0, 2.0]


@patch("splitledger.infrastructure.clients.notifier.asyncio.sleep", new_callable=AsyncMock)
def test_gives_up_after_max_retries(mock_sleep: AsyncMock):
    notifier = SettlementNotifier(webhook_url=HOOK_URL)
    notifier.max_retries = 2

    with patch("httpx.AsyncClient.post", new=AsyncMock(return_value=_server_error())):
        with pytest.raises(httpx.HTTPStatusError):
            asyncio.run(notifier.send_event({"event": "SETTLEMENT_CONFIRMED"}))

    assert mock_sleep.call_count == 1


@patch("splitledger.infrastructure.clients.notifier.asyncio.sleep", new_callable=AsyncMock)
def test_client_error_is_not_retried(mock_sleep: AsyncMock):
    """A 4xx means the hook rejected the payload; retrying cannot help"""
    notifier = SettlementNotifier(webhook_url=HOOK_URL)
    not_found = httpx.Response(404, request=httpx.Request("POST", HOOK_URL))

    with patch("httpx.AsyncClient.post", new=AsyncMock(return_value=not_found)) as mock_post:
        with pytest.raises(httpx.HTTPStatusError):
            asyncio.run(notifier.send_event({"event": "SETTLEMENT_PROPOSED"}))

    assert mock_post.call_count == 1
    mock_sleep.assert_not_called()
