"""Settlement notification webhook client with exponential backoff retry logic"""

import httpx
import asyncio
import logging
from typing import Dict, Any
from splitledger.config import settings
from splitledger.domain.models import Settlement
from splitledger.infrastructure.observability.metrics import webhook_latency_histogram, webhook_failure_counter


def settlement_event(event: str, settlement: Settlement) -> Dict[str, Any]:
    """Build webhook payload for a settlement lifecycle event"""
    return {
        "event": event,
        "settlement_id": settlement.settlement_id,
        "group_id": settlement.group_id,
        "from_member": settlement.from_member,
        "to_member": settlement.to_member,
        "amount": str(settlement.amount),
        "status": settlement.status.value,
    }


class SettlementNotifier:
    """Client for pushing settlement events to the recipient's notification hook"""

    def __init__(self, webhook_url: str | None = None, timeout: float | None = None):
        self.webhook_url = webhook_url or settings.notify_webhook_url
        self.timeout = timeout or settings.http_timeout_seconds
        self.max_retries = settings.webhook_max_retries
        self.backoff_base = settings.webhook_backoff_base

    async def send_event(self, payload: Dict[str, Any]) -> None:
        """
        Send settlement event with retry logic.

        Retry strategy:
        - Exponential backoff: 1s, 2s, 4s, 8s, 16s (base^attempt)
        - Retries on 5xx errors and network failures
        - 4xx responses are re-raised at once
        - Tracks latency histogram and failure counter

        No-op when no webhook URL is configured.
        """
        if not self.webhook_url:
            return

        attempt = 0
        async with httpx.AsyncClient() as client:
            while attempt < self.max_retries:
                try:
                    with webhook_latency_histogram.time():
                        response = await client.post(
                            self.webhook_url,
                            json=payload,
                            timeout=self.timeout,
                        )
                        response.raise_for_status()
                        return  # Success

                except (httpx.HTTPStatusError, httpx.RequestError) as e:
                    attempt += 1
                    webhook_failure_counter.inc()

                    client_error = isinstance(e, httpx.HTTPStatusError) and e.response.status_code < 500
                    if client_error or attempt >= self.max_retries:
                        logging.error(
                            f"Settlement notification failed after {attempt} attempts: {e}",
                            extra={"settlement_id": payload.get("settlement_id")},
                        )
                        raise

                    backoff = self.backoff_base * (2 ** (attempt - 1))
                    await asyncio.sleep(backoff)
