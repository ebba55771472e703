"""Ledger API HTTP client with exponential backoff retry logic"""

import asyncio
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, List, Optional

import httpx

from budget_gateway.config import settings
from budget_gateway.domain.exceptions import LedgerAPIError
from budget_gateway.infrastructure.observability.metrics import ledger_latency_histogram
from budget_gateway.utils.money import to_decimal


@dataclass
class LedgerSnapshot:
    """Read-only view of a household's month as returned by the ledger"""

    opening_balance: Decimal
    current_balance: Decimal
    events: List[Dict[str, Any]] = field(default_factory=list)  # validated by the engine


class LedgerClient:
    """Client for the external ledger service (LedgerSource)"""

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url or settings.ledger_api_base
        self.timeout = timeout or settings.http_timeout_seconds
        self.transport = transport
        self.max_retries = settings.ledger_max_retries
        self.backoff_base = settings.ledger_backoff_base

    async def get_snapshot(self, household_id: str, month: int, year: int) -> Optional[LedgerSnapshot]:
        """
        Fetch opening balance, realized balance and events for one month.

        Retry strategy:
        - Exponential backoff: base, 2*base, 4*base ...
        - Retries on 5xx errors and network failures, never on 4xx

        Returns:
            None when the ledger has no record of the household/month

        Raises:
            LedgerAPIError: On timeout, HTTP errors, or invalid response
        """
        attempt = 0
        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            while True:
                try:
                    with ledger_latency_histogram.time():
                        response = await client.get(
                            f"{self.base_url}/ledger/households/{household_id}/snapshot",
                            params={"month": month, "year": year},
                        )
                    if response.status_code == 404:
                        return None
                    response.raise_for_status()
                    return self._parse_snapshot(response.json())

                except httpx.HTTPStatusError as e:
                    if e.response.status_code < 500:
                        raise LedgerAPIError(f"Ledger API error: {e.response.status_code}") from e
                    attempt += 1
                    if attempt >= self.max_retries:
                        raise LedgerAPIError(f"Ledger API error: {e.response.status_code}") from e

                except httpx.TimeoutException as e:
                    attempt += 1
                    if attempt >= self.max_retries:
                        raise LedgerAPIError(f"Ledger API timeout after {self.timeout}s") from e

                except httpx.RequestError as e:
                    attempt += 1
                    if attempt >= self.max_retries:
                        raise LedgerAPIError(f"Ledger API unreachable: {e}") from e

                # Exponential backoff before the next attempt
                backoff = self.backoff_base * (2 ** (attempt - 1))
                await asyncio.sleep(backoff)

    @staticmethod
    def _parse_snapshot(data: Any) -> LedgerSnapshot:
        """Balances must be valid; individual events are checked later by the engine"""
        try:
            events = data.get("events", [])
            if not isinstance(events, list):
                raise TypeError("events must be a list")
            return LedgerSnapshot(
                opening_balance=to_decimal(data.get("opening_balance", 0)),
                current_balance=to_decimal(data["current_balance"]),
                events=events,
            )
        except (AttributeError, KeyError, ValueError, TypeError) as e:
            raise LedgerAPIError(f"Invalid snapshot data from ledger: {e}") from e
