"""Quote book: insurance quotes drafted for leads or walk-in clients."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import date, datetime, timedelta

from agent_lounge.domain.entities import Quote
from agent_lounge.domain.enums import Product, QuoteStatus
from agent_lounge.domain.events import QuoteCreated
from agent_lounge.domain.exceptions import InvalidAmountError, NotFoundError
from agent_lounge.domain.values import new_id
from agent_lounge.infrastructure.event_bus import EventBus

logger = logging.getLogger(__name__)


class QuoteBook:
    """Owns one agent's quotes.

    Parameters
    ----------
    validity_days:
        Days between ``created_date`` and ``expires_date``.
    """

    def __init__(
        self,
        validity_days: int = 30,
        clock: Callable[[], datetime] = datetime.now,
        event_bus: EventBus | None = None,
        owner_id: str = "",
    ) -> None:
        self._validity = timedelta(days=validity_days)
        self._clock = clock
        self._event_bus = event_bus
        self._owner_id = owner_id
        self._quotes: dict[str, Quote] = {}

    @property
    def quotes(self) -> list[Quote]:
        return list(self._quotes.values())

    def __len__(self) -> int:
        return len(self._quotes)

    def get(self, quote_id: str) -> Quote:
        quote = self._quotes.get(quote_id)
        if quote is None:
            raise NotFoundError("Quote", quote_id)
        return quote

    def for_lead(self, lead_id: str) -> list[Quote]:
        return [q for q in self._quotes.values() if q.lead_id == lead_id]

    def create(
        self,
        client_name: str,
        product: Product,
        coverage_amount: float,
        monthly_premium: float,
        client_email: str = "",
        client_phone: str = "",
        lead_id: str | None = None,
        term: int | None = None,
        notes: str = "",
    ) -> Quote:
        """Draft a new quote expiring ``validity_days`` from today."""
        if coverage_amount < 0:
            raise InvalidAmountError(coverage_amount)
        if monthly_premium < 0:
            raise InvalidAmountError(monthly_premium)
        today = self._clock().date()
        quote = Quote(
            id=new_id("quote"),
            client_name=client_name,
            product=product,
            coverage_amount=coverage_amount,
            monthly_premium=monthly_premium,
            created_date=today,
            expires_date=today + self._validity,
            client_email=client_email,
            client_phone=client_phone,
            lead_id=lead_id,
            term=term,
            agent_id=self._owner_id,
            notes=notes,
        )
        self._quotes[quote.id] = quote
        logger.debug("Created quote %s for %s", quote.id, client_name)
        if self._event_bus is not None:
            self._event_bus.publish(
                QuoteCreated(
                    source_id=self._owner_id,
                    quote_id=quote.id,
                    client_name=client_name,
                    monthly_premium=monthly_premium,
                )
            )
        return quote

    def restore(self, quote: Quote) -> None:
        self._quotes[quote.id] = quote

    def update_status(self, quote_id: str, status: QuoteStatus) -> bool:
        quote = self.get(quote_id)
        if quote.status == status:
            return False
        quote.status = status
        return True

    def expire_due(self, today: date) -> list[Quote]:
        """Expire every open quote whose ``expires_date`` is before *today*."""
        expired = []
        for quote in self._quotes.values():
            if quote.status in (QuoteStatus.ACCEPTED, QuoteStatus.EXPIRED):
                continue
            if quote.expires_date < today:
                quote.status = QuoteStatus.EXPIRED
                expired.append(quote)
        if expired:
            logger.info("Expired %d quotes", len(expired))
        return expired
