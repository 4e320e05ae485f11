"""Revenue settlement: splits a paid brief read among its correspondents.

For a brief with ``n`` distinct correspondents and price ``P``::

    pool     = floor(P * share)
    per_head = floor(pool / n)

Each correspondent is credited ``per_head`` once per payment. The rounding
remainder and the operator's share are simply not distributed; nothing
reconciles them.
"""

import asyncio
import logging
from datetime import datetime
from decimal import ROUND_FLOOR, Decimal

from src.briefs.schemas import Brief
from src.common.errors import Conflict
from src.common.timeutil import to_iso, utcnow
from src.observability.metrics import get_metrics
from src.revenue.config import RevenueConfig
from src.revenue.payment import X402PaymentClient
from src.revenue.schemas import EarningsLedger, Payment, Settlement
from src.storage import keys
from src.storage.kv import KeyValueStore

logger = logging.getLogger(__name__)


def split_revenue(price: int, share: float, correspondents: int) -> int:
    """Per-correspondent amount for one payment (0 when nobody is credited)."""
    if correspondents <= 0:
        return 0
    pool = int((Decimal(price) * Decimal(str(share))).to_integral_value(rounding=ROUND_FLOOR))
    return pool // correspondents


class RevenueSettlement:
    """Credits correspondents' earnings ledgers for paid brief reads."""

    def __init__(
        self,
        store: KeyValueStore,
        payment_client: X402PaymentClient | None = None,
        config: RevenueConfig | None = None,
    ) -> None:
        self._store = store
        self._config = config or RevenueConfig()
        self._payments = payment_client or X402PaymentClient(self._config)

    @property
    def payment_client(self) -> X402PaymentClient:
        return self._payments

    async def earnings(self, address: str) -> EarningsLedger:
        return EarningsLedger.from_dict(await self._store.get(keys.earnings(address)))

    async def _credit_one(self, address: str, payment: Payment) -> None:
        ledger = await self.earnings(address)
        ledger.total += payment.amount
        ledger.payments = [payment, *ledger.payments][: self._config.payments_cap]
        await self._store.put(keys.earnings(address), ledger.to_dict())

    async def credit(
        self,
        brief: Brief,
        txid: str,
        now: datetime | None = None,
    ) -> Settlement:
        """Split the brief price among the brief's distinct correspondents.

        Args:
            brief: The brief that was paid for.
            txid: Settled payment transaction id.
            now: Credit time (defaults to UTC now).

        Returns:
            Settlement describing who was credited and how much.
        """
        price = self._config.brief_price_sats
        settlement = Settlement(txid=txid, brief_date=brief.date, price=price)

        correspondents = brief.correspondents
        if not correspondents:
            return settlement

        per_head = split_revenue(price, self._config.correspondent_share, len(correspondents))
        if per_head == 0:
            logger.info(
                "Payment %s too small to split among %d correspondents",
                txid,
                len(correspondents),
            )
            return settlement

        payment = Payment(
            date=to_iso(now or utcnow()),
            amount=per_head,
            txid=txid,
            brief_date=brief.date,
        )
        await asyncio.gather(*(self._credit_one(a, payment) for a in correspondents))

        settlement.per_head = per_head
        settlement.recipients = correspondents
        get_metrics().record_revenue_credited(settlement.distributed)
        logger.info(
            "Payment %s for brief %s: %d sats to each of %d correspondents (%d retained)",
            txid,
            brief.date,
            per_head,
            len(correspondents),
            settlement.retained,
        )
        return settlement

    async def claim_transaction(self, txid: str) -> None:
        """Mark ``txid`` as consumed.

        Raises:
            Conflict: The transaction already paid for a brief read.
        """
        if await self._store.get(keys.used_payment(txid)):
            raise Conflict(f"Transaction {txid} has already been used")
        await self._store.put(keys.used_payment(txid), {"usedAt": to_iso(utcnow())})

    async def settle_brief_read(
        self,
        brief: Brief,
        payment_signature: str,
        now: datetime | None = None,
    ) -> Settlement:
        """Settle the caller's payment, then credit the brief's correspondents.

        Raises:
            InvalidArgument: Malformed payment header.
            PaymentRequired: Relay rejected the payment.
            UpstreamFailure: Relay unreachable.
            Conflict: Transaction id reused.
        """
        result = await self._payments.settle(payment_signature)
        await self.claim_transaction(result.txid)
        return await self.credit(brief, result.txid, now=now)
