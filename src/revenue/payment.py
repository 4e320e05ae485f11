"""
x402 payment settlement client.

Brief reads in paid mode carry a ``payment-signature`` header (base64 JSON
produced by the payer's wallet). The client forwards it to the x402 relay's
``/api/v1/settle`` endpoint together with the payment requirements and
trusts the relay's verdict as-is.

Settlement is never retried automatically: a retried settle could charge
the payer twice.
"""

import base64
import binascii
import json
import logging
from typing import Any

import httpx

from src.common.errors import InvalidArgument, PaymentRequired, UpstreamFailure
from src.observability.metrics import get_metrics
from src.revenue.config import RevenueConfig
from src.revenue.schemas import PaymentResult

logger = logging.getLogger(__name__)


def decode_payment_signature(payment_signature: str) -> dict[str, Any]:
    """Decode the base64 JSON ``payment-signature`` header."""
    try:
        decoded = json.loads(base64.b64decode(payment_signature, validate=True))
    except (binascii.Error, ValueError) as e:
        raise InvalidArgument(
            "Invalid payment-signature header (expected base64 JSON)"
        ) from e
    if not isinstance(decoded, dict):
        raise InvalidArgument("Invalid payment-signature header (expected base64 JSON)")
    return decoded


class X402PaymentClient:
    """
    Settles brief payments through the x402 relay.

    Example:
        client = X402PaymentClient(RevenueConfig())
        result = await client.settle(request.headers["payment-signature"])
    """

    def __init__(
        self,
        config: RevenueConfig | None = None,
        http_client: httpx.AsyncClient | None = None,
    ):
        """
        Initialize the client.

        Args:
            config: Pricing and relay settings.
            http_client: Shared httpx client; one is created per call if None.
        """
        self._config = config or RevenueConfig()
        self._http = http_client

    def requirement(self) -> dict[str, str]:
        """The single accepted payment option for a brief read."""
        cfg = self._config
        return {
            "scheme": "exact",
            "network": cfg.network,
            "amount": str(cfg.brief_price_sats),
            "asset": cfg.asset,
            "payTo": cfg.treasury_address,
        }

    def requirements(self) -> dict[str, Any]:
        """x402 v2 payment requirements returned with a 402 response."""
        accepted = self.requirement()
        accepted["description"] = "Daily intelligence brief"
        return {"x402Version": 2, "accepts": [accepted]}

    def encoded_requirements(self) -> str:
        """Requirements as base64 JSON for the ``payment-required`` header."""
        return base64.b64encode(json.dumps(self.requirements()).encode()).decode()

    async def settle(self, payment_signature: str) -> PaymentResult:
        """
        Settle a payment with the relay.

        Args:
            payment_signature: Raw ``payment-signature`` header value.

        Returns:
            PaymentResult with payer and txid.

        Raises:
            InvalidArgument: Header is not base64 JSON.
            PaymentRequired: Relay rejected the payment.
            UpstreamFailure: Relay unreachable or returned garbage.
        """
        payment_data = decode_payment_signature(payment_signature)
        body = {
            "paymentSignature": payment_signature,
            "paymentRequirements": self.requirement(),
        }
        url = f"{self._config.relay_url.rstrip('/')}/api/v1/settle"

        try:
            if self._http is not None:
                response = await self._http.post(url, json=body)
            else:
                async with httpx.AsyncClient(timeout=self._config.relay_timeout_seconds) as client:
                    response = await client.post(url, json=body)
            result = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.error("Settlement relay error: %s", e)
            get_metrics().record_payment("error")
            raise UpstreamFailure("Settlement relay error") from e

        if not response.is_success or not result.get("success"):
            get_metrics().record_payment("rejected")
            logger.info("Payment rejected by relay: %s", result.get("error"))
            raise PaymentRequired(
                result.get("error") or "Payment settlement failed",
                hint="Ensure you paid the correct amount to the treasury address",
                requirements=self.requirements(),
            )

        txid = result.get("txid") or payment_data.get("txid") or ""
        if not txid:
            get_metrics().record_payment("error")
            raise UpstreamFailure("Settlement relay returned no transaction id")

        payer = (
            result.get("payer")
            or payment_data.get("payer")
            or payment_data.get("from")
            or ""
        )
        get_metrics().record_payment("settled")
        logger.info("Payment %s settled by %s", txid, payer or "unknown payer")
        return PaymentResult(success=True, payer=payer, txid=txid)
