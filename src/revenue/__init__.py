"""Revenue settlement for paid brief reads.

Components:
- EarningsLedger / Payment: Per-correspondent earnings records
- RevenueConfig: Pydantic settings for price, share and the x402 relay
- X402PaymentClient: Settles ``payment-signature`` headers with the relay
- RevenueSettlement: Splits a paid read among the brief's correspondents
"""

from src.revenue.config import RevenueConfig
from src.revenue.payment import X402PaymentClient, decode_payment_signature
from src.revenue.schemas import EarningsLedger, Payment, PaymentResult, Settlement
from src.revenue.settlement import RevenueSettlement, split_revenue

__all__ = [
    "EarningsLedger",
    "Payment",
    "PaymentResult",
    "RevenueConfig",
    "RevenueSettlement",
    "Settlement",
    "X402PaymentClient",
    "decode_payment_signature",
    "split_revenue",
]
