"""Schema definitions for correspondent earnings and payment settlement."""

from dataclasses import dataclass, field
from typing import Any


@dataclass
class Payment:
    """One credit to a correspondent."""

    date: str
    amount: int
    txid: str
    brief_date: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"date": self.date, "amount": self.amount, "txid": self.txid}
        if self.brief_date:
            data["briefDate"] = self.brief_date
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Payment":
        return cls(
            date=data["date"],
            amount=data["amount"],
            txid=data.get("txid", ""),
            brief_date=data.get("briefDate"),
        )


@dataclass
class EarningsLedger:
    """Per-correspondent earnings (``earnings:{address}``).

    ``total`` is the sum of every credit ever made and never decreases;
    ``payments`` keeps only the most recent records.
    """

    total: int = 0
    payments: list[Payment] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {"total": self.total, "payments": [p.to_dict() for p in self.payments]}

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> "EarningsLedger":
        if not data:
            return cls()
        return cls(
            total=data.get("total", 0),
            payments=[Payment.from_dict(p) for p in data.get("payments") or []],
        )


@dataclass(frozen=True)
class PaymentResult:
    """What the settlement relay reported for a payment."""

    success: bool
    payer: str
    txid: str


@dataclass
class Settlement:
    """Outcome of splitting one brief payment.

    Attributes:
        txid: Payment transaction id.
        brief_date: Date of the brief that was paid for.
        price: Amount paid.
        per_head: Amount credited to each correspondent (0 = nobody credited).
        recipients: Correspondents credited, each exactly once.
        distributed: ``per_head * len(recipients)``.
        retained: ``price - distributed``; kept by the operator, not reconciled.
    """

    txid: str
    brief_date: str
    price: int
    per_head: int = 0
    recipients: list[str] = field(default_factory=list)

    @property
    def distributed(self) -> int:
        return self.per_head * len(self.recipients)

    @property
    def retained(self) -> int:
        return self.price - self.distributed

    def to_dict(self) -> dict[str, Any]:
        return {
            "txid": self.txid,
            "briefDate": self.brief_date,
            "price": self.price,
            "perHead": self.per_head,
            "recipients": list(self.recipients),
            "distributed": self.distributed,
            "retained": self.retained,
        }
