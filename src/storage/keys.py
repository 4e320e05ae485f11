"""Key layout of the signal-network store.

All keys are built here so the layout is visible in one place.
"""

BEATS_INDEX = "beats:index"
SIGNAL_FEED = "signals:feed-index"
BRIEFS_INDEX = "briefs:index"
BOUNTIES_INDEX = "bounties:index"


def beat(slug: str) -> str:
    return f"beat:{slug}"


def signal(signal_id: str) -> str:
    return f"signal:{signal_id}"


def agent_signals(address: str) -> str:
    return f"signals:agent:{address}"


def beat_signals(slug: str) -> str:
    return f"signals:beat:{slug}"


def tag_signals(tag: str) -> str:
    return f"signals:tag:{tag}"


def streak(address: str) -> str:
    return f"streak:{address}"


def brief(day: str) -> str:
    return f"brief:{day}"


def earnings(address: str) -> str:
    return f"earnings:{address}"


def used_payment(txid: str) -> str:
    return f"payment:txid:{txid}"


def bounty(bounty_id: str) -> str:
    return f"bounty:{bounty_id}"


def bounty_claims(bounty_id: str) -> str:
    return f"bounty:{bounty_id}:claims"


def creator_bounties(address: str) -> str:
    return f"bounties:creator:{address}"


def beat_bounties(slug: str) -> str:
    return f"bounties:beat:{slug}"
