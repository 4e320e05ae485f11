"""Tests for the beat registry."""

from datetime import timedelta

import pytest

from src.beats.config import BeatConfig
from src.beats.registry import BeatRegistry, is_stale
from src.beats.schemas import BEAT_ACTIVE, BEAT_INACTIVE, Beat
from src.common.errors import Conflict, Forbidden, InvalidArgument, NotFound, Unauthenticated


async def _claim(registry, slug, claimant, signature, now, **kwargs):
    return await registry.claim(
        slug=slug,
        name=kwargs.pop("name", slug.replace("-", " ").title()),
        claimant=claimant,
        signature=signature,
        now=now,
        **kwargs,
    )


# ── Claiming ─────────────────────────────────────────────


class TestClaim:
    """Claiming new beats."""

    @pytest.mark.asyncio
    async def test_claim_new_beat(self, registry, alice, signature, now):
        beat, reclaimed = await _claim(
            registry, "bitcoin-macro", alice, signature, now, description="Macro flows"
        )

        assert reclaimed is False
        assert beat.slug == "bitcoin-macro"
        assert beat.claimed_by == alice
        assert beat.status == BEAT_ACTIVE
        assert beat.color == "#22d3ee"
        assert beat.description == "Macro flows"
        assert beat.previous_claimant is None

        stored = await registry.get("bitcoin-macro")
        assert stored == beat
        assert [b.slug for b in await registry.all_beats()] == ["bitcoin-macro"]

    @pytest.mark.asyncio
    async def test_claim_keeps_registration_order(self, registry, alice, bob, signature, now):
        await _claim(registry, "bitcoin-macro", alice, signature, now)
        await _claim(registry, "defi-yields", bob, signature, now)
        assert [b.slug for b in await registry.all_beats()] == ["bitcoin-macro", "defi-yields"]

    @pytest.mark.asyncio
    async def test_claim_active_beat_conflicts(self, registry, alice, bob, signature, now):
        await _claim(registry, "bitcoin-macro", alice, signature, now)

        with pytest.raises(Conflict, match="already claimed"):
            await _claim(registry, "bitcoin-macro", bob, signature, now + timedelta(days=1))

    @pytest.mark.asyncio
    async def test_silent_claimant_who_never_filed_keeps_beat(
        self, registry, alice, bob, signature, now
    ):
        await _claim(registry, "bitcoin-macro", alice, signature, now)

        with pytest.raises(Conflict):
            await _claim(registry, "bitcoin-macro", bob, signature, now + timedelta(days=30))

    @pytest.mark.asyncio
    async def test_name_is_trimmed_and_truncated(self, registry, alice, signature, now):
        beat, _ = await _claim(registry, "bitcoin-macro", alice, signature, now, name="  " + "N" * 150)
        assert beat.name == "N" * 100

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "overrides, error, message",
        [
            ({"claimant": ""}, InvalidArgument, "Missing required fields"),
            ({"claimant": "1NotBech32Address"}, InvalidArgument, "Invalid BTC address"),
            ({"slug": "A"}, InvalidArgument, "Invalid slug"),
            ({"color": "red"}, InvalidArgument, "Invalid color"),
            ({"signature": ""}, Unauthenticated, "Missing signature"),
            ({"signature": "bad sig"}, Unauthenticated, "Invalid signature"),
            ({"name": "   "}, InvalidArgument, "cannot be empty"),
        ],
    )
    async def test_claim_validation(
        self, registry, alice, signature, now, overrides, error, message
    ):
        args = {
            "slug": "bitcoin-macro",
            "name": "Bitcoin Macro",
            "claimant": alice,
            "signature": signature,
            "now": now,
        }
        args.update(overrides)

        with pytest.raises(error, match=message):
            await registry.claim(**args)

        assert await registry.all_beats() == []

    @pytest.mark.asyncio
    async def test_missing_signature_hint_names_message(self, registry, alice, now):
        with pytest.raises(Unauthenticated) as exc_info:
            await registry.claim("bitcoin-macro", "Bitcoin Macro", alice, "", now=now)
        assert exc_info.value.hint == f'Sign: "SIGNAL|claim-beat|bitcoin-macro|{alice}"'


# ── Staleness and reclaim ────────────────────────────────


class TestStaleness:
    """Lazy expiry of silent claimants."""

    def test_is_stale(self, now):
        assert is_stale(None, False, now, 14) is False
        assert is_stale(None, True, now, 14) is True
        assert is_stale(now - timedelta(days=14), True, now, 14) is False
        assert is_stale(now - timedelta(days=14, seconds=1), True, now, 14) is True

    @pytest.mark.asyncio
    async def test_reclaim_after_expiry(self, registry, ledger, alice, bob, signature, now):
        await _claim(registry, "bitcoin-macro", alice, signature, now)
        await ledger.file(alice, "bitcoin-macro", "First signal", signature, now=now)

        later = now + timedelta(days=15)
        beat, reclaimed = await _claim(registry, "bitcoin-macro", bob, signature, later)

        assert reclaimed is True
        assert beat.claimed_by == bob
        assert beat.previous_claimant == alice
        assert beat.status == BEAT_ACTIVE
        assert [b.slug for b in await registry.all_beats()] == ["bitcoin-macro"]

    @pytest.mark.asyncio
    async def test_recent_filer_keeps_beat(self, registry, ledger, alice, bob, signature, now):
        await _claim(registry, "bitcoin-macro", alice, signature, now)
        await ledger.file(alice, "bitcoin-macro", "First signal", signature, now=now)

        with pytest.raises(Conflict):
            await _claim(registry, "bitcoin-macro", bob, signature, now + timedelta(days=13))

    @pytest.mark.asyncio
    async def test_list_beats_persists_inactive(self, registry, ledger, alice, signature, now):
        await _claim(registry, "bitcoin-macro", alice, signature, now)
        await ledger.file(alice, "bitcoin-macro", "First signal", signature, now=now)

        beats = await registry.list_beats(now + timedelta(days=20))

        assert beats[0].status == BEAT_INACTIVE
        assert (await registry.get("bitcoin-macro")).status == BEAT_INACTIVE

    @pytest.mark.asyncio
    async def test_list_beats_leaves_active_untouched(self, registry, alice, signature, now):
        await _claim(registry, "bitcoin-macro", alice, signature, now)
        beats = await registry.list_beats(now + timedelta(days=1))
        assert beats[0].status == BEAT_ACTIVE

    @pytest.mark.asyncio
    async def test_custom_expiry(self, store, ledger, alice, bob, signature, now):
        registry = BeatRegistry(store, BeatConfig(expiry_days=1))
        await _claim(registry, "bitcoin-macro", alice, signature, now)
        await ledger.file(alice, "bitcoin-macro", "First signal", signature, now=now)

        _, reclaimed = await _claim(registry, "bitcoin-macro", bob, signature, now + timedelta(days=2))
        assert reclaimed is True


class TestLookups:
    """Claimant lookups."""

    @pytest.mark.asyncio
    async def test_beats_claimed_by(self, registry, alice, bob, signature, now):
        await _claim(registry, "bitcoin-macro", alice, signature, now)
        await _claim(registry, "defi-yields", bob, signature, now)
        await _claim(registry, "ordinals", alice, signature, now)

        claimed = await registry.beats_claimed_by(alice)

        assert [b.slug for b in claimed] == ["bitcoin-macro", "ordinals"]

    @pytest.mark.asyncio
    async def test_is_correspondent(self, registry, alice, bob, signature, now):
        await _claim(registry, "bitcoin-macro", alice, signature, now)

        assert await registry.is_correspondent(alice) is True
        assert await registry.is_correspondent(bob) is False


# ── Updates ──────────────────────────────────────────────


class TestUpdate:
    """Claimant edits."""

    @pytest.mark.asyncio
    async def test_update_description_and_color(self, registry, alice, signature, now):
        await _claim(registry, "bitcoin-macro", alice, signature, now)

        updated = await registry.update(
            "bitcoin-macro",
            alice,
            signature,
            description="New scope",
            color="#ff0000",
            now=now + timedelta(hours=1),
        )

        assert updated.description == "New scope"
        assert updated.color == "#ff0000"
        assert updated.updated_at == "2026-02-26T15:05:00.000Z"
        assert (await registry.get("bitcoin-macro")).color == "#ff0000"

    @pytest.mark.asyncio
    async def test_update_keeps_unspecified_fields(self, registry, alice, signature, now):
        await _claim(registry, "bitcoin-macro", alice, signature, now, description="Scope")
        updated = await registry.update("bitcoin-macro", alice, signature, color="#000000", now=now)
        assert updated.description == "Scope"

    @pytest.mark.asyncio
    async def test_update_by_non_claimant(self, registry, alice, bob, signature, now):
        await _claim(registry, "bitcoin-macro", alice, signature, now)
        with pytest.raises(Forbidden):
            await registry.update("bitcoin-macro", bob, signature, description="Mine now")

    @pytest.mark.asyncio
    async def test_update_unknown_beat(self, registry, alice, signature):
        with pytest.raises(NotFound):
            await registry.update("nope-beat", alice, signature, description="x")

    @pytest.mark.asyncio
    async def test_update_bad_color(self, registry, alice, signature, now):
        await _claim(registry, "bitcoin-macro", alice, signature, now)
        with pytest.raises(InvalidArgument):
            await registry.update("bitcoin-macro", alice, signature, color="blue")


class TestBeatSchema:
    """Beat record shape."""

    def test_missing_status_means_active(self, alice):
        beat = Beat.from_dict({"slug": "btc", "name": "BTC", "claimedBy": alice})
        assert beat.status == BEAT_ACTIVE

    def test_invalid_status_rejected(self, alice):
        with pytest.raises(ValueError):
            Beat(slug="btc", name="BTC", claimed_by=alice, claimed_at="", status="paused")

    def test_optional_fields_omitted(self, alice):
        data = Beat(slug="btc", name="BTC", claimed_by=alice, claimed_at="").to_dict()
        assert "previousClaimant" not in data
        assert "updatedAt" not in data
