from __future__ import annotations

import math
from typing import Any, Iterable, Mapping, Sequence

from mantle_context.errors import DerivationError
from mantle_context.models import (
    HealthCategory,
    HealthScore,
    MarketPresence,
    ProtocolRecord,
    ProtocolStats,
    ProtocolSummary,
    SocialPresence,
    StatsSummary,
    TrendSummary,
    TvlCategory,
)

# Points per presence signal
SIGNAL_POINTS = 20
SINGLE_CHAIN_POINTS = 10

HIGH_HEALTH_MIN = 80
MEDIUM_HEALTH_MIN = 50

SMALL_TVL_MAX = 100_000
MEDIUM_TVL_MAX = 1_000_000

# Share reported when the protocol has no positive TVL anywhere
FULL_CONCENTRATION = 100.0


def percent_change(values: Sequence[float], offset: int) -> float:
    """Change of the last value against the one ``offset`` points earlier, in %.

    Points are assumed evenly spaced (DefiLlama serves one per day), so
    ``offset=7`` over a daily series means "a week ago". With fewer than
    ``offset + 1`` points, or a zero reference, the change is 0.
    """
    if offset < 0:
        raise ValueError(f"offset must be non-negative, got {offset}")
    n = len(values) - 1
    if n - offset < 0:
        return 0.0
    current = float(values[n])
    reference = float(values[n - offset])
    if reference == 0:
        return 0.0
    return (current - reference) / reference * 100.0


def trend_summary(values: Sequence[float], offsets: Iterable[int] = (1, 7)) -> TrendSummary:
    if not values:
        raise DerivationError("cannot summarise an empty series")
    return TrendSummary(
        current_value=float(values[-1]),
        changes={k: percent_change(values, k) for k in offsets},
    )


def latest_value(values: Sequence[float]) -> float:
    if not values:
        raise DerivationError("series has no observations")
    return float(values[-1])


def diversification_ratio(chain_tvls: Mapping[str, float], target_tvl: float) -> float:
    """Share of the protocol's TVL held on the target chain, in %."""
    total = sum(float(v) for v in chain_tvls.values())
    if total <= 0:
        # Nothing known elsewhere: treated as fully concentrated on the target
        return FULL_CONCENTRATION
    return target_tvl / total * 100.0


def _present(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, (str, list, dict)):
        return len(value) > 0
    return True


def is_multi_chain(record: ProtocolRecord) -> bool:
    return len(record.chains) > 1


def platform_strength(record: ProtocolRecord) -> int:
    score = 0
    for signal in (
        record.social_links.twitter,
        record.social_links.github,
        record.market_ids.coingecko,
        record.market_ids.cmc,
    ):
        if _present(signal):
            score += SIGNAL_POINTS
    score += SIGNAL_POINTS if is_multi_chain(record) else SINGLE_CHAIN_POINTS
    return score


def health_category(score: int) -> HealthCategory:
    if score >= HIGH_HEALTH_MIN:
        return HealthCategory.HIGH
    if score >= MEDIUM_HEALTH_MIN:
        return HealthCategory.MEDIUM
    return HealthCategory.LOW


def health_score(record: ProtocolRecord) -> HealthScore:
    score = platform_strength(record)
    return HealthScore(score=score, category=health_category(score))


def tvl_category(tvl: float) -> TvlCategory:
    if tvl < SMALL_TVL_MAX:
        return TvlCategory.SMALL
    if tvl < MEDIUM_TVL_MAX:
        return TvlCategory.MEDIUM
    return TvlCategory.LARGE


def social_presence(record: ProtocolRecord) -> SocialPresence:
    has_twitter = _present(record.social_links.twitter)
    has_github = _present(record.social_links.github)
    return SocialPresence(
        has_twitter=has_twitter,
        has_github=has_github,
        platform_count=int(has_twitter) + int(has_github),
    )


def protocol_stats(record: ProtocolRecord) -> ProtocolStats:
    tvl = record.target_tvl
    return ProtocolStats(
        name=record.name,
        network=record.network,
        tvl=tvl,
        chain_diversification=diversification_ratio(record.deployment_tvls, tvl),
        social_presence=social_presence(record),
        market_presence=MarketPresence(
            has_coingecko=_present(record.market_ids.coingecko),
            has_cmc=_present(record.market_ids.cmc),
        ),
        summary=StatsSummary(
            tvl_category=tvl_category(tvl),
            is_multi_chain=is_multi_chain(record),
            platform_strength=platform_strength(record),
        ),
    )


def _round_half_up(x: float) -> int:
    return int(math.floor(x + 0.5))


def protocol_summary(stats: ProtocolStats) -> ProtocolSummary:
    score = stats.summary.platform_strength
    return ProtocolSummary(
        name=stats.name,
        network=stats.network,
        tvl=stats.tvl,
        health=HealthScore(score=score, category=health_category(score)),
        network_share=_round_half_up(stats.chain_diversification),
        social_presence=stats.social_presence,
        is_multi_chain=stats.summary.is_multi_chain,
    )
