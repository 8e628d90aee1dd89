"""Text rendering of derived values for tool callers. No computation here."""

from __future__ import annotations

from decimal import Decimal
from typing import Iterable

from mantle_context.models import (
    HealthCategory,
    PriceRecord,
    ProtocolStats,
    ProtocolSummary,
    StablecoinTvl,
    TvlReport,
)

HEALTH_GLYPHS = {
    HealthCategory.HIGH: "🟢",
    HealthCategory.MEDIUM: "🟡",
    HealthCategory.LOW: "🔴",
}


def usd(value: float) -> str:
    return f"${value:,.2f}"


def pct(value: float) -> str:
    return f"{value:+.2f}%"


def chain_presence(is_multi_chain: bool, network: str) -> str:
    return "Multi-chain" if is_multi_chain else f"{network} only"


def plain_number(value: float) -> str:
    """Shortest decimal form of ``value`` without exponent or trailing ``.0``."""
    text = format(Decimal(repr(value)), "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


def render_price(price: PriceRecord) -> str:
    return f"Price of {price.symbol}: {plain_number(price.price)}"


def render_tvl_report(report: TvlReport) -> str:
    return "\n".join(
        [
            f"{report.network} TVL: {usd(report.current_tvl)}",
            f"24h change: {pct(report.change_24h)}",
            f"7d change: {pct(report.change_7d)}",
        ]
    )


def render_protocol_summary(summary: ProtocolSummary) -> str:
    category = summary.health.category
    return "\n".join(
        [
            f"{HEALTH_GLYPHS[category]} {summary.name}: {category.value} health",
            f"TVL on {summary.network}: {usd(summary.tvl)}",
            f"Health score: {summary.health.score}/100",
            f"{summary.network} share of TVL: {summary.network_share}%",
            f"Social platforms: {summary.social_presence.platform_count}",
            f"Chain presence: {chain_presence(summary.is_multi_chain, summary.network)}",
        ]
    )


def render_protocol_stats(stats: ProtocolStats) -> str:
    social = stats.social_presence
    market = stats.market_presence
    return "\n".join(
        [
            f"{stats.name} on {stats.network}",
            f"TVL: {usd(stats.tvl)} ({stats.summary.tvl_category.value})",
            f"Chain diversification: {stats.chain_diversification:.2f}% on {stats.network}",
            f"Platform strength: {stats.summary.platform_strength}/100",
            f"Twitter: {'yes' if social.has_twitter else 'no'}, GitHub: {'yes' if social.has_github else 'no'}",
            f"CoinGecko: {'yes' if market.has_coingecko else 'no'}, CoinMarketCap: {'yes' if market.has_cmc else 'no'}",
            f"Chain presence: {chain_presence(stats.summary.is_multi_chain, stats.network)}",
        ]
    )


def render_stablecoin_tvl(tvl: StablecoinTvl) -> str:
    return f"{tvl.symbol} TVL: {usd(tvl.value)}"


def render_stablecoin_overview(items: Iterable[StablecoinTvl]) -> str:
    return "\n".join(render_stablecoin_tvl(t) for t in items)
