from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, Mapping, Optional

from mantle_context.models import (
    MarketIds,
    ProtocolRecord,
    RawProtocol,
    RawStablecoinPoint,
    SocialLinks,
    StablecoinPoint,
    StablecoinSeries,
)

logger = logging.getLogger(__name__)

# DefiLlama reports these next to real chains in currentChainTvls
AGGREGATE_BUCKETS = {"staking", "pool2", "borrowed", "doublecounted", "liquidstaking", "vesting", "treasury", "offers"}

PEGGED_USD = "peggedUSD"


def select_network_key(mapping: Mapping[str, Any], network: str) -> Optional[str]:
    """Key under which ``network`` appears in ``mapping``, or None if it does not."""
    if network in mapping:
        return network
    wanted = network.lower()
    for key in mapping:
        if key.lower() == wanted:
            return key
    return None


def _is_chain_headline(key: str) -> bool:
    # "Mantle-borrowed", "Ethereum-staking" and the bare buckets are breakdowns
    return "-" not in key and key.lower() not in AGGREGATE_BUCKETS


def reported_tvl(value: Optional[float]) -> float:
    """TVL of one chain entry; a null entry counts as nothing deployed."""
    if value is None:
        return 0.0
    return float(value)


def deployment_tvls(current_chain_tvls: Mapping[str, Optional[float]]) -> Dict[str, float]:
    return {k: reported_tvl(v) for k, v in current_chain_tvls.items() if _is_chain_headline(k)}


def normalize_protocol(raw: RawProtocol, network: str) -> ProtocolRecord:
    """Restrict a multi-chain protocol record to ``network``.

    A network missing from the upstream maps means the protocol is not
    deployed there: its TVL is 0 and its breakdown is empty.
    """
    tvl_key = select_network_key(raw.current_chain_tvls, network)
    if tvl_key is None:
        logger.debug(f"{raw.name} reports no TVL on {network}, defaulting to 0")
        target_tvl = 0.0
    else:
        target_tvl = reported_tvl(raw.current_chain_tvls[tvl_key])

    breakdown_key = select_network_key(raw.chain_tvls, network)
    if breakdown_key is None or not isinstance(raw.chain_tvls[breakdown_key], dict):
        breakdown: Dict[str, Any] = {}
    else:
        breakdown = dict(raw.chain_tvls[breakdown_key])

    return ProtocolRecord(
        name=raw.name,
        network=network,
        chains=tuple(raw.chains),
        social_links=SocialLinks(twitter=raw.twitter, github=raw.github),
        market_ids=MarketIds(coingecko=raw.gecko_id, cmc=raw.cmc_id),
        chain_tvl={network: target_tvl},
        chain_tvl_breakdown={network: breakdown},
        deployment_tvls=deployment_tvls(raw.current_chain_tvls),
    )


def normalize_stablecoin_series(stablecoin_id: int, points: Iterable[RawStablecoinPoint]) -> StablecoinSeries:
    """Project each point onto its bridged USD amount.

    Early points carry an empty ``totalBridgedToUSD`` object; those count as 0.
    Points are ordered by date whatever order upstream serves them in.
    """
    out = []
    for p in points:
        bridged = reported_tvl(p.total_bridged_to_usd.get(PEGGED_USD))
        out.append(StablecoinPoint(date=p.date, total_bridged_usd=bridged))
    return StablecoinSeries(stablecoin_id=stablecoin_id, points=tuple(out))
