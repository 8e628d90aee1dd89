from __future__ import annotations

import asyncio
import logging
from typing import List, Mapping

from mantle_context.clients.defillama import (
    fetch_chain_tvl_history,
    fetch_protocol,
    fetch_stablecoin_chart,
    fetch_token_price,
)
from mantle_context.config import get_settings
from mantle_context.http import HttpClient
from mantle_context.models import PriceRecord, ProtocolStats, ProtocolSummary, StablecoinTvl, TvlReport
from mantle_context.services import metrics
from mantle_context.services.normalizer import normalize_protocol, normalize_stablecoin_series

logger = logging.getLogger(__name__)

DAY = 1
WEEK = 7


class Aggregator:
    """Runs one fetch -> normalize -> compute chain per call.

    Only the HTTP client is shared; nothing computed by one call is kept for
    the next one.
    """

    def __init__(self, http: HttpClient):
        self.http = http

    @property
    def network(self) -> str:
        return get_settings().NETWORK

    async def token_price(self, contract_address: str) -> PriceRecord:
        return await fetch_token_price(self.http, contract_address)

    async def tvl_report(self) -> TvlReport:
        series = await fetch_chain_tvl_history(self.http)
        trend = metrics.trend_summary(series.values(), offsets=(DAY, WEEK))
        return TvlReport(
            network=self.network,
            current_tvl=trend.current_value,
            change_24h=trend.change_vs_prior(DAY),
            change_7d=trend.change_vs_prior(WEEK),
            as_of=series.points[-1].timestamp,
        )

    async def protocol_stats(self, protocol_slug: str) -> ProtocolStats:
        raw = await fetch_protocol(self.http, protocol_slug)
        record = normalize_protocol(raw, self.network)
        return metrics.protocol_stats(record)

    async def protocol_summary(self, protocol_slug: str) -> ProtocolSummary:
        stats = await self.protocol_stats(protocol_slug)
        return metrics.protocol_summary(stats)

    async def stablecoin_tvl(self, symbol: str, stablecoin_id: int) -> StablecoinTvl:
        points = await fetch_stablecoin_chart(self.http, stablecoin_id)
        series = normalize_stablecoin_series(stablecoin_id, points)
        return StablecoinTvl(
            symbol=symbol.upper(),
            stablecoin_id=stablecoin_id,
            value=metrics.latest_value(series.values()),
            as_of=series.points[-1].date,
        )

    async def stablecoin_overview(self, tracked: Mapping[str, int]) -> List[StablecoinTvl]:
        """TVL of every tracked stablecoin; the fetches run concurrently.

        Any failing fetch fails the whole overview.
        """
        results = await asyncio.gather(
            *(self.stablecoin_tvl(symbol, sid) for symbol, sid in tracked.items())
        )
        logger.debug(f"Stablecoin overview computed for {len(results)} stablecoin(s)")
        return list(results)
