from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from functools import partial
from typing import Any, Awaitable, Callable, Dict, Mapping, Optional, Type

from pydantic import BaseModel, ConfigDict, Field

from mantle_context.config import Settings, get_settings
from mantle_context.errors import InvocationTimeoutError, OnchainContextError, UnknownToolError
from mantle_context.services import formatter
from mantle_context.services.aggregator import Aggregator

logger = logging.getLogger(__name__)


class NoInput(BaseModel):
    model_config = ConfigDict(extra="ignore")


class TokenPriceInput(BaseModel):
    contract_address: str = Field(..., min_length=1, description="Token contract address")


class ProtocolInput(BaseModel):
    protocol_slug: str = Field(..., min_length=1, description="DefiLlama protocol slug, e.g. merchant-moe")


Handler = Callable[[Aggregator, Any], Awaitable[str]]


@dataclass(frozen=True)
class ToolSpec:
    name: str
    description: str
    input_model: Type[BaseModel]
    handler: Handler

    def input_schema(self) -> Dict[str, Any]:
        return self.input_model.model_json_schema()


async def _token_price(agg: Aggregator, args: TokenPriceInput) -> str:
    return formatter.render_price(await agg.token_price(args.contract_address))


async def _tvl_report(agg: Aggregator, args: NoInput) -> str:
    return formatter.render_tvl_report(await agg.tvl_report())


async def _protocol_summary(agg: Aggregator, args: ProtocolInput) -> str:
    return formatter.render_protocol_summary(await agg.protocol_summary(args.protocol_slug))


async def _protocol_stats(agg: Aggregator, args: ProtocolInput) -> str:
    return formatter.render_protocol_stats(await agg.protocol_stats(args.protocol_slug))


async def _tracked_protocol_summary(slug: str, agg: Aggregator, args: NoInput) -> str:
    return formatter.render_protocol_summary(await agg.protocol_summary(slug))


async def _stablecoin_tvl(symbol: str, stablecoin_id: int, agg: Aggregator, args: NoInput) -> str:
    return formatter.render_stablecoin_tvl(await agg.stablecoin_tvl(symbol, stablecoin_id))


async def _stablecoin_overview(tracked: Mapping[str, int], agg: Aggregator, args: NoInput) -> str:
    return formatter.render_stablecoin_overview(await agg.stablecoin_overview(tracked))


def build_registry(settings: Settings | None = None) -> Dict[str, ToolSpec]:
    """Every tool exposed to callers, keyed by its public name."""
    settings = settings or get_settings()
    network = settings.NETWORK
    tools = [
        ToolSpec(
            "get-token-price",
            f"Get the price of a token in {network.lower()} network",
            TokenPriceInput,
            _token_price,
        ),
        ToolSpec(
            "get-ltv",
            f"Get the total value locked of {network.lower()} network with 24h and 7d change",
            NoInput,
            _tvl_report,
        ),
        ToolSpec(
            "get-protocol-summary",
            f"Get the health summary of any DefiLlama protocol on {network}",
            ProtocolInput,
            _protocol_summary,
        ),
        ToolSpec(
            "get-protocol-stats",
            f"Get detailed TVL, diversification and presence statistics of a protocol on {network}",
            ProtocolInput,
            _protocol_stats,
        ),
        ToolSpec(
            "get-stablecoin-overview",
            f"Get the bridged TVL of every tracked stablecoin on {network}",
            NoInput,
            partial(_stablecoin_overview, dict(settings.TRACKED_STABLECOINS)),
        ),
    ]
    for slug, prefix in settings.TRACKED_PROTOCOLS.items():
        tools.append(
            ToolSpec(
                f"{prefix}-summary",
                f"Get the health summary of {slug} on {network}",
                NoInput,
                partial(_tracked_protocol_summary, slug),
            )
        )
    for symbol, stablecoin_id in settings.TRACKED_STABLECOINS.items():
        tools.append(
            ToolSpec(
                f"{symbol.lower()}-tvl",
                f"Get the bridged TVL of {symbol.upper()} on {network}",
                NoInput,
                partial(_stablecoin_tvl, symbol, stablecoin_id),
            )
        )

    registry: Dict[str, ToolSpec] = {}
    for tool in tools:
        if tool.name in registry:
            raise ValueError(f"Duplicate tool name: {tool.name}")
        registry[tool.name] = tool
    return registry


async def invoke_tool(
    name: str,
    arguments: Optional[Mapping[str, Any]],
    aggregator: Aggregator,
    registry: Optional[Mapping[str, ToolSpec]] = None,
    deadline: Optional[float] = None,
) -> str:
    """Validate arguments, run the tool's pipeline and return its text block.

    Raises pydantic.ValidationError on bad arguments and OnchainContextError
    subclasses on upstream or deadline failures. Nothing is retried.
    """
    registry = registry if registry is not None else build_registry()
    tool = registry.get(name)
    if tool is None:
        raise UnknownToolError(name)
    args = tool.input_model.model_validate(dict(arguments or {}))
    deadline = deadline or get_settings().INVOCATION_DEADLINE_SECONDS
    try:
        return await asyncio.wait_for(tool.handler(aggregator, args), timeout=deadline)
    except asyncio.TimeoutError as e:
        logger.warning(f"Tool {name} timed out after {deadline}s")
        raise InvocationTimeoutError(name, deadline) from e
    except OnchainContextError as e:
        logger.warning(f"Tool {name} failed: {e}")
        raise
