from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


class _Record(BaseModel):
    """Per-invocation value object: immutable once built."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")


# ---------------------------------------------------------------------------
# Upstream shapes (as DefiLlama returns them)
# ---------------------------------------------------------------------------


class PriceRecord(_Record):
    symbol: str
    price: float
    decimals: int
    timestamp: int = Field(..., description="Unix time of the quote")
    confidence: float | None = None


class TvlPoint(_Record):
    timestamp: int = Field(..., alias="date")
    total_value_locked: float = Field(..., alias="tvl")


class TvlSeries(_Record):
    """Daily chain TVL, ascending by timestamp; last point is the latest."""

    points: Tuple[TvlPoint, ...] = ()

    @field_validator("points")
    @classmethod
    def _ascending(cls, v: Tuple[TvlPoint, ...]) -> Tuple[TvlPoint, ...]:
        return tuple(sorted(v, key=lambda p: p.timestamp))

    def values(self) -> List[float]:
        return [p.total_value_locked for p in self.points]


class RawProtocol(_Record):
    """Protocol metadata covering every chain the protocol is deployed on."""

    name: str
    chains: List[str]
    twitter: Optional[str] = None
    github: Optional[Union[List[str], Dict[str, Any], str]] = None
    gecko_id: Optional[str] = None
    cmc_id: Optional[str] = Field(default=None, alias="cmcId")
    current_chain_tvls: Dict[str, Optional[float]] = Field(..., alias="currentChainTvls")
    chain_tvls: Dict[str, Any] = Field(default_factory=dict, alias="chainTvls")

    @field_validator("cmc_id", mode="before")
    @classmethod
    def _cmc_id_as_str(cls, v: Any) -> Any:
        # DefiLlama serves cmcId as a string for most protocols, an int for a few
        if isinstance(v, int) and not isinstance(v, bool):
            return str(v)
        return v


class RawStablecoinPoint(_Record):
    date: str
    total_bridged_to_usd: Dict[str, Optional[float]] = Field(default_factory=dict, alias="totalBridgedToUSD")

    @field_validator("date", mode="before")
    @classmethod
    def _date_as_str(cls, v: Any) -> Any:
        if isinstance(v, int) and not isinstance(v, bool):
            return str(v)
        return v


# ---------------------------------------------------------------------------
# Normalized records (single network slice)
# ---------------------------------------------------------------------------


class SocialLinks(_Record):
    twitter: Optional[str] = None
    github: Optional[Union[List[str], Dict[str, Any], str]] = None


class MarketIds(_Record):
    coingecko: Optional[str] = None
    cmc: Optional[str] = None


class ProtocolRecord(_Record):
    name: str
    network: str
    chains: Tuple[str, ...]
    social_links: SocialLinks
    market_ids: MarketIds
    # Exactly one key: the target network
    chain_tvl: Dict[str, float]
    chain_tvl_breakdown: Dict[str, Dict[str, Any]]
    # Headline TVL of every chain the protocol reports
    deployment_tvls: Dict[str, float] = Field(default_factory=dict)

    @property
    def target_tvl(self) -> float:
        return self.chain_tvl[self.network]


class StablecoinPoint(_Record):
    date: str
    total_bridged_usd: float


def _date_key(point: StablecoinPoint) -> Tuple[int, int, str]:
    # Unix-time strings sort numerically, anything else after them
    if point.date.isdigit():
        return (0, int(point.date), "")
    return (1, 0, point.date)


class StablecoinSeries(_Record):
    """Bridged USD per day, ascending by date; last point is the latest."""

    stablecoin_id: int
    points: Tuple[StablecoinPoint, ...] = ()

    @field_validator("points")
    @classmethod
    def _ascending(cls, v: Tuple[StablecoinPoint, ...]) -> Tuple[StablecoinPoint, ...]:
        return tuple(sorted(v, key=_date_key))

    def values(self) -> List[float]:
        return [p.total_bridged_usd for p in self.points]


# ---------------------------------------------------------------------------
# Derived values
# ---------------------------------------------------------------------------


class HealthCategory(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


class TvlCategory(str, Enum):
    SMALL = "SMALL"
    MEDIUM = "MEDIUM"
    LARGE = "LARGE"


class HealthScore(_Record):
    score: int = Field(..., ge=0, le=100)
    category: HealthCategory


class TrendSummary(_Record):
    current_value: float
    changes: Dict[int, float] = Field(default_factory=dict, description="offset -> % change")

    def change_vs_prior(self, offset: int) -> float:
        return self.changes[offset]


class SocialPresence(_Record):
    has_twitter: bool
    has_github: bool
    platform_count: int


class MarketPresence(_Record):
    has_coingecko: bool
    has_cmc: bool


class StatsSummary(_Record):
    tvl_category: TvlCategory
    is_multi_chain: bool
    platform_strength: int


class ProtocolStats(_Record):
    name: str
    network: str
    tvl: float
    chain_diversification: float = Field(..., description="Share of total TVL on the network, in %")
    social_presence: SocialPresence
    market_presence: MarketPresence
    summary: StatsSummary


class ProtocolSummary(_Record):
    name: str
    network: str
    tvl: float
    health: HealthScore
    network_share: int = Field(..., description="Rounded share of total TVL on the network, in %")
    social_presence: SocialPresence
    is_multi_chain: bool


class TvlReport(_Record):
    network: str
    current_tvl: float
    change_24h: float
    change_7d: float
    as_of: int | None = None


class StablecoinTvl(_Record):
    symbol: str
    stablecoin_id: int
    value: float
    as_of: str | None = None


# ---------------------------------------------------------------------------
# HTTP surface
# ---------------------------------------------------------------------------


class ToolInfo(BaseModel):
    name: str
    description: str
    input_schema: Dict[str, Any]


class TextContent(BaseModel):
    type: str = "text"
    text: str


class ToolResult(BaseModel):
    tool: str
    content: List[TextContent]
