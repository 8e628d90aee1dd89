from __future__ import annotations

from typing import Any, Callable, Dict, List, Tuple

import httpx
import pytest

from mantle_context.config import get_settings
from mantle_context.http import HttpClient
from mantle_context.services.aggregator import Aggregator

TOKEN = "0x09bc4e0d864854c6afb6eb9a9cdf58ac190d0df9"

Route = Tuple[int, Any]


@pytest.fixture(autouse=True)
def _fresh_settings():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


class FakeUpstream:
    """Serves canned DefiLlama responses keyed by URL path."""

    def __init__(self, routes: Dict[str, Route]):
        self.routes = routes
        self.requests: List[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get(request.url.path)
        if route is None:
            return httpx.Response(404, json={"message": "not found"})
        status, body = route
        if isinstance(body, (bytes, str)):
            return httpx.Response(status, content=body)
        return httpx.Response(status, json=body)


@pytest.fixture
def upstream() -> Callable[[Dict[str, Route]], Tuple[FakeUpstream, HttpClient]]:
    def _make(routes: Dict[str, Route]) -> Tuple[FakeUpstream, HttpClient]:
        fake = FakeUpstream(routes)
        return fake, HttpClient(transport=httpx.MockTransport(fake))

    return _make


@pytest.fixture
def aggregator_for(upstream) -> Callable[[Dict[str, Route]], Aggregator]:
    def _make(routes: Dict[str, Route]) -> Aggregator:
        _, http = upstream(routes)
        return Aggregator(http)

    return _make


def _tvl_points(values: List[float], start: int = 1_700_000_000) -> List[Dict[str, Any]]:
    return [{"date": start + i * 86_400, "tvl": v} for i, v in enumerate(values)]


@pytest.fixture
def tvl_points():
    return _tvl_points


@pytest.fixture
def token() -> str:
    return TOKEN


@pytest.fixture
def price_payload() -> Dict[str, Any]:
    return {
        "coins": {
            f"mantle:{TOKEN}": {
                "decimals": 18,
                "symbol": "WMNT",
                "price": 0.8123,
                "timestamp": 1_700_000_123,
                "confidence": 0.99,
            }
        }
    }


@pytest.fixture
def protocol_payload() -> Dict[str, Any]:
    return {
        "id": "4006",
        "name": "Merchant Moe",
        "url": "https://merchantmoe.com",
        "twitter": "MerchantMoe_xyz",
        "github": ["merchant-moe"],
        "gecko_id": None,
        "cmcId": None,
        "chains": ["Mantle", "Ethereum"],
        "currentChainTvls": {
            "Mantle": 60_000_000.0,
            "Ethereum": 40_000_000.0,
            "Mantle-staking": 5_000_000.0,
            "staking": 5_000_000.0,
        },
        "chainTvls": {
            "Mantle": {"tvl": [{"date": 1_700_000_000, "totalLiquidityUSD": 60_000_000.0}]},
            "Ethereum": {"tvl": []},
        },
    }


@pytest.fixture
def stablecoin_payload() -> List[Dict[str, Any]]:
    return [
        {"date": "1699920000", "totalCirculating": {}, "totalCirculatingUSD": {}, "totalBridgedToUSD": {}},
        {
            "date": "1700006400",
            "totalCirculating": {"peggedUSD": 1000.0},
            "totalCirculatingUSD": {"peggedUSD": 1000.0},
            "totalBridgedToUSD": {"peggedUSD": 52_345_678.9},
        },
    ]
