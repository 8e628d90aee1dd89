from __future__ import annotations

import logging
from typing import Any, Dict, List, Type, TypeVar
from urllib.parse import quote

from pydantic import BaseModel, ValidationError

from mantle_context.config import get_settings
from mantle_context.errors import UpstreamShapeError
from mantle_context.http import HttpClient
from mantle_context.models import PriceRecord, RawProtocol, RawStablecoinPoint, TvlSeries

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)


def _parse(model: Type[M], payload: Any, url: str) -> M:
    try:
        return model.model_validate(payload)
    except ValidationError as e:
        logger.warning(f"{model.__name__} validation failed for {url}: {e.error_count()} error(s)")
        raise UpstreamShapeError(url, f"{model.__name__}: {e.errors()[0]['msg']}") from e


def _expect(payload: Any, kind: type, url: str, what: str) -> Any:
    if not isinstance(payload, kind):
        raise UpstreamShapeError(url, f"expected {what}, got {type(payload).__name__}")
    return payload


async def fetch_token_price(http: HttpClient, contract_address: str) -> PriceRecord:
    """Current price of one token on the target network.

    Docs: https://coins.llama.fi/prices/current/{chain}:{address}
    """
    settings = get_settings()
    key = settings.price_key(contract_address)
    path_key = quote(key, safe=":")
    url = f"{settings.COINS_API_BASE}/prices/current/{path_key}"
    data = _expect(await http.get_json(url), dict, url, "an object")
    coins = _expect(data.get("coins"), dict, url, "a 'coins' object")

    entry = coins.get(key)
    if entry is None:
        # Upstream may echo the key with different address casing
        matches = [v for k, v in coins.items() if k.lower() == key.lower()]
        if not matches:
            raise UpstreamShapeError(url, f"no price for {key}")
        entry = matches[0]
    return _parse(PriceRecord, entry, url)


async def fetch_chain_tvl_history(http: HttpClient) -> TvlSeries:
    """Daily TVL of the target network.

    Docs: https://api.llama.fi/v2/historicalChainTvl/{chain}
    """
    settings = get_settings()
    url = f"{settings.LLAMA_API_BASE}/v2/historicalChainTvl/{settings.network_slug()}"
    data = _expect(await http.get_json(url), list, url, "an array")
    return _parse(TvlSeries, {"points": data}, url)


async def fetch_protocol(http: HttpClient, protocol_slug: str) -> RawProtocol:
    """Protocol metadata across all chains.

    Docs: https://api.llama.fi/protocol/{slug}
    """
    settings = get_settings()
    slug = quote(protocol_slug, safe="")
    url = f"{settings.LLAMA_API_BASE}/protocol/{slug}"
    data = _expect(await http.get_json(url), dict, url, "an object")
    return _parse(RawProtocol, data, url)


async def fetch_stablecoin_chart(http: HttpClient, stablecoin_id: int) -> List[RawStablecoinPoint]:
    """Circulation history of one stablecoin on the target network.

    Docs: https://stablecoins.llama.fi/stablecoincharts/{chain}?stablecoin={id}
    """
    settings = get_settings()
    url = f"{settings.STABLECOINS_API_BASE}/stablecoincharts/{settings.NETWORK}"
    params: Dict[str, Any] = {"stablecoin": stablecoin_id}
    data = await http.get_json(url, params=params, headers={"accept": "*/*"})
    _expect(data, list, url, "an array")
    return [_parse(RawStablecoinPoint, p, url) for p in data]
