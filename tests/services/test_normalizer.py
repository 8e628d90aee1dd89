from mantle_context.models import RawProtocol, RawStablecoinPoint
from mantle_context.services.normalizer import (
    deployment_tvls,
    normalize_protocol,
    normalize_stablecoin_series,
    select_network_key,
)


def test_select_network_key_exact_then_case_insensitive():
    assert select_network_key({"Mantle": 1, "mantle": 2}, "Mantle") == "Mantle"
    assert select_network_key({"mantle": 2}, "Mantle") == "mantle"
    assert select_network_key({"Ethereum": 2}, "Mantle") is None


def test_restricts_maps_to_target_network(protocol_payload):
    record = normalize_protocol(RawProtocol.model_validate(protocol_payload), "Mantle")

    assert record.chain_tvl == {"Mantle": 60_000_000.0}
    assert list(record.chain_tvl_breakdown) == ["Mantle"]
    assert "tvl" in record.chain_tvl_breakdown["Mantle"]
    assert record.target_tvl == 60_000_000.0
    assert record.chains == ("Mantle", "Ethereum")
    assert record.social_links.twitter == "MerchantMoe_xyz"
    assert record.market_ids.coingecko is None


def test_missing_network_defaults_to_zero(protocol_payload):
    protocol_payload["currentChainTvls"] = {"Ethereum": 10.0}
    protocol_payload["chainTvls"] = {"Ethereum": {"tvl": []}}
    record = normalize_protocol(RawProtocol.model_validate(protocol_payload), "Mantle")

    assert record.chain_tvl == {"Mantle": 0.0}
    assert record.chain_tvl_breakdown == {"Mantle": {}}


def test_deployment_tvls_skip_breakdown_buckets(protocol_payload):
    out = deployment_tvls(protocol_payload["currentChainTvls"])
    assert out == {"Mantle": 60_000_000.0, "Ethereum": 40_000_000.0}


def test_stablecoin_points_without_pegged_usd_count_as_zero(stablecoin_payload):
    points = [RawStablecoinPoint.model_validate(p) for p in stablecoin_payload]
    series = normalize_stablecoin_series(1, points)

    assert series.stablecoin_id == 1
    assert series.values() == [0.0, 52_345_678.9]
    assert series.points[-1].date == "1700006400"


def test_null_chain_tvl_counts_as_not_deployed(protocol_payload):
    protocol_payload["currentChainTvls"]["Ethereum"] = None
    record = normalize_protocol(RawProtocol.model_validate(protocol_payload), "Mantle")

    assert record.deployment_tvls["Ethereum"] == 0.0
    assert record.target_tvl == 60_000_000.0


def test_null_target_tvl_defaults_to_zero(protocol_payload):
    protocol_payload["currentChainTvls"]["Mantle"] = None
    record = normalize_protocol(RawProtocol.model_validate(protocol_payload), "Mantle")

    assert record.chain_tvl == {"Mantle": 0.0}


def test_stablecoin_series_sorted_by_date():
    points = [
        RawStablecoinPoint.model_validate({"date": "1700006400", "totalBridgedToUSD": {"peggedUSD": 200.0}}),
        RawStablecoinPoint.model_validate({"date": "1699920000", "totalBridgedToUSD": {"peggedUSD": None}}),
        RawStablecoinPoint.model_validate({"date": "999999999", "totalBridgedToUSD": {"peggedUSD": 50.0}}),
    ]
    series = normalize_stablecoin_series(2, points)

    assert [p.date for p in series.points] == ["999999999", "1699920000", "1700006400"]
    assert series.values() == [50.0, 0.0, 200.0]
