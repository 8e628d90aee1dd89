from __future__ import annotations

from functools import lru_cache
from typing import Dict

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Runtime
    ENV: str = Field(default="development")
    LOG_LEVEL: str = Field(default="INFO")
    HOST: str = Field(default="0.0.0.0")
    PORT: int = Field(default=8000)

    # Target network, as spelled in DefiLlama chain maps
    NETWORK: str = Field(default="Mantle")

    # Upstream feeds (public, unauthenticated)
    LLAMA_API_BASE: str = Field(default="https://api.llama.fi")
    COINS_API_BASE: str = Field(default="https://coins.llama.fi")
    STABLECOINS_API_BASE: str = Field(default="https://stablecoins.llama.fi")

    # HTTP client
    HTTP_TIMEOUT_SECONDS: float = Field(default=10.0, gt=0)
    HTTP_MAX_CONNECTIONS: int = Field(default=20, ge=1)
    HTTP_MAX_KEEPALIVE: int = Field(default=10, ge=0)

    # Per tool call deadline
    INVOCATION_DEADLINE_SECONDS: float = Field(default=30.0, gt=0)

    # Protocol slug -> tool name prefix
    TRACKED_PROTOCOLS: Dict[str, str] = Field(
        default_factory=lambda: {
            "merchant-moe": "merchant-moe",
            "treehouse-protocol": "treehouse-protocol",
        }
    )
    # Stablecoin symbol -> DefiLlama stablecoin id
    TRACKED_STABLECOINS: Dict[str, int] = Field(default_factory=lambda: {"USDT": 1, "USDC": 2})

    def network_slug(self) -> str:
        return self.NETWORK.strip().lower()

    def price_key(self, contract_address: str) -> str:
        return f"{self.network_slug()}:{contract_address.strip()}"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
