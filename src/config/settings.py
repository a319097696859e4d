"""Application settings loaded from environment variables."""

from functools import lru_cache

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Server
    host: str = "0.0.0.0"
    port: int = 3000

    # Comma-separated list of browser origins allowed by CORS
    cors_allowed_origins: str = (
        "https://travel-agent-ai-planner.netlify.app,http://localhost:3000"
    )

    # Upstream credentials
    openai_api_key: str = ""
    openweather_api_key: str = ""
    ticketmaster_api_key: str = ""
    amadeus_api_key: str = ""
    amadeus_api_secret: str = ""
    exchangerate_api_key: str = ""

    # Upstream endpoints
    openai_base_url: str = "https://api.openai.com"
    openweather_base_url: str = "https://api.openweathermap.org"
    ticketmaster_base_url: str = "https://app.ticketmaster.com"
    amadeus_base_url: str = "https://test.api.amadeus.com"
    exchangerate_base_url: str = "https://v6.exchangerate-api.com"

    # Chat completion parameters
    openai_model: str = "gpt-4"
    openai_temperature: float = 0.7
    openai_max_tokens: int = 1024

    # Upstream call behaviour
    upstream_timeout_seconds: float = 30.0
    upstream_connect_timeout_seconds: float = 10.0
    amadeus_token_strategy: str = "per_request"  # per_request | cached

    # Rate limiting
    rate_limit_backend: str = "memory"  # memory | dynamodb
    rate_limit_window_seconds: int = 86400  # daily windows
    rate_limit_ask: int = 50
    rate_limit_weather: int = 200
    rate_limit_events: int = 100
    rate_limit_flights: int = 50
    rate_limit_hotels: int = 50
    rate_limit_cars: int = 50
    rate_limit_currency: int = 500
    dynamodb_table_name: str = "travel-proxy-rate-limits"
    aws_region: str = "us-east-1"

    # Logging
    log_level: str = "INFO"
    audit_log_file: str = ""  # Empty = stdout only

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}

    @property
    def cors_origins_list(self) -> list[str]:
        """Parse comma-separated origins, dropping blanks."""
        return [o.strip() for o in self.cors_allowed_origins.split(",") if o.strip()]

    def route_limit(self, route: str) -> int:
        """Max requests per window for a named route."""
        return getattr(self, f"rate_limit_{route}")


@lru_cache
def get_settings() -> Settings:
    return Settings()
