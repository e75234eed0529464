"""Simulator configuration management."""
from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict


class SimulatorConfig(BaseSettings):
    """Simulator configuration from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Ethereum node
    ethereum_rpc_url: Optional[str] = None
    rpc_timeout_default: int = 10

    # API Server
    api_port: int = 4000
    api_host: str = "0.0.0.0"
    cors_origins: str = "http://localhost:5173"

    # Logging
    log_level: str = "INFO"

    @property
    def cors_origins_list(self) -> list[str]:
        """Parse CORS origins from comma-separated string."""
        return [origin.strip() for origin in self.cors_origins.split(",")]


config = SimulatorConfig()
