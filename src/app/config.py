"""Configuration management using Pydantic settings."""

from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "BASE-DEFENSE"
    debug: bool = False

    # Server
    host: str = "0.0.0.0"
    port: int = 8000

    # Play area (pixels)
    play_width: int = 800
    play_height: int = 600

    # Game loop
    tick_rate: float = 60.0          # advance() calls per second
    autostart_loop: bool = True      # start ticking on app startup
    fire_cooldown_ms: float = 350.0  # minimum gap between player shots

    # Optional JSON archetype table (defaults to the built-in table)
    archetypes_path: Optional[str] = None

    # Achievement minting
    sbt_contract_address: str = ""
    sbt_relay_url: str = ""
    sbt_minter_private_key: str = ""


settings = Settings()
