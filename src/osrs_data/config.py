"""
Configuration management for the OSRS wiki mirror and extractors.

Loads settings from environment variables and a .env file, with sensible
defaults. The user agent has no default: the wiki's fair-use policy requires
an identifying contact string, and WikiClient refuses to start without one.
"""

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="OSRS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    user_agent: str | None = Field(
        default=None, description="Contact string sent in the User-Agent header"
    )
    api_url: str = Field(
        default="https://oldschool.runescape.wiki/api.php", description="MediaWiki API endpoint"
    )
    export_url: str = Field(
        default="https://oldschool.runescape.wiki/w/Special:Export",
        description="Special:Export endpoint for bulk dumps",
    )
    ge_limits_url: str = Field(
        default="https://oldschool.runescape.wiki/w/Module:GELimits/data.json?action=raw",
        description="Raw JSON of Grand Exchange buy limits",
    )
    api_timeout: float = Field(default=30.0, description="HTTP request timeout in seconds")
    request_interval: float = Field(
        default=1.0, ge=0.0, description="Minimum delay between two wiki requests in seconds"
    )

    min_page_size: int = Field(default=5, description="Smallest page size (bytes) to catalog")
    redirect_chunk_size: int = Field(default=50, ge=1, le=50)
    content_batch_size: int = Field(default=25, ge=1)
    dump_chunk_size: int = Field(default=1000, ge=1)

    db_path: Path = Field(
        default_factory=lambda: Path("wiki-data/wiki.sqlite"),
        description="SQLite database holding mirrored pages",
    )
    output_dir: Path = Field(
        default_factory=lambda: Path("data"),
        description="Directory receiving the exported JSON records",
    )
    cache_dir: Path = Field(
        default_factory=lambda: Path(".cache/osrs"),
        description="Cache storage directory",
    )
    exclusions_path: Path | None = Field(
        default=None, description="Override for the bundled exclusion heuristics YAML"
    )
    overrides_path: Path = Field(
        default_factory=lambda: Path("data/index/item_name_overrides.yaml"),
        description="Manual item name to id overrides",
    )
    log_level: str = Field(default="INFO", description="Logging level")

    weight_main_game: int = Field(default=3, description="Resolver weight for main game items")
    weight_exchange: int = Field(default=1, description="Resolver weight for GE items")
    weight_tradeable: int = Field(default=1, description="Resolver weight for tradeable items")


_settings: Settings | None = None


def get_settings() -> Settings:
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reload_settings() -> Settings:
    global _settings
    _settings = Settings()
    return _settings
