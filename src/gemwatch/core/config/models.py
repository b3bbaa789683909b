"""
Pydantic configuration models for GemWatch.

These models provide type-safe configuration with validation for:
- Target site layout (URLs and selectors)
- Browser session settings
- Wait/poll timing
- Storage and export paths
- Logging
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field, field_validator


# =============================================================================
# Site Configuration
# =============================================================================


class SiteConfig(BaseModel):
    """Layout of the one target listing site."""

    base_url: str = Field(
        default="https://bidplus.gem.gov.in",
        description="Origin used to absolutize relative links",
    )
    listing_url: str = Field(
        default="https://bidplus.gem.gov.in/all-bids",
        description="Page holding the paginated bid cards",
    )
    card_selector: str = Field(
        default=".card",
        description="Selector matching one rendered listing card",
    )
    keyword_input_selector: str = Field(
        default='input[placeholder*="Enter Keyword" i], input[placeholder*="Enter Keywords" i]',
        description="Selector enumerating keyword input candidates",
    )
    navbar_input_id: str = Field(
        default="search",
        description="Element id of the site-wide navbar search box",
    )
    search_trigger_selector: str = Field(
        default=(
            'xpath=ancestor::div[contains(@class,"input-group")][1]//button'
            ' | following-sibling::*[1]/descendant-or-self::button'
        ),
        description="Selector, relative to the keyword input, for its search button",
    )
    next_link_selectors: list[str] = Field(
        default_factory=lambda: [
            'a:has-text("Next")[href^="#page-"]',
            'a[href^="#page-"]:has-text("Next")',
        ],
        description="Next-page selectors, strictest first",
    )

    @field_validator("base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Keep the origin without a trailing slash."""
        return v.rstrip("/")

    @field_validator("next_link_selectors")
    @classmethod
    def require_next_selector(cls, v: list[str]) -> list[str]:
        if not v:
            raise ValueError("at least one next link selector is required")
        return v


# =============================================================================
# Browser Configuration
# =============================================================================


class BrowserConfig(BaseModel):
    """Playwright session settings."""

    headless: bool = Field(default=True, description="Run the browser headless")
    timeout_seconds: float = Field(
        default=60.0,
        ge=1.0,
        le=300.0,
        description="Default timeout for navigation and element waits",
    )
    viewport_width: int = Field(default=1920, ge=320)
    viewport_height: int = Field(default=1080, ge=240)
    user_agent: str | None = Field(
        default=None,
        description="Custom user agent (a desktop Chrome UA is used when unset)",
    )
    stealth: bool = Field(default=True, description="Hide common automation markers")
    screenshots_on_error: bool = Field(default=True)
    screenshots_dir: Path = Field(default=Path("snapshots"))


# =============================================================================
# Timing Configuration
# =============================================================================


class TimingConfig(BaseModel):
    """Budgets for DOM waits and the change-detection poll."""

    wait_timeout_ms: int = Field(
        default=60000,
        ge=100,
        description="Budget for any single DOM/element wait",
    )
    settle_ms: int = Field(
        default=500,
        ge=0,
        description="Delay after the listing is detected as refreshed",
    )
    poll_interval_ms: int = Field(
        default=100,
        ge=10,
        description="Interval between change-detection polls",
    )
    type_delay_ms: int = Field(
        default=25,
        ge=0,
        description="Per-keystroke delay when typing a keyword",
    )


# =============================================================================
# Storage Configuration
# =============================================================================


class StorageConfig(BaseModel):
    """Locations of the persisted store and CSV exports."""

    store_path: Path = Field(default=Path("data/tenders.json"))
    export_dir: Path = Field(default=Path("exports"))

    @property
    def matches_csv(self) -> Path:
        return self.export_dir / "matches.csv"

    @property
    def all_csv(self) -> Path:
        return self.export_dir / "all.csv"


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = Field(default="INFO", pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$")
    file: Path | None = Field(default=Path("logs/gemwatch.log"))
    json_format: bool = Field(default=True)
    rich_console: bool = Field(default=True)

    @field_validator("level", mode="before")
    @classmethod
    def upper_level(cls, v: str) -> str:
        return str(v).upper()


# =============================================================================
# Application Configuration
# =============================================================================


class AppConfig(BaseModel):
    """Top-level application configuration (configs/app.yaml)."""

    site: SiteConfig = Field(default_factory=SiteConfig)
    browser: BrowserConfig = Field(default_factory=BrowserConfig)
    timing: TimingConfig = Field(default_factory=TimingConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    max_page_limit: int = Field(
        default=50,
        ge=1,
        description="Upper bound accepted for a run's page limit",
    )
