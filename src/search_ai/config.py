"""
Configuration

This module defines the explicit configuration structures for every stage of
the search pipeline, plus the environment-backed `Settings` object used by the
HTTP surface and the command line.

Design Goals
------------
- One named, documented field per tunable (no hidden class constants)
- Configuration objects are passed to constructors, never read implicitly
- Environment overrides via pydantic-settings, nested with `__`
  (e.g. ``PIPELINE__FETCH__BATCH_SIZE=4``)
"""

from __future__ import annotations

from typing import Dict, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


DESKTOP_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/121.0.0.0 Safari/537.36"
)

SEARCH_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/90.0.4430.212 Safari/537.36"
)


# ---------------------------------------------------------------------
# Stage Configuration
# ---------------------------------------------------------------------

class ResolverConfig(BaseModel):
    """
    Settings for turning a query into candidate links.
    """

    search_url: str = Field(
        default="https://www.google.com/search?q=",
        description="Search engine URL prefix; the encoded query is appended.",
    )

    result_selector: str = Field(
        default="a[jsname]",
        description="CSS selector matching result anchors in the engine's markup.",
    )

    blocked_host_terms: Tuple[str, ...] = Field(
        default=("google", "youtube"),
        description="Links whose host contains any of these terms are dropped.",
    )

    user_agent: str = Field(default=SEARCH_USER_AGENT)

    accept_language: str = Field(default="en-US,en;q=0.5")

    timeout: float = Field(
        default=60.0,
        gt=0,
        description="Seconds allowed for each navigation/extraction step.",
    )

    model_config = ConfigDict(extra="forbid")


class FetchConfig(BaseModel):
    """
    Settings for concurrent page fetching and text aggregation.
    """

    batch_size: int = Field(default=8, ge=1, description="Links fetched concurrently per batch.")
    max_batches: int = Field(default=5, ge=1, description="Batches beyond this count are never run.")
    page_timeout: float = Field(default=45.0, gt=0, description="Seconds allowed for one page navigation.")
    batch_timeout: float = Field(default=60.0, gt=0, description="Seconds allowed for a whole batch.")
    stagger_delay: float = Field(default=1.0, ge=0, description="Item i of a batch starts after i * stagger_delay seconds.")
    settle_delay: float = Field(default=1.0, ge=0, description="Seconds to wait after DOM ready before extracting.")
    jitter_min: float = Field(default=0.1, ge=0)
    jitter_max: float = Field(default=0.3, ge=0)
    max_content_length: int = Field(default=1_000_000, ge=1, description="Aggregated text is truncated to this many characters.")
    separator: str = Field(default=" ")

    referer: str = Field(default="https://www.google.com/")
    user_agent: str = Field(default=DESKTOP_USER_AGENT)
    viewport_width: int = Field(default=1920, ge=1)
    viewport_height: int = Field(default=1080, ge=1)
    extra_headers: Dict[str, str] = Field(
        default_factory=lambda: {
            "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8",
            "Accept-Language": "en-US,en;q=0.5",
            "Accept-Encoding": "gzip, deflate, br",
            "Connection": "keep-alive",
            "Upgrade-Insecure-Requests": "1",
            "Sec-Fetch-Dest": "document",
            "Sec-Fetch-Mode": "navigate",
            "Sec-Fetch-Site": "none",
            "Sec-Fetch-User": "?1",
            "DNT": "1",
        }
    )

    headless: bool = Field(default=True)
    launch_timeout: float = Field(default=45.0, gt=0)

    model_config = ConfigDict(extra="forbid")

    @model_validator(mode="after")
    def _check_jitter(self) -> "FetchConfig":
        if self.jitter_min > self.jitter_max:
            raise ValueError("jitter_min must not exceed jitter_max")
        return self

    @property
    def max_links(self) -> int:
        """Upper bound on links ever attempted in one fetch."""
        return self.batch_size * self.max_batches


class IndexConfig(BaseModel):
    """
    Settings for chunking, embedding, ranking and summary generation.
    """

    chunk_size: int = Field(default=1000, ge=1)
    chunk_overlap: int = Field(default=100, ge=0)

    embedding_model: str = Field(default="text-embedding-ada-002")
    embedding_dimension: int = Field(default=1536, ge=1)
    embedding_batch_size: int = Field(default=20, ge=1)
    embedding_concurrency: int = Field(default=4, ge=1)

    max_vectors: int = Field(default=1000, ge=1, description="VectorStore capacity (FIFO eviction).")
    default_k: int = Field(default=5, ge=1)

    completion_model: str = Field(default="gpt-4o")
    temperature: Optional[float] = Field(default=None, ge=0, le=2)

    model_config = ConfigDict(extra="forbid")

    @model_validator(mode="after")
    def _check_overlap(self) -> "IndexConfig":
        if self.chunk_overlap >= self.chunk_size:
            raise ValueError("chunk_overlap must be strictly less than chunk_size")
        return self


class PipelineConfig(BaseModel):
    """
    Complete configuration for one search pipeline.
    """

    resolver: ResolverConfig = Field(default_factory=ResolverConfig)
    fetch: FetchConfig = Field(default_factory=FetchConfig)
    index: IndexConfig = Field(default_factory=IndexConfig)

    openai_base_url: str = Field(default="https://api.openai.com/v1")
    http_timeout: float = Field(default=60.0, gt=0)

    model_config = ConfigDict(extra="forbid")


# ---------------------------------------------------------------------
# Environment Settings
# ---------------------------------------------------------------------

def mask_secret(secret: Optional[SecretStr]) -> str:
    """Return a log-safe rendering of an API key."""
    if secret is None:
        return "<unset>"
    raw = secret.get_secret_value()
    if len(raw) <= 8:
        return "***"
    return f"{raw[:5]}...{raw[-3:]}"


class Settings(BaseSettings):
    openai_api_key: Optional[SecretStr] = None
    log_level: str = "INFO"

    pipeline: PipelineConfig = Field(default_factory=PipelineConfig)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_nested_delimiter="__",
        extra="ignore",
    )

    @property
    def masked_api_key(self) -> str:
        return mask_secret(self.openai_api_key)


settings = Settings()
