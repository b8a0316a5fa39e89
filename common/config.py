from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ApiConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    base_url: str = "https://public-api.wordpress.com"
    base_path: str = "/rest/v1.1/sites/"
    timeout: int = 20
    max_retries: int = Field(default=3, ge=1)
    user_agent: str = "WP-Ingestion/1.0"


class ExtractionConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    site_id: Optional[int] = None
    site_domain: str = ""
    token: str = ""

    include_posts: bool = False
    include_pages: bool = False
    include_events: bool = True

    modified_after_days: Optional[int] = None
    number: int = Field(default=20, gt=0)  # page size
    filter_path: str = ""
    get_protected: bool = False
    default_title: str = "Untitled"

    @model_validator(mode="after")
    def _check_requirements(self) -> "ExtractionConfig":
        errors = []
        if not self.site_id and not self.site_domain:
            errors.append("Either WordPress SiteID or SiteDomain is required")
        if not (self.include_posts or self.include_pages or self.include_events):
            errors.append(
                "At least one content type must be enabled "
                "(include_posts, include_pages, or include_events)"
            )
        # events are public, posts and pages need a bearer token
        if not self.token and (self.include_posts or self.include_pages):
            errors.append("Wordpress auth token is required when fetching posts or pages")
        if errors:
            raise ValueError(
                "Configuration validation failed:\n  • " + "\n  • ".join(errors)
            )
        return self

    @property
    def site_identifier(self) -> str:
        return str(self.site_id) if self.site_id else self.site_domain

    def content_kinds(self) -> list[str]:
        kinds = []
        if self.include_posts:
            kinds.append("posts")
        if self.include_pages:
            kinds.append("pages")
        if self.include_events:
            kinds.append("tribe events")
        return kinds


class ChunkingConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    max_tokens: int = Field(default=1000, gt=0)  # documents above this get chunked
    chunk_size: int = Field(default=1000, gt=0)
    overlap: int = Field(default=200, ge=0)
    chars_per_token: int = Field(default=4, gt=0)

    @model_validator(mode="after")
    def _check_overlap(self) -> "ChunkingConfig":
        if self.overlap >= self.chunk_size:
            raise ValueError("chunking.overlap must be smaller than chunking.chunk_size")
        return self


class GlobalYAMLConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    api: ApiConfig = ApiConfig()
    extraction: ExtractionConfig
    chunking: ChunkingConfig = ChunkingConfig()


class Secrets(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env", env_prefix="WORDPRESS_", extra="ignore"
    )

    token: str = ""


def load_yaml_config(
    path: Path = Path("config/config.yaml"),
    overrides: Optional[Dict[str, Any]] = None,
) -> GlobalYAMLConfig:
    """
    Build the run configuration from a YAML file plus CLI overrides.
    The auth token falls back to WORDPRESS_TOKEN (environment or .env).
    """
    raw: Dict[str, Any] = {}
    if path and Path(path).exists():
        with open(path, "r") as f:
            raw = yaml.safe_load(f) or {}

    extraction = dict(raw.get("extraction") or {})
    extraction.update({k: v for k, v in (overrides or {}).items() if v is not None})
    if not extraction.get("token"):
        extraction["token"] = Secrets().token
    raw["extraction"] = extraction
    return GlobalYAMLConfig(**raw)
