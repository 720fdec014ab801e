"""Configuration models for page-clipper."""

import json
from pathlib import Path

from pydantic import BaseModel, Field

MAX_PAGE_BYTES = 5 * 1024 * 1024
MAX_PROMPT_CONTENT_CHARS = 100_000


class RetryConfig(BaseModel):
    """Configuration for bounded exponential-backoff retry."""

    max_attempts: int = Field(default=3, ge=1, le=10)
    base_delay: float = Field(default=1.0, ge=0.0, le=30.0)
    max_delay: float = Field(default=60.0, ge=0.0, le=600.0)


class FetcherConfig(BaseModel):
    """Configuration for page fetching."""

    max_bytes: int = Field(default=MAX_PAGE_BYTES, ge=1024)
    timeout_ms: int = Field(default=15000, ge=1000, le=120000)
    user_agent: str = "PageClipper/0.1 (+share-to-collection)"


class StoreConfig(BaseModel):
    """Configuration for the document-collection store."""

    base_url: str = "https://connect.craft.do/links/{space_id}/api/v1"
    timeout_ms: int = Field(default=15000, ge=1000, le=120000)


class ModelConfig(BaseModel):
    """Configuration for the generative model."""

    endpoint: str = "https://generativelanguage.googleapis.com/v1beta/models"
    model: str = "gemini-2.5-flash-lite"
    api_key_header: str = "x-goog-api-key"
    max_content_chars: int = Field(default=MAX_PROMPT_CONTENT_CHARS, ge=1000)
    timeout_ms: int = Field(default=60000, ge=1000, le=300000)


class AppConfig(BaseModel):
    """Main application configuration."""

    retry: RetryConfig = Field(default_factory=RetryConfig)
    fetcher: FetcherConfig = Field(default_factory=FetcherConfig)
    store: StoreConfig = Field(default_factory=StoreConfig)
    model: ModelConfig = Field(default_factory=ModelConfig)
    user_guidance: str = ""
    verbose: bool = False

    @classmethod
    def from_toml(cls, path: Path) -> "AppConfig":
        """Load config from a TOML file."""
        import tomllib

        with open(path, "rb") as f:
            data = tomllib.load(f)
        return cls.model_validate(data)

    def to_toml(self) -> str:
        """Render the settings that differ from the defaults as TOML."""
        data = self.model_dump(mode="json", exclude_defaults=True)
        top = [_toml_pair(key, value) for key, value in data.items() if not isinstance(value, dict)]
        blocks = ["\n".join(top)] if top else []
        for section, table in data.items():
            if isinstance(table, dict) and table:
                pairs = "\n".join(_toml_pair(key, value) for key, value in table.items())
                blocks.append(f"[{section}]\n{pairs}")
        return "\n\n".join(blocks) + "\n"

    def save(self, path: Path) -> None:
        """Write the non-default settings to ``path``, creating its directory."""
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(self.to_toml(), encoding="utf-8")


def _toml_pair(key: str, value: object) -> str:
    if isinstance(value, bool):
        literal = "true" if value else "false"
    elif isinstance(value, (int, float)):
        literal = repr(value)
    elif isinstance(value, list):
        literal = "[" + ", ".join(json.dumps(item, ensure_ascii=False) for item in value) + "]"
    else:
        # JSON string escapes are valid in TOML basic strings.
        literal = json.dumps(str(value), ensure_ascii=False)
    return f"{key} = {literal}"
