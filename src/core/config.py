"""Core configuration.

Why here:
- Centralizes environment variables (pydantic-settings) without leaking into the CLI.
- Lets adapters (HTTP client) and the populator read config consistently.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


def get_user_config_dir() -> Path:
    """Per-user configuration directory (cross-platform, no dependencies).

    Lets users store the API token once instead of editing a project `.env`.
    """

    if sys.platform.startswith("win"):
        base = Path(os.environ.get("APPDATA", str(Path.home())))
        return base / "webflow-populate"
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support" / "webflow-populate"

    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / "webflow-populate"
    return Path.home() / ".config" / "webflow-populate"


def get_user_env_file() -> Path:
    return get_user_config_dir() / ".env"


def _parse_env_lines(text: str) -> dict[str, str]:
    data: dict[str, str] = {}
    for raw_line in text.splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        if "=" not in line:
            continue
        key, value = line.split("=", 1)
        key = key.strip()
        value = value.strip().strip('"').strip("'")
        if key:
            data[key] = value
    return data


def write_user_env_vars(values: dict[str, str | None], env_path: Path | None = None) -> Path:
    """Write/update variables in the user's global .env file."""

    env_path = env_path or get_user_env_file()
    env_path.parent.mkdir(parents=True, exist_ok=True)

    existing: dict[str, str] = {}
    if env_path.exists():
        existing = _parse_env_lines(env_path.read_text(encoding="utf-8"))

    existing.update({k: v for k, v in values.items() if v is not None})

    lines = ["# webflow-populate user config (.env)"]
    for key in sorted(existing.keys()):
        lines.append(f"{key}={existing[key]}")
    env_path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return env_path


class AppSettings(BaseSettings):
    """Central application settings.

    Why pydantic-settings:
    - Typing + validation at the edge (env vars) without polluting the core.
    - A single configuration contract shared by the CLI and the adapters.
    """

    model_config = SettingsConfigDict(
        env_prefix="WEBFLOW_",
        extra="ignore",
        case_sensitive=False,
        # Order: project first (dev), then the user's global config.
        env_file=(".env", str(get_user_env_file())),
        env_file_encoding="utf-8",
    )

    api_token: str | None = Field(
        default=None,
        description="Webflow API token (bearer).",
    )
    site_id: str | None = Field(
        default=None,
        description="Webflow site whose collections are listed.",
    )
    api_base_url: str = Field(
        default="https://api.webflow.com",
        min_length=8,
        description="Base URL of the Webflow content API.",
    )
    api_version: str = Field(
        default="1.0.0",
        min_length=1,
        description="Value sent in the `accept-version` header.",
    )

    http_timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        description="Per-request timeout (seconds).",
    )
    user_agent: str = Field(
        default="webflow-populate/0.1",
        min_length=1,
        description="User-Agent for API requests.",
    )

    items_page_limit: int = Field(
        default=100,
        ge=1,
        le=100,
        description="`limit` sent when listing the items of a collection.",
    )
    max_depth: int = Field(
        default=32,
        ge=1,
        le=1000,
        description="Maximum nesting of referenced items populated for one root item.",
    )
