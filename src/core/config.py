"""Core configuration.

Why here:
- Centralizes environment variables (pydantic-settings) without polluting
  the CLI.
- Every component receives the same immutable `AppSettings` value instead of
  reading module-level globals (executable names, retry limits, markers).
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from core.domain.models import ContainerFormat

DEFAULT_COMPACT_SUCCESS_MARKER = "1 files within 1 directories were compressed"


def get_user_config_dir() -> Path:
    """Per-user configuration directory (cross-platform, no dependencies)."""

    if sys.platform.startswith("win"):
        base = Path(os.environ.get("APPDATA", str(Path.home())))
        return base / "wsl2backup"
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support" / "wsl2backup"

    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / "wsl2backup"
    return Path.home() / ".config" / "wsl2backup"


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


def write_user_env_vars(values: dict[str, str], env_path: Path | None = None) -> Path:
    """Write/update variables in the user's global .env."""

    env_path = env_path or get_user_env_file()
    env_path.parent.mkdir(parents=True, exist_ok=True)

    existing: dict[str, str] = {}
    if env_path.exists():
        existing = _parse_env_lines(env_path.read_text(encoding="utf-8"))

    existing.update({k: v for k, v in values.items() if v is not None})

    lines = ["# wsl2backup user config (.env)"]
    for key in sorted(existing.keys()):
        lines.append(f"{key}={existing[key]}")
    env_path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return env_path


class AppSettings(BaseSettings):
    """Central application configuration.

    Why pydantic-settings:
    - Typed and validated at the edge (env vars / .env) so the core never
      re-checks values.
    - A single configuration contract for CLI, services and adapters.
    """

    model_config = SettingsConfigDict(
        env_prefix="WSL2BACKUP_",
        extra="ignore",
        case_sensitive=False,
        frozen=True,
        # Order: project first (dev), then the user's global config.
        env_file=(".env", str(get_user_env_file())),
        env_file_encoding="utf-8",
    )

    wsl_executable: str = Field(
        default="wsl",
        min_length=1,
        description="Host tool used to list, terminate and export distributions.",
    )
    compact_executable: str = Field(
        default="compact",
        min_length=1,
        description="NTFS compression utility.",
    )

    default_distro: str = Field(
        default="kali-linux",
        min_length=1,
        description="Distribution backed up when --distro is not given.",
    )
    default_format: ContainerFormat = Field(
        default=ContainerFormat.VHDX,
        description="Export format when --format is not given.",
    )
    output_dir: Path | None = Field(
        default=None,
        description="Directory for generated output names (cwd when unset).",
    )

    # Force-stop loop
    stop_max_attempts: int = Field(
        default=5,
        ge=1,
        le=50,
        description="Maximum terminate commands issued before giving up.",
    )
    stop_backoff_seconds: float = Field(
        default=1.0,
        ge=0,
        description="Base delay before re-reading the registry after a terminate.",
    )
    stop_backoff_factor: float = Field(
        default=2.0,
        ge=1.0,
        description="Multiplier applied to the delay on every further attempt.",
    )
    verify_before_export: bool = Field(
        default=False,
        description="Re-read the registry right before exporting.",
    )

    process_timeout_seconds: float | None = Field(
        default=None,
        gt=0,
        description="Timeout for external commands; unset blocks until they exit.",
    )

    compact_success_marker: str = Field(
        default=DEFAULT_COMPACT_SUCCESS_MARKER,
        min_length=1,
        description="Phrase compact prints when the file was compressed.",
    )
    compact_output_encoding: str = Field(
        default="utf-8",
        min_length=1,
        description="Encoding of compact's console output.",
    )
    zip_compresslevel: int = Field(
        default=6,
        ge=0,
        le=9,
        description="Deflate level for --zip.",
    )

    log_level: str = Field(
        default="INFO",
        description="Root log level (DEBUG, INFO, WARNING, ERROR).",
    )

    def stop_delay(self, attempt: int) -> float:
        """Delay after the `attempt`-th terminate (0-based)."""

        return self.stop_backoff_seconds * (self.stop_backoff_factor**attempt)
