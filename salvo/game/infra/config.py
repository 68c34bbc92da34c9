"""Match configuration and env loading."""

from __future__ import annotations

import os
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from salvo.game.infra.app_data import resolve_app_data_root, resolve_state_dir

DEFAULT_AUTHORITY_TIMEOUT = 5.0


@dataclass(frozen=True, slots=True)
class MatchConfig:
    """Runtime options for wiring a match."""

    authority_url: str | None = None
    authority_timeout: float = DEFAULT_AUTHORITY_TIMEOUT
    state_dir: Path | None = None


def load_match_config() -> MatchConfig:
    """Read match options from the process environment."""
    url = os.getenv("SALVO_AUTHORITY_URL", "").strip()
    return MatchConfig(
        authority_url=url.rstrip("/") or None,
        authority_timeout=_env_float("SALVO_AUTHORITY_TIMEOUT", DEFAULT_AUTHORITY_TIMEOUT),
        state_dir=_env_path("SALVO_STATE_DIR") or resolve_state_dir(),
    )


def load_env_file(path: str = ".env", *, override_existing: bool = True) -> None:
    """Load KEY=VALUE pairs from an env file into process environment.

    By default, values from the env file overwrite existing environment variables.
    """
    env_path = Path(path)
    if not env_path.exists():
        return

    for raw_line in env_path.read_text(encoding="utf-8").splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        if "=" not in line:
            continue

        key, value = line.split("=", 1)
        key = key.strip()
        value = value.strip()
        if not key:
            continue

        if len(value) >= 2 and value[0] == value[-1] and value[0] in {"'", '"'}:
            value = value[1:-1]

        if override_existing or key not in os.environ:
            os.environ[key] = value


def load_default_env_files(
    *, override_existing: bool = True, paths: Sequence[str] | None = None
) -> None:
    """Load env files with optional local overrides.

    Precedence is left-to-right because later loads may overwrite previous values.
    Default order:
    1) appdata/config/.env
    2) appdata/config/.env.local
    3) .env
    4) .env.local
    """
    to_load = (
        tuple(paths)
        if paths is not None
        else (
            "appdata/config/.env",
            "appdata/config/.env.local",
            ".env",
            ".env.local",
        )
    )
    for path in to_load:
        load_env_file(path, override_existing=override_existing)


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = float(raw.strip())
    except ValueError:
        return default
    return value if value > 0 else default


def _env_path(name: str) -> Path | None:
    raw = os.getenv(name, "").strip()
    if not raw:
        return None
    candidate = Path(raw)
    if candidate.is_absolute():
        return candidate
    return resolve_app_data_root() / candidate
