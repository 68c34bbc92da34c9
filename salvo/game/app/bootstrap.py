"""Wiring of a match service from configuration."""

from __future__ import annotations

import logging

from salvo.game.app.match_service import MatchService
from salvo.game.core.reconciliation import Authority
from salvo.game.infra.app_data import ensure_app_data_dirs
from salvo.game.infra.config import MatchConfig, load_default_env_files, load_match_config
from salvo.game.infra.http_authority import HttpAuthority
from salvo.game.infra.logging import setup_logging
from salvo.game.infra.store import JsonFileStateStore

logger = logging.getLogger(__name__)


def build_match_service(config: MatchConfig | None = None) -> MatchService:
    """Build a service with a file-backed store and, when configured, an HTTP authority."""
    resolved = config if config is not None else load_match_config()
    state_dir = resolved.state_dir
    if state_dir is None:
        state_dir = ensure_app_data_dirs()["state"]
    authority: Authority | None = None
    if resolved.authority_url:
        authority = HttpAuthority(resolved.authority_url, timeout=resolved.authority_timeout)
    logger.info(
        "match_service state_dir=%s authority=%s",
        state_dir,
        resolved.authority_url or "local",
    )
    return MatchService(JsonFileStateStore(state_dir), authority)


def bootstrap() -> MatchService:
    """Load env files, set up logging, and build the match service."""
    load_default_env_files()
    paths = ensure_app_data_dirs()
    setup_logging()
    logger.info(
        "app_data_paths root=%s logs=%s state=%s", paths["root"], paths["logs"], paths["state"]
    )
    return build_match_service()
