"""HTTP client for a remote match authority."""

from __future__ import annotations

import logging
from http.client import HTTPException
from typing import Any
from urllib.error import URLError
from urllib.request import Request, urlopen

import orjson

from salvo.game.core.models import Orientation, Player, ShipType, row_col
from salvo.game.core.reconciliation import RemoteUnavailableError

logger = logging.getLogger(__name__)


class HttpAuthority:
    """Posts match intents to `{base_url}/...` and returns decoded JSON objects."""

    def __init__(self, base_url: str, *, timeout: float = 5.0) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout

    def create_game(self) -> dict[str, Any]:
        return self._post("/create")

    def place_ship(
        self,
        game_id: str,
        player: Player,
        ship: ShipType,
        start: int,
        orientation: Orientation,
    ) -> dict[str, Any]:
        row, col = row_col(start)
        return self._post(
            f"/{game_id}/place-ship",
            {
                "player": player.seat,
                "shipType": ship.value.upper(),
                "x": row,
                "y": col,
                "horizontal": orientation is Orientation.HORIZONTAL,
            },
        )

    def start(self, game_id: str) -> dict[str, Any]:
        return self._post(f"/{game_id}/start")

    def shoot(self, game_id: str, player: Player, index: int) -> dict[str, Any]:
        row, col = row_col(index)
        return self._post(f"/{game_id}/shoot", {"player": player.seat, "x": row, "y": col})

    def _post(self, path: str, body: dict[str, Any] | None = None) -> dict[str, Any]:
        url = f"{self._base_url}{path}"
        data = orjson.dumps(body) if body is not None else None
        request = Request(
            url,
            data=data,
            method="POST",
            headers={"Content-Type": "application/json", "Accept": "application/json"},
        )
        try:
            with urlopen(request, timeout=self._timeout) as resp:  # noqa: S310
                raw = resp.read()
        except (URLError, OSError, HTTPException) as exc:
            logger.warning("authority_request_failed url=%s error=%s", url, exc)
            raise RemoteUnavailableError(f"Authority request to {url} failed: {exc}") from exc
        if not raw.strip():
            return {}
        try:
            payload = orjson.loads(raw)
        except orjson.JSONDecodeError as exc:
            raise RemoteUnavailableError(f"Authority returned invalid JSON from {url}.") from exc
        if not isinstance(payload, dict):
            raise RemoteUnavailableError(f"Authority payload from {url} is not a JSON object.")
        return payload
