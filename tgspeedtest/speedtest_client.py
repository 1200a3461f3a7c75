"""HTTP client for the speed test service."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import requests

SPEEDTEST_METHOD = "/speedtest"


class SpeedTestError(Exception):
    """Raised when a speed test request fails."""


@dataclass(frozen=True)
class SpeedTestResult:
    """Upload and download speeds in Mbit/s."""

    upload_speed_mbps: float = 0.0
    download_speed_mbps: float = 0.0

    @classmethod
    def from_dict(cls, data: Any) -> SpeedTestResult:
        if not isinstance(data, dict):
            raise ValueError("speed test result must be a JSON object")
        return cls(
            float(data.get("upload_speed_mbps", 0.0)),
            float(data.get("download_speed_mbps", 0.0)),
        )

    def to_dict(self) -> dict[str, float]:
        return {
            "upload_speed_mbps": self.upload_speed_mbps,
            "download_speed_mbps": self.download_speed_mbps,
        }


class SpeedTestClient:
    """Calls the speed test service at ``addr``."""

    def __init__(self, addr: str, session: requests.Session | None = None, timeout: float | None = None) -> None:
        self.addr = addr
        self._session = session or requests.Session()
        self._timeout = timeout

    def speed_test(self, chat_id: int, app_id: int = 0, app_hash: str = "", proxy: str = "") -> SpeedTestResult:
        params = {
            "chat_id": str(chat_id),
            "app_id": str(app_id) if app_id else "",
            "app_hash": app_hash,
            "mb": "10",
        }
        if proxy:
            params["proxy"] = proxy
        try:
            response = self._session.get(
                self.addr + SPEEDTEST_METHOD, params=sorted(params.items()), timeout=self._timeout
            )
        except requests.RequestException as exc:
            raise SpeedTestError(f"failed to do request: {exc}") from exc
        with response:
            if response.status_code != 200:
                raise SpeedTestError(f"bad status code: {response.status_code}")
            try:
                return SpeedTestResult.from_dict(response.json())
            except (ValueError, TypeError) as exc:
                raise SpeedTestError(f"failed to decode response: {exc}") from exc