import gzip
import json
import time
from typing import Any, Dict, Optional

import requests

from .metadata import SDK_TYPE, __version__
from .output_logger_provider import OutputLogger

TAG = "NetworkClient"

DEFAULT_POST_TIMEOUT_S = 10.0


class NetworkClient:
    """Thin wrapper over a ``requests.Session`` for the three endpoints the client talks to."""

    def __init__(self, sdk_key: str, logger: OutputLogger):
        self._sdk_key = sdk_key
        self._logger = logger
        self._session = requests.Session()

    def fetch_initialize(
        self, url: str, body: Dict[str, Any], timeout_ms: int
    ) -> Dict[str, Any]:
        response = self.post(url, body, timeout=timeout_ms / 1000.0)
        return response.json()

    def post_log_events(self, url: str, body: Dict[str, Any]) -> requests.Response:
        return self.post(url, body, compress=True)

    def post(
        self,
        url: str,
        body: Dict[str, Any],
        timeout: float = DEFAULT_POST_TIMEOUT_S,
        compress: bool = False,
        headers: Optional[Dict[str, str]] = None,
    ) -> requests.Response:
        data = json.dumps(body, default=str).encode("utf-8")
        request_headers = {
            "Content-Type": "application/json; charset=UTF-8",
            "STATSIG-API-KEY": self._sdk_key,
            "STATSIG-CLIENT-TIME": str(int(time.time() * 1000)),
            "STATSIG-SDK-TYPE": SDK_TYPE,
            "STATSIG-SDK-VERSION": __version__,
        }
        if compress:
            data = gzip.compress(data)
            request_headers["Content-Encoding"] = "gzip"
        if headers:
            request_headers.update(headers)

        self._logger.debug(TAG, f"POST {url} ({len(data)} bytes)")
        response = self._session.post(
            url, data=data, headers=request_headers, timeout=timeout
        )
        response.raise_for_status()
        return response

    def close(self):
        self._session.close()
