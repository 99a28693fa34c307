import threading
import time
from typing import Any, Dict, List, Optional

ERROR_BOUNDARY_KEY = "error_boundary"


class Diagnostics:
    """Per-category marker buffers with a fixed capacity.

    A capacity of zero turns marking into a no-op for that category.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._max_markers: Dict[str, int] = {}
        self._markers: Dict[str, List[Dict[str, Any]]] = {}

    def set_max_markers(self, key: str, max_markers: int):
        with self._lock:
            self._max_markers[key] = max(0, max_markers)

    def is_enabled(self, key: str) -> bool:
        with self._lock:
            return self._max_markers.get(key, 0) > 0

    def get_marker_count(self, key: str) -> int:
        with self._lock:
            return len(self._markers.get(key, []))

    def start(self, key: str, marker_id: str, tag: str) -> bool:
        return self._add(key, {
            "markerID": marker_id,
            "key": tag,
            "action": "start",
            "timestamp": _now_ms(),
        })

    def end(
        self,
        key: str,
        marker_id: str,
        tag: str,
        success: bool,
        config_name: Optional[str] = None,
    ) -> bool:
        marker: Dict[str, Any] = {
            "markerID": marker_id,
            "key": tag,
            "action": "end",
            "timestamp": _now_ms(),
            "success": success,
        }
        if config_name is not None:
            marker["configName"] = config_name
        return self._add(key, marker)

    def get_markers(self, key: str) -> List[Dict[str, Any]]:
        with self._lock:
            return list(self._markers.get(key, []))

    def clear(self, key: str):
        with self._lock:
            self._markers.pop(key, None)

    def _add(self, key: str, marker: Dict[str, Any]) -> bool:
        with self._lock:
            markers = self._markers.setdefault(key, [])
            if len(markers) >= self._max_markers.get(key, 0):
                return False
            markers.append(marker)
            return True


def _now_ms() -> int:
    return int(time.time() * 1000)
