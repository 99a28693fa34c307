from typing import Optional, Dict


class ObservabilityClient:
    def init(self):
        pass

    def increment(self, metric_name: str, value: float, tags: Optional[Dict[str, str]] = None):
        pass

    def gauge(self, metric_name: str, value: float, tags: Optional[Dict[str, str]] = None):
        pass

    def dist(self, metric_name: str, value: float, tags: Optional[Dict[str, str]] = None):
        pass

    def error(self, tag: str, error: str):
        pass
