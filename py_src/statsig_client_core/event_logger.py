import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import List, Optional

import requests

from .identity import Identity
from .log_event import LogEvent
from .network import NetworkClient
from .observability_client import ObservabilityClient
from .output_logger_provider import OutputLogger
from .statsig_options import StatsigOptions

TAG = "EventLogger"


class EventLogger:
    """Buffers events and hands them to the transport in batches.

    Each queued event is part of exactly one flush attempt. Failed batches are
    logged and dropped.
    """

    def __init__(
        self,
        network: NetworkClient,
        identity: Identity,
        logger: OutputLogger,
        options: StatsigOptions,
        observability_client: Optional[ObservabilityClient] = None,
    ):
        self._network = network
        self._identity = identity
        self._logger = logger
        self._observability_client = observability_client
        self._log_event_url = options.get_log_event_url()
        self._max_queue_size = options.get_max_queue_size()
        self._flush_interval_s = options.get_flush_interval_ms() / 1000.0
        self._disabled = options.disable_all_logging is True

        self._queue: List[LogEvent] = []
        self._lock = threading.Lock()
        self._executor = ThreadPoolExecutor(
            max_workers=1, thread_name_prefix="statsig-log-flush"
        )
        self._stop = threading.Event()
        self._timer: Optional[threading.Thread] = None
        self._is_shutdown = False

    def start(self):
        if self._timer is not None or self._disabled:
            return
        self._timer = threading.Thread(
            target=self._run_periodic_flush, name="statsig-log-timer", daemon=True
        )
        self._timer.start()

    def log(self, event: LogEvent):
        if self._disabled:
            return

        with self._lock:
            if self._is_shutdown:
                return
            self._queue.append(event)
            should_flush = len(self._queue) >= self._max_queue_size

        if should_flush:
            self.flush()

    def flush(self, is_shutdown: bool = False) -> Future:
        events = self._drain()
        if events:
            self._gauge("flush_batch_size", len(events))

        if is_shutdown:
            return self._send_now(events)

        try:
            future = self._executor.submit(self._send, events)
        except RuntimeError:
            # executor already shut down
            return self._send_now(events)
        future.add_done_callback(self._on_flush_done)
        return future

    def shutdown(self):
        with self._lock:
            if self._is_shutdown:
                return
            self._is_shutdown = True

        # timer batches must reach the executor before the final drain
        self._stop.set()
        if self._timer is not None:
            self._timer.join()
        self._executor.shutdown(wait=True)
        self.flush(is_shutdown=True)

    def get_queue_size(self) -> int:
        with self._lock:
            return len(self._queue)

    def _drain(self) -> List[LogEvent]:
        with self._lock:
            events, self._queue = self._queue, []
        return events

    def _send_now(self, events: List[LogEvent]) -> Future:
        done: Future = Future()
        self._send(events)
        done.set_result(None)
        return done

    def _send(self, events: List[LogEvent]):
        if not events:
            return

        body = {
            "events": [event.to_dict() for event in events],
            "statsigMetadata": self._identity.get_statsig_metadata(),
        }
        try:
            self._network.post_log_events(self._log_event_url, body)
        except requests.RequestException as error:
            self._logger.warn(TAG, f"Failed to flush {len(events)} events: {error}")
            self._increment("events_dropped", len(events))
            return

        self._logger.debug(TAG, f"Flushed {len(events)} events")
        self._increment("events_flushed", len(events))

    def _increment(self, metric_name: str, value: int):
        if self._observability_client is not None:
            self._observability_client.increment(metric_name, value)

    def _gauge(self, metric_name: str, value: float):
        if self._observability_client is not None:
            self._observability_client.gauge(metric_name, value)

    def _on_flush_done(self, future: Future):
        error = future.exception()
        if error is not None:
            self._logger.error(TAG, f"Unexpected error while flushing events: {error!r}")

    def _run_periodic_flush(self):
        while not self._stop.wait(self._flush_interval_s):
            self.flush()
