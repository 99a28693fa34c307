import json
import random
import threading
import traceback
from concurrent.futures import Future
from typing import Any, Callable, Dict, Optional, TypeVar

import requests

from .diagnostics import ERROR_BOUNDARY_KEY, Diagnostics
from .errors import StatsigInvalidArgumentError, StatsigUninitializedError
from .observability_client import ObservabilityClient
from .output_logger_provider import OutputLogger
from .statsig_options import DEFAULT_SDK_EXCEPTION_URL

T = TypeVar("T")

ExtraDataExtractor = Callable[[], Dict[str, Any]]

MAX_DIAGNOSTICS_MARKERS = 30
SAMPLING_RATE = 10_000
REPORT_TIMEOUT_S = 10.0


class ErrorBoundary:
    """Keeps unexpected SDK failures away from callers.

    Uninitialized and invalid-argument errors are the caller's bugs and are
    re-raised as-is. Anything else is reported once per exception type per
    session and replaced by the recovery value.
    """

    def __init__(
        self,
        logger: OutputLogger,
        diagnostics: Diagnostics,
        observability_client: Optional[ObservabilityClient] = None,
        sdk_key: str = "",
        exception_url: str = DEFAULT_SDK_EXCEPTION_URL,
    ):
        self._logger = logger
        self._diagnostics = diagnostics
        self._observability_client = observability_client
        self._sdk_key = sdk_key
        self._exception_url = exception_url
        self._statsig_metadata: Dict[str, Any] = {}
        self._seen = set()
        self._lock = threading.Lock()

        sampled = random.randrange(SAMPLING_RATE) == 0
        self._diagnostics.set_max_markers(
            ERROR_BOUNDARY_KEY, MAX_DIAGNOSTICS_MARKERS if sampled else 0
        )

    def configure(
        self,
        sdk_key: str,
        statsig_metadata: Dict[str, Any],
        exception_url: Optional[str] = None,
        observability_client: Optional[ObservabilityClient] = None,
    ):
        self._sdk_key = sdk_key
        self._statsig_metadata = statsig_metadata
        if exception_url:
            self._exception_url = exception_url
        if observability_client is not None:
            self._observability_client = observability_client

    def swallow(self, tag: str, task: Callable[[], Any]) -> None:
        self.capture(tag, task, lambda: None)

    def capture(
        self,
        tag: str,
        task: Callable[[], T],
        recover: Callable[[], T],
        get_extra_data: Optional[ExtraDataExtractor] = None,
        config_name: Optional[str] = None,
    ) -> T:
        marker_id = None
        try:
            marker_id = self._begin_marker(tag)
            result = task()
        except Exception as error:
            self._end_marker(tag, False, marker_id, config_name)
            return self._on_caught(tag, error, recover, get_extra_data)

        if isinstance(result, Future):
            return self._capture_future(
                tag, result, recover, get_extra_data, config_name, marker_id
            )

        self._end_marker(tag, True, marker_id, config_name)
        return result

    def log_error(
        self,
        tag: str,
        error: BaseException,
        get_extra_data: Optional[ExtraDataExtractor] = None,
    ):
        name = type(error).__name__
        with self._lock:
            if name in self._seen:
                return
            self._seen.add(name)

        threading.Thread(
            target=self._report,
            args=(tag, name, error, get_extra_data),
            name="statsig-error-report",
            daemon=True,
        ).start()

    def _capture_future(
        self,
        tag: str,
        inner: Future,
        recover: Callable[[], Any],
        get_extra_data: Optional[ExtraDataExtractor],
        config_name: Optional[str],
        marker_id: Optional[str],
    ) -> Future:
        outer: Future = Future()

        def on_done(done: Future):
            if done.cancelled():
                self._end_marker(tag, False, marker_id, config_name)
                outer.cancel()
                return

            error = done.exception()
            if error is None:
                self._end_marker(tag, True, marker_id, config_name)
                outer.set_result(done.result())
                return

            self._end_marker(tag, False, marker_id, config_name)
            try:
                recovered = self._on_caught(tag, error, recover, get_extra_data)
                # recovery for a future-returning task may itself be a completed future
                if isinstance(recovered, Future):
                    recovered = recovered.result()
                outer.set_result(recovered)
            except Exception as passthrough:
                outer.set_exception(passthrough)

        inner.add_done_callback(on_done)
        return outer

    def _on_caught(
        self,
        tag: str,
        error: BaseException,
        recover: Callable[[], T],
        get_extra_data: Optional[ExtraDataExtractor],
    ) -> T:
        if isinstance(error, (StatsigUninitializedError, StatsigInvalidArgumentError)):
            raise error

        self._logger.error(tag, f"An unexpected exception occurred. {error!r}")
        if self._observability_client is not None:
            try:
                self._observability_client.error(tag, repr(error))
            except Exception as client_error:
                self._logger.warn(tag, f"ObservabilityClient.error failed: {client_error!r}")

        self.log_error(tag, error, get_extra_data)
        return recover()

    def _report(
        self,
        tag: str,
        name: str,
        error: BaseException,
        get_extra_data: Optional[ExtraDataExtractor],
    ):
        try:
            extra = get_extra_data() if callable(get_extra_data) else None
            info = "".join(
                traceback.format_exception(type(error), error, error.__traceback__)
            )
            metadata = self._statsig_metadata
            body = json.dumps(
                {
                    "tag": tag,
                    "exception": name,
                    "info": info,
                    "statsigMetadata": metadata,
                    "extra": extra or {},
                },
                default=str,
            )
            requests.post(
                self._exception_url,
                data=body,
                headers={
                    "STATSIG-API-KEY": self._sdk_key,
                    "STATSIG-SDK-TYPE": str(metadata.get("sdkType")),
                    "STATSIG-SDK-VERSION": str(metadata.get("sdkVersion")),
                    "Content-Type": "application/json; charset=UTF-8",
                },
                timeout=REPORT_TIMEOUT_S,
            )
        except Exception as report_error:
            self._logger.debug("ErrorBoundary", f"Failed to report exception: {report_error!r}")

    def _begin_marker(self, tag: str) -> Optional[str]:
        if not self._diagnostics.is_enabled(ERROR_BOUNDARY_KEY):
            return None
        count = self._diagnostics.get_marker_count(ERROR_BOUNDARY_KEY)
        marker_id = f"{tag}_{count}"
        was_added = self._diagnostics.start(ERROR_BOUNDARY_KEY, marker_id, tag)
        return marker_id if was_added else None

    def _end_marker(
        self,
        tag: str,
        was_successful: bool,
        marker_id: Optional[str],
        config_name: Optional[str] = None,
    ):
        if marker_id is None:
            return
        self._diagnostics.end(
            ERROR_BOUNDARY_KEY, marker_id, tag, was_successful, config_name
        )
