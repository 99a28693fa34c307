from typing import Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from .data_store import DataStore
    from .observability_client import ObservabilityClient
    from .output_logger_provider import OutputLoggerProvider

DEFAULT_INITIALIZE_URL = "https://featuregates.org/v1/initialize"
DEFAULT_LOG_EVENT_URL = "https://events.statsigapi.net/v1/log_event"
DEFAULT_SDK_EXCEPTION_URL = "https://statsigapi.net/v1/sdk_exception"

DEFAULT_INIT_TIMEOUT_MS = 3000
DEFAULT_EVENT_LOGGING_FLUSH_INTERVAL_MS = 10_000
DEFAULT_EVENT_LOGGING_MAX_QUEUE_SIZE = 100


class StatsigOptions:
    initialize_url: Optional[str]
    log_event_url: Optional[str]
    sdk_exception_url: Optional[str]
    init_timeout_ms: Optional[int]
    event_logging_flush_interval_ms: Optional[int]
    event_logging_max_queue_size: Optional[int]
    disable_all_logging: Optional[bool]
    environment: Optional[str]
    output_log_level: Optional[str]
    output_logger_provider: Optional["OutputLoggerProvider"]
    observability_client: Optional["ObservabilityClient"]
    data_store: Optional["DataStore"]
    override_stable_id: Optional[str]

    def __init__(
        self,
        initialize_url: Optional[str] = None,
        log_event_url: Optional[str] = None,
        sdk_exception_url: Optional[str] = None,
        init_timeout_ms: Optional[int] = None,
        event_logging_flush_interval_ms: Optional[int] = None,
        event_logging_max_queue_size: Optional[int] = None,
        disable_all_logging: Optional[bool] = None,
        environment: Optional[str] = None,
        output_log_level: Optional[str] = None,
        output_logger_provider: Optional["OutputLoggerProvider"] = None,
        observability_client: Optional["ObservabilityClient"] = None,
        data_store: Optional["DataStore"] = None,
        override_stable_id: Optional[str] = None,
    ) -> None:
        self.initialize_url = initialize_url
        self.log_event_url = log_event_url
        self.sdk_exception_url = sdk_exception_url
        self.init_timeout_ms = init_timeout_ms
        self.event_logging_flush_interval_ms = event_logging_flush_interval_ms
        self.event_logging_max_queue_size = event_logging_max_queue_size
        self.disable_all_logging = disable_all_logging
        self.environment = environment
        self.output_log_level = output_log_level
        self.output_logger_provider = output_logger_provider
        self.observability_client = observability_client
        self.data_store = data_store
        self.override_stable_id = override_stable_id

    def get_initialize_url(self) -> str:
        return self.initialize_url or DEFAULT_INITIALIZE_URL

    def get_log_event_url(self) -> str:
        return self.log_event_url or DEFAULT_LOG_EVENT_URL

    def get_sdk_exception_url(self) -> str:
        return self.sdk_exception_url or DEFAULT_SDK_EXCEPTION_URL

    def get_init_timeout_ms(self) -> int:
        return _positive_or(self.init_timeout_ms, DEFAULT_INIT_TIMEOUT_MS)

    def get_flush_interval_ms(self) -> int:
        return _positive_or(
            self.event_logging_flush_interval_ms,
            DEFAULT_EVENT_LOGGING_FLUSH_INTERVAL_MS,
        )

    def get_max_queue_size(self) -> int:
        return _positive_or(
            self.event_logging_max_queue_size, DEFAULT_EVENT_LOGGING_MAX_QUEUE_SIZE
        )


def _positive_or(value: Optional[int], default: int) -> int:
    if isinstance(value, int) and not isinstance(value, bool) and value > 0:
        return value
    return default
