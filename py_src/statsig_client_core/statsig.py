import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor
from enum import Enum
from typing import Any, Mapping, Optional, Union

import requests

from .data_store import DataStore
from .diagnostics import ERROR_BOUNDARY_KEY, Diagnostics
from .error_boundary import ErrorBoundary
from .errors import (
    StatsigInitializationError,
    StatsigInvalidArgumentError,
    StatsigUninitializedError,
)
from .evaluation_store import EvaluationResult, EvaluationStore
from .event_logger import EventLogger
from .identity import Identity
from .log_event import (
    CONFIG_EXPOSURE_EVENT,
    DIAGNOSTICS_EVENT,
    GATE_EXPOSURE_EVENT,
    LogEvent,
)
from .network import NetworkClient
from .output_logger_provider import OutputLogger
from .statsig_options import StatsigOptions
from .statsig_types import DynamicConfig, Experiment, FeatureGate
from .statsig_user import StatsigUser

TAG = "Statsig"

CLIENT_KEY_PREFIX = "client-"


class InitializationState(Enum):
    UNINITIALIZED = "uninitialized"
    INITIALIZING = "initializing"
    READY = "ready"


class Statsig:
    """A single client SDK session.

    ``initialize`` fetches pre-evaluated values for one user; every query after
    that is answered from the local cache and logs an exposure.
    """

    _statsig_shared_instance: Optional["Statsig"] = None

    def __init__(self):
        self._lock = threading.Lock()
        self._state = InitializationState.UNINITIALIZED
        self._init_future: Optional[Future] = None
        self._is_shutdown = False

        self._options = StatsigOptions()
        self._output_logger = OutputLogger()
        self._diagnostics = Diagnostics()
        self._error_boundary = ErrorBoundary(self._output_logger, self._diagnostics)

        self._identity: Optional[Identity] = None
        self._store = EvaluationStore(self._output_logger)
        self._network: Optional[NetworkClient] = None
        self._event_logger: Optional[EventLogger] = None
        self._sync_executor: Optional[ThreadPoolExecutor] = None

    # ----------------------------
    #       Shared Instance
    # ----------------------------

    @classmethod
    def shared(cls) -> "Statsig":
        if not Statsig.has_shared_instance() or cls._statsig_shared_instance is None:
            return create_statsig_error_instance(
                "Statsig.shared() called, but no instance has been set with Statsig.new_shared(...)"
            )

        return cls._statsig_shared_instance

    @classmethod
    def new_shared(cls) -> "Statsig":
        if Statsig.has_shared_instance():
            return create_statsig_error_instance(
                "Statsig shared instance already exists. Call Statsig.remove_shared() before creating a new instance."
            )

        cls._statsig_shared_instance = cls()
        return cls._statsig_shared_instance

    @classmethod
    def remove_shared(cls) -> None:
        cls._statsig_shared_instance = None

    @classmethod
    def has_shared_instance(cls) -> bool:
        return (
            hasattr(cls, "_statsig_shared_instance")
            and cls._statsig_shared_instance is not None
        )

    # ------------------------------------------------------------ [ Lifecycle ]

    def initialize(
        self,
        sdk_key: str,
        user: Optional[Union[StatsigUser, Mapping[str, Any]]] = None,
        options: Optional[StatsigOptions] = None,
    ) -> Future:
        """
        Fetches values for ``user`` in the background.

        Concurrent calls share one request. The returned future fails only when
        ``sdk_key`` is not a client key; network trouble still ends in a ready
        session, with every gate off and every config empty.
        """
        return self._error_boundary.capture(
            "initialize",
            lambda: self._initialize_impl(sdk_key, user, options),
            _completed_future,
        )

    def update_user(self, user: Optional[Union[StatsigUser, Mapping[str, Any]]]) -> Future:
        """Switches the session to ``user`` and refetches its values."""
        return self._error_boundary.capture(
            "updateUser",
            lambda: self._update_user_impl(user),
            _completed_future,
        )

    def shutdown(self) -> None:
        """Flushes queued events and releases the session's resources."""
        self._error_boundary.swallow("shutdown", self._shutdown_impl)

    def flush_events(self) -> Future:
        """
        Manually trigger flush of queued events
        """
        return self._error_boundary.capture(
            "flushEvents", self._flush_events_impl, _completed_future
        )

    def get_initialization_state(self) -> InitializationState:
        with self._lock:
            return self._state

    def get_current_user(self) -> Optional[StatsigUser]:
        if self._identity is None:
            return None
        return self._identity.get_user()

    # ------------------------------------------------------------ [ Core APIs ]

    def check_gate(self, gate_name: str) -> bool:
        """
        :param gate_name: name of the gate
        :return: bool, whether the current user passes this gate or not
        """
        return self._error_boundary.capture(
            "checkGate",
            lambda: self._get_feature_gate_impl(gate_name).value,
            lambda: False,
            config_name=_name_for_marker(gate_name),
        )

    def get_feature_gate(self, gate_name: str) -> FeatureGate:
        return self._error_boundary.capture(
            "getFeatureGate",
            lambda: self._get_feature_gate_impl(gate_name),
            lambda: FeatureGate(gate_name),
            config_name=_name_for_marker(gate_name),
        )

    def get_config(self, config_name: str) -> DynamicConfig:
        return self._error_boundary.capture(
            "getConfig",
            lambda: DynamicConfig(
                config_name, self._get_config_impl(config_name, "configName")
            ),
            lambda: DynamicConfig(config_name),
            config_name=_name_for_marker(config_name),
        )

    def get_experiment(self, experiment_name: str) -> Experiment:
        return self._error_boundary.capture(
            "getExperiment",
            lambda: Experiment(
                experiment_name,
                self._get_config_impl(experiment_name, "experimentName"),
            ),
            lambda: Experiment(experiment_name),
            config_name=_name_for_marker(experiment_name),
        )

    def log_event(
        self,
        event_name: str,
        value: Optional[Union[str, int, float]] = None,
        metadata: Optional[Mapping[str, Any]] = None,
    ) -> None:
        self._error_boundary.swallow(
            "logEvent", lambda: self._log_event_impl(event_name, value, metadata)
        )

    # ------------------------------------------------------------ [ Internals ]

    def _initialize_impl(
        self,
        sdk_key: str,
        user: Optional[Union[StatsigUser, Mapping[str, Any]]],
        options: Optional[StatsigOptions],
    ) -> Future:
        coerced_user = _coerce_user(user)

        with self._lock:
            if self._state is InitializationState.READY:
                return _completed_future()
            if self._state is InitializationState.INITIALIZING and self._init_future is not None:
                return self._init_future
            if not isinstance(sdk_key, str) or not sdk_key.startswith(CLIENT_KEY_PREFIX):
                return _failed_future(StatsigInitializationError())

            self._state = InitializationState.INITIALIZING
            future: Future = Future()
            self._init_future = future

        try:
            self._setup(sdk_key, options or StatsigOptions())
            sanitized = self._identity.set_user(coerced_user)
            self._sync_executor.submit(self._complete_initialize, future, sanitized)
        except Exception:
            self._mark_ready(future)
            raise

        return future

    def _setup(self, sdk_key: str, options: StatsigOptions):
        self._options = options
        self._output_logger.configure(options.output_logger_provider, options.output_log_level)
        self._output_logger.init()

        observability_client = options.observability_client
        if observability_client is not None:
            observability_client.init()

        data_store = options.data_store or DataStore()
        data_store.initialize()

        self._identity = Identity(
            self._output_logger,
            data_store,
            environment=options.environment,
            override_stable_id=options.override_stable_id,
        )
        self._error_boundary.configure(
            sdk_key,
            self._identity.get_statsig_metadata(),
            exception_url=options.get_sdk_exception_url(),
            observability_client=observability_client,
        )
        self._network = NetworkClient(sdk_key, self._output_logger)
        self._event_logger = EventLogger(
            self._network,
            self._identity,
            self._output_logger,
            options,
            observability_client,
        )
        self._sync_executor = ThreadPoolExecutor(
            max_workers=1, thread_name_prefix="statsig-sync"
        )

    def _complete_initialize(self, future: Future, user: StatsigUser):
        start = time.perf_counter()
        success = False
        try:
            success = self._error_boundary.capture(
                "initialize:fetch", lambda: self._fetch_and_load(user), lambda: False
            )
        finally:
            duration_ms = (time.perf_counter() - start) * 1000
            self._output_logger.info(
                TAG, f"Initialized in {duration_ms:.0f}ms (success={success})"
            )
            observability_client = self._options.observability_client
            if observability_client is not None:
                observability_client.dist(
                    "initialization", duration_ms, {"success": str(success).lower()}
                )
            self._mark_ready(future)

    def _mark_ready(self, future: Future):
        with self._lock:
            self._state = InitializationState.READY
            self._init_future = None
        if self._event_logger is not None:
            self._event_logger.start()
        if not future.done():
            future.set_result(None)

    def _fetch_and_load(self, user: StatsigUser) -> bool:
        body = {
            "user": user.to_dict(),
            "statsigMetadata": self._identity.get_statsig_metadata(),
        }
        try:
            response = self._network.fetch_initialize(
                self._options.get_initialize_url(),
                body,
                self._options.get_init_timeout_ms(),
            )
            self._store.load(response)
        except (requests.RequestException, ValueError, TypeError) as error:
            self._output_logger.warn(
                TAG, f"Failed to fetch values, falling back to defaults: {error}"
            )
            self._store.clear()
            return False

        return True

    def _update_user_impl(
        self, user: Optional[Union[StatsigUser, Mapping[str, Any]]]
    ) -> Future:
        self._ensure_ready()
        coerced_user = _coerce_user(user)

        with self._lock:
            is_shutdown = self._is_shutdown
        if is_shutdown:
            self._output_logger.warn(TAG, "update_user called after shutdown, ignoring")
            return _completed_future()

        sanitized = self._identity.set_user(coerced_user)
        return self._sync_executor.submit(self._fetch_and_load, sanitized)

    def _shutdown_impl(self):
        with self._lock:
            if self._state is not InitializationState.READY or self._is_shutdown:
                return
            self._is_shutdown = True

        try:
            self._log_diagnostics()
            self._event_logger.shutdown()
        finally:
            self._sync_executor.shutdown(wait=False)
            self._network.close()

            if self._options.data_store is not None:
                self._options.data_store.shutdown()
            self._output_logger.debug(TAG, "Shutdown complete")
            self._output_logger.shutdown()

    def _flush_events_impl(self) -> Future:
        if self._event_logger is None:
            return _completed_future()
        return self._event_logger.flush()

    def _get_feature_gate_impl(self, gate_name: str) -> FeatureGate:
        self._ensure_ready()
        _validate_name(gate_name, "gateName")

        result = self._store.get_gate(gate_name)
        event = LogEvent(GATE_EXPOSURE_EVENT)
        event.set_user(self._identity.get_user_for_logging())
        event.set_metadata(
            {
                "gate": gate_name,
                "gateValue": "true" if result.value is True else "false",
                "ruleID": result.rule_id,
            }
        )
        event.set_secondary_exposures(result.secondary_exposures)
        self._event_logger.log(event)

        return FeatureGate(gate_name, result)

    def _get_config_impl(self, config_name: str, arg_name: str) -> EvaluationResult:
        self._ensure_ready()
        _validate_name(config_name, arg_name)

        result = self._store.get_config(config_name)
        event = LogEvent(CONFIG_EXPOSURE_EVENT)
        event.set_user(self._identity.get_user_for_logging())
        event.set_metadata({"config": config_name, "ruleID": result.rule_id})
        event.set_secondary_exposures(result.secondary_exposures)
        self._event_logger.log(event)

        return result

    def _log_event_impl(
        self,
        event_name: str,
        value: Optional[Union[str, int, float]],
        metadata: Optional[Mapping[str, Any]],
    ):
        self._ensure_ready()
        if not isinstance(event_name, str) or not event_name:
            raise StatsigInvalidArgumentError("Event name must be a non-empty string.")

        event = LogEvent(event_name)
        if value is not None and (
            isinstance(value, bool) or not isinstance(value, (str, int, float))
        ):
            self._output_logger.warn(
                TAG, f"Ignoring value of type {type(value).__name__} for '{event.event_name}'"
            )
        else:
            event.set_value(value)

        if metadata is not None and not isinstance(metadata, Mapping):
            self._output_logger.warn(
                TAG, f"Ignoring metadata of type {type(metadata).__name__} for '{event.event_name}'"
            )
        else:
            event.set_metadata(metadata)

        event.set_user(self._identity.get_user_for_logging())
        self._event_logger.log(event)

    def _log_diagnostics(self):
        markers = self._diagnostics.get_markers(ERROR_BOUNDARY_KEY)
        if not markers or self._store.disable_auto_event_logging:
            return

        event = LogEvent(DIAGNOSTICS_EVENT)
        event.set_user(self._identity.get_user_for_logging())
        # markers are internal and exempt from the user metadata size cap
        event.metadata = {"context": ERROR_BOUNDARY_KEY, "markers": markers}
        self._event_logger.log(event)
        self._diagnostics.clear(ERROR_BOUNDARY_KEY)

    def _ensure_ready(self):
        with self._lock:
            if self._state is not InitializationState.READY:
                raise StatsigUninitializedError()


def create_statsig_error_instance(message: str) -> Statsig:
    OutputLogger().error(TAG, message)
    return Statsig()


def _validate_name(name: Any, arg_name: str):
    if not isinstance(name, str) or len(name) == 0:
        raise StatsigInvalidArgumentError(f"Must pass a valid string as the {arg_name}.")


def _name_for_marker(name: Any) -> Optional[str]:
    return name if isinstance(name, str) else None


def _coerce_user(
    user: Optional[Union[StatsigUser, Mapping[str, Any]]]
) -> Optional[StatsigUser]:
    if user is None or isinstance(user, StatsigUser):
        return user
    if isinstance(user, Mapping):
        return StatsigUser.from_dict(user)
    raise StatsigInvalidArgumentError("The user must be a StatsigUser, a mapping or None.")


def _completed_future(value: Any = None) -> Future:
    future: Future = Future()
    future.set_result(value)
    return future


def _failed_future(error: BaseException) -> Future:
    future: Future = Future()
    future.set_exception(error)
    return future
