from statsig_client_core.metadata import __version__
from statsig_client_core.errors import *
from statsig_client_core.statsig_user import *
from statsig_client_core.statsig_options import *
from statsig_client_core.statsig_types import *
from statsig_client_core.statsig import *
from statsig_client_core.observability_client import *
from statsig_client_core.data_store import *
from statsig_client_core.output_logger_provider import *

__all__ = [
    "__version__",
    "Statsig",
    "StatsigOptions",
    "StatsigUser",
    "InitializationState",

    "FeatureGate",
    "DynamicConfig",
    "Experiment",
    "EvaluationDetails",

    "StatsigError",
    "StatsigUninitializedError",
    "StatsigInvalidArgumentError",
    "StatsigInitializationError",

    "DataStore",
    "DataStoreResponse",
    "InMemoryDataStore",
    "ObservabilityClient",
    "OutputLoggerProvider",
    "LoggingOutputLoggerProvider",
]
