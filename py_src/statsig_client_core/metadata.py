__version__ = "0.1.0"

SDK_TYPE = "py-client-core"
