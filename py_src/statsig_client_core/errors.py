class StatsigError(Exception):
    pass


class StatsigUninitializedError(StatsigError):
    def __init__(self, message: str = "Call and wait for initialize() to finish first."):
        super().__init__(message)


class StatsigInvalidArgumentError(StatsigError):
    pass


class StatsigInitializationError(StatsigInvalidArgumentError):
    """Raised through the future returned by initialize() when the key is unusable."""

    def __init__(
        self,
        message: str = "Invalid key provided.  You must use a Client SDK Key from the Statsig console to initialize the sdk",
    ):
        super().__init__(message)
