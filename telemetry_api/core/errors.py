class InvalidArgumentError(ValueError):
    pass


class ConfigurationError(Exception):
    pass


class UpstreamQueryError(Exception):
    def __init__(self, query_name: str, cause: Exception):
        self.query_name = query_name
        self.cause = cause
        super().__init__(str(cause) or cause.__class__.__name__)
