"""Exception classes for the KRW valuation toolkit."""


class KrwValuationError(Exception):
    """Base exception for all KRW valuation errors."""
    pass


class ConfigurationError(KrwValuationError):
    """Raised when settings are missing or invalid."""
    pass


class UpstreamFetchError(KrwValuationError):
    """Raised when a data provider cannot deliver a series.

    Covers network failures, non-2xx responses, API-level error payloads and
    responses that do not have the expected shape.
    """

    def __init__(self, source: str, message: str):
        super().__init__(f"{source}: {message}")
        self.source = source


class InterpolationDomainError(KrwValuationError, ValueError):
    """Raised when the interpolator is called outside its interval."""
    pass


class ValuationDomainError(KrwValuationError, ValueError):
    """Raised when a valuation formula would divide by zero or see NaN."""
    pass


class DatasetLoadError(KrwValuationError):
    """Raised when a persisted dataset is missing, malformed or empty."""
    pass
