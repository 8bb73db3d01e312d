"""
Price data errors.

Raised while turning a cache file or market-data response into a
PriceSeries. All of them are recoverable: the store logs them and the
affected symbol is treated as having no history.
"""

from typing import Any, Optional

# Raw payload excerpts kept on an error are cut to this many characters
RAW_EXCERPT_CHARS = 200


class DataQualityError(Exception):
    """A payload could not be turned into usable price history."""

    def __init__(self, message: str, symbol: Optional[str] = None,
                 context: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.symbol = symbol
        self.context = dict(context or {})
        self.recoverable = True

    def describe(self) -> dict[str, Any]:
        """Structured fields for a log record."""
        fields = {"error_type": type(self).__name__, "error": str(self)}
        if self.symbol is not None:
            fields["symbol"] = self.symbol
        fields.update(self.context)
        return fields


class MissingDataError(DataQualityError):
    """A required section of the payload is absent."""

    def __init__(self, message: str, data_type: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.data_type = data_type


class MalformedDataError(DataQualityError):
    """The payload is not JSON or does not have the expected shape."""

    def __init__(self, message: str, raw_data: Any = None,
                 expected_format: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.raw_data = None if raw_data is None else str(raw_data)[:RAW_EXCERPT_CHARS]
        self.expected_format = expected_format


class InsufficientDataError(DataQualityError):
    """The payload parsed but left too few usable closes."""

    def __init__(self, message: str, required_count: int = 1,
                 available_count: int = 0, **kwargs):
        super().__init__(message, **kwargs)
        self.required_count = required_count
        self.available_count = available_count
