"""Error taxonomy for the fetch-decode-persist pipeline."""


class ExchangeRateError(Exception):
    """Base class for every error raised by fxrate.

    Each subclass carries a ``category`` string; the rendered message is
    ``"<category>: <detail>"`` so a single log line names where it came from.
    """

    category = "exchange rate error"

    def __init__(self, detail: str = ""):
        self.detail = detail
        super().__init__(f"{self.category}: {detail}" if detail else self.category)


class ConfigError(ExchangeRateError):
    category = "missing configuration"


class FetchError(ExchangeRateError):
    """Any failure while fetching a reading from the external API."""


class RequestBuildError(FetchError):
    category = "error creating HTTP request"


class TransportError(FetchError):
    """Connection failure, timeout, or non-2xx response."""

    category = "error sending HTTP request"


class DecodeError(FetchError):
    category = "error decoding response body"


class FileSinkError(ExchangeRateError):
    """Any failure while writing the rate file."""


class FileCreateError(FileSinkError):
    category = "error creating file"


class FileWriteError(FileSinkError):
    category = "error writing to file"


class StoreOpenError(ExchangeRateError):
    """The database could not be opened or migrated. Fatal at startup."""

    category = "error opening database"


class StoreQueryError(ExchangeRateError):
    """A single insert or query failed. Never fatal."""

    category = "error saving to database"
