"""Error taxonomy shared by adapters, the orchestrator and the CLI."""


class IndexerError(Exception):
    """Base class for every error raised by the indexer."""


class ConfigError(IndexerError):
    """Missing or malformed credentials/configuration."""


class InputError(IndexerError):
    """Empty or malformed URL input, rejected before any network call."""


class KeyFormatError(IndexerError):
    """PEM/DER private key material could not be imported."""


class AuthError(IndexerError):
    """OAuth2 token exchange failed."""


class TransportError(IndexerError):
    """Network-level failure talking to a provider."""


class ProtocolError(IndexerError):
    """Provider answered with a non-2xx status or an error-shaped body."""


class SitemapError(IndexerError):
    def __init__(self, message: str, status: int | None = None):
        super().__init__(message)
        self.status = status


class StateError(RuntimeError):
    """Orchestrator used out of order (e.g. run() before URLs are loaded)."""
