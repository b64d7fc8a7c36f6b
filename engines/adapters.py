"""Platform adapter contract shared by the Google, IndexNow and Naver engines."""

from urllib.parse import urlparse

from engines.errors import InputError
from engines.outcomes import Aggregate, BatchOutcome, PlatformId, SubmitStatus


def validate_urls(urls) -> list[str]:
    """Reject empty batches and anything that is not an absolute http(s) URL."""
    if isinstance(urls, str):
        urls = [urls]
    urls = list(urls or [])
    if not urls:
        raise InputError("No URLs provided")
    for url in urls:
        if not isinstance(url, str):
            raise InputError(f"Invalid URL format: {url!r}")
        parsed = urlparse(url)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise InputError(f"Invalid URL format: {url!r}")
    return urls


def config_failure(message: str) -> Aggregate:
    return Aggregate(SubmitStatus.FAILED, message, error="ConfigError")


class PlatformAdapter:
    """submit(urls) -> Aggregate | PerItem for one batch.

    Adapters hold no URL state; the only thing they may cache is their own
    credentials for the current run, set up in start_run().
    """

    platform: PlatformId

    def start_run(self) -> None:
        pass

    def submit(self, urls: list[str]) -> BatchOutcome:
        raise NotImplementedError


def build_adapters(config) -> dict[PlatformId, PlatformAdapter]:
    """Instantiate the adapters for every enabled platform, in config order."""
    from engines.google_indexing import GoogleAdapter
    from engines.indexnow import IndexNowAdapter
    from engines.naver import NaverAdapter

    factories = {
        PlatformId.GOOGLE: lambda: GoogleAdapter(config.google, timeout=config.timeout),
        PlatformId.BING: lambda: IndexNowAdapter(config.bing, timeout=config.timeout),
        PlatformId.NAVER: lambda: NaverAdapter(config.naver),
    }
    return {p: factories[p]() for p in config.platforms}
