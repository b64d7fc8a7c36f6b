"""IndexNow — bulk URL submission (Bing, Yandex, Naver, Seznam share the feed)."""

import logging
from urllib.parse import urlparse

import requests

from engines.adapters import PlatformAdapter, config_failure, validate_urls
from engines.config import BingConfig
from engines.errors import TransportError
from engines.outcomes import Aggregate, PlatformId, SubmitStatus

logger = logging.getLogger(__name__)

ENDPOINT = "https://api.indexnow.org/indexnow"


def submit_urls(key: str, urls: list[str], key_location: str | None = None, timeout: float = 30.0) -> Aggregate:
    """Submit one batch via IndexNow. Max 10,000 per call; one result for all of them."""
    host = urlparse(urls[0]).hostname
    payload = {"host": host, "key": key, "urlList": urls}
    if key_location:
        payload["keyLocation"] = key_location

    try:
        resp = requests.post(
            ENDPOINT,
            json=payload,
            headers={"Content-Type": "application/json; charset=utf-8"},
            timeout=timeout,
        )
    except requests.RequestException as e:
        raise TransportError(f"IndexNow request failed: {e}") from e

    if resp.status_code in (200, 202):
        return Aggregate(SubmitStatus.SUCCESS, "Submitted to IndexNow", code=resp.status_code)
    return Aggregate(
        SubmitStatus.FAILED, resp.text or f"HTTP {resp.status_code}", code=resp.status_code, error="ProtocolError"
    )


class IndexNowAdapter(PlatformAdapter):
    platform = PlatformId.BING

    def __init__(self, config: BingConfig, timeout: float = 30.0):
        self.config = config
        self.timeout = timeout

    def submit(self, urls: list[str]) -> Aggregate:
        urls = validate_urls(urls)
        if not self.config.configured:
            return config_failure("Environment variable BING_API_KEY is missing.")
        result = submit_urls(self.config.api_key, urls, self.config.key_location, timeout=self.timeout)
        logger.debug("IndexNow HTTP %s for %d URLs", result.code, len(urls))
        return result
