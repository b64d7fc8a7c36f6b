"""Naver — placeholder engine.

There is no public bulk submission API wired up yet, so this adapter only
simulates latency and reports the configured status. Its results are not
verified submissions.
"""

import logging
import time

from engines.adapters import PlatformAdapter, validate_urls
from engines.config import NaverConfig
from engines.outcomes import Aggregate, PlatformId, SubmitStatus

logger = logging.getLogger(__name__)

SIMULATED_MESSAGE = "Simulated submission to Naver (API link required)"


class NaverAdapter(PlatformAdapter):
    platform = PlatformId.NAVER

    def __init__(self, config: NaverConfig, sleep=time.sleep):
        self.config = config
        self._sleep = sleep

    def submit(self, urls: list[str]) -> Aggregate:
        urls = validate_urls(urls)
        if self.config.client_id:
            logger.debug("Naver: simulating %d URLs with client id %s...", len(urls), self.config.client_id[:4])
        else:
            logger.debug("Naver: simulating %d URLs without credentials", len(urls))
        self._sleep(self.config.delay)
        return Aggregate(self.config.simulated_status, SIMULATED_MESSAGE, simulated=True)
