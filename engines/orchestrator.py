"""Batch submission — chunk URLs, fan each batch out to every platform, reconcile results."""

import logging
import time
from concurrent.futures import ThreadPoolExecutor, wait
from dataclasses import dataclass, field, replace
from enum import Enum

from engines.adapters import build_adapters
from engines.config import IndexerConfig
from engines.errors import InputError, ProtocolError, StateError
from engines.outcomes import (
    Aggregate,
    PerItem,
    PlatformId,
    PlatformStats,
    RunProgress,
    SubmitStatus,
    UrlRecord,
    UrlStatus,
)
from engines.sitemap import dedupe, load_urls

logger = logging.getLogger(__name__)


class RunState(str, Enum):
    IDLE = "idle"
    PARSING = "parsing"
    READY = "ready"
    INDEXING = "indexing"
    DONE = "done"


def chunk(items: list, size: int) -> list[list]:
    """Split into contiguous slices of `size`; the last one may be shorter."""
    if size < 1:
        raise ValueError("batch size must be >= 1")
    return [items[i:i + size] for i in range(0, len(items), size)]


@dataclass
class RunSummary:
    records: list[UrlRecord]
    stats: dict[PlatformId, PlatformStats]
    progress: RunProgress
    batches: int = 0
    elapsed: float = 0.0

    def summary_line(self) -> str:
        parts = [f"{p.label} {s.ratio()}" for p, s in self.stats.items()]
        return "Summary: " + ", ".join(parts)

    def count(self, status: UrlStatus) -> int:
        return sum(1 for r in self.records if r.status is status)


@dataclass
class _BatchState:
    records: list[UrlRecord]
    pending: set[PlatformId] = field(default_factory=set)


class BatchOrchestrator:
    """Drives one indexing run: Idle -> Parsing -> Ready -> Indexing -> Done.

    The orchestrator is the only writer of UrlRecord status; adapters just
    return outcomes. `on_batch_complete(batch_index, stats, progress)` is
    called after every batch with snapshots of the counters.
    """

    def __init__(
        self,
        config: IndexerConfig,
        adapters: dict | None = None,
        on_batch_complete=None,
        sleep=time.sleep,
    ):
        self.config = config.validate()
        self.adapters = adapters if adapters is not None else build_adapters(config)
        self.on_batch_complete = on_batch_complete
        self._sleep = sleep
        self.state = RunState.IDLE
        self.records: list[UrlRecord] = []
        self.stats: dict[PlatformId, PlatformStats] = {}
        self.progress = RunProgress()

    @property
    def platforms(self) -> list[PlatformId]:
        return list(self.adapters)

    # ---------- Parsing ----------

    def _begin_parsing(self) -> None:
        if self.state not in (RunState.IDLE, RunState.DONE):
            raise StateError(f"Cannot load URLs while {self.state.value}")
        self.state = RunState.PARSING
        self.records = []
        self.stats = {p: PlatformStats() for p in self.platforms}
        self.progress = RunProgress()

    def load(self, urls) -> list[UrlRecord]:
        """Populate a fresh run from a URL list (duplicates dropped, order kept)."""
        self._begin_parsing()
        return self._populate(urls)

    def _populate(self, urls) -> list[UrlRecord]:
        unique = dedupe(urls)
        if not unique:
            self.state = RunState.IDLE
            raise InputError("No URLs provided")
        self.records = [UrlRecord.pending(u, self.platforms) for u in unique]
        self.progress.total = len(self.records)
        self.state = RunState.READY
        logger.info("Successfully parsed %d URLs.", len(self.records))
        return self.records

    def load_sitemap(self, source: str) -> list[UrlRecord]:
        """Fetch/read a sitemap and populate the run from its <loc> entries."""
        self._begin_parsing()
        try:
            urls = load_urls(source)
        except Exception:
            self.state = RunState.IDLE
            raise
        return self._populate(urls)

    # ---------- Indexing ----------

    def run(self) -> RunSummary:
        if self.state is not RunState.READY:
            raise StateError(f"run() needs loaded URLs; state is {self.state.value}")
        self.state = RunState.INDEXING
        started = time.monotonic()

        for platform, adapter in self.adapters.items():
            try:
                adapter.start_run()
            except Exception:
                logger.exception("%s: setup failed", platform.label)

        batches = chunk(self.records, self.config.batch_size)
        logger.info("Starting indexing process: %d URLs in %d batches", len(self.records), len(batches))

        with ThreadPoolExecutor(max_workers=max(1, len(self.adapters))) as pool:
            for index, batch in enumerate(batches):
                logger.info("Processing batch %d/%d (%d URLs)...", index + 1, len(batches), len(batch))
                self._process_batch(pool, batch)
                self._emit(index)
                if index < len(batches) - 1 and self.config.batch_delay > 0:
                    self._sleep(self.config.batch_delay)

        self.state = RunState.DONE
        summary = RunSummary(
            records=self.records,
            stats=self.stats,
            progress=self.progress,
            batches=len(batches),
            elapsed=time.monotonic() - started,
        )
        logger.info("Indexing process completed!")
        logger.info(summary.summary_line())
        return summary

    def _process_batch(self, pool: ThreadPoolExecutor, records: list[UrlRecord]) -> None:
        state = _BatchState(records=records, pending=set(self.platforms))
        try:
            urls = [r.url for r in records]
            futures = {pool.submit(adapter.submit, urls): p for p, adapter in self.adapters.items()}
            wait(futures)

            for future, platform in futures.items():
                exc = future.exception()
                try:
                    self._reconcile(state, platform, exc if exc is not None else future.result())
                except Exception:
                    logger.exception("  x %s: could not reconcile batch", platform.label)
                    if platform in state.pending:
                        self._apply_all(state, platform, SubmitStatus.FAILED)
        except Exception as e:
            logger.exception("Critical batch error: %s", e)
            for platform in list(state.pending):
                self._apply_all(state, platform, SubmitStatus.FAILED)

        for record in records:
            record.recompute()
        self.progress.processed += len(records)
        ok = sum(1 for r in records if r.status is UrlStatus.SUCCESS)
        self.progress.all_success += ok
        self.progress.not_all_success += len(records) - ok

    def _reconcile(self, state: _BatchState, platform: PlatformId, outcome) -> None:
        label = platform.label
        if isinstance(outcome, PerItem) and len(outcome.items) != len(state.records):
            outcome = ProtocolError(
                f"{len(outcome.items)} results for {len(state.records)} URLs"
            )

        if isinstance(outcome, BaseException):
            logger.warning("  x %s batch failed: %s", label, str(outcome) or type(outcome).__name__)
            self._apply_all(state, platform, SubmitStatus.FAILED)
        elif isinstance(outcome, Aggregate):
            if outcome.ok:
                note = " (simulated)" if outcome.simulated else ""
                logger.info("  + %s: batch success%s", label, note)
            else:
                logger.warning("  x %s batch failed: %s", label, outcome.message or "Failed")
            self._apply_all(state, platform, outcome.status)
        elif isinstance(outcome, PerItem):
            stats = self.stats[platform]
            for record, item in zip(state.records, outcome.items):
                record.platform_status[platform] = item.status
                if item.status is SubmitStatus.SUCCESS:
                    stats.success += 1
                else:
                    stats.failed += 1
                    logger.warning("  x %s [%s]: %s", label, record.url, item.message or "Failed")
            stats.submitted += len(state.records)
            state.pending.discard(platform)
            if outcome.ok:
                logger.info("  + %s: batch success", label)
            else:
                ok = sum(1 for i in outcome.items if i.status is SubmitStatus.SUCCESS)
                logger.info("  %s: %d/%d URLs accepted", label, ok, len(outcome.items))
        else:
            raise TypeError(f"Unexpected outcome from {label}: {outcome!r}")

    def _apply_all(self, state: _BatchState, platform: PlatformId, status: SubmitStatus) -> None:
        """Broadcast one status to every record in the batch for a platform."""
        stats = self.stats[platform]
        for record in state.records:
            record.platform_status[platform] = status
        if status is SubmitStatus.SUCCESS:
            stats.success += len(state.records)
        else:
            stats.failed += len(state.records)
        stats.submitted += len(state.records)
        state.pending.discard(platform)

    def _emit(self, index: int) -> None:
        if self.on_batch_complete is None:
            return
        stats = {p: replace(s) for p, s in self.stats.items()}
        try:
            self.on_batch_complete(index, stats, replace(self.progress))
        except Exception:
            logger.exception("on_batch_complete callback failed")
