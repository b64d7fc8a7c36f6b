"""Submission data model — platforms, per-batch outcomes, per-URL records, counters."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Union


class PlatformId(str, Enum):
    GOOGLE = "google"
    BING = "bing"
    NAVER = "naver"

    @property
    def label(self) -> str:
        return self.value.capitalize()


class SubmitStatus(str, Enum):
    PENDING = "pending"
    SUCCESS = "success"
    FAILED = "failed"


class UrlStatus(str, Enum):
    PENDING = "pending"
    SUCCESS = "success"
    PARTIAL = "partial"
    FAILED = "failed"


@dataclass(frozen=True)
class Aggregate:
    """One outcome covering a whole batch (bulk protocols)."""

    status: SubmitStatus
    message: str = ""
    code: int | None = None
    error: str | None = None
    simulated: bool = False

    @property
    def ok(self) -> bool:
        return self.status is SubmitStatus.SUCCESS


@dataclass(frozen=True)
class ItemOutcome:
    url: str
    status: SubmitStatus
    message: str = ""
    response: dict | None = None


@dataclass(frozen=True)
class PerItem:
    """Independent outcomes, positionally aligned with the submitted batch."""

    items: tuple[ItemOutcome, ...]

    @property
    def ok(self) -> bool:
        return all(i.status is SubmitStatus.SUCCESS for i in self.items)


BatchOutcome = Union[Aggregate, PerItem]


@dataclass
class UrlRecord:
    url: str
    status: UrlStatus = UrlStatus.PENDING
    platform_status: dict[PlatformId, SubmitStatus] = field(default_factory=dict)

    @classmethod
    def pending(cls, url: str, platforms) -> "UrlRecord":
        return cls(url=url, platform_status={p: SubmitStatus.PENDING for p in platforms})

    def recompute(self) -> UrlStatus:
        """Roll platform results up: all success, all failed, or partial."""
        values = list(self.platform_status.values())
        if not values or SubmitStatus.PENDING in values:
            self.status = UrlStatus.PENDING
        elif all(v is SubmitStatus.SUCCESS for v in values):
            self.status = UrlStatus.SUCCESS
        elif all(v is SubmitStatus.FAILED for v in values):
            self.status = UrlStatus.FAILED
        else:
            self.status = UrlStatus.PARTIAL
        return self.status


@dataclass
class PlatformStats:
    submitted: int = 0
    success: int = 0
    failed: int = 0

    def ratio(self) -> str:
        return f"{self.success}/{self.submitted}"


@dataclass
class RunProgress:
    total: int = 0
    processed: int = 0
    all_success: int = 0
    not_all_success: int = 0
