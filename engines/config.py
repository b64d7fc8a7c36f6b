"""Configuration — YAML file plus environment fallbacks, resolved once at startup."""

import json
import os
from dataclasses import dataclass, field, replace
from pathlib import Path

import yaml

from engines.errors import ConfigError
from engines.outcomes import PlatformId, SubmitStatus

DEFAULT_BATCH_SIZE = 50
DEFAULT_BATCH_DELAY = 1.0
DEFAULT_NAVER_DELAY = 0.4


@dataclass(frozen=True)
class ServiceAccountCredential:
    client_email: str
    private_key_pem: str = field(repr=False)


@dataclass(frozen=True)
class BingConfig:
    api_key: str | None = field(default=None, repr=False)
    key_location: str | None = None

    @property
    def configured(self) -> bool:
        return bool(self.api_key)


@dataclass(frozen=True)
class GoogleConfig:
    service_account_json: str | None = field(default=None, repr=False)
    service_account_file: str | None = None

    @property
    def configured(self) -> bool:
        return bool(self.service_account_json) or bool(self.service_account_file)

    def credential(self) -> ServiceAccountCredential:
        """Parse the service-account JSON blob into email + PEM key."""
        raw = self.service_account_json
        if not raw and self.service_account_file:
            path = Path(self.service_account_file).expanduser()
            if not path.exists():
                raise ConfigError(f"Service account file not found: {path}")
            raw = path.read_text(encoding="utf-8")
        if not raw:
            raise ConfigError("Missing GOOGLE_SERVICE_ACCOUNT_JSON env var.")

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise ConfigError("Invalid JSON in GOOGLE_SERVICE_ACCOUNT_JSON") from exc

        if not isinstance(data, dict):
            raise ConfigError("Invalid JSON in GOOGLE_SERVICE_ACCOUNT_JSON")
        email = data.get("client_email")
        key = data.get("private_key")
        if not email or not key:
            raise ConfigError("Service account JSON needs 'client_email' and 'private_key'")
        if not isinstance(email, str) or not isinstance(key, str):
            raise ConfigError("Service account 'client_email' and 'private_key' must be strings")
        return ServiceAccountCredential(client_email=email, private_key_pem=key)


@dataclass(frozen=True)
class NaverConfig:
    client_id: str | None = None
    client_secret: str | None = field(default=None, repr=False)
    delay: float = DEFAULT_NAVER_DELAY
    # What the placeholder reports; "failed" keeps simulated runs out of the success counts.
    simulated_status: SubmitStatus = SubmitStatus.SUCCESS

    @property
    def configured(self) -> bool:
        return bool(self.client_id) and bool(self.client_secret)


@dataclass(frozen=True)
class IndexerConfig:
    bing: BingConfig = field(default_factory=BingConfig)
    google: GoogleConfig = field(default_factory=GoogleConfig)
    naver: NaverConfig = field(default_factory=NaverConfig)
    batch_size: int = DEFAULT_BATCH_SIZE
    batch_delay: float = DEFAULT_BATCH_DELAY
    platforms: tuple[PlatformId, ...] = tuple(PlatformId)
    timeout: float = 30.0

    def validate(self) -> "IndexerConfig":
        if self.batch_size < 1:
            raise ConfigError("batch_size must be >= 1")
        if self.batch_delay < 0 or self.naver.delay < 0:
            raise ConfigError("delays must be >= 0")
        if not self.platforms:
            raise ConfigError("at least one platform must be enabled")
        return self

    def with_overrides(self, **changes) -> "IndexerConfig":
        changes = {k: v for k, v in changes.items() if v is not None}
        return replace(self, **changes).validate()


def _platforms(raw) -> tuple[PlatformId, ...]:
    if raw is None:
        return tuple(PlatformId)
    try:
        return tuple(PlatformId(str(p).lower()) for p in raw)
    except ValueError as exc:
        raise ConfigError(f"Unknown platform in config: {exc}") from exc


def from_dict(data: dict | None, env=None) -> IndexerConfig:
    """Build config from a parsed YAML mapping, filling credentials from env."""
    data = data or {}
    if not isinstance(data, dict):
        raise ConfigError("config must be a mapping")
    env = os.environ if env is None else env

    bing = data.get("bing") or {}
    google = data.get("google") or {}
    naver = data.get("naver") or {}
    indexer = data.get("indexer") or {}

    simulated = str(naver.get("simulated_status", SubmitStatus.SUCCESS.value)).lower()
    if simulated not in (SubmitStatus.SUCCESS.value, SubmitStatus.FAILED.value):
        raise ConfigError(f"naver.simulated_status must be success or failed, got {simulated!r}")

    try:
        cfg = IndexerConfig(
            bing=BingConfig(
                api_key=bing.get("api_key") or env.get("BING_API_KEY"),
                key_location=bing.get("key_location"),
            ),
            google=GoogleConfig(
                service_account_json=google.get("service_account_json")
                or env.get("GOOGLE_SERVICE_ACCOUNT_JSON"),
                service_account_file=google.get("service_account_file")
                or env.get("GOOGLE_SERVICE_ACCOUNT_FILE"),
            ),
            naver=NaverConfig(
                client_id=naver.get("client_id") or env.get("NAVER_CLIENT_ID"),
                client_secret=naver.get("client_secret") or env.get("NAVER_CLIENT_SECRET"),
                delay=float(naver.get("delay", DEFAULT_NAVER_DELAY)),
                simulated_status=SubmitStatus(simulated),
            ),
            batch_size=int(indexer.get("batch_size", DEFAULT_BATCH_SIZE)),
            batch_delay=float(indexer.get("batch_delay", DEFAULT_BATCH_DELAY)),
            platforms=_platforms(indexer.get("platforms")),
            timeout=float(indexer.get("timeout", 30.0)),
        )
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"Invalid config value: {exc}") from exc
    return cfg.validate()


def load_config(path: str | os.PathLike | None = None, env=None) -> IndexerConfig:
    """Load config.yaml if it exists; a missing file means env-only config."""
    data = {}
    if path is not None and Path(path).exists():
        with open(path) as f:
            try:
                data = yaml.safe_load(f) or {}
            except yaml.YAMLError as exc:
                raise ConfigError(f"Cannot parse {path}: {exc}") from exc
    return from_dict(data, env=env)
