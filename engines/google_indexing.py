"""Google Indexing API — JWT-bearer token exchange and per-URL notifications."""

import logging
import time
from dataclasses import dataclass, field

import requests

from engines.adapters import PlatformAdapter, config_failure, validate_urls
from engines.config import GoogleConfig, ServiceAccountCredential
from engines.crypto import TOKEN_LIFETIME, TOKEN_URI, create_jwt
from engines.errors import AuthError, ConfigError, KeyFormatError
from engines.outcomes import Aggregate, ItemOutcome, PerItem, PlatformId, SubmitStatus

logger = logging.getLogger(__name__)

PUBLISH_ENDPOINT = "https://indexing.googleapis.com/v3/urlNotifications:publish"
JWT_BEARER_GRANT = "urn:ietf:params:oauth:grant-type:jwt-bearer"


@dataclass(frozen=True)
class SignedToken:
    """Bearer token for one run. `expires_at` is only checked to warn when a run outlives it."""

    jwt: str = field(repr=False)
    access_token: str = field(repr=False)
    expires_at: float


def exchange_jwt(assertion: str, timeout: float = 30.0) -> dict:
    """Trade a signed assertion for an access token (form-encoded POST)."""
    try:
        resp = requests.post(
            TOKEN_URI,
            data={"grant_type": JWT_BEARER_GRANT, "assertion": assertion},
            timeout=timeout,
        )
    except requests.RequestException as exc:
        raise AuthError(f"Token request failed: {exc}") from exc

    try:
        data = resp.json()
    except ValueError as exc:
        raise AuthError(f"Token endpoint returned HTTP {resp.status_code} with no JSON body") from exc

    if not isinstance(data, dict):
        raise AuthError(f"Token endpoint returned HTTP {resp.status_code}")
    if data.get("error"):
        raise AuthError(f"Token Error: {data.get('error_description') or data['error']}")
    if not data.get("access_token"):
        raise AuthError("Token response has no access_token")
    return data


def request_token(credential: ServiceAccountCredential, timeout: float = 30.0) -> SignedToken:
    assertion = create_jwt(credential.client_email, credential.private_key_pem)
    data = exchange_jwt(assertion, timeout=timeout)
    try:
        lifetime = float(data.get("expires_in") or TOKEN_LIFETIME)
    except (TypeError, ValueError):
        logger.warning("Token response has a non-numeric expires_in; assuming %ss", TOKEN_LIFETIME)
        lifetime = TOKEN_LIFETIME
    return SignedToken(
        jwt=assertion,
        access_token=data["access_token"],
        expires_at=time.time() + lifetime,
    )


def get_access_token(issuer_email: str, private_key_pem: str, timeout: float = 30.0) -> str:
    """Sign a JWT for the service account and exchange it for a bearer token."""
    credential = ServiceAccountCredential(client_email=issuer_email, private_key_pem=private_key_pem)
    return request_token(credential, timeout=timeout).access_token


def _error_message(body) -> str:
    if isinstance(body, dict):
        err = body.get("error")
        if isinstance(err, dict) and err.get("message"):
            return err["message"]
        if isinstance(err, str):
            return err
    return "Failed"


def publish_url(access_token: str, url: str, action: str = "URL_UPDATED", timeout: float = 30.0) -> ItemOutcome:
    """Notify Google about a URL change. action: URL_UPDATED or URL_DELETED."""
    try:
        resp = requests.post(
            PUBLISH_ENDPOINT,
            headers={"Authorization": f"Bearer {access_token}", "Content-Type": "application/json"},
            json={"url": url, "type": action},
            timeout=timeout,
        )
    except requests.RequestException as e:
        return ItemOutcome(url, SubmitStatus.FAILED, f"Transport error: {e}")

    try:
        body = resp.json()
    except ValueError:
        body = {"raw": resp.text}

    if resp.ok:
        return ItemOutcome(url, SubmitStatus.SUCCESS, "URL_UPDATED accepted", body)
    return ItemOutcome(url, SubmitStatus.FAILED, _error_message(body), body)


class GoogleAdapter(PlatformAdapter):
    platform = PlatformId.GOOGLE

    def __init__(self, config: GoogleConfig, timeout: float = 30.0):
        self.config = config
        self.timeout = timeout
        self._token: SignedToken | None = None
        self._failure: Aggregate | None = None

    def start_run(self) -> None:
        """Acquire the bearer token once; a failure is terminal for the run."""
        self._token = None
        self._failure = None
        if not self.config.configured:
            return
        try:
            self._token = request_token(self.config.credential(), timeout=self.timeout)
        except ConfigError as e:
            self._failure = config_failure(str(e))
        except (KeyFormatError, AuthError) as e:
            self._failure = Aggregate(
                SubmitStatus.FAILED, f"Google Auth Failed: {e}", error=type(e).__name__
            )
        except Exception as e:
            logger.exception("Google: unexpected error during token setup")
            self._failure = Aggregate(
                SubmitStatus.FAILED, f"Google setup failed: {e}", error=type(e).__name__
            )
        if self._failure is not None:
            logger.error("Google: %s", self._failure.message)

    def submit(self, urls: list[str]):
        urls = validate_urls(urls)
        if not self.config.configured:
            return config_failure("Missing GOOGLE_SERVICE_ACCOUNT_JSON env var.")
        if self._token is None and self._failure is None:
            self.start_run()
        if self._failure is not None:
            return self._failure
        if time.time() >= self._token.expires_at:
            logger.warning("Google: access token expired during this run; submissions may be rejected")

        items = tuple(publish_url(self._token.access_token, url, timeout=self.timeout) for url in urls)
        return PerItem(items)
