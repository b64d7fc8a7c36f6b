"""HTTP handler contract — framework-free (status_code, payload) functions.

Any web layer can mount these: POST {"urls": [...]} (or legacy {"url": ...})
in, JSON out. Platform failures come back as HTTP 200 with a failed
`status` field; only request/config problems change the status code.
"""

import logging

from engines.adapters import build_adapters
from engines.check import check_index_status
from engines.config import IndexerConfig
from engines.errors import InputError, SitemapError
from engines.outcomes import Aggregate, PerItem, PlatformId, SubmitStatus
from engines.sitemap import fetch_sitemap

logger = logging.getLogger(__name__)

METHOD_NOT_ALLOWED = (405, {"error": "Method Not Allowed"})
NO_URLS = (400, {"error": "No URLs provided"})

# Outcome errors reported as HTTP 500 rather than a 200 with a failed status.
_SERVER_SIDE_ERRORS = {"ConfigError", "AuthError", "KeyFormatError"}


def _urls_from(body) -> list | None:
    if not isinstance(body, dict):
        return None
    urls = body.get("urls")
    if urls is None and body.get("url"):
        urls = [body["url"]]
    if not isinstance(urls, list) or not urls:
        return None
    return urls


def _missing_credential(platform: PlatformId, config: IndexerConfig) -> str | None:
    if platform is PlatformId.GOOGLE and not config.google.configured:
        return "Missing GOOGLE_SERVICE_ACCOUNT_JSON env var."
    if platform is PlatformId.BING and not config.bing.configured:
        return "Environment variable BING_API_KEY is missing."
    return None


def render_outcome(platform: PlatformId, outcome, count: int) -> tuple[int, dict]:
    if isinstance(outcome, PerItem):
        failed = sum(1 for i in outcome.items if i.status is not SubmitStatus.SUCCESS)
        if failed == 0:
            status = "success"
        elif failed == len(outcome.items):
            status = "failed"
        else:
            status = "partial-failure"
        results = [
            {"url": i.url, "status": i.status.value, "apiResponse": i.response, "message": i.message}
            for i in outcome.items
        ]
        return 200, {"platform": platform.value, "status": status, "results": results}

    if isinstance(outcome, Aggregate):
        payload = {
            "platform": platform.value,
            "status": outcome.status.value,
            "message": outcome.message,
            "count": count,
        }
        if outcome.code is not None:
            payload["code"] = outcome.code
        if outcome.simulated:
            payload["simulated"] = True
        if outcome.error in _SERVER_SIDE_ERRORS:
            return 500, {"platform": platform.value, "status": "failed", "message": outcome.message}
        return 200, payload

    raise TypeError(f"Unexpected outcome: {outcome!r}")


def handle_submit(platform, method: str, body, config: IndexerConfig, adapter=None) -> tuple[int, dict]:
    """POST /submit-<platform>."""
    platform = PlatformId(platform)
    if method.upper() != "POST":
        return METHOD_NOT_ALLOWED

    missing = _missing_credential(platform, config)
    if missing:
        return 500, {"platform": platform.value, "status": "failed", "message": missing}

    urls = _urls_from(body)
    if urls is None:
        return NO_URLS

    if adapter is None:
        adapter = build_adapters(config.with_overrides(platforms=(platform,)))[platform]
    try:
        outcome = adapter.submit(urls)
    except InputError:
        return 400, {"error": "Invalid URL format"}
    except Exception as e:
        logger.exception("%s handler failed", platform.label)
        return 500, {"platform": platform.value, "status": "error", "message": str(e)}
    return render_outcome(platform, outcome, len(urls))


def handle_fetch_sitemap(method: str, body, timeout: float = 30.0) -> tuple[int, dict]:
    """POST /fetch-sitemap — server-side proxy for sitemap XML."""
    if method.upper() != "POST":
        return METHOD_NOT_ALLOWED
    url = body.get("url") if isinstance(body, dict) else None
    if not url:
        return 400, {"error": "No URL provided"}
    try:
        return 200, {"xmlData": fetch_sitemap(url, timeout=timeout)}
    except SitemapError as e:
        return e.status or 500, {"error": str(e)}


def handle_check_index_status(method: str, body) -> tuple[int, dict]:
    """POST /check-index-status — search links for manual verification."""
    if method.upper() != "POST":
        return METHOD_NOT_ALLOWED
    urls = _urls_from(body)
    if urls is None:
        return NO_URLS
    return 200, {
        "status": "success",
        "message": "Search verification links generated",
        "count": len(urls),
        "results": check_index_status(urls),
    }
