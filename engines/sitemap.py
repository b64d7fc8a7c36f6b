"""Sitemap fetch + parse — <urlset>/<sitemapindex> to a deduplicated URL list."""

import logging
import xml.etree.ElementTree as ET
from pathlib import Path
from urllib.parse import urlparse

import requests

from engines.errors import SitemapError

logger = logging.getLogger(__name__)


def dedupe(urls) -> list[str]:
    """Drop repeats, keeping the first occurrence's position."""
    return list(dict.fromkeys(u for u in urls if u))


def fetch_sitemap(url: str, timeout: float = 30.0) -> str:
    try:
        resp = requests.get(url, timeout=timeout, headers={
            "User-Agent": "Mozilla/5.0 (compatible; sitemap-indexer/1.0)"
        })
    except requests.RequestException as e:
        raise SitemapError(f"Failed to fetch sitemap: {e}") from e
    if not resp.ok:
        raise SitemapError(f"Failed to fetch sitemap: {resp.reason or resp.status_code}", status=resp.status_code)
    return resp.text


def parse_sitemap(xml_data: str | bytes) -> list[str]:
    """Extract <loc> values. A sitemap index yields its sub-sitemap URLs (not followed)."""
    try:
        root = ET.fromstring(xml_data)
    except ET.ParseError as e:
        raise SitemapError(f"Invalid sitemap XML: {e}") from e

    if root.tag.endswith("sitemapindex"):
        logger.warning("Sitemap index detected. Only listing sub-sitemaps.")
    elif not root.tag.endswith("urlset"):
        return []

    urls = [(loc.text or "").strip() for loc in root.findall(".//{*}loc")]
    return dedupe(urls)


def load_urls(source: str, timeout: float = 30.0) -> list[str]:
    """Read URLs from a sitemap URL or a local sitemap file."""
    if urlparse(source).scheme in ("http", "https"):
        logger.info("Fetching sitemap from %s...", source)
        return parse_sitemap(fetch_sitemap(source, timeout=timeout))

    path = Path(source).expanduser()
    if not path.is_file():
        raise SitemapError(f"Sitemap file not found: {source}")
    logger.info("Reading sitemap file: %s...", path.name)
    return parse_sitemap(path.read_bytes())
