"""Manual index verification — search links per engine (no API lookups)."""

from urllib.parse import quote

TIP = "Click the links above to manually verify if your URL appears in search results."


def check_links(url: str) -> dict[str, str]:
    encoded = quote(url, safe="!~*'()")
    return {
        "google": f"https://www.google.com/search?q=site:{encoded}",
        "bing": f"https://www.bing.com/search?q=site:{encoded}",
        "naver": f"https://search.naver.com/search.naver?query=site:{encoded}",
    }


def check_index_status(urls: list[str]) -> list[dict]:
    return [{"url": url, "checkLinks": check_links(url), "tip": TIP} for url in urls]
