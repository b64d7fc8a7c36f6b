#!/usr/bin/env python3
"""Sitemap Indexer — push every sitemap URL to Google, Bing (IndexNow) and Naver."""

import json
import sys
import click
from pathlib import Path
from rich.console import Console
from rich.table import Table
from rich.panel import Panel
from rich import box

CONFIG_PATH = Path(__file__).parent / "config.yaml"
console = Console()

_STATUS_STYLE = {
    "success": "[green]OK[/]",
    "failed": "[red]FAIL[/]",
    "partial": "[yellow]PARTIAL[/]",
    "pending": "[dim]...[/]",
}


def _trunc(text: str, width: int = 60) -> str:
    """Truncate text with ellipsis if too long."""
    if len(text) <= width:
        return text
    return text[:width - 1] + "…"


def _fmt_duration(seconds: float) -> str:
    """Format duration: <60s as '42s', >=60s as '1.5m'."""
    if seconds < 60:
        return f"{seconds:.0f}s"
    return f"{seconds / 60:.1f}m"


def load_config(path: Path | None = None):
    from engines.config import load_config as _load
    from engines.errors import ConfigError

    path = path or CONFIG_PATH
    if not Path(path).exists():
        console.print(f"[dim]{path.name} not found, using environment variables only.[/]")
    try:
        return _load(path)
    except ConfigError as e:
        console.print(f"[red]ERROR:[/] {e}")
        sys.exit(1)


def _platform_choice():
    from engines.outcomes import PlatformId
    return click.Choice([p.value for p in PlatformId], case_sensitive=False)


@click.group()
@click.option("--config", "config_path", type=click.Path(path_type=Path), default=None,
              help="Path to config.yaml (default: next to cli.py)")
@click.option("--log-level", default=None, help="DEBUG, INFO, WARNING, ...")
@click.pass_context
def cli(ctx, config_path, log_level):
    """Sitemap Indexer — submit sitemap URLs to search engines in batches."""
    from engines.log import setup_logging

    setup_logging(log_level, console=console)
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path


def _config(ctx):
    return load_config(ctx.obj.get("config_path"))


@cli.command()
@click.pass_context
def status(ctx):
    """Show which platforms are configured."""
    cfg = _config(ctx)

    table = Table(title="Indexing platforms", box=box.ROUNDED)
    table.add_column("Platform", style="bold")
    table.add_column("Credentials", justify="center")
    table.add_column("Protocol")
    table.add_column("Enabled", justify="center")

    rows = [
        ("Google", cfg.google.configured, "Indexing API, per URL (JWT bearer)", "google"),
        ("Bing", cfg.bing.configured, "IndexNow, bulk per batch", "bing"),
        ("Naver", cfg.naver.configured, "[yellow]simulated[/] placeholder", "naver"),
    ]
    enabled = {p.value for p in cfg.platforms}
    for name, ok, proto, pid in rows:
        table.add_row(
            name,
            "[green]OK[/]" if ok else "[dim]-[/]",
            proto,
            "[green]yes[/]" if pid in enabled else "[dim]no[/]",
        )
    console.print(table)
    console.print(f"  [dim]batch size {cfg.batch_size} | delay {cfg.batch_delay}s between batches[/]\n")


@cli.command()
@click.argument("source")
@click.option("--limit", default=50, help="Max URLs to print")
def parse(source, limit):
    """Parse a sitemap (URL or local file) and list its unique URLs."""
    from engines.sitemap import load_urls
    from engines.errors import SitemapError

    try:
        urls = load_urls(source)
    except SitemapError as e:
        console.print(f"[red]ERROR:[/] {e}")
        sys.exit(1)

    console.print(f"\n[bold]Found {len(urls)} URLs[/]")
    for url in urls[:limit]:
        console.print(f"  {url}")
    if len(urls) > limit:
        console.print(f"  [dim]... and {len(urls) - limit} more[/]")


def _print_breakdown(summary):
    table = Table(title="Platform Breakdown", box=box.ROUNDED)
    table.add_column("Platform", style="bold")
    table.add_column("Success", justify="right", style="green")
    table.add_column("Failed", justify="right", style="red")
    table.add_column("Submitted", justify="right")
    for platform, s in summary.stats.items():
        table.add_row(platform.label, str(s.success), str(s.failed), str(s.submitted))
    console.print(table)


def _print_urls(summary):
    table = Table(box=box.SIMPLE)
    table.add_column("URL", min_width=30)
    table.add_column("Status", justify="center")
    platforms = list(summary.stats)
    for p in platforms:
        table.add_column(p.label[0], justify="center")
    for r in summary.records:
        cells = [_STATUS_STYLE[r.platform_status[p].value] for p in platforms]
        table.add_row(_trunc(r.url), _STATUS_STYLE[r.status.value], *cells)
    console.print(table)


@cli.command()
@click.argument("source")
@click.option("--batch-size", type=int, default=None, help="URLs per batch (default 50)")
@click.option("--delay", type=float, default=None, help="Seconds between batches (default 1)")
@click.option("--platform", "platforms", multiple=True, type=_platform_choice(),
              help="Only submit to these platforms (repeatable)")
@click.option("--show-urls", is_flag=True, help="Print per-URL status table")
@click.pass_context
def index(ctx, source, batch_size, delay, platforms, show_urls):
    """Parse SOURCE and submit every URL to all platforms in batches."""
    from engines.errors import ConfigError, IndexerError
    from engines.orchestrator import BatchOrchestrator
    from engines.outcomes import PlatformId

    cfg = _config(ctx)
    try:
        cfg = cfg.with_overrides(
            batch_size=batch_size,
            batch_delay=delay,
            platforms=tuple(PlatformId(p.lower()) for p in platforms) or None,
        )
    except ConfigError as e:
        console.print(f"[red]ERROR:[/] {e}")
        sys.exit(1)

    def on_batch(batch_index, stats, progress):
        ratios = "  ".join(f"{p.label} {s.ratio()}" for p, s in stats.items())
        console.print(
            f"  [dim]batch {batch_index + 1}[/] "
            f"{progress.processed}/{progress.total} processed  "
            f"[green]{progress.all_success}[/] all-success  "
            f"[red]{progress.not_all_success}[/] partial/failed  | {ratios}"
        )

    orch = BatchOrchestrator(cfg, on_batch_complete=on_batch)
    try:
        orch.load_sitemap(source)
    except IndexerError as e:
        console.print(f"[red]ERROR:[/] Error parsing sitemap: {e}")
        sys.exit(1)

    console.print(f"\n[bold]Indexing {len(orch.records)} URLs[/] "
                  f"[dim](batch size {cfg.batch_size})[/]")
    summary = orch.run()

    console.print()
    _print_breakdown(summary)
    if show_urls:
        _print_urls(summary)
    console.print(Panel(
        f"{summary.summary_line()}\n"
        f"[dim]{summary.batches} batches in {_fmt_duration(summary.elapsed)}. "
        "Indexing may take minutes to days; use 'check URL' to verify manually.[/]",
        title="Done",
        box=box.ROUNDED,
    ))


@cli.command()
@click.argument("urls", nargs=-1, required=True)
@click.option("--platform", "platforms", multiple=True, type=_platform_choice(),
              help="Only these platforms (repeatable)")
@click.option("--json", "as_json", is_flag=True, help="Print raw handler responses")
@click.pass_context
def reindex(ctx, urls, platforms, as_json):
    """Instant submission of one or more URLs (single batch, no orchestration)."""
    from engines.handlers import handle_submit
    from engines.outcomes import PlatformId

    cfg = _config(ctx)
    targets = [PlatformId(p.lower()) for p in platforms] or list(cfg.platforms)
    responses = {}
    for platform in targets:
        code, payload = handle_submit(platform, "POST", {"urls": list(urls)}, cfg)
        responses[platform.value] = {"http": code, **payload}
        if as_json:
            continue
        state = payload.get("status") or payload.get("error")
        if code == 200 and state == "success":
            note = " [yellow](simulated)[/]" if payload.get("simulated") else ""
            console.print(f"  [green]+[/] {platform.label:8s} {len(urls)} URL(s){note}")
        else:
            msg = payload.get("message") or payload.get("error") or state
            console.print(f"  [red]x[/] {platform.label:8s} HTTP {code} {state}: {msg}")
            for item in payload.get("results", []):
                if item["status"] != "success":
                    console.print(f"      [dim]{item['url']}[/] {item['message']}")

    if as_json:
        click.echo(json.dumps(responses, indent=2, ensure_ascii=False))


@cli.command()
@click.argument("urls", nargs=-1, required=True)
def check(urls):
    """Search links for manually verifying whether URLs are indexed."""
    from engines.check import check_index_status, TIP

    for entry in check_index_status(list(urls)):
        console.print(f"\n[bold]{entry['url']}[/]")
        for engine, link in entry["checkLinks"].items():
            console.print(f"  {engine:7s} {link}")
    console.print(f"\n[dim]{TIP}[/]")


def main():
    cli()


if __name__ == "__main__":
    main()
