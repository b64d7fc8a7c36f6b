import json
from unittest.mock import patch

from click.testing import CliRunner

from cli import cli
from engines.outcomes import Aggregate, ItemOutcome, PerItem, PlatformId, SubmitStatus
from tests.conftest import FakeResponse

SITEMAP = """<urlset xmlns="http://www.sitemaps.org/schemas/sitemap/0.9">
<url><loc>https://example.com/a</loc></url>
<url><loc>https://example.com/b</loc></url>
<url><loc>https://example.com/c</loc></url>
</urlset>"""


class Fake:
    def __init__(self, platform, per_item=False):
        self.platform = platform
        self.per_item = per_item

    def start_run(self):
        pass

    def submit(self, urls):
        if self.per_item:
            return PerItem(tuple(ItemOutcome(u, SubmitStatus.SUCCESS) for u in urls))
        return Aggregate(SubmitStatus.FAILED, "nope")


def _write(tmp_path):
    cfg = tmp_path / "config.yaml"
    cfg.write_text("indexer:\n  batch_delay: 0\nnaver:\n  delay: 0\n")
    sitemap = tmp_path / "sitemap.xml"
    sitemap.write_text(SITEMAP)
    return cfg, sitemap


def test_check_prints_links():
    result = CliRunner().invoke(cli, ["check", "https://example.com/x"])
    assert result.exit_code == 0
    assert "bing.com/search?q=site:" in result.output


def test_parse_file(tmp_path):
    _, sitemap = _write(tmp_path)
    result = CliRunner().invoke(cli, ["parse", str(sitemap)])
    assert result.exit_code == 0
    assert "Found 3 URLs" in result.output


def test_status(tmp_path):
    cfg, _ = _write(tmp_path)
    result = CliRunner().invoke(cli, ["--config", str(cfg), "status"], env={"BING_API_KEY": "k"})
    assert result.exit_code == 0
    assert "Naver" in result.output


def test_index_runs_all_batches(tmp_path):
    cfg, sitemap = _write(tmp_path)
    adapters = {PlatformId.GOOGLE: Fake(PlatformId.GOOGLE, per_item=True), PlatformId.BING: Fake(PlatformId.BING)}
    with patch("engines.orchestrator.build_adapters", return_value=adapters):
        result = CliRunner().invoke(
            cli, ["--config", str(cfg), "index", str(sitemap), "--batch-size", "2", "--show-urls"]
        )
    assert result.exit_code == 0, result.output
    assert "Summary: Google 3/3, Bing 0/3" in result.output


def test_index_missing_sitemap_exits_1(tmp_path):
    cfg, _ = _write(tmp_path)
    result = CliRunner().invoke(cli, ["--config", str(cfg), "index", str(tmp_path / "none.xml")])
    assert result.exit_code == 1


def test_reindex_json(tmp_path):
    cfg, _ = _write(tmp_path)
    with patch("engines.indexnow.requests.post", return_value=FakeResponse(202, text="")):
        result = CliRunner().invoke(
            cli,
            ["--config", str(cfg), "reindex", "https://example.com/a", "--platform", "bing", "--json"],
            env={"BING_API_KEY": "k"},
        )
    assert result.exit_code == 0, result.output
    payload = json.loads(result.output[result.output.index("{"):])
    assert payload["bing"]["status"] == "success"
    assert payload["bing"]["http"] == 200
