import csv

import pytest
from typer.testing import CliRunner

from gemwatch import __version__
from gemwatch.core.orchestrator import RunStats, ScrapeError, ScrapeRunner
from gemwatch.cli.main import app
from gemwatch.persistence import TenderRecord, TenderStore

runner = CliRunner()


@pytest.fixture
def workspace(tmp_path):
    config_path = tmp_path / "app.yaml"
    config_path.write_text(
        "storage:\n"
        f"  store_path: {tmp_path / 'data' / 'tenders.json'}\n"
        f"  export_dir: {tmp_path / 'exports'}\n"
        "logging:\n"
        "  level: WARNING\n"
        "  file: null\n"
        "  rich_console: true\n",
        encoding="utf-8",
    )
    return tmp_path, config_path


@pytest.fixture
def stored(workspace):
    tmp_path, _ = workspace
    TenderStore(tmp_path / "data" / "tenders.json").write(
        [
            TenderRecord(bid_number="GEM/2025/B/1", title="Road construction work"),
            TenderRecord(bid_number="GEM/2025/B/2", title="Bridge maintenance"),
            TenderRecord(bid_number="GEM/2025/B/3", title="Road and bridge survey"),
        ]
    )


def invoke(config_path, *args):
    return runner.invoke(app, ["--config", str(config_path), *args])


def read_csv(path):
    with open(path, newline="", encoding="utf-8") as f:
        return list(csv.reader(f))


def test_version():
    result = runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_invalid_config_exits(tmp_path):
    bad = tmp_path / "bad.yaml"
    bad.write_text("timing:\n  settle_ms: -1\n", encoding="utf-8")

    result = runner.invoke(app, ["--config", str(bad), "tenders", "list"])

    assert result.exit_code == 1


def test_list_empty_store(workspace):
    _, config_path = workspace

    result = invoke(config_path, "tenders", "list")

    assert result.exit_code == 0
    assert "No tenders stored" in result.output


@pytest.mark.usefixtures("stored")
def test_list_stored(workspace):
    _, config_path = workspace

    result = invoke(config_path, "tenders", "list", "--limit", "2")

    assert result.exit_code == 0
    assert "GEM/2025/B/1" in result.output
    assert "GEM/2025/B/3" not in result.output


@pytest.mark.usefixtures("stored")
def test_search_writes_ranked_matches(workspace):
    tmp_path, config_path = workspace

    result = invoke(config_path, "tenders", "search", "--include", "road,bridge")

    assert result.exit_code == 0
    rows = read_csv(tmp_path / "exports" / "matches.csv")
    assert [row[0] for row in rows[1:]] == ["GEM/2025/B/3", "GEM/2025/B/1", "GEM/2025/B/2"]
    assert rows[1][-2:] == ["road|bridge", "2"]


@pytest.mark.usefixtures("stored")
def test_search_all_mode_with_exclude(workspace):
    tmp_path, config_path = workspace
    out = tmp_path / "custom" / "hits.csv"

    result = invoke(
        config_path, "tenders", "search", "-i", "road", "-x", "survey", "-m", "all", "-o", str(out)
    )

    assert result.exit_code == 0
    rows = read_csv(out)
    assert [row[0] for row in rows[1:]] == ["GEM/2025/B/1"]


@pytest.mark.usefixtures("stored")
def test_search_json_output(workspace):
    _, config_path = workspace

    result = invoke(config_path, "tenders", "search", "-i", "maintenance", "--format", "json")

    assert result.exit_code == 0
    assert '"matchedKeywords"' in result.output
    assert "Bridge maintenance" in result.output


def test_search_requires_include(workspace):
    _, config_path = workspace

    result = invoke(config_path, "tenders", "search", "--include", " , ")

    assert result.exit_code == 1


def test_search_rejects_unknown_mode(workspace):
    _, config_path = workspace

    result = invoke(config_path, "tenders", "search", "-i", "road", "-m", "most")

    assert result.exit_code == 1


@pytest.mark.usefixtures("stored")
def test_export_all(workspace):
    tmp_path, config_path = workspace

    result = invoke(config_path, "tenders", "export")

    assert result.exit_code == 0
    rows = read_csv(tmp_path / "exports" / "all.csv")
    assert rows[0][0] == "Bid No"
    assert len(rows) == 4


def test_scrape_rejects_page_limit(workspace):
    _, config_path = workspace

    result = invoke(config_path, "scrape", "run", "--pages", "51")

    assert result.exit_code == 2


@pytest.fixture
def fake_run(monkeypatch):
    calls: list[tuple[int, str]] = []
    outcome: dict = {}

    async def run(self, page_limit, keyword=""):
        calls.append((page_limit, keyword))
        if "error" in outcome:
            raise outcome["error"]
        return RunStats(
            keyword=keyword,
            page_limit=page_limit,
            pages_parsed=2,
            cards_seen=20,
            duplicates=1,
            stored_count=19,
            stop_reason="no_next_page",
        )

    monkeypatch.setattr(ScrapeRunner, "run", run)
    return calls, outcome


def test_scrape_run_summary(workspace, fake_run):
    _, config_path = workspace
    calls, _ = fake_run

    result = invoke(config_path, "scrape", "run", "-n", "3", "-k", " solar ")

    assert result.exit_code == 0
    assert calls == [(3, "solar")]
    assert "Fetch Summary" in result.output


def test_scrape_run_json_summary(workspace, fake_run):
    _, config_path = workspace

    result = invoke(config_path, "scrape", "run", "--format", "json")

    assert result.exit_code == 0
    assert '"stored_count": 19' in result.output
    assert '"stop_reason": "no_next_page"' in result.output


@pytest.mark.usefixtures("stored")
def test_scrape_run_failure_keeps_store(workspace, fake_run):
    tmp_path, config_path = workspace
    _, outcome = fake_run
    outcome["error"] = ScrapeError("Timed out waiting for the listing", cause="timeout")
    store_file = tmp_path / "data" / "tenders.json"
    before = store_file.read_bytes()

    result = invoke(config_path, "scrape", "run")

    assert result.exit_code == 1
    assert "Cause: timeout" in result.output
    assert "left unchanged" in result.output
    assert store_file.read_bytes() == before


def test_scrape_run_respects_configured_page_cap(workspace, fake_run):
    _, config_path = workspace
    calls, _ = fake_run
    with open(config_path, "a", encoding="utf-8") as f:
        f.write("max_page_limit: 3\n")

    result = invoke(config_path, "scrape", "run", "--pages", "5")

    assert result.exit_code == 2
    assert calls == []
