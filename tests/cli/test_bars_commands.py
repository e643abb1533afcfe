from __future__ import annotations

import json
from datetime import UTC, datetime
from pathlib import Path

import pytest
from typer.testing import CliRunner

from alpacadata.cli import bars as bars_module
from alpacadata.cli.main import create_app
from alpacadata.core.data.repositories.bars import BarRepository
from alpacadata.core.data.storage.duckdb_factory import DuckDBFactory
from alpacadata.core.exceptions import NetworkError
from alpacadata.core.models.base import Bar
from alpacadata.core.models.market import TimeFrame


class StubClient:
    def __init__(self, bars: list[Bar], error: Exception | None = None) -> None:
        self.bars = bars
        self.error = error
        self.calls: list[tuple[str, tuple[object, ...]]] = []
        self.closed = False

    async def __aenter__(self) -> StubClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        self.closed = True

    async def get_latest_bars(self, symbols):
        self.calls.append(("latest", (symbols,)))
        if self.error:
            raise self.error
        return self.bars

    async def get_historical_bars(self, symbols, timeframe, start, end):
        self.calls.append(("history", (symbols, timeframe, start, end)))
        if self.error:
            raise self.error
        return self.bars


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.setattr("alpacadata.core.config.settings.DEFAULT_CONFIG_PATH", tmp_path / "missing.toml")
    monkeypatch.setenv("APCA_API_KEY_ID", "key-id")
    monkeypatch.setenv("APCA_API_SECRET_KEY", "secret")
    monkeypatch.delenv("ALPACADATA_DATABASE", raising=False)


def test_latest_table_output(runner: CliRunner, monkeypatch: pytest.MonkeyPatch, make_bar) -> None:
    client = StubClient([make_bar()])
    monkeypatch.setattr(bars_module, "get_client", lambda config: client)

    result = runner.invoke(create_app(), ["--no-color", "bars", "latest", "--symbols", "AAPL, MSFT"])

    assert result.exit_code == 0, result.output
    assert "AAPL" in result.output
    assert "trade_count" in result.output
    assert client.calls == [("latest", (["AAPL", "MSFT"],))]
    assert client.closed


def test_history_jsonl_output(runner: CliRunner, monkeypatch: pytest.MonkeyPatch, make_bar) -> None:
    client = StubClient([make_bar(day=2), make_bar(day=3)])
    monkeypatch.setattr(bars_module, "get_client", lambda config: client)

    result = runner.invoke(
        create_app(),
        [
            "--format",
            "jsonl",
            "bars",
            "history",
            "--symbols",
            "AAPL",
            "--timeframe",
            "15Min",
            "--start",
            "2024-01-01",
            "--end",
            "2024-01-31T23:59:59Z",
        ],
    )

    assert result.exit_code == 0, result.output
    rows = [json.loads(line) for line in result.output.splitlines() if line.strip()]
    assert [row["timestamp"] for row in rows] == ["2024-01-02T05:00:00+00:00", "2024-01-03T05:00:00+00:00"]
    assert rows[0]["close"] == "187.15"
    _, (symbols, timeframe, start, end) = client.calls[0]
    assert symbols == ["AAPL"]
    assert timeframe == "15Min"
    assert start == datetime(2024, 1, 1, tzinfo=UTC)
    assert end == datetime(2024, 1, 31, 23, 59, 59, tzinfo=UTC)


def test_output_file(runner: CliRunner, monkeypatch: pytest.MonkeyPatch, tmp_path: Path, make_bar) -> None:
    monkeypatch.setattr(bars_module, "get_client", lambda config: StubClient([make_bar()]))
    target = tmp_path / "bars.jsonl"

    result = runner.invoke(create_app(), ["--format", "jsonl", "--output", str(target), "bars", "latest", "--symbols", "AAPL"])

    assert result.exit_code == 0, result.output
    assert json.loads(target.read_text(encoding="utf-8").splitlines()[0])["symbol"] == "AAPL"


def test_provider_error_exit_code(runner: CliRunner, monkeypatch: pytest.MonkeyPatch) -> None:
    error = NetworkError("HTTP request failed: 500", status_code=500)
    monkeypatch.setattr(bars_module, "get_client", lambda config: StubClient([], error=error))

    result = runner.invoke(create_app(), ["bars", "latest", "--symbols", "AAPL"])

    assert result.exit_code == 3
    assert '"code": "NETWORK_ERROR"' in result.output


def test_invalid_start_exit_code(runner: CliRunner, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(bars_module, "get_client", lambda config: StubClient([]))

    result = runner.invoke(
        create_app(),
        ["bars", "history", "--symbols", "AAPL", "--start", "yesterday", "--end", "2024-01-31"],
    )

    assert result.exit_code == 2
    assert "VALIDATION_ERROR" in result.output


def test_missing_credentials_exit_code(runner: CliRunner, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("APCA_API_KEY_ID")

    result = runner.invoke(create_app(), ["bars", "latest", "--symbols", "AAPL"])

    assert result.exit_code == 2
    assert "CONFIGURATION_ERROR" in result.output


def test_invalid_format_rejected(runner: CliRunner) -> None:
    result = runner.invoke(create_app(), ["--format", "csv", "bars", "latest", "--symbols", "AAPL"])
    assert result.exit_code == 2


def test_ingest_then_stored(runner: CliRunner, monkeypatch: pytest.MonkeyPatch, tmp_path: Path, make_bar) -> None:
    database = str(tmp_path / "bars.duckdb")
    client = StubClient([make_bar(day=2), make_bar(day=3)])
    monkeypatch.setattr(bars_module, "get_client", lambda config: client)
    args = ["--format", "jsonl", "bars", "ingest", "--symbols", "AAPL", "--start", "2024-01-01", "--end", "2024-01-31"]

    first = runner.invoke(create_app(), [*args, "--database", database])
    second = runner.invoke(create_app(), [*args, "--database", database])

    assert first.exit_code == 0, first.output
    assert json.loads(first.output.strip())["written"] == 2
    summary = json.loads(second.output.strip())
    assert (summary["fetched"], summary["written"], summary["skipped"]) == (2, 0, 2)
    assert client.calls[0][1][1] == TimeFrame.day()

    stored = runner.invoke(
        create_app(),
        ["--format", "jsonl", "bars", "stored", "--symbol", "AAPL", "--start", "2024-01-02T05:00:00Z",
         "--end", "2024-01-02T05:00:00Z", "--database", database],
    )
    assert stored.exit_code == 0, stored.output
    rows = [json.loads(line) for line in stored.output.splitlines() if line.strip()]
    assert [row["timestamp"] for row in rows] == ["2024-01-02T05:00:00+00:00"]


def test_stored_uses_repository_hook(runner: CliRunner, monkeypatch: pytest.MonkeyPatch, make_bar) -> None:
    repository = BarRepository(DuckDBFactory().create_connection())
    repository.connection.execute(
        "INSERT INTO bars VALUES ('MSFT', TIMESTAMP '2024-01-02 05:00:00', 1, 2, 0.5, 1.5, 10, 1, 1.2)"
    )
    requested: list[str] = []

    def get_repository(database: str) -> BarRepository:
        requested.append(database)
        return repository

    monkeypatch.setattr(bars_module, "get_repository", get_repository)

    result = runner.invoke(
        create_app(),
        ["--format", "jsonl", "bars", "stored", "--symbol", "MSFT", "--start", "2024-01-01", "--end", "2024-01-03"],
    )

    assert result.exit_code == 0, result.output
    assert requested == [":memory:"]
    assert json.loads(result.output.strip())["symbol"] == "MSFT"


def test_bad_env_number_exit_code(runner: CliRunner, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ALPACADATA_MAX_PAGES", "lots")

    result = runner.invoke(create_app(), ["bars", "latest", "--symbols", "AAPL"])

    assert result.exit_code == 2
    assert "CONFIGURATION_ERROR" in result.output
    assert "pagination.max_pages" in result.output
