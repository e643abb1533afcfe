from __future__ import annotations

import json
from datetime import UTC, datetime
from decimal import Decimal
from pathlib import Path

import pytest
from typer.testing import CliRunner

from alpacadata.cli import quotes as quotes_module
from alpacadata.cli.main import create_app
from alpacadata.core.exceptions import ResponseParseError
from alpacadata.core.models.base import Quote, QuotePair
from alpacadata.core.models.market import QuoteSide

TS = datetime(2024, 1, 2, 14, 30, tzinfo=UTC)


def _pair(with_ask: bool = True) -> QuotePair:
    ask = Quote(timestamp=TS, side=QuoteSide.ASK, exchange="V", price=Decimal("10.50"), size=3) if with_ask else None
    bid = Quote(timestamp=TS, side=QuoteSide.BID, exchange="Q", price=Decimal("10.40"), size=2)
    return QuotePair(symbol="AAPL", timestamp=TS, ask=ask, bid=bid)


class StubClient:
    def __init__(self, pairs: list[QuotePair], error: Exception | None = None) -> None:
        self.pairs = pairs
        self.error = error
        self.calls: list[tuple[object, ...]] = []

    async def __aenter__(self) -> StubClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        return None

    async def get_latest_quotes(self, symbols):
        self.calls.append(("latest", symbols))
        if self.error:
            raise self.error
        return self.pairs

    async def get_historical_quotes(self, symbol, start, end):
        self.calls.append(("history", symbol, start, end))
        return self.pairs


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setattr("alpacadata.core.config.settings.DEFAULT_CONFIG_PATH", tmp_path / "missing.toml")
    monkeypatch.setenv("APCA_API_KEY_ID", "key-id")
    monkeypatch.setenv("APCA_API_SECRET_KEY", "secret")
    monkeypatch.delenv("ALPACADATA_DATABASE", raising=False)


def test_latest_jsonl(runner: CliRunner, monkeypatch: pytest.MonkeyPatch) -> None:
    client = StubClient([_pair(), _pair(with_ask=False)])
    monkeypatch.setattr(quotes_module, "get_client", lambda config: client)

    result = runner.invoke(create_app(), ["--format", "jsonl", "quotes", "latest", "--symbols", "AAPL"])

    assert result.exit_code == 0, result.output
    rows = [json.loads(line) for line in result.output.splitlines() if line.strip()]
    assert rows[0]["ask_price"] == "10.50"
    assert rows[0]["spread"] == "0.10"
    assert rows[1]["ask_exchange"] is None
    assert rows[1]["spread"] is None
    assert client.calls == [("latest", ["AAPL"])]


def test_history_table(runner: CliRunner, monkeypatch: pytest.MonkeyPatch) -> None:
    client = StubClient([_pair()])
    monkeypatch.setattr(quotes_module, "get_client", lambda config: client)

    result = runner.invoke(
        create_app(),
        ["--no-color", "quotes", "history", "--symbol", "AAPL", "--start", "2024-01-02", "--end", "2024-01-03"],
    )

    assert result.exit_code == 0, result.output
    assert "bid_exchange" in result.output
    assert client.calls[0][1] == "AAPL"


def test_parse_error_exit_code(runner: CliRunner, monkeypatch: pytest.MonkeyPatch) -> None:
    error = ResponseParseError("Response is not valid JSON", response_kind="LatestQuotesResponse")
    monkeypatch.setattr(quotes_module, "get_client", lambda config: StubClient([], error=error))

    result = runner.invoke(create_app(), ["quotes", "latest", "--symbols", "AAPL"])

    assert result.exit_code == 3
    assert "PARSE_ERROR" in result.output
