"""Pytest configuration for the alpacadata test suite."""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime
from decimal import Decimal

import pytest

from alpacadata.core.config.settings import AlpacaConfig, CredentialsConfig, PaginationConfig
from alpacadata.core.models.base import Bar


def pytest_addoption(parser: pytest.Parser) -> None:
    """Register command-line options for controlling integration tests."""

    parser.addoption(
        "--alpacadata-run-integration",
        action="store_true",
        default=False,
        help="Run alpacadata integration tests that call the live data API.",
    )


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Skip integration tests unless explicitly requested."""

    if config.getoption("--alpacadata-run-integration"):
        return

    skip_integration = pytest.mark.skip(
        reason="integration tests require --alpacadata-run-integration",
    )
    for item in items:
        if "integration" in item.keywords:
            item.add_marker(skip_integration)


@pytest.fixture
def config() -> AlpacaConfig:
    return AlpacaConfig(
        credentials=CredentialsConfig(api_key="key-id", secret_key="s3cr3t-value"),
        pagination=PaginationConfig(page_limit=10000, max_pages=50),
    )


@pytest.fixture
def make_bar() -> Callable[..., Bar]:
    def _make(symbol: str = "AAPL", day: int = 2, close: str = "187.15", **overrides: object) -> Bar:
        values: dict[str, object] = {
            "symbol": symbol,
            "timestamp": datetime(2024, 1, day, 5, 0, tzinfo=UTC),
            "open": Decimal("185.64"),
            "high": Decimal("188.44"),
            "low": Decimal("183.89"),
            "close": Decimal(close),
            "volume": 82488700,
            "trade_count": 1009074,
            "vwap": Decimal("185.9"),
        }
        values.update(overrides)
        return Bar(**values)

    return _make
