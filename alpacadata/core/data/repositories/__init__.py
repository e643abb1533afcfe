"""Repositories for persisted market data."""

from alpacadata.core.data.repositories.bars import BarRepository

__all__ = ["BarRepository"]
