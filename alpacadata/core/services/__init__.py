"""Services built on the client and storage layers."""

from alpacadata.core.services.ingestion import BarIngestionService, IngestionResult

__all__ = ["BarIngestionService", "IngestionResult"]
