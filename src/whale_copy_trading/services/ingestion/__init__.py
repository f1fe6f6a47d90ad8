"""Block subscription ingestion."""

from whale_copy_trading.services.ingestion.block_ingestor import BlockIngestor

__all__ = ["BlockIngestor"]
