"""Transaction handling pipeline and its bounded task group."""

from whale_copy_trading.services.pipeline.handler_group import HandlerGroup
from whale_copy_trading.services.pipeline.swap_pipeline import SwapPipeline

__all__ = ["HandlerGroup", "SwapPipeline"]
