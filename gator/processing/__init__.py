"""
Gator Processing Module
=======================

The ingestion pipeline: one feed fetched and stored per cycle.
"""

from .pipeline import IngestionPipeline, CycleResult

__all__ = [
    "IngestionPipeline",
    "CycleResult",
]
