"""
Storage backends for the daily stat tables, click events and lifetime counters.
"""

from .base import BaseClickSink, BaseCounterSource, BaseStatStore
from .storage import CounterSource, Storage

__all__ = ["BaseClickSink", "BaseCounterSource", "BaseStatStore", "CounterSource", "Storage"]
