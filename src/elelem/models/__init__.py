"""
Data models for the generation pipeline.

- usage.py: UsageRecord ledger and the three-level UsageLedgers bundle
- results.py: ElelemResult and cache-key construction
"""

from elelem.models.results import ElelemResult, generation_cache_key
from elelem.models.usage import UsageLedgers, UsageRecord

__all__ = [
    "ElelemResult",
    "UsageLedgers",
    "UsageRecord",
    "generation_cache_key",
]
