"""
Resilient generation pipeline.

- generate.py: cache-augmented generate/extract/validate protocol
- action.py: read-through cache around an idempotent computation
- session.py: ElelemContext and session-level usage totals
"""

from elelem.pipeline.action import action
from elelem.pipeline.generate import call_provider, generate
from elelem.pipeline.session import ElelemContext, run_session

__all__ = [
    "generate",
    "call_provider",
    "action",
    "ElelemContext",
    "run_session",
]
