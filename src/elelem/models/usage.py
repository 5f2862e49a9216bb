"""
Token and cost accounting.

A UsageRecord is an additive ledger: it starts at zero and only ever grows.
Three ledgers are live during a generate call:

- attempt-level: reset for every retry attempt
- call-level: summed across all attempts of one generate call
- session-level: summed across every call issued through one session

UsageLedgers bundles the three handles so a single provider response is
recorded into all of them in one step.
"""

from dataclasses import dataclass

from pydantic import BaseModel, Field


class UsageRecord(BaseModel):
    """Token counts and estimated cost of one or more provider calls."""

    completion_tokens: int = Field(default=0, ge=0, description="Tokens generated by the model")
    prompt_tokens: int = Field(default=0, ge=0, description="Tokens sent to the model")
    total_tokens: int = Field(default=0, ge=0, description="completion_tokens + prompt_tokens")
    cost_usd: float = Field(default=0.0, ge=0.0, description="Estimated cost in USD")

    @classmethod
    def zero(cls) -> "UsageRecord":
        return cls()

    @classmethod
    def from_tokens(
        cls, prompt_tokens: int, completion_tokens: int, cost_usd: float = 0.0
    ) -> "UsageRecord":
        """Build a record from provider token counts, deriving total_tokens."""
        return cls(
            prompt_tokens=prompt_tokens,
            completion_tokens=completion_tokens,
            total_tokens=prompt_tokens + completion_tokens,
            cost_usd=cost_usd,
        )

    def add(self, other: "UsageRecord") -> "UsageRecord":
        """Add another record into this one in place and return self."""
        self.completion_tokens += other.completion_tokens
        self.prompt_tokens += other.prompt_tokens
        self.total_tokens += other.total_tokens
        self.cost_usd += other.cost_usd
        return self

    def snapshot(self) -> "UsageRecord":
        """Detached copy; later additions to self do not show up in it."""
        return self.model_copy()

    def __add__(self, other: "UsageRecord") -> "UsageRecord":
        return self.snapshot().add(other)


@dataclass
class UsageLedgers:
    """
    The three usage ledgers touched by one attempt of a generate call.

    The call and session ledgers are shared by reference with the enclosing
    generate call and session; the attempt ledger is fresh per attempt.
    """

    attempt: UsageRecord
    call: UsageRecord
    session: UsageRecord

    def record(self, usage: UsageRecord) -> None:
        """Add one provider usage to all three levels."""
        self.attempt.add(usage)
        self.call.add(usage)
        self.session.add(usage)
