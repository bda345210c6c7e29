"""Value objects passed between fetcher, sinks and responder."""

from dataclasses import dataclass


@dataclass(frozen=True)
class RateReading:
    """A USD bid price exactly as the API sent it (never parsed or rounded)."""

    bid: str

    def to_dict(self) -> dict[str, str]:
        return {"bid": self.bid}


@dataclass(frozen=True)
class PersistedRate:
    id: int
    bid: str
    created_at: str
    updated_at: str
    deleted_at: str | None = None

    @property
    def reading(self) -> RateReading:
        return RateReading(self.bid)
