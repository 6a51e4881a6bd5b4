from __future__ import annotations

from dataclasses import asdict, dataclass, replace
from typing import Any


@dataclass(frozen=True)
class JobContract:
    """A contract offer, or the active contract once accepted."""

    id: str
    car_id: str
    car_name: str = ""
    rarity: str = "common"
    label: str = ""
    repair_multiplier: float = 1.0
    payout_multiplier: float = 1.0
    bonus_xp: int = 0
    duration_ms: float = 0.0
    created_at: float = 0.0
    accepted_at: float | None = None
    expires_at: float | None = None

    def accept(self, now: float) -> JobContract:
        """Return the accepted copy stamped with its deadline."""
        return replace(self, accepted_at=now, expires_at=now + self.duration_ms)

    def is_expired(self, now: float) -> bool:
        return self.expires_at is not None and now > self.expires_at

    def time_remaining(self, now: float) -> float:
        if self.expires_at is None:
            return self.duration_ms
        return max(0.0, self.expires_at - now)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> JobContract:
        accepted_at = data.get("accepted_at")
        expires_at = data.get("expires_at")
        return cls(
            id=str(data["id"]),
            car_id=str(data.get("car_id", "")),
            car_name=data.get("car_name", ""),
            rarity=data.get("rarity", "common"),
            label=data.get("label", ""),
            repair_multiplier=float(data.get("repair_multiplier", 1.0)),
            payout_multiplier=float(data.get("payout_multiplier", 1.0)),
            bonus_xp=int(data.get("bonus_xp", 0)),
            duration_ms=float(data.get("duration_ms", 0.0)),
            created_at=float(data.get("created_at", 0.0)),
            accepted_at=float(accepted_at) if accepted_at is not None else None,
            expires_at=float(expires_at) if expires_at is not None else None,
        )


@dataclass(frozen=True)
class ContractOutcome:
    """How a repaired contract car resolved its contract."""

    contract_id: str
    label: str
    completed_in_time: bool
    payout_multiplier: float
    bonus_xp: int


@dataclass(frozen=True)
class ContractActionResult:
    ok: bool
    message: str = ""
