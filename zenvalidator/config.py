"""Engine settings."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Literal

OutagePolicy = Literal["fail", "pass"]


@dataclass(frozen=True)
class EngineConfig:
    remote_timeout_s: float = 2.0
    # What a remote outage resolves to; the result kind stays "remote_unavailable".
    remote_unavailable: OutagePolicy = "fail"
    # Prefix for relative remote endpoints (e.g. "/check-username").
    base_url: str | None = None
    max_workers: int = 4
    user_agent: str = "ZENVALIDATOR"

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> EngineConfig:
        """Build settings from a `[settings]` table, ignoring unknown keys."""
        policy = str(data.get("remote_unavailable", "fail")).strip().lower()
        if policy not in ("fail", "pass"):
            raise ValueError(f"remote_unavailable must be 'fail' or 'pass', got {policy!r}")

        base_url = data.get("base_url")
        max_workers = int(data.get("max_workers", 4))
        if max_workers <= 0:
            raise ValueError("max_workers must be a positive integer")

        return cls(
            remote_timeout_s=float(data.get("remote_timeout_s", 2.0)),
            remote_unavailable=policy,  # type: ignore[arg-type]
            base_url=str(base_url).strip() if isinstance(base_url, str) and base_url.strip() else None,
            max_workers=max_workers,
            user_agent=str(data.get("user_agent", "ZENVALIDATOR")),
        )
