"""Shared data models for drill results."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional


STATUSES = {"NON_COMPLIANT", "COMPLIANT", "NOT_EVALUATED", "ERROR", "MISCONFIGURED"}
HANDLE_ACTIONS = {"create", "restore"}
HANDLE_STATUSES = {"ACTIVE", "RELEASED", "GONE", "FAILED", "RETAINED", "RESTORED"}
SWEEP_MODES = {"DRY_RUN", "APPLY", "SKIP", "FAILED"}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _ensure_datetime(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    if isinstance(value, str):
        return datetime.fromisoformat(value)
    raise TypeError(f"Unsupported datetime value: {value!r}")


@dataclass
class ResourceHandle:
    kind: str
    identifier: str
    arn: Optional[str] = None
    action: str = "create"
    status: str = "ACTIVE"
    note: str = ""
    created_at: datetime = field(default_factory=_utcnow)

    def __post_init__(self) -> None:
        if self.action not in HANDLE_ACTIONS:
            raise ValueError(f"action must be one of {HANDLE_ACTIONS}")
        if self.status not in HANDLE_STATUSES:
            raise ValueError(f"status must be one of {HANDLE_STATUSES}")
        if isinstance(self.created_at, str):
            self.created_at = datetime.fromisoformat(self.created_at)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ResourceHandle":
        payload = data.copy()
        payload["created_at"] = _ensure_datetime(payload["created_at"])
        return cls(**payload)

    def to_dict(self) -> Dict[str, Any]:
        payload = asdict(self)
        payload["created_at"] = self.created_at.isoformat()
        return payload


@dataclass
class ScenarioResult:
    rule: str
    title: str
    service: str
    status: str
    evidence: Dict[str, Any] = field(default_factory=dict)
    resources: List[ResourceHandle] = field(default_factory=list)
    cleanup_failures: List[str] = field(default_factory=list)
    error: Optional[str] = None
    started_at: datetime = field(default_factory=_utcnow)
    finished_at: datetime = field(default_factory=_utcnow)

    def __post_init__(self) -> None:
        if self.status not in STATUSES:
            raise ValueError(f"status must be one of {STATUSES}")
        if isinstance(self.started_at, str):
            self.started_at = datetime.fromisoformat(self.started_at)
        if isinstance(self.finished_at, str):
            self.finished_at = datetime.fromisoformat(self.finished_at)

    @property
    def duration_seconds(self) -> float:
        return round((self.finished_at - self.started_at).total_seconds(), 3)

    @property
    def failed(self) -> bool:
        return self.status in {"ERROR", "MISCONFIGURED"}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ScenarioResult":
        payload = data.copy()
        payload.pop("duration_seconds", None)
        payload["resources"] = [ResourceHandle.from_dict(item) for item in payload.get("resources", [])]
        payload["started_at"] = _ensure_datetime(payload["started_at"])
        payload["finished_at"] = _ensure_datetime(payload["finished_at"])
        return cls(**payload)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "rule": self.rule,
            "title": self.title,
            "service": self.service,
            "status": self.status,
            "evidence": self.evidence,
            "resources": [handle.to_dict() for handle in self.resources],
            "cleanup_failures": list(self.cleanup_failures),
            "error": self.error,
            "started_at": self.started_at.isoformat(),
            "finished_at": self.finished_at.isoformat(),
            "duration_seconds": self.duration_seconds,
        }


@dataclass
class BatchSummary:
    NON_COMPLIANT: int = 0
    COMPLIANT: int = 0
    NOT_EVALUATED: int = 0
    ERROR: int = 0
    MISCONFIGURED: int = 0
    cleanup_failures: int = 0
    total: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class BatchResult:
    account_id: Optional[str]
    region: str
    started_at: datetime
    finished_at: datetime
    results: List[ScenarioResult]
    summary: BatchSummary = field(default_factory=BatchSummary)

    @property
    def failed(self) -> bool:
        return any(result.failed for result in self.results)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "account_id": self.account_id,
            "region": self.region,
            "started_at": self.started_at.isoformat(),
            "finished_at": self.finished_at.isoformat(),
            "results": [result.to_dict() for result in self.results],
            "summary": self.summary.to_dict(),
        }


@dataclass
class SweepResult:
    arn: str
    service: str
    resource_type: str
    resource_id: str
    mode: str
    deleted: bool
    message: str
    error: Optional[str] = None

    def __post_init__(self) -> None:
        if self.mode not in SWEEP_MODES:
            raise ValueError(f"mode must be one of {SWEEP_MODES}")

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
