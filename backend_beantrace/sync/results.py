"""
Run results returned by the orchestrator and the service entry points.

Status: failed when every account failed, partial when some account failed or
any record could not be persisted, success otherwise.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any


class RunStatus(str, Enum):
    SUCCESS = "success"
    PARTIAL = "partial"
    FAILED = "failed"


@dataclass
class AccountOutcome:
    """What one run did for one tracked account."""

    account: str
    processed: int = 0
    failed: int = 0
    pages: int = 0
    max_round: int | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def derive_status(outcomes: list[AccountOutcome]) -> RunStatus:
    if not outcomes:
        return RunStatus.SUCCESS
    failed_accounts = sum(1 for o in outcomes if not o.ok)
    if failed_accounts == len(outcomes):
        return RunStatus.FAILED
    if failed_accounts or any(o.failed for o in outcomes):
        return RunStatus.PARTIAL
    return RunStatus.SUCCESS


def _errors(outcomes: list[AccountOutcome]) -> dict[str, str]:
    return {o.account: o.error for o in outcomes if o.error is not None}


@dataclass
class SyncResult:
    status: RunStatus
    processed_count: int
    failed_count: int
    per_account_errors: dict[str, str] = field(default_factory=dict)
    accounts: list[AccountOutcome] = field(default_factory=list)

    @classmethod
    def from_outcomes(cls, outcomes: list[AccountOutcome]) -> "SyncResult":
        return cls(
            status=derive_status(outcomes),
            processed_count=sum(o.processed for o in outcomes),
            failed_count=sum(o.failed for o in outcomes),
            per_account_errors=_errors(outcomes),
            accounts=list(outcomes),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": self.status.value,
            "processed_count": self.processed_count,
            "failed_count": self.failed_count,
            "per_account_errors": dict(self.per_account_errors),
            "accounts": [asdict(o) for o in self.accounts],
        }


@dataclass
class BackfillResult:
    status: RunStatus
    total_records: int
    pages_processed: int
    failed_count: int
    per_account_errors: dict[str, str] = field(default_factory=dict)
    accounts: list[AccountOutcome] = field(default_factory=list)

    @classmethod
    def from_outcomes(cls, outcomes: list[AccountOutcome]) -> "BackfillResult":
        return cls(
            status=derive_status(outcomes),
            total_records=sum(o.processed for o in outcomes),
            pages_processed=sum(o.pages for o in outcomes),
            failed_count=sum(o.failed for o in outcomes),
            per_account_errors=_errors(outcomes),
            accounts=list(outcomes),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": self.status.value,
            "total_records": self.total_records,
            "pages_processed": self.pages_processed,
            "failed_count": self.failed_count,
            "per_account_errors": dict(self.per_account_errors),
            "accounts": [asdict(o) for o in self.accounts],
        }
