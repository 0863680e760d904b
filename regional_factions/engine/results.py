"""
Outcome of a ledger operation.
Edits against stale or missing data are tolerated: the ledger is left unchanged and the
outcome says why, instead of raising.
"""

from dataclasses import dataclass
from typing import Any

OK = "ok"
NOT_FOUND = "not_found"
ALREADY_EXISTS = "already_exists"
INVALID = "invalid"


@dataclass
class Outcome:
    """Result of a single operation."""
    ok: bool
    kind: str = OK
    detail: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"ok": self.ok, "kind": self.kind, "detail": self.detail}


def done() -> Outcome:
    return Outcome(True)


def not_found(detail: str) -> Outcome:
    return Outcome(False, NOT_FOUND, detail)


def already_exists(detail: str) -> Outcome:
    return Outcome(False, ALREADY_EXISTS, detail)


def invalid(detail: str) -> Outcome:
    return Outcome(False, INVALID, detail)
