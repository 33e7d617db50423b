"""Reconciliation errors."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from kong_adapter.models.report import ResourceKind, SyncReport


class SyncError(Exception):
    """Base exception for reconciliation failures."""


class DuplicateIdentityError(SyncError):
    """A fetched collection holds two elements with the same identity.

    Matching is by exact name/username, so a duplicate would make the
    classification depend on list order. The cycle is refused instead.

    Attributes:
        kind: Resource kind of the collection.
        identity: The duplicated name or username.
        side: "desired" or "actual".
    """

    def __init__(self, kind: str, identity: str, side: str) -> None:
        super().__init__(f"duplicate {kind} '{identity}' in {side} state")
        self.kind = kind
        self.identity = identity
        self.side = side


class SyncAbortedError(SyncError):
    """An apply step failed and the rest of the cycle was abandoned.

    Operations applied before the failure stay in effect; ``report`` lists
    them. The gateway error is chained as ``__cause__``.

    Attributes:
        stage: Apply stage that failed ("add", "update", "patch", "delete").
        kind: Resource kind being applied.
        identity: Name or username of the resource.
        report: Operations applied before the failure.
    """

    def __init__(
        self,
        stage: str,
        kind: ResourceKind,
        identity: str,
        report: SyncReport,
        reason: str,
    ) -> None:
        super().__init__(f"{stage} of {kind} '{identity}' failed: {reason}")
        self.stage = stage
        self.kind = kind
        self.identity = identity
        self.report = report
