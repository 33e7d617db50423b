"""Record of the gateway operations applied during a sync."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

ResourceKind = Literal["api", "plugin", "consumer", "consumer_plugin"]
SyncAction = Literal["create", "update", "patch", "delete"]


class SyncOperation(BaseModel):
    """One applied gateway operation.

    Attributes:
        kind: Resource kind the operation touched.
        action: What was done to it.
        identity: Name or username of the resource.
        parent: Owning API name or consumer username for plugin operations.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    kind: ResourceKind
    action: SyncAction
    identity: str
    parent: str | None = None


class SyncReport(BaseModel):
    """Operations applied by a sync, in the order they were applied."""

    operations: list[SyncOperation] = Field(default_factory=list)

    def record(
        self,
        kind: ResourceKind,
        action: SyncAction,
        identity: str,
        parent: str | None = None,
    ) -> None:
        self.operations.append(
            SyncOperation(kind=kind, action=action, identity=identity, parent=parent)
        )

    def count(self, kind: ResourceKind | None = None, action: SyncAction | None = None) -> int:
        """Number of operations matching the given kind and action."""
        return sum(
            1
            for op in self.operations
            if (kind is None or op.kind == kind) and (action is None or op.action == action)
        )

    @property
    def total(self) -> int:
        return len(self.operations)
