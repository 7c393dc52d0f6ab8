"""DTOs for reorganization plans (dry-run output and committed-run record)."""

from __future__ import annotations

from dataclasses import dataclass, field

from reorg.domain.enums import PlanAction


@dataclass(frozen=True)
class MergeOperation:
    """Scope of one user merge; lives only for a single run.

    tenant_id is None for a merge inside the flat users collection.
    """

    source_user_id: str
    target_user_id: str
    tenant_id: str | None = None
    dry_run: bool = False
    delete_source: bool = True

    def __post_init__(self) -> None:
        if not self.source_user_id or not self.target_user_id:
            raise ValueError("source_user_id and target_user_id are required")
        if self.source_user_id == self.target_user_id:
            raise ValueError("source and target user must differ")


@dataclass(frozen=True)
class CollectionCount:
    """Documents found (and copied or deleted unless dry run) in one nested collection."""

    name: str
    count: int


@dataclass(frozen=True)
class PlannedAction:
    """A single store effect: path, action, number of documents, affected fields."""

    action: PlanAction
    path: str
    count: int = 1
    fields: tuple[str, ...] = ()

    def describe(self) -> str:
        text = f"{self.action.value} {self.path}"
        if self.action in (PlanAction.COPY_COLLECTION, PlanAction.DELETE_COLLECTION):
            text += f" ({self.count} docs)"
        if self.fields:
            text += f" fields={list(self.fields)}"
        return text


@dataclass(kw_only=True)
class ReorgPlan:
    """Ordered record of what a run would do (dry run) or did (committed).

    A dry-run plan is produced without any store mutation.
    """

    operation: str
    dry_run: bool
    tenant_id: str | None = None
    actions: list[PlannedAction] = field(default_factory=list)
    # Documents found per source collection (migration summary)
    counts: dict[str, int] = field(default_factory=dict)

    def add(
        self,
        action: PlanAction,
        path: str,
        count: int = 1,
        fields: tuple[str, ...] | list[str] = (),
    ) -> PlannedAction:
        planned = PlannedAction(action=action, path=path, count=count, fields=tuple(fields))
        self.actions.append(planned)
        return planned

    def extend(self, other: ReorgPlan) -> None:
        self.actions.extend(other.actions)

    def count_for(self, *actions: PlanAction) -> int:
        """Sum document counts over the given action kinds."""
        return sum(a.count for a in self.actions if a.action in actions)

    @property
    def documents_written(self) -> int:
        return self.count_for(
            PlanAction.MERGE_DOCUMENT,
            PlanAction.COPY_COLLECTION,
            PlanAction.WRITE_LOOKUP,
        )

    @property
    def documents_deleted(self) -> int:
        return self.count_for(
            PlanAction.DELETE_COLLECTION,
            PlanAction.DELETE_DOCUMENT,
            PlanAction.DELETE_LOOKUP,
        )
