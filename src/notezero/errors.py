"""Error hierarchy for workspace operations.

- WorkspaceError: base for everything raised by the document core
- NotFound: a structural write addressed a page or block that does not exist
- CycleDetected: a reparent would make a page its own ancestor
- InvalidTransition: a lifecycle action is not allowed from the current state
- PersistenceFailure: a gateway call failed after retries; local state is kept
- InvalidPropertyValue: a database value does not match its column

Structural errors are raised before any local mutation is applied.
PersistenceFailure is raised later, from the persistence pipeline.
"""


class WorkspaceError(Exception):
    """Base exception for workspace/document operations."""


class NotFound(WorkspaceError):
    """Referenced page or block id is absent (or permanently deleted)."""

    def __init__(self, kind: str, entity_id: str | None) -> None:
        super().__init__(f"{kind} not found: {entity_id}")
        self.kind = kind
        self.entity_id = entity_id


class CycleDetected(WorkspaceError):
    """Reparenting ``page_id`` under ``parent_id`` would create a cycle."""

    def __init__(self, page_id: str, parent_id: str) -> None:
        super().__init__(f"Moving page {page_id} under {parent_id} would create a cycle")
        self.page_id = page_id
        self.parent_id = parent_id


class InvalidTransition(WorkspaceError):
    """Lifecycle action not permitted from the page's current state."""

    def __init__(self, page_id: str, state: str, action: str) -> None:
        super().__init__(f"Cannot {action} page {page_id} in state {state}")
        self.page_id = page_id
        self.state = state
        self.action = action


class PersistenceFailure(WorkspaceError):
    """A persistence call failed after exhausting retries or timing out."""

    def __init__(self, operation: str, entity_id: str | None, cause: BaseException | None = None) -> None:
        detail = f": {cause!r}" if cause is not None else ""
        super().__init__(f"Persistence of {operation} for {entity_id} failed{detail}")
        self.operation = operation
        self.entity_id = entity_id
        self.cause = cause


class InvalidPropertyValue(WorkspaceError):
    """A database value does not fit its column's kind or options."""

    def __init__(self, property_id: str, reason: str) -> None:
        super().__init__(f"Invalid value for property {property_id}: {reason}")
        self.property_id = property_id
        self.reason = reason
