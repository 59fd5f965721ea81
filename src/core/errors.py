"""
Typed errors raised by the approval engine.

Each error carries the HTTP status code the API boundary maps it to, so
routers never translate engine failures by hand.
"""


class ApprovalEngineError(Exception):
    """Base class for all approval engine errors."""

    status_code = 500
    kind = "approval_engine_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class UnknownProjectError(ApprovalEngineError):
    """The project is not registered (distinct from a project with no bands)."""

    status_code = 404
    kind = "unknown_project"

    def __init__(self, project_id: str):
        super().__init__(f"Unknown project: {project_id}")
        self.project_id = project_id


class NotFoundError(ApprovalEngineError):
    status_code = 404
    kind = "not_found"

    def __init__(self, entity: str, entity_id: str):
        super().__init__(f"{entity} not found: {entity_id}")
        self.entity = entity
        self.entity_id = entity_id


class ApprovalValidationError(ApprovalEngineError):
    status_code = 400
    kind = "validation_error"


class ConflictError(ApprovalEngineError):
    status_code = 409
    kind = "conflict"


class InvalidTransitionError(ConflictError):
    """Raised when a lifecycle transition is not allowed from the current status."""

    kind = "invalid_transition"

    def __init__(self, entity_type: str, entity_id: str, from_status: str | None, to_status: str):
        super().__init__(
            f"Cannot move {entity_type} {entity_id} from {from_status} to {to_status}"
        )
        self.entity_type = entity_type
        self.entity_id = entity_id
        self.from_status = from_status
        self.to_status = to_status
