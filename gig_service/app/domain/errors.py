# app/domain/errors.py


class DomainError(Exception):
    """Base class for errors surfaced by interactors to their callers."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(DomainError):
    def __init__(self, entity: str, entity_id: str):
        super().__init__(f"{entity} {entity_id} not found")
        self.entity = entity
        self.entity_id = entity_id


class InvalidStateError(DomainError):
    pass


class PermissionDeniedError(DomainError):
    pass


class TransientIOError(DomainError):
    """The database or broker failed for infrastructure reasons; retrying is safe."""


class GigValidationError(DomainError):
    def __init__(self, errors: list[dict]):
        fields = ", ".join(".".join(str(p) for p in e.get("loc", ())) for e in errors)
        super().__init__(f"Invalid gig payload: {fields}")
        self.errors = errors
