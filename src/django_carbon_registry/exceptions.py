"""Custom exceptions for django-carbon-registry.

Every service raises one of these; the API layer maps them to HTTP
status codes via ``status_code``.
"""


class RegistryError(Exception):
    """Base exception for registry errors."""

    status_code = 400


class ValidationError(RegistryError):
    """Raised when input is malformed or missing."""

    def __init__(self, fields: dict, message: str = "Validation failed"):
        self.fields = fields
        self.message = message
        super().__init__(message)


class NotFound(RegistryError):
    """Raised when a referenced entity does not exist."""

    status_code = 404

    def __init__(self, entity_type: str, key):
        self.entity_type = entity_type
        self.key = key
        super().__init__(f"{entity_type.capitalize()} '{key}' not found")


class InvalidState(RegistryError):
    """Raised when an operation is not legal from the entity's current state."""

    def __init__(self, entity_type: str, current_state: str, reason: str = None):
        self.entity_type = entity_type
        self.current_state = current_state
        self.reason = reason or f"{entity_type.capitalize()} is '{current_state}'"
        super().__init__(self.reason)


class PreconditionFailed(RegistryError):
    """Raised when a precondition on related entities does not hold."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(reason)


class InvalidTransition(RegistryError):
    """Raised when attempting an invalid state transition."""

    def __init__(self, from_state: str, to_state: str, reason: str = None):
        self.from_state = from_state
        self.to_state = to_state
        self.reason = reason or f"Cannot transition from '{from_state}' to '{to_state}'"
        super().__init__(self.reason)


class ConcurrentModification(RegistryError):
    """Raised when a write targets a stale version of an entity."""

    status_code = 409

    def __init__(self, entity_type: str, key, expected: int, actual: int):
        self.entity_type = entity_type
        self.key = key
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"{entity_type.capitalize()} '{key}' was modified concurrently "
            f"(expected version {expected}, found {actual})"
        )
