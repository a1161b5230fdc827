"""
Circuit error types

- CircuitValidationError: rejected submission, carries every message
- ConflictError: unique field already taken
- NotFoundError: unknown tournament / stage / player id
- StorageError: the data store failed, wrapped with the attempted operation
"""
from typing import List, Optional


class CircuitError(Exception):
    """Base class for errors raised by the circuit service"""
    status_code = 500


class CircuitValidationError(CircuitError):
    status_code = 400

    def __init__(self, errors: List[str]):
        self.errors = list(errors)
        super().__init__(", ".join(self.errors))


class ConflictError(CircuitError):
    status_code = 400


class NotFoundError(CircuitError):
    status_code = 404

    def __init__(self, resource: str, identifier, message: Optional[str] = None):
        self.resource = resource
        self.identifier = identifier
        super().__init__(message or f"{resource} {identifier} not found")


class StorageError(CircuitError):
    status_code = 500

    def __init__(self, operation: str, cause: Optional[BaseException] = None):
        self.operation = operation
        self.cause = cause
        detail = f": {cause}" if cause else ""
        super().__init__(f"Storage operation failed ({operation}){detail}")
