"""Error taxonomy shared by the storage layer, services and routes."""


class RegistryError(Exception):
    """Base exception for person registry errors."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class StorageFailure(RegistryError):
    """Connection loss, constraint violation or timeout in the store.

    Raised after the surrounding transaction has been rolled back.
    """

    status_code = 500


class ValidationFailure(RegistryError):
    """Malformed or internally inconsistent input."""

    status_code = 422


class NotFound(RegistryError):
    """The operation targets an identity that does not exist."""

    status_code = 404

    def __init__(self, message: str, person_id: int | None = None):
        super().__init__(message)
        self.person_id = person_id
