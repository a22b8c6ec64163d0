"""
Exceptions raised by the identity and store collaborators.
"""


class AddressFixError(Exception):
    """Base class for service errors."""


class AuthError(AddressFixError):
    """Sign-in with the identity provider failed."""


class StoreError(AddressFixError):
    """A document store operation failed."""


class RecordNotFoundError(StoreError):
    def __init__(self, record_id: str):
        super().__init__(f"Verification record not found: {record_id}")
        self.record_id = record_id
