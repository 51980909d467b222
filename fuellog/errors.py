"""Exceptions raised by the fuel log core and its collaborators."""

from typing import Optional


class FuelLogError(Exception):
    """Base exception for the fuel log."""

    pass


class ValidationError(FuelLogError):
    """Input to a create/edit operation is malformed. Nothing was changed."""

    pass


class NotFound(FuelLogError):
    """An operation addressed an id that is not in the current snapshot."""

    def __init__(self, kind: str, item_id: str):
        self.kind = kind
        self.item_id = item_id
        super().__init__(f"{kind} '{item_id}' not found")


class CollaboratorUnavailable(FuelLogError):
    """An external collaborator failed or is not configured."""

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.cause = cause


class StoreUnavailable(CollaboratorUnavailable):
    """The logbook store could not be read or written."""

    pass
