"""
Domain exceptions shared by the store, the read service and the API layer.
"""


class SillyGeeksError(Exception):
    """Base class for all application errors."""


class NotFoundError(SillyGeeksError):
    """An id or slug did not resolve to a stored entity."""

    def __init__(self, entity: str, key: object) -> None:
        super().__init__(f"{entity} not found: {key}")
        self.entity = entity
        self.key = key


class InvalidQueryError(SillyGeeksError):
    """Caller supplied malformed input (e.g. an empty search query)."""


class DuplicateEntityError(SillyGeeksError):
    """A uniqueness constraint of the content store would be violated."""
