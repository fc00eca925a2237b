class LayoutError(Exception):
    pass


class UnknownEntityError(LayoutError, KeyError):
    """Raised when an entity id is not present in the store."""

    def __init__(self, entity_id: str):
        super().__init__(entity_id)
        self.entity_id = entity_id

    def __str__(self) -> str:
        return f'unknown entity "{self.entity_id}"'


class DuplicateEntityError(LayoutError):
    pass


class LayoutFormatError(LayoutError):
    pass
