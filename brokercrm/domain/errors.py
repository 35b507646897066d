"""Domain error hierarchy — mapped to HTTP status codes by the API layer."""


class CRMError(Exception):
    """Base class for expected business errors."""


class NotFoundError(CRMError):
    def __init__(self, entity: str, entity_id: object):
        super().__init__(f"{entity} not found: {entity_id}")
        self.entity = entity
        self.entity_id = entity_id


class ValidationError(CRMError):
    pass


class PermissionDeniedError(CRMError):
    pass
