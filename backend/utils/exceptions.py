from typing import Dict, List, Optional


class FreightError(Exception):
    """Base exception for domain errors raised by the crud layer."""
    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)


class ValidationError(FreightError):
    """Malformed input. Carries a field -> messages map for the response body."""
    def __init__(self, message: str, field_errors: Optional[Dict[str, List[str]]] = None):
        super().__init__(message)
        self.field_errors = field_errors or {}

    @classmethod
    def for_field(cls, field: str, message: str) -> "ValidationError":
        return cls(message, {field: [message]})


class NotFoundError(FreightError):
    """A referenced invoice, truck hiring note, payment or customer does not exist."""
    def __init__(self, entity: str, entity_id):
        super().__init__(f"{entity} not found")
        self.entity = entity
        self.entity_id = entity_id
