"""ORM model registry — importing this package registers every mapper
class with Base.metadata before create_schema() runs."""

from marketstore.infrastructure.persistence.models.documents import Document

__all__ = ["Document"]
