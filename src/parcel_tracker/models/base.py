"""
Base model class for all database models.

Provides common functionality for all models:
- Integer primary key
- Utility methods (to_dict, __repr__)
- SQLAlchemy declarative base
"""

import enum
from typing import Any, Dict

from sqlalchemy import Column, Integer
from sqlalchemy.orm import declarative_base

from ..utils.datetime_utils import to_iso

# Create the declarative base for all models
Base = declarative_base()

# Columns holding Unix seconds; to_dict() adds an ISO rendering for each
TIMESTAMP_COLUMNS = ("created_at", "updated_at", "time", "emitted_at", "deployed_at", "granted_at")


class BaseModel(Base):
    """
    Abstract base model with common fields and methods.

    All models should inherit from this class to get:
    - id: Primary key (Integer)
    - to_dict(): Convert model to dictionary
    """

    __abstract__ = True

    id = Column(Integer, primary_key=True, autoincrement=True)

    def to_dict(self, include_relationships: bool = False) -> Dict[str, Any]:
        """
        Convert model instance to dictionary.

        Enum values are rendered by value. Integer timestamps are kept as-is
        and mirrored into an "<name>_iso" key.

        Args:
            include_relationships: If True, include related objects (default: False)

        Returns:
            Dictionary representation of the model
        """
        result = {}

        for column in self.__table__.columns:
            value = getattr(self, column.name)

            if isinstance(value, enum.Enum):
                value = value.value

            result[column.name] = value

            if column.name in TIMESTAMP_COLUMNS:
                result[f"{column.name}_iso"] = to_iso(value)

        if include_relationships:
            for relationship in self.__mapper__.relationships:
                rel_name = relationship.key
                rel_value = getattr(self, rel_name)

                if rel_value is None:
                    result[rel_name] = None
                elif isinstance(rel_value, list):
                    result[rel_name] = [item.to_dict() for item in rel_value]
                else:
                    result[rel_name] = rel_value.to_dict()

        return result

    def __repr__(self) -> str:
        """
        String representation of model instance.

        Returns:
            String like "ClassName(id=1)"
        """
        class_name = self.__class__.__name__
        if getattr(self, "id", None) is not None:
            return f"{class_name}(id={self.id})"
        return f"{class_name}()"
