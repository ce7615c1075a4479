"""
Base schema classes with common configuration.
"""

from pydantic import BaseModel, ConfigDict

__all__ = ["BaseSchema"]


class BaseSchema(BaseModel):
    """
    Base schema with common Pydantic configuration.

    ``from_attributes`` lets response schemas be built straight from ORM
    objects.
    """

    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True,
        use_enum_values=True,
        str_strip_whitespace=True,
    )
