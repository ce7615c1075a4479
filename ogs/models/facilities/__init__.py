from ogs.models.facilities.room import Room

__all__ = ["Room"]
