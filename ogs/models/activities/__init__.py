from ogs.models.activities.activity import Activity

__all__ = ["Activity"]
