from .models import UnitConstraint, UnitRecord
from .source import DataUnavailable, JsonCatalogSource

__all__ = ["DataUnavailable", "JsonCatalogSource", "UnitConstraint", "UnitRecord"]
