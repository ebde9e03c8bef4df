"""Mini README: Read-only joins between lands, farmers, expenses and income."""

from .resolver import UNKNOWN_LAND_LABEL, RelationshipResolver, find_by_id

__all__ = ["UNKNOWN_LAND_LABEL", "RelationshipResolver", "find_by_id"]
