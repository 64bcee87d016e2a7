from .base import Repository
from .filters import AnyContains, Clause, Contains, Eq, FilterSet, apply_filters

__all__ = ["Repository", "Clause", "Eq", "Contains", "AnyContains", "FilterSet", "apply_filters"]
