from __future__ import annotations

from typing import Mapping

from domain.schemas import CategoriesData


class CategoryMap:
    """Translates raw transaction categories into canonical budget category names."""

    def __init__(self, mappings: Mapping[str, str] | None = None):
        self._mappings: dict[str, str] = dict(mappings or {})

    @classmethod
    def from_categories(cls, categories: CategoriesData) -> "CategoryMap":
        return cls(categories.category_mappings)

    def resolve(self, raw_category: str) -> str:
        return self._mappings.get(raw_category) or raw_category
