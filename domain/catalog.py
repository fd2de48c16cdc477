"""
Domain: Product catalog.

Contract excerpts implemented here:
- Every product id resolves to exactly one CatalogEntry or is treated as unknown.
- Unknown products resolve to a zero-valued entry (no credits, no model slots,
  not consumable, tier 0, list price 0). Lookups never raise.
- Tiers are only comparable within one plan family (weekly plans and monthly
  plans are separate hierarchies).
- The catalog is immutable after construction and is shared process-wide.

This module contains only pure domain entities/value objects: no I/O besides the
optional JSON loader used once at startup.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional, Union

from pydantic import BaseModel, Field, StrictBool, StrictInt, StrictStr, TypeAdapter, field_validator


class PlanFamily(str, Enum):
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    CONSUMABLE = "consumable"


@dataclass(frozen=True, slots=True)
class CatalogEntry:
    """
    Entitlement definition for a single purchasable product.

    family is None only for the zero entry returned for unknown products.
    """

    product_id: str
    family: Optional[PlanFamily]
    tier: int
    list_price: Decimal
    base_credits: int
    model_slots: int
    is_consumable: bool = False

    def __post_init__(self) -> None:
        if self.tier < 0:
            raise ValueError("tier must be >= 0")
        if self.list_price < 0:
            raise ValueError("list_price must be >= 0")
        if self.base_credits < 0:
            raise ValueError("base_credits must be >= 0")
        if self.model_slots < 0:
            raise ValueError("model_slots must be >= 0")

    @staticmethod
    def unknown(product_id: Optional[str]) -> "CatalogEntry":
        """Zero-valued entry for a product id the catalog does not recognize."""

        return CatalogEntry(
            product_id=product_id or "",
            family=None,
            tier=0,
            list_price=Decimal("0"),
            base_credits=0,
            model_slots=0,
            is_consumable=False,
        )

    @property
    def is_known(self) -> bool:
        return self.family is not None


class Catalog:
    """
    Read-only mapping from product id to CatalogEntry.

    Build it once at startup; every request shares the same instance.
    """

    __slots__ = ("_entries",)

    def __init__(self, entries: Iterable[CatalogEntry]) -> None:
        by_product: Dict[str, CatalogEntry] = {}
        for entry in entries:
            if entry.product_id in by_product:
                raise ValueError(f"Duplicate catalog entry for product_id={entry.product_id!r}")
            if entry.family is None:
                raise ValueError(f"Catalog entry {entry.product_id!r} must declare a plan family")
            by_product[entry.product_id] = entry
        self._entries: Mapping[str, CatalogEntry] = MappingProxyType(by_product)

    @classmethod
    def from_entries(cls, *entries: CatalogEntry) -> "Catalog":
        return cls(entries)

    @classmethod
    def from_json(cls, path: Union[str, Path]) -> "Catalog":
        """
        Load a catalog from a JSON file holding a list of entry objects.

        Expected shape per entry:
            {"product_id": "...", "family": "weekly", "tier": 1,
             "list_price": "6.99", "base_credits": 20, "model_slots": 1,
             "is_consumable": false}

        Raises:
            ValueError: If the file is not a list, or a row has a missing or
                loosely typed field (e.g. "is_consumable": "false")
        """

        with open(path, encoding="utf-8") as fh:
            rows = json.load(fh)
        if not isinstance(rows, list):
            raise ValueError(f"Catalog file {path} must contain a JSON list of entries")
        # pydantic's ValidationError is a ValueError
        return cls(row.to_entry() for row in _CATALOG_ROWS.validate_python(rows))

    def lookup(self, product_id: Optional[str]) -> CatalogEntry:
        """Return the entry for product_id, or the zero entry when unrecognized."""

        if not product_id:
            return CatalogEntry.unknown(product_id)
        entry = self._entries.get(product_id)
        if entry is None:
            return CatalogEntry.unknown(product_id)
        return entry

    def __contains__(self, product_id: object) -> bool:
        return product_id in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[CatalogEntry]:
        return iter(self._entries.values())


class _CatalogRow(BaseModel):
    """One entry of a JSON catalog file. Counts and flags must be real JSON ints and booleans."""
    product_id: StrictStr = Field(..., min_length=1)
    family: PlanFamily
    tier: StrictInt = Field(0, ge=0)
    list_price: Decimal = Field(Decimal("0"), ge=0)
    base_credits: StrictInt = Field(..., ge=0)
    model_slots: StrictInt = Field(0, ge=0)
    is_consumable: StrictBool = False

    @field_validator("list_price", mode="before")
    @classmethod
    def _price_from_json_number(cls, value: Any) -> Any:
        if isinstance(value, bool):
            raise ValueError("list_price must be a number or a decimal string")
        if isinstance(value, float):
            return str(value)
        return value

    def to_entry(self) -> CatalogEntry:
        return CatalogEntry(
            product_id=self.product_id,
            family=self.family,
            tier=self.tier,
            list_price=self.list_price,
            base_credits=self.base_credits,
            model_slots=self.model_slots,
            is_consumable=self.is_consumable,
        )


_CATALOG_ROWS = TypeAdapter(List[_CatalogRow])


DEFAULT_CATALOG = Catalog.from_entries(
    CatalogEntry(
        product_id="subscribe.photos_ai_studio.1week_basic",
        family=PlanFamily.WEEKLY,
        tier=1,
        list_price=Decimal("6.99"),
        base_credits=20,
        model_slots=1,
    ),
    CatalogEntry(
        product_id="subscribe.photos_ai_studio.1week_starter",
        family=PlanFamily.WEEKLY,
        tier=2,
        list_price=Decimal("9.99"),
        base_credits=50,
        model_slots=1,
    ),
    CatalogEntry(
        product_id="subscribe.photos_ai_studio.1week_pro",
        family=PlanFamily.WEEKLY,
        tier=3,
        list_price=Decimal("17.99"),
        base_credits=100,
        model_slots=2,
    ),
    CatalogEntry(
        product_id="subscribe.photos_ai_studio.1week_premium",
        family=PlanFamily.WEEKLY,
        tier=4,
        list_price=Decimal("24.99"),
        base_credits=250,
        model_slots=3,
    ),
    # Credit packs carry no list price: their grant is never prorated.
    CatalogEntry(
        product_id="photosai.credits.100",
        family=PlanFamily.CONSUMABLE,
        tier=0,
        list_price=Decimal("0"),
        base_credits=100,
        model_slots=0,
        is_consumable=True,
    ),
)


def load_catalog(path: Optional[Union[str, Path]] = None) -> Catalog:
    """Return the catalog configured for this process (DEFAULT_CATALOG when no path)."""

    if path is None or str(path).strip() == "":
        return DEFAULT_CATALOG
    return Catalog.from_json(path)


__all__ = [
    "PlanFamily",
    "CatalogEntry",
    "Catalog",
    "DEFAULT_CATALOG",
    "load_catalog",
]
