"""
Pricing API - FastAPI router for dynamic prices and price freezes.
"""
from typing import Optional

from fastapi import APIRouter, Query
from pydantic import BaseModel

from ..engine.errors import InvalidArgument, NotFound
from ..engine.models import to_epoch_ms
from . import state

router = APIRouter(prefix="/api/pricing", tags=["pricing"])


class PricePointResponse(BaseModel):
    timestamp: int
    price: int


class PriceResponse(BaseModel):
    """Current price of a flight or hotel."""
    id: str
    currentPrice: int
    priceHistory: list[PricePointResponse]
    priceFreezeUntil: Optional[int] = None


class FreezeResponse(BaseModel):
    message: str


class CatalogEntryResponse(BaseModel):
    """Static factors and last observed price of an entity."""
    id: str
    basePrice: float
    demandFactor: float
    seasonalFactor: float
    customRulesFactor: float
    lastPrice: Optional[int]
    priceFreezeUntil: Optional[int] = None


def _catalog_kind(catalog: str) -> str:
    """Map the plural path segment ("flights") to a catalog kind ("flight")."""
    if not catalog.endswith('s'):
        raise NotFound(f"Unknown catalog '{catalog}'")
    return catalog[:-1]


@router.get("/{catalog}/catalog", response_model=list[CatalogEntryResponse])
async def list_catalog(catalog: str):
    """List every entity in a catalog without recording new prices."""
    points = state.pricing_engine.list_points(_catalog_kind(catalog))
    return [
        CatalogEntryResponse(
            id=p.id,
            basePrice=p.base_price,
            demandFactor=p.demand_factor,
            seasonalFactor=p.seasonal_factor,
            customRulesFactor=p.custom_rules_factor,
            lastPrice=p.last_price(),
            priceFreezeUntil=to_epoch_ms(p.price_freeze_until) if p.price_freeze_until else None,
        )
        for p in points
    ]


@router.get("/{catalog}", response_model=PriceResponse | FreezeResponse)
async def get_price(
    catalog: str,
    id: Optional[list[str]] = Query(None),
    freeze: Optional[str] = None,
):
    """Current price of an entity, or freeze it when ``freeze=true``."""
    kind = _catalog_kind(catalog)
    # Repeated ids are ambiguous
    if id is not None and len(id) != 1:
        raise InvalidArgument(f"Invalid or missing {kind} id")
    id = id[0] if id else None
    if freeze == 'true':
        return state.pricing_engine.freeze_price(kind, id)
    return state.pricing_engine.get_price(kind, id).to_dict()
