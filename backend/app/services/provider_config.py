"""Load a movers business's pricing configuration.

The stored row is loosely typed JSON edited from the provider settings page;
this module turns it into the typed knobs the quote calculator expects and
keeps a short-lived copy in the query cache.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field
from typing import Any, List, Optional

from sqlalchemy.orm import Session

from ..core.config import settings
from ..models import MoversProviderConfig
from ..utils.redis_cache import QueryCache, provider_config_key
from .movers_quote import (
    PackingConfig,
    PackingMaterial,
    ProviderTier,
    QuoteOverrides,
    StairsPolicy,
    pick_tier,
    tiers_from_rows,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProviderPolicies:
    base_zip: Optional[str] = None
    service_radius_miles: Optional[float] = None
    min_lead_minutes: Optional[int] = None
    destination_fee_per_mile_cents: Optional[int] = None
    max_travel_distance_miles: Optional[float] = None


@dataclass(frozen=True)
class ProviderConfig:
    policies: ProviderPolicies = field(default_factory=ProviderPolicies)
    tiers: List[ProviderTier] = field(default_factory=list)
    heavy_item_tiers: List[dict] = field(default_factory=list)
    packing: PackingConfig = field(default_factory=PackingConfig)
    stairs: StairsPolicy = field(default_factory=StairsPolicy)


def _int_or_none(value: Any) -> Optional[int]:
    try:
        return int(value) if value is not None else None
    except (TypeError, ValueError):
        return None


def _float_or_none(value: Any) -> Optional[float]:
    try:
        return float(value) if value is not None else None
    except (TypeError, ValueError):
        return None


def _packing_from(raw: Any) -> PackingConfig:
    raw = raw if isinstance(raw, dict) else {}
    materials = raw.get("materials") if isinstance(raw.get("materials"), list) else []
    return PackingConfig(
        enabled=bool(raw.get("enabled")),
        per_room_cents=_int_or_none(raw.get("per_room_cents")) or 0,
        materials_included=bool(raw.get("materials_included")),
        materials=tuple(
            PackingMaterial(
                name=str(m.get("name") or ""),
                price_cents=_int_or_none(m.get("price_cents")) or 0,
                included=bool(m.get("included")),
            )
            for m in materials
            if isinstance(m, dict)
        ),
    )


def _stairs_from(raw: Any) -> StairsPolicy:
    # Providers that never configured stairs have them included at no charge.
    if not isinstance(raw, dict):
        return StairsPolicy(included=True, per_flight_cents=0)
    return StairsPolicy(
        included=bool(raw.get("included")),
        per_flight_cents=_int_or_none(raw.get("per_flight_cents")) or 0,
    )


def config_from_row(row: MoversProviderConfig) -> ProviderConfig:
    policies = row.policies if isinstance(row.policies, dict) else {}
    return ProviderConfig(
        policies=ProviderPolicies(
            base_zip=policies.get("base_zip") or None,
            service_radius_miles=_float_or_none(policies.get("service_radius_miles")),
            min_lead_minutes=_int_or_none(policies.get("min_lead_minutes")),
            destination_fee_per_mile_cents=_int_or_none(policies.get("destination_fee_per_mile_cents")),
            max_travel_distance_miles=_float_or_none(policies.get("max_travel_distance_miles")),
        ),
        tiers=tiers_from_rows(row.tiers),
        heavy_item_tiers=[t for t in (row.heavy_item_tiers or []) if isinstance(t, dict)],
        packing=_packing_from(row.packing),
        stairs=_stairs_from(policies.get("stairs")),
    )


def config_from_dict(data: dict) -> ProviderConfig:
    """Rebuild a :class:`ProviderConfig` from its cached ``asdict`` form."""
    packing = data.get("packing") or {}
    return ProviderConfig(
        policies=ProviderPolicies(**(data.get("policies") or {})),
        tiers=[ProviderTier(**t) for t in data.get("tiers") or []],
        heavy_item_tiers=list(data.get("heavy_item_tiers") or []),
        packing=PackingConfig(
            enabled=bool(packing.get("enabled")),
            per_room_cents=packing.get("per_room_cents") or 0,
            materials_included=bool(packing.get("materials_included")),
            materials=tuple(PackingMaterial(**m) for m in packing.get("materials") or []),
        ),
        stairs=StairsPolicy(**(data.get("stairs") or {})),
    )


def load_provider_config(
    db: Session, business_id: int, cache: Optional[QueryCache] = None
) -> Optional[ProviderConfig]:
    """Return the provider's config, or ``None`` when it has not set one up."""
    key = provider_config_key(business_id)
    if cache is not None:
        cached = cache.get(key)
        if cached is not None:
            return config_from_dict(cached)

    row = (
        db.query(MoversProviderConfig)
        .filter(MoversProviderConfig.business_id == business_id)
        .first()
    )
    if row is None:
        logger.info("No movers pricing config for business %s", business_id)
        return None

    config = config_from_row(row)
    if cache is not None:
        cache.set(key, asdict(config))
    return config


def overrides_from_config(config: Optional[ProviderConfig], crew_size: int) -> QuoteOverrides:
    """Translate a provider config into calculator overrides for ``crew_size``."""
    if config is None:
        return QuoteOverrides(base_zip=settings.DEFAULT_BASE_ZIP)
    tier = pick_tier(config.tiers, crew_size)
    return QuoteOverrides(
        per_mile=(tier.per_mile_cents / 100) if tier and tier.per_mile_cents else None,
        min_hours=tier.min_hours if tier else None,
        stairs=config.stairs,
        base_zip=config.policies.base_zip or settings.DEFAULT_BASE_ZIP,
        destination_fee_per_mile_cents=config.policies.destination_fee_per_mile_cents,
        packing=config.packing,
    )
