from __future__ import annotations

from types import MappingProxyType
from typing import Mapping

from taskdeck.models.enums import Plan

# lowest to highest
PLAN_ORDER: tuple[Plan, ...] = (Plan.free, Plan.pro, Plan.enterprise)

PLAN_CATALOG: Mapping[Plan, Mapping[str, object]] = MappingProxyType(
    {
        Plan.free: MappingProxyType(
            {
                "name": "Free",
                "price": 0,
                "features": ("Basic task management", "Up to 10 tasks", "Email support"),
            }
        ),
        Plan.pro: MappingProxyType(
            {
                "name": "Pro",
                "price": 9.99,
                "priceId": "price_pro_monthly",
                "features": ("Unlimited tasks", "AI suggestions", "Priority support", "Analytics"),
            }
        ),
        Plan.enterprise: MappingProxyType(
            {
                "name": "Enterprise",
                "price": 29.99,
                "priceId": "price_enterprise_monthly",
                "features": (
                    "Everything in Pro",
                    "Team collaboration",
                    "Advanced analytics",
                    "Custom integrations",
                ),
            }
        ),
    }
)

def plan_level(plan: Plan | str) -> int:
    return PLAN_ORDER.index(Plan(plan))

def plan_allows(current: Plan | str, required: Plan | str) -> bool:
    return plan_level(current) >= plan_level(required)

def plan_details(plan: Plan | str) -> dict:
    entry = PLAN_CATALOG[Plan(plan)]
    return {k: list(v) if isinstance(v, tuple) else v for k, v in entry.items()}

def catalog_as_dict() -> dict[str, dict]:
    return {p.value: plan_details(p) for p in PLAN_ORDER}

def plan_for_price(price_id: str | None) -> Plan | None:
    if not price_id:
        return None
    for plan, entry in PLAN_CATALOG.items():
        if entry.get("priceId") == price_id:
            return plan
    return None
