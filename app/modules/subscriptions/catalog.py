"""
Plan catalog.

Reference data fixed at build time; subscriptions copy name and price when
they are created, so editing an entry never changes existing prices.
"""
from dataclasses import dataclass
from typing import Dict, List, Optional


@dataclass(frozen=True)
class PlanEntry:
    id: str
    name: str
    price_per_meal: int  # IDR
    description: str


PLANS: Dict[str, PlanEntry] = {
    plan.id: plan
    for plan in (
        PlanEntry(
            id="diet",
            name="Diet Plan",
            price_per_meal=30000,
            description="Calorie-controlled meals for healthy weight management",
        ),
        PlanEntry(
            id="protein",
            name="Protein Plan",
            price_per_meal=40000,
            description="High-protein meals for an active lifestyle",
        ),
        PlanEntry(
            id="royal",
            name="Royal Plan",
            price_per_meal=60000,
            description="Premium chef-crafted meals with gourmet ingredients",
        ),
    )
}


def get_plan(plan_id: Optional[str]) -> Optional[PlanEntry]:
    if not plan_id:
        return None
    return PLANS.get(plan_id)


def list_plans() -> List[PlanEntry]:
    return sorted(PLANS.values(), key=lambda plan: plan.price_per_meal)
