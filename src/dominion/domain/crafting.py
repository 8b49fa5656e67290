"""Tier-1 auto production and the crafting queue."""

from __future__ import annotations

import math

from dominion.domain.enums import Material, ResourceType, SectorType
from dominion.domain.errors import PreconditionError, ValidationError
from dominion.domain.models import CraftingQueueEntry, CraftOrderID, Empire, GameState
from dominion.domain.rules_config import DEFAULT_RULES, RulesConfig


def tier1_production(empire: Empire, *, rules: RulesConfig = DEFAULT_RULES) -> dict[Material, int]:
    """Materials derived from this turn's base output of each sector type."""

    crafting = rules.crafting
    yields = rules.economy.sector_yields
    produced: dict[Material, int] = {}

    def base_output(sector_type: SectorType, resource: ResourceType) -> int:
        per_sector = yields.get(sector_type, {}).get(resource, 0)
        return per_sector * empire.sectors_of_type(sector_type)

    ore = base_output(SectorType.ORE, ResourceType.ORE)
    if ore:
        produced[Material.REFINED_METALS] = math.floor(ore * crafting.refined_metals_ratio)
    fuel = base_output(SectorType.FUEL, ResourceType.FUEL)
    if fuel:
        produced[Material.FUEL_CELLS] = math.floor(fuel * crafting.fuel_cells_ratio)
    food = base_output(SectorType.FOOD, ResourceType.FOOD)
    if food:
        produced[Material.PROCESSED_FOOD] = math.floor(food * crafting.processed_food_ratio)

    urban = empire.sectors_of_type(SectorType.URBAN)
    if urban:
        produced[Material.LABOR_UNITS] = urban * crafting.labor_units_per_urban
    industrial = empire.sectors_of_type(SectorType.INDUSTRIAL)
    if industrial:
        efficiency = 1.0 + empire.research_level * crafting.industrial_research_bonus
        produced[Material.POLYMERS] = industrial * math.floor(
            crafting.polymers_per_industrial * efficiency
        )

    return {material: amount for material, amount in produced.items() if amount > 0}


def apply_tier1_production(
    empire: Empire, *, rules: RulesConfig = DEFAULT_RULES
) -> dict[Material, int]:
    produced = tier1_production(empire, rules=rules)
    for material, amount in produced.items():
        empire.materials[material] = empire.materials.get(material, 0) + amount
    return produced


def missing_materials(
    empire: Empire, material: Material, quantity: int, *, rules: RulesConfig = DEFAULT_RULES
) -> dict[Material, int]:
    recipe = rules.crafting.recipes.get(material, {})
    missing: dict[Material, int] = {}
    for ingredient, per_unit in recipe.items():
        needed = per_unit * quantity - empire.materials.get(ingredient, 0)
        if needed > 0:
            missing[ingredient] = needed
    return missing


def queue_craft(
    state: GameState,
    empire: Empire,
    material: Material | str,
    quantity: int,
    *,
    rules: RulesConfig = DEFAULT_RULES,
) -> CraftingQueueEntry:
    """Consume ingredients up front and enqueue a crafting order."""

    crafting = rules.crafting
    try:
        product = Material(material)
    except ValueError:
        raise ValidationError("invalid_material", f"unknown material: {material}") from None
    if product not in crafting.recipes:
        raise ValidationError("not_craftable", f"{product} has no recipe")
    if quantity <= 0:
        raise ValidationError("invalid_quantity", "quantity must be positive")
    if len(empire.crafting_queue) >= crafting.max_queue_size:
        raise PreconditionError(
            "queue_full", f"crafting queue full (max {crafting.max_queue_size})"
        )
    missing = missing_materials(empire, product, quantity, rules=rules)
    if missing:
        detail = ", ".join(f"{k.value}={v}" for k, v in sorted(missing.items()))
        raise PreconditionError("insufficient_materials", f"missing {detail}")

    for ingredient, per_unit in crafting.recipes[product].items():
        empire.materials[ingredient] -= per_unit * quantity
    entry = CraftingQueueEntry(
        id=CraftOrderID(state.next_id("craft_order")),
        material=product,
        quantity=quantity,
        turns_remaining=max(1, crafting.craft_turns.get(product, 1)),
    )
    empire.crafting_queue.append(entry)
    state.record("crafts")
    return entry


def advance_crafting_queue(empire: Empire) -> list[CraftingQueueEntry]:
    completed: list[CraftingQueueEntry] = []
    remaining: list[CraftingQueueEntry] = []
    for entry in empire.crafting_queue:
        entry.turns_remaining -= 1
        if entry.turns_remaining <= 0:
            entry.turns_remaining = 0
            empire.materials[entry.material] = (
                empire.materials.get(entry.material, 0) + entry.quantity
            )
            completed.append(entry)
        else:
            remaining.append(entry)
    empire.crafting_queue = remaining
    return completed
