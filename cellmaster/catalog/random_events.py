"""Random event definitions, rolled in this order every check interval."""

from cellmaster.catalog.models import RandomEventDefinition as Event
from cellmaster.effects import (
    ContaminationShift,
    DeadlineShift,
    EfficiencyBoost,
    GoldBonus,
    GoldenBoost,
    LoseItems,
    Mutation,
    PauseGrowth,
    QualityDrop,
    RareItem,
)

RANDOM_EVENTS: tuple[Event, ...] = (
    # Negative
    Event("power_outage", "Power outage", "negative", 0.005, PauseGrowth(), duration=30),
    Event("contamination_outbreak", "Contamination outbreak", "negative", 0.003,
          ContaminationShift(2.0), duration=60),
    Event("equipment_failure", "Equipment failure", "negative", 0.008, QualityDrop(-10)),
    Event("reagent_expired", "Reagents expired", "negative", 0.01, LoseItems(("consumables",))),
    Event("mentor_pressure", "PI wants results", "negative", 0.015, DeadlineShift(0.8)),
    # Positive
    Event("lucky_day", "Lucky day", "positive", 0.015, GoldenBoost(2.0), duration=120),
    Event("lab_inspection", "PI in a good mood", "positive", 0.01, GoldBonus(500)),
    Event("equipment_upgrade", "Equipment upgrade", "positive", 0.008, EfficiencyBoost(1.1), duration=180),
    Event("clean_day", "Lab deep clean", "positive", 0.012, ContaminationShift(0.7), duration=120),
    # Special
    Event("cell_mutation", "Spontaneous mutation", "special", 0.002, Mutation(-15, 20)),
    Event("mysterious_visitor", "Mysterious visitor", "special", 0.001, RareItem()),
)
