"""Shop items and the cell effects they carry."""

from cellmaster.catalog.models import ShopItem
from cellmaster.effects import (
    AntiContamination,
    Antibiotics,
    QualityBonus,
    SpeedBoost,
)

SHOP_ITEMS: tuple[ShopItem, ...] = (
    # Media
    ShopItem("media_dmem", "DMEM medium", "medium", 18),
    ShopItem("media_rpmi", "RPMI-1640 medium", "medium", 20, unlock_level=6),
    ShopItem(
        "organoid_media", "Organoid medium kit", "medium", 60, unlock_level=19,
        effects=(SpeedBoost(1.08), AntiContamination(contamination_multiplier=0.90)),
    ),
    # Serum and matrix
    ShopItem("fbs", "Fetal bovine serum", "serum", 25, effects=(QualityBonus(1),)),
    ShopItem("matrigel", "Matrigel matrix", "serum", 55, unlock_level=19, effects=(QualityBonus(4),)),
    # Reagents
    ShopItem("pbs", "PBS buffer", "reagent", 10),
    ShopItem("trypsin", "Trypsin-EDTA", "reagent", 16),
    ShopItem("accutase", "Accutase", "reagent", 28, unlock_level=10),
    ShopItem("consumables", "Disposable consumables", "reagent", 12),
    # Risk control
    ShopItem("ps", "Penicillin/Streptomycin", "risk_control", 22, effects=(Antibiotics(),)),
    ShopItem(
        "antifungal", "Antifungal", "risk_control", 30, unlock_level=4,
        effects=(AntiContamination(quality_delta=-3, contamination_multiplier=0.65),),
    ),
    ShopItem("myco_test", "Mycoplasma test", "risk_control", 40, unlock_level=3),
    # Add-ons
    ShopItem(
        "gf_pack", "Growth factor pack", "addon", 35, unlock_level=10,
        effects=(SpeedBoost(1.05), QualityBonus(2)),
    ),
    ShopItem("hormone_pack", "Hormone supplement", "addon", 32, unlock_level=4, effects=(QualityBonus(2),)),
    ShopItem(
        "coating_pack", "Coating pack", "addon", 26, unlock_level=10,
        effects=(AntiContamination(contamination_multiplier=0.90), QualityBonus(2)),
    ),
    ShopItem(
        "suspension_kit", "Suspension culture kit", "addon", 24, unlock_level=6,
        effects=(AntiContamination(contamination_multiplier=0.95),),
    ),
    ShopItem("pma", "PMA differentiation reagent", "addon", 30, unlock_level=7),
    # Tools
    ShopItem("speed_boost", "Growth accelerator", "tools", 200, effects=(SpeedBoost(1.5),)),
    ShopItem("emergency_save", "Emergency rescue kit", "tools", 250),
    ShopItem("lab_lock", "Lab door lock", "tools", 150),
    ShopItem(
        "anti_contam_basic", "Basic anti-contamination agent", "tools", 100,
        effects=(AntiContamination(quality_delta=-3, contamination_multiplier=1.0),),
    ),
    ShopItem(
        "anti_contam_mid", "Mid anti-contamination agent", "tools", 200, unlock_level=3,
        effects=(AntiContamination(quality_delta=-2, contamination_multiplier=0.6),),
    ),
    ShopItem(
        "anti_contam_high", "Advanced anti-contamination agent", "tools", 300, unlock_level=5,
        effects=(AntiContamination(quality_delta=0, grants_immunity=True),),
    ),
)
