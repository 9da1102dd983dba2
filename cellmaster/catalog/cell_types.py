"""Cell line definitions."""

from cellmaster.catalog.models import CellType

WILDCARD_CELL_TYPE = "golden_stock"

CELL_TYPES: tuple[CellType, ...] = (
    # T1 everyday lines
    CellType(
        id="hek293t", name="HEK293T", tier="T1",
        base_growth_time=30, base_value=80, exp_reward=8, unlock_level=1,
        contamination_base=0.012, quality_drift=0.5,
    ),
    CellType(
        id="hela", name="HeLa", tier="T1",
        base_growth_time=25, base_value=90, exp_reward=9, unlock_level=1,
        contamination_base=0.012, quality_drift=1.5,  # Harsh overgrowth penalty
    ),
    CellType(
        id="a549", name="A549", tier="T1",
        base_growth_time=35, base_value=85, exp_reward=8, unlock_level=2,
        contamination_base=0.010, quality_drift=0.3,
    ),
    # T2 lines needing dedicated supplies
    CellType(
        id="mcf7", name="MCF-7", tier="T2",
        base_growth_time=40, base_value=150, exp_reward=15, unlock_level=4,
        contamination_base=0.015, quality_drift=0.6,
        required_addons=("hormone_pack",), optional_addons=("hormone_pack",),
    ),
    CellType(
        id="raw264", name="RAW264.7", tier="T2",
        base_growth_time=35, base_value=130, exp_reward=13, unlock_level=5,
        contamination_base=0.014, quality_drift=0.8,
    ),
    CellType(
        id="thp1", name="THP-1", tier="T2",
        base_growth_time=45, base_value=200, exp_reward=20, unlock_level=6,
        contamination_base=0.018, quality_drift=0.7,
        medium="media_rpmi",
        required_addons=("suspension_kit",), optional_addons=("suspension_kit", "pma"),
    ),
    CellType(
        id="jurkat", name="Jurkat", tier="T2",
        base_growth_time=30, base_value=180, exp_reward=18, unlock_level=7,
        contamination_base=0.022, quality_drift=1.0,
        medium="media_rpmi",
        required_addons=("suspension_kit",), optional_addons=("suspension_kit",),
    ),
    # T3 delicate high-value lines
    CellType(
        id="huvec", name="HUVEC", tier="T3",
        base_growth_time=60, base_value=400, exp_reward=40, unlock_level=10,
        contamination_base=0.020, quality_drift=1.2,
        required_addons=("gf_pack", "coating_pack"),
        optional_addons=("gf_pack", "coating_pack", "accutase"),
    ),
    CellType(
        id="primary_fib", name="Primary fibroblasts", tier="T3",
        base_growth_time=80, base_value=500, exp_reward=50, unlock_level=13,
        contamination_base=0.016, quality_drift=0.4,
        required_addons=("coating_pack",), optional_addons=("coating_pack", "accutase"),
    ),
    # T4 3D culture
    CellType(
        id="organoid", name="Intestinal organoid", tier="T4",
        base_growth_time=120, base_value=2000, exp_reward=200, unlock_level=19,
        contamination_base=0.025, quality_drift=0.8,
        medium="organoid_media", serum="matrigel",
        required_addons=("matrigel", "gf_pack"), optional_addons=("gf_pack", "accutase"),
        harvest_yield=2,
    ),
    # Reward-only wildcard
    CellType(
        id=WILDCARD_CELL_TYPE, name="Golden stock", tier="special",
        base_growth_time=0, base_value=500, exp_reward=0, unlock_level=1,
        contamination_base=0.0, quality_drift=0.0,
        cultivable=False, satisfies_any_requirement=True, implied_quality=100,
    ),
)
