"""Contract modifiers and templates."""

from cellmaster.catalog.models import RequirementTemplate as Req
from cellmaster.catalog.models import TaskModifier, TaskTemplate

TASK_MODIFIERS: tuple[TaskModifier, ...] = (
    TaskModifier("urgent", "Urgent", deadline_multiplier=0.7, reward_multiplier=1.25, penalty_multiplier=1.5),
    TaskModifier("clean", "Antibiotic-free client", quality_bonus=10, reward_multiplier=1.35,
                 constraints=("no_antibiotics",)),
    TaskModifier("budget", "Tight budget", quality_bonus=-8, reward_multiplier=0.85),
    TaskModifier("sensitive", "Sensitive line", reward_multiplier=1.10, penalty_multiplier=2.0),
    TaskModifier("qc_only", "QC mandatory", reward_multiplier=1.20, constraints=("require_myco_test",)),
)

TASK_TEMPLATES: tuple[TaskTemplate, ...] = (
    # HEK293T
    TaskTemplate("hek293t_standard", "Standard expansion", "T1", "expand", 120, 12, (360, 600),
                 cell_type="hek293t", units_range=(1, 2), quality_range=(55, 65)),
    TaskTemplate("hek293t_chain", "Repeat client batch supply", "T1", "chain", 100, 10, (300, 480),
                 unlock_level=2, cell_type="hek293t", units_range=(1, 1), quality_range=(50, 60),
                 chain_count=3, chain_bonus_items={"consumables": 3}),
    TaskTemplate("hek293t_clean", "Small antibiotic-free order", "T1", "expand", 150, 15, (420, 600),
                 unlock_level=2, cell_type="hek293t", units_range=(1, 1), quality_range=(63, 73),
                 modifiers=("clean",)),
    # HeLa
    TaskTemplate("hela_fast", "Rush order", "T1", "expand", 140, 14, (300, 480),
                 cell_type="hela", units_range=(1, 2), quality_range=(55, 65), modifiers=("urgent",)),
    TaskTemplate("hela_overgrow", "Overgrowth-risk order", "T1", "maintain", 160, 16, (240, 360),
                 unlock_level=2, cell_type="hela", units_range=(1, 1), quality_range=(60, 70),
                 constraints=("harvest_on_time",)),
    TaskTemplate("hela_qc", "QC trial run", "T1", "expand", 180, 25, (420, 600),
                 unlock_level=3, cell_type="hela", units_range=(1, 1), quality_range=(55, 65),
                 modifiers=("qc_only",)),
    # A549
    TaskTemplate("a549_stable", "Steady supply", "T1", "expand", 200, 20, (480, 720),
                 unlock_level=2, cell_type="a549", units_range=(2, 3), quality_range=(55, 65)),
    TaskTemplate("a549_clean", "Antibiotic-free standard order", "T1", "expand", 220, 22, (420, 600),
                 unlock_level=3, cell_type="a549", units_range=(1, 2), quality_range=(70, 80),
                 modifiers=("clean",)),
    TaskTemplate("a549_freeze", "Frozen backup order", "T1", "freeze", 150, 30, (480, 720),
                 unlock_level=3, cell_type="a549", units_range=(1, 1), quality_range=(60, 70)),
    # MCF-7
    TaskTemplate("mcf7_hormone", "Hormone-dependent order", "T2", "expand", 280, 28, (540, 720),
                 unlock_level=4, cell_type="mcf7", units_range=(1, 2), quality_range=(60, 70),
                 constraints=("require_hormone_pack",)),
    TaskTemplate("mcf7_clean", "Antibiotic-free mid-tier order", "T2", "expand", 350, 35, (600, 840),
                 unlock_level=5, cell_type="mcf7", units_range=(1, 1), quality_range=(75, 85),
                 modifiers=("clean",)),
    TaskTemplate("mcf7_maintain", "Long-term maintenance", "T2", "maintain", 400, 40, (720, 1080),
                 unlock_level=5, cell_type="mcf7", units_range=(1, 1), quality_range=(65, 75),
                 constraints=("min_media_changes:2",)),
    # THP-1
    TaskTemplate("thp1_suspension", "Suspension expansion", "T2", "expand", 350, 35, (600, 840),
                 unlock_level=6, cell_type="thp1", units_range=(1, 2), quality_range=(60, 70),
                 constraints=("require_suspension_kit",)),
    TaskTemplate("thp1_urgent", "Urgent immunology order", "T2", "expand", 450, 45, (420, 540),
                 unlock_level=7, cell_type="thp1", units_range=(1, 2), quality_range=(55, 65),
                 modifiers=("urgent", "sensitive")),
    TaskTemplate("thp1_differentiate", "Differentiation order", "T2", "differentiate", 600, 60, (720, 960),
                 unlock_level=8, cell_type="thp1", units_range=(1, 2), quality_range=(70, 80),
                 constraints=("require_pma",)),
    # Jurkat
    TaskTemplate("jurkat_fast", "Fast expansion", "T2", "expand", 320, 32, (360, 480),
                 unlock_level=7, cell_type="jurkat", units_range=(1, 2), quality_range=(55, 65),
                 modifiers=("urgent",)),
    TaskTemplate("jurkat_clean", "Antibiotic-free order", "T2", "expand", 420, 42, (480, 660),
                 unlock_level=8, cell_type="jurkat", units_range=(1, 1), quality_range=(70, 80),
                 modifiers=("clean",)),
    # HUVEC
    TaskTemplate("huvec_gf", "Growth-factor order", "T3", "expand", 700, 70, (720, 960),
                 unlock_level=10, cell_type="huvec", units_range=(1, 2), quality_range=(70, 80),
                 constraints=("require_gf_pack",)),
    TaskTemplate("huvec_coating", "Coating protocol order", "T3", "expand", 800, 80, (840, 1080),
                 unlock_level=11, cell_type="huvec", units_range=(1, 1), quality_range=(75, 85),
                 constraints=("require_coating_pack",)),
    TaskTemplate("huvec_premium", "Premium antibiotic-free order", "T3", "expand", 1200, 120, (900, 1200),
                 unlock_level=13, cell_type="huvec", units_range=(1, 1), quality_range=(80, 90),
                 modifiers=("clean", "qc_only")),
    # Primary fibroblasts
    TaskTemplate("fib_long", "Long expansion", "T3", "expand", 900, 90, (840, 1200),
                 unlock_level=13, cell_type="primary_fib", units_range=(1, 2), quality_range=(65, 75)),
    TaskTemplate("fib_stable", "Steady-state maintenance", "T3", "maintain", 1000, 100, (960, 1320),
                 unlock_level=14, cell_type="primary_fib", units_range=(1, 1), quality_range=(70, 80),
                 constraints=("zero_contamination",)),
    # Organoids
    TaskTemplate("organoid_standard", "3D standard delivery", "T4", "expand", 3000, 300, (1200, 1800),
                 unlock_level=19, cell_type="organoid", units_range=(2, 4), quality_range=(70, 80),
                 constraints=("require_matrigel", "require_organoid_media")),
    TaskTemplate("organoid_qc", "High-end QC order", "T4", "expand", 5000, 500, (1440, 2100),
                 unlock_level=22, cell_type="organoid", units_range=(2, 3), quality_range=(85, 95),
                 modifiers=("qc_only",)),
    TaskTemplate("organoid_rush", "High-risk rush order", "T4", "expand", 6000, 600, (900, 1200),
                 unlock_level=25, cell_type="organoid", units_range=(2, 2), quality_range=(75, 85),
                 modifiers=("urgent", "sensitive"), golden_chance=0.15),
    # Combos
    TaskTemplate("combo_beginner", "Starter cell bundle", "T1", "combo", 300, 30, (600, 900),
                 unlock_level=2,
                 requirements=(Req("hek293t", 1, 55), Req("hela", 1, 55))),
    TaskTemplate("combo_trio", "Three-line bundle", "T1", "combo", 500, 50, (900, 1200),
                 unlock_level=3,
                 requirements=(Req("hek293t", 1, 60), Req("hela", 1, 60), Req("a549", 1, 60))),
    TaskTemplate("combo_immune_pack", "Immune cell set", "T2", "combo", 650, 65, (720, 1080),
                 unlock_level=7,
                 requirements=(Req("thp1", 1, 65), Req("jurkat", 1, 65))),
    TaskTemplate("combo_cancer_panel", "Tumour screening panel", "T2", "combo", 1200, 120, (1080, 1440),
                 unlock_level=5, modifiers=("qc_only",),
                 requirements=(Req("hela", 2, 70), Req("a549", 2, 70), Req("mcf7", 1, 70))),
    TaskTemplate("combo_premium_research", "Premium research set", "T3", "combo", 1800, 180, (1200, 1800),
                 unlock_level=13, modifiers=("clean",),
                 requirements=(Req("huvec", 1, 75), Req("primary_fib", 1, 70))),
    TaskTemplate("combo_full_spectrum", "Full-spectrum cell bank", "T3", "combo", 2500, 250, (1800, 2400),
                 unlock_level=11, golden_chance=0.10,
                 requirements=(Req("hek293t", 2, 65), Req("hela", 2, 65), Req("thp1", 1, 70),
                               Req("huvec", 1, 75))),
)
