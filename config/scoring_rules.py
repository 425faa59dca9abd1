# -------------------------
# Fantasy scoring rules
# -------------------------
# Fixed tables consumed by scoring/. The six roster categories are the only
# positions that get depth, strength and waiver treatment; anything else a
# league rosters (IDP, FLEX slots, ...) is ignored by those calculations.

POSITIONS = ("QB", "RB", "WR", "TE", "K", "DEF")

# Depth score = (starters * STARTER_WEIGHT + bench * BENCH_WEIGHT) * multiplier
STARTER_WEIGHT = 3
BENCH_WEIGHT = 1

DEPTH_MULTIPLIERS = {
    "QB": 0.8,
    "RB": 1.2,
    "WR": 1.2,
    "TE": 1.0,
    "K": 1.0,
    "DEF": 1.0,
}

# Per-position strength thresholds on total rostered count: (strong_at, average_at)
STRENGTH_THRESHOLDS = {
    "QB": (2, 1),
    "K": (2, 1),
    "DEF": (2, 1),
    "RB": (4, 2),
    "WR": (4, 2),
    "TE": (4, 2),
}

# Overall roster strength
OVERALL_STRONG_MIN_STRONG = 4
OVERALL_STRONG_MAX_WEAK = 1
OVERALL_WEAK_MIN_WEAK = 3

# A category is a cross-league weakness once this many rosters rate it Weak
CROSS_LEAGUE_WEAK_MIN = 2

# Matchup competitiveness, on absolute point difference: (upper_bound_exclusive, label, priority)
COMPETITIVENESS_BANDS = [
    (10.0, "high", 1),
    (20.0, "medium", 2),
]
COMPETITIVENESS_FALLBACK = ("low", 3)

# Waiver priority score
WAIVER_TRENDING_WEIGHT = 10
WAIVER_AVAILABLE_WEIGHT = 10
WAIVER_NEED_WEIGHT = 15
WAIVER_NEED_THRESHOLD = 3  # a roster "needs" a position below this many players
WAIVER_ACTIVE_BONUS = 5
WAIVER_ELIGIBLE_STATUSES = ("Active", "Questionable")
WAIVER_SCARCITY_BONUS = {
    "RB": 3,
    "WR": 3,
    "TE": 5,
}
WAIVER_DEFAULT_LIMIT = 5

# Scoring settings surfaced by league info, label -> scoring_settings key
KEY_SCORING_SETTINGS = [
    ("Passing TD", "pass_td"),
    ("Rushing TD", "rush_td"),
    ("Receiving TD", "rec_td"),
    ("Passing Yards", "pass_yd"),
    ("Rushing Yards", "rush_yd"),
    ("Receiving Yards", "rec_yd"),
    ("Reception", "rec"),
]
