# File: artrec/config/constants.py

# Snapshot identity
ALGORITHM_TAG = "HYBRID_RECOMMENDATION_v1.0"
SNAPSHOT_SCHEMA_VERSION = 1
SNAPSHOT_FILENAME = "analysis_data.json"

# Input files (relative to data_dir)
ARTWORKS_FILE = "artworks.parquet"
APPROVALS_FILE = "approvals.parquet"
BEHAVIOR_LOGS_FILE = "behavior_logs.parquet"

# Read windows (most recent N events per run)
BEHAVIOR_LOG_WINDOW = 1000
APPROVAL_WINDOW = 10_000
READ_TIMEOUT_SECONDS = 60.0

# Neutral score for unknown / missing categorical values
DEFAULT_ATTRIBUTE_SCORE = 0.5

# Category weights (closed set, keyed by ArtworkCategory value)
CATEGORY_SCORES = {
    "CHARACTER_DESIGN": 1.0,
    "ILLUSTRATION": 0.8,
    "CONCEPT_ART": 0.9,
    "LOGO_DESIGN": 0.7,
    "BACKGROUND_ART": 0.6,
    "COMIC_MANGA": 0.8,
    "ANIMATION": 0.9,
    "UI_UX_DESIGN": 0.7,
}

# Style weights (open set, exact label match)
STYLE_SCORES = {
    "アニメ調": 1.0,      # anime
    "リアル調": 0.9,      # realistic
    "デフォルメ": 0.8,    # chibi / deformed
    "ピクセルアート": 0.7,  # pixel art
    "水彩画風": 0.8,      # watercolor
    "80年代": 0.6,        # 80s retro
    "ミニマル": 0.7,      # minimal
}

# Reference tags for the tag vector (order is the vector layout)
REFERENCE_TAGS = [
    "キャラクター",  # 0 character
    "ファンタジー",  # 1 fantasy
    "SF",            # 2 sci-fi
    "かわいい",      # 3 cute
    "クール",        # 4 cool
    "ダーク",        # 5 dark
    "ポップ",        # 6 pop
    "レトロ",        # 7 retro
]
N_REFERENCE_TAGS = len(REFERENCE_TAGS)

# Recency decays to zero after one year
RECENCY_HORIZON_DAYS = 365.0

# Content similarity channel weights
W_CATEGORY = 0.3
W_STYLE = 0.3
W_TAGS = 0.4

# Every channel's weight goes into the normaliser whether or not it matched,
# so the denominator is always W_CATEGORY + W_STYLE + W_TAGS.
ALWAYS_COUNT_CHANNEL_WEIGHT = True

# Global stats truncation
TOP_K_CATEGORIES = 5
TOP_K_STYLES = 5
TOP_K_TAGS = 10
TOP_K_CREATORS = 10

UNKNOWN_CREATOR_NAME = "Unknown"
