"""
Configuration for synthetic data generation.
"""

from dataclasses import dataclass
from typing import List
import numpy as np

from artrec.config.constants import REFERENCE_TAGS, STYLE_SCORES
from artrec.data.schemas import ArtworkCategory


@dataclass
class SyntheticConfig:
    """Configuration for synthetic data generation."""

    # Scale
    N_ARTWORKS: int = 500
    N_USERS: int = 200
    N_CREATORS: int = 40

    # Fraction of artworks that are public (private ones are never read)
    PUBLIC_FRACTION: float = 0.9

    # Vocabularies
    CATEGORIES: List[str] = None
    STYLES: List[str] = None  # Includes labels outside STYLE_SCORES
    TAG_POOL: List[str] = None
    TAGS_PER_ARTWORK_RANGE: tuple = (0, 6)
    NO_STYLE_PROB: float = 0.15

    # Distribution parameters
    DIRICHLET_ALPHA_CAT: float = 0.8  # Per-user category taste
    CREATOR_POPULARITY_SIGMA: float = 1.0  # Log-normal skew of creator reach

    # Approval behaviour
    APPROVALS_PER_USER_RANGE: tuple = (0, 30)
    DISLIKE_PROB: float = 0.2
    REVISED_PROB: float = 0.05  # Chance a user later flips an earlier approval
    BEHAVIOR_EVENTS_PER_USER_RANGE: tuple = (5, 50)
    BEHAVIOR_ACTIONS: List[str] = None

    # Time
    TIME_HORIZON_DAYS: int = 540  # Older than one year on purpose

    # Random seed for reproducibility
    RANDOM_SEED: int = 42

    def __post_init__(self):
        """Initialize derived parameters."""
        if self.CATEGORIES is None:
            self.CATEGORIES = [c.value for c in ArtworkCategory]

        if self.STYLES is None:
            self.STYLES = list(STYLE_SCORES) + ["厚塗り", "線画"]

        if self.TAG_POOL is None:
            # Reference tags, tags containing them, and tags matching nothing
            self.TAG_POOL = list(REFERENCE_TAGS) + [
                "かわいいキャラクター", "ダークファンタジー", "レトロポップ", "SFメカ",
                "VTuber", "Live2D", "立ち絵", "配信画面", "猫耳", "和風", "魔法少女", "サムネイル"
            ]

        if self.BEHAVIOR_ACTIONS is None:
            self.BEHAVIOR_ACTIONS = ["view", "click", "scroll", "dwell", "share"]

        if not 0.0 <= self.PUBLIC_FRACTION <= 1.0:
            raise ValueError("PUBLIC_FRACTION must be within [0, 1]")

    def rng(self) -> np.random.Generator:
        return np.random.default_rng(self.RANDOM_SEED)


def get_default_config() -> SyntheticConfig:
    """Get default configuration."""
    return SyntheticConfig()
