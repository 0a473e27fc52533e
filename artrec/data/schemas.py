from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

import numpy as np

from artrec.config.constants import UNKNOWN_CREATOR_NAME


class ArtworkCategory(str, Enum):
    """Closed set of artwork categories."""
    CHARACTER_DESIGN = "CHARACTER_DESIGN"
    ILLUSTRATION = "ILLUSTRATION"
    CONCEPT_ART = "CONCEPT_ART"
    LOGO_DESIGN = "LOGO_DESIGN"
    BACKGROUND_ART = "BACKGROUND_ART"
    COMIC_MANGA = "COMIC_MANGA"
    ANIMATION = "ANIMATION"
    UI_UX_DESIGN = "UI_UX_DESIGN"


@dataclass
class ArtworkSchema:
    """
    Published artwork (catalog item).
    Maps 1:1 to a row of artworks.parquet.
    """
    # Identity
    artwork_id: str
    title: str
    description: str

    # Categorical attributes
    category: str  # ArtworkCategory value; unknown values are tolerated downstream
    style: Optional[str]  # Free-form label, None when absent

    # Unordered tags, stored de-duplicated in first-seen order
    tags: List[str]

    # Ownership
    creator_id: str

    # Engagement count (positive approvals), non-negative
    likes_count: int

    # Always timezone-aware UTC
    created_at: datetime

    creator_name: str = UNKNOWN_CREATOR_NAME
    is_public: bool = True


@dataclass
class ApprovalSchema:
    """
    Explicit like / dislike by a user on an artwork.
    """
    user_id: str
    artwork_id: str
    is_like: bool  # Polarity
    timestamp: datetime
    context: Optional[Dict[str, Any]] = None
    user_type: Optional[str] = None  # e.g. VTUBER / ARTIST


@dataclass
class BehaviorEventSchema:
    """
    Implicit behaviour log entry (view, click, scroll...).
    Collected for counts only; no derived structure consumes it.
    """
    user_id: str
    action: str
    timestamp: datetime
    artwork_id: Optional[str] = None
    context: Optional[Dict[str, Any]] = None


@dataclass
class FeatureVector:
    """
    Numeric summary of one artwork. Recomputed every run.
    """
    category_score: float  # [0, 1]
    style_score: float  # [0, 1]
    tag_vector: np.ndarray  # Shape (N_REFERENCE_TAGS,), entries 0.0 / 1.0
    popularity_score: int  # Raw engagement count, not normalized
    recency_score: float  # [0, 1]


@dataclass
class UserPreferenceProfile:
    """
    Per-user aggregate of liked artworks. Counts are raw, not probabilities.
    """
    user_id: str
    user_type: Optional[str] = None
    liked_artworks: List[str] = field(default_factory=list)
    categories: Dict[str, int] = field(default_factory=dict)
    styles: Dict[str, int] = field(default_factory=dict)
    tags: Dict[str, int] = field(default_factory=dict)
    creators: Dict[str, int] = field(default_factory=dict)


# user_id -> artwork_id -> 1.0
AffinityMatrix = Dict[str, Dict[str, float]]


@dataclass
class SimilarityMatrix:
    """
    Dense pairwise content similarity.
    values[i, j] is the similarity of artwork_ids[i] to artwork_ids[j];
    the diagonal is not a similarity and is never exported.
    """
    artwork_ids: List[str]
    values: np.ndarray  # Shape (n, n), float64

    def __post_init__(self):
        self._index = {artwork_id: idx for idx, artwork_id in enumerate(self.artwork_ids)}
        if len(self._index) != len(self.artwork_ids):
            raise ValueError("artwork_ids must be unique")

    def __len__(self) -> int:
        return len(self.artwork_ids)

    def get(self, artwork_a: str, artwork_b: str) -> Optional[float]:
        """Similarity of a to b, None for self-pairs or unknown ids."""
        if artwork_a == artwork_b:
            return None
        i = self._index.get(artwork_a)
        j = self._index.get(artwork_b)
        if i is None or j is None:
            return None
        return float(self.values[i, j])

    def to_dict(self) -> Dict[str, Dict[str, float]]:
        """Nested mapping in catalog order, self-pairs excluded."""
        result = {}
        for i, artwork_a in enumerate(self.artwork_ids):
            row = self.values[i]
            result[artwork_a] = {
                artwork_b: float(row[j])
                for j, artwork_b in enumerate(self.artwork_ids)
                if j != i
            }
        return result


@dataclass
class CreatorStats:
    creator_id: str
    name: str
    artwork_count: int = 0
    total_likes: int = 0


@dataclass
class GlobalStats:
    """Ranked (value, count) lists over the whole catalog."""
    popular_categories: List[tuple] = field(default_factory=list)
    popular_styles: List[tuple] = field(default_factory=list)
    popular_tags: List[tuple] = field(default_factory=list)
    top_creators: List[CreatorStats] = field(default_factory=list)


@dataclass
class PipelineRunStatus:
    """
    Operator-facing record of one run.
    """
    status: str = "pending"  # pending / running / completed / failed
    stage: Optional[str] = None
    processed_items: int = 0
    total_items: int = 0
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    error_message: Optional[str] = None

    @property
    def progress(self) -> float:
        if self.total_items == 0:
            return 1.0 if self.status == "completed" else 0.0
        return self.processed_items / self.total_items
