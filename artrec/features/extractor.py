from datetime import datetime, timezone
from typing import List, Optional

import numpy as np

from artrec.data.schemas import ArtworkSchema, ArtworkCategory, FeatureVector
from artrec.config.constants import (
    CATEGORY_SCORES, STYLE_SCORES, REFERENCE_TAGS, N_REFERENCE_TAGS,
    DEFAULT_ATTRIBUTE_SCORE, RECENCY_HORIZON_DAYS
)

SECONDS_PER_DAY = 86_400.0


def category_score(category: Optional[str]) -> float:
    """Hand-assigned weight of a category; anything outside the closed set scores 0.5."""
    try:
        member = ArtworkCategory(category)
    except ValueError:
        return DEFAULT_ATTRIBUTE_SCORE
    return CATEGORY_SCORES.get(member.value, DEFAULT_ATTRIBUTE_SCORE)


def style_score(style: Optional[str]) -> float:
    """Exact-label lookup; missing or unlisted styles score 0.5."""
    if not style:
        return DEFAULT_ATTRIBUTE_SCORE
    if style not in STYLE_SCORES:
        return DEFAULT_ATTRIBUTE_SCORE
    return STYLE_SCORES[style]


def tag_vector(tags: List[str]) -> np.ndarray:
    """
    Binary vector over REFERENCE_TAGS.

    Each item tag marks the first reference tag it contains as a substring
    (case-sensitive, first match wins). Tags matching nothing are ignored.
    Not normalized: several positions may be 1.0, or none.
    """
    vec = np.zeros(N_REFERENCE_TAGS, dtype=np.float32)
    for tag in tags:
        for idx, reference in enumerate(REFERENCE_TAGS):
            if reference in tag:
                vec[idx] = 1.0
                break
    return vec


def recency_score(created_at: datetime, now: Optional[datetime] = None) -> float:
    """
    1.0 for an artwork created at `now`, decaying linearly to 0.0 at one year.
    Future-dated artworks are capped at 1.0.
    """
    if now is None:
        now = datetime.now(timezone.utc)
    age_days = (now - created_at).total_seconds() / SECONDS_PER_DAY
    return min(1.0, max(0.0, 1.0 - age_days / RECENCY_HORIZON_DAYS))


def extract_features(artwork: ArtworkSchema, now: Optional[datetime] = None) -> FeatureVector:
    """
    Convert ArtworkSchema to its feature vector.

    Total over valid artworks: unknown categorical values fall back to the
    neutral score instead of raising.
    """
    return FeatureVector(
        category_score=category_score(artwork.category),
        style_score=style_score(artwork.style),
        tag_vector=tag_vector(artwork.tags),
        popularity_score=int(artwork.likes_count),
        recency_score=recency_score(artwork.created_at, now)
    )
