"""
Generate synthetic approvals (likes / dislikes) and behaviour logs.
"""

import logging
from datetime import datetime, timedelta
from typing import Dict, List, Tuple

import numpy as np

from artrec.data.schemas import ArtworkSchema, ApprovalSchema, BehaviorEventSchema
from artrec.synthetic.generator_config import SyntheticConfig

logger = logging.getLogger(__name__)


def category_affinity(
    taste: np.ndarray,
    artworks: List[ArtworkSchema],
    config: SyntheticConfig
) -> np.ndarray:
    """
    Sampling weights over artworks for one user.

    Formula:
    weight = taste[category] * (1 + number_of_tags / 10)
    """
    cat_index = {cat: idx for idx, cat in enumerate(config.CATEGORIES)}
    weights = np.array([
        taste[cat_index[a.category]] * (1.0 + len(a.tags) / 10.0)
        for a in artworks
    ])
    total = weights.sum()
    if total == 0:
        return np.full(len(artworks), 1.0 / len(artworks))
    return weights / total


def _random_time_between(rng: np.random.Generator, start: datetime, end: datetime) -> datetime:
    span = max((end - start).total_seconds(), 0.0)
    return start + timedelta(seconds=float(rng.uniform(0, span)))


def sample_approvals_for_user(
    user_id: str,
    user_type: str,
    artworks: List[ArtworkSchema],
    config: SyntheticConfig,
    rng: np.random.Generator,
    end_date: datetime
) -> List[ApprovalSchema]:
    """
    Sample approval events for a single user.
    """
    # 1. Determine number of approvals
    low, high = config.APPROVALS_PER_USER_RANGE
    n_approvals = min(int(rng.integers(low, high + 1)), len(artworks))
    if n_approvals == 0:
        return []

    # 2. Pick artworks by category taste
    taste = rng.dirichlet([config.DIRICHLET_ALPHA_CAT] * len(config.CATEGORIES))
    probs = category_affinity(taste, artworks, config)
    chosen = rng.choice(len(artworks), size=n_approvals, replace=False, p=probs)

    # 3. Emit events, some later revised
    approvals = []
    for idx in chosen:
        artwork = artworks[int(idx)]
        timestamp = _random_time_between(rng, artwork.created_at, end_date)
        is_like = bool(rng.random() >= config.DISLIKE_PROB)
        approvals.append(ApprovalSchema(
            user_id=user_id,
            artwork_id=artwork.artwork_id,
            is_like=is_like,
            timestamp=timestamp,
            context={"source": "feed"},
            user_type=user_type
        ))

        if rng.random() < config.REVISED_PROB:
            approvals.append(ApprovalSchema(
                user_id=user_id,
                artwork_id=artwork.artwork_id,
                is_like=not is_like,
                timestamp=_random_time_between(rng, timestamp, end_date),
                context={"source": "revisit"},
                user_type=user_type
            ))

    return approvals


def sample_behavior_for_user(
    user_id: str,
    artworks: List[ArtworkSchema],
    config: SyntheticConfig,
    rng: np.random.Generator,
    end_date: datetime
) -> List[BehaviorEventSchema]:
    low, high = config.BEHAVIOR_EVENTS_PER_USER_RANGE
    n_events = int(rng.integers(low, high + 1))
    start = end_date - timedelta(days=30)

    events = []
    for _ in range(n_events):
        action = config.BEHAVIOR_ACTIONS[int(rng.integers(0, len(config.BEHAVIOR_ACTIONS)))]
        artwork_id = None
        if artworks and action != "scroll":
            artwork_id = artworks[int(rng.integers(0, len(artworks)))].artwork_id
        events.append(BehaviorEventSchema(
            user_id=user_id,
            action=action,
            timestamp=_random_time_between(rng, start, end_date),
            artwork_id=artwork_id,
            context={"page": "dashboard"}
        ))
    return events


def apply_like_counts(artworks: List[ArtworkSchema], approvals: List[ApprovalSchema]) -> None:
    """
    Set likes_count from the final approval state of each (user, artwork).
    """
    latest: Dict[Tuple[str, str], ApprovalSchema] = {}
    for approval in sorted(approvals, key=lambda a: a.timestamp):
        latest[(approval.user_id, approval.artwork_id)] = approval

    likes: Dict[str, int] = {}
    for approval in latest.values():
        if approval.is_like:
            likes[approval.artwork_id] = likes.get(approval.artwork_id, 0) + 1

    for artwork in artworks:
        artwork.likes_count = likes.get(artwork.artwork_id, 0)


def generate_all_interactions(
    artworks: List[ArtworkSchema],
    config: SyntheticConfig,
    end_date: datetime
) -> Tuple[List[ApprovalSchema], List[BehaviorEventSchema]]:
    """
    Generate approvals and behaviour events for every user, and fill in
    each artwork's likes_count.

    Returns:
        (approvals, behavior_events), each sorted by timestamp
    """
    rng = np.random.default_rng(config.RANDOM_SEED + 1)

    approvals: List[ApprovalSchema] = []
    behaviors: List[BehaviorEventSchema] = []

    if not artworks:
        return approvals, behaviors

    logger.info("Generating interactions for %d users...", config.N_USERS)
    for user_idx in range(config.N_USERS):
        user_id = f"user_{user_idx:05d}"
        user_type = "ARTIST" if rng.random() < 0.2 else "VTUBER"
        approvals.extend(sample_approvals_for_user(user_id, user_type, artworks, config, rng, end_date))
        behaviors.extend(sample_behavior_for_user(user_id, artworks, config, rng, end_date))

    approvals.sort(key=lambda a: a.timestamp)
    behaviors.sort(key=lambda e: e.timestamp)
    apply_like_counts(artworks, approvals)

    logger.info("Generated %d approvals and %d behavior events", len(approvals), len(behaviors))
    return approvals, behaviors
