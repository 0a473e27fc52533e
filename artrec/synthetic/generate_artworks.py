"""
Generate synthetic artworks.
"""

import logging
from datetime import datetime, timedelta
from typing import List

import numpy as np

from artrec.data.schemas import ArtworkSchema
from artrec.synthetic.generator_config import SyntheticConfig

logger = logging.getLogger(__name__)


def generate_artwork(
    idx: int,
    config: SyntheticConfig,
    rng: np.random.Generator,
    creator_weights: np.ndarray,
    end_date: datetime
) -> ArtworkSchema:
    """
    Generate a single synthetic artwork.

    Args:
        idx: Artwork index (0 to N_ARTWORKS-1)
        config: Generator configuration
        rng: Random number generator
        creator_weights: Sampling weights over creators (popular creators post more)
        end_date: Newest possible created_at

    Returns:
        ArtworkSchema with likes_count 0; counts are filled in from approvals
    """
    # 1. Owner
    creator_idx = int(rng.choice(config.N_CREATORS, p=creator_weights))

    # 2. Category and style
    category = config.CATEGORIES[int(rng.integers(0, len(config.CATEGORIES)))]
    if rng.random() < config.NO_STYLE_PROB:
        style = None
    else:
        style = config.STYLES[int(rng.integers(0, len(config.STYLES)))]

    # 3. Tags (sampled without replacement so they are already unique)
    low, high = config.TAGS_PER_ARTWORK_RANGE
    n_tags = min(int(rng.integers(low, high + 1)), len(config.TAG_POOL))
    tag_idx = rng.choice(len(config.TAG_POOL), size=n_tags, replace=False)
    tags = [config.TAG_POOL[int(i)] for i in tag_idx]

    # 4. Creation time, uniform over the horizon
    age_days = float(rng.uniform(0, config.TIME_HORIZON_DAYS))
    created_at = end_date - timedelta(days=age_days)

    return ArtworkSchema(
        artwork_id=f"artwork_{idx:05d}",
        title=f"Artwork {idx}",
        description=f"Synthetic {category.lower()} piece",
        category=category,
        style=style,
        tags=tags,
        creator_id=f"creator_{creator_idx:04d}",
        creator_name=f"Creator {creator_idx}",
        is_public=bool(rng.random() < config.PUBLIC_FRACTION),
        likes_count=0,
        created_at=created_at
    )


def generate_all_artworks(config: SyntheticConfig, end_date: datetime) -> List[ArtworkSchema]:
    """
    Generate all synthetic artworks.

    Args:
        config: Generator configuration
        end_date: Newest possible created_at (timezone-aware)

    Returns:
        List of ArtworkSchema
    """
    rng = config.rng()

    weights = rng.lognormal(mean=0.0, sigma=config.CREATOR_POPULARITY_SIGMA, size=config.N_CREATORS)
    weights = weights / weights.sum()

    logger.info("Generating %d artworks...", config.N_ARTWORKS)
    artworks = [
        generate_artwork(idx, config, rng, weights, end_date)
        for idx in range(config.N_ARTWORKS)
    ]
    logger.info("Generated %d artworks (%d public)", len(artworks), sum(a.is_public for a in artworks))
    return artworks
