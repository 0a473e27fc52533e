import logging
from typing import Dict, List, Tuple

import numpy as np

from artrec.data.schemas import ArtworkSchema, SimilarityMatrix
from artrec.config.constants import (
    W_CATEGORY, W_STYLE, W_TAGS, ALWAYS_COUNT_CHANNEL_WEIGHT
)

logger = logging.getLogger(__name__)


def tag_overlap(tags_a: List[str], tags_b: List[str]) -> float:
    """|A ∩ B| / max(|A|, |B|, 1)."""
    set_b = set(tags_b)
    common = sum(1 for tag in tags_a if tag in set_b)
    return common / max(len(tags_a), len(tags_b), 1)


def content_similarity(artwork_a: ArtworkSchema, artwork_b: ArtworkSchema) -> float:
    """
    Weighted-sum content similarity in [0, 1].

    Channels:
    - category: W_CATEGORY on exact match
    - style: W_STYLE when both styles are non-empty and equal
    - tags: W_TAGS * tag_overlap

    With ALWAYS_COUNT_CHANNEL_WEIGHT every channel's weight enters the
    denominator even when it did not match, so the denominator is constant.
    """
    similarity = 0.0
    factors = 0.0

    category_match = artwork_a.category == artwork_b.category
    if category_match:
        similarity += W_CATEGORY
    if category_match or ALWAYS_COUNT_CHANNEL_WEIGHT:
        factors += W_CATEGORY

    style_match = bool(artwork_a.style) and bool(artwork_b.style) and artwork_a.style == artwork_b.style
    if style_match:
        similarity += W_STYLE
    if style_match or ALWAYS_COUNT_CHANNEL_WEIGHT:
        factors += W_STYLE

    similarity += tag_overlap(artwork_a.tags, artwork_b.tags) * W_TAGS
    factors += W_TAGS

    return similarity / factors if factors > 0 else 0.0


def _codes(values: List) -> np.ndarray:
    """Integer code per value; None becomes -1."""
    lookup: Dict[str, int] = {}
    codes = np.empty(len(values), dtype=np.int64)
    for idx, value in enumerate(values):
        if value is None:
            codes[idx] = -1
        else:
            codes[idx] = lookup.setdefault(value, len(lookup))
    return codes


def _tag_matrix(artworks: List[ArtworkSchema]) -> Tuple[np.ndarray, np.ndarray]:
    """
    Multi-hot (n, V) matrix over every tag seen in the catalog, plus tag counts.
    """
    vocab: Dict[str, int] = {}
    for artwork in artworks:
        for tag in artwork.tags:
            vocab.setdefault(tag, len(vocab))

    multi_hot = np.zeros((len(artworks), len(vocab)), dtype=np.float64)
    for row, artwork in enumerate(artworks):
        for tag in artwork.tags:
            multi_hot[row, vocab[tag]] = 1.0
    counts = multi_hot.sum(axis=1)
    return multi_hot, counts


def build_similarity_matrix(artworks: List[ArtworkSchema]) -> SimilarityMatrix:
    """
    Content similarity for every ordered pair of distinct artworks.

    Exact O(n^2) computation held fully in memory. Vectorized form of
    content_similarity(); the diagonal is zeroed and never exported.
    Tags must already be de-duplicated (repositories guarantee this).
    """
    n = len(artworks)
    artwork_ids = [artwork.artwork_id for artwork in artworks]
    if n == 0:
        return SimilarityMatrix(artwork_ids=[], values=np.zeros((0, 0), dtype=np.float64))

    logger.debug("Computing %d x %d similarity matrix", n, n)

    # Category channel
    category_codes = _codes([artwork.category for artwork in artworks])
    category_match = (category_codes[:, None] == category_codes[None, :]).astype(np.float64)

    # Style channel: empty / missing styles never match
    style_codes = _codes([artwork.style or None for artwork in artworks])
    style_match = (
        (style_codes[:, None] == style_codes[None, :]) & (style_codes[:, None] >= 0)
    ).astype(np.float64)

    # Tag channel
    multi_hot, counts = _tag_matrix(artworks)
    intersections = multi_hot @ multi_hot.T
    denominators = np.maximum(np.maximum.outer(counts, counts), 1.0)
    tag_sim = intersections / denominators

    values = category_match * W_CATEGORY + style_match * W_STYLE + tag_sim * W_TAGS

    if ALWAYS_COUNT_CHANNEL_WEIGHT:
        factors = W_CATEGORY + W_STYLE + W_TAGS
        values = values / factors
    else:
        factors = category_match * W_CATEGORY + style_match * W_STYLE + W_TAGS
        values = values / factors

    np.fill_diagonal(values, 0.0)
    return SimilarityMatrix(artwork_ids=artwork_ids, values=values)
