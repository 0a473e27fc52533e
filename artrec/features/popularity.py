from collections import Counter
from typing import Dict, Iterable, List, Tuple

from artrec.data.schemas import ArtworkSchema, CreatorStats, GlobalStats
from artrec.config.constants import (
    TOP_K_CATEGORIES, TOP_K_STYLES, TOP_K_TAGS, TOP_K_CREATORS
)


def rank_counts(values: Iterable[str], top_k: int) -> List[Tuple[str, int]]:
    """
    Tally values and return the top_k as (value, count).
    Ties break on the value itself so output does not depend on input order.
    """
    counts = Counter(values)
    ranked = sorted(counts.items(), key=lambda kv: (-kv[1], kv[0]))
    return ranked[:top_k]


def popular_categories(artworks: List[ArtworkSchema], top_k: int = TOP_K_CATEGORIES) -> List[Tuple[str, int]]:
    return rank_counts((artwork.category for artwork in artworks), top_k)


def popular_styles(artworks: List[ArtworkSchema], top_k: int = TOP_K_STYLES) -> List[Tuple[str, int]]:
    """Artworks without a style are skipped."""
    return rank_counts((artwork.style for artwork in artworks if artwork.style), top_k)


def popular_tags(artworks: List[ArtworkSchema], top_k: int = TOP_K_TAGS) -> List[Tuple[str, int]]:
    return rank_counts((tag for artwork in artworks for tag in artwork.tags), top_k)


def top_creators(artworks: List[ArtworkSchema], top_k: int = TOP_K_CREATORS) -> List[CreatorStats]:
    """
    Creators ranked by cumulative engagement across their artworks.
    Ties: more artworks first, then creator id.
    """
    creators: Dict[str, CreatorStats] = {}
    for artwork in artworks:
        stats = creators.get(artwork.creator_id)
        if stats is None:
            stats = CreatorStats(creator_id=artwork.creator_id, name=artwork.creator_name)
            creators[artwork.creator_id] = stats
        stats.artwork_count += 1
        stats.total_likes += artwork.likes_count

    ranked = sorted(
        creators.values(),
        key=lambda s: (-s.total_likes, -s.artwork_count, s.creator_id)
    )
    return ranked[:top_k]


def compute_global_stats(
    artworks: List[ArtworkSchema],
    top_k_categories: int = TOP_K_CATEGORIES,
    top_k_styles: int = TOP_K_STYLES,
    top_k_tags: int = TOP_K_TAGS,
    top_k_creators: int = TOP_K_CREATORS
) -> GlobalStats:
    """Catalog-wide rankings, independent of any user."""
    return GlobalStats(
        popular_categories=popular_categories(artworks, top_k_categories),
        popular_styles=popular_styles(artworks, top_k_styles),
        popular_tags=popular_tags(artworks, top_k_tags),
        top_creators=top_creators(artworks, top_k_creators)
    )
