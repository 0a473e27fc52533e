"""
Snapshot document schema.

Outer keys are camelCase and feature keys snake_case, matching the
analysis_data.json layout the scoring service already reads.
"""

from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SnapshotMetadata(CamelModel):
    """Run metadata."""
    generated_at: str  # ISO-8601 UTC
    artwork_count: int
    user_count: int
    behavior_log_count: int
    like_count: int
    algorithm: str
    schema_version: int


class ArtworkFeatures(BaseModel):
    """Feature vector of one artwork."""
    category_score: float
    style_score: float
    tag_vector: List[float]
    popularity_score: int
    recency_score: float


class ArtworkEntry(CamelModel):
    """Catalog entry with its features."""
    id: str
    title: str
    description: str
    category: str
    style: Optional[str] = None
    tags: List[str]
    creator_id: str = Field(alias="artistId")
    creator_name: str = Field(alias="artistName")
    likes_count: int
    created_at: str
    features: ArtworkFeatures


class PreferenceDistributions(CamelModel):
    categories: Dict[str, int]
    styles: Dict[str, int]
    tags: Dict[str, int]
    creators: Dict[str, int] = Field(alias="artists")


class UserProfileEntry(CamelModel):
    user_id: str
    user_type: Optional[str] = None
    liked_artworks: List[str]
    preferences: PreferenceDistributions


class CategoryCount(BaseModel):
    category: str
    count: int


class StyleCount(BaseModel):
    style: str
    count: int


class TagCount(BaseModel):
    tag: str
    count: int


class TopCreator(CamelModel):
    id: str
    name: str
    artwork_count: int
    total_likes: int


class GlobalStatsDocument(CamelModel):
    popular_categories: List[CategoryCount]
    popular_styles: List[StyleCount]
    popular_tags: List[TagCount]
    top_creators: List[TopCreator] = Field(alias="topArtists")


class SnapshotDocument(CamelModel):
    """One complete pipeline output, replaced wholesale every run."""
    metadata: SnapshotMetadata
    artworks: List[ArtworkEntry]
    user_profiles: List[UserProfileEntry]
    user_item_matrix: Dict[str, Dict[str, float]]
    item_similarity_matrix: Dict[str, Dict[str, float]]
    global_stats: GlobalStatsDocument
