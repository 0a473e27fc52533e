import logging
import os
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List, Optional

from pydantic import ValidationError

from artrec.config.constants import ALGORITHM_TAG, SNAPSHOT_FILENAME, SNAPSHOT_SCHEMA_VERSION
from artrec.data.errors import DataReadError, SnapshotWriteError
from artrec.data.schemas import (
    ArtworkSchema, FeatureVector, UserPreferenceProfile, AffinityMatrix,
    SimilarityMatrix, GlobalStats
)
from artrec.data.snapshot_schemas import (
    SnapshotDocument, SnapshotMetadata, ArtworkEntry, ArtworkFeatures,
    UserProfileEntry, PreferenceDistributions, GlobalStatsDocument,
    CategoryCount, StyleCount, TagCount, TopCreator
)

logger = logging.getLogger(__name__)


def format_timestamp(value: datetime) -> str:
    """UTC ISO-8601 with millisecond precision and a Z suffix."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    value = value.astimezone(timezone.utc)
    return value.isoformat(timespec='milliseconds').replace('+00:00', 'Z')


def encode_artwork(artwork: ArtworkSchema, features: FeatureVector) -> ArtworkEntry:
    return ArtworkEntry(
        id=artwork.artwork_id,
        title=artwork.title,
        description=artwork.description,
        category=artwork.category,
        style=artwork.style,
        tags=list(artwork.tags),
        creator_id=artwork.creator_id,
        creator_name=artwork.creator_name,
        likes_count=artwork.likes_count,
        created_at=format_timestamp(artwork.created_at),
        features=ArtworkFeatures(
            category_score=features.category_score,
            style_score=features.style_score,
            tag_vector=[float(v) for v in features.tag_vector],
            popularity_score=features.popularity_score,
            recency_score=features.recency_score
        )
    )


def encode_profile(profile: UserPreferenceProfile) -> UserProfileEntry:
    return UserProfileEntry(
        user_id=profile.user_id,
        user_type=profile.user_type,
        liked_artworks=list(profile.liked_artworks),
        preferences=PreferenceDistributions(
            categories=dict(profile.categories),
            styles=dict(profile.styles),
            tags=dict(profile.tags),
            creators=dict(profile.creators)
        )
    )


def encode_global_stats(stats: GlobalStats) -> GlobalStatsDocument:
    return GlobalStatsDocument(
        popular_categories=[CategoryCount(category=k, count=c) for k, c in stats.popular_categories],
        popular_styles=[StyleCount(style=k, count=c) for k, c in stats.popular_styles],
        popular_tags=[TagCount(tag=k, count=c) for k, c in stats.popular_tags],
        top_creators=[
            TopCreator(
                id=s.creator_id,
                name=s.name,
                artwork_count=s.artwork_count,
                total_likes=s.total_likes
            )
            for s in stats.top_creators
        ]
    )


def build_snapshot(
    artworks: List[ArtworkSchema],
    features: Dict[str, FeatureVector],
    profiles: Dict[str, UserPreferenceProfile],
    affinity: AffinityMatrix,
    similarity: SimilarityMatrix,
    stats: GlobalStats,
    behavior_log_count: int,
    like_count: int,
    generated_at: Optional[datetime] = None
) -> SnapshotDocument:
    """
    Assemble every derived structure plus metadata into one document.

    Args:
        artworks: catalog in output order
        features: artwork_id -> FeatureVector
        profiles: user_id -> profile (users without likes are simply absent)
        behavior_log_count: number of behaviour events read this run
        like_count: number of positive approvals read this run
    """
    if generated_at is None:
        generated_at = datetime.now(timezone.utc)

    metadata = SnapshotMetadata(
        generated_at=format_timestamp(generated_at),
        artwork_count=len(artworks),
        user_count=len(profiles),
        behavior_log_count=behavior_log_count,
        like_count=like_count,
        algorithm=ALGORITHM_TAG,
        schema_version=SNAPSHOT_SCHEMA_VERSION
    )

    return SnapshotDocument(
        metadata=metadata,
        artworks=[encode_artwork(a, features[a.artwork_id]) for a in artworks],
        user_profiles=[encode_profile(p) for p in profiles.values()],
        user_item_matrix={user_id: dict(items) for user_id, items in affinity.items()},
        item_similarity_matrix=similarity.to_dict(),
        global_stats=encode_global_stats(stats)
    )


def snapshot_path(output_dir: str) -> Path:
    return Path(output_dir) / SNAPSHOT_FILENAME


def _default_file_mode() -> int:
    """Mode a plain open() would create with, i.e. 0666 minus the umask."""
    umask = os.umask(0)
    os.umask(umask)
    return 0o666 & ~umask


def save_snapshot(snapshot: SnapshotDocument, output_dir: str) -> Path:
    """
    Atomically replace <output_dir>/analysis_data.json.

    The document is written to a temp file in the same directory, fsynced,
    then renamed over the target. On any failure the temp file is removed
    and the previous snapshot is left as it was.
    """
    target = snapshot_path(output_dir)
    tmp_name = None
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        payload = snapshot.model_dump_json(by_alias=True, indent=2).encode('utf-8')

        fd, tmp_name = tempfile.mkstemp(
            dir=target.parent, prefix=f".{target.name}.", suffix=".tmp"
        )
        with os.fdopen(fd, 'wb') as f:
            # mkstemp creates 0600; readers may run as another user
            os.fchmod(f.fileno(), _default_file_mode())
            f.write(payload)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_name, target)
        tmp_name = None
    except OSError as e:
        raise SnapshotWriteError(f"could not write snapshot to {target}: {e}") from e
    finally:
        if tmp_name is not None and os.path.exists(tmp_name):
            os.unlink(tmp_name)

    logger.info("Snapshot written to %s (%d bytes)", target, len(payload))
    return target


def load_snapshot(path) -> SnapshotDocument:
    """
    Load and validate a snapshot file.
    """
    path = Path(path)
    try:
        raw = path.read_bytes()
    except OSError as e:
        raise DataReadError(f"could not read snapshot {path}: {e}") from e

    try:
        return SnapshotDocument.model_validate_json(raw)
    except ValidationError as e:
        raise DataReadError(f"snapshot {path} is not a valid document: {e}") from e
