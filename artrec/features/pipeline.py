"""
Single-pass batch build of the recommendation snapshot.

    read -> extract -> aggregate -> write

Nothing is written unless every earlier stage succeeded, so a failed run
leaves the previous snapshot in place. Runs must not overlap on the same
output directory; scheduling is the caller's job.
"""

import logging
import threading
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, List, Optional, Tuple

from artrec.config.pipeline_config import PipelineConfig
from artrec.data.errors import DataReadError, PipelineError
from artrec.data.repositories import ArtworkRepository, ApprovalRepository, BehaviorLogRepository
from artrec.data.schemas import (
    ArtworkSchema, ApprovalSchema, BehaviorEventSchema, PipelineRunStatus
)
from artrec.data.snapshot_schemas import SnapshotDocument
from artrec.features.extractor import extract_features
from artrec.features.preferences import build_user_profiles
from artrec.features.similarity import build_similarity_matrix
from artrec.features.affinity import build_affinity_matrix
from artrec.features.popularity import compute_global_stats
from artrec.features.snapshot_builder import build_snapshot, save_snapshot

logger = logging.getLogger(__name__)

STAGE_READ = "read"
STAGE_EXTRACT = "extract"
STAGE_AGGREGATE = "aggregate"
STAGE_WRITE = "write"

# (public artworks, whole catalog incl. private, approvals, behavior events)
ReadResult = Tuple[
    List[ArtworkSchema], List[ArtworkSchema], List[ApprovalSchema], List[BehaviorEventSchema]
]


@dataclass
class PipelineResult:
    snapshot: SnapshotDocument
    path: Path
    status: PipelineRunStatus


def call_with_deadline(fn: Callable[[], ReadResult], timeout: Optional[float]) -> ReadResult:
    """
    Run fn in a worker thread and wait at most `timeout` seconds.

    The worker cannot be killed; on expiry it is abandoned and DataReadError
    raised. It is a daemon thread, so a stuck read never holds up interpreter exit.
    """
    if timeout is None:
        return fn()

    outcome = {}

    def target():
        try:
            outcome['result'] = fn()
        except BaseException as e:
            outcome['error'] = e

    worker = threading.Thread(target=target, name="artrec-read", daemon=True)
    worker.start()
    worker.join(timeout)
    if worker.is_alive():
        raise DataReadError(f"read stage exceeded its {timeout:g}s deadline")
    if 'error' in outcome:
        raise outcome['error']
    return outcome['result']


def run_pipeline(
    config: PipelineConfig,
    now: Optional[datetime] = None,
    artwork_repo: Optional[ArtworkRepository] = None,
    approval_repo: Optional[ApprovalRepository] = None,
    behavior_repo: Optional[BehaviorLogRepository] = None
) -> PipelineResult:
    """
    Build and write one snapshot.

    Args:
        config: pipeline settings
        now: reference time for recency scores and metadata (default: wall clock)
        *_repo: collaborator readers; default to parquet repositories in config.DATA_DIR

    Raises:
        PipelineError: wrapping the first failure, with the stage reached and counts so far
    """
    if now is None:
        now = datetime.now(timezone.utc)

    artwork_repo = artwork_repo or ArtworkRepository(config.DATA_DIR)
    approval_repo = approval_repo or ApprovalRepository(config.DATA_DIR)
    behavior_repo = behavior_repo or BehaviorLogRepository(config.DATA_DIR)

    status = PipelineRunStatus(status="running", started_at=datetime.now(timezone.utc))
    counts = {}

    def read_all() -> ReadResult:
        artworks = artwork_repo.get_public_artworks()
        catalog = artwork_repo.get_all_artworks()
        approvals = approval_repo.get_recent_approvals(config.APPROVAL_WINDOW)
        behaviors = behavior_repo.get_recent_events(config.BEHAVIOR_WINDOW)
        return artworks, catalog, approvals, behaviors

    try:
        # Step 1: Read
        status.stage = STAGE_READ
        logger.info("Reading inputs from %s", config.DATA_DIR)
        artworks, catalog, approvals, behaviors = call_with_deadline(
            read_all, config.READ_TIMEOUT_SECONDS
        )
        likes = [approval for approval in approvals if approval.is_like]
        counts.update(
            artworks=len(artworks),
            catalog_artworks=len(catalog),
            approvals=len(approvals),
            likes=len(likes),
            behavior_events=len(behaviors)
        )
        status.total_items = len(artworks)
        logger.info(
            "Loaded %d artworks, %d approvals (%d likes), %d behavior events",
            len(artworks), len(approvals), len(likes), len(behaviors)
        )

        # Step 2: Extract per-artwork features
        status.stage = STAGE_EXTRACT
        features = {}
        for artwork in artworks:
            features[artwork.artwork_id] = extract_features(artwork, now)
            status.processed_items += 1
        counts['features'] = len(features)

        # Step 3: Aggregate
        status.stage = STAGE_AGGREGATE
        # Likes on private artworks still count toward the liker's tastes
        artworks_by_id = {artwork.artwork_id: artwork for artwork in catalog}
        profiles = build_user_profiles(approvals, artworks_by_id)
        counts['profiles'] = len(profiles)

        affinity = build_affinity_matrix(approvals)
        logger.info("Built %d user profiles, affinity rows for %d users", len(profiles), len(affinity))

        similarity = build_similarity_matrix(artworks)
        counts['similarity_pairs'] = len(similarity) * max(len(similarity) - 1, 0)
        logger.info("Computed %d pairwise similarities", counts['similarity_pairs'])

        stats = compute_global_stats(
            artworks,
            top_k_categories=config.TOP_K_CATEGORIES,
            top_k_styles=config.TOP_K_STYLES,
            top_k_tags=config.TOP_K_TAGS,
            top_k_creators=config.TOP_K_CREATORS
        )

        snapshot = build_snapshot(
            artworks, features, profiles, affinity, similarity, stats,
            behavior_log_count=len(behaviors),
            like_count=len(likes),
            generated_at=now
        )

        # Step 4: Write
        status.stage = STAGE_WRITE
        path = save_snapshot(snapshot, config.OUTPUT_DIR)
    except Exception as e:
        status.status = "failed"
        status.completed_at = datetime.now(timezone.utc)
        status.error_message = str(e)
        logger.error("Snapshot build failed at stage %s (%s): %s", status.stage, counts, e)
        raise PipelineError(status.stage, counts, e, status=status) from e

    status.status = "completed"
    status.completed_at = datetime.now(timezone.utc)
    logger.info(
        "Snapshot build completed: %d artworks, %d users, %d likes",
        counts['artworks'], counts['profiles'], counts['likes']
    )
    return PipelineResult(snapshot=snapshot, path=path, status=status)
