from artrec.data.schemas import ArtworkSchema, ApprovalSchema, BehaviorEventSchema, FeatureVector
from artrec.data.errors import MalformedRecordError
from artrec.config.constants import N_REFERENCE_TAGS


def validate_artwork_schema(artwork: ArtworkSchema, source: str = None, row: int = None) -> None:
    """Validate artwork data integrity."""
    if not artwork.artwork_id:
        raise MalformedRecordError("artwork_id is empty", source, row)
    if not artwork.category:
        raise MalformedRecordError(f"artwork {artwork.artwork_id} has no category", source, row)
    if not artwork.creator_id:
        raise MalformedRecordError(f"artwork {artwork.artwork_id} has no creator_id", source, row)
    if artwork.likes_count < 0:
        raise MalformedRecordError(
            f"artwork {artwork.artwork_id} has negative likes_count {artwork.likes_count}", source, row
        )
    if artwork.created_at.tzinfo is None:
        raise MalformedRecordError(f"artwork {artwork.artwork_id} created_at is naive", source, row)
    if not all(isinstance(tag, str) for tag in artwork.tags):
        raise MalformedRecordError(f"artwork {artwork.artwork_id} has non-string tags", source, row)


def validate_approval_schema(approval: ApprovalSchema, source: str = None, row: int = None) -> None:
    """Validate approval event integrity."""
    if not approval.user_id:
        raise MalformedRecordError("approval has empty user_id", source, row)
    if not approval.artwork_id:
        raise MalformedRecordError(f"approval by {approval.user_id} has empty artwork_id", source, row)
    if approval.context is not None and not isinstance(approval.context, dict):
        raise MalformedRecordError("approval context must be an object", source, row)


def validate_behavior_event_schema(event: BehaviorEventSchema, source: str = None, row: int = None) -> None:
    """Validate behaviour log integrity."""
    if not event.user_id:
        raise MalformedRecordError("behavior event has empty user_id", source, row)
    if not event.action:
        raise MalformedRecordError(f"behavior event by {event.user_id} has empty action", source, row)


def validate_feature_vector(features: FeatureVector) -> None:
    """Check the ranges a feature vector guarantees."""
    assert 0.0 <= features.category_score <= 1.0
    assert 0.0 <= features.style_score <= 1.0
    assert 0.0 <= features.recency_score <= 1.0
    assert features.popularity_score >= 0
    assert features.tag_vector.shape == (N_REFERENCE_TAGS,)
