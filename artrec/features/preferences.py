import logging
from typing import Dict, List, Mapping, Optional

from artrec.data.schemas import ArtworkSchema, ApprovalSchema, UserPreferenceProfile

logger = logging.getLogger(__name__)


def _increment(counter: Dict[str, int], key: str):
    counter[key] = counter.get(key, 0) + 1


def fold_approval(
    profile: UserPreferenceProfile,
    approval: ApprovalSchema,
    artwork: Optional[ArtworkSchema]
) -> None:
    """
    Add one positive approval to a profile.

    When the artwork is absent from the content store its id is still recorded
    as liked, but no attribute counts can be taken.
    """
    if approval.artwork_id in profile.liked_artworks:
        return
    profile.liked_artworks.append(approval.artwork_id)
    if profile.user_type is None:
        profile.user_type = approval.user_type

    if artwork is None:
        logger.debug(
            "User %s liked %s which is not in the content store; counts skipped",
            approval.user_id, approval.artwork_id
        )
        return

    _increment(profile.categories, artwork.category)
    if artwork.style:
        _increment(profile.styles, artwork.style)
    for tag in artwork.tags:
        _increment(profile.tags, tag)
    _increment(profile.creators, artwork.creator_id)


def aggregate_user_profile(
    user_id: str,
    approvals: List[ApprovalSchema],
    artworks_by_id: Mapping[str, ArtworkSchema]
) -> Optional[UserPreferenceProfile]:
    """
    Fold one user's approvals (in arrival order) into a preference profile.

    Returns None when the user has no positive approval: absence, not an
    all-zero profile.
    """
    profile = None
    for approval in approvals:
        if approval.user_id != user_id or not approval.is_like:
            continue
        if profile is None:
            profile = UserPreferenceProfile(user_id=user_id)
        fold_approval(profile, approval, artworks_by_id.get(approval.artwork_id))
    return profile


def build_user_profiles(
    approvals: List[ApprovalSchema],
    artworks_by_id: Mapping[str, ArtworkSchema]
) -> Dict[str, UserPreferenceProfile]:
    """
    Profiles for every user with at least one positive approval.
    Keyed by user id in order of each user's first like.
    """
    profiles: Dict[str, UserPreferenceProfile] = {}
    for approval in approvals:
        if not approval.is_like:
            continue
        profile = profiles.get(approval.user_id)
        if profile is None:
            profile = UserPreferenceProfile(user_id=approval.user_id)
            profiles[approval.user_id] = profile
        fold_approval(profile, approval, artworks_by_id.get(approval.artwork_id))
    return profiles
