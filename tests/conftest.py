from datetime import datetime, timedelta, timezone

import pandas as pd
import pytest

from artrec.config.constants import ARTWORKS_FILE, APPROVALS_FILE, BEHAVIOR_LOGS_FILE
from artrec.data.schemas import ArtworkSchema, ApprovalSchema

NOW = datetime(2025, 6, 1, 12, 0, tzinfo=timezone.utc)


def make_artwork(artwork_id="a1", category="ILLUSTRATION", style="アニメ調", tags=None,
                 creator_id="c1", likes_count=0, created_at=NOW, **kwargs) -> ArtworkSchema:
    return ArtworkSchema(
        artwork_id=artwork_id,
        title=kwargs.pop("title", f"title {artwork_id}"),
        description=kwargs.pop("description", ""),
        category=category,
        style=style,
        tags=list(tags or []),
        creator_id=creator_id,
        likes_count=likes_count,
        created_at=created_at,
        **kwargs
    )


def make_approval(user_id="u1", artwork_id="a1", is_like=True, minutes=0, **kwargs) -> ApprovalSchema:
    return ApprovalSchema(
        user_id=user_id,
        artwork_id=artwork_id,
        is_like=is_like,
        timestamp=NOW - timedelta(days=1) + timedelta(minutes=minutes),
        **kwargs
    )


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def write_inputs(tmp_path):
    """Write artworks / approvals / behavior logs parquet files into tmp_path."""

    def _write(artworks=(), approvals=(), behaviors=()):
        artwork_rows = [
            {
                'artwork_id': a['artwork_id'],
                'title': a.get('title', a['artwork_id']),
                'description': a.get('description', ''),
                'category': a.get('category', 'ILLUSTRATION'),
                'style': a.get('style'),
                'tags': a.get('tags', []),
                'creator_id': a.get('creator_id', 'c1'),
                'creator_name': a.get('creator_name', 'Creator'),
                'is_public': a.get('is_public', True),
                'likes_count': a.get('likes_count', 0),
                'created_at': a.get('created_at', NOW - timedelta(days=10)),
            }
            for a in artworks
        ]
        pd.DataFrame(artwork_rows, columns=[
            'artwork_id', 'title', 'description', 'category', 'style', 'tags',
            'creator_id', 'creator_name', 'is_public', 'likes_count', 'created_at'
        ]).to_parquet(tmp_path / ARTWORKS_FILE, index=False)

        pd.DataFrame(list(approvals), columns=[
            'user_id', 'artwork_id', 'is_like', 'timestamp', 'context', 'user_type'
        ]).to_parquet(tmp_path / APPROVALS_FILE, index=False)

        pd.DataFrame(list(behaviors), columns=[
            'user_id', 'action', 'timestamp', 'artwork_id', 'context'
        ]).to_parquet(tmp_path / BEHAVIOR_LOGS_FILE, index=False)
        return tmp_path

    return _write
