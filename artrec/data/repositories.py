"""
Data repositories for loading parquet files.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

import pandas as pd

from artrec.config.constants import (
    ARTWORKS_FILE, APPROVALS_FILE, BEHAVIOR_LOGS_FILE, UNKNOWN_CREATOR_NAME
)
from artrec.data.errors import DataReadError, MalformedRecordError
from artrec.data.schemas import ArtworkSchema, ApprovalSchema, BehaviorEventSchema
from artrec.data.validators import (
    validate_artwork_schema, validate_approval_schema, validate_behavior_event_schema
)

logger = logging.getLogger(__name__)

ARTWORK_COLUMNS = [
    'artwork_id', 'title', 'description', 'category', 'style', 'tags',
    'creator_id', 'is_public', 'likes_count', 'created_at'
]
APPROVAL_COLUMNS = ['user_id', 'artwork_id', 'is_like', 'timestamp']
BEHAVIOR_COLUMNS = ['user_id', 'action', 'timestamp']


def _is_missing(value) -> bool:
    if value is None:
        return True
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        # array-likes
        return False


def _optional_str(value) -> Optional[str]:
    if _is_missing(value):
        return None
    value = str(value)
    return value if value else None


def _to_tag_list(value) -> List[str]:
    """Parquet list columns come back as numpy arrays; CSV-ish dumps as JSON strings."""
    if value is None:
        return []
    if isinstance(value, str):
        value = json.loads(value) if value.strip() else []
    elif not hasattr(value, '__len__'):
        if _is_missing(value):
            return []
        raise ValueError(f"tags must be a list, got {type(value).__name__}")
    tags = []
    for tag in list(value):
        if tag not in tags:
            tags.append(tag)
    return tags


def _to_context(value) -> Optional[Dict[str, Any]]:
    if value is None:
        return None
    if isinstance(value, str):
        return json.loads(value) if value.strip() else None
    if isinstance(value, dict):
        return value
    if _is_missing(value):
        return None
    return value


def _to_utc(value):
    timestamp = pd.Timestamp(value)
    if pd.isna(timestamp):
        raise ValueError("missing timestamp")
    if timestamp.tzinfo is None:
        timestamp = timestamp.tz_localize('UTC')
    else:
        timestamp = timestamp.tz_convert('UTC')
    return timestamp.to_pydatetime()


def _read_parquet(path: Path, required_columns: List[str]) -> pd.DataFrame:
    try:
        df = pd.read_parquet(path)
    except FileNotFoundError as e:
        raise DataReadError(f"input file not found: {path}") from e
    except Exception as e:
        raise DataReadError(f"could not read {path}: {e}") from e

    missing = set(required_columns) - set(df.columns)
    if missing:
        raise MalformedRecordError(f"missing columns {sorted(missing)}", source=path.name)
    return df


def _most_recent(df: pd.DataFrame, source: str, window: Optional[int]) -> pd.DataFrame:
    """
    Newest-first slice of at most `window` rows.
    Rows with equal timestamps keep file order, later rows counting as newer.
    """
    df = df.reset_index(drop=True)
    try:
        df['timestamp'] = pd.to_datetime(df['timestamp'], utc=True)
    except (ValueError, TypeError) as e:
        raise MalformedRecordError(f"unparseable timestamp: {e}", source=source) from e
    if df['timestamp'].isna().any():
        row = int(df.index[df['timestamp'].isna()][0])
        raise MalformedRecordError("missing timestamp", source=source, row=row)

    df['_row'] = df.index
    df = df.sort_values(['timestamp', '_row'], ascending=[False, False], kind='mergesort')
    if window is not None:
        df = df.head(window)
    return df


class ArtworkRepository:
    """Repository for loading artworks from parquet."""

    def __init__(self, data_dir: str):
        self.path = Path(data_dir) / ARTWORKS_FILE
        self.df = None
        self._artwork_cache = {}
        self._all_artworks = None

    def _load(self):
        if self.df is None:
            self.df = _read_parquet(self.path, ARTWORK_COLUMNS)

    def _row_to_artwork(self, row, row_idx: int) -> ArtworkSchema:
        """Convert a dataframe row to ArtworkSchema."""
        try:
            artwork = ArtworkSchema(
                artwork_id=str(row['artwork_id']),
                title=_optional_str(row['title']) or "",
                description=_optional_str(row['description']) or "",
                category=_optional_str(row['category']) or "",
                style=_optional_str(row['style']),
                tags=_to_tag_list(row['tags']),
                creator_id=_optional_str(row['creator_id']) or "",
                creator_name=_optional_str(row.get('creator_name')) or UNKNOWN_CREATOR_NAME,
                is_public=bool(row['is_public']),
                likes_count=int(row['likes_count']),
                created_at=_to_utc(row['created_at'])
            )
        except (TypeError, ValueError) as e:
            raise MalformedRecordError(f"bad artwork record: {e}", source=self.path.name, row=row_idx) from e

        validate_artwork_schema(artwork, source=self.path.name, row=row_idx)
        return artwork

    def get_artwork(self, artwork_id: str) -> Optional[ArtworkSchema]:
        """Get a single artwork by ID."""
        if artwork_id in self._artwork_cache:
            return self._artwork_cache[artwork_id]

        self._load()
        rows = self.df[self.df['artwork_id'].astype(str) == artwork_id]
        if len(rows) == 0:
            return None

        artwork = self._row_to_artwork(rows.iloc[0], int(rows.index[0]))
        self._artwork_cache[artwork_id] = artwork
        return artwork

    def get_all_artworks(self) -> List[ArtworkSchema]:
        """
        Load all artworks, public or not, in file order.

        Raises:
            MalformedRecordError: on a bad record or a repeated artwork_id
        """
        if self._all_artworks is not None:
            return self._all_artworks

        self._load()
        artworks = []
        seen = {}
        for row_idx, row in self.df.iterrows():
            artwork = self._row_to_artwork(row, int(row_idx))
            if artwork.artwork_id in seen:
                raise MalformedRecordError(
                    f"duplicate artwork_id {artwork.artwork_id!r} (first at row {seen[artwork.artwork_id]})",
                    source=self.path.name, row=int(row_idx)
                )
            seen[artwork.artwork_id] = int(row_idx)
            artworks.append(artwork)

        self._all_artworks = artworks
        return artworks

    def get_public_artworks(self) -> List[ArtworkSchema]:
        """Public artworks, newest first."""
        artworks = [artwork for artwork in self.get_all_artworks() if artwork.is_public]
        # stable: equal created_at keeps file order
        artworks.sort(key=lambda a: a.created_at, reverse=True)
        logger.debug("Loaded %d public artworks from %s", len(artworks), self.path)
        return artworks


class ApprovalRepository:
    """Repository for loading like / dislike events from parquet."""

    def __init__(self, data_dir: str):
        self.path = Path(data_dir) / APPROVALS_FILE
        self.df = None

    def _load(self):
        if self.df is None:
            self.df = _read_parquet(self.path, APPROVAL_COLUMNS)

    def _row_to_approval(self, row, row_idx: int) -> ApprovalSchema:
        try:
            approval = ApprovalSchema(
                user_id=_optional_str(row['user_id']) or "",
                artwork_id=_optional_str(row['artwork_id']) or "",
                is_like=bool(row['is_like']),
                timestamp=_to_utc(row['timestamp']),
                context=_to_context(row.get('context')),
                user_type=_optional_str(row.get('user_type'))
            )
        except (TypeError, ValueError) as e:
            raise MalformedRecordError(f"bad approval record: {e}", source=self.path.name, row=row_idx) from e

        validate_approval_schema(approval, source=self.path.name, row=row_idx)
        return approval

    def get_recent_approvals(self, window: Optional[int]) -> List[ApprovalSchema]:
        """
        Approval state from the most recent `window` events.

        Only the latest event per (user, artwork) is kept, since a later
        like/dislike replaces the earlier one. Result is chronological
        (oldest first), which is the order profiles are folded in.
        """
        self._load()
        recent = _most_recent(self.df.copy(), self.path.name, window)
        recent = recent.drop_duplicates(subset=['user_id', 'artwork_id'], keep='first')
        recent = recent.sort_values(['timestamp', '_row'], kind='mergesort')

        approvals = [self._row_to_approval(row, int(row['_row'])) for _, row in recent.iterrows()]
        logger.debug(
            "Loaded %d approvals (%d rows in file, window=%s)", len(approvals), len(self.df), window
        )
        return approvals


class BehaviorLogRepository:
    """Repository for loading behaviour logs from parquet."""

    def __init__(self, data_dir: str):
        self.path = Path(data_dir) / BEHAVIOR_LOGS_FILE
        self.df = None

    def _load(self):
        if self.df is None:
            self.df = _read_parquet(self.path, BEHAVIOR_COLUMNS)

    def get_recent_events(self, window: Optional[int]) -> List[BehaviorEventSchema]:
        """Most recent `window` events, newest first."""
        self._load()
        recent = _most_recent(self.df.copy(), self.path.name, window)

        events = []
        for _, row in recent.iterrows():
            row_idx = int(row['_row'])
            try:
                event = BehaviorEventSchema(
                    user_id=_optional_str(row['user_id']) or "",
                    action=_optional_str(row['action']) or "",
                    timestamp=_to_utc(row['timestamp']),
                    artwork_id=_optional_str(row.get('artwork_id')),
                    context=_to_context(row.get('context'))
                )
            except (TypeError, ValueError) as e:
                raise MalformedRecordError(
                    f"bad behavior record: {e}", source=self.path.name, row=row_idx
                ) from e
            validate_behavior_event_schema(event, source=self.path.name, row=row_idx)
            events.append(event)
        return events
