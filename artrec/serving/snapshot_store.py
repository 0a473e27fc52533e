import logging
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import numpy as np

from artrec.data.snapshot_schemas import (
    SnapshotDocument, SnapshotMetadata, ArtworkEntry, UserProfileEntry, GlobalStatsDocument
)
from artrec.features.snapshot_builder import load_snapshot

logger = logging.getLogger(__name__)


def sparse_cosine(vector_a: Dict[str, float], vector_b: Dict[str, float]) -> float:
    """Cosine similarity of two sparse vectors keyed by id."""
    keys = list(set(vector_a) | set(vector_b))
    if not keys:
        return 0.0
    a = np.array([vector_a.get(k, 0.0) for k in keys])
    b = np.array([vector_b.get(k, 0.0) for k in keys])
    norm_a = np.linalg.norm(a)
    norm_b = np.linalg.norm(b)
    if norm_a == 0 or norm_b == 0:
        return 0.0
    return float(np.dot(a, b) / (norm_a * norm_b))


class SnapshotStore:
    """
    In-memory view of one snapshot for downstream scoring.
    The whole file is read at once; a new snapshot is picked up with reload().
    """

    def __init__(self, path):
        self.path = Path(path)
        self.snapshot: Optional[SnapshotDocument] = None
        self._artworks: Dict[str, ArtworkEntry] = {}
        self._profiles: Dict[str, UserProfileEntry] = {}

    def load(self) -> SnapshotDocument:
        """Load the snapshot if not already loaded."""
        if self.snapshot is None:
            self.snapshot = load_snapshot(self.path)
            self._artworks = {a.id: a for a in self.snapshot.artworks}
            self._profiles = {p.user_id: p for p in self.snapshot.user_profiles}
            logger.info(
                "Loaded snapshot %s: %d artworks, %d users",
                self.path, self.snapshot.metadata.artwork_count, self.snapshot.metadata.user_count
            )
        return self.snapshot

    def reload(self) -> SnapshotDocument:
        self.snapshot = None
        return self.load()

    @property
    def metadata(self) -> SnapshotMetadata:
        return self.load().metadata

    @property
    def global_stats(self) -> GlobalStatsDocument:
        return self.load().global_stats

    def get_artwork(self, artwork_id: str) -> Optional[ArtworkEntry]:
        self.load()
        return self._artworks.get(artwork_id)

    def get_all_artworks(self) -> List[ArtworkEntry]:
        return self.load().artworks

    def get_user_profile(self, user_id: str) -> Optional[UserProfileEntry]:
        self.load()
        return self._profiles.get(user_id)

    def find_similar_artworks(self, artwork_id: str, limit: int = 10) -> List[Tuple[str, float]]:
        """Most content-similar artworks, positive scores only."""
        row = self.load().item_similarity_matrix.get(artwork_id)
        if not row:
            return []
        ranked = sorted(
            ((other_id, score) for other_id, score in row.items() if score > 0),
            key=lambda x: (-x[1], x[0])
        )
        return ranked[:limit]

    def find_similar_users(self, user_id: str, limit: int = 10) -> List[Tuple[str, float]]:
        """Users whose liked artworks overlap most (cosine over affinity rows)."""
        matrix = self.load().user_item_matrix
        target = matrix.get(user_id)
        if not target:
            return []

        similarities = []
        for other_id, other_items in matrix.items():
            if other_id == user_id:
                continue
            score = sparse_cosine(target, other_items)
            if score > 0:
                similarities.append((other_id, score))

        similarities.sort(key=lambda x: (-x[1], x[0]))
        return similarities[:limit]

    def get_popular_artworks_by_category(self, category: str, limit: int = 10) -> List[ArtworkEntry]:
        """Artworks of one category, most liked first."""
        matching = [a for a in self.load().artworks if a.category == category]
        matching.sort(key=lambda a: (-a.likes_count, a.id))
        return matching[:limit]
