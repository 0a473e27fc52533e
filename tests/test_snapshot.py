import json
import os
import stat

import pytest

from artrec.config.constants import ALGORITHM_TAG, SNAPSHOT_FILENAME
from artrec.data.errors import DataReadError, SnapshotWriteError
from artrec.features.affinity import build_affinity_matrix
from artrec.features.extractor import extract_features
from artrec.features.popularity import compute_global_stats
from artrec.features.preferences import build_user_profiles
from artrec.features.similarity import build_similarity_matrix
from artrec.features.snapshot_builder import (
    build_snapshot, save_snapshot, load_snapshot, format_timestamp
)
from conftest import make_artwork, make_approval, NOW


def _snapshot():
    artworks = [
        make_artwork("a1", category="ILLUSTRATION", style="アニメ調", tags=["SF"], creator_id="c1", likes_count=2),
        make_artwork("a2", category="ILLUSTRATION", style=None, tags=["SF", "レトロ"], creator_id="c2"),
    ]
    approvals = [make_approval("u1", "a1"), make_approval("u2", "a2", is_like=False, minutes=1)]
    catalog = {a.artwork_id: a for a in artworks}
    return build_snapshot(
        artworks,
        {a.artwork_id: extract_features(a, NOW) for a in artworks},
        build_user_profiles(approvals, catalog),
        build_affinity_matrix(approvals),
        build_similarity_matrix(artworks),
        compute_global_stats(artworks),
        behavior_log_count=7,
        like_count=1,
        generated_at=NOW
    )


def test_format_timestamp_is_utc_with_z():
    assert format_timestamp(NOW) == "2025-06-01T12:00:00.000Z"


def test_document_uses_consumer_keys(tmp_path):
    path = save_snapshot(_snapshot(), str(tmp_path))
    assert path == tmp_path / SNAPSHOT_FILENAME

    doc = json.loads(path.read_text(encoding="utf-8"))
    assert set(doc) == {
        "metadata", "artworks", "userProfiles", "userItemMatrix", "itemSimilarityMatrix", "globalStats"
    }
    assert doc["metadata"] == {
        "generatedAt": "2025-06-01T12:00:00.000Z",
        "artworkCount": 2,
        "userCount": 1,
        "behaviorLogCount": 7,
        "likeCount": 1,
        "algorithm": ALGORITHM_TAG,
        "schemaVersion": 1,
    }
    artwork = doc["artworks"][0]
    assert artwork["artistId"] == "c1"
    assert set(artwork["features"]) == {
        "category_score", "style_score", "tag_vector", "popularity_score", "recency_score"
    }
    assert doc["userProfiles"][0]["preferences"]["artists"] == {"c1": 1}
    assert doc["userItemMatrix"] == {"u1": {"a1": 1.0}}
    assert doc["itemSimilarityMatrix"]["a1"] == {"a2": pytest.approx(0.3 + 0.4 * 0.5)}
    assert doc["globalStats"]["topArtists"][0]["totalLikes"] == 2
    # Japanese labels stay readable
    assert "アニメ調" in path.read_text(encoding="utf-8")


def test_round_trip_through_loader(tmp_path):
    snapshot = _snapshot()
    path = save_snapshot(snapshot, str(tmp_path / "nested" / "dir"))
    assert load_snapshot(path) == snapshot


def test_rewrite_replaces_whole_file_and_leaves_no_temp_files(tmp_path):
    save_snapshot(_snapshot(), str(tmp_path))
    save_snapshot(_snapshot(), str(tmp_path))
    assert sorted(os.listdir(tmp_path)) == [SNAPSHOT_FILENAME]


def test_failed_write_keeps_previous_snapshot(tmp_path, monkeypatch):
    path = save_snapshot(_snapshot(), str(tmp_path))
    before = path.read_bytes()

    def broken_replace(src, dst):
        raise OSError("disk full")

    monkeypatch.setattr(os, "replace", broken_replace)
    with pytest.raises(SnapshotWriteError):
        save_snapshot(_snapshot(), str(tmp_path))

    assert path.read_bytes() == before
    assert sorted(os.listdir(tmp_path)) == [SNAPSHOT_FILENAME]


def test_unwritable_output_dir_is_a_write_error(tmp_path):
    blocker = tmp_path / "not_a_dir"
    blocker.write_text("x")
    with pytest.raises(SnapshotWriteError):
        save_snapshot(_snapshot(), str(blocker / "out"))


def test_loading_garbage_is_a_read_error(tmp_path):
    bad = tmp_path / SNAPSHOT_FILENAME
    bad.write_text("{\"metadata\": {}}")
    with pytest.raises(DataReadError):
        load_snapshot(bad)
    with pytest.raises(DataReadError):
        load_snapshot(tmp_path / "missing.json")


def test_snapshot_is_readable_by_other_users(tmp_path):
    old_umask = os.umask(0o022)
    try:
        first = save_snapshot(_snapshot(), str(tmp_path))
        assert stat.S_IMODE(first.stat().st_mode) == 0o644
        second = save_snapshot(_snapshot(), str(tmp_path))
        assert stat.S_IMODE(second.stat().st_mode) == 0o644
    finally:
        os.umask(old_umask)
