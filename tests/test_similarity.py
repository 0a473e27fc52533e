import itertools

import numpy as np
import pytest

from artrec.features.similarity import content_similarity, build_similarity_matrix, tag_overlap
from conftest import make_artwork


def test_two_item_scenario():
    item1 = make_artwork("item1", category="A", style="S1", tags=["x", "y"])
    item2 = make_artwork("item2", category="A", style="S1", tags=["x", "z"])

    assert content_similarity(item1, item2) == pytest.approx(0.8)
    matrix = build_similarity_matrix([item1, item2])
    assert matrix.get("item1", "item2") == pytest.approx(0.8)
    assert matrix.get("item2", "item1") == pytest.approx(0.8)


def test_identical_attributes_score_one():
    a = make_artwork("a", category="ANIMATION", style="ミニマル", tags=["SF", "クール"])
    b = make_artwork("b", category="ANIMATION", style="ミニマル", tags=["クール", "SF"])
    assert content_similarity(a, b) == pytest.approx(1.0)


def test_nothing_in_common_scores_zero():
    a = make_artwork("a", category="ANIMATION", style="ミニマル", tags=["SF"])
    b = make_artwork("b", category="LOGO_DESIGN", style=None, tags=["レトロ"])
    assert content_similarity(a, b) == 0.0


def test_missing_styles_never_match():
    a = make_artwork("a", category="X", style=None, tags=[])
    b = make_artwork("b", category="X", style=None, tags=[])
    c = make_artwork("c", category="X", style="", tags=[])
    # only the category channel contributes; the style weight still counts in the denominator
    assert content_similarity(a, b) == pytest.approx(0.3)
    assert content_similarity(a, c) == pytest.approx(0.3)


def test_tag_overlap_uses_larger_set():
    assert tag_overlap(["x"], ["x", "y", "z", "w"]) == 0.25
    assert tag_overlap([], []) == 0.0


def _catalog():
    return [
        make_artwork("a", category="ILLUSTRATION", style="アニメ調", tags=["SF", "クール"]),
        make_artwork("b", category="ILLUSTRATION", style="アニメ調", tags=["SF"]),
        make_artwork("c", category="ANIMATION", style=None, tags=["クール", "ダーク", "SF"]),
        make_artwork("d", category="ANIMATION", style="", tags=[]),
        make_artwork("e", category="LOGO_DESIGN", style="ミニマル", tags=["ポップ"]),
    ]


def test_matrix_matches_pairwise_function():
    artworks = _catalog()
    matrix = build_similarity_matrix(artworks)
    for a, b in itertools.permutations(artworks, 2):
        assert matrix.get(a.artwork_id, b.artwork_id) == pytest.approx(content_similarity(a, b))


def test_matrix_is_symmetric_and_bounded():
    matrix = build_similarity_matrix(_catalog())
    assert np.array_equal(matrix.values, matrix.values.T)
    assert matrix.values.min() >= 0.0
    assert matrix.values.max() <= 1.0


def test_self_pairs_are_excluded():
    matrix = build_similarity_matrix(_catalog())
    assert matrix.get("a", "a") is None
    exported = matrix.to_dict()
    assert list(exported) == ["a", "b", "c", "d", "e"]
    for artwork_id, row in exported.items():
        assert artwork_id not in row
        assert len(row) == 4


def test_empty_catalog_gives_empty_matrix():
    matrix = build_similarity_matrix([])
    assert len(matrix) == 0
    assert matrix.to_dict() == {}


def test_single_artwork_has_no_pairs():
    matrix = build_similarity_matrix([make_artwork("solo")])
    assert matrix.to_dict() == {"solo": {}}


def test_repeated_artwork_ids_are_rejected():
    a = make_artwork("a", tags=["SF"])
    b = make_artwork("b", tags=["SF"])
    with pytest.raises(ValueError):
        build_similarity_matrix([a, a, b])
