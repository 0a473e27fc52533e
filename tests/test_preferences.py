from artrec.features.preferences import aggregate_user_profile, build_user_profiles
from conftest import make_artwork, make_approval


def _catalog(*artworks):
    return {a.artwork_id: a for a in artworks}


def test_user_without_likes_has_no_profile():
    catalog = _catalog(make_artwork("a1"))
    approvals = [make_approval("u1", "a1", is_like=False)]

    assert build_user_profiles(approvals, catalog) == {}
    assert aggregate_user_profile("u1", approvals, catalog) is None


def test_single_like_counts_each_attribute_once():
    artwork = make_artwork("x", category="LOGO_DESIGN", style="ミニマル", tags=["SF", "クール"], creator_id="c9")
    profile = build_user_profiles([make_approval("u1", "x")], _catalog(artwork))["u1"]

    assert profile.liked_artworks == ["x"]
    assert profile.categories == {"LOGO_DESIGN": 1}
    assert profile.styles == {"ミニマル": 1}
    assert profile.tags == {"SF": 1, "クール": 1}
    assert profile.creators == {"c9": 1}


def test_likes_fold_in_arrival_order_with_raw_counts():
    catalog = _catalog(
        make_artwork("a1", category="ILLUSTRATION", style=None, tags=["SF"], creator_id="c1"),
        make_artwork("a2", category="ILLUSTRATION", style="アニメ調", tags=["SF", "ポップ"], creator_id="c2"),
        make_artwork("a3", category="ANIMATION", style="アニメ調", tags=[], creator_id="c1"),
    )
    approvals = [
        make_approval("u1", "a2", minutes=1),
        make_approval("u1", "a3", is_like=False, minutes=2),
        make_approval("u1", "a1", minutes=3),
        make_approval("u2", "a3", minutes=4),
    ]

    profiles = build_user_profiles(approvals, catalog)

    assert list(profiles) == ["u1", "u2"]
    u1 = profiles["u1"]
    assert u1.liked_artworks == ["a2", "a1"]
    assert u1.categories == {"ILLUSTRATION": 2}
    assert u1.styles == {"アニメ調": 1}
    assert u1.tags == {"SF": 2, "ポップ": 1}
    assert u1.creators == {"c2": 1, "c1": 1}

    assert profiles["u2"].liked_artworks == ["a3"]


def test_like_on_artwork_outside_catalog_is_listed_without_counts():
    profile = build_user_profiles([make_approval("u1", "private")], {})["u1"]
    assert profile.liked_artworks == ["private"]
    assert profile.categories == {}
    assert profile.creators == {}


def test_user_type_is_carried_over():
    catalog = _catalog(make_artwork("a1"))
    profile = build_user_profiles([make_approval("u1", "a1", user_type="VTUBER")], catalog)["u1"]
    assert profile.user_type == "VTUBER"


def test_aggregate_user_profile_matches_batch_build():
    catalog = _catalog(make_artwork("a1", tags=["SF"]), make_artwork("a2", tags=["レトロ"]))
    approvals = [make_approval("u1", "a1"), make_approval("u2", "a1"), make_approval("u1", "a2", minutes=5)]

    single = aggregate_user_profile("u1", approvals, catalog)
    assert single == build_user_profiles(approvals, catalog)["u1"]
