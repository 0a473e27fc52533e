from datetime import timedelta

import pandas as pd
import pytest

from artrec.config.constants import ARTWORKS_FILE, UNKNOWN_CREATOR_NAME
from artrec.data.errors import DataReadError, MalformedRecordError
from artrec.data.repositories import ArtworkRepository, ApprovalRepository, BehaviorLogRepository
from conftest import make_artwork, NOW


def _approval(user, artwork, is_like, minutes, **extra):
    row = {'user_id': user, 'artwork_id': artwork, 'is_like': is_like,
           'timestamp': NOW + timedelta(minutes=minutes), 'context': None, 'user_type': None}
    row.update(extra)
    return row


def test_public_artworks_newest_first(write_inputs):
    data_dir = write_inputs(artworks=[
        {'artwork_id': 'old', 'created_at': NOW - timedelta(days=30)},
        {'artwork_id': 'hidden', 'is_public': False},
        {'artwork_id': 'new', 'created_at': NOW - timedelta(days=1), 'tags': ['SF', 'SF', 'クール']},
    ])

    artworks = ArtworkRepository(str(data_dir)).get_public_artworks()

    assert [a.artwork_id for a in artworks] == ['new', 'old']
    assert artworks[0].tags == ['SF', 'クール']
    assert artworks[0].style is None
    assert artworks[0].created_at.tzinfo is not None


def test_get_artwork_by_id(write_inputs):
    data_dir = write_inputs(artworks=[{'artwork_id': 'a1', 'creator_name': 'Mika'}])
    repo = ArtworkRepository(str(data_dir))
    assert repo.get_artwork('a1').creator_name == 'Mika'
    assert repo.get_artwork('missing') is None


def test_missing_file_is_a_read_error(tmp_path):
    with pytest.raises(DataReadError):
        ArtworkRepository(str(tmp_path)).get_public_artworks()


def test_missing_column_is_malformed(tmp_path):
    pd.DataFrame([{'artwork_id': 'a1'}]).to_parquet(tmp_path / ARTWORKS_FILE, index=False)
    with pytest.raises(MalformedRecordError):
        ArtworkRepository(str(tmp_path)).get_public_artworks()


def test_negative_likes_is_malformed(write_inputs):
    data_dir = write_inputs(artworks=[{'artwork_id': 'a1', 'likes_count': -1}])
    with pytest.raises(MalformedRecordError) as exc:
        ArtworkRepository(str(data_dir)).get_public_artworks()
    assert exc.value.row == 0


def test_approvals_keep_latest_polarity_in_chronological_order(write_inputs):
    data_dir = write_inputs(approvals=[
        _approval('u1', 'a1', True, 0),
        _approval('u1', 'a2', True, 1),
        _approval('u1', 'a1', False, 2),
        _approval('u2', 'a1', True, 3, context='{"source": "feed"}', user_type='VTUBER'),
    ])

    approvals = ApprovalRepository(str(data_dir)).get_recent_approvals(window=None)

    assert [(a.user_id, a.artwork_id, a.is_like) for a in approvals] == [
        ('u1', 'a2', True),
        ('u1', 'a1', False),
        ('u2', 'a1', True),
    ]
    assert approvals[-1].context == {'source': 'feed'}
    assert approvals[-1].user_type == 'VTUBER'
    assert approvals[0].timestamp.utcoffset() == timedelta(0)


def test_approval_window_keeps_most_recent(write_inputs):
    data_dir = write_inputs(approvals=[_approval('u1', f'a{i}', True, i) for i in range(5)])
    approvals = ApprovalRepository(str(data_dir)).get_recent_approvals(window=2)
    assert [a.artwork_id for a in approvals] == ['a3', 'a4']


def test_behavior_window_newest_first(write_inputs):
    behaviors = [
        {'user_id': 'u1', 'action': 'view', 'timestamp': NOW + timedelta(minutes=i),
         'artwork_id': 'a1', 'context': None}
        for i in range(4)
    ]
    data_dir = write_inputs(behaviors=behaviors)

    events = BehaviorLogRepository(str(data_dir)).get_recent_events(window=3)

    assert len(events) == 3
    assert events[0].timestamp == NOW + timedelta(minutes=3)


def test_behavior_without_action_is_malformed(write_inputs):
    data_dir = write_inputs(behaviors=[
        {'user_id': 'u1', 'action': '', 'timestamp': NOW, 'artwork_id': None, 'context': None}
    ])
    with pytest.raises(MalformedRecordError):
        BehaviorLogRepository(str(data_dir)).get_recent_events(window=10)


def test_duplicate_artwork_id_is_malformed(write_inputs):
    data_dir = write_inputs(artworks=[
        {'artwork_id': 'a1'},
        {'artwork_id': 'a2'},
        {'artwork_id': 'a1', 'is_public': False},
    ])
    with pytest.raises(MalformedRecordError) as exc:
        ArtworkRepository(str(data_dir)).get_public_artworks()
    assert exc.value.row == 2
    assert 'a1' in str(exc.value)


def test_all_artworks_include_private_ones(write_inputs):
    data_dir = write_inputs(artworks=[
        {'artwork_id': 'a1'},
        {'artwork_id': 'hidden', 'is_public': False, 'creator_name': None},
    ])
    repo = ArtworkRepository(str(data_dir))
    assert [a.artwork_id for a in repo.get_all_artworks()] == ['a1', 'hidden']
    assert [a.artwork_id for a in repo.get_public_artworks()] == ['a1']
    assert repo.get_all_artworks()[1].creator_name == UNKNOWN_CREATOR_NAME


def test_schema_default_creator_name():
    assert make_artwork("a1").creator_name == UNKNOWN_CREATOR_NAME
