from typing import List

from artrec.data.schemas import ApprovalSchema, AffinityMatrix

POSITIVE_AFFINITY = 1.0


def build_affinity_matrix(approvals: List[ApprovalSchema]) -> AffinityMatrix:
    """
    Sparse user -> artwork map for collaborative filtering.

    Only positive approvals produce entries. A missing entry means no
    signal, not a negative one.
    """
    matrix: AffinityMatrix = {}
    for approval in approvals:
        if not approval.is_like:
            continue
        matrix.setdefault(approval.user_id, {})[approval.artwork_id] = POSITIVE_AFFINITY
    return matrix
