"""Identifiers and alignment candidate containers."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import List, Optional, Set, Tuple

import numpy as np

VertexId = str
EdgeId = str
EdgeIdSet = Set[EdgeId]


class CandidateType(Enum):
    LIDAR = "lidar"
    CAMERA = "camera"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class AlignmentCandidate:
    """One side of a proposed alignment."""

    closest_vertex_id: Optional[VertexId]
    valid: bool = True
    mission_id: Optional[str] = None
    timestamp_ns: int = 0
    candidate_type: CandidateType = CandidateType.UNKNOWN

    def __str__(self) -> str:
        return (
            f"vertex={self.closest_vertex_id} valid={self.valid} "
            f"mission={self.mission_id} t={self.timestamp_ns}ns type={self.candidate_type.value}"
        )


@dataclass(frozen=True)
class AlignmentCandidatePair:
    """Pair of candidates that the optimizer may try to align."""

    candidate_A: AlignmentCandidate
    candidate_B: AlignmentCandidate
    T_SB_SA_init: np.ndarray = field(default_factory=lambda: np.eye(4), compare=False)

    def is_valid(self) -> bool:
        return (
            self.candidate_A.valid
            and self.candidate_B.valid
            and self.candidate_A.closest_vertex_id is not None
            and self.candidate_B.closest_vertex_id is not None
        )

    def vertex_ids(self) -> Tuple[Optional[VertexId], Optional[VertexId]]:
        return self.candidate_A.closest_vertex_id, self.candidate_B.closest_vertex_id

    def swapped(self) -> "AlignmentCandidatePair":
        """Return the pair with the roles of A and B exchanged."""

        return replace(
            self,
            candidate_A=self.candidate_B,
            candidate_B=self.candidate_A,
            T_SB_SA_init=np.linalg.inv(self.T_SB_SA_init),
        )

    def __str__(self) -> str:
        return f"AlignmentCandidatePair\n  A: {self.candidate_A}\n  B: {self.candidate_B}"


# Insertion order is priority order: earlier pairs win when a strategy must choose.
AlignmentCandidatePairs = List[AlignmentCandidatePair]


def make_candidate_pair(
    vertex_id_A: Optional[VertexId],
    vertex_id_B: Optional[VertexId],
    *,
    valid: bool = True,
    candidate_type: CandidateType = CandidateType.UNKNOWN,
) -> AlignmentCandidatePair:
    """Build a pair from two vertex ids, mostly for drivers and tests."""

    return AlignmentCandidatePair(
        AlignmentCandidate(vertex_id_A, valid=valid, candidate_type=candidate_type),
        AlignmentCandidate(vertex_id_B, valid=valid, candidate_type=candidate_type),
    )
