"""Filtering of alignment candidates against prior loop-closure constraints."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List

from .candidates import AlignmentCandidatePair, AlignmentCandidatePairs, EdgeId, EdgeIdSet, VertexId
from .config import SelectionConfig
from .logging_utils import log_stage
from .map import EdgeType, MapConsistencyError, MapQueryFacade

logger = logging.getLogger(__name__)


@dataclass
class QualityFilterReport:
    num_candidates_before: int
    num_candidates_after: int
    num_invalid_candidates: int = 0
    num_good_prior_edges: int = 0
    removed_edge_ids: List[EdgeId] = field(default_factory=list)

    @property
    def num_removed_edges(self) -> int:
        return len(self.removed_edge_ids)


def has_good_loop_closure_edge(
    config: SelectionConfig,
    map_: MapQueryFacade,
    vertex_id_from: VertexId,
    vertex_id_to: VertexId,
    constraints_to_delete: EdgeIdSet,
) -> bool:
    """Return whether a loop closure ``from -> to`` with a good switch variable exists.

    Every matching edge is inspected, also after a good one was found, and
    edges that should be recomputed are added to ``constraints_to_delete``.
    The map itself is not modified.
    """

    if constraints_to_delete is None:
        raise ValueError("constraints_to_delete must be a set")

    has_good_edge = False
    for edge_id in map_.get_outgoing_edges_of_type(vertex_id_from, EdgeType.LOOP_CLOSURE):
        if not map_.has_edge(edge_id):
            raise MapConsistencyError(
                f"Vertex '{vertex_id_from}' lists loop closure '{edge_id}' that is not in the map"
            )
        edge = map_.get_edge_as_loop_closure(edge_id)
        if edge.from_vertex != vertex_id_from:
            raise MapConsistencyError(
                f"Loop closure '{edge_id}' starts at '{edge.from_vertex}', expected '{vertex_id_from}'"
            )

        if edge.to_vertex != vertex_id_to:
            continue

        is_good_edge = edge.switch_variable >= config.constraint_min_switch_variable_value
        if (not is_good_edge and config.recompute_invalid_constraints) or config.recompute_all_constraints:
            constraints_to_delete.add(edge_id)

        has_good_edge = has_good_edge or is_good_edge

    return has_good_edge


def _is_selectable(pair: AlignmentCandidatePair, map_: MapQueryFacade) -> bool:
    if not pair.is_valid():
        return False
    return all(map_.has_vertex(vertex_id) for vertex_id in pair.vertex_ids())


@log_stage(logger)
def filter_candidates_based_on_quality(
    config: SelectionConfig,
    map_: MapQueryFacade,
    candidates: AlignmentCandidatePairs,
) -> QualityFilterReport:
    """Drop invalid candidates and those already backed by a good constraint.

    Stale constraints are collected during the scan and only removed from the
    map once every candidate has been looked at.
    """

    if map_ is None or candidates is None:
        raise ValueError("filter_candidates_based_on_quality requires a map and a candidate list")

    report = QualityFilterReport(len(candidates), len(candidates))
    logger.info("Selecting candidates based on quality from %d initial candidates", report.num_candidates_before)

    constraints_to_delete: EdgeIdSet = set()
    retained: AlignmentCandidatePairs = []
    for pair in candidates:
        if not _is_selectable(pair, map_):
            logger.debug("Invalid %s", pair)
            report.num_invalid_candidates += 1
            continue

        vertex_id_A, vertex_id_B = pair.vertex_ids()
        # Both directions always run so stale edges either way get queued.
        good_A_to_B = has_good_loop_closure_edge(config, map_, vertex_id_A, vertex_id_B, constraints_to_delete)
        good_B_to_A = has_good_loop_closure_edge(config, map_, vertex_id_B, vertex_id_A, constraints_to_delete)

        if good_A_to_B or good_B_to_A:
            report.num_good_prior_edges += 1
            if not config.recompute_all_constraints:
                logger.debug("Skipping %s <-> %s, good prior constraint exists", vertex_id_A, vertex_id_B)
                continue

        retained.append(pair)

    candidates[:] = retained

    if config.recompute_all_constraints or config.recompute_invalid_constraints:
        for edge_id in sorted(constraints_to_delete):
            map_.remove_edge(edge_id)
            report.removed_edge_ids.append(edge_id)

    report.num_candidates_after = len(candidates)
    logger.info(
        "Reduced candidate set from %d to %d based on %d good prior constraints and removed %d bad prior constraints",
        report.num_candidates_before,
        report.num_candidates_after,
        report.num_good_prior_edges,
        report.num_removed_edges,
    )
    return report
