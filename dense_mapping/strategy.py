"""Cardinality-limiting candidate filters."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

import numpy as np

from .candidates import AlignmentCandidatePairs
from .config import FilterStrategy, SelectionConfig
from .logging_utils import log_stage
from .map import MapQueryFacade

logger = logging.getLogger(__name__)


@dataclass
class StrategyFilterReport:
    strategy: str
    num_candidates_before: int
    num_candidates_after: int
    num_rejected: int = 0
    num_truncated: int = 0
    skipped: bool = False


def filter_candidates_randomly(
    max_number_of_candidates: int,
    candidates: AlignmentCandidatePairs,
    rng: np.random.Generator,
) -> int:
    """Keep a uniformly drawn subset of at most ``max_number_of_candidates`` pairs.

    Survivors keep their relative order. Returns the number of removed pairs.
    """

    num_candidates = len(candidates)
    num_to_delete = num_candidates - min(num_candidates, max(0, max_number_of_candidates))
    if num_to_delete == 0:
        return 0

    order = rng.permutation(num_candidates)
    deleted = set(order[:num_to_delete].tolist())
    candidates[:] = [pair for idx, pair in enumerate(candidates) if idx not in deleted]
    return num_to_delete


def filter_candidates_based_on_distance(
    max_number_of_candidates: int,
    min_distance_to_next_candidate: float,
    map_: MapQueryFacade,
    candidates: AlignmentCandidatePairs,
) -> StrategyFilterReport:
    """Greedily keep candidates whose A-position is far from all kept ones.

    Candidates are visited in order. Once ``max_number_of_candidates`` are
    accepted the scan stops and the remaining tail is dropped unvisited.
    """

    report = StrategyFilterReport(FilterStrategy.DISTANCE.value, len(candidates), len(candidates))
    if max_number_of_candidates <= 0:
        report.num_truncated = len(candidates)
        candidates[:] = []
        report.num_candidates_after = 0
        return report

    accepted_positions: List[np.ndarray] = []
    retained: AlignmentCandidatePairs = []
    for idx, pair in enumerate(candidates):
        position_A = np.asarray(map_.get_vertex_position(pair.candidate_A.closest_vertex_id), dtype=float)

        if accepted_positions:
            distances = np.linalg.norm(np.vstack(accepted_positions) - position_A, axis=1)
            is_far_enough = bool(np.all(distances > min_distance_to_next_candidate))
        else:
            is_far_enough = True

        if not is_far_enough:
            logger.debug("Rejecting %s, closer than %.3f to an accepted candidate", pair.vertex_ids(), min_distance_to_next_candidate)
            report.num_rejected += 1
            continue

        accepted_positions.append(position_A)
        retained.append(pair)
        if len(accepted_positions) >= max_number_of_candidates:
            report.num_truncated = len(candidates) - idx - 1
            break

    candidates[:] = retained
    report.num_candidates_after = len(candidates)
    return report


def _filter_randomly(
    config: SelectionConfig,
    map_: MapQueryFacade,
    candidates: AlignmentCandidatePairs,
    rng: Optional[np.random.Generator],
) -> StrategyFilterReport:
    report = StrategyFilterReport(FilterStrategy.RANDOM.value, len(candidates), len(candidates))
    if rng is None:
        rng = np.random.default_rng(config.random_seed)
    report.num_rejected = filter_candidates_randomly(config.max_number_of_candidates, candidates, rng)
    report.num_candidates_after = len(candidates)
    return report


def _filter_by_distance(
    config: SelectionConfig,
    map_: MapQueryFacade,
    candidates: AlignmentCandidatePairs,
    rng: Optional[np.random.Generator],
) -> StrategyFilterReport:
    return filter_candidates_based_on_distance(
        config.max_number_of_candidates,
        config.min_distance_to_next_candidate,
        map_,
        candidates,
    )


StrategyFilter = Callable[
    [SelectionConfig, MapQueryFacade, AlignmentCandidatePairs, Optional[np.random.Generator]],
    StrategyFilterReport,
]

STRATEGY_FILTERS: Dict[FilterStrategy, StrategyFilter] = {
    FilterStrategy.RANDOM: _filter_randomly,
    FilterStrategy.DISTANCE: _filter_by_distance,
}


@log_stage(logger)
def filter_candidates_based_on_strategy(
    config: SelectionConfig,
    map_: MapQueryFacade,
    candidates: AlignmentCandidatePairs,
    rng: Optional[np.random.Generator] = None,
) -> StrategyFilterReport:
    """Cap the number of candidates with the configured strategy."""

    if config.max_number_of_candidates < 0:
        return StrategyFilterReport(config.strategy_label, len(candidates), len(candidates), skipped=True)

    if map_ is None or candidates is None:
        raise ValueError("filter_candidates_based_on_strategy requires a map and a candidate list")

    strategy_filter = STRATEGY_FILTERS.get(config.filter_strategy)
    if strategy_filter is None:
        logger.error("Unknown filter strategy %s", config.strategy_label)
        return StrategyFilterReport(config.strategy_label, len(candidates), len(candidates), skipped=True)

    report = strategy_filter(config, map_, candidates, rng)
    logger.info(
        "Strategy '%s' reduced candidate set from %d to %d (rejected=%d, truncated=%d)",
        report.strategy,
        report.num_candidates_before,
        report.num_candidates_after,
        report.num_rejected,
        report.num_truncated,
    )
    return report
