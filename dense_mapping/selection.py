"""Entry point tying the quality and strategy filters together."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

import numpy as np

from .candidates import AlignmentCandidatePairs
from .config import SelectionConfig
from .map import MapQueryFacade
from .quality import QualityFilterReport, filter_candidates_based_on_quality
from .strategy import StrategyFilterReport, filter_candidates_based_on_strategy

logger = logging.getLogger(__name__)


@dataclass
class SelectionReport:
    quality: QualityFilterReport
    strategy: StrategyFilterReport

    @property
    def num_selected(self) -> int:
        return self.strategy.num_candidates_after


def select_alignment_candidate_pairs_with_report(
    config: SelectionConfig,
    map_: MapQueryFacade,
    candidates: AlignmentCandidatePairs,
    rng: Optional[np.random.Generator] = None,
) -> SelectionReport:
    if map_ is None:
        raise ValueError("select_alignment_candidate_pairs requires a map")
    if candidates is None:
        raise ValueError("select_alignment_candidate_pairs requires a candidate list")

    # Quality first so the strategy only sees candidates worth verifying.
    quality = filter_candidates_based_on_quality(config, map_, candidates)
    strategy = filter_candidates_based_on_strategy(config, map_, candidates, rng)

    report = SelectionReport(quality, strategy)
    logger.info(
        "Selected %d of %d alignment candidate pair(s)",
        report.num_selected,
        quality.num_candidates_before,
    )
    return report


def select_alignment_candidate_pairs(
    config: SelectionConfig,
    map_: MapQueryFacade,
    candidates: AlignmentCandidatePairs,
    rng: Optional[np.random.Generator] = None,
) -> bool:
    """Filter ``candidates`` in place and purge stale constraints from ``map_``.

    Always returns ``True``; map inconsistencies raise instead.
    """

    select_alignment_candidate_pairs_with_report(config, map_, candidates, rng)
    return True
