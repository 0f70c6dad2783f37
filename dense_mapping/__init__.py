from .candidates import (
    AlignmentCandidate,
    AlignmentCandidatePair,
    AlignmentCandidatePairs,
    CandidateType,
    EdgeId,
    EdgeIdSet,
    VertexId,
    make_candidate_pair,
)
from .config import (
    FilterStrategy,
    SelectionConfig,
    SelectionConfigError,
    get_default_selection_config,
    set_default_selection_config,
)
from .map import (
    Edge,
    EdgeType,
    LoopClosureEdge,
    MapConsistencyError,
    MapQueryFacade,
    PoseGraphMap,
    Vertex,
)
from .quality import QualityFilterReport, filter_candidates_based_on_quality, has_good_loop_closure_edge
from .strategy import (
    StrategyFilterReport,
    filter_candidates_based_on_distance,
    filter_candidates_based_on_strategy,
    filter_candidates_randomly,
)
from .selection import (
    SelectionReport,
    select_alignment_candidate_pairs,
    select_alignment_candidate_pairs_with_report,
)
from .scene import Scene, SceneFormatError, dump_scene, load_scene, scene_from_dict, scene_to_dict

__all__ = [
    'AlignmentCandidate',
    'AlignmentCandidatePair',
    'AlignmentCandidatePairs',
    'CandidateType',
    'EdgeId',
    'EdgeIdSet',
    'VertexId',
    'make_candidate_pair',
    'FilterStrategy',
    'SelectionConfig',
    'SelectionConfigError',
    'get_default_selection_config',
    'set_default_selection_config',
    'Edge',
    'EdgeType',
    'LoopClosureEdge',
    'MapConsistencyError',
    'MapQueryFacade',
    'PoseGraphMap',
    'Vertex',
    'QualityFilterReport',
    'filter_candidates_based_on_quality',
    'has_good_loop_closure_edge',
    'StrategyFilterReport',
    'filter_candidates_based_on_distance',
    'filter_candidates_based_on_strategy',
    'filter_candidates_randomly',
    'SelectionReport',
    'select_alignment_candidate_pairs',
    'select_alignment_candidate_pairs_with_report',
    'Scene',
    'SceneFormatError',
    'dump_scene',
    'load_scene',
    'scene_from_dict',
    'scene_to_dict',
]
