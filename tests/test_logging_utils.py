import logging

import numpy as np
import pytest

from dense_mapping import PoseGraphMap, SelectionConfig, filter_candidates_based_on_quality, make_candidate_pair
from dense_mapping.logging_utils import log_stage, summarize


def test_summarize_candidate_lists_is_compact():
    pairs = [make_candidate_pair(f"a{idx}", f"b{idx}") for idx in range(5)]
    pairs.append(make_candidate_pair("x", "y", valid=False))

    text = summarize(pairs)

    assert text.startswith("[6 pair(s): (a0 <-> b0)")
    assert "3 more" in text
    assert summarize(pairs[-1]) == "(x <-> y, invalid)"


def test_summarize_arrays_and_maps():
    pose_graph = PoseGraphMap()
    pose_graph.add_vertex("v0", (0.0, 0.0, 0.0))

    assert summarize(np.array([1.0, 2.0, 3.0])).endswith("values=[1.0, 2.0, 3.0]")
    assert "min=0, max=15" in summarize(np.arange(16.0))
    assert summarize(pose_graph) == "PoseGraphMap(vertices=1, edges=0)"
    assert summarize({"e2", "e1"}) == "{'e1', 'e2'}"


def test_log_stage_logs_candidates_and_report(caplog):
    pose_graph = PoseGraphMap()
    pose_graph.add_vertex("v0", (0.0, 0.0, 0.0))
    pose_graph.add_vertex("v1", (3.0, 0.0, 0.0))
    candidates = [make_candidate_pair("v0", "v1")]

    with caplog.at_level(logging.DEBUG, logger="dense_mapping.quality"):
        filter_candidates_based_on_quality(SelectionConfig(), pose_graph, candidates)

    assert "filter_candidates_based_on_quality <- PoseGraphMap(vertices=2, edges=0); [1 pair(s): (v0 <-> v1)]" in caplog.text
    assert "QualityFilterReport(num_candidates_before=1, num_candidates_after=1" in caplog.text


def test_log_stage_is_silent_above_debug(caplog):
    logger = logging.getLogger("dense_mapping.tests.stage")

    @log_stage(logger)
    def stage(candidates):
        return len(candidates)

    with caplog.at_level(logging.INFO, logger="dense_mapping.tests.stage"):
        assert stage([]) == 0

    assert caplog.text == ""


def test_log_stage_propagates_errors():
    logger = logging.getLogger("dense_mapping.tests.stage")

    @log_stage(logger)
    def stage():
        raise KeyError("boom")

    with pytest.raises(KeyError):
        stage()
