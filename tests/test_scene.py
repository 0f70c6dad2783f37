import json

import pytest

from dense_mapping import (
    EdgeType,
    SceneFormatError,
    SelectionConfig,
    dump_scene,
    load_scene,
    scene_from_dict,
    select_alignment_candidate_pairs_with_report,
)
from dense_mapping.candidates import CandidateType


def _scene_dict():
    return {
        "vertices": [
            {"id": "v0", "position": [0, 0, 0], "mission": "m0"},
            {"id": "v1", "position": [5, 0, 0], "mission": "m1"},
        ],
        "edges": [
            {"id": "lc", "type": "loop_closure", "from": "v0", "to": "v1", "switch_variable": 0.2},
            {"id": "odom", "type": "odometry", "from": "v0", "to": "v1"},
        ],
        "candidates": [
            {
                "A": {"vertex": "v0", "type": "lidar", "timestamp_ns": 10},
                "B": {"vertex": "v1", "valid": False},
            }
        ],
        "options": {"max_number_of_candidates": 2},
    }


def test_scene_from_dict_builds_map_and_candidates():
    scene = scene_from_dict(_scene_dict())

    assert scene.map.num_vertices == 2
    assert scene.map.get_edge_as_loop_closure("lc").switch_variable == pytest.approx(0.2)
    assert scene.map.get_outgoing_edges_of_type("v0", EdgeType.ODOMETRY) == ["odom"]
    pair = scene.candidates[0]
    assert pair.candidate_A.candidate_type is CandidateType.LIDAR
    assert pair.candidate_A.timestamp_ns == 10
    assert not pair.candidate_B.valid
    assert scene.options == {"max_number_of_candidates": 2}


def test_dump_then_load_preserves_scene(tmp_path):
    scene = scene_from_dict(_scene_dict())
    path = tmp_path / "out" / "scene.json"

    dump_scene(scene, path)
    reloaded = load_scene(path)

    assert reloaded.map.has_edge("lc") and reloaded.map.has_edge("odom")
    assert reloaded.candidates == scene.candidates
    assert reloaded.options == scene.options


@pytest.mark.parametrize(
    "mutate, message_part",
    [
        (lambda d: d["vertices"][0].pop("position"), "missing 'position'"),
        (lambda d: d["vertices"][0].update(position=[1, 2]), "three coordinates"),
        (lambda d: d["edges"][0].update(type="gps"), "unknown edge type"),
        (lambda d: d["edges"][0].update(to="v7"), "unknown vertex"),
        (lambda d: d["candidates"][0].pop("B"), "missing 'B'"),
        (lambda d: d["candidates"][0]["A"].update(type="radar"), "unknown candidate type"),
        (lambda d: d["candidates"][0].update(T_SB_SA_init=[[1, 0], [0, 1]]), "4x4"),
    ],
)
def test_malformed_scenes_are_rejected(mutate, message_part):
    data = _scene_dict()
    mutate(data)

    with pytest.raises(SceneFormatError) as exc:
        scene_from_dict(data)

    assert message_part in str(exc.value)


def test_load_scene_rejects_non_object(tmp_path):
    path = tmp_path / "scene.json"
    path.write_text(json.dumps([1, 2, 3]), encoding="utf-8")

    with pytest.raises(SceneFormatError):
        load_scene(path)


def test_integer_ids_match_between_vertices_and_candidates():
    scene = scene_from_dict(
        {
            "vertices": [{"id": 1, "position": [0, 0, 0]}, {"id": 2, "position": [4, 0, 0]}],
            "edges": [{"id": 7, "type": "loop_closure", "from": 1, "to": 2, "switch_variable": 0.1}],
            "candidates": [{"A": {"vertex": 1}, "B": {"vertex": 2}}],
        }
    )

    report = select_alignment_candidate_pairs_with_report(
        SelectionConfig(recompute_invalid_constraints=True), scene.map, scene.candidates
    )

    assert scene.candidates[0].vertex_ids() == ("1", "2")
    assert report.quality.num_invalid_candidates == 0
    assert len(scene.candidates) == 1
    assert report.quality.removed_edge_ids == ["7"]


def test_mixed_edge_id_types_are_removed_together():
    scene = scene_from_dict(
        {
            "vertices": [{"id": "v0", "position": [0, 0, 0]}, {"id": "v1", "position": [4, 0, 0]}],
            "edges": [
                {"id": 7, "type": "loop_closure", "from": "v0", "to": "v1", "switch_variable": 0.1},
                {"id": "x", "type": "loop_closure", "from": "v1", "to": "v0", "switch_variable": 0.2},
            ],
            "candidates": [{"A": {"vertex": "v0"}, "B": {"vertex": "v1"}}],
        }
    )

    report = select_alignment_candidate_pairs_with_report(
        SelectionConfig(recompute_invalid_constraints=True), scene.map, scene.candidates
    )

    assert report.quality.removed_edge_ids == ["7", "x"]
    assert scene.map.num_edges == 0
