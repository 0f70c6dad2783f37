"""JSON scene files: a pose graph plus the candidate pairs proposed on it."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Union

import numpy as np

from .candidates import AlignmentCandidate, AlignmentCandidatePair, AlignmentCandidatePairs, CandidateType
from .map import EdgeType, LoopClosureEdge, MapConsistencyError, PoseGraphMap


class SceneFormatError(ValueError):
    pass


@dataclass
class Scene:
    map: PoseGraphMap
    candidates: AlignmentCandidatePairs
    options: Dict[str, Any] = field(default_factory=dict)


def _require(entry: Mapping[str, Any], key: str, where: str) -> Any:
    if key not in entry:
        raise SceneFormatError(f"{where}: missing '{key}'")
    return entry[key]


def _parse_candidate(entry: Mapping[str, Any], where: str) -> AlignmentCandidate:
    try:
        candidate_type = CandidateType(entry.get("type", CandidateType.UNKNOWN.value))
    except ValueError as exc:
        raise SceneFormatError(f"{where}: unknown candidate type {entry.get('type')!r}") from exc
    return AlignmentCandidate(
        closest_vertex_id=None if entry.get("vertex") is None else str(entry["vertex"]),
        valid=bool(entry.get("valid", True)),
        mission_id=entry.get("mission"),
        timestamp_ns=int(entry.get("timestamp_ns", 0)),
        candidate_type=candidate_type,
    )


def scene_from_dict(data: Mapping[str, Any]) -> Scene:
    pose_graph = PoseGraphMap()
    try:
        for idx, vertex in enumerate(data.get("vertices", [])):
            where = f"vertices[{idx}]"
            position = _require(vertex, "position", where)
            if len(position) != 3:
                raise SceneFormatError(f"{where}: position must have three coordinates")
            pose_graph.add_vertex(str(_require(vertex, "id", where)), position, vertex.get("mission"))

        for idx, edge in enumerate(data.get("edges", [])):
            where = f"edges[{idx}]"
            try:
                edge_type = EdgeType(edge.get("type", EdgeType.LOOP_CLOSURE.value))
            except ValueError as exc:
                raise SceneFormatError(f"{where}: unknown edge type {edge.get('type')!r}") from exc
            from_vertex = str(_require(edge, "from", where))
            to_vertex = str(_require(edge, "to", where))
            edge_id = None if edge.get("id") is None else str(edge["id"])
            if edge_type is EdgeType.LOOP_CLOSURE:
                pose_graph.add_loop_closure_edge(
                    from_vertex,
                    to_vertex,
                    switch_variable=float(edge.get("switch_variable", 1.0)),
                    edge_id=edge_id,
                )
            else:
                pose_graph.add_edge(from_vertex, to_vertex, edge_type, edge_id=edge_id)
    except MapConsistencyError as exc:
        raise SceneFormatError(str(exc)) from exc

    candidates: AlignmentCandidatePairs = []
    for idx, entry in enumerate(data.get("candidates", [])):
        where = f"candidates[{idx}]"
        pair = AlignmentCandidatePair(
            _parse_candidate(_require(entry, "A", where), f"{where}.A"),
            _parse_candidate(_require(entry, "B", where), f"{where}.B"),
        )
        if "T_SB_SA_init" in entry:
            T = np.asarray(entry["T_SB_SA_init"], dtype=float)
            if T.shape != (4, 4):
                raise SceneFormatError(f"{where}: T_SB_SA_init must be 4x4")
            pair = AlignmentCandidatePair(pair.candidate_A, pair.candidate_B, T)
        candidates.append(pair)

    return Scene(pose_graph, candidates, dict(data.get("options", {})))


def load_scene(path: Union[str, Path]) -> Scene:
    with open(path, encoding="utf-8") as fin:
        try:
            data = json.load(fin)
        except json.JSONDecodeError as exc:
            raise SceneFormatError(f"{path}: {exc}") from exc
    if not isinstance(data, dict):
        raise SceneFormatError(f"{path}: top-level JSON value must be an object")
    return scene_from_dict(data)


def _candidate_to_dict(candidate: AlignmentCandidate) -> Dict[str, Any]:
    return {
        "vertex": candidate.closest_vertex_id,
        "valid": candidate.valid,
        "mission": candidate.mission_id,
        "timestamp_ns": candidate.timestamp_ns,
        "type": candidate.candidate_type.value,
    }


def scene_to_dict(scene: Scene) -> Dict[str, Any]:
    vertices = [
        {"id": v.vertex_id, "position": v.position.tolist(), "mission": v.mission_id}
        for v in scene.map.vertices()
    ]
    edges: List[Dict[str, Any]] = []
    for edge_type in EdgeType:
        for edge in scene.map.edges_of_type(edge_type):
            entry: Dict[str, Any] = {
                "id": edge.edge_id,
                "type": edge.edge_type.value,
                "from": edge.from_vertex,
                "to": edge.to_vertex,
            }
            if isinstance(edge, LoopClosureEdge):
                entry["switch_variable"] = edge.switch_variable
            edges.append(entry)
    candidates = [
        {
            "A": _candidate_to_dict(pair.candidate_A),
            "B": _candidate_to_dict(pair.candidate_B),
            "T_SB_SA_init": np.asarray(pair.T_SB_SA_init).tolist(),
        }
        for pair in scene.candidates
    ]
    return {"vertices": vertices, "edges": edges, "candidates": candidates, "options": dict(scene.options)}


def dump_scene(scene: Scene, path: Union[str, Path]) -> None:
    output_path = Path(path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(json.dumps(scene_to_dict(scene), indent=2), encoding="utf-8")
