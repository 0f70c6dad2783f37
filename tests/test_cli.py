import json

import dense_mapping.__main__ as cli


def _write_scene(path, options=None):
    vertices = []
    candidates = []
    for idx, z in enumerate([0.0, 0.5, 10.0, 10.5, 20.0]):
        vertices.append({"id": f"a{idx}", "position": [0.0, 0.0, z]})
        vertices.append({"id": f"b{idx}", "position": [5.0, 0.0, z]})
        candidates.append({"A": {"vertex": f"a{idx}"}, "B": {"vertex": f"b{idx}"}})
    edges = [
        {"id": "lc_bad", "type": "loop_closure", "from": "a4", "to": "b4", "switch_variable": 0.1},
    ]
    path.write_text(
        json.dumps({"vertices": vertices, "edges": edges, "candidates": candidates, "options": options or {}}),
        encoding="utf-8",
    )


def test_main_runs_distance_selection_and_writes_output(tmp_path, capsys):
    scene_path = tmp_path / "scene.json"
    output_path = tmp_path / "out" / "selected.json"
    _write_scene(scene_path)

    cli.main(
        [
            str(scene_path),
            "--max-number-of-candidates",
            "3",
            "--filter-strategy",
            "distance",
            "--min-distance-to-other-candidates",
            "1.0",
            "--output",
            str(output_path),
        ]
    )

    out = capsys.readouterr().out
    assert "Candidates: 5 -> 3" in out
    assert "Removed constraints: 1" in out
    assert "a0 <-> b0" in out and "a2 <-> b2" in out and "a4 <-> b4" in out

    written = json.loads(output_path.read_text(encoding="utf-8"))
    assert [entry["A"]["vertex"] for entry in written["candidates"]] == ["a0", "a2", "a4"]
    assert written["edges"] == []


def test_command_line_flags_override_scene_options(tmp_path, monkeypatch):
    scene_path = tmp_path / "scene.json"
    _write_scene(scene_path, options={"max_number_of_candidates": 1, "filter_strategy": "random"})

    configs = []
    real_select = cli.select_alignment_candidate_pairs_with_report

    def _select(config, map_, candidates):
        configs.append(config)
        return real_select(config, map_, candidates)

    monkeypatch.setattr(cli, "select_alignment_candidate_pairs_with_report", _select)

    cli.main([str(scene_path), "--no-recompute-invalid-constraints", "--seed", "3"])

    [config] = configs
    assert config.max_number_of_candidates == 1
    assert config.strategy_label == "random"
    assert not config.recompute_invalid_constraints
    assert config.random_seed == 3
