import argparse
import logging
import sys
from typing import Any, Dict, Optional, Sequence

from dense_mapping import (
    SelectionConfig,
    dump_scene,
    load_scene,
    select_alignment_candidate_pairs_with_report,
)

logger = logging.getLogger(__name__)


def _configure_logging(level: str) -> None:
    log_level = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(
        level=log_level,
        format="%(levelname)s:%(name)s:%(message)s",
    )


def _options_from_args(args: argparse.Namespace) -> Dict[str, Any]:
    flag_to_option = {
        "recompute_all_constraints": "recompute_all_constraints",
        "recompute_invalid_constraints": "recompute_invalid_constraints",
        "min_switch_variable_value": "constraint_min_switch_variable_value",
        "max_number_of_candidates": "max_number_of_candidates",
        "filter_strategy": "filter_strategy",
        "min_distance_to_other_candidates": "min_distance_to_next_candidate",
        "seed": "random_seed",
    }
    options: Dict[str, Any] = {}
    for flag, option in flag_to_option.items():
        value = getattr(args, flag)
        if value is not None:
            options[option] = value
    return options


def main(argv: Optional[Sequence[str]] = None) -> None:
    parser = argparse.ArgumentParser(description="Select alignment candidate pairs for dense mapping")
    parser.add_argument("path", help="Path to a JSON scene with vertices, edges and candidates")
    parser.add_argument(
        "--log-level",
        default="INFO",
        help="Logging level (default: INFO)",
    )
    parser.add_argument(
        "--recompute-all-constraints",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Recompute every prior loop-closure constraint touched by a candidate",
    )
    parser.add_argument(
        "--recompute-invalid-constraints",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Recompute prior constraints whose switch variable is below the threshold",
    )
    parser.add_argument(
        "--min-switch-variable-value",
        type=float,
        help="Minimum switch variable for a prior constraint to count as good",
    )
    parser.add_argument(
        "--max-number-of-candidates",
        type=int,
        help="Cap on selected candidates; negative disables the cap",
    )
    parser.add_argument(
        "--filter-strategy",
        help="Cardinality filter strategy: random or distance",
    )
    parser.add_argument(
        "--min-distance-to-other-candidates",
        type=float,
        help="Minimum separation between candidates for the distance strategy",
    )
    parser.add_argument(
        "--seed",
        type=int,
        help="Random seed for the random strategy (default: fresh entropy)",
    )
    parser.add_argument(
        "--output",
        help="Write the filtered scene (purged map and selected candidates) to this path",
    )
    args = parser.parse_args(argv)

    _configure_logging(args.log_level)

    logger.info("Loading scene from %s", args.path)
    scene = load_scene(args.path)

    options = dict(scene.options)
    options.update(_options_from_args(args))
    config = SelectionConfig.from_options(options)
    logger.info("Selection config: %s", config)

    report = select_alignment_candidate_pairs_with_report(config, scene.map, scene.candidates)

    print(f"Candidates: {report.quality.num_candidates_before} -> {report.num_selected}")
    print(f"Invalid candidates: {report.quality.num_invalid_candidates}")
    print(f"Good prior constraints: {report.quality.num_good_prior_edges}")
    print(f"Removed constraints: {report.quality.num_removed_edges}")
    if report.quality.removed_edge_ids:
        print(f"  {', '.join(report.quality.removed_edge_ids)}")
    if report.strategy.skipped:
        print(f"Strategy: {report.strategy.strategy} (not applied)")
    else:
        print(
            f"Strategy: {report.strategy.strategy} "
            f"(rejected={report.strategy.num_rejected}, truncated={report.strategy.num_truncated})"
        )
    print("Selected pairs:")
    for pair in scene.candidates:
        vertex_id_A, vertex_id_B = pair.vertex_ids()
        print(f"  {vertex_id_A} <-> {vertex_id_B}")

    if args.output:
        logger.info("Writing filtered scene to %s", args.output)
        dump_scene(scene, args.output)
        print(f"Filtered scene written to {args.output}")


if __name__ == "__main__":
    main(sys.argv[1:])
