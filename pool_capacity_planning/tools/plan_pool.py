import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List
from typing import Optional
from typing import Sequence

from pydantic import ValidationError

from pool_capacity_planning.capacity_planner import load_config
from pool_capacity_planning.capacity_planner import PoolPlanner
from pool_capacity_planning.interface import IEC_UNITS
from pool_capacity_planning.interface import KUBERNETES_UNITS
from pool_capacity_planning.units import convert_to_bytes
from pool_capacity_planning.units import nice_bytes


def parse_parities(value: str) -> List[str]:
    """'EC:4, EC:3,EC:2' -> ['EC:4', 'EC:3', 'EC:2']"""
    return [p.strip() for p in value.split(",") if p.strip()]


def parse_size(value: str) -> int:
    """A byte count, optionally with a binary suffix: 4096, 64Gi, 2TiB"""
    value = value.strip()
    for unit in sorted(set(IEC_UNITS + KUBERNETES_UNITS), key=len, reverse=True):
        if value.endswith(unit) and value[: -len(unit)].strip():
            number = value[: -len(unit)].strip()
            try:
                float(number)
            except ValueError as e:
                raise argparse.ArgumentTypeError(f"Invalid size {value!r}") from e
            return convert_to_bytes(
                number, unit, use_kubernetes_units=unit in KUBERNETES_UNITS
            )
    try:
        return int(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"Invalid size {value!r}") from e


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="plan-pool",
        description=(
            "Lay out an erasure coded storage pool: drives per node, volume size, "
            "memory per node and the usable capacity of each parity"
        ),
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument("capacity", type=float, help="Requested pool capacity")
    parser.add_argument(
        "unit", choices=KUBERNETES_UNITS, help="Unit of the requested capacity"
    )
    parser.add_argument("--nodes", type=int, required=True, help="Number of nodes")
    parser.add_argument(
        "--drives-per-node",
        type=int,
        default=0,
        help="Drives on every node, 0 to size them automatically",
    )
    parser.add_argument(
        "--memory-gib", type=float, default=2, help="Memory requested per node in GiB"
    )
    parser.add_argument(
        "--max-memory",
        type=parse_size,
        required=True,
        help="Most memory a node can offer, e.g. 64Gi",
    )
    parser.add_argument(
        "--max-cluster-size",
        type=parse_size,
        default=0,
        help="Ceiling for the allocated capacity, 0 for none",
    )
    parser.add_argument(
        "--parities",
        type=parse_parities,
        default=["EC:4", "EC:3", "EC:2"],
        help="Comma-separated parity options, highest first",
    )
    parser.add_argument(
        "--config", type=Path, default=None, help="JSON file with planner settings"
    )
    parser.add_argument(
        "--human", action="store_true", help="Print a summary instead of JSON"
    )
    parser.add_argument("--debug", action="store_true", help="Show verbose output")
    return parser


def _summary(plan) -> str:
    lines = [f"{plan.pool_name}:"]
    dist = plan.distribution
    if dist.ok:
        lines.append(
            f"  {dist.nodes} nodes x {dist.drives_per_node} drives of "
            f"{nice_bytes(dist.volume_size)} ({nice_bytes(dist.total_bytes)} raw)"
        )
    if plan.memory.ok:
        lines.append(
            f"  memory request {nice_bytes(plan.memory.request_bytes)}, "
            f"limit {nice_bytes(plan.memory.limit_bytes)}"
        )
    if plan.erasure_code.ok:
        for factor in plan.erasure_code.per_option_factors:
            marker = "*" if factor.parity == plan.erasure_code.default_parity else " "
            lines.append(
                f" {marker}{factor.parity}: {nice_bytes(factor.max_usable_capacity)} "
                f"usable, tolerates {factor.max_failure_tolerance} drive failures"
            )
    for error in plan.errors:
        lines.append(f"  ERROR: {error}")
    return "\n".join(lines)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        config = load_config(args.config) if args.config is not None else None
    except (OSError, ValidationError) as e:
        print(f"ERROR: Unable to load config {args.config}: {e}", file=sys.stderr)
        return 2

    plan = PoolPlanner(config=config).plan_pool(
        capacity_value=args.capacity,
        capacity_unit=args.unit,
        nodes=args.nodes,
        memory_gib=args.memory_gib,
        max_memory_bytes=args.max_memory,
        candidate_parities=args.parities,
        drives_per_node=args.drives_per_node,
        max_cluster_size_bytes=args.max_cluster_size,
    )

    if args.human:
        print(_summary(plan))
    else:
        print(json.dumps(plan.model_dump(), indent=2))
    return 0 if plan.ok else 1


if __name__ == "__main__":
    sys.exit(main())
