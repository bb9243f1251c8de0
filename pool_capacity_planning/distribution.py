"""Spreads a pool's requested capacity over nodes and drives.

All intermediate sizes are doubles and only the volume size (floor) and the
drives per node (ceiling) are made integral, so the same inputs are feasible
or infeasible exactly as they are in the console.
"""
import logging
import math
from typing import Any
from typing import Optional
from typing import Union

from pool_capacity_planning.interface import DistributionResult
from pool_capacity_planning.interface import PlannerConfig
from pool_capacity_planning.units import to_bytes

logger = logging.getLogger(__name__)

INVALID_DATA = "Some provided data is invalid, please try again."
POOL_TOO_SMALL = "The pool size must be greater than 1Gi"
INVALID_DRIVE_COUNT = "Number of drives per node cannot be negative"
INVALID_NODE_COUNT = "Number of nodes must be at least 1"
UNABLE_TO_ALLOCATE = "We were not able to allocate this server."
DISK_TOO_SMALL = (
    "Disk Size with this combination would be less than 1Gi, "
    "please try another combination"
)

_DEFAULT_CONFIG = PlannerConfig()


def _as_float(value: Any) -> float:
    if isinstance(value, bool):
        return math.nan
    try:
        return float(value)
    except (TypeError, ValueError):
        return math.nan


def _failed(message: str) -> DistributionResult:
    logger.debug("Distribution rejected: %s", message)
    return DistributionResult(error_message=message)


def calculate_structure(
    nodes: Union[int, float],
    desired_capacity: Union[int, float],
    max_disk_size: Union[int, float],
    max_cluster_size: Union[int, float],
    drives_per_node: int = 0,
    config: PlannerConfig = _DEFAULT_CONFIG,
) -> DistributionResult:
    """Picks the drives per node and volume size for a fixed node count.

    With drives_per_node == 0 the volume size is the capacity split over at
    least config.min_auto_divisor nodes, capped at max_disk_size, and the
    number of drives follows from it. Otherwise the capacity is split evenly
    over drives_per_node * nodes volumes.

    A fractional drives per node count is rounded up and the volume size is
    shrunk to match; that layout must then fit in max_cluster_size (0 means
    no ceiling, a negative one is invalid data). Volumes smaller than
    config.min_storage_bytes are rejected.
    """
    n_nodes, capacity, max_disk = (
        _as_float(v) for v in (nodes, desired_capacity, max_disk_size)
    )
    max_cluster = _as_float(max_cluster_size)
    if math.isnan(max_cluster) or max_cluster < 0 or not all(
        math.isfinite(n) for n in (n_nodes, capacity, max_disk)
    ):
        return _failed(INVALID_DATA)
    if n_nodes < 1 or not n_nodes.is_integer():
        return _failed(INVALID_NODE_COUNT)

    volume_size = 0
    total_volumes = 0.0
    volumes_per_node = 0.0

    if drives_per_node == 0:
        volume_size = math.floor(
            min(capacity / max(config.min_auto_divisor, n_nodes), max_disk)
        )
        if volume_size == 0:
            return _failed(DISK_TOO_SMALL)
        total_volumes = capacity / volume_size
        volumes_per_node = total_volumes / n_nodes
    else:
        volumes_per_node = float(drives_per_node)
        total_volumes = volumes_per_node * n_nodes
        volume_size = math.floor(capacity / total_volumes)

    if volumes_per_node % 1 > 0:
        # Round the drives up and shrink every volume to keep the capacity
        volumes_per_node = float(math.ceil(volumes_per_node))
        total_volumes = volumes_per_node * n_nodes
        volume_size = math.floor(capacity / total_volumes)
        logger.debug(
            "Rounded up to %d drives per node of %d bytes",
            volumes_per_node,
            volume_size,
        )

        allocated = volume_size * volumes_per_node * n_nodes
        if max_cluster > 0 and allocated > max_cluster:
            return _failed(UNABLE_TO_ALLOCATE)

    if volume_size < config.min_storage_bytes:
        return _failed(DISK_TOO_SMALL)

    per_node = int(volumes_per_node)
    return DistributionResult(
        nodes=int(n_nodes),
        drive_count=per_node * int(n_nodes),
        drives_per_node=per_node,
        volume_size=int(volume_size),
    )


def plan_distribution(
    capacity_value: Union[int, float, str],
    capacity_unit: str,
    forced_nodes: Union[int, float] = 0,
    max_cluster_size_bytes: Union[int, float] = 0,
    drives_per_node: Union[int, float] = 0,
    config: Optional[PlannerConfig] = None,
) -> DistributionResult:
    """Plans how a pool of capacity_value capacity_unit (Kubernetes units)
    is laid out over forced_nodes nodes.

    drives_per_node of 0 lets the planner pick the drive count. Errors are
    reported in DistributionResult.error_message, never raised.
    """
    config = config or _DEFAULT_CONFIG
    requested = to_bytes(capacity_value, capacity_unit, family=True)
    if math.isfinite(requested):
        requested = math.trunc(requested)

    if requested < config.min_storage_bytes:
        return _failed(POOL_TOO_SMALL)

    drives = _as_float(drives_per_node)
    if math.isnan(drives):
        return _failed(INVALID_DATA)
    if drives < 0 or not math.isfinite(drives) or not drives.is_integer():
        return _failed(INVALID_DRIVE_COUNT)

    logger.debug(
        "Planning %s bytes over %s nodes with %s drives per node",
        requested,
        forced_nodes,
        drives_per_node or "automatic",
    )
    return calculate_structure(
        nodes=forced_nodes,
        desired_capacity=requested,
        max_disk_size=config.max_volume_bytes,
        max_cluster_size=max_cluster_size_bytes,
        drives_per_node=int(drives),
        config=config,
    )
