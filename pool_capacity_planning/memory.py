import logging
import math
from typing import Optional
from typing import Union

from pool_capacity_planning.distribution import INVALID_DATA
from pool_capacity_planning.interface import MemoryPlan
from pool_capacity_planning.interface import PlannerConfig
from pool_capacity_planning.units import convert_to_bytes
from pool_capacity_planning.units import parse_int
from pool_capacity_planning.units import parse_number

logger = logging.getLogger(__name__)

NO_MEMORY_AVAILABLE = "There is no memory available for the selected number of nodes"
NOT_ENOUGH_MEMORY = "There are not enough memory resources available"
REQUEST_TOO_SMALL = "The requested memory size must be greater than 2Gi"
REQUEST_TOO_LARGE = (
    "The requested memory is greater than the max available memory for the "
    "selected number of nodes"
)

_DEFAULT_CONFIG = PlannerConfig()


def memory_limit(
    request_bytes: int,
    pool_capacity_bytes: int,
    config: Optional[PlannerConfig] = None,
) -> int:
    """Raises the limit to the minimum of the first tier the pool reaches.

    Pools below every tier (under 1 TiB by default) run with the limit equal
    to the request.
    """
    config = config or _DEFAULT_CONFIG
    for tier in config.memory_tiers:
        if pool_capacity_bytes >= tier.min_capacity_bytes:
            logger.debug(
                "Pool of %d bytes uses the %d byte memory tier",
                pool_capacity_bytes,
                tier.min_limit_bytes,
            )
            return max(request_bytes, tier.min_limit_bytes)
    return request_bytes


def plan_memory(
    requested_gib: Union[int, float],
    pool_capacity_bytes: Union[int, str],
    max_available_memory_bytes: Union[int, float, str],
    config: Optional[PlannerConfig] = None,
) -> MemoryPlan:
    """Memory request and limit for every node of a pool.

    requested_gib is what the operator asked for per node, in GiB. The
    request must be at least config.min_memory_bytes and fit in
    max_available_memory_bytes; the limit then follows the pool's capacity
    tier.
    """
    config = config or _DEFAULT_CONFIG
    request = convert_to_bytes(requested_gib, "Gi", use_kubernetes_units=True)
    max_memory = parse_number(max_available_memory_bytes)

    if not math.isfinite(max_memory):
        return MemoryPlan(error_message=INVALID_DATA)
    if max_memory == 0:
        return MemoryPlan(error_message=NO_MEMORY_AVAILABLE)
    if max_memory < config.min_memory_bytes:
        return MemoryPlan(error_message=NOT_ENOUGH_MEMORY)
    if request < config.min_memory_bytes:
        return MemoryPlan(error_message=REQUEST_TOO_SMALL)
    if request > max_memory:
        return MemoryPlan(error_message=REQUEST_TOO_LARGE)

    capacity = parse_int(pool_capacity_bytes)
    return MemoryPlan(
        request_bytes=request,
        limit_bytes=memory_limit(request, capacity, config),
    )
