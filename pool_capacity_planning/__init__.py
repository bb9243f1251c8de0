from pool_capacity_planning.capacity_planner import planner
from pool_capacity_planning.capacity_planner import PoolPlanner
from pool_capacity_planning.distribution import plan_distribution
from pool_capacity_planning.erasure_code import evaluate_erasure_code
from pool_capacity_planning.memory import plan_memory
from pool_capacity_planning.units import convert_to_bytes

__all__ = [
    "convert_to_bytes",
    "evaluate_erasure_code",
    "plan_distribution",
    "plan_memory",
    "planner",
    "PoolPlanner",
]
