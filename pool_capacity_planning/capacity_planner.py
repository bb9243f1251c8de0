# -*- coding: utf-8 -*-
import logging
from pathlib import Path
from typing import Optional
from typing import Sequence
from typing import Union

from pool_capacity_planning.distribution import plan_distribution
from pool_capacity_planning.erasure_code import DefaultParityPolicy
from pool_capacity_planning.erasure_code import evaluate_erasure_code
from pool_capacity_planning.erasure_code import LargeClusterParityPolicy
from pool_capacity_planning.interface import DistributionResult
from pool_capacity_planning.interface import ErasureCodeResult
from pool_capacity_planning.interface import MemoryPlan
from pool_capacity_planning.interface import ParityOption
from pool_capacity_planning.interface import PlannerConfig
from pool_capacity_planning.interface import PoolPlan
from pool_capacity_planning.interface import Quantity
from pool_capacity_planning.interface import UnitFamily
from pool_capacity_planning.memory import plan_memory
from pool_capacity_planning.units import convert_to_bytes
from pool_capacity_planning.units import parse_number

logger = logging.getLogger(__name__)


def load_config(path: Union[str, Path]) -> PlannerConfig:
    """Reads a PlannerConfig from a JSON file, unset fields keep defaults"""
    with open(path, encoding="utf-8") as fd:
        config = PlannerConfig.model_validate_json(fd.read())
    logger.debug("Loaded planner config from %s", path)
    return config


def generate_pool_name(existing_pools: Sequence[object]) -> str:
    return f"pool-{len(existing_pools)}"


class PoolPlanner:
    """Entry point for sizing a tenant pool.

    Holds only immutable configuration, so one planner can be shared by any
    number of callers.
    """

    def __init__(
        self,
        config: Optional[PlannerConfig] = None,
        parity_policy: Optional[DefaultParityPolicy] = None,
    ):
        self._config = config or PlannerConfig()
        self._parity_policy = parity_policy or LargeClusterParityPolicy.from_config(
            self._config
        )

    @property
    def config(self) -> PlannerConfig:
        return self._config

    @property
    def parity_policy(self) -> DefaultParityPolicy:
        return self._parity_policy

    @staticmethod
    def convert_to_bytes(
        value: Union[int, float, str], unit: str, use_kubernetes_units: bool = False
    ) -> int:
        return convert_to_bytes(value, unit, use_kubernetes_units)

    def plan_distribution(
        self,
        capacity_value: Union[int, float, str],
        capacity_unit: str,
        forced_nodes: int,
        max_cluster_size_bytes: int = 0,
        drives_per_node: int = 0,
    ) -> DistributionResult:
        return plan_distribution(
            capacity_value,
            capacity_unit,
            forced_nodes=forced_nodes,
            max_cluster_size_bytes=max_cluster_size_bytes,
            drives_per_node=drives_per_node,
            config=self._config,
        )

    def plan_memory(
        self,
        requested_gib: Union[int, float],
        pool_capacity_bytes: int,
        max_available_memory_bytes: int,
    ) -> MemoryPlan:
        return plan_memory(
            requested_gib,
            pool_capacity_bytes,
            max_available_memory_bytes,
            config=self._config,
        )

    def evaluate_erasure_code(
        self,
        candidate_parities: Sequence[ParityOption],
        total_drives: int,
        volume_size_bytes: int,
        total_nodes: int,
    ) -> ErasureCodeResult:
        return evaluate_erasure_code(
            candidate_parities,
            total_drives,
            volume_size_bytes,
            total_nodes,
            policy=self._parity_policy,
        )

    def plan_pool(
        self,
        capacity_value: Union[int, float, str],
        capacity_unit: str,
        nodes: int,
        memory_gib: Union[int, float],
        max_memory_bytes: int,
        candidate_parities: Sequence[ParityOption],
        drives_per_node: int = 0,
        max_cluster_size_bytes: int = 0,
        existing_pools: Sequence[object] = (),
    ) -> PoolPlan:
        """Lays out one pool: drives, memory per node and erasure coding.

        The memory tier follows the capacity actually allocated to volumes,
        or the requested capacity when no layout was found. Erasure codes are
        only evaluated for a valid layout.
        """
        distribution = self.plan_distribution(
            capacity_value,
            capacity_unit,
            forced_nodes=nodes,
            max_cluster_size_bytes=max_cluster_size_bytes,
            drives_per_node=drives_per_node,
        )

        if distribution.ok:
            pool_capacity = distribution.total_bytes
        else:
            pool_capacity = convert_to_bytes(
                capacity_value, capacity_unit, use_kubernetes_units=True
            )
        memory = self.plan_memory(memory_gib, pool_capacity, max_memory_bytes)

        if distribution.ok:
            erasure_code = self.evaluate_erasure_code(
                candidate_parities,
                distribution.drive_count,
                distribution.volume_size,
                distribution.nodes,
            )
        else:
            erasure_code = ErasureCodeResult(error_flag=1)

        plan = PoolPlan(
            pool_name=generate_pool_name(existing_pools),
            requested=Quantity(
                value=parse_number(capacity_value),
                unit=capacity_unit,
                family=UnitFamily.kubernetes,
            ),
            distribution=distribution,
            memory=memory,
            erasure_code=erasure_code,
        )
        if not plan.ok:
            logger.info("Pool %s is not feasible: %s", plan.pool_name, plan.errors)
        return plan


planner = PoolPlanner()
