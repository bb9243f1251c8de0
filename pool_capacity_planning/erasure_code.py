import logging
from abc import ABC
from abc import abstractmethod
from typing import List
from typing import Optional
from typing import Sequence

import numpy as np

from pool_capacity_planning.interface import ErasureCodeResult
from pool_capacity_planning.interface import InvalidParityError
from pool_capacity_planning.interface import parse_parity
from pool_capacity_planning.interface import ParityOption
from pool_capacity_planning.interface import PlannerConfig
from pool_capacity_planning.interface import StorageFactor

logger = logging.getLogger(__name__)


class DefaultParityPolicy(ABC):
    """Decides which of the evaluated parity options is preselected"""

    @abstractmethod
    def select_default(
        self, candidates: Sequence[ParityOption], total_drives: int, total_nodes: int
    ) -> ParityOption:
        pass


class MaximumParityPolicy(DefaultParityPolicy):
    """Always the first candidate, which callers order as the highest parity"""

    def select_default(
        self, candidates: Sequence[ParityOption], total_drives: int, total_nodes: int
    ) -> ParityOption:
        return candidates[0]


class LargeClusterParityPolicy(MaximumParityPolicy):
    """
    Small clusters default to the highest parity available. Clusters with at
    least min_drives drives over more than min_nodes nodes default to
    large_cluster_parity instead, when it is one of the candidates.
    """

    def __init__(
        self,
        min_drives: int = 8,
        min_nodes: int = 16,
        large_cluster_parity: ParityOption = "EC:4",
    ):
        self.min_drives = min_drives
        self.min_nodes = min_nodes
        self.large_cluster_parity = large_cluster_parity

    @classmethod
    def from_config(cls, config: PlannerConfig) -> "LargeClusterParityPolicy":
        return cls(
            min_drives=config.large_cluster_min_drives,
            min_nodes=config.large_cluster_min_nodes,
            large_cluster_parity=config.large_cluster_parity,
        )

    def select_default(
        self, candidates: Sequence[ParityOption], total_drives: int, total_nodes: int
    ) -> ParityOption:
        if (
            total_drives >= self.min_drives
            and total_nodes > self.min_nodes
            and self.large_cluster_parity in candidates
        ):
            return self.large_cluster_parity
        return super().select_default(candidates, total_drives, total_nodes)


def storage_factors(
    candidates: Sequence[ParityOption],
    stripe_width: int,
    total_drives: int,
    volume_size: int,
) -> List[StorageFactor]:
    """Raw over usable capacity, usable capacity and tolerated drive failures
    for each candidate within a stripe of stripe_width drives"""
    parities = [parse_parity(c) for c in candidates]
    parity = np.asarray(parities, dtype=np.float64)
    factor = stripe_width / (stripe_width - parity)
    raw = float(total_drives) * float(volume_size)
    usable = np.floor(raw / factor)
    tolerance = total_drives - np.floor(total_drives / factor)

    return [
        StorageFactor(
            parity=c,
            storage_factor=float(f),
            max_usable_capacity=int(u),
            max_failure_tolerance=int(t),
        )
        for c, f, u, t in zip(candidates, factor, usable, tolerance)
    ]


def evaluate_erasure_code(
    candidates: Sequence[ParityOption],
    total_drives: int,
    volume_size: int,
    total_nodes: int,
    policy: Optional[DefaultParityPolicy] = None,
) -> ErasureCodeResult:
    """Evaluates every candidate parity for a pool of total_drives drives of
    volume_size bytes.

    candidates are ordered from the highest parity down; the stripe spans
    twice the first (maximum) parity. The result lists the candidates in the
    order given. An empty, malformed or inconsistent candidate list sets
    error_flag instead of raising.
    """
    if not candidates:
        return ErasureCodeResult(error_flag=1)

    try:
        parities = [parse_parity(c) for c in candidates]
    except InvalidParityError as e:
        logger.debug("Cannot evaluate erasure codes: %s", e)
        return ErasureCodeResult(error_flag=1)

    stripe_width = parities[0] * 2
    if stripe_width <= 0 or any(p >= stripe_width for p in parities):
        logger.debug(
            "Parities %s do not fit a stripe of %d drives", parities, stripe_width
        )
        return ErasureCodeResult(error_flag=1)

    policy = policy or LargeClusterParityPolicy()
    factors = storage_factors(candidates, stripe_width, total_drives, volume_size)
    default_parity = policy.select_default(candidates, total_drives, total_nodes)
    logger.debug(
        "Stripe of %d drives over %d drives, defaulting to %s",
        stripe_width,
        total_drives,
        default_parity,
    )

    return ErasureCodeResult(
        error_flag=0,
        default_parity=default_parity,
        max_parity=candidates[0],
        total_volumes_in_stripe=stripe_width,
        raw_capacity_bytes=total_drives * volume_size,
        per_option_factors=tuple(factors),
    )
