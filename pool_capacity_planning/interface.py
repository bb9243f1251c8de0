from __future__ import annotations

import re
from typing import List
from typing import Tuple

from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import Field

from pool_capacity_planning.enum_utils import DescribedEnum

KIB_IN_BYTES = 1024
MIB_IN_BYTES = 1024 * 1024
GIB_IN_BYTES = 1024 * 1024 * 1024
TIB_IN_BYTES = GIB_IN_BYTES * 1024
PIB_IN_BYTES = TIB_IN_BYTES * 1024


class UnknownUnitError(ValueError):
    """Raised by strict conversions when a unit is not in the chosen family"""


class InvalidParityError(ValueError):
    """Raised when a parity option is not of the form EC:<n>"""


###############################################################################
#              Units and unit families                                        #
###############################################################################


class UnitFamily(DescribedEnum):
    """Which unit table a quantity is expressed in"""

    iec = "iec", "Binary IEC units: B, KiB, MiB, GiB, TiB, PiB, EiB, ZiB, YiB"
    kubernetes = (
        "kubernetes",
        "Kubernetes resource quantity suffixes: B, Ki, Mi, Gi, Ti, Pi, Ei",
    )


class IECUnit(DescribedEnum):
    """Binary units as shown to operators"""

    B = "B", "Bytes"
    KiB = "KiB", "1024 bytes"
    MiB = "MiB", "1024^2 bytes"
    GiB = "GiB", "1024^3 bytes"
    TiB = "TiB", "1024^4 bytes"
    PiB = "PiB", "1024^5 bytes"
    EiB = "EiB", "1024^6 bytes"
    ZiB = "ZiB", "1024^7 bytes"
    YiB = "YiB", "1024^8 bytes"


class KubernetesUnit(DescribedEnum):
    """Binary suffixes accepted in Kubernetes resource quantities"""

    B = "B", "Bytes (no suffix in a Kubernetes quantity)"
    Ki = "Ki", "1024 bytes"
    Mi = "Mi", "1024^2 bytes"
    Gi = "Gi", "1024^3 bytes"
    Ti = "Ti", "1024^4 bytes"
    Pi = "Pi", "1024^5 bytes"
    Ei = "Ei", "1024^6 bytes"


# Ordered: the position of a unit is its power of 1024
IEC_UNITS: Tuple[str, ...] = tuple(u.value for u in IECUnit)
KUBERNETES_UNITS: Tuple[str, ...] = tuple(u.value for u in KubernetesUnit)

UNIT_TABLES = {
    UnitFamily.iec: IEC_UNITS,
    UnitFamily.kubernetes: KUBERNETES_UNITS,
}


class Quantity(BaseModel):
    value: float
    unit: str
    family: UnitFamily = UnitFamily.kubernetes
    model_config = ConfigDict(frozen=True)


class UnitChoice(BaseModel):
    label: str
    value: str
    description: str = ""
    model_config = ConfigDict(frozen=True)


###############################################################################
#              Erasure code parity                                            #
###############################################################################

_PARITY_RE = re.compile(r"^EC:(\d+)$")

# A parity option as offered by the cluster, e.g. "EC:4"
ParityOption = str


def parse_parity(option: ParityOption) -> int:
    """Returns the number of parity drives encoded in an "EC:<n>" option"""
    match = _PARITY_RE.match(option.strip())
    if match is None:
        raise InvalidParityError(f"Invalid erasure code parity {option!r}")
    return int(match.group(1))


###############################################################################
#              Configuration                                                  #
###############################################################################


class MemoryTier(BaseModel):
    """Pools of at least min_capacity_bytes get a memory limit of at least
    min_limit_bytes"""

    min_capacity_bytes: int
    min_limit_bytes: int
    model_config = ConfigDict(frozen=True)


DEFAULT_MEMORY_TIERS: Tuple[MemoryTier, ...] = (
    MemoryTier(min_capacity_bytes=PIB_IN_BYTES, min_limit_bytes=64 * GIB_IN_BYTES),
    MemoryTier(
        min_capacity_bytes=100 * TIB_IN_BYTES, min_limit_bytes=32 * GIB_IN_BYTES
    ),
    MemoryTier(min_capacity_bytes=10 * TIB_IN_BYTES, min_limit_bytes=16 * GIB_IN_BYTES),
    MemoryTier(min_capacity_bytes=TIB_IN_BYTES, min_limit_bytes=8 * GIB_IN_BYTES),
)


class PlannerConfig(BaseModel):
    """Tunables for pool planning. The defaults match what the console has
    always used when provisioning a tenant pool."""

    min_storage_bytes: int = Field(
        default=GIB_IN_BYTES,
        title="Smallest pool and smallest single volume",
        gt=0,
    )
    max_volume_multiplier: int = Field(
        default=256,
        title="Largest automatic volume as a multiple of min_storage_bytes",
        gt=0,
    )
    min_auto_divisor: int = Field(
        default=4,
        title="Automatic volume sizing never divides capacity by fewer nodes",
        gt=0,
    )
    min_memory_bytes: int = Field(
        default=2 * GIB_IN_BYTES,
        title="Smallest per-node memory request",
        gt=0,
    )
    # Evaluated in order, the first tier whose threshold the pool reaches wins
    memory_tiers: Tuple[MemoryTier, ...] = DEFAULT_MEMORY_TIERS
    large_cluster_min_drives: int = 8
    # Exclusive: the cluster needs strictly more nodes than this
    large_cluster_min_nodes: int = 16
    large_cluster_parity: ParityOption = "EC:4"
    model_config = ConfigDict(frozen=True)

    @property
    def max_volume_bytes(self) -> int:
        return self.min_storage_bytes * self.max_volume_multiplier


###############################################################################
#              Results                                                        #
###############################################################################


class DistributionResult(BaseModel):
    """How a pool's capacity is spread over nodes and drives.

    An empty error_message means success; on error every number is zero.
    """

    error_message: str = ""
    nodes: int = 0
    # Total persistent volumes across every node
    drive_count: int = 0
    drives_per_node: int = 0
    volume_size: int = 0
    model_config = ConfigDict(frozen=True)

    @property
    def ok(self) -> bool:
        return self.error_message == ""

    @property
    def total_bytes(self) -> int:
        return self.volume_size * self.drive_count


class MemoryPlan(BaseModel):
    error_message: str = ""
    request_bytes: int = 0
    limit_bytes: int = 0
    model_config = ConfigDict(frozen=True)

    @property
    def ok(self) -> bool:
        return self.error_message == ""


class StorageFactor(BaseModel):
    parity: ParityOption
    # raw capacity / usable capacity
    storage_factor: float
    max_usable_capacity: int
    max_failure_tolerance: int
    model_config = ConfigDict(frozen=True)


class ErasureCodeResult(BaseModel):
    error_flag: int = 0
    default_parity: ParityOption = ""
    max_parity: ParityOption = ""
    total_volumes_in_stripe: int = 0
    raw_capacity_bytes: int = 0
    # Same order as the candidates that were evaluated
    per_option_factors: Tuple[StorageFactor, ...] = ()
    model_config = ConfigDict(frozen=True)

    @property
    def ok(self) -> bool:
        return self.error_flag == 0

    def factor_for(self, parity: ParityOption) -> StorageFactor:
        for factor in self.per_option_factors:
            if factor.parity == parity:
                return factor
        raise KeyError(parity)


class PoolPlan(BaseModel):
    pool_name: str
    requested: Quantity
    distribution: DistributionResult
    memory: MemoryPlan
    erasure_code: ErasureCodeResult
    model_config = ConfigDict(frozen=True)

    @property
    def ok(self) -> bool:
        return self.distribution.ok and self.memory.ok and self.erasure_code.ok

    @property
    def errors(self) -> List[str]:
        errors = [
            e for e in (self.distribution.error_message, self.memory.error_message) if e
        ]
        if not self.erasure_code.ok:
            errors.append("No valid erasure code parity for this pool")
        return errors
