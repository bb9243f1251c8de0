import logging
import math
import re
from decimal import Context
from decimal import Decimal
from decimal import ROUND_HALF_UP
from typing import List
from typing import Tuple
from typing import Union

from pool_capacity_planning.enum_utils import DescribedEnum
from pool_capacity_planning.interface import IEC_UNITS
from pool_capacity_planning.interface import IECUnit
from pool_capacity_planning.interface import KubernetesUnit
from pool_capacity_planning.interface import UNIT_TABLES
from pool_capacity_planning.interface import UnitChoice
from pool_capacity_planning.interface import UnitFamily
from pool_capacity_planning.interface import UnknownUnitError

logger = logging.getLogger(__name__)

Number = Union[int, float]

_LEADING_INT_RE = re.compile(r"^\s*([+-]?\d+)")
# Enough digits for any finite double
_WIDE_CONTEXT = Context(prec=400)


def _family(family: Union[UnitFamily, str, bool]) -> UnitFamily:
    # Callers coming from the console pass a "use kubernetes units" flag
    if isinstance(family, bool):
        return UnitFamily.kubernetes if family else UnitFamily.iec
    return UnitFamily(family)


def parse_number(value: Union[Number, str]) -> float:
    """Parses operator input into a float, NaN if it is not a number"""
    if isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError:
            return math.nan
    return float(value)


def parse_int(value: Union[Number, str]) -> int:
    """Leading integer of a string (as in "12 GiB" -> 12), 0 if there is none"""
    if isinstance(value, str):
        match = _LEADING_INT_RE.match(value)
        return int(match.group(1)) if match else 0
    if not math.isfinite(value):
        return 0
    return int(value)


def to_fixed(value: float, digits: int) -> str:
    """Formats value with a fixed number of decimals rounding halves up.

    Python's format() rounds ties to even, so 10.5 would print as "10"; byte
    counts are displayed the way operators are used to, which is "11".
    """
    if not math.isfinite(value):
        return str(value)
    exponent = Decimal(1).scaleb(-digits)
    return str(
        Decimal(value).quantize(
            exponent, rounding=ROUND_HALF_UP, context=_WIDE_CONTEXT
        )
    )


def to_bytes(
    value: Union[Number, str],
    unit: str,
    family: Union[UnitFamily, str, bool] = UnitFamily.iec,
    strict: bool = False,
) -> float:
    """Converts a value expressed in unit to bytes.

    The power of 1024 is the position of unit in the family's table. A unit
    that is not in the table yields 0 bytes, unless strict is set in which
    case UnknownUnitError is raised.
    """
    units = UNIT_TABLES[_family(family)]
    try:
        power = units.index(str(unit))
    except ValueError:
        if strict:
            raise UnknownUnitError(
                f"Unit {unit!r} is not one of {', '.join(units)}"
            ) from None
        logger.debug("Unknown unit %r for %s units, using 0 bytes", unit, family)
        return 0.0

    return parse_number(value) * math.pow(1024, power)


def convert_to_bytes(
    value: Union[Number, str],
    unit: str,
    use_kubernetes_units: bool = False,
    strict: bool = False,
) -> int:
    """Integer byte count of value in unit, truncated toward zero.

    Values that are not numbers convert to 0 bytes.
    """
    total = to_bytes(value, unit, use_kubernetes_units, strict=strict)
    if not math.isfinite(total):
        return 0
    return int(total)


def to_human(
    byte_count: Number, family: Union[UnitFamily, str, bool] = UnitFamily.iec
) -> Tuple[str, str]:
    """Scales a byte count to the largest unit that keeps it at or above one

    Returns the display value and unit. Values below ten of any unit above
    bytes get one decimal place. Anything past the family's largest unit is
    shown as a large number of that unit.
    """
    units = UNIT_TABLES[_family(family)]
    n = float(byte_count)
    level = 0
    while n >= 1024 and level < len(units) - 1:
        n = n / 1024
        level += 1

    digits = 1 if n < 10 and level > 0 else 0
    return to_fixed(n, digits), units[level]


def nice_bytes(value: Union[Number, str], use_kubernetes_units: bool = False) -> str:
    if isinstance(value, str):
        value = parse_int(value)
    display, unit = to_human(value, use_kubernetes_units)
    return f"{display} {unit}"


def calculate_bytes(
    value: Union[Number, str], whole_number: bool = False, round_floor: bool = True
) -> Tuple[float, str]:
    """Summarizes a byte count as (total, unit) for dashboards.

    The unit is picked from the logarithm of the count. With round_floor the
    scaled value is floored before formatting, with whole_number it carries
    no decimal places (one otherwise).
    """
    count = parse_int(value)
    if count <= 0:
        return 0, IEC_UNITS[0]

    level = int(math.floor(math.log(count) / math.log(1024)))
    level = min(level, len(IEC_UNITS) - 1)
    scaled = count / math.pow(1024, level)
    if round_floor:
        scaled = math.floor(scaled)

    total = float(to_fixed(scaled, 0 if whole_number else 1))
    return total, IEC_UNITS[level]


def unit_choices(
    family: Union[UnitFamily, str, bool] = UnitFamily.iec,
) -> List[UnitChoice]:
    """Units offered in a picker, Kubernetes quantities are never picked in bytes"""
    if _family(family) == UnitFamily.kubernetes:
        units: List[DescribedEnum] = list(KubernetesUnit)[1:]
    else:
        units = list(IECUnit)
    return [
        UnitChoice(label=u.value, value=u.value, description=u.description)
        for u in units
    ]
