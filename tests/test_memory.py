import math

import pytest

from pool_capacity_planning.distribution import INVALID_DATA
from pool_capacity_planning.interface import GIB_IN_BYTES
from pool_capacity_planning.interface import MemoryTier
from pool_capacity_planning.interface import PIB_IN_BYTES
from pool_capacity_planning.interface import PlannerConfig
from pool_capacity_planning.interface import TIB_IN_BYTES
from pool_capacity_planning.memory import memory_limit
from pool_capacity_planning.memory import NO_MEMORY_AVAILABLE
from pool_capacity_planning.memory import NOT_ENOUGH_MEMORY
from pool_capacity_planning.memory import plan_memory
from pool_capacity_planning.memory import REQUEST_TOO_LARGE
from pool_capacity_planning.memory import REQUEST_TOO_SMALL


def test_one_tib_tier():
    plan = plan_memory(4, 2 * TIB_IN_BYTES, TIB_IN_BYTES)
    assert plan.ok
    assert plan.request_bytes == 4 * GIB_IN_BYTES
    assert plan.limit_bytes == 8 * GIB_IN_BYTES


@pytest.mark.parametrize(
    "capacity,expected_limit_gib",
    [
        (500 * GIB_IN_BYTES, 4),
        (TIB_IN_BYTES, 8),
        (10 * TIB_IN_BYTES - 1, 8),
        (10 * TIB_IN_BYTES, 16),
        (100 * TIB_IN_BYTES, 32),
        (PIB_IN_BYTES, 64),
        (50 * PIB_IN_BYTES, 64),
    ],
)
def test_limit_tiers(capacity, expected_limit_gib):
    plan = plan_memory(4, capacity, 256 * GIB_IN_BYTES)
    assert plan.request_bytes == 4 * GIB_IN_BYTES
    assert plan.limit_bytes == expected_limit_gib * GIB_IN_BYTES


def test_request_above_tier_is_kept():
    plan = plan_memory(100, PIB_IN_BYTES, TIB_IN_BYTES)
    assert plan.request_bytes == 100 * GIB_IN_BYTES
    assert plan.limit_bytes == 100 * GIB_IN_BYTES


def test_capacity_as_string():
    plan = plan_memory(2, str(20 * TIB_IN_BYTES), 64 * GIB_IN_BYTES)
    assert plan.request_bytes == 2 * GIB_IN_BYTES
    assert plan.limit_bytes == 16 * GIB_IN_BYTES


@pytest.mark.parametrize(
    "requested_gib,max_memory,message",
    [
        (4, 0, NO_MEMORY_AVAILABLE),
        # The max is checked before the request
        (1, 0, NO_MEMORY_AVAILABLE),
        (4, GIB_IN_BYTES, NOT_ENOUGH_MEMORY),
        (1, 64 * GIB_IN_BYTES, REQUEST_TOO_SMALL),
        (1.99, 64 * GIB_IN_BYTES, REQUEST_TOO_SMALL),
        ("many", 64 * GIB_IN_BYTES, REQUEST_TOO_SMALL),
        (128, 64 * GIB_IN_BYTES, REQUEST_TOO_LARGE),
        # A ceiling that is not a number cannot bound the request
        (4, math.nan, INVALID_DATA),
        (4, math.inf, INVALID_DATA),
        (4, "plenty", INVALID_DATA),
    ],
)
def test_errors(requested_gib, max_memory, message):
    plan = plan_memory(requested_gib, TIB_IN_BYTES, max_memory)
    assert not plan.ok
    assert plan.error_message == message
    assert plan.request_bytes == 0
    assert plan.limit_bytes == 0


def test_boundaries_are_inclusive():
    plan = plan_memory(2, 0, 2 * GIB_IN_BYTES)
    assert plan.ok
    assert plan.request_bytes == plan.limit_bytes == 2 * GIB_IN_BYTES


def test_first_matching_tier_wins():
    config = PlannerConfig(
        memory_tiers=(
            MemoryTier(
                min_capacity_bytes=TIB_IN_BYTES, min_limit_bytes=4 * GIB_IN_BYTES
            ),
            MemoryTier(min_capacity_bytes=0, min_limit_bytes=32 * GIB_IN_BYTES),
        )
    )
    assert memory_limit(2 * GIB_IN_BYTES, 2 * TIB_IN_BYTES, config) == 4 * GIB_IN_BYTES
    assert memory_limit(2 * GIB_IN_BYTES, 1, config) == 32 * GIB_IN_BYTES


def test_custom_minimum_memory():
    config = PlannerConfig(min_memory_bytes=4 * GIB_IN_BYTES)
    plan = plan_memory(3, TIB_IN_BYTES, 64 * GIB_IN_BYTES, config=config)
    assert plan.error_message == REQUEST_TOO_SMALL
