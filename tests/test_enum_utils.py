import pytest
from pydantic import BaseModel
from pydantic import ValidationError

from pool_capacity_planning.interface import IECUnit
from pool_capacity_planning.interface import KubernetesUnit
from pool_capacity_planning.interface import Quantity
from pool_capacity_planning.interface import UnitFamily

DESCRIBED_ENUMS = [UnitFamily, IECUnit, KubernetesUnit]


@pytest.mark.parametrize("enum_class", DESCRIBED_ENUMS)
def test_members_are_described(enum_class):
    enum_name = enum_class.__name__
    assert enum_class.__doc__, f"{enum_name} must have a class docstring"

    for member in enum_class:
        assert member.description, (
            f"{enum_name}.{member.name} must be declared as "
            f'{member.name} = "{member.value}", "<description>"'
        )
        assert member.__doc__ == member.description

    members = list(enum_class)
    assert members[0].description != members[1].description


@pytest.mark.parametrize("enum_class", DESCRIBED_ENUMS)
def test_json_schema_lists_member_descriptions(enum_class):
    UnitModel = type(
        "UnitModel",
        (BaseModel,),
        {"__annotations__": {"field": enum_class}},
    )
    schema = UnitModel.model_json_schema()
    enum_schema = schema["$defs"][enum_class.__name__]

    one_of = enum_schema["oneOf"]
    assert len(one_of) == len(enum_class)
    for member in enum_class:
        (entry,) = [e for e in one_of if e.get("const") == member.value]
        assert entry["title"] == member.name
        assert entry["description"] == member.description


@pytest.mark.parametrize("enum_class", DESCRIBED_ENUMS)
def test_members_render_as_value(enum_class):
    for member in enum_class:
        assert isinstance(member, str)
        assert f"{member}" == member.value
        assert str(member) == member.value
        assert member == member.value
        assert enum_class(member.value) is member
        assert {member: 1}.get(member.value) == 1


def test_units_display_without_enum_name():
    assert f"5 {IECUnit.GiB}" == "5 GiB"
    assert f"5 {KubernetesUnit.Gi}" == "5 Gi"
    assert f"{IECUnit.TiB:>5}" == "  TiB"


def test_quantity_accepts_family_strings():
    quantity = Quantity(value=1.5, unit="Ti", family="kubernetes")
    assert quantity.family == UnitFamily.kubernetes
    assert quantity.model_dump()["family"] == "kubernetes"

    with pytest.raises(ValidationError):
        Quantity(value=1, unit="Ti", family="metric")
