"""String enums whose members describe themselves.

Members are declared as ``name = value, description``. The description is
shown next to the unit in pickers, becomes the member's ``__doc__`` and is
published in the pydantic JSON schema of any model using the enum.
"""

from enum import Enum
from typing import Any
from typing import cast

from pydantic.json_schema import JsonSchemaValue
from pydantic_core import CoreSchema

__all__ = ["DescribedEnum"]


class DescribedEnum(str, Enum):
    """A str enum rendering as its bare value ("GiB", not "IECUnit.GiB")"""

    description: str

    def __new__(cls, value: str, description: str = "") -> "DescribedEnum":
        if not isinstance(value, str):
            raise TypeError(f"{value!r} is not a string")
        member = str.__new__(cls, value)
        member._value_ = value
        member.description = description
        if description:
            member.__doc__ = description
        return member

    def __str__(self) -> str:
        return str(self.value)

    def __format__(self, format_spec: str) -> str:
        return str(self.value).__format__(format_spec)

    @classmethod
    def __get_pydantic_json_schema__(
        cls, core_schema: CoreSchema, handler: Any
    ) -> JsonSchemaValue:
        json_schema = cast(JsonSchemaValue, handler(core_schema))
        json_schema["oneOf"] = [
            {"const": m.value, "title": m.name, "description": m.description}
            for m in cls
        ]
        return json_schema
