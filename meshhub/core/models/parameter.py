"""
Parameter models — typed configuration slots and their values.

Regardless of declared type, every parameter is ultimately rendered
as a string and passed to the templating engine as a chart value.
Values and secrets are "oneof" models: several optional fields, of
which exactly one must be set.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Literal

from pydantic import BaseModel, model_validator


class ParameterType(str, Enum):
    """Declared type of a parameter. Kept in sync with ParameterValue."""

    STRING = "STRING"
    FLOAT = "FLOAT"
    BOOL = "BOOL"
    INT = "INT"
    DATE = "DATE"
    SECRET = "SECRET"


SecretKind = Literal["secret_ref", "file_path", "plain_text"]
ValueKind = Literal[
    "string_value", "int_value", "float_value",
    "boolean_value", "date_value", "secret_value",
]

# ParameterValue field → the declared type it satisfies
_VALUE_TYPES: dict[str, ParameterType] = {
    "string_value": ParameterType.STRING,
    "int_value": ParameterType.INT,
    "float_value": ParameterType.FLOAT,
    "boolean_value": ParameterType.BOOL,
    "date_value": ParameterType.DATE,
    "secret_value": ParameterType.SECRET,
}


def _set_fields(model: BaseModel, names: tuple[str, ...]) -> list[str]:
    return [n for n in names if getattr(model, n) is not None]


class SecretRef(BaseModel):
    """A key inside a cluster Secret.

    The secret is always looked up in the install namespace.
    """

    name: str
    key: str


class SecretValue(BaseModel):
    """Where a secret comes from. Exactly one source must be set."""

    secret_ref: SecretRef | None = None
    file_path: str | None = None
    plain_text: str | None = None

    @model_validator(mode="after")
    def _exactly_one(self) -> SecretValue:
        set_ = _set_fields(self, ("secret_ref", "file_path", "plain_text"))
        if len(set_) != 1:
            raise ValueError(
                f"secret value must set exactly one of secret_ref, file_path, "
                f"plain_text (got {set_ or 'none'})"
            )
        return self

    def kind(self) -> SecretKind:
        if self.secret_ref is not None:
            return "secret_ref"
        if self.file_path is not None:
            return "file_path"
        return "plain_text"


class ParameterValue(BaseModel):
    """A typed parameter value. Exactly one field must be set."""

    string_value: str | None = None
    int_value: int | None = None
    float_value: float | None = None
    boolean_value: bool | None = None
    date_value: datetime | None = None
    secret_value: SecretValue | None = None

    @model_validator(mode="after")
    def _exactly_one(self) -> ParameterValue:
        set_ = _set_fields(self, tuple(_VALUE_TYPES))
        if len(set_) != 1:
            raise ValueError(
                f"parameter value must set exactly one of "
                f"{', '.join(_VALUE_TYPES)} (got {set_ or 'none'})"
            )
        return self

    def kind(self) -> ValueKind:
        for name in _VALUE_TYPES:
            if getattr(self, name) is not None:
                return name  # type: ignore[return-value]
        raise TypeError("ParameterValue has no field set")

    @property
    def value_type(self) -> ParameterType:
        return _VALUE_TYPES[self.kind()]


class Parameter(BaseModel):
    """A named, typed configuration slot.

    The name doubles as the value path used during rendering
    (``"apiServer.enable"`` sets ``apiServer: {enable: ...}``).
    """

    name: str
    description: str = ""
    type: ParameterType = ParameterType.STRING
    default: ParameterValue | None = None
    required: bool = False
    display_name: str = ""

    @model_validator(mode="after")
    def _default_matches_type(self) -> Parameter:
        if self.default is not None and self.default.value_type != self.type:
            raise ValueError(
                f"parameter '{self.name}' is declared {self.type.value} "
                f"but its default is {self.default.value_type.value}"
            )
        return self

    @property
    def has_default(self) -> bool:
        return self.default is not None


def check_unique_parameters(parameters: list[Parameter], scope: str) -> None:
    """Raise ValueError if a parameter name repeats within one scope."""
    seen: set[str] = set()
    for p in parameters:
        if p.name in seen:
            raise ValueError(f"duplicate parameter '{p.name}' in {scope}")
        seen.add(p.name)
