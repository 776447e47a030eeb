"""Environment-variable aware string values.

MCP headers and environment entries may reference a variable with the
``${NAME}`` form. Only a string that is exactly one reference is treated as
such; anything else is kept as literal text. References are never resolved
here.
"""

from __future__ import annotations

import re
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

_REFERENCE_RE = re.compile(r"\$\{([^\s${}]+)\}")


class LiteralValue(BaseModel):
    """Plain text, stored exactly as written."""

    model_config = ConfigDict(frozen=True)

    type: Literal["plain"] = "plain"
    value: str

    def to_native(self) -> str:
        return self.value


class EnvReference(BaseModel):
    """A reference to an environment variable by name."""

    model_config = ConfigDict(frozen=True)

    type: Literal["env"] = "env"
    name: str = Field(min_length=1)

    def to_native(self) -> str:
        return "${" + self.name + "}"


EnvValue = Annotated[Union[LiteralValue, EnvReference], Field(discriminator="type")]


def parse_env_value(raw: str) -> Union[LiteralValue, EnvReference]:
    match = _REFERENCE_RE.fullmatch(raw)
    if match is None:
        return LiteralValue(value=raw)
    return EnvReference(name=match.group(1))


__all__ = ["EnvReference", "EnvValue", "LiteralValue", "parse_env_value"]
