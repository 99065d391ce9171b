import re
from typing import cast

from pydantic import BaseModel, field_validator

# "/pipelines/<id>" and "<x>/<y>/<id>" both carry the id in the third segment
_REF_PATTERN = re.compile(r"^[^/]*/[^/]*/(?P<execution_id>[^/]+)")


class PipelineExecution(BaseModel):
    id: str
    name: str | None = None
    status: str | None = None
    buildTime: int | None = None


class PipelineConfig(BaseModel):
    name: str


class TriggerResponse(BaseModel):
    ref: str

    @field_validator("ref")
    @classmethod
    def ref_has_execution_id(cls, value: str) -> str:
        if _REF_PATTERN.match(value) is None:
            raise ValueError(f"Unexpected execution reference {value!r}")
        return value

    @property
    def execution_id(self) -> str:
        # ref was matched by ref_has_execution_id
        match = cast(re.Match, _REF_PATTERN.match(self.ref))
        return match.group("execution_id")
