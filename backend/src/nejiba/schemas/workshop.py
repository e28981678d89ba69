from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, Field, model_validator
from pydantic.alias_generators import to_camel

Severity = Literal["error", "warning"]

_camel = {"alias_generator": to_camel, "populate_by_name": True}


class Finding(BaseModel):
    """One validation problem, addressed by its JSON path (e.g. "timeline[2].mainSteps")."""

    path: str
    field: str
    message: str
    severity: Severity
    suggestion: str | None = None
    value: Any = None


class ValidationResult(BaseModel):
    is_valid: bool
    errors: list[Finding] = []
    warnings: list[Finding] = []
    fixed_plan: dict | None = None

    model_config = _camel


class JsonSyntaxCheck(BaseModel):
    is_valid: bool
    error: str | None = None

    model_config = _camel


class ValidateRequest(BaseModel):
    """Either raw JSON text (as pasted or uploaded) or an already-parsed plan."""

    json_text: str | None = Field(default=None, alias="json")
    plan: dict | None = None

    model_config = {"populate_by_name": True}

    @model_validator(mode="after")
    def exactly_one_input(self) -> "ValidateRequest":
        if (self.json_text is None) == (self.plan is None):
            raise ValueError("Provide exactly one of 'json' or 'plan'")
        return self


class WorkshopSaveRequest(BaseModel):
    plan: dict
    source: Literal["generated", "imported"] = "imported"
    imported_from: Literal["chatgpt", "file"] | None = None

    model_config = _camel


class WorkshopUpdateRequest(BaseModel):
    plan: dict


class WorkshopMetadata(BaseModel):
    created_at: datetime
    source: str
    imported_from: str | None
    last_modified: datetime
    topic: str
    duration: str
    age_range: str

    model_config = _camel


class StoredWorkshop(BaseModel):
    id: str
    plan: dict
    metadata: WorkshopMetadata


class WorkshopListItem(BaseModel):
    id: str
    metadata: WorkshopMetadata
