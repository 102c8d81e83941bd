"""Schema base classes: request bodies reject unknown fields."""

from pydantic import BaseModel, ConfigDict


class StrictModel(BaseModel):
    """Base for response bodies built from ORM rows."""

    model_config = ConfigDict(extra="forbid", from_attributes=True)


class StrictRequestModel(BaseModel):
    """Base for request bodies; a misspelt field is an error, not a silent no-op."""

    model_config = ConfigDict(extra="forbid", validate_assignment=True)
