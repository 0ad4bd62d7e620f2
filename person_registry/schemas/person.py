"""Pydantic schemas for Person API."""

from datetime import date
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field

# Person ids are stored in 32-bit integer columns
MAX_PERSON_ID = 2**31 - 1

PersonId = Annotated[int, Field(ge=1, le=MAX_PERSON_ID)]


class PersonCreate(BaseModel):
    """Schema for creating a person."""

    model_config = ConfigDict(extra="forbid")

    first_name: str | None = Field(None, max_length=255, description="Given name")
    last_name: str | None = Field(None, max_length=255, description="Family name")
    birth_date: date | None = Field(None, description="Birth date")
    is_alive: bool = Field(..., description="Whether the person is alive")
    current_sex: str | None = Field(None, max_length=50, description="Sex designation")
    current_alias: str | None = Field(None, max_length=255, description="Alias")
    first_parent_id: PersonId | None = Field(None, description="First birth parent")
    first_parent_relationship: str | None = Field(
        None, max_length=50, description="Relationship to the first parent"
    )
    second_parent_id: PersonId | None = Field(None, description="Second birth parent")
    second_parent_relationship: str | None = Field(
        None, max_length=50, description="Relationship to the second parent"
    )
    guardian_id: PersonId | None = Field(None, description="Legal guardian")


class PersonUpdate(BaseModel):
    """Schema for a partial update; omitted or null fields are left untouched.

    Parentage is not part of the patch: it is written once at creation.
    """

    model_config = ConfigDict(extra="forbid")

    first_name: str | None = Field(None, max_length=255)
    last_name: str | None = Field(None, max_length=255)
    birth_date: date | None = None
    is_alive: bool | None = None
    current_sex: str | None = Field(None, max_length=50)
    current_alias: str | None = Field(None, max_length=255)
    guardian_id: PersonId | None = None

    def to_patch(self) -> dict:
        """Return only the fields that carry a value."""
        return self.model_dump(exclude_none=True)


class PersonResponse(BaseModel):
    """Schema for person response."""

    person_id: int
    first_name: str | None
    last_name: str | None
    birth_date: date | None
    is_alive: bool
    current_sex: str | None
    current_alias: str | None
    first_parent_id: int | None
    first_parent_relationship: str | None
    second_parent_id: int | None
    second_parent_relationship: str | None
    guardian_id: int | None

    model_config = {"from_attributes": True}


class PersonCreated(BaseModel):
    """Identity assigned to a newly created person."""

    person_id: int
