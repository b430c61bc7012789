# This project was developed with assistance from AI tools.
"""Dynamic form field schemas."""

from typing import Literal

from loandesk_db.enums import FieldKind, FieldWidth
from pydantic import BaseModel, Field, field_validator, model_validator

FIELD_NAME_PATTERN = r"^[A-Za-z][A-Za-z0-9_]*$"


def _clean_options(options: list[str]) -> list[str]:
    return [o.strip() for o in options if o and o.strip()]


class FormFieldCreate(BaseModel):
    """Create a field definition scoped to exactly one category or loan."""

    category_id: int | None = None
    loan_id: int | None = None
    name: str = Field(min_length=1, max_length=100, pattern=FIELD_NAME_PATTERN)
    label: str = Field(default="", max_length=200)
    kind: FieldKind = FieldKind.TEXT
    options: list[str] = []
    required: bool = False
    placeholder: str | None = Field(default=None, max_length=200)
    width: FieldWidth = FieldWidth.FULL
    section: str = Field(default="additional", min_length=1, max_length=50)
    display_order: int = 0
    is_active: bool = True

    @field_validator("options")
    @classmethod
    def _strip(cls, value: list[str]) -> list[str]:
        return _clean_options(value)

    @model_validator(mode="after")
    def _check_scope_and_options(self):
        if (self.category_id is None) == (self.loan_id is None):
            raise ValueError("exactly one of category_id or loan_id is required")
        if self.kind in FieldKind.option_kinds() and not self.options:
            raise ValueError(f"{self.kind.value} fields need at least one option")
        return self


class FormFieldUpdate(BaseModel):
    """Partial update. The owning scope cannot change."""

    name: str | None = Field(default=None, min_length=1, max_length=100, pattern=FIELD_NAME_PATTERN)
    label: str | None = Field(default=None, max_length=200)
    kind: FieldKind | None = None
    options: list[str] | None = None
    required: bool | None = None
    placeholder: str | None = Field(default=None, max_length=200)
    width: FieldWidth | None = None
    section: str | None = Field(default=None, min_length=1, max_length=50)
    display_order: int | None = None
    is_active: bool | None = None

    @field_validator("options")
    @classmethod
    def _strip(cls, value: list[str] | None) -> list[str] | None:
        return None if value is None else _clean_options(value)


class InputContract(BaseModel):
    """Concrete UI control a client renders for a field."""

    control: Literal["input", "textarea", "select", "radio", "checkbox", "file"]
    input_type: str | None = None
    options: list[str] = []
    accept: list[str] = []
    multiple: bool = False


class FormFieldResponse(BaseModel):
    id: int
    category_id: int | None = None
    loan_id: int | None = None
    name: str
    label: str
    kind: FieldKind
    options: list[str] = []
    required: bool
    placeholder: str | None = None
    width: FieldWidth
    section: str
    display_order: int
    is_active: bool
    input: InputContract | None = None


class FormFieldListResponse(BaseModel):
    data: list[FormFieldResponse]
    count: int
