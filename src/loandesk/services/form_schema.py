# This project was developed with assistance from AI tools.
"""Dynamic form schema: field lookup, render contracts, value validation.

Field definitions are owned by a loan category or by a single loan. A loan's
effective schema is its category's fields plus its own, with loan-level
definitions overriding category ones of the same name.

Rendering and validation dispatch on ``FieldKind`` through two tables,
``_RENDERERS`` and ``_VALIDATORS``, each with one entry per kind.

Submitted keys that match no active field are passed through unchanged and
stored with the application. Only values outside the closed union
(string, number, boolean, list of those) are rejected.
"""

import logging
import math
import re
from collections.abc import Callable, Iterable, Mapping
from datetime import date, datetime

from loandesk_db import FormField, Loan, LoanCategory
from loandesk_db.enums import FieldKind
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ..schemas.form_field import FormFieldCreate, FormFieldResponse, FormFieldUpdate, InputContract
from .errors import Conflict, FieldError, NotFound, ValidationFailed

logger = logging.getLogger(__name__)

FILE_ACCEPT = [".pdf", ".jpg", ".jpeg", ".png"]

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
_TRUE_STRINGS = {"true", "1", "yes", "on"}
_FALSE_STRINGS = {"false", "0", "no", "off", ""}


# ---------------------------------------------------------------------------
# Lookup
# ---------------------------------------------------------------------------


def _sort_key(field: FormField) -> tuple[int, int]:
    return (field.display_order, field.id)


async def _scope_fields(
    session: AsyncSession,
    *,
    category_id: int | None = None,
    loan_id: int | None = None,
    include_inactive: bool = False,
) -> list[FormField]:
    stmt = select(FormField)
    if category_id is not None:
        stmt = stmt.where(FormField.category_id == category_id)
    else:
        stmt = stmt.where(FormField.loan_id == loan_id)
    if not include_inactive:
        stmt = stmt.where(FormField.is_active.is_(True))
    stmt = stmt.order_by(FormField.display_order, FormField.id)
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def list_fields(
    session: AsyncSession,
    *,
    category_id: int | None = None,
    loan_id: int | None = None,
    include_inactive: bool = False,
) -> list[FormField]:
    """Ordered field definitions for a category or a loan.

    Sorted by (display_order, id), so ties keep insertion order.

    Raises:
        NotFound: the category or loan does not exist.
    """
    if (category_id is None) == (loan_id is None):
        raise ValueError("exactly one of category_id or loan_id is required")

    if category_id is not None:
        if await session.get(LoanCategory, category_id) is None:
            raise NotFound(f"Category {category_id} not found")
        return await _scope_fields(
            session, category_id=category_id, include_inactive=include_inactive,
        )

    loan = await session.get(Loan, loan_id)
    if loan is None:
        raise NotFound(f"Loan {loan_id} not found")

    merged: dict[str, FormField] = {}
    if loan.category_id is not None:
        for field in await _scope_fields(
            session, category_id=loan.category_id, include_inactive=include_inactive,
        ):
            merged[field.name] = field
    for field in await _scope_fields(session, loan_id=loan_id, include_inactive=include_inactive):
        merged[field.name] = field
    return sorted(merged.values(), key=_sort_key)


# ---------------------------------------------------------------------------
# Render contracts
# ---------------------------------------------------------------------------


def _input(input_type: str) -> Callable[[FormField], InputContract | None]:
    def _render(field: FormField) -> InputContract | None:
        return InputContract(control="input", input_type=input_type)

    return _render


def _choice(control: str) -> Callable[[FormField], InputContract | None]:
    def _render(field: FormField) -> InputContract | None:
        if not field.options:
            return None
        return InputContract(control=control, options=list(field.options))

    return _render


def _render_textarea(field: FormField) -> InputContract | None:
    return InputContract(control="textarea")


def _render_checkbox(field: FormField) -> InputContract | None:
    return InputContract(control="checkbox", options=list(field.options or []))


def _render_file(field: FormField) -> InputContract | None:
    return InputContract(control="file", accept=list(FILE_ACCEPT), multiple=True)


_RENDERERS: dict[FieldKind, Callable[[FormField], InputContract | None]] = {
    FieldKind.TEXT: _input("text"),
    FieldKind.NUMBER: _input("number"),
    FieldKind.EMAIL: _input("email"),
    FieldKind.PHONE: _input("tel"),
    FieldKind.DATE: _input("date"),
    FieldKind.TEXTAREA: _render_textarea,
    FieldKind.SELECT: _choice("select"),
    FieldKind.RADIO: _choice("radio"),
    FieldKind.CHECKBOX: _render_checkbox,
    FieldKind.FILE: _render_file,
}


def render(field: FormField) -> InputContract | None:
    """Map a field to the UI control a client should draw.

    Returns None for fields that cannot be rendered (a Select or Radio
    without options); such fields are left out of the form entirely.
    """
    return _RENDERERS[field.kind](field)


def to_response(field: FormField) -> FormFieldResponse:
    return FormFieldResponse(
        id=field.id,
        category_id=field.category_id,
        loan_id=field.loan_id,
        name=field.name,
        label=field.label,
        kind=field.kind,
        options=list(field.options or []),
        required=field.required,
        placeholder=field.placeholder,
        width=field.width,
        section=field.section,
        display_order=field.display_order,
        is_active=field.is_active,
        input=render(field),
    )


def describe_fields(fields: Iterable[FormField], *, renderable_only: bool = True) -> list[FormFieldResponse]:
    out = [to_response(f) for f in fields]
    if renderable_only:
        out = [r for r in out if r.input is not None]
    return out


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


def _is_empty(field: FormField, value) -> bool:
    if value is None:
        return True
    if field.kind == FieldKind.CHECKBOX:
        if isinstance(value, bool):
            return value is False
        if isinstance(value, str) and not field.options:
            return value.strip().lower() in _FALSE_STRINGS
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, list):
        return len(value) == 0
    return False


def _check_text(field: FormField, value) -> str | None:
    if isinstance(value, list):
        return "must be a single value"
    return None


def _check_number(field: FormField, value) -> str | None:
    if isinstance(value, bool) or isinstance(value, list):
        return "must be a number"
    try:
        number = float(value)
    except (TypeError, ValueError):
        return "must be a number"
    if not math.isfinite(number):
        return "must be a finite number"
    return None


def _check_email(field: FormField, value) -> str | None:
    if not isinstance(value, str) or not _EMAIL_RE.match(value.strip()):
        return "must be a valid email address"
    return None


def _check_date(field: FormField, value) -> str | None:
    if not isinstance(value, str):
        return "must be a date (YYYY-MM-DD)"
    text = value.strip()
    try:
        date.fromisoformat(text)
    except ValueError:
        try:
            datetime.fromisoformat(text)
        except ValueError:
            return "must be a date (YYYY-MM-DD)"
    return None


def _check_choice(field: FormField, value) -> str | None:
    if isinstance(value, list) or str(value) not in (field.options or []):
        return f"must be one of: {', '.join(field.options or [])}"
    return None


def _check_checkbox(field: FormField, value) -> str | None:
    if field.options:
        chosen = value if isinstance(value, list) else [value]
        unknown = [str(v) for v in chosen if str(v) not in field.options]
        if unknown:
            return f"must be chosen from: {', '.join(field.options)}"
        return None
    if isinstance(value, bool):
        return None
    if isinstance(value, str) and value.strip().lower() in _TRUE_STRINGS | _FALSE_STRINGS:
        return None
    return "must be true or false"


def _check_file(field: FormField, value) -> str | None:
    # Presence is checked against the upload channel; the value map only
    # ever holds the stored references.
    return None


_VALIDATORS: dict[FieldKind, Callable[[FormField, object], str | None]] = {
    FieldKind.TEXT: _check_text,
    FieldKind.NUMBER: _check_number,
    FieldKind.EMAIL: _check_email,
    FieldKind.PHONE: _check_text,
    FieldKind.DATE: _check_date,
    FieldKind.TEXTAREA: _check_text,
    FieldKind.SELECT: _check_choice,
    FieldKind.RADIO: _check_choice,
    FieldKind.CHECKBOX: _check_checkbox,
    FieldKind.FILE: _check_file,
}


def _is_scalar(value) -> bool:
    return value is None or isinstance(value, (str, int, float, bool))


def validate(
    fields: Iterable[FormField],
    values: Mapping[str, object],
    files: Mapping[str, int] | None = None,
) -> None:
    """Check submitted dynamic values against the active schema.

    ``files`` maps the field name of each upload channel to the number of
    files uploaded on it; only File fields accept uploads. Keys in
    ``values`` that match no field are left alone.

    Raises:
        ValidationFailed: listing every offending field.
    """
    fields = list(fields)
    files = files or {}
    errors: list[FieldError] = []

    for key, value in values.items():
        if isinstance(value, list):
            ok = all(_is_scalar(v) and v is not None for v in value)
        else:
            ok = _is_scalar(value)
        if not ok:
            errors.append(FieldError(key, "unsupported value type"))

    # Uploads are stored under the field name: only File fields or keys
    # without a value may receive them.
    kinds = {field.name: field.kind for field in fields}
    for name in files:
        kind = kinds.get(name)
        if kind is not None and kind != FieldKind.FILE:
            errors.append(FieldError(name, "does not accept file uploads"))
        elif kind is None and _is_scalar(values.get(name)) and values.get(name) is not None:
            errors.append(FieldError(name, "cannot hold both a value and file uploads"))

    bad_keys = {e.field for e in errors}
    for field in fields:
        if not field.is_active or render(field) is None:
            continue
        if field.kind == FieldKind.FILE:
            if field.required and files.get(field.name, 0) == 0:
                errors.append(FieldError(field.name, f"{field.label or field.name} is required"))
            continue
        if field.name in bad_keys:
            continue

        value = values.get(field.name)
        if _is_empty(field, value):
            if field.required:
                errors.append(FieldError(field.name, f"{field.label or field.name} is required"))
            continue

        message = _VALIDATORS[field.kind](field, value)
        if message:
            errors.append(FieldError(field.name, f"{field.label or field.name} {message}"))

    if errors:
        raise ValidationFailed(errors)


# ---------------------------------------------------------------------------
# Admin CRUD
# ---------------------------------------------------------------------------


async def get_field(session: AsyncSession, field_id: int) -> FormField:
    field = await session.get(FormField, field_id)
    if field is None:
        raise NotFound(f"Form field {field_id} not found")
    return field


async def _ensure_name_free(session: AsyncSession, field: FormField, name: str) -> None:
    stmt = select(FormField.id).where(FormField.name == name)
    if field.category_id is not None:
        stmt = stmt.where(FormField.category_id == field.category_id)
    else:
        stmt = stmt.where(FormField.loan_id == field.loan_id)
    if field.id is not None:
        stmt = stmt.where(FormField.id != field.id)
    if (await session.execute(stmt)).first() is not None:
        raise Conflict(f"A field named '{name}' already exists in this scope")


async def create_field(session: AsyncSession, data: FormFieldCreate) -> FormField:
    """Create a field definition in its category or loan scope."""
    if data.category_id is not None and await session.get(LoanCategory, data.category_id) is None:
        raise NotFound(f"Category {data.category_id} not found")
    if data.loan_id is not None and await session.get(Loan, data.loan_id) is None:
        raise NotFound(f"Loan {data.loan_id} not found")

    field = FormField(**data.model_dump())
    await _ensure_name_free(session, field, data.name)
    session.add(field)
    try:
        await session.commit()
    except IntegrityError as exc:
        await session.rollback()
        raise Conflict(f"A field named '{data.name}' already exists in this scope") from exc
    await session.refresh(field)
    logger.info("Form field %s created (category=%s, loan=%s)", field.name, field.category_id, field.loan_id)
    return field


async def update_field(session: AsyncSession, field_id: int, data: FormFieldUpdate) -> FormField:
    field = await get_field(session, field_id)
    changes = data.model_dump(exclude_unset=True)
    if changes.get("name") and changes["name"] != field.name:
        await _ensure_name_free(session, field, changes["name"])

    kind = changes.get("kind") or field.kind
    options = changes["options"] if changes.get("options") is not None else field.options
    if kind in FieldKind.option_kinds() and not options:
        raise ValidationFailed([FieldError("options", f"{kind.value} fields need at least one option")])

    for attr, value in changes.items():
        if value is None and attr not in ("placeholder",):
            continue
        setattr(field, attr, value)
    await session.commit()
    await session.refresh(field)
    return field


async def delete_field(session: AsyncSession, field_id: int) -> None:
    field = await get_field(session, field_id)
    await session.delete(field)
    await session.commit()
    logger.info("Form field %s deleted", field_id)
