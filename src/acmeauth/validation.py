"""Credential validation for the sign-up and login forms.

Raw form values are checked with pydantic before anything reaches the
identity provider. Each field has one rule, so every violation of a
field is reported with that rule's message.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Annotated, TypeAlias

from email_validator import validate_email
from pydantic import (
    AfterValidator,
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
)

if TYPE_CHECKING:
    from collections.abc import Mapping

NAME_MIN_LENGTH = 2
PASSWORD_MIN_LENGTH = 8

FIELD_MESSAGES: dict[str, str] = {
    "name": f"Name must be at least {NAME_MIN_LENGTH} characters",
    "email": "Invalid email address",
    "password": f"Password must be at least {PASSWORD_MIN_LENGTH} characters",
}

FieldErrors: TypeAlias = dict[str, list[str]]


def _check_email(value: str) -> str:
    # Reserved .test domains are accepted; other special-use names are not
    return validate_email(
        value, check_deliverability=False, test_environment=True
    ).normalized


EmailAddress = Annotated[str, AfterValidator(_check_email)]


def _strip(value: object) -> object:
    return value.strip() if isinstance(value, str) else value


class LoginCredentials(BaseModel):
    """Validated login form."""

    model_config = ConfigDict(frozen=True)

    email: EmailAddress
    password: str = Field(min_length=PASSWORD_MIN_LENGTH, repr=False)

    @field_validator("email", mode="before")
    @classmethod
    def strip_email(cls, value: object) -> object:
        return _strip(value)


class SignUpCredentials(BaseModel):
    """Validated registration form."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=NAME_MIN_LENGTH)
    email: EmailAddress
    password: str = Field(min_length=PASSWORD_MIN_LENGTH, repr=False)

    @field_validator("email", mode="before")
    @classmethod
    def strip_email(cls, value: object) -> object:
        return _strip(value)


def form_value(form: Mapping[str, object], name: str) -> str:
    """Read a text field from a submitted form; missing or non-text is ""."""
    value = form.get(name)
    return value if isinstance(value, str) else ""


def flatten_errors(error: ValidationError) -> FieldErrors:
    """Collapse a pydantic ValidationError into ``{field: [message, ...]}``."""
    field_errors: FieldErrors = {}
    for detail in error.errors():
        field = str(detail["loc"][0]) if detail["loc"] else "form"
        message = FIELD_MESSAGES.get(field, detail["msg"])
        messages = field_errors.setdefault(field, [])
        if message not in messages:
            messages.append(message)
    return field_errors


def validate_sign_up(form: Mapping[str, object]) -> SignUpCredentials | FieldErrors:
    """Validate a registration form.

    Returns:
        SignUpCredentials when every rule passes, otherwise the field errors.
    """
    try:
        return SignUpCredentials(
            name=form_value(form, "name"),
            email=form_value(form, "email"),
            password=form_value(form, "password"),
        )
    except ValidationError as e:
        return flatten_errors(e)


def validate_login(form: Mapping[str, object]) -> LoginCredentials | FieldErrors:
    """Validate a login form.

    Returns:
        LoginCredentials when every rule passes, otherwise the field errors.
    """
    try:
        return LoginCredentials(
            email=form_value(form, "email"),
            password=form_value(form, "password"),
        )
    except ValidationError as e:
        return flatten_errors(e)
