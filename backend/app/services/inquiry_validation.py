"""Field and form validation for consultation inquiries.

Every field validator takes the raw form value and returns an empty string when
the value is acceptable, or a human-readable message otherwise. The same
validators back the pydantic request schema, so the HTTP surface and the
submission pipeline reject exactly the same input.
"""
import re
from typing import Any, Callable, Iterable, Mapping, Optional

INQUIRY_TYPES = (
    "consultation",
    "contingency_placement",
    "contract_services",
    "coaching",
    "general",
)
CONTACT_METHODS = ("email", "phone", "either")
URGENCY_LEVELS = ("immediate", "within-week", "within-month", "flexible")

# Form order; the first invalid field in this order receives focus
FIELD_ORDER = (
    "full_name",
    "email",
    "phone",
    "company_name",
    "job_title",
    "inquiry_type",
    "message",
    "preferred_contact",
    "urgency",
)

NAME_MIN_LENGTH = 2
NAME_MAX_LENGTH = 100
PHONE_MIN_LENGTH = 8
MESSAGE_MAX_LENGTH = 1000

NAME_PATTERN = re.compile(r"^[A-Za-z\s'-]+$")
EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
PHONE_PATTERN = re.compile(r"^[\d\s+\-().]+$")


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def validate_full_name(value: Any) -> str:
    name = _text(value)
    if not name:
        return "Full name is required"
    if len(name) < NAME_MIN_LENGTH:
        return f"Full name must be at least {NAME_MIN_LENGTH} characters"
    if len(name) > NAME_MAX_LENGTH:
        return "Full name is too long"
    if not NAME_PATTERN.match(name):
        return "Full name can only contain letters, spaces, hyphens, and apostrophes"
    if len(name.split()) < 2:
        return "Please enter your first and last name"
    return ""


def validate_email(value: Any) -> str:
    email = _text(value)
    if not email:
        return "Email is required"
    if not EMAIL_PATTERN.match(email):
        return "Please enter a valid email address"
    return ""


def validate_phone(value: Any) -> str:
    phone = _text(value)
    if not phone:
        return ""
    if not PHONE_PATTERN.match(phone):
        return "Phone number can only contain digits, spaces, and + - ( ) ."
    if len(phone) < PHONE_MIN_LENGTH:
        return f"Phone number must be at least {PHONE_MIN_LENGTH} characters"
    return ""


def validate_inquiry_type(value: Any) -> str:
    inquiry_type = _text(value)
    if not inquiry_type:
        return "Please select a service interest"
    if inquiry_type not in INQUIRY_TYPES:
        return "Please select a valid service interest"
    return ""


def validate_message(value: Any) -> str:
    if len(_text(value)) > MESSAGE_MAX_LENGTH:
        return f"Message must be {MESSAGE_MAX_LENGTH} characters or less"
    return ""


def validate_preferred_contact(value: Any) -> str:
    method = _text(value)
    if method and method not in CONTACT_METHODS:
        return "Please choose email, phone, or either"
    return ""


def validate_urgency(value: Any) -> str:
    urgency = _text(value)
    if urgency and urgency not in URGENCY_LEVELS:
        return "Please select a valid timeline"
    return ""


FIELD_VALIDATORS: dict[str, Callable[[Any], str]] = {
    "full_name": validate_full_name,
    "email": validate_email,
    "phone": validate_phone,
    "inquiry_type": validate_inquiry_type,
    "message": validate_message,
    "preferred_contact": validate_preferred_contact,
    "urgency": validate_urgency,
}


def validate_field(field: str, form: Mapping[str, Any]) -> str:
    """Validate one field of the form. Free-text fields always pass."""
    validator = FIELD_VALIDATORS.get(field)
    if validator is None:
        return ""
    return validator(form.get(field))


def validate_inquiry(form: Mapping[str, Any]) -> dict[str, str]:
    """Run every field validator and collect the failures by field name."""
    errors: dict[str, str] = {}
    for field in FIELD_ORDER:
        message = validate_field(field, form)
        if message:
            errors[field] = message
    return errors


def normalize_form(form: Mapping[str, Any]) -> dict[str, Any]:
    """Strip text and turn numbers into text, as the validators read them.

    Values of any other type are left alone so validation can reject them.
    """
    normalized: dict[str, Any] = {}
    for field, value in form.items():
        if isinstance(value, str):
            value = value.strip()
        elif isinstance(value, (int, float)) and not isinstance(value, bool):
            value = str(value)
        normalized[field] = value
    return normalized


def first_invalid_field(errors: Mapping[str, str]) -> Optional[str]:
    for field in FIELD_ORDER:
        if field in errors:
            return field
    return None


class FieldInteractionTracker:
    """Decides which validation errors a form should show.

    Errors stay hidden until the user has left a field once. After that the
    field is re-validated on every change. Submitting touches every field and
    re-validates the whole form regardless of prior interaction.
    """

    def __init__(self, fields: Iterable[str] = FIELD_ORDER):
        self.fields = tuple(fields)
        self.touched: set[str] = set()
        self.errors: dict[str, str] = {}

    def blur(self, field: str, form: Mapping[str, Any]) -> str:
        self.touched.add(field)
        return self._revalidate(field, form)

    def change(self, field: str, form: Mapping[str, Any]) -> str:
        if field not in self.touched:
            return ""
        return self._revalidate(field, form)

    def submit(self, form: Mapping[str, Any]) -> dict[str, str]:
        self.touched.update(self.fields)
        self.errors = validate_inquiry(form)
        return dict(self.errors)

    @property
    def visible_errors(self) -> dict[str, str]:
        return {field: msg for field, msg in self.errors.items() if field in self.touched}

    def _revalidate(self, field: str, form: Mapping[str, Any]) -> str:
        message = validate_field(field, form)
        if message:
            self.errors[field] = message
        else:
            self.errors.pop(field, None)
        return message
