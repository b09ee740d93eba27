"""Field validation rules for submitted form data."""

from __future__ import annotations

from typing import Iterator, Mapping, Optional, Sequence, Union

from email_validator import EmailNotValidError, validate_email


FormValue = Union[str, Sequence[str]]

BLANK_FIELD_MESSAGE = "This field cannot be blank"
INVALID_EMAIL_MESSAGE = "Invalid email address"


class FormErrors:
    """Field name -> ordered error messages; only ever grows."""

    def __init__(self) -> None:
        self._errors: dict[str, list[str]] = {}

    def add(self, field: str, message: str) -> None:
        self._errors.setdefault(field, []).append(message)

    def get(self, field: str) -> Optional[str]:
        """Return the first message recorded for `field`, if any."""
        messages = self._errors.get(field)
        if not messages:
            return None
        return messages[0]

    def messages(self, field: str) -> list[str]:
        return list(self._errors.get(field, []))

    def as_dict(self) -> dict[str, list[str]]:
        return {field: list(messages) for field, messages in self._errors.items()}

    def __contains__(self, field: object) -> bool:
        return field in self._errors

    def __iter__(self) -> Iterator[str]:
        return iter(self._errors)

    def __len__(self) -> int:
        return len(self._errors)


class Form:
    """One validation pass over one submission.

    Create a fresh instance per request; errors accumulate across calls and
    are never cleared.
    """

    def __init__(self, data: Optional[Mapping[str, FormValue]] = None) -> None:
        self._data: dict[str, list[str]] = {}
        for field, value in (data or {}).items():
            if isinstance(value, str):
                self._data[field] = [value]
            else:
                self._data[field] = [str(item) for item in value]
        self.errors = FormErrors()

    def get(self, field: str) -> str:
        values = self._data.get(field)
        if not values:
            return ""
        return values[0]

    def required(self, *fields: str) -> None:
        for field in fields:
            if not self.get(field).strip():
                self.errors.add(field, BLANK_FIELD_MESSAGE)

    def has(self, field: str) -> bool:
        if self.get(field) == "":
            self.errors.add(field, BLANK_FIELD_MESSAGE)
            return False
        return True

    def min_length(self, field: str, length: int) -> bool:
        if len(self.get(field)) < length:
            self.errors.add(field, f"This field must be at least {length} characters long")
            return False
        return True

    def is_email(self, field: str) -> bool:
        try:
            validate_email(self.get(field), check_deliverability=False)
        except EmailNotValidError:
            self.errors.add(field, INVALID_EMAIL_MESSAGE)
            return False
        return True

    def valid(self) -> bool:
        return len(self.errors) == 0
