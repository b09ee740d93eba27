"""Tests for submitted form validation rules."""

from __future__ import annotations

from bookings.domain.forms import BLANK_FIELD_MESSAGE, INVALID_EMAIL_MESSAGE, Form


def test_empty_form_is_valid() -> None:
    form = Form({})

    assert form.valid()


def test_required_without_fields_is_valid() -> None:
    form = Form({})
    form.required()

    assert form.valid()


def test_required_reports_every_missing_field() -> None:
    form = Form({})
    form.required("a", "b", "c")

    assert not form.valid()
    assert sorted(form.errors) == ["a", "b", "c"]
    assert form.errors.get("a") == BLANK_FIELD_MESSAGE


def test_required_passes_when_fields_present() -> None:
    form = Form({"a": "a", "b": "a", "c": "a"})
    form.required("a", "b", "c")

    assert form.valid()


def test_required_treats_whitespace_as_blank() -> None:
    form = Form({"a": "   "})
    form.required("a")

    assert "a" in form.errors


def test_has_returns_false_and_records_error_for_missing_field() -> None:
    form = Form({})

    assert form.has("whatever") is False
    assert form.errors.get("whatever") == BLANK_FIELD_MESSAGE


def test_has_returns_true_for_present_field() -> None:
    form = Form({"key": "values"})

    assert form.has("key") is True
    assert form.valid()


def test_min_length_fails_for_missing_field() -> None:
    form = Form({})

    assert form.min_length("x", 10) is False
    assert not form.valid()
    assert form.errors.get("x") == "This field must be at least 10 characters long"


def test_min_length_passes_for_long_enough_value() -> None:
    form = Form({"key": "values"})

    assert form.min_length("key", 1) is True
    assert form.valid()


def test_is_email_rejects_missing_field() -> None:
    form = Form({})
    form.is_email("email")

    assert not form.valid()


def test_is_email_rejects_invalid_address() -> None:
    form = Form({"email": "not_valid"})

    assert form.is_email("email") is False
    assert form.errors.get("email") == INVALID_EMAIL_MESSAGE


def test_is_email_accepts_valid_address() -> None:
    form = Form({"valid_email": "test@gmail.com"})

    assert form.is_email("valid_email") is True
    assert form.valid()


def test_errors_accumulate_in_order_for_one_field() -> None:
    form = Form({"first_name": ""})
    form.required("first_name")
    form.min_length("first_name", 3)

    assert form.errors.messages("first_name") == [
        BLANK_FIELD_MESSAGE,
        "This field must be at least 3 characters long",
    ]


def test_multi_valued_field_uses_first_value() -> None:
    form = Form({"room_id": ["3", "4"]})

    assert form.get("room_id") == "3"
    assert form.get("missing") == ""
