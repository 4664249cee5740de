"""Tests for form types, validation and the form wrapper."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from datetime import date
from typing import Any

import pytest


def _container() -> Any:
    from cog.forms import Validator
    from cog.http import get_current_request
    from cog.service import Container

    container = Container()
    container["validator"] = lambda c: Validator()
    container["request"] = lambda c: get_current_request()
    return container


@contextmanager
def posted(data: dict[str, Any]) -> Iterator[None]:
    """Run the block while handling a POST with this form data."""
    from starlette.requests import Request as StarletteRequest

    from cog.http import Request, request_scope

    scope = {"type": "http", "method": "POST", "path": "/", "query_string": b"", "headers": []}
    with request_scope(Request(StarletteRequest(scope), data)):
        yield


class TestFormTypes:
    """Core types supply default options."""

    def test_defaults_merged_under_options(self) -> None:
        from cog.forms import FormField

        form_field = FormField("tags", "select", {"multiple": True})
        assert form_field.options == {"choices": {}, "multiple": True}

    def test_date_and_time_use_single_text_widget(self) -> None:
        from cog.forms import FormField

        assert FormField("published", "date").widget == "single_text"
        assert FormField("starts", "time").widget == "single_text"
        assert FormField("at", "datetime").widget is None

    def test_unknown_type(self) -> None:
        from cog.forms import FormField

        with pytest.raises(ValueError, match="Form type `colour` does not exist"):
            FormField("c", "colour")

    def test_label(self) -> None:
        from cog.forms import FormField

        assert FormField("first_name").label == "First name"
        assert FormField("first_name", options={"label": "Given name"}).label == "Given name"

    def test_bind_keeps_known_fields(self) -> None:
        from cog.forms import Form, FormField

        form = Form("post").add(FormField("title")).add(FormField("body", "textarea"))
        assert not form.is_bound

        form.bind({"title": "Hi", "hack": "x"})
        assert form.is_bound
        assert form.data == {"title": "Hi", "body": None}
        assert "title" in form
        assert len(form) == 2


class TestValidator:
    """Rules declared per field are checked with a generated pydantic model."""

    def test_valid_data(self) -> None:
        from cog.forms import Validator

        validator = Validator()
        validator.field("title").required().max_length(20).field("age").type("int").min(18)

        assert validator.validate({"title": "  Hello  ", "age": "21"})
        assert validator.get_data() == {"title": "Hello", "age": 21}
        assert validator.get_messages() == {}

    def test_required_message_uses_label(self) -> None:
        from cog.forms import Validator

        validator = Validator()
        validator.field("first_name")
        validator.field("email", "E-mail address")

        assert not validator.validate({"first_name": "   "})
        assert validator.get_messages() == {
            "first_name": ["First name is required."],
            "email": ["E-mail address is required."],
        }
        assert validator.get_data() == {}

    def test_optional_empty_value_is_none(self) -> None:
        from cog.forms import Validator

        validator = Validator()
        validator.field("nickname").optional().min_length(3)

        assert validator.validate({"nickname": ""})
        assert validator.get_data() == {"nickname": None}

    def test_constraint_messages(self) -> None:
        from cog.forms import Validator

        validator = Validator()
        validator.field("age").type("int").min(18).max(99)
        validator.field("code").pattern(r"^[A-Z]{3}$")

        assert not validator.validate({"age": "12", "code": "abc"})
        messages = validator.get_messages()
        assert messages["age"][0].startswith("Age: ")
        assert "greater than or equal to 18" in messages["age"][0]
        assert messages["code"][0].startswith("Code: ")

    def test_email(self) -> None:
        from cog.forms import Validator

        validator = Validator()
        validator.field("email").email()

        assert validator.validate({"email": "sam@example.com"})
        assert not validator.validate({"email": "not-an-address"})
        assert validator.get_messages() == {"email": ["Email: must be a valid e-mail address"]}

    def test_date_type(self) -> None:
        from cog.forms import Validator

        validator = Validator()
        validator.field("published").type("date")

        assert validator.validate({"published": "2024-03-01"})
        assert validator.get_data() == {"published": date(2024, 3, 1)}

    def test_unknown_type_name(self) -> None:
        from cog.forms import Validator

        with pytest.raises(ValueError, match="Unknown field type `uuid`"):
            Validator().field("id").type("uuid")

    def test_validate_resets_previous_result(self) -> None:
        from cog.forms import Validator

        validator = Validator()
        validator.field("title")

        assert not validator.validate({})
        assert validator.validate({"title": "Hi"})
        assert validator.get_messages() == {}

    def test_clear(self) -> None:
        from cog.forms import Validator

        validator = Validator()
        validator.field("title")
        assert validator.clear() is validator
        assert validator.fields == {}
        assert validator.validate({})


class TestFormWrapper:
    """The wrapper keeps form fields and validator rules in step."""

    def test_add_declares_validator_field(self) -> None:
        from cog.forms import FormWrapper

        form = FormWrapper(_container())
        form.add("title", "text", "Post title").val().max_length(5)

        assert form.field("title").label == "Post title"
        assert not form.is_valid(data={"title": "Too long"})
        assert form.get_messages()["title"][0].startswith("Post title: ")

    def test_not_required_option_makes_field_optional(self) -> None:
        from cog.forms import FormWrapper

        form = FormWrapper(_container()).add("summary", "textarea", options={"required": False})
        assert form.is_valid(data={})

    def test_form_type_implies_validator_type(self) -> None:
        from cog.forms import FormWrapper

        form = FormWrapper(_container())
        form.add("count", "integer").add("published", "date").add("contact", "email")

        assert form.is_valid(data={"count": "3", "published": "2024-03-01", "contact": "a@b.io"})
        assert form.get_filtered_data({"count": "3", "published": "2024-03-01", "contact": "a@b.io"}) == {
            "count": 3,
            "published": date(2024, 3, 1),
            "contact": "a@b.io",
        }
        assert not form.is_valid(data={"count": "three", "published": "2024-03-01", "contact": "x"})

    def test_add_form_field_instance(self) -> None:
        from cog.forms import FormField, FormWrapper

        form = FormWrapper(_container()).add(FormField("tags", "select"), label="Tags")
        assert form.field().options["label"] == "Tags"
        assert form.field().type == "select"

    def test_add_rejects_other_children(self) -> None:
        from cog.forms import FormWrapper

        with pytest.raises(TypeError, match="field name or FormField"):
            FormWrapper(_container()).add(42)  # type: ignore[arg-type]

    def test_val_and_field_need_fields(self) -> None:
        from cog.forms import FormWrapper

        form = FormWrapper(_container())
        with pytest.raises(LookupError):
            form.val()
        with pytest.raises(LookupError):
            form.field()

        form.add("title")
        with pytest.raises(KeyError, match="does not exist"):
            form.field("missing")

    def test_unbound_form_without_data(self) -> None:
        from cog.errors import FormValidationError
        from cog.forms import FormWrapper

        form = FormWrapper(_container()).add("title")
        assert form.get_data() == {}
        with pytest.raises(FormValidationError, match="has not been submitted"):
            form.is_valid()

    def test_clear(self) -> None:
        from cog.forms import FormWrapper

        form = FormWrapper(_container()).add("title")
        validator = form.get_validator()

        assert form.clear() is form
        assert len(form.get_form()) == 0
        assert form.get_validator() is not validator

    def test_no_request_means_no_post(self) -> None:
        from cog.forms import FormWrapper

        form = FormWrapper(_container()).add("title")
        assert form.get_post() == {}
        assert not form.is_post()
        assert not form.handle_request().get_form().is_bound

    def test_handle_request_binds_posted_fields(self) -> None:
        from cog.forms import FormWrapper

        form = FormWrapper(_container()).add("title").add("body", "textarea")
        with posted({"title": "Hello", "body": "Text", "csrf": "x"}):
            assert form.is_post()
            form.handle_request()
            assert form.is_valid(from_post=True)

        assert form.get_data() == {"title": "Hello", "body": "Text"}
        assert form.is_valid()
        assert form.get_filtered_data() == {"title": "Hello", "body": "Text"}

    def test_nested_form_data(self) -> None:
        from cog.forms import FormWrapper

        form = FormWrapper(_container(), name="post").add("title")
        with posted({"post": {"title": "Nested"}}):
            assert form.get_post() == {"title": "Nested"}

    @pytest.mark.asyncio
    async def test_bracketed_fields_from_request_body(self) -> None:
        from starlette.requests import Request as StarletteRequest

        from cog.forms import FormWrapper
        from cog.http import request_scope
        from cog.http.request import build_request

        body = b"post%5Btitle%5D=Hello&post%5Bbody%5D=Text&title=Other"

        async def receive() -> dict[str, Any]:
            return {"type": "http.request", "body": body, "more_body": False}

        scope = {
            "type": "http",
            "method": "POST",
            "path": "/",
            "query_string": b"",
            "headers": [(b"content-type", b"application/x-www-form-urlencoded")],
        }
        request = await build_request(StarletteRequest(scope, receive))

        form = FormWrapper(_container(), name="post").add("title").add("body", "textarea")
        with request_scope(request):
            form.handle_request()

        assert form.get_data() == {"title": "Hello", "body": "Text"}
