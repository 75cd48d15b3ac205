"""
Tests for message normalization and response serialization.
"""

from datetime import datetime, timezone

import pytest

from applog.models.log_entry import (
    DEFAULT_MESSAGE,
    HealthResponse,
    LogCreateRequest,
    LogCreateResponse,
    normalize_message,
)


class TestNormalizeMessage:
    """Submitted messages become trimmed text."""

    def test_plain_text_kept(self) -> None:
        assert normalize_message("hi") == "hi"

    def test_whitespace_trimmed(self) -> None:
        assert normalize_message("  hello world \n") == "hello world"

    @pytest.mark.parametrize("value", [None, "", "   ", "\t\n"])
    def test_empty_replaced_by_default(self, value: object) -> None:
        assert normalize_message(value) == DEFAULT_MESSAGE

    def test_numbers_converted_to_text(self) -> None:
        assert normalize_message(42) == "42"

    def test_booleans_spelled_like_json(self) -> None:
        assert normalize_message(True) == "true"
        assert normalize_message(False) == "false"

    def test_default_text(self) -> None:
        assert DEFAULT_MESSAGE == "Hello from frontend"


class TestRequestModel:
    """POST /api/logs body model."""

    def test_message_optional(self) -> None:
        assert LogCreateRequest().message is None

    def test_unknown_fields_ignored(self) -> None:
        body = LogCreateRequest.model_validate({"message": "x", "level": "INFO"})
        assert body.message == "x"

    def test_non_string_message_accepted(self) -> None:
        body = LogCreateRequest.model_validate({"message": {"nested": 1}})
        assert body.message == {"nested": 1}


class TestResponseModels:
    """Responses use the camelCase wire names."""

    def test_create_response_aliases(self) -> None:
        created = datetime(2026, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
        data = LogCreateResponse(id=7, created_at=created).model_dump(by_alias=True)

        assert data == {"ok": True, "id": 7, "createdAt": created}

    def test_health_response_aliases(self) -> None:
        now = datetime.now(timezone.utc)
        data = HealthResponse(db_utc_now=now).model_dump(by_alias=True)

        assert data == {"ok": True, "dbUtcNow": now}
