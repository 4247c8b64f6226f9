"""
Tests for validating model output against stage schemas
"""
import pytest

from ai_agent.pipeline.errors import SchemaValidationError
from ai_agent.pipeline.validator import validate
from ai_agent.schemas.project import ProjectIntent

from conftest import INTENT


class TestValidate:

    def test_valid_intent(self):
        intent = validate("intent", INTENT)
        assert isinstance(intent, ProjectIntent)
        assert intent.integrations["auth"] == "clerk"

    def test_missing_field_lists_issue(self):
        data = {k: v for k, v in INTENT.items() if k != "complexity"}

        with pytest.raises(SchemaValidationError) as exc_info:
            validate("intent", data)

        error = exc_info.value
        assert error.stage == "intent"
        assert not error.retryable
        assert [issue["loc"] for issue in error.issues] == ["complexity"]
        assert error.message.startswith("Invalid AI output")

    def test_confidence_out_of_range(self):
        with pytest.raises(SchemaValidationError):
            validate("intent", {**INTENT, "confidence": 1.5})

    def test_empty_file_path_rejected(self):
        with pytest.raises(SchemaValidationError) as exc_info:
            validate("code", {"files": [{"path": "", "content": "x"}]})
        assert exc_info.value.issues[0]["loc"] == "files.0.path"

    def test_non_object_output(self):
        with pytest.raises(SchemaValidationError):
            validate("architecture", ["not", "an", "object"])

    def test_unknown_stage(self):
        with pytest.raises(ValueError):
            validate("deploy", {})
