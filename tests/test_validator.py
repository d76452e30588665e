"""Tests for action definition validation."""

from typing import Any, Dict

import pytest

from whisper_hub.post_actions.errors import InvalidActionDefinition
from whisper_hub.post_actions.schema import RemoteCompletionAction, TemplateAction
from whisper_hub.post_actions.validator import parse_action, validate


def template_action(**overrides: Any) -> Dict[str, Any]:
    data = {"name": "Test Action", "kind": "template", "template": "Test template {{.Transcript}}"}
    data.update(overrides)
    return data


def remote_action(**overrides: Any) -> Dict[str, Any]:
    data = {
        "name": "AI Action",
        "kind": "remote-completion",
        "prompt": "Summarize this text",
        "model": "gpt-3.5-turbo",
        "temperature": 0.7,
        "maxTokens": 1000,
    }
    data.update(overrides)
    return data


class TestValidDefinitions:
    def test_valid_template(self) -> None:
        assert validate(template_action(description="Test description")) == []

    def test_valid_remote(self) -> None:
        assert validate(remote_action()) == []

    def test_blank_model_means_default(self) -> None:
        assert validate(remote_action(model="")) == []

    def test_typed_model(self) -> None:
        assert validate(TemplateAction(name="Typed", template="{{.Filename}}")) == []


class TestBoundaries:
    def test_name_length(self) -> None:
        assert validate(template_action(name="a" * 100)) == []
        assert validate(template_action(name="a" * 101)) == ["name too long (max 100 characters)"]

    def test_temperature_range(self) -> None:
        assert validate(remote_action(temperature=2.0)) == []
        assert validate(remote_action(temperature=0.0)) == []
        assert validate(remote_action(temperature=2.01)) == ["temperature must be between 0 and 2"]
        assert validate(remote_action(temperature=-0.1)) == ["temperature must be between 0 and 2"]

    def test_max_tokens_range(self) -> None:
        assert validate(remote_action(maxTokens=4000)) == []
        assert validate(remote_action(maxTokens=0)) == []
        assert validate(remote_action(maxTokens=4001)) == ["max tokens must be between 0 and 4000"]
        assert validate(remote_action(maxTokens=-1)) == ["max tokens must be between 0 and 4000"]

    def test_description_length(self) -> None:
        assert validate(template_action(description="a" * 500)) == []
        assert validate(template_action(description="a" * 501)) == ["description too long (max 500 characters)"]

    def test_oversized_template(self) -> None:
        """A 10,001-character template is rejected."""
        violations = validate(template_action(template="a" * 10_001))
        assert violations == ["template too long (max 10000 characters)"]

    def test_oversized_prompt(self) -> None:
        assert validate(remote_action(prompt="a" * 5_001)) == ["prompt too long (max 5000 characters)"]


class TestViolations:
    def test_prompt_required(self) -> None:
        violations = validate({"name": "Test", "kind": "remote-completion", "prompt": "", "model": "gpt-3.5-turbo"})
        assert violations
        assert "prompt required" in violations

    def test_blank_name(self) -> None:
        assert validate(template_action(name="   ")) == ["name required"]

    def test_template_required(self) -> None:
        assert validate(template_action(template="")) == ["template required"]

    def test_invalid_template_syntax(self) -> None:
        violations = validate(template_action(template="{{.InvalidField}"))
        assert len(violations) == 1
        assert violations[0].startswith("invalid template:")

    def test_invalid_model(self) -> None:
        assert validate(remote_action(model="invalid-model")) == ["invalid model: invalid-model"]

    def test_unknown_kind(self) -> None:
        assert validate({"name": "Test", "kind": "bogus"}) == ["invalid action type: bogus"]

    def test_collects_every_violation(self) -> None:
        violations = validate(remote_action(name="", prompt="", model="nope", temperature=3, maxTokens=5000))
        assert violations == [
            "name required",
            "prompt required",
            "invalid model: nope",
            "temperature must be between 0 and 2",
            "max tokens must be between 0 and 4000",
        ]

    def test_kind_specific_fields_only(self) -> None:
        """A template action is not checked for remote fields."""
        assert validate(template_action(model="not-a-model", temperature=99)) == []


class TestMalformedInput:
    @pytest.mark.parametrize("definition", [None, 42, "template", ["name"], object()])
    def test_treated_as_absent(self, definition: Any) -> None:
        assert validate(definition) == ["name required", "invalid action type: "]

    def test_non_string_fields(self) -> None:
        violations = validate(template_action(name=5, template=["x"]))
        assert "name must be a string" in violations
        assert "template must be a string" in violations

    def test_non_numeric_fields(self) -> None:
        violations = validate(remote_action(temperature="hot", maxTokens=True))
        assert violations == ["temperature must be a number", "max_tokens must be a number"]

    def test_self_referential_structure(self) -> None:
        data = template_action()
        data["self"] = data
        data["variables"] = [data]
        assert validate(data) == []

    def test_hostile_mapping(self) -> None:
        class Hostile(dict):
            def __contains__(self, key: object) -> bool:
                raise RuntimeError("boom")

        assert validate(Hostile()) == ["malformed action definition"]

    def test_unhashable_kind(self) -> None:
        assert validate({"name": "Test", "kind": ["template"]}) == ["invalid action type: ['template']"]


class TestParseAction:
    def test_builds_remote_action(self) -> None:
        action = parse_action(remote_action(maxTokens=1500))
        assert isinstance(action, RemoteCompletionAction)
        assert action.max_tokens == 1500
        assert action.temperature == 0.7

    def test_builds_template_action(self) -> None:
        action = parse_action(template_action(id="t-1"))
        assert isinstance(action, TemplateAction)
        assert action.id == "t-1"

    def test_invalid_raises_with_violations(self) -> None:
        with pytest.raises(InvalidActionDefinition) as exc_info:
            parse_action(template_action(template="a" * 10_001))
        assert exc_info.value.violations == ["template too long (max 10000 characters)"]
