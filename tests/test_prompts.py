"""Tests for prompt templates and placeholder substitution."""

from objective.llm.prompts import (
    CHECK_TASK_COMPLETED_PROMPT,
    CREATE_TASK_PROMPT,
    ObjectivePrompts,
    substitute_prompt,
)


class TestSubstitutePrompt:
    """Tests for substitute_prompt."""

    def test_replaces_all_placeholders(self) -> None:
        result = substitute_prompt(
            "{{objective}} / {{parent}} / {{task}}",
            objective="Goal",
            task="Step",
            parent="Phase",
        )
        assert result == "Goal / Phase / Step"

    def test_placeholders_are_case_insensitive(self) -> None:
        result = substitute_prompt("{{TASK}} and {{Task}}", task="dig")
        assert result == "dig and dig"

    def test_missing_values_render_empty(self) -> None:
        assert substitute_prompt("[{{task}}]") == "[]"

    def test_backslashes_are_literal(self) -> None:
        result = substitute_prompt("{{task}}", task=r"open C:\new\folder")
        assert result == r"open C:\new\folder"

    def test_global_substitution_runs_last(self) -> None:
        """Host substitution sees the already filled objective text."""
        seen: list[str] = []

        def host(text: str) -> str:
            seen.append(text)
            return text.replace("{{char}}", "Aria")

        result = substitute_prompt(
            "{{char}} wants {{objective}}",
            objective="the {{char}} crown",
            substitute_global=host,
        )
        assert seen == ["{{char}} wants the {{char}} crown"]
        assert result == "Aria wants the Aria crown"

    def test_default_templates_use_placeholders(self) -> None:
        assert "{{objective}}" in CREATE_TASK_PROMPT
        assert "{{task}}" in CHECK_TASK_COMPLETED_PROMPT


class TestObjectivePrompts:
    """Tests for the prompt set container."""

    def test_from_dict_none_gives_defaults(self) -> None:
        assert ObjectivePrompts.from_dict(None) == ObjectivePrompts()

    def test_from_dict_keeps_custom_and_fills_missing(self) -> None:
        prompts = ObjectivePrompts.from_dict({"currentTask": "Now: {{task}}"})
        assert prompts.current_task == "Now: {{task}}"
        assert prompts.create_task == CREATE_TASK_PROMPT

    def test_to_dict_keys(self) -> None:
        assert set(ObjectivePrompts().to_dict()) == {
            "createTask",
            "checkTaskCompleted",
            "currentTask",
        }
