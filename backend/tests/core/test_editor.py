from __future__ import annotations

import pytest

from promptdesk_backend.core.editor import DuplicateVariableError, PromptEditorState, VariableDefinition


def _state_with(*names: str) -> PromptEditorState:
    state = PromptEditorState.empty()
    for name in names:
        index = state.add()
        state.update(index, "name", name)
    return state


def test_add_appends_empty_variable() -> None:
    state = PromptEditorState.empty()

    index = state.add()

    assert index == 0
    assert state.variables == [VariableDefinition(name="", description="", default_value="")]


def test_rename_moves_fill_value_to_new_key() -> None:
    state = _state_with("old")
    state.set_section("task", "Hello {{old}} / {{new}}")
    state.fill("old", "World")

    state.update(0, "name", "new")

    assert state.fill_values == {"new": "World"}
    assert state.preview().text == "[TASK]\nHello {{old}} / World"


def test_rename_without_fill_value_creates_empty_entry() -> None:
    state = PromptEditorState.empty()
    state.add()
    state.fill_values.clear()

    state.update(0, "name", "topic")

    assert state.fill_values == {"topic": ""}


def test_rename_to_existing_name_is_rejected() -> None:
    state = _state_with("a", "b")
    state.fill("a", "1")
    state.fill("b", "2")

    with pytest.raises(DuplicateVariableError):
        state.update(1, "name", "a")

    assert [v.name for v in state.variables] == ["a", "b"]
    assert state.fill_values == {"a": "1", "b": "2"}


def test_duplicate_error_is_a_value_error() -> None:
    assert issubclass(DuplicateVariableError, ValueError)


def test_renaming_to_same_name_keeps_value() -> None:
    state = _state_with("a")
    state.fill("a", "kept")

    state.update(0, "name", "a")

    assert state.fill_values == {"a": "kept"}


def test_empty_names_may_repeat() -> None:
    state = _state_with("a", "b")

    state.update(0, "name", "")
    state.update(1, "name", "")

    assert [v.name for v in state.variables] == ["", ""]


def test_update_other_fields_does_not_touch_fill_values() -> None:
    state = _state_with("a")
    state.fill("a", "x")

    state.update(0, "description", "The A")
    state.update(0, "defaultValue", "dflt")

    assert state.variables[0].description == "The A"
    assert state.variables[0].default_value == "dflt"
    assert state.fill_values == {"a": "x"}


def test_update_unknown_field_raises() -> None:
    state = _state_with("a")

    with pytest.raises(ValueError):
        state.update(0, "colour", "red")


def test_out_of_range_index_is_ignored() -> None:
    state = _state_with("a")

    state.update(5, "name", "b")
    state.remove(5)
    state.remove(-1)

    assert [v.name for v in state.variables] == ["a"]


def test_remove_deletes_variable_and_fill_value() -> None:
    state = _state_with("a", "b")
    state.fill("a", "1")
    state.fill("b", "2")

    state.remove(0)

    assert [v.name for v in state.variables] == ["b"]
    assert state.fill_values == {"b": "2"}


def test_from_prompt_seeds_fill_values_from_defaults() -> None:
    state = PromptEditorState.from_prompt(
        {
            "title": "Support",
            "sections": {"role": "Agent for {{company}}", "task": "Help"},
            "variableDefinitions": [{"name": "company", "description": "", "defaultValue": "Acme"}],
        }
    )

    assert state.title == "Support"
    assert state.fill_values == {"company": "Acme"}
    assert state.preview().text == "[ROLE]\nAgent for Acme\n\n[TASK]\nHelp"


def test_from_template_suffixes_title() -> None:
    state = PromptEditorState.from_template({"title": "Release Notes Writer", "sections": {}})

    assert state.title == "Release Notes Writer (copy)"


def test_set_section_rejects_unknown_key() -> None:
    state = PromptEditorState.empty()

    with pytest.raises(KeyError):
        state.set_section("footer", "x")


def test_section_snapshot_is_trimmed_and_drives_hints() -> None:
    state = PromptEditorState.empty()
    state.set_section("role", "   ")
    state.set_section("task", "  Do it  ")

    preview = state.preview()

    assert state.section_snapshot()["task"] == "Do it"
    assert preview.text == "[TASK]\nDo it"
    assert "Role" in preview.hints[0].text


def test_preview_reflects_mutations_immediately() -> None:
    state = _state_with("name")
    state.set_section("task", "Hi {{name}}")

    assert state.preview().text == "[TASK]\nHi [FILL: name]"
    state.fill("name", "Ann")
    assert state.preview().text == "[TASK]\nHi Ann"
    assert state.preview().estimate.char_count == len("[TASK]\nHi Ann")


def test_copy_text_is_none_when_nothing_assembled() -> None:
    state = PromptEditorState.empty()

    assert state.copy_text() is None
    state.set_section("task", "T")
    assert state.copy_text() == "[TASK]\nT"


def test_save_payload_bakes_fill_values_into_defaults() -> None:
    state = PromptEditorState.from_prompt(
        {
            "title": "  Draft  ",
            "category": "Agent",
            "tags": " a, b ",
            "sections": {"task": "Greet {{who}}"},
            "variableDefinitions": [
                {"name": "who", "description": "Target", "defaultValue": "team"},
                {"name": "  ", "description": "blank", "defaultValue": ""},
            ],
        }
    )
    state.fill("who", "everyone")

    payload = state.to_save_payload()

    assert payload["title"] == "Draft"
    assert payload["tags"] == "a, b"
    assert payload["sections"]["task"] == "Greet {{who}}"
    assert payload["sections"]["outputFormat"] == ""
    assert payload["variableDefinitions"] == [
        {"name": "who", "description": "Target", "defaultValue": "everyone"}
    ]


def test_rename_to_name_differing_only_by_whitespace_is_rejected() -> None:
    state = _state_with("a")
    state.add()

    with pytest.raises(DuplicateVariableError):
        state.update(1, "name", "a ")

    names = [v["name"] for v in state.to_save_payload()["variableDefinitions"]]
    assert names == ["a"]


def test_whitespace_only_names_may_repeat() -> None:
    state = _state_with("  ")
    state.add()

    state.update(1, "name", " ")

    assert [v.name for v in state.variables] == ["  ", " "]
