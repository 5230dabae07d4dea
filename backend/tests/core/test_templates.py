import os
import textwrap
from pathlib import Path

import pytest

from promptdesk_backend.core.assembler import compute_hints
from promptdesk_backend.core.editor import PromptEditorState
from promptdesk_backend.core.templates import BUNDLED_TEMPLATES_PATH, TemplateStore


def _write_yaml(path: Path, content: str) -> None:
    path.write_text(textwrap.dedent(content).strip() + "\n", encoding="utf-8")


def test_bundled_catalog_lists_all_templates_in_file_order() -> None:
    store = TemplateStore(BUNDLED_TEMPLATES_PATH)

    templates = store.list()

    assert [t.id for t in templates] == [f"tpl-{i}" for i in range(1, 9)]
    assert templates[0].title == "Customer Support Agent"
    assert templates[0].variable_definitions[0].default_value == "Acme Corp"


def test_bundled_templates_are_complete_prompts() -> None:
    for template in TemplateStore(BUNDLED_TEMPLATES_PATH).list():
        hints = compute_hints(template.sections, template.variable_definitions)
        assert [h.type for h in hints] == ["ok"], template.id


def test_block_scalars_keep_line_breaks() -> None:
    template = TemplateStore(BUNDLED_TEMPLATES_PATH).get("tpl-4")

    assert template.sections["outputFormat"].startswith("For each user story:\n- User Story")


def test_get_unknown_template_raises_key_error() -> None:
    with pytest.raises(KeyError):
        TemplateStore(BUNDLED_TEMPLATES_PATH).get("tpl-99")


def test_missing_file_raises(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        TemplateStore(tmp_path / "absent.yaml").list()


def test_unknown_section_is_rejected(tmp_path: Path) -> None:
    path = tmp_path / "templates.yaml"
    _write_yaml(
        path,
        """
        version: 1
        templates:
          - id: t1
            title: Bad
            sections:
              footer: nope
        """,
    )

    with pytest.raises(ValueError, match="unknown sections"):
        TemplateStore(path).list()


def test_duplicate_ids_are_rejected(tmp_path: Path) -> None:
    path = tmp_path / "templates.yaml"
    _write_yaml(
        path,
        """
        version: 1
        templates:
          - id: t1
            title: One
          - id: t1
            title: Two
        """,
    )

    with pytest.raises(ValueError, match="Duplicate"):
        TemplateStore(path).list()


def test_reload_after_file_change(tmp_path: Path) -> None:
    path = tmp_path / "templates.yaml"
    _write_yaml(
        path,
        """
        version: 1
        templates:
          - id: t1
            title: First
        """,
    )
    store = TemplateStore(path)
    assert store.get("t1").title == "First"

    _write_yaml(
        path,
        """
        version: 2
        templates:
          - id: t1
            title: Second
        """,
    )
    # Force a distinct mtime even on coarse-grained filesystems
    stat = path.stat()
    os.utime(path, (stat.st_atime, stat.st_mtime + 5))

    assert store.get("t1").title == "Second"


def test_template_definition_feeds_editor_copy() -> None:
    template = TemplateStore(BUNDLED_TEMPLATES_PATH).get("tpl-1")

    state = PromptEditorState.from_template(template.as_definition())

    assert state.title == "Customer Support Agent (copy)"
    assert state.fill_values == {"company_name": "Acme Corp"}
    assert "friendly and professional customer support specialist for Acme Corp." in state.preview().text
