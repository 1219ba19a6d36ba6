"""Unit tests for the todo list and its rendered page."""

import os
from dataclasses import FrozenInstanceError
from pathlib import Path

import pytest

from handlers.todo_handlers import TemplateRenderError, TodoPage
from request import HTTPRequest
from todo_store import TodoList, default_todo_list

PROJECT_ROOT = Path(__file__).resolve().parent.parent
TEMPLATES_DIR = PROJECT_ROOT / "templates"
DEFAULT_ITEMS = ("顔を洗う", "朝食を食べる", "歯を磨く")


def _todo_request() -> HTTPRequest:
    return HTTPRequest(method="GET", path="/todo", http_version="HTTP/1.1")


def test_default_todo_list_holds_three_items_in_order() -> None:
    todo_list = default_todo_list()

    assert todo_list.items == DEFAULT_ITEMS
    assert list(todo_list) == list(DEFAULT_ITEMS)
    assert len(todo_list) == 3


def test_todo_list_is_immutable() -> None:
    todo_list = TodoList.from_items(["a", "b"])

    with pytest.raises(FrozenInstanceError):
        todo_list.items = ("c",)  # type: ignore[misc]
    assert isinstance(todo_list.items, tuple)


def test_todo_page_renders_items_in_order() -> None:
    page = TodoPage(default_todo_list(), TEMPLATES_DIR, "todo.html")

    response = page(_todo_request())

    assert response.status_code == 200
    assert response.headers["Content-Type"] == "text/html; charset=utf-8"
    body = response.body.decode("utf-8")
    positions = [body.index(item) for item in DEFAULT_ITEMS]
    assert positions == sorted(positions)
    assert '<link rel="stylesheet" href="/static/app.css">' in body


def test_todo_page_is_identical_across_requests() -> None:
    todo_list = default_todo_list()
    page = TodoPage(todo_list, TEMPLATES_DIR, "todo.html")

    first = page(_todo_request()).body
    second = page(_todo_request()).body

    assert first == second
    assert todo_list.items == DEFAULT_ITEMS


def test_injected_list_is_rendered(tmp_path: Path) -> None:
    (tmp_path / "list.html").write_text(
        "{% for item in items %}[{{ item }}]{% endfor %}", encoding="utf-8"
    )
    page = TodoPage(TodoList.from_items(["one", "two"]), tmp_path, "list.html")

    assert page.render() == "[one][two]"


def test_items_are_html_escaped(tmp_path: Path) -> None:
    (tmp_path / "list.html").write_text(
        "{% for item in items %}<li>{{ item }}</li>{% endfor %}", encoding="utf-8"
    )
    page = TodoPage(TodoList.from_items(["<script>"]), tmp_path, "list.html")

    assert page.render() == "<li>&lt;script&gt;</li>"


def test_template_changes_on_disk_are_picked_up(tmp_path: Path) -> None:
    template = tmp_path / "list.html"
    template.write_text("v1", encoding="utf-8")
    page = TodoPage(TodoList.from_items([]), tmp_path, "list.html")
    assert page.render() == "v1"

    template.write_text("version two", encoding="utf-8")
    stat = template.stat()
    os.utime(template, (stat.st_atime, stat.st_mtime + 10))

    assert page.render() == "version two"


def test_missing_template_raises_render_error(tmp_path: Path) -> None:
    page = TodoPage(default_todo_list(), tmp_path, "todo.html")

    with pytest.raises(TemplateRenderError, match="todo.html"):
        page(_todo_request())


def test_broken_template_raises_render_error(tmp_path: Path) -> None:
    (tmp_path / "todo.html").write_text("{% for item in items %}", encoding="utf-8")
    page = TodoPage(default_todo_list(), tmp_path, "todo.html")

    with pytest.raises(TemplateRenderError):
        page.render()
