"""Server-side rendered todo page."""

from __future__ import annotations

from pathlib import Path

from jinja2 import Environment, FileSystemLoader, TemplateError, select_autoescape

from request import HTTPRequest
from response import HTTPResponse
from todo_store import TodoList


class TemplateRenderError(RuntimeError):
    """Raised when the todo template cannot be loaded or rendered."""


class TodoPage:
    """Render ``template_name`` with the injected todo list on every request.

    The Jinja2 environment caches the parsed template and re-reads it only
    when the file on disk changes.
    """

    def __init__(self, todo_list: TodoList, templates_dir: str | Path, template_name: str) -> None:
        self.todo_list = todo_list
        self.template_name = template_name
        self.environment = Environment(
            loader=FileSystemLoader(str(templates_dir)),
            autoescape=select_autoescape(["html"]),
        )

    def render(self) -> str:
        try:
            template = self.environment.get_template(self.template_name)
            return template.render(items=self.todo_list.items)
        except TemplateError as exc:
            raise TemplateRenderError(f"cannot render {self.template_name}: {exc}") from exc

    def __call__(self, request: HTTPRequest) -> HTTPResponse:
        _ = request
        return HTTPResponse(
            status_code=200,
            headers={"Content-Type": "text/html; charset=utf-8"},
            body=self.render(),
        )
