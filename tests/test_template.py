"""
Tests for template rendering and unique ids.
"""

import re

import pytest

from psprovisioner.errors import TemplateError
from psprovisioner.modules.template import check, render, time_ordered_id


class TestRender:
    """Test render()."""

    def test_renders_named_fields(self):
        result = render("{{.Vars}}&'{{.Path}}'", {"Vars": "$env:A=\"1\"; ", "Path": "c:/s.ps1"})
        assert result == "$env:A=\"1\"; &'c:/s.ps1'"

    def test_whitespace_inside_braces(self):
        assert render("x {{ .Path }} y", {"Path": "p"}) == "x p y"

    def test_single_braces_are_literal(self):
        template = "if (x){$ProgressPreference='SilentlyContinue'};{{.Vars}}"
        assert render(template, {"Vars": "V"}) == "if (x){$ProgressPreference='SilentlyContinue'};V"

    def test_substituted_values_are_not_rendered_again(self):
        assert render("{{.Vars}}", {"Vars": "{{.Path}}"}) == "{{.Path}}"

    def test_repeated_field(self):
        assert render("{{.TaskName}}/{{.TaskName}}", {"TaskName": "t"}) == "t/t"

    def test_unknown_field(self):
        with pytest.raises(TemplateError) as exc_info:
            render("{{.Nope}}", {"Vars": "", "Path": ""})
        assert "Nope" in str(exc_info.value)

    def test_action_without_dot(self):
        with pytest.raises(TemplateError):
            render("{{Vars}}", {"Vars": ""})

    def test_unclosed_action(self):
        with pytest.raises(TemplateError) as exc_info:
            render("{{.Vars}} &'{{.Path'", {"Vars": "", "Path": ""})
        assert "unclosed" in str(exc_info.value)

    def test_check_accepts_valid_template(self):
        check("{{.Vars}}{{.Path}}", {"Vars": None, "Path": None})

    def test_check_rejects_unknown_field(self):
        with pytest.raises(TemplateError):
            check("{{.Other}}", {"Vars": None, "Path": None})


class TestTimeOrderedId:
    """Test time_ordered_id()."""

    def test_layout(self):
        assert re.fullmatch(r"[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}", time_ordered_id())

    def test_unique(self):
        ids = {time_ordered_id() for _ in range(1000)}
        assert len(ids) == 1000

    def test_time_prefix_orders(self, monkeypatch):
        import psprovisioner.modules.template.ids as ids

        monkeypatch.setattr(ids.time, "time", lambda: 1000)
        earlier = ids.time_ordered_id()
        monkeypatch.setattr(ids.time, "time", lambda: 2000)
        later = ids.time_ordered_id()

        assert earlier[:8] == f"{1000:08x}"
        assert earlier < later
