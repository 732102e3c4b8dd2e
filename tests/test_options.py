# Copyright 2025 Softwell S.r.l.
# Licensed under the Apache License, Version 2.0

"""Tests for RenderOptions."""

import os

import pytest

from genro_index.options import RenderOptions
from genro_index.templates import DEFAULT_STYLESHEET, DEFAULT_TEMPLATE, DEFAULT_TEMPLATES


class TestRenderOptions:
    """Validation and defaults."""

    def test_defaults(self, tmp_path):
        options = RenderOptions.build(tmp_path)
        assert options.root == str(tmp_path)
        assert options.hidden is False
        assert options.icons is False
        assert options.view == "tiles"
        assert options.stylesheet == DEFAULT_STYLESHEET
        assert options.template == DEFAULT_TEMPLATE
        assert options.concurrency == 10
        assert dict(options.templates["plain"]) == DEFAULT_TEMPLATES["plain"]

    def test_relative_root(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        assert RenderOptions.build("public").root == os.path.join(os.getcwd(), "public")

    def test_empty_root(self):
        with pytest.raises(TypeError):
            RenderOptions.build("")

    def test_invalid_view(self, tmp_path):
        with pytest.raises(ValueError, match="view"):
            RenderOptions.build(tmp_path, view="grid")

    def test_details_view(self, tmp_path):
        assert RenderOptions.build(tmp_path, view="details").view == "details"

    def test_invalid_concurrency(self, tmp_path):
        with pytest.raises(ValueError):
            RenderOptions.build(tmp_path, concurrency=0)

    def test_unknown_template_set(self, tmp_path):
        with pytest.raises(ValueError):
            RenderOptions.build(tmp_path, templates={"markdown": {}})

    def test_immutable(self, tmp_path):
        options = RenderOptions.build(tmp_path, templates={"plain": {"item": "- {file.name}\n"}})
        assert options.templates["plain"]["item"] == "- {file.name}\n"
        with pytest.raises(TypeError):
            options.templates["plain"]["item"] = "x"  # type: ignore[index]
        with pytest.raises(AttributeError):
            options.view = "details"  # type: ignore[misc]

    def test_caller_mapping_not_shared(self, tmp_path):
        overrides = {"html": {"header": ""}}
        options = RenderOptions.build(tmp_path, templates=overrides)
        overrides["html"]["header"] = "changed"
        assert options.templates["html"]["header"] == ""

    def test_as_dict(self, tmp_path):
        options = RenderOptions.build(tmp_path, icons=True, template=lambda locals: "")
        data = options.as_dict()
        assert data["icons"] is True
        assert data["template"] == "<callable>"
        assert data["root"] == str(tmp_path)
