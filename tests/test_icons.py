# Copyright 2025 Softwell S.r.l.
# Licensed under the Apache License, Version 2.0

"""Tests for IconCatalog."""

import base64
import threading
from pathlib import Path

import pytest

from genro_index.icons import ICON_MAP, ICONS_DIR, IconCatalog
from genro_index.listing import DirectoryEntry, EntryStat


def entry(name, is_directory=False):
    return DirectoryEntry.build(name, EntryStat(1, 0.0, is_directory))


@pytest.fixture
def catalog():
    return IconCatalog()


class TestClassify:
    """Icon lookup order."""

    def test_directory(self, catalog):
        icon = catalog.classify("anything.py", is_directory=True)
        assert (icon.class_name, icon.asset_name) == ("icon-directory", "folder.svg")

    def test_extension_wins(self, catalog):
        icon = catalog.classify("script.py")
        assert (icon.class_name, icon.asset_name) == ("icon-py", "page_white_code.svg")

    def test_extension_case_insensitive(self, catalog):
        assert catalog.classify("SETUP.PY").class_name == "icon-py"

    def test_full_mime_type(self, catalog):
        icon = catalog.classify("report.pdf")
        assert (icon.class_name, icon.asset_name) == (
            "icon-application-pdf",
            "page_white_acrobat.svg",
        )

    def test_mime_suffix(self, catalog):
        icon = catalog.classify("site.webmanifest")
        assert icon.class_name == "icon-json"
        assert icon.asset_name == "page_white_code.svg"

    def test_top_level_type(self, catalog):
        icon = catalog.classify("photo.png")
        assert (icon.class_name, icon.asset_name) == ("icon-image", "image.svg")

    def test_default(self, catalog):
        assert catalog.classify("README").class_name == "icon-default"
        assert catalog.classify("blob.unknownext").asset_name == "page_white.svg"

    def test_every_asset_exists(self):
        for asset_name in set(ICON_MAP.values()):
            assert (ICONS_DIR / asset_name).is_file(), asset_name


class TestClasses:
    """CSS classes for list items."""

    def test_file_classes(self, catalog):
        assert catalog.classes(entry("notes.txt")) == ["icon", "icon-txt", "icon-text"]

    def test_extension_icon_not_duplicated(self, catalog):
        assert catalog.classes(entry("app.py")) == ["icon", "icon-py"]

    def test_directory_classes(self, catalog):
        assert catalog.classes(entry("src", True)) == ["icon", "icon-directory"]

    def test_no_extension(self, catalog):
        assert catalog.classes(entry("Makefile")) == ["icon", "icon-default"]


class TestStyle:
    """Generated icon stylesheet."""

    @pytest.mark.asyncio
    async def test_rules_grouped_by_asset(self, catalog):
        css = await catalog.style([entry("a.py"), entry("b.json"), entry("docs", True)])

        assert "#files .icon-py .name,\n#files .icon-application-json .name {" in css
        assert css.count("background-image") == 2
        assert "#files .icon-directory .name {" in css

    @pytest.mark.asyncio
    async def test_data_uri(self, catalog):
        css = await catalog.style([entry("docs", True)])
        encoded = base64.b64encode((ICONS_DIR / "folder.svg").read_bytes()).decode("ascii")
        assert f"url(data:image/svg+xml;base64,{encoded})" in css

    @pytest.mark.asyncio
    async def test_selectors_not_repeated(self, catalog):
        css = await catalog.style([entry("a.py"), entry("b.py")])
        assert css.count("#files .icon-py .name") == 1

    @pytest.mark.asyncio
    async def test_empty(self, catalog):
        assert await catalog.style([]) == ""


class TestCache:
    """Asset cache."""

    @pytest.mark.asyncio
    async def test_asset_read_once(self, tmp_path):
        (tmp_path / "folder.svg").write_bytes(b"<svg/>")
        catalog = IconCatalog(tmp_path)

        first = await catalog.load("folder.svg")
        (tmp_path / "folder.svg").write_bytes(b"<svg>changed</svg>")
        assert await catalog.load("folder.svg") == first == base64.b64encode(b"<svg/>").decode()

    @pytest.mark.asyncio
    async def test_cache_shared_between_catalogs(self, tmp_path):
        (tmp_path / "x.svg").write_bytes(b"<svg/>")
        await IconCatalog(tmp_path).load("x.svg")
        (tmp_path / "x.svg").unlink()
        assert await IconCatalog(tmp_path).load("x.svg")

    @pytest.mark.asyncio
    async def test_clear_cache(self, tmp_path):
        (tmp_path / "x.svg").write_bytes(b"a")
        await IconCatalog(tmp_path).load("x.svg")
        IconCatalog.clear_cache()
        (tmp_path / "x.svg").write_bytes(b"b")
        assert await IconCatalog(tmp_path).load("x.svg") == base64.b64encode(b"b").decode()

    @pytest.mark.asyncio
    async def test_asset_read_off_event_loop(self, tmp_path, monkeypatch):
        (tmp_path / "x.svg").write_bytes(b"<svg/>")
        threads = []
        read_bytes = Path.read_bytes

        def recording_read_bytes(path):
            threads.append(threading.get_ident())
            return read_bytes(path)

        monkeypatch.setattr(Path, "read_bytes", recording_read_bytes)
        await IconCatalog(tmp_path).load("x.svg")

        assert len(threads) == 1
        assert threads[0] != threading.get_ident()
