"""
Pytest configuration and shared fixtures.

FakeShell stands in for Inkscape, ImageMagick and iconutil. It records every
command and writes the files the real tools would, applying the geometry
operations (resize, border, extent, ico packing) with Pillow so output
dimensions can be checked end to end.
"""
import asyncio
import os
from pathlib import Path

import pytest
from PIL import Image

from iconcraft.errors import ToolError
from iconcraft.utils.config import IconCraftConfig
from iconcraft.utils.shell_utils import ShellUtils

SVG = '<svg xmlns="http://www.w3.org/2000/svg" width="64" height="64"><rect width="64" height="64"/></svg>'


class FakeShell(ShellUtils):
    def __init__(self, fail_on=None, delay=0.0):
        super().__init__(max_jobs=None)
        self.commands = []
        self.fail_on = fail_on
        self.delay = delay

    async def run_command(self, cmd):
        argv = self.to_argv(cmd)
        self.commands.append(argv)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.fail_on and self.fail_on(argv):
            raise ToolError(argv, 1, "simulated failure")
        self._apply(argv)
        return ""

    def commands_for(self, binary):
        return [c for c in self.commands if c[0] == binary]

    def _apply(self, argv):
        if "--export-filename" in argv:
            size = int(argv[argv.index("-w") + 1])
            out = argv[argv.index("--export-filename") + 1]
            Image.new("RGBA", (size, size), (0, 0, 0, 255)).save(out)
        elif argv[0] == "iconutil":
            Path(argv[argv.index("-o") + 1]).write_bytes(b"icns\x00\x00\x00\x08")
        elif argv[-1].endswith(".ico"):
            images = [Image.open(p) for p in argv[1:-1]]
            largest = max(images, key=lambda i: i.size[0])
            largest.save(argv[-1], format="ICO", sizes=[i.size for i in images])
        elif argv[1] == argv[-1]:
            self._edit(argv[1], argv[2:-1])

    @staticmethod
    def _edit(path, ops):
        img = Image.open(path).convert("RGBA")
        if "-resize" in ops:
            w, h = ops[ops.index("-resize") + 1].rstrip("!").split("x")
            img = img.resize((int(w), int(h)))
        if "-border" in ops:
            px, py = (int(v) for v in ops[ops.index("-border") + 1].split("x"))
            canvas = Image.new("RGBA", (img.width + 2 * px, img.height + 2 * py), (0, 0, 0, 0))
            canvas.paste(img, (px, py))
            img = canvas
        if "-extent" in ops:
            w, h = (int(v) for v in ops[ops.index("-extent") + 1].split("x"))
            canvas = Image.new("RGBA", (w, h), (0, 0, 0, 0))
            canvas.paste(img, ((w - img.width) // 2, (h - img.height) // 2))
            img = canvas
        img.save(path)


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch, tmp_path):
    """No session log files, no stray iconcraft.yaml, deterministic tool names."""
    monkeypatch.setenv("ICONCRAFT_NO_SESSION_LOG", "1")
    monkeypatch.setenv("ICONCRAFT_CONFIG", str(tmp_path / "no-config.yaml"))
    monkeypatch.setenv("ICONCRAFT_INKSCAPE", "inkscape")
    monkeypatch.setenv("ICONCRAFT_IMAGE_MAGICK", "magick")
    monkeypatch.setenv("ICONCRAFT_ICONUTIL", "iconutil")
    for name in ("ICONCRAFT_DEBUG", "ICONCRAFT_DEBUG_MODE", "ICONCRAFT_JOBS", "ICONCRAFT_LIGHT_VARIANT"):
        monkeypatch.delenv(name, raising=False)
    IconCraftConfig.reset()
    yield
    IconCraftConfig.reset()


@pytest.fixture
def fake_shell():
    return FakeShell()


def make_workspace(root):
    """Creates <root>/src/{app,toolbar}.svg and returns the source directory."""
    src = Path(root) / "src"
    src.mkdir(parents=True, exist_ok=True)
    (src / "app.svg").write_text(SVG, encoding="utf-8")
    (src / "toolbar.svg").write_text(SVG, encoding="utf-8")
    return src


@pytest.fixture
def workspace(tmp_path):
    make_workspace(tmp_path)
    return tmp_path


def list_files(root):
    root = Path(root)
    return sorted(str(p.relative_to(root)).replace(os.sep, "/") for p in root.rglob("*") if p.is_file())
