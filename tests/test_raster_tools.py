import asyncio
import unittest
from pathlib import Path

import pytest

from conftest import FakeShell, SVG
from iconcraft.errors import SourceNotFoundError
from iconcraft.services.rasterizer import Rasterizer
from iconcraft.services.raster_editor import RasterEditor


class TestRasterEditorCommands(unittest.TestCase):
    def setUp(self):
        self.editor = RasterEditor(FakeShell(), binary="magick")
        self.path = Path("build/app16.png")

    def test_invert_leaves_alpha_alone(self):
        cmd = self.editor.invert_command(self.path)
        self.assertEqual(cmd, ["magick", str(self.path), "-channel", "RGB", "-negate", "+channel", str(self.path)])

    def test_blur_uses_sigma(self):
        self.assertIn("0x2", self.editor.blur_command(self.path, 2.0))
        self.assertIn("0x1.5", self.editor.blur_command(self.path, 1.5))

    def test_resize_forces_exact_geometry(self):
        self.assertIn("16x16!", self.editor.resize_command(self.path, 16, 16))

    def test_integral_padding_uses_transparent_border(self):
        cmd = self.editor.pad_command(self.path, 150, 150, 80, 0)
        self.assertIn("-bordercolor", cmd)
        self.assertEqual(cmd[cmd.index("-bordercolor") + 1], "none")
        self.assertEqual(cmd[cmd.index("-border") + 1], "80x0")

    def test_fractional_padding_extends_to_exact_canvas(self):
        cmd = self.editor.pad_command(self.path, 111, 111, 8.5, 8.5)
        self.assertNotIn("-border", cmd)
        self.assertEqual(cmd[cmd.index("-extent") + 1], "128x128")
        self.assertEqual(cmd[cmd.index("-background") + 1], "none")

    def test_padding_past_the_canvas_centers_instead(self):
        cmd = self.editor.pad_command(self.path, 100, 100, 1, 0, canvas=(101, 100))
        self.assertNotIn("-border", cmd)
        self.assertEqual(cmd[cmd.index("-gravity") + 1], "center")
        self.assertEqual(cmd[cmd.index("-extent") + 1], "101x100")

    def test_integral_padding_on_matching_canvas_keeps_border(self):
        cmd = self.editor.pad_command(self.path, 150, 150, 80, 0, canvas=(310, 150))
        self.assertEqual(cmd[cmd.index("-border") + 1], "80x0")

    def test_zero_padding_runs_nothing(self):
        shell = FakeShell()
        asyncio.run(RasterEditor(shell, binary="magick").pad(self.path, 16, 16, 0, 0))
        self.assertEqual(shell.commands, [])

    def test_negative_values_rejected(self):
        with self.assertRaises(ValueError):
            asyncio.run(self.editor.pad(self.path, 16, 16, -1, 0))
        with self.assertRaises(ValueError):
            asyncio.run(self.editor.blur(self.path, 0))


def test_rasterize_command(tmp_path):
    source = tmp_path / "app.svg"
    source.write_text(SVG)
    shell = FakeShell()
    out = asyncio.run(Rasterizer(shell, binary="inkscape").rasterize(source, 20, tmp_path / "t.png"))

    assert shell.commands == [[
        "inkscape", "-w", "20", "-h", "20", str(source), "--export-filename", str(tmp_path / "t.png"),
    ]]
    assert out.exists()


def test_rasterize_missing_source_is_fatal(tmp_path):
    shell = FakeShell()
    with pytest.raises(SourceNotFoundError):
        asyncio.run(Rasterizer(shell, binary="inkscape").rasterize(tmp_path / "nope.svg", 16, tmp_path / "o.png"))
    assert shell.commands == []
