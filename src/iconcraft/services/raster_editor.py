import logging
from pathlib import Path
from typing import Optional, Tuple

from iconcraft.models import round_half_up
from iconcraft.utils.config import IconCraftConfig
from iconcraft.utils.shell_utils import ShellUtils

logger = logging.getLogger(__name__)


def _fmt(value: float) -> str:
    """ImageMagick geometry number: '2' rather than '2.0'."""
    if float(value).is_integer():
        return str(int(value))
    return f"{value:g}"


class RasterEditor:
    """
    In-place PNG edits through ImageMagick.

    Each operation reads and rewrites the same file, so callers must not run two
    edits on one path concurrently.
    """

    def __init__(self, shell: ShellUtils, binary: str = None):
        self.shell = shell
        self.binary = binary or IconCraftConfig.get_tool("ImageMagick")

    def _edit(self, path: Path, *operations: str) -> list:
        path = str(path)
        return [self.binary, path, *operations, path]

    def invert_command(self, path: Path) -> list:
        # Negate colour channels only; alpha stays as rendered
        return self._edit(path, "-channel", "RGB", "-negate", "+channel")

    def blur_command(self, path: Path, sigma: float) -> list:
        return self._edit(path, "-blur", f"0x{_fmt(sigma)}")

    def resize_command(self, path: Path, width: int, height: int) -> list:
        return self._edit(path, "-resize", f"{width}x{height}!")

    def pad_command(self, path: Path, width: int, height: int, padding_x: float, padding_y: float,
                    canvas: Optional[Tuple[int, int]] = None) -> list:
        """
        width/height are the current image. Integral paddings that land exactly on
        the canvas map to -border. Otherwise the image is centered on the canvas
        (default: the rounded padded size) with -extent.
        """
        padded = (round_half_up(width + 2 * padding_x), round_half_up(height + 2 * padding_y))
        canvas_w, canvas_h = canvas or padded
        integral = float(padding_x).is_integer() and float(padding_y).is_integer()
        if integral and padded == (canvas_w, canvas_h):
            return self._edit(
                path, "-bordercolor", "none",
                "-border", f"{_fmt(padding_x)}x{_fmt(padding_y)}",
            )
        return self._edit(
            path, "-background", "none", "-gravity", "center",
            "-extent", f"{canvas_w}x{canvas_h}",
        )

    async def invert(self, path: Path) -> None:
        await self.shell.run_command(self.invert_command(path))

    async def blur(self, path: Path, sigma: float) -> None:
        if sigma <= 0:
            raise ValueError(f"blur sigma must be positive, got {sigma}")
        await self.shell.run_command(self.blur_command(path, sigma))

    async def resize(self, path: Path, width: int, height: int) -> None:
        await self.shell.run_command(self.resize_command(path, width, height))

    async def pad(self, path: Path, width: int, height: int, padding_x: float, padding_y: float,
                  canvas: Optional[Tuple[int, int]] = None) -> None:
        if padding_x < 0 or padding_y < 0:
            raise ValueError("padding must not be negative")
        if padding_x == 0 and padding_y == 0:
            return
        await self.shell.run_command(self.pad_command(path, width, height, padding_x, padding_y, canvas))
