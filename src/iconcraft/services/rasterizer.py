import logging
from pathlib import Path

from iconcraft.errors import SourceNotFoundError
from iconcraft.utils.config import IconCraftConfig
from iconcraft.utils.shell_utils import ShellUtils

logger = logging.getLogger(__name__)


class Rasterizer:
    """Renders an SVG to a square PNG through Inkscape."""

    def __init__(self, shell: ShellUtils, binary: str = None):
        self.shell = shell
        self.binary = binary or IconCraftConfig.get_tool("Inkscape")

    def command(self, source: Path, size: int, output: Path) -> list:
        return [
            self.binary,
            "-w", str(size),
            "-h", str(size),
            str(source),
            "--export-filename", str(output),
        ]

    async def rasterize(self, source: Path, size: int, output: Path) -> Path:
        source = Path(source)
        output = Path(output)
        if not source.exists():
            raise SourceNotFoundError(source)
        if size <= 0:
            raise ValueError(f"size must be positive, got {size}")

        await self.shell.run_command(self.command(source, size, output))
        logger.debug(f"Rasterized {source.name} at {size}x{size} -> {output}")
        return output
