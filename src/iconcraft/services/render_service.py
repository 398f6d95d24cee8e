import logging
from pathlib import Path
from typing import List

from iconcraft.models import RenderSpec, Layout, SizeSet, round_half_up
from iconcraft.services.rasterizer import Rasterizer
from iconcraft.services.raster_editor import RasterEditor
from iconcraft.tasks import gather_all

logger = logging.getLogger(__name__)

# Share of a macOS icon canvas left empty around the artwork (33px at 256px)
MAC_PADDING_RATIO = 33 / 256


def mac_padding(height: int):
    """Returns (total_padding, padding_amount) for a macOS icon of the given height."""
    total = round_half_up(MAC_PADDING_RATIO * height)
    return total, total / 2


def compute_layout(spec: RenderSpec) -> Layout:
    """
    Resolves where the artwork sits on the canvas.

    Non-square specs render a square at min(width, height) and are centered with
    round((side - min) / 2) on each axis. macOS padding shrinks the artwork by
    round(33 * H / 256) and splits that evenly over all four sides. Explicit
    padding is added on top. When the rounded paddings overshoot (odd side
    difference), the artwork is centered on the exact canvas instead.
    """
    artwork = min(spec.width, spec.height)
    padding_x = float(round_half_up((spec.width - artwork) / 2))
    padding_y = float(round_half_up((spec.height - artwork) / 2))

    if spec.mac_padding:
        total, amount = mac_padding(artwork)
        if total >= artwork:
            raise ValueError(f"{artwork}px is too small for macOS padding")
        artwork -= total
        padding_x += amount
        padding_y += amount

    padding_x += spec.padding_x
    padding_y += spec.padding_y

    # Pre-scaling only pays off when the blur runs at the larger size
    downscale = spec.pre_scale > 1 and spec.blur_sigma is not None
    render_size = artwork * spec.pre_scale if downscale else artwork

    return Layout(
        artwork=artwork,
        render_size=render_size,
        padding_x=padding_x,
        padding_y=padding_y,
        downscale=downscale,
        canvas=spec.canvas,
    )


class RenderService:
    """Turns one RenderSpec into one finished PNG, and a SizeSet into many."""

    def __init__(self, rasterizer: Rasterizer, editor: RasterEditor):
        self.rasterizer = rasterizer
        self.editor = editor

    async def render(self, source: Path, spec: RenderSpec, output: Path) -> Path:
        """rasterize -> invert -> blur -> resize -> pad, all on the same file."""
        layout = compute_layout(spec)
        output = Path(output)

        await self.rasterizer.rasterize(source, layout.render_size, output)
        if spec.invert:
            await self.editor.invert(output)
        if spec.blur_sigma is not None:
            await self.editor.blur(output, spec.blur_sigma)
        if layout.downscale:
            await self.editor.resize(output, layout.artwork, layout.artwork)
        if layout.needs_padding:
            await self.editor.pad(output, layout.artwork, layout.artwork, layout.padding_x, layout.padding_y,
                                  canvas=layout.canvas)

        logger.debug(f"Rendered {output.name} ({spec.width}x{spec.height})")
        return output

    async def render_size_set(self, source: Path, size_set: SizeSet, out_dir: Path) -> List[Path]:
        """
        Renders every entry to out_dir/<entry name>.png concurrently.
        Results keep the size set order. The first failure cancels the rest.
        """
        out_dir = Path(out_dir)
        outputs = [out_dir / f"{entry.name}.png" for entry in size_set]
        await gather_all(*[
            self.render(source, entry.spec, path)
            for entry, path in zip(size_set, outputs)
        ])
        return outputs
