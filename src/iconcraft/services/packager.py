import logging
import shutil
from pathlib import Path
from typing import List, Dict

from iconcraft.models import IconBundle
from iconcraft.presets import (
    Target, KIND_PNG, KIND_ICO, KIND_ICNS, KIND_APPX,
    MAC_ICNS_SIZES, MAC_ICONSET_NAMES,
)
from iconcraft.services.render_service import RenderService
from iconcraft.utils.config import IconCraftConfig
from iconcraft.utils.shell_utils import ShellUtils

logger = logging.getLogger(__name__)


def iconset_file_names(rasters: Dict[int, Path]) -> Dict[str, Path]:
    """Maps each iconset file name to the raster it is copied from."""
    missing = [size for size in MAC_ICNS_SIZES if size not in rasters]
    if missing:
        raise ValueError(f"Missing macOS icon sizes: {missing}")
    mapping = {}
    for size in MAC_ICNS_SIZES:
        for role in MAC_ICONSET_NAMES[size]:
            mapping[f"icon_{role}.png"] = rasters[size]
    return mapping


class Packager:
    """Renders a target's size set and folds it into its final layout in dist/."""

    def __init__(self, renderer: RenderService, shell: ShellUtils,
                 imagemagick: str = None, iconutil: str = None):
        self.renderer = renderer
        self.shell = shell
        self.imagemagick = imagemagick or IconCraftConfig.get_tool("ImageMagick")
        self.iconutil = iconutil or IconCraftConfig.get_tool("Iconutil")

    async def package(self, target: Target, source_dir: Path, build_dir: Path, dist_dir: Path) -> IconBundle:
        source = Path(source_dir) / target.source
        if target.kind == KIND_PNG:
            return await self.build_pngs(target, source, Path(dist_dir))
        if target.kind == KIND_ICO:
            return await self.build_ico(target, source, Path(build_dir), Path(dist_dir))
        if target.kind == KIND_ICNS:
            return await self.build_icns(target, source, Path(build_dir), Path(dist_dir))
        if target.kind == KIND_APPX:
            return await self.build_appx(target, source, Path(dist_dir))
        raise ValueError(f"Unknown target kind: {target.kind}")

    async def build_pngs(self, target: Target, source: Path, dist_dir: Path) -> IconBundle:
        outputs = await self.renderer.render_size_set(source, target.size_set, dist_dir)
        return IconBundle(target.name, dist_dir, outputs)

    def ico_command(self, rasters: List[Path], dest: Path) -> list:
        return [self.imagemagick, *[str(p) for p in rasters], str(dest)]

    async def build_ico(self, target: Target, source: Path, build_dir: Path, dist_dir: Path) -> IconBundle:
        # Size sets are ascending, so the .ico frames are too
        rasters = await self.renderer.render_size_set(source, target.size_set, build_dir)
        dest = dist_dir / target.output
        await self.shell.run_command(self.ico_command(rasters, dest))
        logger.info(f"Wrote {dest} ({len(rasters)} sizes)")
        return IconBundle(target.name, dest, rasters)

    def icns_command(self, iconset_dir: Path, dest: Path) -> list:
        return [self.iconutil, "-c", "icns", str(iconset_dir), "-o", str(dest)]

    async def build_icns(self, target: Target, source: Path, build_dir: Path, dist_dir: Path) -> IconBundle:
        dest = dist_dir / target.output
        iconset_dir = build_dir / f"{Path(target.output).stem}.iconset"
        iconset_dir.mkdir(parents=True)

        rasters = await self.renderer.render_size_set(source, target.size_set, build_dir)
        by_size = {entry.spec.height: path for entry, path in zip(target.size_set, rasters)}

        copies = []
        for file_name, raster in iconset_file_names(by_size).items():
            copy = iconset_dir / file_name
            shutil.copyfile(raster, copy)
            copies.append(copy)

        await self.shell.run_command(self.icns_command(iconset_dir, dest))
        logger.info(f"Wrote {dest} ({len(copies)} iconset images)")
        return IconBundle(target.name, dest, copies)

    async def build_appx(self, target: Target, source: Path, dist_dir: Path) -> IconBundle:
        # No container: the file layout is the package
        appx_dir = dist_dir / target.output
        appx_dir.mkdir(parents=True, exist_ok=True)
        outputs = await self.renderer.render_size_set(source, target.size_set, appx_dir)
        logger.info(f"Wrote {len(outputs)} Store tiles to {appx_dir}")
        return IconBundle(target.name, appx_dir, outputs)
