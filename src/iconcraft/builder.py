import asyncio
import logging
import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Sequence

from iconcraft.errors import SourceNotFoundError
from iconcraft.models import IconBundle
from iconcraft.presets import Target, default_targets, select_targets, KIND_APPX, KIND_PNG
from iconcraft.services.packager import Packager
from iconcraft.services.raster_editor import RasterEditor
from iconcraft.services.rasterizer import Rasterizer
from iconcraft.services.render_service import RenderService
from iconcraft.tasks import series, parallel
from iconcraft.utils.config import IconCraftConfig
from iconcraft.utils.shell_utils import ShellUtils

logger = logging.getLogger(__name__)


@dataclass
class BuildOptions:
    source_dir: Path = Path("src")
    dist_dir: Path = Path("dist")
    build_dir: Path = Path("build")
    targets: Sequence[str] = field(default_factory=tuple)
    light_variant: bool = True
    jobs: Optional[int] = None

    @classmethod
    def from_config(cls, **overrides) -> "BuildOptions":
        """Config values, with any non-None override from the command line on top."""
        options = cls(
            source_dir=IconCraftConfig.get_path("SourceDir", "src"),
            dist_dir=IconCraftConfig.get_path("DistDir", "dist"),
            build_dir=IconCraftConfig.get_path("BuildDir", "build"),
            light_variant=IconCraftConfig.get_bool("LightVariant", True),
            jobs=IconCraftConfig.get_jobs(),
        )
        for key, value in overrides.items():
            if value is not None:
                setattr(options, key, Path(value) if key.endswith("_dir") else value)
        return options

    def resolve_targets(self) -> tuple:
        return select_targets(default_targets(self.light_variant), list(self.targets))


class IconBuilder:
    """Cleans the output directories, then builds every selected target concurrently."""

    def __init__(self, options: BuildOptions, shell: ShellUtils = None):
        self.options = options
        self.shell = shell or ShellUtils(max_jobs=options.jobs)
        editor = RasterEditor(self.shell)
        self.renderer = RenderService(Rasterizer(self.shell), editor)
        self.packager = Packager(self.renderer, self.shell, imagemagick=editor.binary)

    def clean(self) -> None:
        """Wipes dist/ and build/ and recreates them empty."""
        for directory in (self.options.dist_dir, self.options.build_dir):
            if directory.exists():
                logger.debug(f"Removing {directory}")
                shutil.rmtree(directory)
            directory.mkdir(parents=True)

    def check_sources(self, targets: Sequence[Target]) -> None:
        for source in sorted({t.source for t in targets}):
            path = self.options.source_dir / source
            if not path.exists():
                raise SourceNotFoundError(path)

    async def _clean_step(self):
        self.clean()

    def _target_step(self, target: Target):
        async def run() -> IconBundle:
            bundle = await self.packager.package(
                target, self.options.source_dir, self.options.build_dir, self.options.dist_dir,
            )
            logger.info(f"Built {bundle}")
            return bundle
        return run

    async def build_async(self) -> List[IconBundle]:
        targets = self.options.resolve_targets()
        self.check_sources(targets)
        logger.info(f"Building {len(targets)} target(s): {', '.join(t.name for t in targets)}")

        pipeline = series(
            self._clean_step,
            parallel(*[self._target_step(t) for t in targets]),
        )
        _, bundles = await pipeline()
        return bundles

    def build(self) -> List[IconBundle]:
        return asyncio.run(self.build_async())

    def expected_outputs(self) -> List[Path]:
        """Every file a complete build of the selected targets leaves in dist/."""
        dist = self.options.dist_dir
        paths = []
        for target in self.options.resolve_targets():
            if target.kind == KIND_APPX:
                paths.extend(dist / target.output / f"{e.name}.png" for e in target.size_set)
            elif target.kind == KIND_PNG:
                paths.extend(dist / f"{e.name}.png" for e in target.size_set)
            else:
                paths.append(dist / target.output)
        return paths
