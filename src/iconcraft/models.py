import math
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, List, Tuple


def round_half_up(value: float) -> int:
    """Rounds .5 away from zero for positive values (round() would use banker's rounding)."""
    return int(math.floor(value + 0.5))


@dataclass(frozen=True)
class RenderSpec:
    """
    One desired raster output.

    Defaults: pre_scale=1, blur_sigma=None, invert=False, padding_x=padding_y=0,
    mac_padding=False.
    """
    width: int
    height: int
    pre_scale: int = 1
    blur_sigma: Optional[float] = None
    invert: bool = False
    padding_x: int = 0
    padding_y: int = 0
    mac_padding: bool = False

    def __post_init__(self):
        for name in ("width", "height"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
                raise ValueError(f"{name} must be a positive integer, got {value!r}")
        if self.pre_scale < 1:
            raise ValueError(f"pre_scale must be >= 1, got {self.pre_scale!r}")
        if self.blur_sigma is not None and self.blur_sigma <= 0:
            raise ValueError(f"blur_sigma must be positive when set, got {self.blur_sigma!r}")
        if self.padding_x < 0 or self.padding_y < 0:
            raise ValueError("padding must not be negative")

    @property
    def is_square(self) -> bool:
        return self.width == self.height

    @property
    def canvas(self) -> Tuple[int, int]:
        """Final output dimensions after all padding."""
        return (self.width + 2 * self.padding_x, self.height + 2 * self.padding_y)


@dataclass(frozen=True)
class Layout:
    """Resolved geometry for one RenderSpec."""
    artwork: int
    render_size: int
    padding_x: float
    padding_y: float
    downscale: bool
    canvas: Optional[Tuple[int, int]] = None

    @property
    def needs_padding(self) -> bool:
        return self.padding_x > 0 or self.padding_y > 0


@dataclass(frozen=True)
class SizeEntry:
    """A RenderSpec paired with the logical name it is stored under."""
    spec: RenderSpec
    name: str


@dataclass(frozen=True)
class SizeSet:
    """The fixed, ordered list of renders one platform target needs."""
    target: str
    entries: Tuple[SizeEntry, ...]

    def __iter__(self):
        return iter(self.entries)

    def __len__(self):
        return len(self.entries)


@dataclass
class IconBundle:
    """A packaged artifact: one container file, or a directory of named rasters."""
    target: str
    path: Path
    assets: List[Path] = field(default_factory=list)

    @property
    def is_container(self) -> bool:
        return self.path.suffix.lower() in (".ico", ".icns")

    def __str__(self):
        if self.is_container:
            return f"{self.target}: {self.path} ({len(self.assets)} images)"
        return f"{self.target}: {self.path}/ ({len(self.assets)} files)"
