"""
Static size tables for every platform target.

The pre-scale/blur pairs are tuned by eye for visual parity on small sizes. They
are lookup values, not derived from a formula.
"""
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from iconcraft.models import RenderSpec, SizeEntry, SizeSet

KIND_PNG = "png"
KIND_ICO = "ico"
KIND_ICNS = "icns"
KIND_APPX = "appx"

WINDOWS_ICO_SIZES = (16, 24, 32, 48, 64, 72, 96, 128, 180, 256)

# size -> (pre_scale, blur_sigma)
WINDOWS_SMOOTHING: Dict[int, Tuple[int, float]] = {
    16: (6, 2.0),
    24: (5, 1.6),
    32: (4, 1.2),
    48: (3, 0.9),
    64: (2, 0.6),
}

MAC_ICNS_SIZES = (16, 32, 64, 128, 256, 512, 1024)

# Pixel size -> iconset roles (icon_<role>.png)
MAC_ICONSET_NAMES: Dict[int, Tuple[str, ...]] = {
    16: ("16x16",),
    32: ("16x16@2x", "32x32"),
    64: ("32x32@2x",),
    128: ("128x128",),
    256: ("128x128@2x", "256x256"),
    512: ("256x256@2x", "512x512"),
    1024: ("512x512@2x",),
}

# name -> (size, pre_scale, blur_sigma)
MAC_TOOLBAR_SIZES = (
    ("mac_toolbar", 20, 8, 3.0),
    ("mac_toolbar@2x", 40, 4, 1.5),
)

INFO_ICON_SIZE = 256

APPX_SCALES = (100, 200, 400)

# Logical tile -> base (width, height) at scale-100
APPX_TILES: Dict[str, Tuple[int, int]] = {
    "Square44x44Logo": (44, 44),
    "StoreLogo": (50, 50),
    "SmallTile": (71, 71),
    "MedTile": (150, 150),
    "LargeTile": (310, 310),
    "Wide310x150Logo": (310, 150),
    "SplashScreen": (620, 300),
    "BadgeLogo": (24, 24),
    "Square150x150Logo": (150, 150),
}


@dataclass(frozen=True)
class Target:
    """One build artifact: which source it renders, how, and where it lands in dist/."""
    name: str
    kind: str
    source: str
    output: str
    size_set: SizeSet
    description: str = ""


def windows_size_set(name: str, invert: bool = False) -> SizeSet:
    entries = []
    for size in WINDOWS_ICO_SIZES:
        pre_scale, sigma = WINDOWS_SMOOTHING.get(size, (1, None))
        spec = RenderSpec(size, size, pre_scale=pre_scale, blur_sigma=sigma, invert=invert)
        entries.append(SizeEntry(spec, f"{name}{size}"))
    return SizeSet(name, tuple(entries))


def mac_size_set(name: str) -> SizeSet:
    entries = tuple(
        SizeEntry(RenderSpec(size, size, mac_padding=True), f"{name}{size}")
        for size in MAC_ICNS_SIZES
    )
    return SizeSet(name, entries)


def toolbar_size_set(name: str = "mac_toolbar") -> SizeSet:
    entries = tuple(
        SizeEntry(RenderSpec(size, size, pre_scale=pre_scale, blur_sigma=sigma), entry_name)
        for entry_name, size, pre_scale, sigma in MAC_TOOLBAR_SIZES
    )
    return SizeSet(name, entries)


def info_size_set(name: str = "info_app") -> SizeSet:
    return SizeSet(name, (SizeEntry(RenderSpec(INFO_ICON_SIZE, INFO_ICON_SIZE), name),))


def appx_tile_name(tile: str, scale: Optional[int]) -> str:
    if scale is None:
        return tile
    return f"{tile}.scale-{scale}"


def appx_size_set(name: str = "appx", scales=APPX_SCALES) -> SizeSet:
    entries = []
    for tile, (width, height) in APPX_TILES.items():
        for scale in scales:
            factor = (scale or 100) / 100
            spec = RenderSpec(int(width * factor), int(height * factor))
            entries.append(SizeEntry(spec, appx_tile_name(tile, scale)))
    return SizeSet(name, tuple(entries))


def default_targets(light_variant: bool = True) -> Tuple[Target, ...]:
    targets = [
        Target("mac_toolbar", KIND_PNG, "toolbar.svg", "mac_toolbar.png",
               toolbar_size_set(), "macOS toolbar glyph (1x/2x)"),
        Target("windows_toolbar", KIND_ICO, "toolbar.svg", "windows_toolbar.ico",
               windows_size_set("windows_toolbar"), "Windows toolbar icon"),
    ]
    if light_variant:
        targets.append(
            Target("windows_toolbar_light", KIND_ICO, "toolbar.svg", "windows_toolbar_light.ico",
                   windows_size_set("windows_toolbar_light", invert=True), "Windows toolbar icon, inverted")
        )
    targets.extend([
        Target("windows_app", KIND_ICO, "app.svg", "windows_app.ico",
               windows_size_set("windows_app"), "Windows application icon"),
        Target("mac_app", KIND_ICNS, "app.svg", "mac_app.icns",
               mac_size_set("mac_app"), "macOS application icon"),
        Target("info_app", KIND_PNG, "app.svg", "info_app.png",
               info_size_set(), "About dialog image"),
        Target("appx", KIND_APPX, "app.svg", "appx",
               appx_size_set(), "Microsoft Store tiles"),
    ])
    return tuple(targets)


def select_targets(targets, names) -> Tuple[Target, ...]:
    """Filters targets by name, keeping table order. Unknown names raise KeyError."""
    if not names:
        return tuple(targets)
    known = {t.name for t in targets}
    unknown = [n for n in names if n not in known]
    if unknown:
        raise KeyError(f"Unknown target(s): {', '.join(unknown)}")
    wanted = set(names)
    return tuple(t for t in targets if t.name in wanted)
