import logging
from pathlib import Path
from typing import List, Sequence

from PIL import Image, UnidentifiedImageError

from iconcraft.presets import Target, KIND_PNG, KIND_ICO, KIND_ICNS, KIND_APPX

logger = logging.getLogger(__name__)


class VerifyService:
    """Checks a finished dist/ directory against the size tables using Pillow."""

    @staticmethod
    def check_png(path: Path, expected) -> List[str]:
        if not path.exists():
            return [f"{path}: missing"]
        try:
            with Image.open(path) as img:
                size = img.size
                mode = img.mode
        except (UnidentifiedImageError, OSError) as e:
            return [f"{path}: unreadable ({e})"]

        problems = []
        if tuple(size) != tuple(expected):
            problems.append(f"{path}: expected {expected[0]}x{expected[1]}, got {size[0]}x{size[1]}")
        if mode not in ("RGBA", "LA", "P"):
            problems.append(f"{path}: no transparency (mode {mode})")
        return problems

    @staticmethod
    def check_ico(path: Path, expected_sizes: Sequence[int]) -> List[str]:
        if not path.exists():
            return [f"{path}: missing"]
        try:
            with Image.open(path) as img:
                found = sorted(w for w, h in img.info.get("sizes", set()))
        except (UnidentifiedImageError, OSError) as e:
            return [f"{path}: unreadable ({e})"]

        if found != sorted(expected_sizes):
            return [f"{path}: expected sizes {list(expected_sizes)}, got {found}"]
        return []

    @classmethod
    def verify(cls, dist_dir: Path, targets: Sequence[Target]) -> List[str]:
        """Returns a list of problems; empty when every artifact matches."""
        dist_dir = Path(dist_dir)
        problems: List[str] = []
        for target in targets:
            if target.kind in (KIND_PNG, KIND_APPX):
                base = dist_dir / target.output if target.kind == KIND_APPX else dist_dir
                for entry in target.size_set:
                    problems.extend(cls.check_png(base / f"{entry.name}.png", entry.spec.canvas))
            elif target.kind == KIND_ICO:
                sizes = [entry.spec.width for entry in target.size_set]
                problems.extend(cls.check_ico(dist_dir / target.output, sizes))
            elif target.kind == KIND_ICNS:
                # Pillow only reads ICNS reliably on macOS builds
                path = dist_dir / target.output
                if not path.exists() or path.stat().st_size == 0:
                    problems.append(f"{path}: missing")
            logger.debug(f"Verified {target.name}")
        return problems
