from typing import List, Optional


class IconCraftError(Exception):
    """Base class for build failures reported to the user."""


class SourceNotFoundError(IconCraftError):
    def __init__(self, path):
        self.path = path
        super().__init__(f"Source image not found: {path}")


class ToolError(IconCraftError):
    """An external tool was missing or exited with a non-zero status."""

    def __init__(self, args: List[str], returncode: int, stderr: Optional[str] = None):
        self.args_list = list(args)
        self.returncode = returncode
        self.stderr = (stderr or "").strip()
        msg = f"Command failed with exit code {returncode}: {' '.join(self.args_list)}"
        if self.stderr:
            msg += f"\n{self.stderr}"
        super().__init__(msg)
