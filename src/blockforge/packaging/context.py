"""
Build context handed to every build task.
"""
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from blockforge.utils.settings import Settings


@dataclass
class BuildContext:
    """
    Attributes:
        root: Editor checkout containing the pre-built bundles
        settings: Project settings (blockforge.json merged over defaults)
    """
    root: Path
    settings: Optional[Settings] = field(default=None)

    def __post_init__(self):
        self.root = Path(self.root).resolve()
        if self.settings is None:
            self.settings = Settings(self.root)

    @property
    def dist(self) -> Path:
        """Output directory for packaged artifacts"""
        return self.settings.dist_dir

    def path(self, relative: str) -> Path:
        return self.root / relative
