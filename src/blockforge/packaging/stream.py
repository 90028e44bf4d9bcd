"""
Virtual file pipeline

Files are read into memory as SourceFile objects, passed through transforms,
and written out under a destination directory keeping their path relative
to the pattern they were matched by:

    files = src(root, ["msg/js/*.js"])      # base: <root>/msg/js
    dest(files, root / "dist" / "msg")      # -> dist/msg/en.js, ...
"""
import glob
import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Iterable, List, Union

from blockforge.utils.message import Log


GLOB_CHARS = set("*?[")


class PackagingError(Exception):
    """Raised when packaging inputs are missing or unusable"""


@dataclass(frozen=True)
class SourceFile:
    """
    In-memory file.

    Attributes:
        path: Absolute path the file was read from (or renamed to)
        base: Directory the relative output path is computed from
        contents: Raw bytes
    """
    path: Path
    base: Path
    contents: bytes

    @property
    def relative(self) -> Path:
        return self.path.relative_to(self.base)

    @property
    def name(self) -> str:
        return self.path.name

    @property
    def text(self) -> str:
        return self.contents.decode("utf-8")

    def with_text(self, text: str) -> 'SourceFile':
        return replace(self, contents=text.encode("utf-8"))

    def with_name(self, name: str) -> 'SourceFile':
        return replace(self, path=self.path.with_name(name))


def is_glob(pattern: str) -> bool:
    return any(char in GLOB_CHARS for char in pattern)


def _normalize(pattern: str) -> str:
    pattern = pattern.replace("\\", "/")
    while pattern.startswith("./"):
        pattern = pattern[2:]
    return pattern


def glob_base(pattern: str) -> str:
    """
    Non-glob directory prefix of a pattern.

    "msg/js/*.js" -> "msg/js", "core/**" -> "core", "blockly_compressed.js" -> ""
    """
    parts = _normalize(pattern).split("/")
    if not is_glob(pattern):
        return "/".join(parts[:-1])
    prefix = []
    for part in parts[:-1]:
        if is_glob(part):
            break
        prefix.append(part)
    return "/".join(prefix)


def expand_patterns(root: Path, patterns: Iterable[str]) -> List[tuple]:
    """
    Resolve patterns against root.

    Returns:
        (path, base) tuples in pattern order, sorted within each glob, with
        files already matched by an earlier pattern skipped

    Raises:
        PackagingError: If a literal (non-glob) path does not exist
    """
    root = Path(root)
    seen = set()
    matches = []
    for pattern in patterns:
        normalized = _normalize(pattern)
        base = root / glob_base(normalized)
        if is_glob(normalized):
            found = sorted(
                root / match
                for match in glob.glob(normalized, root_dir=root, recursive=True)
                if (root / match).is_file()
            )
        else:
            path = root / normalized
            if not path.is_file():
                raise PackagingError(f"File not found with singular glob: {path}")
            found = [path]

        for path in found:
            key = os.path.normcase(str(path.resolve()))
            if key in seen:
                continue
            seen.add(key)
            matches.append((path, base))
    return matches


def src(root: Union[str, Path], patterns: Union[str, Iterable[str]]) -> List[SourceFile]:
    """Read every file matched by patterns into memory"""
    if isinstance(patterns, str):
        patterns = [patterns]
    files = [
        SourceFile(path=path, base=base, contents=path.read_bytes())
        for path, base in expand_patterns(Path(root), patterns)
    ]
    Log.debug(f"Stream: Read {len(files)} file(s) from {root}")
    return files


def dest(files: Iterable[SourceFile], directory: Union[str, Path]) -> List[Path]:
    """
    Write files under directory.

    Returns:
        Paths written, in input order
    """
    directory = Path(directory)
    written = []
    for source_file in files:
        target = directory / source_file.relative
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(source_file.contents)
        written.append(target)
    Log.debug(f"Stream: Wrote {len(written)} file(s) to {directory}")
    return written
