"""
File transforms

Each factory returns a step that maps a list of SourceFile to a new list.
Steps are chained with pipe():

    files = pipe(
        src(root, "blockly_compressed.js"),
        replace(r"goog\\.global\\s*=\\s*this;", "goog.global=window"),
        wrap(HEADER, FOOTER),
        rename("blockly_browser.js"),
    )
"""
import re
from typing import Callable, List, Pattern, Union

from blockforge.packaging.stream import PackagingError, SourceFile


Transform = Callable[[List[SourceFile]], List[SourceFile]]


def pipe(files: List[SourceFile], *steps: Transform) -> List[SourceFile]:
    for step in steps:
        files = step(files)
    return files


def concat(name: str, separator: str = "\n") -> Transform:
    """Join all files into one named file placed at the first file's base"""
    def step(files: List[SourceFile]) -> List[SourceFile]:
        if not files:
            return []
        first = files[0]
        joined = separator.encode("utf-8").join(f.contents for f in files)
        return [SourceFile(path=first.base / name, base=first.base, contents=joined)]
    return step


def replace(pattern: Union[str, Pattern], replacement: str, count: int = 1) -> Transform:
    """
    Regex substitution on each file's text.

    The replacement is inserted literally. count=1 replaces the first match
    only; count=0 replaces every match.
    """
    regex = re.compile(pattern) if isinstance(pattern, str) else pattern

    def step(files: List[SourceFile]) -> List[SourceFile]:
        return [
            f.with_text(regex.sub(lambda _match: replacement, f.text, count=count))
            for f in files
        ]
    return step


def append(text: str) -> Transform:
    def step(files: List[SourceFile]) -> List[SourceFile]:
        return [f.with_text(f.text + text) for f in files]
    return step


def wrap(header: str, footer: str) -> Transform:
    def step(files: List[SourceFile]) -> List[SourceFile]:
        return [f.with_text(header + f.text + footer) for f in files]
    return step


def rename(name: str) -> Transform:
    def step(files: List[SourceFile]) -> List[SourceFile]:
        if len(files) > 1:
            raise PackagingError(f"Cannot rename {len(files)} files to the same name '{name}'")
        return [f.with_name(name) for f in files]
    return step


UMD_TEMPLATE = """;(function(root, factory) {{
  if (typeof define === 'function' && define.amd) {{
    define([], factory);
  }} else if (typeof exports === 'object') {{
    module.exports = factory();
  }} else {{
    root.{namespace} = factory();
  }}
}}(this, function() {{
{contents}
return {exports};
}}));
"""


def umd(namespace: str, exports: str) -> Transform:
    """Wrap each file in a universal module definition (AMD, CommonJS, global)"""
    def step(files: List[SourceFile]) -> List[SourceFile]:
        return [
            f.with_text(UMD_TEMPLATE.format(namespace=namespace, exports=exports, contents=f.text))
            for f in files
        ]
    return step
