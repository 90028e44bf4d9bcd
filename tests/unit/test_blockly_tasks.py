"""
Tests for the editor build and packaging tasks.

Each test builds a small fake editor checkout under tmp_path. External
commands (build.py, the typings generator) are replaced with fakes.
"""
import sys
from pathlib import Path

import pytest

from blockforge.packaging import blockly_tasks
from blockforge.packaging.blockly_tasks import (
    BLOCKLY_FOOTER,
    BLOCKLY_HEADER,
    BLOCKLY_NODE_FOOTER,
    BLOCKLY_NODE_HEADER,
    BLOCKS_FOOTER,
    BLOCKS_HEADER,
    MSG_FOOTER,
    MSG_HEADER,
    NODE_JAVASCRIPT_EN_FOOTER,
    PACKAGE_TASKS,
    WATCH_SOURCES,
    create_blockly_task_registry,
)
from blockforge.packaging.context import BuildContext
from blockforge.packaging.task_runner import TaskRunner
from blockforge.utils.settings import Settings


BLOCKLY_SOURCE = "var goog=goog||{};goog.global=this;Blockly.utils.global=this||self;var Blockly={};"
BLOCKLY_NODE_SOURCE = "var goog=goog||{};goog.global=this||self;Blockly.utils.global=this||self;var Blockly={};"

PACKAGED_FILES = [
    "blockly_compressed.js",
    "blocks_compressed.js",
    "blockly_compressed-node.js",
    "blocks_compressed-node.js",
    "javascript_compressed.js",
    "python_compressed.js",
    "lua_compressed.js",
    "dart_compressed.js",
    "php_compressed.js",
    "msg/en.js",
    "msg/de.js",
    "media/click.mp3",
    "media/sprites.png",
    "blockly.min.js",
    "package.json",
    "blockly.d.ts",
    "README.md",
    "index.js",
]


def write(root: Path, relative: str, content):
    path = root / relative
    path.parent.mkdir(parents=True, exist_ok=True)
    if isinstance(content, bytes):
        path.write_bytes(content)
    else:
        path.write_text(content, encoding="utf-8")
    return path


@pytest.fixture
def root(tmp_path):
    write(tmp_path, "blockly_compressed.js", BLOCKLY_SOURCE)
    write(tmp_path, "blocks_compressed.js", "Blockly.Blocks.math={};")
    for _suffix, file, lang in blockly_tasks.GENERATOR_BUNDLES:
        write(tmp_path, file, f"Blockly.{lang}={{}};")
    write(tmp_path, "msg/js/en.js", "goog.provide('Blockly.Msg.en');\ngoog.require('Blockly.Msg');\nBlockly.Msg.ADD = 'add';\n")
    write(tmp_path, "msg/js/de.js", "goog.provide('Blockly.Msg.de');\nBlockly.Msg.ADD = 'hinzufügen';\n")
    write(tmp_path, "media/click.mp3", b"\x00\x01mp3")
    write(tmp_path, "media/sprites.png", b"\x89PNG\r\n")
    write(tmp_path, "package.json", '{"name": "blockly"}\n')
    write(tmp_path, "typings/blockly.d.ts", "declare module Blockly {}\n")
    write(tmp_path, "package/README.md", "# Blockly\n")
    write(tmp_path, "package/index.js", "module.exports = require('./blockly_compressed');\n")
    return tmp_path


@pytest.fixture
def commands(monkeypatch):
    """Record external commands instead of running them."""
    calls = []

    def fake_run_command(args, cwd=None):
        calls.append(([str(arg) for arg in args], Path(cwd)))

    monkeypatch.setattr(blockly_tasks, "run_command", fake_run_command)
    return calls


def run(root, *tasks, settings=None):
    context = BuildContext(root, settings)
    return TaskRunner(create_blockly_task_registry(), context).run(list(tasks))


def read(path: Path) -> str:
    return path.read_text(encoding="utf-8")


# =============================================================================
# Registry Tests
# =============================================================================

class TestRegistry:
    """Tests for task registration."""

    def test_all_tasks_registered(self):
        registry = create_blockly_task_registry()
        expected = {"build", "blockly_node_javascript_en", "watch", "typings", "package", "release", "default"}
        assert expected | set(PACKAGE_TASKS) == set(registry.names())

    def test_no_missing_references(self):
        assert create_blockly_task_registry().validate() == []

    def test_compositions(self):
        registry = create_blockly_task_registry()
        assert registry.get("release").series == ["build", "typings", "package"]
        assert registry.get("default").series == ["build", "blockly_node_javascript_en"]
        assert registry.get("package").depends_on == PACKAGE_TASKS
        assert len(PACKAGE_TASKS) == 14


# =============================================================================
# Build Tests
# =============================================================================

class TestBuild:
    """Tests for build, default and the Node concatenation."""

    def test_build_runs_configured_command(self, root, commands):
        result = run(root, "build")
        assert result.success
        assert commands == [(["python", "build.py"], root.resolve())]

    def test_build_command_from_settings(self, root, commands):
        write(root, "blockforge.json", '{"build_command": "python3 build.py --verbose"}')
        run(root, "build")
        assert commands[0][0] == ["python3", "build.py", "--verbose"]

    def test_build_failure_fails_the_run(self, root):
        settings = Settings(root, overrides={"build_command": [sys.executable, "-c", "import sys; sys.exit(3)"]})
        result = run(root, "default", settings=settings)
        assert result.failed
        assert any("exit code 3" in error for error in result.errors)
        assert not (root / "blockly_node_javascript_en.js").exists()

    def test_blockly_node_javascript_en(self, root, commands):
        result = run(root, "blockly_node_javascript_en")
        assert result.success

        expected = "\n".join([
            BLOCKLY_SOURCE,
            "Blockly.Blocks.math={};",
            "Blockly.JavaScript={};",
            read(root / "msg/js/en.js"),
        ]) + NODE_JAVASCRIPT_EN_FOOTER
        assert read(root / "blockly_node_javascript_en.js") == expected

    def test_node_footer(self):
        assert NODE_JAVASCRIPT_EN_FOOTER.startswith("\nif (typeof DOMParser !== 'function') {\n")
        assert NODE_JAVASCRIPT_EN_FOOTER.endswith("if (typeof window === 'object') { window.Blockly = Blockly; }\n")

    def test_default_runs_build_then_concat(self, root, commands):
        result = run(root, "default")
        assert result.success
        assert result.data == ["build", "blockly_node_javascript_en", "default"]
        assert len(commands) == 1
        assert (root / "blockly_node_javascript_en.js").exists()

    def test_missing_source(self, root, commands):
        (root / "javascript_compressed.js").unlink()
        result = run(root, "blockly_node_javascript_en")
        assert result.failed
        assert "singular glob" in result.message


# =============================================================================
# Package Tests
# =============================================================================

class TestPackage:
    """Tests for the package-* tasks and package."""

    def test_package_writes_every_artifact(self, root):
        result = run(root, "package")
        assert result.success
        dist = root / "dist"
        for relative in PACKAGED_FILES:
            assert (dist / relative).is_file(), relative
        assert result.data[-1] == "package"

    def test_package_blockly(self, root):
        run(root, "package-blockly")
        text = read(root / "dist" / "blockly_compressed.js")
        assert text == (
            BLOCKLY_HEADER
            + "var goog=goog||{};goog.global=windowBlockly.utils.global=window;var Blockly={};"
            + BLOCKLY_FOOTER
        )
        assert text.startswith("\n    /* eslint-disable */\n    module.exports = (function(){")
        assert text.endswith("Blockly.goog=goog;return Blockly;\n    })()")

    def test_package_blockly_node(self, root):
        write(root, "blockly_compressed.js", BLOCKLY_NODE_SOURCE)
        run(root, "package-blockly-node")
        text = read(root / "dist" / "blockly_compressed-node.js")
        assert text == (
            BLOCKLY_NODE_HEADER
            + "var goog=goog||{};goog.global=global;Blockly.utils.global=global;var Blockly={};"
            + BLOCKLY_NODE_FOOTER
        )
        assert "var JSDOM = require('jsdom').JSDOM;" in text

    def test_only_first_match_is_replaced(self, root):
        write(root, "blockly_compressed.js", "goog.global=this;goog.global = this;")
        run(root, "package-blockly")
        text = read(root / "dist" / "blockly_compressed.js")
        assert "goog.global=windowgoog.global = this;" in text

    def test_package_blocks(self, root):
        run(root, "package-blocks", "package-blocks-node")
        expected = BLOCKS_HEADER + "Blockly.Blocks.math={};" + BLOCKS_FOOTER
        assert read(root / "dist" / "blocks_compressed.js") == expected
        assert read(root / "dist" / "blocks_compressed-node.js") == expected
        assert "      Blockly.Blocks={};" in expected

    @pytest.mark.parametrize("task, file, lang", [
        ("package-javascript", "javascript_compressed.js", "JavaScript"),
        ("package-python", "python_compressed.js", "Python"),
        ("package-lua", "lua_compressed.js", "Lua"),
        ("package-dart", "dart_compressed.js", "Dart"),
        ("package-php", "php_compressed.js", "PHP"),
    ])
    def test_package_lang(self, root, task, file, lang):
        run(root, task)
        assert read(root / "dist" / file) == (
            "\n    /* eslint-disable */\n    module.exports = function(Blockly){"
            f"Blockly.{lang}={{}};"
            f"return Blockly.{lang};\n    }}"
        )

    def test_package_msg_strips_every_goog_line(self, root):
        run(root, "package-msg")
        assert read(root / "dist" / "msg" / "en.js") == MSG_HEADER + "\n\nBlockly.Msg.ADD = 'add';\n" + MSG_FOOTER
        assert "hinzufügen" in read(root / "dist" / "msg" / "de.js")

    def test_package_media_copies_bytes(self, root):
        run(root, "package-media")
        assert (root / "dist" / "media" / "sprites.png").read_bytes() == b"\x89PNG\r\n"

    def test_package_umd(self, root):
        run(root, "package-umd")
        text = read(root / "dist" / "blockly.min.js")
        assert "root.Blockly = factory();" in text
        assert text.endswith("return Blockly;\n}));\n")
        assert BLOCKLY_SOURCE + "\nBlockly.Blocks.math={};" in text

    def test_package_copies_json_dts_and_extras(self, root):
        run(root, "package")
        dist = root / "dist"
        assert read(dist / "package.json") == '{"name": "blockly"}\n'
        assert read(dist / "blockly.d.ts") == "declare module Blockly {}\n"
        assert read(dist / "README.md") == "# Blockly\n"

    def test_dist_dir_setting(self, root):
        result = run(root, "package-json", settings=Settings(root, overrides={"dist_dir": "out/npm"}))
        assert result.success
        assert (root / "out" / "npm" / "package.json").is_file()

    def test_missing_artifact_fails_package(self, root):
        (root / "typings" / "blockly.d.ts").unlink()
        result = run(root, "package")
        assert result.failed
        assert "Failed task: 'package-dts'" in result.errors
        assert not (root / "dist" / "README.md").exists()

    def test_packaging_is_idempotent(self, root):
        assert run(root, "package").success
        first = {p.relative_to(root): p.read_bytes() for p in (root / "dist").rglob("*") if p.is_file()}

        assert run(root, "package").success
        second = {p.relative_to(root): p.read_bytes() for p in (root / "dist").rglob("*") if p.is_file()}

        assert first == second
        assert len(first) == len(PACKAGED_FILES)


# =============================================================================
# Typings Tests
# =============================================================================

@pytest.fixture
def typings_root(root):
    write(root, "typings/parts/blockly-header.d.ts", "// header")
    write(root, "typings/parts/blockly-interfaces.d.ts", "// interfaces")
    write(root, "typings/parts/goog-closure.d.ts", "// closure")
    write(root, "core/block.js", "")
    write(root, "core/README.md", "")
    write(root, "core/keyboard_nav/navigation.js", "")
    write(root, "core/theme/classic.js", "")
    write(root, "core/utils/dom.js", "")
    write(root, "msg/messages.js", "")
    return root


@pytest.fixture
def typings_generator(monkeypatch):
    """Fake definition generator writing one comment line per input file."""
    calls = []

    def fake_run_command(args, cwd=None):
        args = [str(arg) for arg in args]
        if args[1] == "build.py":
            return
        node, generator, source, target = args
        calls.append(source)
        Path(target).write_text(f"// {source}", encoding="utf-8")

    monkeypatch.setattr(blockly_tasks, "run_command", fake_run_command)
    return calls


class TestTypings:
    """Tests for typings generation."""

    def test_generates_per_file_and_concatenates(self, typings_root, typings_generator):
        result = run(typings_root, "typings")
        assert result.success
        assert typings_generator == [
            "core/block.js",
            "core/keyboard_nav/navigation.js",
            "core/theme/classic.js",
            "core/utils/dom.js",
            "msg/messages.js",
        ]
        assert read(typings_root / "typings" / "blockly.d.ts") == "\n".join([
            "// header",
            "// interfaces",
            "// closure",
            "// core/block.js",
            "// core/keyboard_nav/navigation.js",
            "// core/theme/classic.js",
            "// core/utils/dom.js",
            "// msg/messages.js",
        ])

    def test_tmp_dir_is_removed(self, typings_root, typings_generator):
        write(typings_root, "typings/tmp/stale.d.ts", "stale")
        run(typings_root, "typings")
        assert not (typings_root / "typings" / "tmp").exists()
        assert "stale" not in read(typings_root / "typings" / "blockly.d.ts")

    def test_release(self, typings_root, typings_generator):
        result = run(typings_root, "release")
        assert result.success
        assert result.data.index("typings") < result.data.index("package-dts")
        assert read(typings_root / "dist" / "blockly.d.ts").startswith("// header")


# =============================================================================
# Watch Tests
# =============================================================================

class TestWatchTask:
    """Tests for the watch task wiring."""

    def test_watch_reruns_build_and_concat(self, root, commands, monkeypatch):
        created = []

        class FakeWatcher:
            def __init__(self, watch_root, patterns, on_change, debounce_seconds, poll_interval):
                created.append((Path(watch_root), patterns, debounce_seconds, poll_interval))
                self.on_change = on_change

            def run(self):
                result = self.on_change()
                created.append(result.data)

        monkeypatch.setattr(blockly_tasks, "Watcher", FakeWatcher)

        result = run(root, "watch")
        assert result.success
        assert created[0] == (root.resolve(), WATCH_SOURCES, 2.0, 0.5)
        assert created[1] == ["build", "blockly_node_javascript_en"]
        assert (root / "blockly_node_javascript_en.js").exists()
