"""
Editor build and packaging tasks.

Rebuilds the editor's compressed bundles and packages them for npm:

    build                        python build.py (compressed bundles, msg tables, generators)
    blockly_node_javascript_en   single-file Node build, English, JavaScript generator
    watch                        rebuild on source changes
    typings                      blockly.d.ts from core/ and msg/
    package                      every package-* task, then package/* into dist
    release                      build, typings, package
    default                      build, blockly_node_javascript_en

All paths are relative to BuildContext.root.
"""
import shutil
from typing import List

from blockforge.packaging.context import BuildContext
from blockforge.packaging.shell import run_command
from blockforge.packaging.stream import dest, src
from blockforge.packaging.task_registry import TaskRegistry
from blockforge.packaging.task_runner import TaskRunner
from blockforge.packaging.transforms import append, concat, pipe, rename, replace, umd, wrap
from blockforge.packaging.watch import Watcher
from blockforge.utils.message import Log


# =============================================================================
# Sources and wrapper text
# =============================================================================

# English blocks plus the JavaScript generator; only one localization fits
NODE_JAVASCRIPT_EN_SOURCES = [
    "blockly_compressed.js",
    "blocks_compressed.js",
    "javascript_compressed.js",
    "msg/js/en.js",
]

# Node has no DOMParser; substitute jsdom and export Blockly as a module
NODE_JAVASCRIPT_EN_FOOTER = """
if (typeof DOMParser !== 'function') {
  var JSDOM = require('jsdom').JSDOM;
  var window = (new JSDOM()).window;
  var document = window.document;
  var Element = window.Element;
  Blockly.utils.xml.textToDomDocument = function(text) {
    var jsdom = new JSDOM(text, { contentType: 'text/xml' });
    return jsdom.window.document;
  };
}
if (typeof module === 'object') { module.exports = Blockly; }
if (typeof window === 'object') { window.Blockly = Blockly; }
"""

WATCH_SOURCES = [
    "core/**/*.js",                       # Blockly core code
    "blocks/*.js",                        # Block definitions
    "generators/**/*.js",                 # Code generation
    "msg/messages.js", "msg/json/*.json",  # Localization data
]

TYPINGS_TMP_DIR = "typings/tmp"
TYPINGS_SOURCE_DIRS = [
    "core/",
    "core/keyboard_nav",
    "core/theme",
    "core/utils",
    "msg/",
]
TYPINGS_SOURCES = [
    "typings/parts/blockly-header.d.ts",
    "typings/parts/blockly-interfaces.d.ts",
    "typings/parts/goog-closure.d.ts",
    f"{TYPINGS_TMP_DIR}/core/**",
    f"{TYPINGS_TMP_DIR}/core/utils/**",
    f"{TYPINGS_TMP_DIR}/core/theme/**",
    f"{TYPINGS_TMP_DIR}/core/keyboard_nav/**",
    f"{TYPINGS_TMP_DIR}/msg/**",
]

# The compressed bundle assigns its global object from `this`; rebind it for
# browsers (window) and Node (global)
BROWSER_GLOBAL_REPLACEMENTS = [
    (r"goog\.global\s*=\s*this;", "goog.global=window"),
    (r"Blockly\.utils\.global\s*=\s*this\|\|self;", "Blockly.utils.global=window;"),
]
NODE_GLOBAL_REPLACEMENTS = [
    (r"goog\.global\s*=\s*this\|\|self;", "goog.global=global;"),
    (r"Blockly\.utils\.global\s*=\s*this\|\|self;", "Blockly.utils.global=global;"),
]

BLOCKLY_HEADER = "\n    /* eslint-disable */\n    module.exports = (function(){"
BLOCKLY_FOOTER = "Blockly.goog=goog;return Blockly;\n    })()"

BLOCKS_HEADER = (
    "\n    /* eslint-disable */\n"
    "    module.exports = function(Blockly){\n"
    "      var goog = Blockly.goog;\n"
    "      Blockly.Blocks={};"
)
BLOCKS_FOOTER = "return Blockly.Blocks;\n    }"

BLOCKLY_NODE_HEADER = (
    "\n    /* eslint-disable */\n"
    "    var JSDOM = require('jsdom').JSDOM;\n"
    "    var window = (new JSDOM()).window;\n"
    "    var document = window.document;\n"
    "    var Element = window.Element;\n"
    "    module.exports = (function(){"
)
BLOCKLY_NODE_FOOTER = (
    "Blockly.utils.xml.textToDomDocument = function(text) {\n"
    "        var jsdom = new JSDOM(text, { contentType: 'text/xml' });\n"
    "        return jsdom.window.document;\n"
    "      };\n"
    "      Blockly.goog=goog;\n"
    "      return Blockly;\n"
    "    })()"
)

LANG_HEADER = "\n    /* eslint-disable */\n    module.exports = function(Blockly){"
LANG_FOOTER = "return Blockly.{lang};\n    }}"

MSG_HEADER = (
    "\n    /* eslint-disable */\n"
    "    var Blockly = {};Blockly.Msg={};\n"
    "    module.exports = function(){"
)
MSG_FOOTER = "return Blockly.Msg;\n    }"

# (task suffix, bundle file, namespace on Blockly)
GENERATOR_BUNDLES = [
    ("javascript", "javascript_compressed.js", "JavaScript"),
    ("python", "python_compressed.js", "Python"),
    ("lua", "lua_compressed.js", "Lua"),
    ("dart", "dart_compressed.js", "Dart"),
    ("php", "php_compressed.js", "PHP"),
]

UMD_SOURCES = NODE_JAVASCRIPT_EN_SOURCES


# =============================================================================
# Build
# =============================================================================

def build(context: BuildContext) -> None:
    """Rebuild compressed bundles, msg/js/*.js and generators via build.py"""
    run_command(context.settings.build_command, cwd=context.root)


def blockly_node_javascript_en(context: BuildContext) -> None:
    """Concatenate the bundles into one file loadable as a Node.js module"""
    files = pipe(
        src(context.root, NODE_JAVASCRIPT_EN_SOURCES),
        concat("blockly_node_javascript_en.js"),
        append(NODE_JAVASCRIPT_EN_FOOTER),
    )
    dest(files, context.root)


def typings(context: BuildContext) -> None:
    """Generate typings/blockly.d.ts"""
    tmp_dir = context.path(TYPINGS_TMP_DIR)
    if tmp_dir.exists():
        shutil.rmtree(tmp_dir)
    tmp_dir.mkdir(parents=True)

    files: List[str] = []
    for source_dir in TYPINGS_SOURCE_DIRS:
        directory = context.path(source_dir)
        names = sorted(p.name for p in directory.iterdir() if p.is_file() and p.name.endswith(".js"))
        files.extend(f"{source_dir.rstrip('/')}/{name}" for name in names)

    node = context.settings.get("node_command")
    generator = context.settings.get("typings_generator")
    for file in files:
        typescript_file = tmp_dir / f"{file}.d.ts"
        typescript_file.parent.mkdir(parents=True, exist_ok=True)
        Log.info(f"Generating typings for {file}")
        run_command([node, generator, file, typescript_file], cwd=context.root)

    output = pipe(src(context.root, TYPINGS_SOURCES), concat("blockly.d.ts"))
    dest(output, context.path("typings"))

    shutil.rmtree(tmp_dir)


# =============================================================================
# Package
# =============================================================================

def _replace_all(replacements) -> list:
    return [replace(pattern, replacement) for pattern, replacement in replacements]


def package_blockly(context: BuildContext) -> None:
    files = pipe(
        src(context.root, "blockly_compressed.js"),
        *_replace_all(BROWSER_GLOBAL_REPLACEMENTS),
        wrap(BLOCKLY_HEADER, BLOCKLY_FOOTER),
    )
    dest(files, context.dist)


def package_blocks(context: BuildContext) -> None:
    files = pipe(
        src(context.root, "blocks_compressed.js"),
        wrap(BLOCKS_HEADER, BLOCKS_FOOTER),
    )
    dest(files, context.dist)


def package_blockly_node(context: BuildContext) -> None:
    files = pipe(
        src(context.root, "blockly_compressed.js"),
        *_replace_all(NODE_GLOBAL_REPLACEMENTS),
        wrap(BLOCKLY_NODE_HEADER, BLOCKLY_NODE_FOOTER),
        rename("blockly_compressed-node.js"),
    )
    dest(files, context.dist)


def package_blocks_node(context: BuildContext) -> None:
    files = pipe(
        src(context.root, "blocks_compressed.js"),
        wrap(BLOCKS_HEADER, BLOCKS_FOOTER),
        rename("blocks_compressed-node.js"),
    )
    dest(files, context.dist)


def package_lang(file: str, lang: str):
    def handler(context: BuildContext) -> None:
        files = pipe(
            src(context.root, file),
            wrap(LANG_HEADER, LANG_FOOTER.format(lang=lang)),
        )
        dest(files, context.dist)
    handler.__name__ = f"package_{lang.lower()}"
    return handler


def package_msg(context: BuildContext) -> None:
    files = pipe(
        src(context.root, "msg/js/*.js"),
        replace(r"goog\.[^\n]+", "", count=0),
        wrap(MSG_HEADER, MSG_FOOTER),
    )
    dest(files, context.dist / "msg")


def package_media(context: BuildContext) -> None:
    dest(src(context.root, "media/*"), context.dist / "media")


def package_umd(context: BuildContext) -> None:
    files = pipe(
        src(context.root, UMD_SOURCES),
        concat("blockly.min.js"),
        umd(namespace="Blockly", exports="Blockly"),
    )
    dest(files, context.dist)


def package_json(context: BuildContext) -> None:
    dest(src(context.root, "package.json"), context.dist)


def package_dts(context: BuildContext) -> None:
    dest(src(context.root, "typings/blockly.d.ts"), context.dist)


def package_extra_files(context: BuildContext) -> None:
    """Copy package/* (README, index files) into dist"""
    dest(src(context.root, "package/*"), context.dist)


PACKAGE_TASKS = [
    "package-blockly",
    "package-blocks",
    "package-blockly-node",
    "package-blocks-node",
    *[f"package-{suffix}" for suffix, _file, _lang in GENERATOR_BUNDLES],
    "package-msg",
    "package-media",
    "package-umd",
    "package-json",
    "package-dts",
]


# =============================================================================
# Registration
# =============================================================================

def register_blockly_tasks(registry: TaskRegistry) -> TaskRegistry:
    """Register every build and packaging task on registry."""
    registry.task("build", "Rebuild compressed bundles with build.py")(build)
    registry.task(
        "blockly_node_javascript_en",
        "Concatenate bundles into a Node.js module (English, JavaScript)",
    )(blockly_node_javascript_en)

    def watch(context: BuildContext) -> None:
        """Rebuild whenever a source file changes"""
        runner = TaskRunner(registry, context, max_workers=context.settings.get("max_workers", 8))
        watcher = Watcher(
            context.root,
            WATCH_SOURCES,
            on_change=lambda: runner.run(["build", "blockly_node_javascript_en"]),
            debounce_seconds=context.settings.watch_debounce_seconds,
            poll_interval=float(context.settings.get("watch_poll_interval", 0.5)),
        )
        watcher.run()

    registry.task("watch", "Rebuild on changes to core, blocks, generators and messages")(watch)
    registry.task("typings", "Generate typings/blockly.d.ts")(typings)

    registry.task("package-blockly", "Browser module of blockly_compressed.js")(package_blockly)
    registry.task("package-blocks", "Module of blocks_compressed.js")(package_blocks)
    registry.task("package-blockly-node", "Node module of blockly_compressed.js")(package_blockly_node)
    registry.task("package-blocks-node", "Node module of blocks_compressed.js")(package_blocks_node)
    for suffix, file, lang in GENERATOR_BUNDLES:
        registry.task(f"package-{suffix}", f"Module of {file}")(package_lang(file, lang))
    registry.task("package-msg", "Modules of msg/js/*.js")(package_msg)
    registry.task("package-media", "Copy media/*")(package_media)
    registry.task("package-umd", "UMD bundle blockly.min.js")(package_umd)
    registry.task("package-json", "Copy package.json")(package_json)
    registry.task("package-dts", "Copy typings/blockly.d.ts")(package_dts)

    registry.task(
        "package",
        "Run every package-* task, then copy package/* into dist",
        depends_on=PACKAGE_TASKS,
    )(package_extra_files)

    registry.series("release", ["build", "typings", "package"], "Rebuild, regenerate typings and package")
    registry.series("default", ["build", "blockly_node_javascript_en"], "Rebuild and concatenate for Node.js")
    return registry


def create_blockly_task_registry() -> TaskRegistry:
    return register_blockly_tasks(TaskRegistry())
