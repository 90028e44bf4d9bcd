"""
BlockForge CLI

Usage:
    blockforge run [TASK ...]              # default: "default"
    blockforge tasks                       # list build tasks
    blockforge blocks [--type ID | --search TEXT]  # block definitions as JSON
    blockforge generate FILE [--language javascript|python]

Global options:
    --root DIR          Build root (editor checkout); default: current directory
    --log-level LEVEL   DEBUG, INFO, WARNING, ERROR

Generated code and JSON go to stdout; log output goes to stderr.
"""
import argparse
import json
import sys
from pathlib import Path
from typing import List, Optional

from blockforge.blocks.block_registry import BlockTypeRegistry, create_default_block_registry
from blockforge.domain.block import Workspace
from blockforge.generators.generator import GeneratorError, GeneratorRegistry, create_default_generators
from blockforge.generators.template import TemplateError
from blockforge.packaging.blockly_tasks import create_blockly_task_registry
from blockforge.packaging.context import BuildContext
from blockforge.packaging.task_runner import TaskRunner
from blockforge.shared.result_types import CommandResult
from blockforge.shared.validation import ValidationError
from blockforge.utils.message import Log
from blockforge.utils.settings import Settings, SettingsError


LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="blockforge",
        description="Blockly math blocks, code generation and packaging tasks.",
    )
    parser.add_argument("--root", default=".", help="Build root (editor checkout)")
    parser.add_argument("--log-level", choices=LOG_LEVELS, type=str.upper, help="Log level (overrides settings)")

    subparsers = parser.add_subparsers(dest="command", required=True)

    run_parser = subparsers.add_parser("run", help="Run build tasks")
    run_parser.add_argument("tasks", nargs="*", default=["default"], help="Task names (default: default)")

    subparsers.add_parser("tasks", help="List build tasks")

    blocks_parser = subparsers.add_parser("blocks", help="Print block definitions as JSON")
    blocks_parser.add_argument("--type", dest="type_id", help="Only this block type")
    blocks_parser.add_argument("--search", help="Only block types whose id, description or tags match")

    generate_parser = subparsers.add_parser("generate", help="Generate code from a block tree JSON file")
    generate_parser.add_argument("file", help="JSON file with a block, a list of blocks or a workspace")
    generate_parser.add_argument("--language", default="javascript", help="Output language (default: javascript)")

    return parser


# =============================================================================
# Commands
# =============================================================================

def generate_code(
    workspace: Workspace,
    language: str,
    block_registry: BlockTypeRegistry,
    generators: GeneratorRegistry,
) -> CommandResult[str]:
    """
    Generate source text for every top-level block of a workspace.

    Field values are coerced through the block definitions first; fields
    the tree leaves out get their defaults.
    """
    generator = generators.get(language)
    if generator is None:
        return CommandResult.error_result(
            message=f"Unknown language '{language}'",
            errors=[f"Available languages: {', '.join(generators.languages())}"],
        )

    unsupported = sorted({block.type for block in workspace.all_blocks() if not generator.supports(block.type)})
    if unsupported:
        return CommandResult.error_result(
            message=f"{language} generator does not know block type(s): {', '.join(unsupported)}",
            errors=[f"Supported block types: {', '.join(generator.block_types())}"],
        )

    warnings = []
    try:
        for block in workspace.all_blocks():
            definition = block_registry.get(block.type)
            if definition is None:
                continue  # generated without field checks
            fields = definition.default_fields()
            for name, value in block.fields.items():
                field_def = definition.get_field(name)
                fields[name] = field_def.coerce(value) if field_def else value
            result = definition.validate_fields(fields)
            warnings.extend(result.warnings)
            result.raise_if_invalid()
            block.fields = fields

        code = generator.workspace_to_code(workspace)
    except (ValidationError, GeneratorError, TemplateError) as e:
        return CommandResult.error_result(message="Code generation failed", errors=[str(e)])

    if warnings:
        return CommandResult.warning_result(message=f"Generated {language} code", data=code, warnings=warnings)
    return CommandResult.success_result(message=f"Generated {language} code", data=code)


def cmd_run(args, settings: Settings) -> int:
    registry = create_blockly_task_registry()
    context = BuildContext(Path(args.root), settings)
    runner = TaskRunner(registry, context, max_workers=int(settings.get("max_workers", 8)))
    result = runner.run(args.tasks)
    if result.failed:
        for error in result.errors:
            Log.error(error)
        return 1
    Log.info(result.message)
    return 0


def cmd_tasks(args, settings: Settings) -> int:
    registry = create_blockly_task_registry()
    definitions = registry.list_tasks()
    width = max(len(d.name) for d in definitions)
    for definition in definitions:
        detail = definition.description
        if definition.series:
            detail = f"{detail} [series: {', '.join(definition.series)}]"
        print(f"{definition.name.ljust(width)}  {detail}")

    missing = registry.validate()
    if missing:
        Log.error(f"Tasks referenced but never registered: {', '.join(missing)}")
        return 1
    return 0


def cmd_blocks(args, settings: Settings) -> int:
    registry = create_default_block_registry()
    if args.type_id:
        definition = registry.get(args.type_id)
        if definition is None:
            Log.error(f"Unknown block type '{args.type_id}'")
            return 1
        data = definition.to_json()
    elif args.search:
        data = [definition.to_json() for definition in registry.search(args.search)]
    else:
        data = registry.to_json_array()
    print(json.dumps(data, indent=2, ensure_ascii=False))
    return 0


def cmd_generate(args, settings: Settings) -> int:
    path = Path(args.file)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
        workspace = Workspace.from_dict(data)
    except (OSError, json.JSONDecodeError, ValueError) as e:
        Log.error(f"Cannot read block tree from {path}: {e}")
        return 1

    result = generate_code(
        workspace,
        args.language,
        create_default_block_registry(),
        create_default_generators(),
    )
    for warning in result.warnings:
        Log.warning(warning)
    if result.failed:
        Log.error(result.message)
        for error in result.errors:
            Log.error(error)
        return 1

    sys.stdout.write(result.data)
    return 0


COMMANDS = {
    "run": cmd_run,
    "tasks": cmd_tasks,
    "blocks": cmd_blocks,
    "generate": cmd_generate,
}


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        settings = Settings(Path(args.root))
    except SettingsError as e:
        Log.error(str(e))
        return 1

    Log.set_level(args.log_level or settings.get("log_level", "INFO"))
    return COMMANDS[args.command](args, settings)


if __name__ == "__main__":
    sys.exit(main())
