"""
BlockForge

Custom Blockly math blocks, their code generators, and the build tasks that
package the editor's compressed bundles for distribution.

Structure:
    blockforge/
        domain/         - Block instances and connection check types
        blocks/         - Block definitions and the block type registry
        generators/     - Per-language code generators and expression templates
        packaging/      - File pipeline, task registry/runner, build tasks
        shared/         - Registry, validation and result types
        utils/          - Logging, paths and settings
        cli/            - Command line entry point
"""
__version__ = "0.1.0"
