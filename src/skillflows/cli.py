"""
Command-line interface for skillflows.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import Any

import yaml
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from skillflows.config import FlowsConfig
from skillflows.exporters import SkillExportOptions, auto_export, write_exports
from skillflows.logging import setup_logging
from skillflows.models import DiagramMetadata, MermaidDiagram, SourceType
from skillflows.pipeline import auto_detect, to_flows
from skillflows.store import WorkflowStore

console = Console()

CONFIG_SEARCH_PATHS = [
    Path.cwd() / "skillflows.yaml",
    Path.home() / ".config" / "skillflows" / "config.yaml",
]


def main(argv: list[str] | None = None) -> None:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Convert skills to Mermaid diagrams and back",
        prog="skillflows",
    )

    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose output (debug logging)",
    )
    parser.add_argument("-c", "--config", help="Path to a skillflows.yaml config file")

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    skill_parser = subparsers.add_parser(
        "skill", help="Parse a single skill (directory or SKILL.md file)"
    )
    skill_parser.add_argument("path", help="Skill directory or SKILL.md")
    _add_output_args(skill_parser)

    skills_parser = subparsers.add_parser(
        "skills", help="Parse an entire skills directory (e.g., ~/.claude/skills)"
    )
    skills_parser.add_argument("path", help="Skills directory")
    _add_output_args(skills_parser)

    auto_parser = subparsers.add_parser(
        "auto", help="Auto-detect source type and generate a Mermaid diagram"
    )
    auto_parser.add_argument("path", help="Skill, SKILL.md or skills directory")
    _add_output_args(auto_parser)

    export_parser = subparsers.add_parser(
        "export", help="Export a Mermaid diagram back to its source format"
    )
    export_parser.add_argument("file", help="Diagram JSON (from --json) or plain Mermaid file")
    export_parser.add_argument("-o", "--output", help="Output file (or directory for batches)")
    export_parser.add_argument(
        "--format",
        choices=[SourceType.SKILL.value, SourceType.SKILLS_DIRECTORY.value],
        help="Source type to assume for plain Mermaid input",
    )
    export_parser.add_argument(
        "--no-placeholders",
        action="store_true",
        help="Leave empty principles empty instead of writing placeholder comments",
    )

    workflows_parser = subparsers.add_parser("workflows", help="Manage stored workflow documents")
    workflows_sub = workflows_parser.add_subparsers(dest="workflows_command", help="Workflow commands")
    list_parser = workflows_sub.add_parser("list", help="List stored workflows")
    list_parser.add_argument("--filter", help="Only names containing this text")
    list_parser.add_argument("--json", action="store_true", help="Output as JSON")
    for name, help_text in [
        ("show", "Show a stored workflow"),
        ("delete", "Delete a stored workflow"),
        ("export", "Print a stored workflow as JSON"),
    ]:
        sub = workflows_sub.add_parser(name, help=help_text)
        sub.add_argument("id", help="Workflow id")
    import_parser = workflows_sub.add_parser("import", help="Import a workflow JSON file")
    import_parser.add_argument("file", help="Workflow JSON file")

    config_parser = subparsers.add_parser("config", help="Configuration management")
    config_sub = config_parser.add_subparsers(dest="config_command", help="Config commands")
    config_sub.add_parser("show", help="Show current configuration")
    config_sub.add_parser("path", help="Show config file paths")

    args = parser.parse_args(argv)

    try:
        config = _load_config(args.config)
        setup_logging("DEBUG" if args.verbose else config.log_level)

        if args.command in ("skill", "skills", "auto"):
            asyncio.run(cmd_generate(args, config))
        elif args.command == "export":
            cmd_export(args, config)
        elif args.command == "workflows":
            asyncio.run(cmd_workflows(args, config))
        elif args.command == "config":
            cmd_config(args, config)
        else:
            parser.print_help()
    except (OSError, ValueError, KeyError, yaml.YAMLError) as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}", highlight=False)
        sys.exit(1)


def _add_output_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("-o", "--output", help="Output file path (default: stdout)")
    parser.add_argument(
        "--json",
        action="store_true",
        help="Output full JSON with metadata (default: just Mermaid source)",
    )


def _load_config(path: str | None) -> FlowsConfig:
    if path:
        return FlowsConfig.from_yaml(Path(path))
    for candidate in CONFIG_SEARCH_PATHS:
        if candidate.exists():
            return FlowsConfig.from_yaml(candidate)
    return FlowsConfig()


def _print_text(text: str) -> None:
    console.print(text, markup=False, highlight=False, emoji=False, soft_wrap=True)


def _dump_json(data: Any) -> str:
    return json.dumps(data, indent=2, ensure_ascii=False, default=str)


async def cmd_generate(args: argparse.Namespace, config: FlowsConfig) -> None:
    """Generate a diagram for the skill, skills or auto commands."""
    path = Path(args.path).expanduser().resolve()
    if args.command == "skill":
        diagram = await to_flows(SourceType.SKILL, path, config)
    elif args.command == "skills":
        diagram = await to_flows(SourceType.SKILLS_DIRECTORY, path, config)
    else:
        diagram = await auto_detect(path, config)

    output = _dump_json(diagram.to_dict()) if args.json else diagram.source

    if args.output:
        Path(args.output).write_text(output, encoding="utf-8")
        console.print(f"[green]Mermaid diagram written to {args.output}[/green]")
        console.print(f"  - Source type: {diagram.metadata.source_type.value}")
    elif args.json:
        console.print_json(output)
    else:
        _print_text(output)


def read_diagram(path: Path, source_type: str | None = None) -> MermaidDiagram:
    """
    Read a diagram file.

    JSON files from ``--json`` carry their metadata; anything else is taken
    as plain Mermaid source of *source_type* (default ``skill``).
    """
    content = path.read_text(encoding="utf-8")
    try:
        data = json.loads(content)
    except json.JSONDecodeError:
        data = None

    if isinstance(data, dict) and "source" in data:
        return MermaidDiagram.from_dict(data)

    return MermaidDiagram(
        source=content,
        metadata=DiagramMetadata(
            source_type=SourceType(source_type or SourceType.SKILL.value),
            source_path=str(path),
        ),
    )


def cmd_export(args: argparse.Namespace, config: FlowsConfig) -> None:
    """Export a diagram back to SKILL.md."""
    diagram = read_diagram(Path(args.file).expanduser().resolve(), args.format)
    options = SkillExportOptions.from_defaults(config.export)
    if args.no_placeholders:
        options.include_principle_placeholders = False

    result = auto_export(diagram, options)

    if isinstance(result, str):
        if args.output:
            write_exports(result, args.output)
            console.print(f"[green]Exported to {args.output}[/green]")
        else:
            _print_text(result)
        return

    if args.output:
        for written in write_exports(result, Path(args.output).resolve()):
            console.print(f"  - Written: {written}")
        console.print(f"[green]Exported {len(result)} skills to {args.output}[/green]")
    else:
        for exported in result:
            _print_text(f"\n--- {exported.name} ---\n")
            _print_text(exported.content)


async def cmd_workflows(args: argparse.Namespace, config: FlowsConfig) -> None:
    """Workflow store commands."""
    store = WorkflowStore(config.workflows_dir)
    command = args.workflows_command

    if command == "list":
        summaries = await store.list(args.filter)
        if args.json:
            console.print_json(_dump_json([s.__dict__ for s in summaries]))
            return
        table = Table(title="Stored Workflows")
        table.add_column("ID", style="dim")
        table.add_column("Name", style="cyan")
        table.add_column("Version")
        table.add_column("Updated", style="dim")
        for summary in summaries:
            table.add_row(summary.id, summary.name, summary.version, summary.updated_at)
        console.print(table)
        console.print(f"\n[dim]Total: {len(summaries)} workflows[/dim]")
    elif command == "show":
        doc = await store.load(args.id)
        console.print(f"\n[bold]{doc.name}[/bold] [dim]v{doc.version}[/dim]")
        if doc.description:
            console.print(f"[dim]{doc.description}[/dim]")
        console.print(f"  Nodes: {len(doc.nodes)}")
        console.print(f"  Connections: {len(doc.connections)}")
        console.print(f"  Updated: {doc.updated_at}")
        if doc.tags:
            console.print(f"  Tags: {', '.join(doc.tags)}")
    elif command == "delete":
        await store.delete(args.id)
        console.print(f"[green]Deleted workflow {args.id}[/green]")
    elif command == "export":
        _print_text(await store.export_json(args.id))
    elif command == "import":
        doc = await store.import_json(Path(args.file).read_text(encoding="utf-8"))
        console.print(f"[green]Imported workflow {doc.name} as {doc.id}[/green]")
    else:
        console.print("[yellow]Usage: skillflows workflows <list|show|delete|export|import>[/yellow]")


def cmd_config(args: argparse.Namespace, config: FlowsConfig) -> None:
    """Configuration management commands."""
    if args.config_command == "show":
        console.print("[bold]Current Configuration:[/bold]\n")
        _print_text(yaml.dump(config.to_dict(), default_flow_style=False, sort_keys=False))
    elif args.config_command == "path":
        console.print("[bold]Config file search paths:[/bold]\n")
        for path in CONFIG_SEARCH_PATHS:
            exists = "[green]✓[/green]" if path.exists() else "[dim]·[/dim]"
            console.print(f"  {exists} {path}")
    else:
        console.print("[yellow]Usage: skillflows config <show|path>[/yellow]")


if __name__ == "__main__":
    main()
