"""
streamedit: interpret streamed coding-agent output from the terminal.

Commands: streamedit parse | apply | replay | config
"""

import sys
from pathlib import Path
from typing import Iterator

import click
from rich.console import Console
from rich.markup import escape

from . import __version__
from .config import CONFIG_FIELDS, Config
from .content import ToolInvocation
from .diff_utils import count_changes
from .edit_session import FileEditSession
from .errors import ConfigError, ReconstructionError
from .logger import setup_logger
from .parser import ToolCallStreamParser
from .rendering import (
    build_edit_panel,
    render_config,
    render_edit_summary,
    render_error,
    render_items,
)
from .theme import ACCENT, DIM, INFO, SUCCESS
from .tools import FILE_EDIT_TOOLS

console = Console()
BANNER = (
    f"[bold {ACCENT}]streamedit[/bold {ACCENT}] "
    f"[dim]v{__version__} · streamed tool-call interpreter[/dim]"
)
DEFAULT_CHUNK_SIZE = 32


def _chunks(text: str, size: int) -> Iterator[str]:
    for start in range(0, len(text), size):
        yield text[start:start + size]


def _read(path: Path) -> str:
    return path.read_text(encoding="utf-8")


@click.group()
@click.version_option(__version__, prog_name="streamedit")
@click.option("--project-dir", "-d", default=".", help="Project directory")
@click.option("--verbose", "-v", count=True, help="More log output (-vv for debug)")
@click.pass_context
def cli(ctx, project_dir, verbose):
    """Parse tool calls and rebuild file edits from model output."""
    try:
        config = Config.load(project_dir)
        config.tool_catalog()
    except ConfigError as e:
        render_error(console, str(e))
        sys.exit(1)
    verbosity = verbose or (2 if config.verbose else 0)
    setup_logger(verbosity, log_file=config.log_file)
    ctx.obj = config


@cli.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--chunk-size", "-c", type=click.IntRange(min=1), default=DEFAULT_CHUNK_SIZE,
              show_default=True, help="Characters fed to the parser per step")
@click.option("--no-finalize", is_flag=True,
              help="Show items as they stand mid-stream instead of ending the message")
@click.pass_obj
def parse(config, file, chunk_size, no_finalize):
    """Parse a saved model transcript and list its content items."""
    parser = ToolCallStreamParser(config.tool_catalog())
    for chunk in _chunks(_read(file), chunk_size):
        parser.feed(chunk)
    render_items(console, parser.items if no_finalize else parser.finalize())


@cli.command()
@click.argument("diff_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("target", type=click.Path(dir_okay=False, path_type=Path))
@click.option("--output", "-o", type=click.Path(dir_okay=False, path_type=Path), default=None,
              help="Write the new content here")
@click.option("--chunk-size", "-c", type=click.IntRange(min=1), default=DEFAULT_CHUNK_SIZE,
              show_default=True, help="Characters of diff applied per step")
@click.pass_obj
def apply(config, diff_file, target, output, chunk_size):
    """Stream a SEARCH/REPLACE diff against TARGET and show the result."""
    original = _read(target) if target.exists() else None
    session = FileEditSession(str(target), original, config)
    invocation = ToolInvocation(name="replace_in_file", params={"path": str(target), "diff": ""})

    steps = 0
    try:
        for chunk in _chunks(_read(diff_file), chunk_size):
            invocation.params["diff"] += chunk
            session.update(invocation)
            steps += 1
        invocation.partial = False
        new_content = session.update(invocation)
    except ReconstructionError as e:
        render_error(console, str(e))
        sys.exit(1)

    console.print(build_edit_panel(original or "", new_content, title=str(target),
                                   blocks=session.blocks))
    console.print(f"  [{DIM}]Rebuilt over {steps} streamed step(s)[/{DIM}]")
    if output is not None:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(new_content, encoding="utf-8")
        console.print(f"  [{DIM}]Wrote {output}[/{DIM}]")


@cli.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.pass_obj
def replay(config, file):
    """Rebuild every file edit in a transcript against the files on disk."""
    console.print(BANNER)
    project_root = Path(config.project_root)
    parser = ToolCallStreamParser(config.tool_catalog())
    parser.parse_chunk(_read(file))
    items = parser.finalize()

    edits = [
        item for item in items
        if isinstance(item, ToolInvocation) and item.name in FILE_EDIT_TOOLS
    ]
    if not edits:
        console.print(f"  [{DIM}]No file edits found.[/{DIM}]")
        return

    failed = 0
    for invocation in edits:
        rel_path = invocation.get("path")
        if not rel_path:
            continue
        target = project_root / rel_path
        original = _read(target) if target.is_file() else None
        session = FileEditSession(rel_path, original, config)
        try:
            new_content = session.update(invocation)
        except ReconstructionError as e:
            failed += 1
            render_error(console, session.feedback(e))
            continue
        if new_content is None:
            continue
        added, removed = count_changes(original or "", new_content)
        render_edit_summary(console, rel_path, session.edit_type, added, removed, session.blocks)

    if failed:
        sys.exit(1)


@cli.command("config")
@click.argument("key", required=False)
@click.argument("value", required=False)
@click.option("--reset", is_flag=True, help="Restore KEY to its default")
@click.pass_obj
def config_command(config, key, value, reset):
    """Show settings, or show / set / reset one KEY."""
    if key is None:
        render_config(console, config.get_config_diff(), config.source)
        return
    if key not in CONFIG_FIELDS:
        render_error(console, f"Unknown configuration key: {key}")
        sys.exit(1)
    if reset and value is not None:
        raise click.UsageError("Give either VALUE or --reset, not both.")

    spec = CONFIG_FIELDS[key]
    if reset:
        ok, error_msg = config.reset_config_value(key)
    elif value is not None:
        ok, error_msg = config.set_config_value(key, value)
    else:
        console.print(f"  [bold {ACCENT}]{key}[/bold {ACCENT}]  [{DIM}]{spec.description}[/{DIM}]")
        console.print(f"  Type:    [{INFO}]{spec.value_type}[/{INFO}]")
        console.print(f"  Current: [bold]{escape(str(config.get_config_value(key)))}[/bold]")
        console.print(f"  Default: [{DIM}]{escape(str(spec.default))}[/{DIM}]")
        return

    if not ok:
        render_error(console, f"{key}: {error_msg}")
        sys.exit(1)
    verb = "Reset" if reset else "Set"
    console.print(f"  [{SUCCESS}]✓ {verb} {key} → {escape(str(config.get_config_value(key)))}[/{SUCCESS}]")
    console.print(f"  [{DIM}]Saved to {config.source}[/{DIM}]")


if __name__ == "__main__":
    cli()
