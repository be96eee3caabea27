import asyncio
import json
import sys
import time
from pathlib import Path
from typing import Optional
import click
from rich.console import Console
from rich.live import Live

from ..core.config import Config
from ..core.exceptions import CodeHarvestError
from ..core.logger import setup_logging
from ..services.file_service import FileService
from ..services.stream_session import StreamSession
from ..services.structure_service import ProjectStructureService
from ..utils.file_utils import build_repo_context, files_from_context, format_files_for_context
from . import display

console = Console()


@click.group()
@click.option('--config', '-c', type=click.Path(exists=True), help='Config file path')
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose logging')
@click.pass_context
def cli(ctx, config: Optional[str], verbose: bool):
    """
    codeharvest - recover a project's files from generated text.

    The text is expected to announce files with `FILE: <path>` lines, each
    usually followed by a fenced code block.
    """
    setup_logging(verbose)
    try:
        ctx.obj = Config(config_path=Path(config) if config else None)
    except CodeHarvestError as e:
        console.print(f"[red]Configuration Error: {e}[/red]")
        sys.exit(1)


@cli.command()
@click.argument('source', type=click.File('r', encoding='utf-8'), default='-')
@click.option('--json', 'as_json', is_flag=True, help='Print the archive payload as JSON.')
@click.option('--tree-only', is_flag=True, help='Show the tree without file contents.')
@click.pass_obj
def parse(config: Config, source, as_json: bool, tree_only: bool):
    """Extract files from SOURCE and show them."""
    service = ProjectStructureService(config)
    structure = service.parse(source.read())
    if as_json:
        try:
            click.echo(json.dumps({"files": service.archive_payload(structure)}, indent=2))
        except CodeHarvestError as e:
            console.print(f"[red]Error: {e}[/red]")
            sys.exit(1)
        return
    display.show_structure(structure, show_contents=not tree_only)


@cli.command()
@click.argument('source', type=click.File('r', encoding='utf-8'), default='-')
@click.option('--chunk-size', '-n', default=40, show_default=True, type=click.IntRange(min=1), help='Characters per chunk.')
@click.option('--delay', '-d', default=0.05, show_default=True, type=click.FloatRange(min=0), help='Seconds between chunks.')
@click.pass_obj
def stream(config: Config, source, chunk_size: int, delay: float):
    """Replay SOURCE chunk by chunk, re-extracting after every chunk."""
    text = source.read()
    session = StreamSession(ProjectStructureService(config))

    with Live(display.render_stream_view(None, 0, 0), console=console, refresh_per_second=10) as live:
        for start in range(0, len(text), chunk_size):
            session.feed(text[start:start + chunk_size])
            live.update(display.render_stream_view(session.structure, session.passes, len(session.buffer)))
            if delay:
                time.sleep(delay)

    if session.structure is None:
        console.print("[yellow]No files found in the input.[/yellow]")
    else:
        console.print(f"[green]✓ {session.structure.file_count} files after {session.passes} passes.[/green]")


@cli.command()
@click.argument('source', type=click.File('r', encoding='utf-8'))
@click.argument('output_dir', type=click.Path(file_okay=False, path_type=Path))
@click.pass_obj
def write(config: Config, source, output_dir: Path):
    """Extract files from SOURCE and write them under OUTPUT_DIR."""
    structure = ProjectStructureService(config).parse(source.read())
    output_dir.mkdir(parents=True, exist_ok=True)
    try:
        written = asyncio.run(FileService(config, work_dir=output_dir).write_project(structure))
    except CodeHarvestError as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)
    for path in written:
        console.print(f"[green]✓ Wrote {path.relative_to(output_dir.resolve()).as_posix()}[/green]")


@cli.command()
@click.argument('directory', type=click.Path(exists=True, file_okay=False, path_type=Path))
@click.pass_obj
def context(config: Config, directory: Path):
    """Print the files under DIRECTORY in FILE: format."""
    files = files_from_context(build_repo_context(directory, config.context))
    if not files:
        console.print(f"[yellow]No supported files found in {directory}.[/yellow]")
        return
    click.echo(format_files_for_context(files), nl=False)


def main():
    cli()

if __name__ == '__main__':
    main()
