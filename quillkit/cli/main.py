"""Main CLI entry point using Typer."""
import sys
from datetime import datetime
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.table import Table
from rich.tree import Tree

from .. import __version__
from ..config import get_settings
from ..config.constants import EXPORT_FORMATS, PROJECT_DIR_SUFFIX, STRUCTURE_FILE
from ..models import ChapterStatus, ManuscriptStructure, NodeType, Project, ProjectError
from ..utils.logging import cleanup_old_logs, get_logger, setup_logging


app = typer.Typer(
    name="quillkit",
    help="quillkit - manuscript projects and multi-format book export",
    add_completion=True,
    rich_markup_mode="rich",
)

console = Console()


def resolve_project_dir(project: str) -> Path:
    """
    Find a project directory from a path or a name under the projects directory.

    Tries the argument as a path, then ``<projects_dir>/<name>`` and
    ``<projects_dir>/<name>.quill``.
    """
    direct_path = Path(project).expanduser()
    if (direct_path / STRUCTURE_FILE).exists():
        return direct_path.resolve()

    settings = get_settings()
    for candidate in (settings.projects_dir / project,
                      settings.projects_dir / f"{project}{PROJECT_DIR_SUFFIX}"):
        if (candidate / STRUCTURE_FILE).exists():
            return candidate

    # Let Project.open report the missing structure document
    return direct_path


def _open(project: str) -> Project:
    return Project.open(resolve_project_dir(project))


def _fail(message: str):
    console.print(f"[red]{message}[/red]")
    raise typer.Exit(1)


def _build_tree(structure: ManuscriptStructure) -> Tree:
    """Render the manuscript tree depth-first from the root."""
    root = structure.root_node
    tree = Tree(f"[bold cyan]{root.title if root else structure.root}[/bold cyan]")
    branches = {structure.root: tree}

    for node in structure.walk():
        if node.id == structure.root:
            continue
        parent_id = structure.parent_of(node.id)
        parent = branches.get(parent_id, tree)
        label = f"{node.title} [dim]({node.node_type.value}, {node.status.value}, {node.word_count:,} words)[/dim]"
        if node.node_type == NodeType.CHAPTER:
            label += f"\n[dim]{node.id}[/dim]"
        branches[node.id] = parent.add(label)

    return tree


@app.command(help="Create a new manuscript project")
def new(
    title: str = typer.Argument(..., help="Book title"),
    author: Optional[str] = typer.Option(
        None,
        "--author", "-a",
        help="Author name"
    ),
    directory: Optional[Path] = typer.Option(
        None,
        "--dir", "-d",
        help="Parent directory (defaults to the configured projects directory)"
    )
):
    """Create a new manuscript project."""
    try:
        settings = get_settings()
        root_dir = directory or settings.projects_dir

        console.print(f"[cyan]Creating project: {title}[/cyan]")
        project = Project.create(root_dir, title, author if author is not None else settings.default_author)

        console.print(f"[green]✓ Created project: {title}[/green]")
        console.print(f"[dim]Location: {project.path}[/dim]")

    except (ProjectError, ValueError) as e:
        _fail(f"Error creating project: {e}")


@app.command(help="Show project metadata and the manuscript tree")
def info(
    project: str = typer.Argument(..., help="Project name or path")
):
    """Show project metadata and the manuscript tree."""
    try:
        state = _open(project).state()
    except (ProjectError, ValueError) as e:
        _fail(f"Error: {e}")

    table = Table(title="Project")
    table.add_column("Key", style="cyan")
    table.add_column("Value")

    metadata = state.metadata
    table.add_row("title", metadata.title)
    table.add_row("author", metadata.author or "—")
    table.add_row("genre", metadata.genre or "—")
    table.add_row("words", f"{state.total_word_count:,}")
    if metadata.word_count_target:
        table.add_row("target", f"{metadata.word_count_target:,}")
    if metadata.deadline:
        table.add_row("deadline", metadata.deadline)
    table.add_row("modified", metadata.modified_at.isoformat(timespec='seconds'))
    table.add_row("path", state.path)

    console.print(table)
    console.print(_build_tree(state.structure))


@app.command(help="Add a chapter")
def add(
    project: str = typer.Argument(..., help="Project name or path"),
    title: str = typer.Argument(..., help="Chapter title"),
    parent: Optional[str] = typer.Option(
        None,
        "--parent", "-p",
        help="Parent node id (defaults to the book root)"
    )
):
    """Add an empty chapter to the project."""
    try:
        chapter = _open(project).add_chapter(title, parent_id=parent)
        console.print(f"[green]✓ Added chapter: {title}[/green]")
        console.print(f"[dim]id: {chapter.id}[/dim]")
    except (ProjectError, ValueError) as e:
        _fail(f"Error: {e}")


@app.command(help="Replace a chapter's text from a file or stdin")
def write(
    project: str = typer.Argument(..., help="Project name or path"),
    chapter_id: str = typer.Argument(..., help="Chapter id"),
    source: Optional[Path] = typer.Option(
        None,
        "--file", "-f",
        help="Markdown file to read (defaults to stdin)"
    )
):
    """Replace a chapter's body text."""
    try:
        if source is not None:
            content = source.read_text(encoding='utf-8')
        else:
            content = sys.stdin.read()
    except OSError as e:
        _fail(f"Error reading {source}: {e}")

    try:
        words = _open(project).update_chapter(chapter_id, content)
        console.print(f"[green]✓ Saved chapter {chapter_id}[/green] [dim]({words:,} words)[/dim]")
    except (ProjectError, ValueError) as e:
        _fail(f"Error: {e}")


@app.command(help="Print a chapter's text")
def show(
    project: str = typer.Argument(..., help="Project name or path"),
    chapter_id: str = typer.Argument(..., help="Chapter id")
):
    """Print a chapter's title, metadata and body."""
    try:
        chapter = _open(project).get_chapter(chapter_id)
    except (ProjectError, ValueError) as e:
        _fail(f"Error: {e}")

    console.print(f"[bold cyan]{chapter.title}[/bold cyan]")
    details = [chapter.status.value, f"{chapter.word_count:,} words"]
    if chapter.mood:
        details.append(f"mood: {chapter.mood}")
    if chapter.pov:
        details.append(f"pov: {chapter.pov}")
    console.print(f"[dim]{' | '.join(details)}[/dim]\n")
    console.print(chapter.content, markup=False, highlight=False)


@app.command(help="Rename a chapter")
def rename(
    project: str = typer.Argument(..., help="Project name or path"),
    chapter_id: str = typer.Argument(..., help="Chapter id"),
    title: str = typer.Argument(..., help="New title")
):
    """Rename a chapter."""
    try:
        _open(project).rename_chapter(chapter_id, title)
        console.print(f"[green]✓ Renamed chapter to: {title}[/green]")
    except (ProjectError, ValueError) as e:
        _fail(f"Error: {e}")


@app.command(help="Set a chapter's status, mood or point of view")
def status(
    project: str = typer.Argument(..., help="Project name or path"),
    chapter_id: str = typer.Argument(..., help="Chapter id"),
    new_status: Optional[ChapterStatus] = typer.Option(
        None,
        "--status", "-s",
        help="Editorial status"
    ),
    mood: Optional[str] = typer.Option(None, "--mood", help="Mood"),
    pov: Optional[str] = typer.Option(None, "--pov", help="Point of view character")
):
    """Update chapter metadata."""
    if new_status is None and mood is None and pov is None:
        _fail("Nothing to update: give --status, --mood or --pov")

    try:
        node = _open(project).update_chapter_metadata(chapter_id, status=new_status, mood=mood, pov=pov)
        console.print(f"[green]✓ Updated {node.title}[/green] [dim]({node.status.value})[/dim]")
    except (ProjectError, ValueError) as e:
        _fail(f"Error: {e}")


@app.command(help="Delete a chapter and its file")
def delete(
    project: str = typer.Argument(..., help="Project name or path"),
    chapter_id: str = typer.Argument(..., help="Chapter id"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation")
):
    """Delete a chapter."""
    try:
        opened = _open(project)
    except (ProjectError, ValueError) as e:
        _fail(f"Error: {e}")

    node = opened.structure.nodes.get(chapter_id)
    label = node.title if node else chapter_id
    if not yes and not typer.confirm(f"Delete chapter '{label}'?"):
        console.print("[yellow]Cancelled[/yellow]")
        return

    try:
        opened.delete_chapter(chapter_id)
        console.print(f"[green]✓ Deleted chapter: {label}[/green]")
    except (ProjectError, ValueError) as e:
        _fail(f"Error: {e}")


@app.command(help="Set the order of a node's children")
def reorder(
    project: str = typer.Argument(..., help="Project name or path"),
    chapter_ids: List[str] = typer.Argument(..., help="Chapter ids in their new order"),
    parent: Optional[str] = typer.Option(
        None,
        "--parent", "-p",
        help="Parent node id (defaults to the book root)"
    )
):
    """Replace the child order of a node."""
    try:
        _open(project).reorder_chapters(chapter_ids, parent_id=parent)
        console.print(f"[green]✓ Reordered {len(chapter_ids)} chapters[/green]")
    except (ProjectError, ValueError) as e:
        _fail(f"Error: {e}")


@app.command(help="Save a snapshot of the structure and metadata")
def snapshot(
    project: str = typer.Argument(..., help="Project name or path"),
    name: Optional[str] = typer.Option(None, "--name", "-n", help="Snapshot name")
):
    """Write a timestamped snapshot."""
    try:
        filename = _open(project).create_snapshot(name)
        console.print(f"[green]✓ Snapshot saved: {filename}[/green]")
    except (ProjectError, ValueError) as e:
        _fail(f"Error: {e}")


@app.command(help="Export the manuscript (markdown, text, html, latex, epub)")
def export(
    project: str = typer.Argument(..., help="Project name or path"),
    fmt: Optional[str] = typer.Option(
        None,
        "--format", "-f",
        help=f"Output format: {', '.join(EXPORT_FORMATS)}"
    ),
    output: Optional[Path] = typer.Option(
        None,
        "--output", "-o",
        help="Output file (defaults to exports/<title>.<ext>)"
    )
):
    """Export the manuscript to a single file."""
    from ..export import get_exporter

    try:
        opened = _open(project)
        exporter = get_exporter(fmt or get_settings().default_export_format, opened)

        console.print(f"[cyan]Exporting to {exporter.format_name}...[/cyan]")
        output_path = exporter.export(output)

        size = output_path.stat().st_size
        console.print(f"[green]✓ Exported: {output_path}[/green] [dim]({size:,} bytes)[/dim]")
    except (ProjectError, ValueError) as e:
        _fail(f"Error exporting: {e}")


@app.command(help="Show version information")
def version():
    """Show version information."""
    console.print(f"[cyan]quillkit v{__version__}[/cyan]")
    console.print("[dim]Manuscript projects and multi-format book export[/dim]")


@app.callback()
def main(
    verbose: bool = typer.Option(
        False,
        "--verbose", "-v",
        help="Log to the console as well"
    )
):
    """
    quillkit - manuscript projects and multi-format book export.
    """
    settings = get_settings()
    settings.log_dir.mkdir(parents=True, exist_ok=True)
    cleanup_old_logs(settings.log_dir)

    log_file = settings.log_dir / f"quillkit_{datetime.now().strftime('%Y%m%d')}.log"
    setup_logging(
        log_file=log_file,
        level=settings.log_level,
        console_output=verbose or settings.console_logging
    )
    get_logger("cli").debug(f"Command line: {sys.argv[1:]}")


if __name__ == "__main__":
    app()
