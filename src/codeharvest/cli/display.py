from typing import Optional
from rich.console import Console, Group
from rich.panel import Panel
from rich.syntax import Syntax
from rich.text import Text
from rich.tree import Tree

from ..models.project import ProjectStructure, FolderNode, FileNode, ProjectFile

console = Console()

def render_tree(structure: Optional[ProjectStructure], selected_key: Optional[str] = None) -> Tree:
    """Render the folder tree; collapsed folders show no children."""
    if structure is None:
        return Tree("[dim]Waiting for files...[/dim]")

    root = Tree(f"[bold orange1]{structure.root.label}[/bold orange1] [dim]({structure.file_count} files)[/dim]")
    _add_children(root, structure.root, selected_key)
    return root

def _add_children(branch: Tree, folder: FolderNode, selected_key: Optional[str]):
    for child in folder.children:
        if isinstance(child, FolderNode):
            marker = "▾" if child.expanded else "▸"
            sub = branch.add(f"[bold cyan]{marker} {child.label}/[/bold cyan]")
            if child.expanded:
                _add_children(sub, child, selected_key)
        else:
            _add_file(branch, child, selected_key)

def _add_file(branch: Tree, node: FileNode, selected_key: Optional[str]):
    label = Text(node.label, style="reverse" if node.key == selected_key else "")
    label.append(f"  {node.language} · {len(node.content)} chars", style="dim")
    branch.add(label)

def render_file(file: ProjectFile) -> Panel:
    syntax_content = Syntax(
        file.content,
        lexer=file.language,
        theme="vim",
        line_numbers=True,
        word_wrap=True,
        background_color="default"
    )
    return Panel(
        syntax_content,
        title=f"[bold cyan]File: {file.path}[/bold cyan]",
        border_style="blue",
        expand=False,
        padding=(1, 2)
    )

def render_stream_view(structure: Optional[ProjectStructure], passes: int, buffer_size: int, selected_key: Optional[str] = None) -> Panel:
    footer = Text(f"pass {passes} · {buffer_size} chars buffered", style="dim")
    return Panel(Group(render_tree(structure, selected_key), footer), title="Live Extraction", border_style="blue")

def show_structure(structure: Optional[ProjectStructure], show_contents: bool = True):
    if structure is None:
        console.print("[yellow]No files found in the input.[/yellow]")
        return
    console.print(render_tree(structure))
    if show_contents:
        for file in structure.files:
            console.print(render_file(file))
