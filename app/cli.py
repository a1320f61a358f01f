from __future__ import annotations

import logging
from pathlib import Path

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from adapters.filesystem.diagram_repository import FileSystemDiagramRepository
from adapters.filesystem.json_utils import encode_json, write_json_atomic
from adapters.layout.vertical import VerticalHierarchyLayout
from app.config import AppSettings, load_settings
from domain.models import DiagramDocument
from domain.registry import EquipmentRegistry, validate_records
from domain.services.convert_equipment_to_diagram import EquipmentToDiagramConverter
from domain.services.network_analysis import analyze_network
from domain.services.path_finding import find_path_by_id

app = typer.Typer(no_args_is_help=True)
console = Console()
err_console = Console(stderr=True)


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


def _settings(ctx: typer.Context) -> AppSettings:
    if isinstance(ctx.obj, AppSettings):
        return ctx.obj
    return load_settings()


def _load_registry(input_path: Path) -> EquipmentRegistry:
    if not input_path.exists():
        console.print(f"[red]File not found:[/] {input_path}")
        raise typer.Exit(code=1)
    registry = EquipmentRegistry()
    try:
        FileSystemDiagramRepository().load_into(registry, input_path)
    except (ValueError, OSError) as exc:
        console.print(f"[red]Failed to load diagram:[/] {escape(str(exc))}")
        raise typer.Exit(code=1) from exc
    return registry


@app.callback()
def main(
    ctx: typer.Context,
    config: Path | None = typer.Option(None, "--config", help="YAML settings file."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log debug output."),
) -> None:
    try:
        settings = load_settings(config)
    except (FileNotFoundError, ValueError) as exc:
        console.print(f"[red]Invalid configuration:[/] {escape(str(exc))}")
        raise typer.Exit(code=1) from exc
    _configure_logging("DEBUG" if verbose else settings.output.log_level)
    ctx.obj = settings


@app.command("layout")
def layout(
    ctx: typer.Context,
    input_path: Path = typer.Argument(..., help="Diagram JSON file."),
    output: Path | None = typer.Option(
        None, "--output", "-o", help="Where to write the render model; stdout when omitted.",
    ),
) -> None:
    settings = _settings(ctx)
    registry = _load_registry(input_path)
    engine = VerticalHierarchyLayout(settings.layout.to_layout_config())
    result = EquipmentToDiagramConverter(engine).convert_registry(registry)
    payload = result.to_dict()
    if output is None:
        typer.echo(encode_json(payload).decode("utf-8"), nl=False)
        return
    write_json_atomic(output, payload)
    console.print(
        f"[green]Wrote[/] {output} ({len(result.nodes)} nodes, {len(result.connections)} connections)"
    )


@app.command("validate")
def validate(input_path: Path = typer.Argument(..., help="Diagram JSON file to validate.")) -> None:
    if not input_path.exists():
        console.print(f"[red]File not found:[/] {input_path}")
        raise typer.Exit(code=1)
    repository = FileSystemDiagramRepository()
    try:
        document: DiagramDocument = repository.load_document(input_path)
        validate_records(document.equipment)
    except (ValueError, OSError) as exc:
        console.print(f"[red]Validation failed:[/] {escape(str(exc))}")
        raise typer.Exit(code=1) from exc

    known = {record.id for record in document.equipment}
    dangling = [
        f"{record.id} -> {ref_id}"
        for record in document.equipment
        for ref_id in (*record.source_ids, *record.load_ids)
        if ref_id not in known
    ]
    if dangling:
        console.print("[red]Validation failed:[/] dangling references")
        for item in dangling:
            console.print(f"  {item}")
        raise typer.Exit(code=1)
    console.print(
        f"[green]Valid diagram file:[/] {input_path} ({len(document.equipment)} equipment)"
    )


@app.command("analyze")
def analyze(input_path: Path = typer.Argument(..., help="Diagram JSON file.")) -> None:
    registry = _load_registry(input_path)
    analysis = analyze_network(registry.get_all())
    console.print(f"Equipment: {analysis.total_equipment}")
    console.print(f"Connections: {analysis.edges}")
    console.print(f"Sources: {', '.join(analysis.sources) or '-'}")
    console.print(f"Sinks: {', '.join(analysis.sinks) or '-'}")
    console.print(f"Branch nodes: {', '.join(analysis.branch_nodes) or '-'}")
    console.print(f"Merge nodes: {', '.join(analysis.merge_nodes) or '-'}")
    console.print(f"Max depth: {analysis.max_depth}")
    console.print(f"Connected: {'yes' if analysis.weakly_connected else 'no'}")
    if analysis.cycles:
        for cycle in analysis.cycles:
            console.print(f"[yellow]Cycle:[/] {' -> '.join(cycle)}")
    else:
        console.print("Cycles: none")


@app.command("path")
def path(
    input_path: Path = typer.Argument(..., help="Diagram JSON file."),
    start: str = typer.Argument(..., help="Start equipment id."),
    goal: str = typer.Argument(..., help="Goal equipment id."),
) -> None:
    registry = _load_registry(input_path)
    missing = [equipment_id for equipment_id in (start, goal) if equipment_id not in registry]
    if missing:
        console.print(f"[red]Unknown equipment:[/] {', '.join(missing)}")
        raise typer.Exit(code=1)
    found = find_path_by_id(registry, start, goal)
    if found is None:
        console.print(f"[yellow]No path between[/] {start} and {goal}")
        return
    console.print(" -> ".join(item.id for item in found))


if __name__ == "__main__":
    app()
