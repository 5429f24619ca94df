"""CLI for bpmn-layout."""

from __future__ import annotations

import json
import logging
from pathlib import Path

import click

from bpmn_layout import __version__
from bpmn_layout.errors import LayoutError
from bpmn_layout.layout import LayoutConfig, layout_document
from bpmn_layout.parser import dump_layout, load_document
from bpmn_layout.parser.model import (
    Collaboration,
    Process,
    flow_nodes,
    is_sub_process,
    sequence_flows,
)


def _read_document(input_file: Path):
    try:
        data = json.loads(input_file.read_text())
    except json.JSONDecodeError as e:
        raise click.ClickException(f"Invalid JSON in {input_file}: {e}")
    try:
        return load_document(data)
    except LayoutError as e:
        raise click.ClickException(str(e))


def _count(scope) -> tuple[int, int]:
    """Nodes and sequence flows of *scope*, sub-processes included."""
    nodes = flow_nodes(scope.flow_elements)
    n_nodes = len(nodes)
    n_flows = len(sequence_flows(scope.flow_elements))
    for node in nodes:
        if is_sub_process(node):
            sub_nodes, sub_flows = _count(node)
            n_nodes += sub_nodes
            n_flows += sub_flows
    return n_nodes, n_flows


@click.group()
@click.version_option(version=__version__)
def cli() -> None:
    """bpmn-layout: Compute diagram layout for process models."""


@cli.command()
@click.argument("input_file", type=click.Path(exists=True, path_type=Path))
@click.option("-o", "--output", type=click.Path(path_type=Path), default=None,
              help="Output JSON file path. Defaults to <input>_layout.json")
@click.option("--grid-size", type=int, default=None,
              help="Grid unit for shapes and bends (default: 20)")
@click.option("-v", "--verbose", is_flag=True, help="Log layout decisions to stderr")
def layout(input_file: Path, output: Path | None, grid_size: int | None, verbose: bool) -> None:
    """Lay out a process-model document and write its diagrams."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    definitions = _read_document(input_file)
    config = LayoutConfig()
    if grid_size is not None:
        if grid_size <= 0:
            raise click.BadParameter("must be positive", param_hint="--grid-size")
        config = config.with_overrides(grid_size=grid_size)

    try:
        layout_document(definitions, config)
    except LayoutError as e:
        click.echo(f"Layout error: {e}", err=True)
        raise SystemExit(1)

    if output is None:
        output = input_file.with_name(input_file.stem + "_layout.json")

    output.write_text(json.dumps(dump_layout(definitions), indent=2) + "\n")
    n_shapes = sum(len(d.plane.shapes()) for d in definitions.diagrams)
    n_edges = sum(len(d.plane.edges()) for d in definitions.diagrams)
    click.echo(f"Laid out {len(definitions.diagrams)} diagrams, "
               f"{n_shapes} shapes, "
               f"{n_edges} edges -> {output}")


@cli.command()
@click.argument("input_file", type=click.Path(exists=True, path_type=Path))
def validate(input_file: Path) -> None:
    """Check that a document loads and every reference resolves."""
    definitions = _read_document(input_file)
    if not definitions.root_elements:
        click.echo("Validation errors:", err=True)
        click.echo("  - no process or collaboration", err=True)
        raise SystemExit(1)
    click.echo(f"Valid: {len(definitions.root_elements)} root elements")


@cli.command()
@click.argument("input_file", type=click.Path(exists=True, path_type=Path))
def info(input_file: Path) -> None:
    """Show information about a process-model document."""
    definitions = _read_document(input_file)

    processes = [el for el in definitions.root_elements if isinstance(el, Process)]
    collaboration = next(
        (el for el in definitions.root_elements if isinstance(el, Collaboration)), None
    )

    click.echo(f"Document: {definitions.id}")
    click.echo(f"Processes: {len(processes)}")
    for process in processes:
        n_nodes, n_flows = _count(process)
        click.echo(f"  {process.id}: {n_nodes} nodes, {n_flows} flows, "
                   f"{len(process.lanes)} lanes")
    if collaboration is not None:
        click.echo(f"Participants: {len(collaboration.participants)}")
        for participant in collaboration.participants:
            owner = participant.process.id if participant.process else "(empty)"
            click.echo(f"  {participant.name or participant.id}: {owner}")
        click.echo(f"Message flows: {len(collaboration.message_flows)}")
    else:
        click.echo("Participants: 0")
