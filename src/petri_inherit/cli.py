# ──────────────────────────────────────────────────────────────────────
# Petri Inherit — Command Line Interface
# © 1998–2026 Miroslav Šotek. All rights reserved.
# Contact: www.anulum.li | protoscience@anulum.li
# License: GNU AGPL v3 | Commercial licensing available
# ──────────────────────────────────────────────────────────────────────
from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import Any, Optional

import click
from pydantic import ValidationError

from .analysis.reachability import build_reachability_graph
from .analysis.resolver import determine_inheritance_type
from .core.config_schema import InheritanceSettings, load_settings
from .errors import InheritanceError
from .io.logging_config import setup_inherit_logging
from .io.net_schema import dump_net, load_net_file
from .net.cloner import clone_with_fresh_identities, validate_against_parent
from .net.merger import merge_parent_into_child
from .net.structure import PetriNet

LOGGER = logging.getLogger("petri_inherit.cli")

NET_FILE = click.Path(exists=True, dir_okay=False, path_type=Path)


def _load(path: Path) -> PetriNet:
    try:
        return load_net_file(path)
    except ValidationError as exc:
        raise click.ClickException(f"Invalid net document {path}: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise click.ClickException(f"{path} is not valid JSON: {exc}") from exc
    except (ValueError, InheritanceError) as exc:
        raise click.ClickException(f"Cannot build net from {path}: {exc}") from exc


def _echo_json(payload: Any) -> None:
    click.echo(json.dumps(payload, indent=2, sort_keys=False))


def _settings(
    config: Optional[Path],
    protocol: Optional[bool],
    projection: Optional[bool],
    max_markings: Optional[int],
    strict: bool,
) -> InheritanceSettings:
    overrides: dict[str, Any] = {
        "protocol_enabled": protocol,
        "projection_enabled": projection,
        "max_markings": max_markings,
    }
    if strict:
        overrides["protocol_match_policy"] = "all"
        overrides["projection_match_policy"] = "all"
    try:
        return load_settings(config, **overrides)
    except (ValidationError, ValueError) as exc:
        raise click.ClickException(f"Invalid settings: {exc}") from exc


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.option(
    "--log-level",
    default="WARNING",
    show_default=True,
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    help="Package log level.",
)
@click.option("--json-logs", is_flag=True, help="Emit log records as JSON.")
def cli(log_level: str, json_logs: bool) -> None:
    """Petri net inheritance verification."""
    setup_inherit_logging(
        level=getattr(logging, log_level.upper(), logging.WARNING),
        json_output=json_logs,
    )


@cli.command()
@click.argument("parent", type=NET_FILE)
@click.argument("child", type=NET_FILE)
@click.option(
    "--config",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="JSON settings file.",
)
@click.option("--protocol/--no-protocol", default=None, help="Allow protocol inheritance.")
@click.option("--projection/--no-projection", default=None, help="Allow projection inheritance.")
@click.option("--max-markings", type=click.IntRange(min=1), default=None, help="Exploration budget per net.")
@click.option("--strict", is_flag=True, help="Require every matching child marking to conform.")
def check(
    parent: Path,
    child: Path,
    config: Optional[Path],
    protocol: Optional[bool],
    projection: Optional[bool],
    max_markings: Optional[int],
    strict: bool,
) -> None:
    """Classify CHILD against PARENT."""
    settings = _settings(config, protocol, projection, max_markings, strict)
    parent_net = _load(parent)
    child_net = _load(child)
    try:
        verdict = determine_inheritance_type(parent_net, child_net, settings)
    except InheritanceError as exc:
        LOGGER.info("Check failed: %s", type(exc).__name__)
        raise click.ClickException(exc.reason) from exc
    click.echo(str(verdict))


@cli.command()
@click.argument("net", type=NET_FILE)
@click.option("--max-markings", type=click.IntRange(min=1), default=None, help="Exploration budget.")
def graph(net: Path, max_markings: Optional[int]) -> None:
    """Print the reachability graph of NET as JSON."""
    settings = _settings(None, None, None, max_markings, False)
    petri_net = _load(net)
    try:
        rg = build_reachability_graph(
            petri_net,
            max_markings=settings.max_markings,
            max_seconds=settings.max_seconds,
        )
    except InheritanceError as exc:
        raise click.ClickException(exc.reason) from exc
    _echo_json(rg.to_dict())


@cli.command()
@click.argument("net", type=NET_FILE)
def inspect(net: Path) -> None:
    """Print a summary and topology diagnostics of NET."""
    petri_net = _load(net)
    petri_net.compile()
    click.echo(petri_net.summary())
    report = petri_net.validate_topology()
    click.echo("")
    click.echo("Topology:")
    for key, values in report.items():
        click.echo(f"  {key}: {', '.join(values) if values else '-'}")


@cli.command()
@click.argument("parent", type=NET_FILE)
@click.argument("child", type=NET_FILE)
def merge(parent: Path, child: Path) -> None:
    """Print the union of PARENT and CHILD as a net document."""
    try:
        merged = merge_parent_into_child(_load(parent), _load(child))
    except InheritanceError as exc:
        raise click.ClickException(exc.reason) from exc
    _echo_json(dump_net(merged))


@cli.command()
@click.argument("net", type=NET_FILE)
@click.option(
    "--parent",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Reject ids already used by this parent net first.",
)
def clone(net: Path, parent: Optional[Path]) -> None:
    """Print NET with freshly generated place and transition ids."""
    petri_net = _load(net)
    try:
        if parent is not None:
            cloned = validate_against_parent(petri_net, _load(parent))
        else:
            cloned = clone_with_fresh_identities(petri_net)
    except InheritanceError as exc:
        raise click.ClickException(exc.reason) from exc
    _echo_json(dump_net(cloned))


def main() -> int:
    try:
        cli.main(standalone_mode=False)
    except click.ClickException as exc:
        exc.show()
        return exc.exit_code
    except click.exceptions.Abort:
        return 1
    except SystemExit as exc:
        code = exc.code if isinstance(exc.code, int) else 1
        return code
    return 0


if __name__ == "__main__":
    sys.exit(main())
