"""
Typer-based CLI for mongoconf.

Two commands are provided:

- ``describe``: list the properties a registry declares, with their
  fully-qualified names, defaults and descriptions.
- ``resolve``: resolve a registry against options, settings files, the
  environment and a connection string, and show where every value came from.

Configuration errors exit with code 2 and print the error message.
"""

import json
from pathlib import Path
from typing import Any, Dict, List, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from mongoconf.core.config import (
    CompositeConfig,
    ConfigError,
    ConfigResolver,
    EnvironmentLayer,
    JsonFileLayer,
    OptionsLayer,
    SourceLayer,
    SparkConfFileLayer,
    add_connection_string_layer,
    get_registry,
)
from mongoconf.core.config.composite import thaw_value
from mongoconf.core.utils.logger import log_debug, setup_logging

from .exit_codes import CliExit

console = Console()

app = typer.Typer(
    name="mongoconf",
    help="Describe and resolve MongoDB connector configuration",
    add_completion=False,
    rich_markup_mode="rich",
)


@app.callback()
def callback(
    log_level: Optional[str] = typer.Option(
        None, "--log-level", help="Logging level (defaults to MONGOCONF_LOG_LEVEL or INFO)"
    ),
) -> None:
    """Describe and resolve MongoDB connector configuration."""
    try:
        setup_logging(level=log_level)
    except ValueError as exc:
        raise typer.BadParameter(str(exc), param_hint="--log-level") from None


def _load_registry(name: str):
    try:
        return get_registry(name)
    except KeyError as exc:
        raise typer.BadParameter(exc.args[0], param_hint="REGISTRY") from None


def _parse_options(pairs: List[str]) -> Dict[str, str]:
    options: Dict[str, str] = {}
    for pair in pairs:
        key, separator, value = pair.partition("=")
        if not separator or not key.strip():
            raise typer.BadParameter(f"expected key=value, got {pair!r}", param_hint="--option")
        options[key.strip()] = value
    return options


def _display(value: Any) -> str:
    value = thaw_value(value)
    if isinstance(value, (dict, list)):
        return escape(json.dumps(value))
    return escape(str(value))


def _sub_config_documents(config: CompositeConfig) -> Dict[str, Any]:
    return {name: sub.to_document() for name, sub in config.sub_configs.items()}


@app.command()
def describe(
    registry_name: str = typer.Argument("input", metavar="REGISTRY", help="input, output or shared"),
    json_output: bool = typer.Option(False, "--json", help="Emit JSON"),
) -> None:
    """List the properties declared by a registry."""
    registry = _load_registry(registry_name)
    rows = [
        {
            "name": descriptor.name,
            "key": registry.fully_qualified_name(descriptor),
            "default": descriptor.default if descriptor.has_default else None,
            "required": descriptor.required,
            "type": descriptor.value_type.__name__,
            "inherited": not registry.declares(descriptor.name),
            "description": descriptor.description,
            "since": descriptor.since or None,
        }
        for descriptor in registry.descriptors()
    ]
    if json_output:
        print(json.dumps({"prefix": registry.prefix, "properties": rows}, indent=2, default=str))
        return

    table = Table(title=f"{registry.label} properties ({registry.prefix})")
    table.add_column("Property", style="cyan")
    table.add_column("Default")
    table.add_column("Required")
    table.add_column("Since")
    table.add_column("Description")
    for row in rows:
        name = row["name"] + (" (shared)" if row["inherited"] else "")
        default = "-" if row["default"] is None else _display(row["default"])
        table.add_row(
            name,
            default,
            "yes" if row["required"] else "no",
            row["since"] or "",
            escape(row["description"]),
        )
    console.print(table)


@app.command()
def resolve(
    registry_name: str = typer.Argument("input", metavar="REGISTRY", help="input, output or shared"),
    option: List[str] = typer.Option(
        [], "--option", "-o", help="Explicit option as key=value (prefix optional); repeatable"
    ),
    conf: Optional[Path] = typer.Option(
        None, "--conf", exists=True, dir_okay=False, help="spark-defaults.conf style settings file"
    ),
    json_file: Optional[Path] = typer.Option(
        None, "--json-file", exists=True, dir_okay=False, help="JSON settings file"
    ),
    uri: Optional[str] = typer.Option(None, "--uri", help="Connection string"),
    no_env: bool = typer.Option(False, "--no-env", help="Ignore environment variables"),
    json_output: bool = typer.Option(False, "--json", help="Emit JSON"),
) -> None:
    """Resolve a registry and show the winning source of every value."""
    registry = _load_registry(registry_name)
    options = _parse_options(option)
    if uri:
        options.setdefault("uri", uri)

    try:
        layers: List[SourceLayer] = []
        if options:
            layers.append(OptionsLayer(options, registry.prefix))
        if conf is not None:
            layers.append(SparkConfFileLayer(conf))
        if json_file is not None:
            layers.append(JsonFileLayer(json_file))
        if not no_env:
            layers.append(EnvironmentLayer())
        add_connection_string_layer(registry, layers)
        config = ConfigResolver(registry).resolve(layers)
    except ConfigError as exc:
        raise CliExit.config_error(f"Configuration error: {exc}") from None

    log_debug("cli", f"Resolved {registry.label}", context=config.fingerprint())
    if json_output:
        payload = {
            "prefix": registry.prefix,
            "values": config.to_dict(),
            "sources": {name: res.source for name, res in config.provenance.items()},
            "sub_configs": _sub_config_documents(config),
            "fingerprint": config.fingerprint(),
        }
        print(json.dumps(payload, indent=2, default=str))
        return

    table = Table(title=f"Resolved {registry.label} configuration")
    table.add_column("Property", style="cyan")
    table.add_column("Value")
    table.add_column("Source", style="green")
    table.add_column("Key")
    for name, resolution in config.provenance.items():
        value = "[dim]absent[/dim]" if resolution.is_absent else _display(resolution.value)
        table.add_row(name, value, resolution.source or "-", resolution.key or "")
    console.print(table)
    for name, document in _sub_config_documents(config).items():
        console.print(f"[bold]{name}[/bold]: {escape(json.dumps(document))}")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
