"""
CLI commands for application spec files.

Thin wrappers over ``meshhub.core.use_cases.render``.
"""

from __future__ import annotations

import json
import sys
from pathlib import Path

import click


@click.group("spec")
def spec() -> None:
    """Application spec files — validation and inspection."""


@spec.command("check")
@click.argument("spec_path", type=click.Path(exists=False, dir_okay=False, path_type=Path))
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
def check(spec_path: Path, as_json: bool) -> None:
    """Load and validate an application spec file."""
    from meshhub.core.use_cases.render import check_spec

    result = check_spec(spec_path)

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        sys.exit(0 if result.valid else 1)

    if result.valid:
        assert result.spec is not None
        click.secho("✅ Spec is valid", fg="green", bold=True)
        click.echo(f"   Application: {result.spec.name} ({result.spec.type.value})")
        click.echo(f"   Versions: {', '.join(result.spec.version_names) or '-'}")
    else:
        click.secho("❌ Spec errors:", fg="red", bold=True)
        for err in result.errors:
            click.echo(f"   • {err}")

    if result.warnings:
        click.echo()
        click.secho("⚠️  Warnings:", fg="yellow")
        for warn in result.warnings:
            click.echo(f"   • {warn}")

    if not result.valid:
        sys.exit(1)


@spec.command("show")
@click.argument("spec_path", type=click.Path(exists=False, dir_okay=False, path_type=Path))
def show(spec_path: Path) -> None:
    """List versions, flavors, layers, and parameters of a spec."""
    from meshhub.core.config.loader import ConfigError, load_application_spec
    from meshhub.core.services.render.domain.params import display_parameter_value

    try:
        app = load_application_spec(spec_path)
    except ConfigError as e:
        click.secho(f"❌ {e}", fg="red")
        sys.exit(1)

    click.secho(f"\n📦 {app.name}", fg="cyan", bold=True)
    if app.short_description:
        click.echo(f"   {app.short_description}")

    for v in app.versions:
        click.echo()
        click.secho(f"   {v.version}", fg="white", bold=True)
        if v.installation_steps is not None:
            click.echo(f"     steps: {', '.join(s.name for s in v.installation_steps.steps)}")
        elif v.single_source is not None:
            click.echo(f"     source: {v.single_source.describe()}")
        for p in v.parameters:
            req = " (required)" if p.required else ""
            default = f" = {display_parameter_value(p.default)}" if p.default is not None else ""
            click.echo(f"     param {p.name}: {p.type.value}{default}{req}")
        for f in v.flavors:
            click.echo(f"     flavor {f.name}")
            for layer in f.customization_layers:
                opt = " (optional)" if layer.optional else ""
                options = ", ".join(o.id for o in layer.options)
                click.echo(f"       layer {layer.id}{opt}: {options}")

    click.echo()
