"""
Mesh Hub render — CLI entrypoint.

Usage:
    python -m meshhub.main --help
    python -m meshhub.main render --spec specs/gloo/spec.yaml --version v1.3.0
    python -m meshhub.main spec check specs/gloo/spec.yaml
"""

from __future__ import annotations

import json
import sys
from pathlib import Path

import click

from meshhub import __version__
from meshhub.core.observability.logging_config import resolve_level, setup_logging
from meshhub.ui.cli.options import (
    parse_layers,
    parse_params,
    parse_runtime_option,
    parse_runtimes_option,
)

_SPEC_PATH = click.Path(exists=False, dir_okay=False, path_type=Path)


@click.group()
@click.version_option(version=__version__, prog_name="meshhub")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.pass_context
def cli(ctx: click.Context, verbose: bool, quiet: bool, debug: bool) -> None:
    """Mesh Hub — render installation plans for packaged mesh applications."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    ctx.obj["debug"] = debug

    # ── Logging setup (once, at process start) ──────────────────
    if debug:
        level = "DEBUG"
    elif verbose:
        level = "INFO"
    elif quiet:
        level = "ERROR"
    else:
        level = None

    setup_logging(level=resolve_level(level), quiet_third_party=not debug)


def _echo_error(error: dict) -> None:
    click.secho(f"❌ {error.get('kind', 'Error')}: {error.get('message', '')}", fg="red", err=True)
    for sub in error.get("errors", []):
        click.echo(f"   • {sub['kind']}: {sub['message']}", err=True)


@cli.command()
@click.option("--spec", "spec_path", type=_SPEC_PATH, required=True, help="Application spec file.")
@click.option("--version", "version", required=True, help="Application version to render.")
@click.option("--flavor", default=None, help="Flavor name.")
@click.option(
    "--layer", "layers", multiple=True, callback=parse_layers,
    help="Layer choice as LAYER=OPTION (LAYER= disables an optional layer).",
)
@click.option(
    "--param", "params", multiple=True, callback=parse_params,
    help="Parameter override as NAME=VALUE.",
)
@click.option(
    "--values", "values_file", type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None, help="Extra values YAML file.",
)
@click.option("--namespace", "-n", default="default", show_default=True, help="Install namespace.")
@click.option(
    "--mesh", "runtime", default=None, callback=parse_runtime_option,
    help="Target mesh as TYPE:VERSION (e.g. ISTIO:1.6.2).",
)
@click.option(
    "--github-root", type=click.Path(file_okay=False, path_type=Path), default=None,
    help="Directory with local <org>/<repo> checkouts for GitHub chart sources.",
)
@click.option("--skip-dependency-check", is_flag=True, help="Don't verify layer resource dependencies.")
@click.option("--mock", is_flag=True, help="Use the mock templating engine (no helm, no cluster).")
@click.option("--output", "-o", "output", type=click.Path(dir_okay=False, path_type=Path),
              default=None, help="Write the rendered YAML to a file.")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def render(
    ctx: click.Context,
    spec_path: Path,
    version: str,
    flavor: str | None,
    layers: dict[str, str | None],
    params: dict[str, str],
    values_file: Path | None,
    namespace: str,
    runtime,
    github_root: Path | None,
    skip_dependency_check: bool,
    mock: bool,
    output: Path | None,
    as_json: bool,
) -> None:
    """Render the installation plan for one application version."""
    from meshhub.core.use_cases.render import render_application

    result = render_application(
        spec_path,
        version,
        flavor=flavor,
        layers=layers,
        params=params,
        values_file=values_file,
        namespace=namespace,
        runtime=runtime,
        mock=mock,
        github_root=github_root,
        check_dependencies=not skip_dependency_check,
    )

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        sys.exit(0 if result.ok else 1)

    if result.error:
        _echo_error(result.error)
        sys.exit(1)

    plan = result.plan
    assert plan is not None
    text = plan.to_yaml()

    if output is not None:
        output.write_text(text, encoding="utf-8")
    else:
        click.echo(text, nl=False)

    if not ctx.obj.get("quiet") and (output is not None or ctx.obj.get("verbose")):
        click.secho(
            f"✅ {plan.application} {plan.version}: {plan.total_resources} resources "
            f"in {len(plan.steps)} step(s)",
            fg="green", err=True,
        )
        if output is not None:
            click.echo(f"   → {output}", err=True)


@cli.command("values")
@click.option("--spec", "spec_path", type=_SPEC_PATH, required=True, help="Application spec file.")
@click.option("--version", "version", required=True, help="Application version.")
@click.option("--flavor", default=None, help="Flavor name.")
@click.option("--layer", "layers", multiple=True, callback=parse_layers, help="LAYER=OPTION.")
@click.option("--param", "params", multiple=True, callback=parse_params, help="NAME=VALUE.")
def values(
    spec_path: Path,
    version: str,
    flavor: str | None,
    layers: dict[str, str | None],
    params: dict[str, str],
) -> None:
    """Show the composed values (secret parameters left out)."""
    from meshhub.core.use_cases.render import preview_values

    text, error = preview_values(spec_path, version, flavor=flavor, layers=layers, params=params)
    if error:
        _echo_error(error)
        sys.exit(1)
    click.echo(text, nl=False)


@cli.command()
@click.option("--spec", "spec_path", type=_SPEC_PATH, required=True, help="Application spec file.")
@click.option("--version", "version", required=True, help="Application version.")
@click.option(
    "--mesh", "runtimes", multiple=True, required=True, callback=parse_runtimes_option,
    help="Mesh as TYPE:VERSION or NAME=TYPE:VERSION (repeatable).",
)
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
def flavors(spec_path: Path, version: str, runtimes, as_json: bool) -> None:
    """List flavors of a version that are compatible with the given meshes."""
    from meshhub.core.use_cases.render import list_flavors

    result = list_flavors(spec_path, version, runtimes)

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        sys.exit(0 if result.error is None else 1)

    if result.error:
        _echo_error(result.error)
        sys.exit(1)

    click.secho(f"\n🧩 {result.application} {result.version}", fg="cyan", bold=True)
    if not result.pairs:
        click.echo("   No compatible flavors")
    for pair in result.pairs:
        mesh = pair.mesh_name or pair.mesh_type.value
        click.echo(f"   • {pair.flavor.name}  → {mesh} {pair.mesh_version}")
    click.echo()


# ── Register sub-groups ─────────────────────────────────────────

from meshhub.ui.cli.spec import spec  # noqa: E402

cli.add_command(spec)


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
