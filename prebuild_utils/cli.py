"""Thin CLI wrapper for prebuild_utils.

This module provides the command-line interface using Typer.
All business logic is delegated to core modules; only this module
decides to terminate the process on errors.
"""

import json
import logging
import shutil
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from prebuild_utils import __version__
from prebuild_utils.config import get_settings, print_settings_json
from prebuild_utils.manifest.io import (
    ManifestNotFoundError,
    ManifestParseError,
    load_build_config,
)
from prebuild_utils.manifest.schema import BuildConfig
from prebuild_utils.workspace import (
    RepoRootNotFoundError,
    clean_workspace,
    find_repo_root,
)

app = typer.Typer(
    name="prebuild-utils",
    help="Prebuild Utils - build, bundle and deploy precompiled native libraries",
    no_args_is_help=True,
)
console = Console()

ConfigNameArg = Annotated[
    str, typer.Argument(help="Config name (preset) from manifest.json")
]
JsonOption = Annotated[bool, typer.Option("--json", help="Output as JSON")]


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"prebuild-utils version {__version__}")
        raise typer.Exit()


def configure_logging(level: str) -> None:
    """Route library logging through rich at the given level."""
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


@app.callback()
def main(
    ctx: typer.Context,
    root: Annotated[
        Path | None,
        typer.Option(
            "--root",
            "-C",
            help="Repository root (default: nearest directory with CMakeLists.txt)",
        ),
    ] = None,
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            help="Show version and exit",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
) -> None:
    """Prebuild Utils - build, bundle and deploy precompiled native libraries."""
    settings = get_settings()
    configure_logging(settings.log_level)
    ctx.obj = {"root": root or settings.root_dir}


def _resolve_root(ctx: typer.Context) -> Path:
    root = (ctx.obj or {}).get("root")
    if root is not None:
        return Path(root)
    try:
        return find_repo_root(Path.cwd())
    except RepoRootNotFoundError as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        raise typer.Exit(code=1) from None


def _load_config(ctx: typer.Context, config_name: str) -> BuildConfig:
    root_dir = _resolve_root(ctx)
    try:
        config = load_build_config(root_dir, config_name)
    except ManifestNotFoundError as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        raise typer.Exit(code=1) from None
    except ManifestParseError as e:
        console.print(f"[red]Invalid manifest: {escape(str(e))}[/red]")
        raise typer.Exit(code=1) from None

    if config is None:
        console.print(f"[red]Config {config_name} not found in manifest.[/red]")
        raise typer.Exit(code=1)
    return config


@app.command()
def config(json_output: JsonOption = False) -> None:
    """Show effective configuration."""
    settings = get_settings()
    if json_output:
        console.print(print_settings_json(settings), soft_wrap=True)
        return

    root_display = str(settings.root_dir) if settings.root_dir else "(auto-detect)"
    timeout_display = (
        str(settings.build_timeout) if settings.build_timeout else "(none)"
    )
    console.print("[bold]Effective Configuration:[/bold]")
    console.print()
    console.print(f"  Root directory:      {root_display}")
    console.print(f"  Log level:           {settings.log_level}")
    console.print(f"  CMake executable:    {settings.cmake_executable}")
    console.print(f"  Build timeout:       {timeout_display}")


@app.command()
def setup(ctx: typer.Context) -> None:
    """Check the local environment."""
    settings = get_settings()
    root_dir = _resolve_root(ctx)

    console.print("[bold]Setting up prebuild-utils...[/bold]")
    console.print(f"  Root: {root_dir}")
    cmake_path = shutil.which(settings.cmake_executable)
    if cmake_path:
        console.print(f"  CMake: {cmake_path}")
    else:
        console.print(
            f"[yellow]  CMake not found on PATH: {settings.cmake_executable}[/yellow]"
        )


@app.command()
def clean(ctx: typer.Context) -> None:
    """Remove the build, projects and bundles directories."""
    root_dir = _resolve_root(ctx)
    console.print("[bold]Cleaning...[/bold]")
    console.print(f"  Root: {root_dir}")

    removed = clean_workspace(root_dir)
    for path in removed:
        console.print(f"  Removed {path}")
    if not removed:
        console.print("[yellow]  Nothing to clean[/yellow]")


@app.command()
def show(
    ctx: typer.Context,
    config_name: ConfigNameArg,
    json_output: JsonOption = False,
) -> None:
    """Show the resolved build configuration for a preset."""
    from prebuild_utils.manifest.io import describe_build_config

    build_config = _load_config(ctx, config_name)
    if json_output:
        console.print(build_config.model_dump_json(indent=2), soft_wrap=True)
        return

    for label, value in describe_build_config(build_config).items():
        console.print(f"  {label + ':':<26}{value}")


@app.command()
def abi(
    ctx: typer.Context,
    config_name: ConfigNameArg,
    json_output: JsonOption = False,
) -> None:
    """Show the ABI fingerprint and hash of a built preset."""
    from prebuild_utils.builds.abi import (
        AbiParseError,
        abi_descriptor_path,
        abi_fingerprint,
        abi_hash,
        parse_abi_descriptor,
    )
    from prebuild_utils.bundles.addressing import get_bundle_filename

    build_config = _load_config(ctx, config_name)
    try:
        descriptor = parse_abi_descriptor(abi_descriptor_path(build_config))
    except AbiParseError as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        raise typer.Exit(code=1) from None

    info = {
        "triple": descriptor.triple,
        "fingerprint": abi_fingerprint(descriptor),
        "hash": abi_hash(descriptor),
        "bundle": get_bundle_filename(build_config, abi_hash(descriptor)),
    }
    if json_output:
        console.print(json.dumps(info, indent=2), soft_wrap=True)
        return

    console.print("[bold]ABI[/bold]")
    console.print(f"  Triple:      {info['triple']}")
    console.print(f"  Fingerprint: {info['fingerprint']}")
    console.print(f"  Hash:        {info['hash']}")
    console.print(f"  Bundle:      {info['bundle']}")


@app.command()
def build(ctx: typer.Context, config_name: ConfigNameArg) -> None:
    """Configure and build a preset with CMake."""
    from prebuild_utils.builds.runner import BuildExecutionError
    from prebuild_utils.builds.service import build_dependency

    build_config = _load_config(ctx, config_name)
    try:
        build_dependency(build_config, settings=get_settings())
    except BuildExecutionError as e:
        console.print(f"[red]Build failed: {escape(str(e))}[/red]")
        raise typer.Exit(code=1) from None

    console.print("[green]Built successfully![/green]")


@app.command()
def bundle(ctx: typer.Context, config_name: ConfigNameArg) -> None:
    """Package a built preset into a bundle archive."""
    from prebuild_utils.builds.abi import AbiParseError
    from prebuild_utils.bundles.service import bundle_dependency

    build_config = _load_config(ctx, config_name)
    try:
        result = bundle_dependency(build_config)
    except AbiParseError as e:
        console.print(f"[red]Bundle failed: {escape(str(e))}[/red]")
        raise typer.Exit(code=1) from None
    except FileNotFoundError as e:
        console.print(f"[red]Bundle failed: {escape(str(e))}[/red]")
        raise typer.Exit(code=1) from None

    console.print("[green]Bundled successfully![/green]")
    console.print(f"  Bundle: {result.bundle_path}")


@app.command()
def deploy(ctx: typer.Context, config_name: ConfigNameArg) -> None:
    """Upload a preset's bundle to S3."""
    from prebuild_utils.builds.abi import AbiParseError
    from prebuild_utils.deploy.service import (
        BundleNotFoundError,
        DeploySettingsError,
        deploy_dependency,
    )

    build_config = _load_config(ctx, config_name)
    try:
        result = deploy_dependency(build_config)
    except DeploySettingsError as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        raise typer.Exit(code=1) from None
    except (AbiParseError, BundleNotFoundError) as e:
        console.print(f"[red]Deploy failed: {escape(str(e))}[/red]")
        raise typer.Exit(code=1) from None

    console.print("[green]Deployed successfully![/green]")
    console.print(f"  Destination: {result.url}")


if __name__ == "__main__":
    app()
