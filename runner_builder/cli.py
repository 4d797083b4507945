"""Thin CLI wrapper for runner_builder.

This module provides the command-line interface using Typer.
All business logic is delegated to core modules.
"""

import json
import logging
from typing import Annotated, Any

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape

from runner_builder import __version__
from runner_builder.config import (
    Settings,
    apply_overrides,
    get_settings,
    print_settings_json,
)
from runner_builder.errors import RunnerBuildError

app = typer.Typer(
    name="runner-build",
    help="Runner Image Builder - build, tag, and push GitHub Actions runner images",
    no_args_is_help=True,
)
console = Console()

LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"runner-image-builder version {__version__}")
        raise typer.Exit()


def print_raw(text: str) -> None:
    """Print text verbatim: no markup, highlighting, or wrapping."""
    console.print(text, markup=False, highlight=False, soft_wrap=True)


def fail(message: str) -> typer.Exit:
    """Print an error line and return the exit to raise."""
    console.print(f"[red]\\[ERROR] {escape(message)}[/red]")
    return typer.Exit(code=1)


def load_settings(**overrides: Any) -> Settings:
    """Load settings from the environment and layer CLI flags on top."""
    try:
        settings = apply_overrides(get_settings(), **overrides)
    except ValidationError as e:
        console.print("[red]Invalid configuration:[/red]")
        console.print(escape(str(e)))
        raise typer.Exit(code=1) from None
    logging.getLogger().setLevel(settings.log_level)
    return settings


@app.callback()
def main(
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
    """Runner Image Builder - build, tag, and push GitHub Actions runner images."""
    logging.basicConfig(format=LOG_FORMAT)


@app.command()
def build(
    image_types: Annotated[
        list[str],
        typer.Argument(help="Image type(s) to build, or 'all'"),
    ],
    dry_run: Annotated[
        bool,
        typer.Option("--dry-run", help="Show commands without executing"),
    ] = False,
    no_cache: Annotated[
        bool,
        typer.Option("--no-cache", help="Disable build cache"),
    ] = False,
    cache_from: Annotated[
        bool,
        typer.Option("--cache-from", help="Use registry cache"),
    ] = False,
    push: Annotated[
        bool,
        typer.Option("--push", help="Push images to registry after building"),
    ] = False,
    no_buildx: Annotated[
        bool,
        typer.Option("--no-buildx", help="Use regular docker build (single platform)"),
    ] = False,
    platforms: Annotated[
        str | None,
        typer.Option("--platforms", help="Comma separated platforms"),
    ] = None,
    version: Annotated[
        str | None,
        typer.Option("--version", help="Version tag"),
    ] = None,
    registry: Annotated[
        str | None,
        typer.Option("--registry", help="Registry host"),
    ] = None,
    org: Annotated[
        str | None,
        typer.Option("--org", help="Organization name"),
    ] = None,
    tag: Annotated[
        str | None,
        typer.Option("--tag", help="Custom tag (no -latest companion)"),
    ] = None,
    keep_record: Annotated[
        bool,
        typer.Option("--keep-record", help="Keep the build record for push-all"),
    ] = False,
) -> None:
    """Build, tag, and optionally push runner images.

    Image types are built in the given order; 'all' expands to every image
    in dependency order. The first failure stops the run.
    """
    from runner_builder.builds.runner import DockerRunner
    from runner_builder.builds.service import BuildOrchestrator

    settings = load_settings(
        dry_run=True if dry_run else None,
        use_cache=False if no_cache else None,
        cache_from_registry=True if cache_from else None,
        push_to_registry=True if push else None,
        use_buildx=False if no_buildx else None,
        platforms=platforms,
        version=version,
        registry=registry,
        org=org,
        custom_tag=tag,
    )
    runner = DockerRunner(dry_run=settings.dry_run, echo=print_raw)
    orchestrator = BuildOrchestrator(settings, runner=runner)

    try:
        built = orchestrator.build_targets(image_types)
    except RunnerBuildError as e:
        raise fail(str(e)) from None

    if settings.dry_run:
        return

    console.print()
    console.print("[blue]Built Images:[/blue]")
    for image in orchestrator.record.read() or built:
        console.print(f"  {image}")
    console.print("[green]Build process completed successfully[/green]")

    if not keep_record:
        orchestrator.record.clear()


@app.command()
def bake(
    targets: Annotated[
        list[str] | None,
        typer.Argument(help="Bake targets (default: all)"),
    ] = None,
    dry_run: Annotated[
        bool,
        typer.Option("--dry-run", help="Show commands without executing"),
    ] = False,
    push: Annotated[
        bool,
        typer.Option("--push", help="Push images to registry"),
    ] = False,
    cache_from: Annotated[
        bool,
        typer.Option("--cache-from", help="Use registry cache"),
    ] = False,
    no_cache: Annotated[
        bool,
        typer.Option("--no-cache", help="Disable build cache"),
    ] = False,
    platforms: Annotated[
        str | None,
        typer.Option("--platforms", help="Comma separated platforms"),
    ] = None,
    version: Annotated[
        str | None,
        typer.Option("--version", help="Version tag"),
    ] = None,
    registry: Annotated[
        str | None,
        typer.Option("--registry", help="Registry host"),
    ] = None,
    org: Annotated[
        str | None,
        typer.Option("--org", help="Organization name"),
    ] = None,
) -> None:
    """Build images with docker buildx bake in a single invocation."""
    from runner_builder.builds.runner import DockerRunner
    from runner_builder.builds.service import BuildOrchestrator

    settings = load_settings(
        dry_run=True if dry_run else None,
        push_to_registry=True if push else None,
        cache_from_registry=True if cache_from else None,
        use_cache=False if no_cache else None,
        platforms=platforms,
        version=version,
        registry=registry,
        org=org,
    )
    runner = DockerRunner(dry_run=settings.dry_run, echo=print_raw)
    orchestrator = BuildOrchestrator(settings, runner=runner)

    try:
        baked = orchestrator.bake(targets)
    except RunnerBuildError as e:
        raise fail(str(e)) from None

    if not settings.dry_run:
        console.print(f"[green]Bake completed: {escape(' '.join(baked))}[/green]")


@app.command("push-all")
def push_all(
    dry_run: Annotated[
        bool,
        typer.Option("--dry-run", help="Show commands without executing"),
    ] = False,
    registry: Annotated[
        str | None,
        typer.Option("--registry", help="Registry host to log in to"),
    ] = None,
    org: Annotated[
        str | None,
        typer.Option("--org", help="Organization name"),
    ] = None,
) -> None:
    """Push every image listed in the build record."""
    from runner_builder.builds.runner import DockerRunner
    from runner_builder.builds.service import BuildOrchestrator

    settings = load_settings(
        dry_run=True if dry_run else None,
        registry=registry,
        org=org,
    )
    runner = DockerRunner(dry_run=settings.dry_run, echo=print_raw)
    orchestrator = BuildOrchestrator(settings, runner=runner)

    try:
        pushed = orchestrator.push_all()
    except RunnerBuildError as e:
        raise fail(str(e)) from None

    if not settings.dry_run:
        console.print(f"[green]All {len(pushed)} image(s) pushed successfully![/green]")


@app.command()
def images(
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Output as JSON"),
    ] = False,
) -> None:
    """List buildable image types and their Dockerfiles."""
    from runner_builder.images.recipes import RECIPES

    if json_output:
        output = [
            {
                "image_type": r.image_type.value,
                "kind": r.kind.value,
                "dockerfile": r.dockerfile,
                "context": r.context or ".",
                "depends_on": [d.value for d in r.depends_on],
                "members": [m.value for m in r.members],
            }
            for r in RECIPES.values()
        ]
        print_raw(json.dumps(output, indent=2))
        return

    console.print(f"[bold]{len(RECIPES)} image type(s):[/bold]")
    console.print()
    for r in RECIPES.values():
        console.print(f"  [green]{r.image_type.value}[/green] ({r.kind.value})")
        if r.is_composite:
            console.print(f"    Expands to: {', '.join(m.value for m in r.members)}")
            continue
        console.print(f"    Dockerfile: {r.dockerfile}")
        if r.depends_on:
            console.print(f"    Depends on: {', '.join(d.value for d in r.depends_on)}")


@app.command()
def record(
    clear: Annotated[
        bool,
        typer.Option("--clear", help="Delete the build record"),
    ] = False,
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Output as JSON"),
    ] = False,
) -> None:
    """Show (or clear) the tags recorded by previous builds."""
    from runner_builder.builds.record import BuildRecordFile

    settings = load_settings()
    build_record = BuildRecordFile(settings.record_path)

    if clear:
        removed = build_record.clear()
        if json_output:
            print_raw(json.dumps({"cleared": removed}))
        elif removed:
            console.print("[green]Cleaned up build record[/green]")
        else:
            console.print("[yellow]No build record to clear[/yellow]")
        return

    tags = build_record.read()
    if json_output:
        print_raw(json.dumps(tags, indent=2))
        return
    if not tags:
        console.print("[yellow]No built images found[/yellow]")
        return
    console.print("[blue]Built Images:[/blue]")
    for tag in tags:
        console.print(f"  {tag}")


@app.command()
def config(
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Output as JSON"),
    ] = False,
) -> None:
    """Show effective configuration."""
    settings = load_settings()
    if json_output:
        print_raw(print_settings_json(settings))
        return

    use_buildx_display = "auto" if settings.use_buildx is None else settings.use_buildx
    console.print("[bold]Effective Configuration:[/bold]")
    console.print()
    console.print("[bold]Registry:[/bold]")
    console.print(f"  Registry:            {settings.registry}")
    console.print(f"  Organization:        {settings.org}")
    console.print(f"  Version:             {settings.version}")
    console.print(f"  Custom tag:          {settings.custom_tag or '(none)'}")
    console.print(f"  Username:            {settings.registry_username or '(not set)'}")
    console.print(
        f"  Credentials:         {'set' if settings.has_credentials else '(not set)'}"
    )
    console.print()
    console.print("[bold]Build:[/bold]")
    console.print(f"  Platforms:           {settings.platforms}")
    console.print(f"  Use buildx:          {use_buildx_display}")
    console.print(f"  Buildx builder:      {settings.buildx_builder}")
    console.print(f"  Use cache:           {settings.use_cache}")
    console.print(f"  Registry cache:      {settings.cache_from_registry}")
    console.print(f"  Push:                {settings.push_to_registry}")
    console.print(f"  Dry run:             {settings.dry_run}")
    console.print()
    console.print("[bold]Paths:[/bold]")
    console.print(f"  Project root:        {settings.project_root}")
    console.print(f"  Build record:        {settings.record_path}")
    console.print(f"  Bake file:           {settings.bake_path}")
    console.print(f"  Log level:           {settings.log_level}")
