"""
Command-line interface for Tosbur
"""

import asyncio
import logging
from pathlib import Path

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from tosbur import __version__
from tosbur.core.config import get_settings
from tosbur.docker.client import DockerClient
from tosbur.docker.exceptions import DockerException
from tosbur.docker.models import ContainerSpec
from tosbur.notebook.launcher import NotebookLauncher

console = Console()


def _client() -> DockerClient:
    settings = get_settings()
    return DockerClient(
        socket_path=settings.docker_socket,
        api_version=settings.docker_api_version,
        timeout=settings.docker_timeout,
    )


def _run(coro):
    """Run a coroutine, turning client errors into a clean CLI failure"""
    try:
        return asyncio.run(coro)
    except DockerException as e:
        console.print(f"[bold red]✗ {type(e).__name__}:[/bold red] {e.message}")
        if e.recovery_hint:
            console.print(f"[yellow]Hint: {e.recovery_hint}[/yellow]")
        raise SystemExit(1) from e


@click.group()
@click.version_option(version=__version__)
@click.option("--debug", is_flag=True, help="Enable debug logging")
def main(debug: bool) -> None:
    """Tosbur - Jupyter notebooks in Docker containers"""
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


@main.command()
@click.option("--host", default=None, help="API server host (default: from settings)")
@click.option("--port", default=None, type=int, help="API server port (default: from settings)")
@click.option("--reload", is_flag=True, help="Enable auto-reload for development")
def serve(host: str | None, port: int | None, reload: bool) -> None:
    """Start the local API server for the desktop shell"""
    import uvicorn

    settings = get_settings()
    logging.getLogger().setLevel(settings.log_level.upper())

    actual_host = host or settings.api_host
    actual_port = port or settings.api_port

    console.print(
        Panel.fit(
            "[bold cyan]Tosbur[/bold cyan]\n"
            f"Server starting on http://{actual_host}:{actual_port}\n"
            f"Docker socket: {settings.docker_socket} ({settings.docker_api_version})",
            border_style="cyan",
        )
    )

    uvicorn.run(
        "tosbur.api.app:create_app",
        factory=True,
        host=actual_host,
        port=actual_port,
        reload=reload,
        log_level=settings.log_level.lower(),
    )


@main.command()
def version() -> None:
    """Show the Docker daemon version"""

    async def _version():
        async with _client() as client:
            return await client.get_version()

    info = _run(_version())

    table = Table(title="Docker", show_header=False)
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    for key in ("Version", "ApiVersion", "MinAPIVersion", "Os", "Arch", "KernelVersion"):
        if key in info:
            table.add_row(key, str(info[key]))
    console.print(table)


@main.command()
def images() -> None:
    """List local images"""

    async def _images():
        async with _client() as client:
            return await client.list_images()

    table = Table(title="Images")
    table.add_column("ID", style="cyan")
    table.add_column("Tags")
    table.add_column("Size (MB)", justify="right")

    for image in _run(_images()):
        image_id = image.get("Id", "").removeprefix("sha256:")[:12]
        tags = ", ".join(image.get("RepoTags") or ["<none>"])
        size = f"{image.get('Size', 0) / 1_000_000:.1f}"
        table.add_row(image_id, tags, size)
    console.print(table)


@main.command()
@click.option("--all", "-a", "show_all", is_flag=True, help="Include stopped containers")
def containers(show_all: bool) -> None:
    """List containers"""

    async def _containers():
        async with _client() as client:
            return await client.list_containers(show_all=show_all)

    table = Table(title="Containers")
    table.add_column("ID", style="cyan")
    table.add_column("Image")
    table.add_column("Status")
    table.add_column("Names")

    for container in _run(_containers()):
        names = ", ".join(name.lstrip("/") for name in container.get("Names") or [])
        table.add_row(
            container.get("Id", "")[:12],
            container.get("Image", ""),
            container.get("Status", ""),
            names,
        )
    console.print(table)


@main.command()
@click.argument("mount", type=click.Path(exists=True, file_okay=False, path_type=Path))
@click.option("--image", default=None, help="Notebook image (default: from settings)")
@click.option("--name", default=None, help="Container name")
def launch(mount: Path, image: str | None, name: str | None) -> None:
    """Launch a notebook container with MOUNT mounted at /home/jovyan/"""
    settings = get_settings()
    image = image or settings.notebook_image

    async def _launch():
        spec = ContainerSpec(
            image=image,
            mount=str(mount.resolve()),
            name=name,
            host_port=settings.notebook_host_port,
        )
        async with _client() as client:
            launcher = NotebookLauncher(
                client,
                attach_retries=settings.attach_retries,
                attach_retry_delay=settings.attach_retry_delay,
            )
            return await launcher.launch(spec)

    with console.status(f"Starting {image}..."):
        session = _run(_launch())

    console.print(
        Panel.fit(
            f"[bold green]✓ Notebook ready[/bold green]\n"
            f"Container: [cyan]{session.container_id[:12]}[/cyan]\n"
            f"URL: [link={session.url}]{session.url}[/link]",
            border_style="green",
        )
    )


@main.command()
@click.argument("container_id")
def kill(container_id: str) -> None:
    """Kill a running notebook container"""

    async def _kill():
        async with _client() as client:
            await NotebookLauncher(client).stop(container_id)

    _run(_kill())
    console.print(f"[green]✓ Killed {container_id[:12]}[/green]")


if __name__ == "__main__":
    main()
