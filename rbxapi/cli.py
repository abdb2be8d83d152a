import logging
from typing import Annotated

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.progress import Progress, SpinnerColumn, TextColumn

from rbxapi.codegen.codegen import Codegen
from rbxapi.config import get_config

logger = logging.getLogger(__name__)

console = Console()
app = typer.Typer(
    name='rbxapi',
    help='Generate a typed Python client for the Roblox web APIs',
    no_args_is_help=True,
)


@app.command()
def generate(
    config: Annotated[
        str | None,
        typer.Option(
            '--config', '-c', help='Path to configuration file (YAML or JSON)'
        ),
    ] = None,
    output: Annotated[
        str | None,
        typer.Option('--output', '-o', help='Directory to write the package to'),
    ] = None,
    verbose: Annotated[
        bool, typer.Option('--verbose', '-v', help='Show debug logging')
    ] = False,
) -> None:
    """Generate the API client package.

    If no config file is specified, will look for rbxapi.yaml in the current
    directory, then [tool.rbxapi] in pyproject.toml, then use defaults and
    RBXAPI_* environment variables.

    Examples:
        rbxapi generate
        rbxapi generate --output ./roblox_api
        rbxapi generate -c rbxapi.yaml
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format='%(message)s',
        handlers=[RichHandler(console=console, show_path=False)],
    )

    try:
        settings = get_config(config)
        if output:
            settings = settings.model_copy(update={'output': output})

        codegen = Codegen(settings, console=console)
        with Progress(
            SpinnerColumn(),
            TextColumn('[progress.description]{task.description}'),
            console=console,
            transient=True,
        ) as progress:
            progress.add_task(
                f'Generating the API in {settings.output}. Please, wait...',
                total=None,
            )
            written = codegen.generate()

        console.print(
            f'[green]API was successfully built[/green] ({len(written)} files).'
        )

    except Exception as e:
        logger.debug('Generation failed', exc_info=True)
        console.print(f'[red]An error was detected while building the API:[/red] {e}')
        raise typer.Exit(1)


@app.command()
def version() -> None:
    """Show the version of rbxapi."""
    from rbxapi import __version__

    console.print(f'rbxapi version: {__version__}')


if __name__ == '__main__':
    app()
