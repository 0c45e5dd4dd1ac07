import typer
from typing_extensions import Annotated
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table
from rich.panel import Panel
import asyncio
import logging
from pydantic import ValidationError

from openai_image_mcp import __version__
from openai_image_mcp.config import Settings, get_settings
from openai_image_mcp.core import (
    create_image_core,
    edit_image_core,
    format_tool_result,
    generate_image_core,
)
from openai_image_mcp.models import CURRENT_MODEL, EditRequest, GenerationRequest
from openai_image_mcp.providers.http_provider import ImageApiClient
from openai_image_mcp.providers.openai_sdk_provider import OpenAISDKProvider

app = typer.Typer(
    name="openai-image-mcp",
    help="🎨 An MCP server and CLI that generates and edits images with the OpenAI Images API.",
    add_completion=False,
)
console = Console()
# stdout carries the MCP protocol when serving, so logs always go to stderr.
err_console = Console(stderr=True)


def configure_logging(level: str):
    logging.basicConfig(
        level=level.upper(),
        format="%(name)s: %(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


def load_settings() -> Settings:
    try:
        return get_settings()
    except ValidationError as e:
        for error in e.errors():
            field = ".".join(str(loc) for loc in error["loc"])
            err_console.print(
                f"[bold red]Invalid setting[/bold red] {field}: {error['msg']}"
            )
        raise typer.Exit(code=2)


def version_callback(value: bool):
    if value:
        console.print(
            f"openai-image-mcp Version: [bold green]{__version__}[/bold green]"
        )
        raise typer.Exit()


@app.callback()
def main_callback(
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            "-v",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit.",
        ),
    ] = False,
):
    pass


def _print_result(message: str):
    if message.startswith("An error occurred"):
        console.print(f"[bold red]Error:[/bold red] {message}")
        raise typer.Exit(code=1)
    console.print(
        Panel(message, title="[bold green]Success ✨[/bold green]", expand=False)
    )


@app.command()
def serve():
    """Run the MCP server over stdio."""
    from openai_image_mcp.server import create_server

    settings = load_settings()
    configure_logging(settings.log_level)
    create_server(settings).run()


@app.command()
def create(
    prompt: Annotated[
        str, typer.Option("--prompt", "-p", help="The text prompt for the image.")
    ],
    output: Annotated[
        str, typer.Option("--output", "-o", help="Absolute path of the output file.")
    ],
    model: Annotated[str, typer.Option(help="dall-e-2 or dall-e-3.")] = "dall-e-3",
    size: Annotated[
        str, typer.Option(help="Image size. Model-dependent.")
    ] = "1024x1024",
    quality: Annotated[
        str, typer.Option(help="Image quality ('standard' or 'hd'). For DALL-E 3.")
    ] = "standard",
    style: Annotated[
        str, typer.Option(help="Image style ('vivid' or 'natural'). For DALL-E 3.")
    ] = "vivid",
):
    """Generate an image with a DALL-E model."""
    settings = load_settings()
    configure_logging(settings.log_level)
    request = GenerationRequest(
        prompt=prompt,
        output_path=output,
        model=model,
        options={"quality": quality, "size": size, "style": style},
    )
    with console.status("[spinner]Processing...", spinner="dots"):
        result = asyncio.run(
            create_image_core(request, OpenAISDKProvider(settings))
        )
    _print_result(format_tool_result(result))


@app.command()
def generate(
    prompt: Annotated[
        str, typer.Option("--prompt", "-p", help="The text prompt for the image.")
    ],
    output: Annotated[
        str, typer.Option("--output", "-o", help="Absolute path of the output file.")
    ],
    size: Annotated[
        str, typer.Option(help="1024x1024, 1536x1024, 1024x1536 or auto.")
    ] = "auto",
    quality: Annotated[str, typer.Option(help="auto, high, medium or low.")] = "auto",
    background: Annotated[
        str, typer.Option(help="transparent, opaque or auto.")
    ] = "auto",
    moderation: Annotated[str, typer.Option(help="low or auto.")] = "auto",
    output_format: Annotated[
        str, typer.Option("--output-format", help="png, jpeg or webp.")
    ] = "png",
    output_compression: Annotated[
        int,
        typer.Option(
            "--output-compression", help="0-100, used for jpeg and webp only."
        ),
    ] = 100,
):
    """Generate an image with gpt-image-1."""
    settings = load_settings()
    configure_logging(settings.log_level)
    request = GenerationRequest(
        prompt=prompt,
        output_path=output,
        model=CURRENT_MODEL,
        options={
            "background": background,
            "moderation": moderation,
            "output_compression": output_compression,
            "output_format": output_format,
            "quality": quality,
            "size": size,
        },
    )

    async def _generate():
        client = ImageApiClient.from_settings(settings)
        try:
            return await generate_image_core(request, client)
        finally:
            await client.close()

    with console.status("[spinner]Processing...", spinner="dots"):
        result = asyncio.run(_generate())
    _print_result(format_tool_result(result))


@app.command()
def edit(
    prompt: Annotated[
        str, typer.Option("--prompt", "-p", help="The text prompt for the edit.")
    ],
    image: Annotated[
        str, typer.Option("--image", "-i", help="Path of the image to edit.")
    ],
    output: Annotated[
        str, typer.Option("--output", "-o", help="Absolute path of the output file.")
    ],
    mask: Annotated[
        str, typer.Option("--mask", "-m", help="Optional path of a png mask.")
    ] = "",
    size: Annotated[
        str, typer.Option(help="1024x1024, 1536x1024, 1024x1536 or auto.")
    ] = "auto",
    quality: Annotated[str, typer.Option(help="auto, high, medium or low.")] = "auto",
):
    """Edit an image with gpt-image-1."""
    settings = load_settings()
    configure_logging(settings.log_level)
    request = EditRequest(
        prompt=prompt,
        output_path=output,
        model=CURRENT_MODEL,
        input_path=image,
        mask_path=mask,
        options={"quality": quality, "size": size},
    )

    async def _edit():
        client = ImageApiClient.from_settings(settings)
        try:
            return await edit_image_core(request, client)
        finally:
            await client.close()

    with console.status("[spinner]Processing...", spinner="dots"):
        result = asyncio.run(_edit())
    _print_result(format_tool_result(result, action="edited"))


@app.command(name="show-config")
def show_config_command():
    settings = load_settings()
    table = Table(title="⚙️ openai-image-mcp Settings")
    table.add_column("Setting", style="cyan", no_wrap=True)
    table.add_column("Value", style="yellow")
    table.add_row("API Key Set", "✅ Set" if settings.api_key else "⚠️ Not Set")
    table.add_row("Base URL", settings.api_base)
    table.add_row("Timeout (s)", str(settings.timeout))
    table.add_row("Log Level", settings.log_level)
    console.print(table)


if __name__ == "__main__":
    app()
