"""Main Typer CLI application for panorama preparation tools."""

import logging

import typer

app = typer.Typer(
    help="Panorama preparation tools: camera models and source image stacks",
    no_args_is_help=True,
)

camera_app = typer.Typer(help="Camera preset and intrinsics commands")
images_app = typer.Typer(help="Source image stack commands")

app.add_typer(camera_app, name="camera")
app.add_typer(images_app, name="images")


def configure_logging(verbose: bool) -> None:
    """Configure root logging for CLI runs."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format='%(levelname)s - %(message)s',
    )


def _register_commands() -> None:
    """
    Import command modules to register commands with their respective apps.

    Commands use decorators like @camera_app.command() which register
    themselves when the module is imported.
    """
    from poc_panorama.cli import camera, images

    # Avoid "imported but unused" warnings by explicitly using the module
    _ = camera
    _ = images


_register_commands()


if __name__ == "__main__":
    app()
