"""Source image stack CLI commands."""

from pathlib import Path
from typing import List, Optional

import typer

from poc_panorama.cli.main import configure_logging, images_app
from poc_panorama.exceptions import PanoramaError
from poc_panorama.geo_image_io import load_panorama
from poc_panorama.source_images import SourceImages
from poc_panorama.stack_config import SourceImagesConfig, get_default_config


def _parse_keep(keep: str) -> List[int]:
    try:
        return [int(part) for part in keep.split(",") if part.strip()]
    except ValueError:
        raise ValueError(f"--keep must be a comma-separated list of integers, got '{keep}'") from None


@images_app.command("inspect")
def inspect_command(
    manifest: Path = typer.Argument(..., help="Path to panorama manifest YAML"),
    config_file: Optional[Path] = typer.Option(
        None, "--config", help="Path to source_images config YAML"
    ),
    keep: Optional[str] = typer.Option(
        None, help="Comma-separated indices to keep, in order (e.g. '0,2,3')"
    ),
    scale: Optional[float] = typer.Option(
        None, help="Scale factor (overrides work_scale from config)"
    ),
    sort: bool = typer.Option(False, "--sort", help="Order images by capture time"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """
    Load a panorama manifest into a source image stack and print it.

    Example:
        pano images inspect flights/aus_1/panorama.yaml --scale 0.25
        pano images inspect panorama.yaml --keep 0,1,3 --config stack.yaml
    """
    configure_logging(verbose)

    try:
        config = SourceImagesConfig.from_yaml(str(config_file)) if config_file else get_default_config()
        panorama = load_panorama(manifest, sort=sort)
        stack = SourceImages(panorama, config=config)

        if keep is not None:
            stack.filter(_parse_keep(keep))
        else:
            stack.ensure_image_count()

        work_scale = scale if scale is not None else config.work_scale
        if work_scale is not None:
            stack.scale(work_scale)
    except (PanoramaError, ValueError, FileNotFoundError, IndexError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    typer.echo(f"{len(stack)} images ({config.interpolation.value} interpolation)")
    for i, (orientation, size) in enumerate(zip(stack.gimbal_orientations, stack.sizes)):
        width, height = size
        typer.echo(f"  {i:3d}  {width}x{height}  {orientation.to_string(compact=True)}")
