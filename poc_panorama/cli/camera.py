"""Camera preset and intrinsics CLI commands."""

import json
from enum import Enum

import typer
import yaml

from poc_panorama.camera import Camera
from poc_panorama.camera_presets import get_camera_preset, list_camera_presets
from poc_panorama.cli.main import camera_app
from poc_panorama.types import AngleUnits


class OutputFormat(str, Enum):
    """Output format options."""

    HUMAN = "human"
    JSON = "json"
    YAML = "yaml"


@camera_app.command("presets")
def presets_command() -> None:
    """List available camera presets."""
    for name in list_camera_presets():
        typer.echo(name)


@camera_app.command("intrinsics")
def intrinsics_command(
    preset: str = typer.Option(..., help="Camera preset name (e.g., 'parrot_anafi')"),
    scale: float = typer.Option(1.0, help="Image scale factor applied to K"),
    output_format: OutputFormat = typer.Option(
        OutputFormat.HUMAN,
        "--format",
        "-f",
        help="Output format",
    ),
) -> None:
    """
    Show intrinsic matrix, distortion and field of view for a preset.

    Example:
        pano camera intrinsics --preset parrot_anafi
        pano camera intrinsics --preset parrot_anafi --scale 0.25 --format json
    """
    try:
        camera = get_camera_preset(preset)
    except KeyError as e:
        typer.echo(f"Error: {e.args[0]}", err=True)
        raise typer.Exit(1)

    if scale <= 0:
        typer.echo(f"Error: scale must be positive, got {scale}", err=True)
        raise typer.Exit(1)

    summary = _summarize(preset, camera, scale)

    if output_format == OutputFormat.HUMAN:
        output = _format_human_readable(summary)
    elif output_format == OutputFormat.JSON:
        output = json.dumps(summary, indent=2)
    else:  # YAML
        output = yaml.safe_dump({"camera": summary}, default_flow_style=None, sort_keys=False)

    typer.echo(output)


def _summarize(name: str, camera: Camera, scale: float) -> dict:
    fx, fy = camera.focal_length_pixels()
    fov_x, fov_y = camera.fov(AngleUnits.DEGREES)
    return {
        "preset": name,
        "scale": scale,
        "intrinsics_source": camera.intrinsics_source.value,
        "focal_length_px": {"fx": fx, "fy": fy},
        "fov_deg": {"horizontal": fov_x, "vertical": fov_y},
        "K": camera.K(scale).tolist(),
        "D": camera.D().ravel().tolist(),
    }


def _format_human_readable(summary: dict) -> str:
    """Format result for human-readable output."""
    K = summary["K"]
    k1, k2, p1, p2, k3 = summary["D"]
    focal = summary["focal_length_px"]
    fov = summary["fov_deg"]

    lines = [
        "=" * 60,
        f"{summary['preset'].upper()} - Intrinsics (scale {summary['scale']:g})",
        "=" * 60,
        "",
        f"  Intrinsics source:  {summary['intrinsics_source']}",
        f"  Focal length (px):  fx={focal['fx']:.2f}  fy={focal['fy']:.2f}",
        f"  Field of view:      {fov['horizontal']:.2f}° x {fov['vertical']:.2f}°",
        "",
        "Intrinsic Matrix K:",
        f"  [{K[0][0]:10.2f}  {K[0][1]:10.2f}  {K[0][2]:10.2f}]",
        f"  [{K[1][0]:10.2f}  {K[1][1]:10.2f}  {K[1][2]:10.2f}]",
        f"  [{K[2][0]:10.2f}  {K[2][1]:10.2f}  {K[2][2]:10.2f}]",
        "",
        "Distortion (k1, k2, p1, p2, k3):",
        f"  {k1:g}, {k2:g}, {p1:g}, {p2:g}, {k3:g}",
        "=" * 60,
    ]
    return "\n".join(lines)
