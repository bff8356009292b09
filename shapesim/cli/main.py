from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Tuple

import numpy as np
import typer

from ..config import load_config
from ..core.shapes import UnsupportedQueryError
from ..runtime.builders import build_world
from ..sdk.run import sample_from_config, sdf_from_config

app = typer.Typer(help="Analytic shape worlds for synthetic range sensing")


def _configure_logging(level: str) -> None:
    numeric = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(level=numeric, format="[%(levelname)s] %(message)s")
    logging.getLogger("shapesim").setLevel(numeric)


def _unsupported(exc: UnsupportedQueryError) -> typer.Exit:
    typer.echo(f"Error: {exc}", err=True)
    return typer.Exit(code=2)


@app.command("sample")
def sample(
    config: Path = typer.Argument(..., exists=True, readable=True, help="Path to YAML world configuration."),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Override output path (.npz or .ply)."),
    seed: Optional[int] = typer.Option(None, "--seed", help="Override random seed."),
    log_level: str = typer.Option("INFO", "--log-level", help="Logging level (e.g. INFO, DEBUG)."),
) -> None:
    """Render the configured viewpoint into a colored point cloud."""

    _configure_logging(log_level)
    if output is not None and output.suffix.lower() not in {".npz", ".ply"}:
        raise typer.BadParameter(f"Unsupported output extension '{output.suffix}'", param_hint="--output")
    try:
        result = sample_from_config(config, output=output, seed=seed)
    except UnsupportedQueryError as exc:
        raise _unsupported(exc)
    typer.echo(f"Completed {result.stats['points']} points from {result.stats['rays']} rays → {result.output_path}")


@app.command("distance")
def distance(
    config: Path = typer.Argument(..., exists=True, readable=True, help="Path to YAML world configuration."),
    point: Tuple[float, float, float] = typer.Option(..., "--point", "-p", help="Query point X Y Z."),
    max_dist: float = typer.Option(float("inf"), "--max-dist", help="Truncation distance."),
    log_level: str = typer.Option("WARNING", "--log-level", help="Logging level (e.g. INFO, DEBUG)."),
) -> None:
    """Print the distance from a point to the nearest object surface."""

    _configure_logging(log_level)
    world = build_world(load_config(config))
    typer.echo(f"{world.distance_to_point(point, max_dist):.6f}")


@app.command("cast")
def cast(
    config: Path = typer.Argument(..., exists=True, readable=True, help="Path to YAML world configuration."),
    origin: Tuple[float, float, float] = typer.Option(..., "--origin", help="Ray origin X Y Z."),
    direction: Tuple[float, float, float] = typer.Option(..., "--direction", help="Ray direction X Y Z (normalized here)."),
    max_range: float = typer.Option(10.0, "--max-range", help="Maximum sensor range."),
    log_level: str = typer.Option("WARNING", "--log-level", help="Logging level (e.g. INFO, DEBUG)."),
) -> None:
    """Cast a single ray and print the nearest hit."""

    _configure_logging(log_level)
    d = np.asarray(direction, dtype=np.float64)
    norm = float(np.linalg.norm(d))
    if norm < 1e-12:
        raise typer.BadParameter("direction must be non-zero.", param_hint="--direction")
    world = build_world(load_config(config))
    try:
        result = world.cast_ray(origin, d / norm, max_range)
    except UnsupportedQueryError as exc:
        raise _unsupported(exc)
    if result is None:
        typer.echo("no hit")
        return
    hit, color, idx = result
    x, y, z = hit.point
    typer.echo(f"hit object {idx} at ({x:.6f}, {y:.6f}, {z:.6f}) distance {hit.distance:.6f} rgb {color.r} {color.g} {color.b}")


@app.command("sdf")
def sdf(
    config: Path = typer.Argument(..., exists=True, readable=True, help="Path to YAML world configuration."),
    output: Path = typer.Option(..., "--output", "-o", help="Output .npz path."),
    voxel_size: float = typer.Option(0.1, "--voxel-size", help="Grid spacing in metres."),
    max_dist: float = typer.Option(2.0, "--max-dist", help="Truncation distance."),
    log_level: str = typer.Option("INFO", "--log-level", help="Logging level (e.g. INFO, DEBUG)."),
) -> None:
    """Sample ground-truth distances over the world bounds."""

    _configure_logging(log_level)
    if voxel_size <= 0.0:
        raise typer.BadParameter("voxel_size must be positive.", param_hint="--voxel-size")
    out = sdf_from_config(config, voxel_size=voxel_size, max_dist=max_dist, output=output)
    typer.echo(f"Wrote distance grid to {out}")


def main() -> None:
    app()


if __name__ == "__main__":  # pragma: no cover
    main()
