from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import typer

from ..config import ScenarioConfig, load_config
from ..core.generator import BranchGenerator
from ..render.sinks import render_png
from ..runtime.builders import OUTPUT_EXTENSIONS, build_origin, build_palette, build_shapes
from ..sdk.run import grow_from_config

app = typer.Typer(help="Arbor fractal tree utilities")


def _configure_logging(level: str) -> None:
    numeric = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(level=numeric, format="[%(levelname)s] %(message)s")
    logging.getLogger("arbor").setLevel(numeric)


def _check_output(output: Optional[Path]) -> None:
    if output is not None and output.suffix.lower() not in OUTPUT_EXTENSIONS:
        raise typer.BadParameter(f"Unsupported output extension '{output.suffix.lower()}'", param_hint="--output")


@app.command("grow")
def grow(
    config: Path = typer.Argument(..., exists=True, readable=True, help="Path to YAML configuration file."),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Override output path (extension sets format)."),
    seed: Optional[int] = typer.Option(None, "--seed", help="Override decoration colour seed."),
    log_level: str = typer.Option("INFO", "--log-level", help="Logging level (e.g. INFO, DEBUG)."),
) -> None:
    """Grow the tree described by a YAML config."""

    _configure_logging(log_level)
    _check_output(output)
    try:
        result = grow_from_config(config, output=output, seed=seed)
    except ValueError as exc:
        # TreeParameterError and pydantic's ValidationError are both ValueErrors
        raise typer.BadParameter(str(exc)) from exc
    typer.echo(f"Grew {result.segments} segments → {result.output_path}")


@app.command("quick")
def quick(
    output: Path = typer.Option(..., "--output", "-o", help="Output path (.npz/.ply/.las/.laz/.png)."),
    x: float = typer.Option(0.0, "--x", help="Trunk base X coordinate."),
    y: float = typer.Option(0.0, "--y", help="Trunk base Y coordinate."),
    trunk_length: float = typer.Option(1_000_000.0, "--trunk-length", help="Length of the trunk segment."),
    max_depth: int = typer.Option(10, "--max-depth", help="Number of branching levels below the trunk."),
    base_angle: float = typer.Option(0.0, "--base-angle", help="Trunk bearing in degrees, clockwise from +Y."),
    coefficient: float = typer.Option(0.75, "--coefficient", help="Length factor applied at each level, in (0, 1)."),
    fixed_color: bool = typer.Option(False, "--fixed-color", help="Colour every marker red instead of randomly."),
    seed: Optional[int] = typer.Option(None, "--seed", help="Decoration colour seed."),
    log_level: str = typer.Option("INFO", "--log-level", help="Logging level (e.g. INFO, DEBUG)."),
) -> None:
    """Grow a single tree entirely from CLI options."""

    _configure_logging(log_level)
    _check_output(output)
    try:
        cfg = ScenarioConfig.model_validate(
            {
                "tree": {
                    "origin": (x, y),
                    "trunk_length": trunk_length,
                    "max_depth": max_depth,
                    "base_angle_deg": base_angle,
                    "branch_coefficient": coefficient,
                },
                "decoration": {"palette": "fixed" if fixed_color else "random"},
                "output": {"path": output},
                "seed": seed,
            }
        )
        result = grow_from_config(cfg, output=output)
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc
    typer.echo(f"Grew {result.segments} segments → {result.output_path}")


@app.command("render")
def render_cmd(
    config: Path = typer.Argument(..., exists=True, readable=True, help="Path to YAML configuration file."),
    output: Path = typer.Option(..., "--output", "-o", help="PNG preview path."),
    seed: Optional[int] = typer.Option(None, "--seed", help="Override decoration colour seed."),
    log_level: str = typer.Option("INFO", "--log-level", help="Logging level (e.g. INFO, DEBUG)."),
) -> None:
    """Render a PNG preview of a configured tree without touching its output file."""

    _configure_logging(log_level)
    if output.suffix.lower() != ".png":
        raise typer.BadParameter("Preview output must end with .png", param_hint="--output")
    try:
        cfg = load_config(config)
        tree_cfg = cfg.tree
        generator = BranchGenerator(tree_cfg.branch_coefficient, palette=build_palette(cfg))
        tree = generator.grow(
            build_origin(cfg),
            tree_cfg.trunk_length,
            tree_cfg.max_depth,
            tree_cfg.base_angle_deg,
            seed=seed if seed is not None else cfg.seed,
        )
        shapes = build_shapes(cfg)
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc
    out = render_png(tree, output.resolve(), title=config.stem.replace("_", " "), shapes=shapes)
    typer.echo(f"Rendered {len(tree)} segments → {out}")


def main() -> None:
    app()


if __name__ == "__main__":  # pragma: no cover
    main()
