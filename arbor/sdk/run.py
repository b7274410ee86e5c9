from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from ..config import ScenarioConfig, load_config
from ..core.generator import BranchGenerator, Tree
from ..runtime.builders import (
    apply_output_override,
    build_origin,
    build_palette,
    build_writer,
)


@dataclass(frozen=True)
class ConfigRunResult:
    """Summary of a tree generated from a configuration file."""

    tree: Tree
    output_path: Path
    config: ScenarioConfig

    @property
    def segments(self) -> int:
        return len(self.tree)


def grow_from_config(
    config: Union[str, Path, ScenarioConfig],
    *,
    output: Optional[Path] = None,
    seed: Optional[int] = None,
) -> ConfigRunResult:
    """Grow the tree described by a configuration file or object and write it.

    Parameters
    ----------
    config:
        Path to a YAML file or a pre-loaded :class:`~arbor.config.schema.ScenarioConfig`.
    output:
        Optional override for the output file. The extension drives the
        format (``.npz``, ``.ply``, ``.las``, ``.laz`` or ``.png``).
    seed:
        Optional seed for the decoration colours. Falls back to the value in
        the config; when both are missing the colours are not reproducible.

    Returns
    -------
    ConfigRunResult
        The generated tree, the resolved output path and the resolved
        configuration object used for the run.
    """

    cfg = load_config(config) if not isinstance(config, ScenarioConfig) else config.model_copy(deep=True)

    if output is not None:
        apply_output_override(cfg, output)
    else:
        cfg.output.path = Path(cfg.output.path).resolve()

    tree_cfg = cfg.tree
    generator = BranchGenerator(tree_cfg.branch_coefficient, palette=build_palette(cfg))
    run_seed = seed if seed is not None else cfg.seed
    tree = generator.grow(
        build_origin(cfg),
        tree_cfg.trunk_length,
        tree_cfg.max_depth,
        tree_cfg.base_angle_deg,
        seed=run_seed,
    )

    writer = build_writer(cfg)
    try:
        writer.write_tree(tree)
    finally:
        writer.close()

    return ConfigRunResult(tree=tree, output_path=Path(cfg.output.path), config=cfg)
