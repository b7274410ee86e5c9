from __future__ import annotations

from pathlib import Path
from typing import Annotated, List, Literal, Optional, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, model_validator

from ..core.generator import DEFAULT_BRANCH_COEFFICIENT, MAX_DEPTH


class TreeConfig(BaseModel):
    model_config = ConfigDict(allow_inf_nan=False)

    origin: Optional[tuple[float, float]] = None
    origin_lonlat: Optional[tuple[float, float]] = None
    trunk_length: float = Field(1_000_000.0, gt=0.0)
    max_depth: int = Field(10, ge=0, le=MAX_DEPTH)
    base_angle_deg: float = 0.0
    branch_coefficient: float = Field(DEFAULT_BRANCH_COEFFICIENT, gt=0.0, lt=1.0)

    @model_validator(mode="after")
    def _one_origin(self) -> "TreeConfig":
        if self.origin is not None and self.origin_lonlat is not None:
            raise ValueError("Specify either 'origin' or 'origin_lonlat', not both")
        if self.origin is None and self.origin_lonlat is None:
            self.origin = (0.0, 0.0)
        return self


class TriangleShapeConfig(BaseModel):
    """Equilateral triangle outline drawn alongside the tree."""

    model_config = ConfigDict(allow_inf_nan=False)

    kind: Literal["triangle"] = "triangle"
    start: tuple[float, float] = (0.0, 0.0)
    size: float = Field(1_000_000.0, gt=0.0)
    angle_deg: float = 30.0


class ArcShapeConfig(BaseModel):
    """Circular arc; angles in degrees counter-clockwise from +X, negative sweep is clockwise."""

    model_config = ConfigDict(allow_inf_nan=False)

    kind: Literal["arc"] = "arc"
    center: Optional[tuple[float, float]] = None
    center_lonlat: Optional[tuple[float, float]] = None
    radius: float = Field(50_000.0, gt=0.0)
    start_deg: float = 90.0
    sweep_deg: float = -45.0
    num_points: int = Field(64, ge=2)

    @model_validator(mode="after")
    def _one_center(self) -> "ArcShapeConfig":
        if self.center is not None and self.center_lonlat is not None:
            raise ValueError("Specify either 'center' or 'center_lonlat', not both")
        if self.center is None and self.center_lonlat is None:
            self.center = (0.0, 0.0)
        return self


ShapeConfig = Annotated[Union[TriangleShapeConfig, ArcShapeConfig], Field(discriminator="kind")]


class DecorationConfig(BaseModel):
    palette: Literal["random", "fixed"] = "random"
    color: tuple[int, int, int] = (255, 0, 0)


class OutputConfig(BaseModel):
    path: Path
    format: Literal["npz", "ply", "las", "laz", "png"] = "npz"
    compress: Optional[bool] = None

    @model_validator(mode="after")
    def _validate_format(self) -> "OutputConfig":
        if self.format == "laz" and self.compress is False:
            raise ValueError("format 'laz' implies compress=True")
        return self


class ScenarioConfig(BaseModel):
    tree: TreeConfig = TreeConfig()
    decoration: DecorationConfig = DecorationConfig()
    shapes: List[ShapeConfig] = Field(default_factory=list)
    output: OutputConfig
    seed: Optional[int] = None


def load_config(path: str | Path) -> ScenarioConfig:
    path = Path(path)
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f)
    if not isinstance(data, dict):
        raise ValueError("Configuration root must be a mapping.")
    cfg = ScenarioConfig.model_validate(data)
    cfg.output.path = (path.parent / cfg.output.path).resolve()
    return cfg
