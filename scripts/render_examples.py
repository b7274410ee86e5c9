from __future__ import annotations

import argparse
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List

import laspy
import numpy as np

from arbor.config import load_config
from arbor.render import render_png
from arbor.runtime.builders import build_shapes
from arbor.sdk import grow_from_config


@dataclass(frozen=True)
class ExampleRun:
    name: str
    config_path: Path


EXAMPLES: List[ExampleRun] = [
    ExampleRun(name="fractal_tree", config_path=Path("examples/configs/fractal_tree.yaml")),
    ExampleRun(name="scotland_tree", config_path=Path("examples/configs/scotland_tree.yaml")),
    ExampleRun(name="sapling", config_path=Path("examples/configs/sapling.yaml")),
]

IMAGE_DIR = Path("examples/images")


def _marker_summary(path: Path) -> str:
    ext = path.suffix.lower()
    if ext == ".npz":
        with np.load(path) as data:
            return f"{data['markers'].shape[0]} markers"
    if ext in {".las", ".laz"}:
        with laspy.open(path) as reader:
            return f"{reader.header.point_count} markers"
    return "written"


def generate_examples(names: List[str], overwrite_outputs: bool) -> None:
    IMAGE_DIR.mkdir(parents=True, exist_ok=True)
    selected = EXAMPLES if not names else [example for example in EXAMPLES if example.name in names]
    if not selected:
        raise ValueError("No matching examples selected.")
    for example in selected:
        cfg = load_config(example.config_path)
        if cfg.output.path.exists() and not overwrite_outputs:
            logging.info("Skipping %s (output exists)", example.name)
            continue
        logging.info("Growing example '%s'", example.name)
        result = grow_from_config(cfg)
        logging.info("%s: %s", result.output_path.name, _marker_summary(result.output_path))
        image_path = render_png(
            result.tree,
            IMAGE_DIR / f"{example.name}.png",
            title=example.name.replace("_", " ").title(),
            shapes=build_shapes(result.config),
        )
        logging.info("Saved %s", image_path)


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Generate Arbor example outputs and preview images.")
    parser.add_argument("--example", "-e", action="append", help="Example name to run (default: all).")
    parser.add_argument("--no-overwrite", action="store_true", help="Skip examples whose outputs already exist.")
    parser.add_argument("--log-level", default="INFO", help="Logging level (default: INFO).")
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    logging.basicConfig(level=getattr(logging, args.log_level.upper(), logging.INFO), format="[%(levelname)s] %(message)s")
    generate_examples(args.example or [], overwrite_outputs=not args.no_overwrite)


if __name__ == "__main__":
    main()
