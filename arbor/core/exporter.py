from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple
import numpy as np
import pathlib

import laspy  # type: ignore
from .generator import Tree
from .utils import get_logger

_log = get_logger()

_LAS_INT_LIMIT = float(2 ** 31 - 2)

@dataclass
class LasWriter:
    """LAS/LAZ writer for branch-tip decorations using laspy (v2+).

    Each marker becomes one point at z=0 carrying its RGB colour and a
    ``depth`` extra dimension. Trees are buffered and written on close.
    """
    path: str
    point_format: int = 7
    compress: bool = False
    scale: tuple[float, float, float] = (1e-3, 1e-3, 1e-3)
    offset: Optional[tuple[float, float, float]] = None

    def __post_init__(self) -> None:
        self._trees: List[Tree] = []

    # -- public API --
    def write_tree(self, tree: Tree) -> None:
        self._trees.append(tree)

    def close(self) -> None:
        if not self._trees:
            return
        xy = np.vstack([t.ends for t in self._trees])
        rgb = np.vstack([t.rgb for t in self._trees])
        depth = np.concatenate([t.depths for t in self._trees])
        self._trees.clear()

        pf = laspy.PointFormat(self.point_format)
        if not all(nm in pf.dimension_names for nm in ("red", "green", "blue")):
            raise ValueError(f"Point format {self.point_format} does not carry RGB.")
        hdr = laspy.LasHeader(point_format=pf, version="1.4")
        if self.offset is None:
            mid = 0.5 * (np.min(xy, axis=0) + np.max(xy, axis=0))
            offsets = np.array([mid[0], mid[1], 0.0], dtype=np.float64)
        else:
            offsets = np.asarray(self.offset, dtype=np.float64)
        # Coarsen the scale where the extent would overflow int32 coordinates
        extent = np.zeros(3, dtype=np.float64)
        extent[:2] = np.max(np.abs(xy - offsets[:2]), axis=0)
        scales = np.maximum(np.asarray(self.scale, dtype=np.float64), extent / _LAS_INT_LIMIT)
        hdr.offsets = offsets
        hdr.scales = scales
        hdr.add_extra_dim(laspy.ExtraBytesParams(name="depth", type="uint8"))

        pts = laspy.ScaleAwarePointRecord.zeros(len(xy), header=hdr)
        pts.x = xy[:, 0]
        pts.y = xy[:, 1]
        pts.z = np.zeros(len(xy), dtype=np.float64)
        # 0..255 -> 0..65535
        rgb16 = rgb.astype(np.uint16) * 257
        pts.red = rgb16[:, 0]
        pts.green = rgb16[:, 1]
        pts.blue = rgb16[:, 2]
        pts["depth"] = depth.astype(np.uint8)

        path = pathlib.Path(self.path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with laspy.open(path, mode="w", header=hdr, do_compress=self.compress) as fh:
            fh.write_points(pts)
        _log.info("Wrote %d markers to %s (PF=%d, compress=%s)", len(xy), path.name, self.point_format, self.compress)


# Minimal PLY and NPZ writers
class PlyWriter:
    """ASCII PLY with shared branch vertices and one edge per segment."""

    def __init__(self, path: str) -> None:
        self.path = path
        self._trees: List[Tree] = []

    def write_tree(self, tree: Tree) -> None:
        self._trees.append(tree)

    def close(self) -> None:
        if not self._trees:
            return
        vertices: List[Tuple[float, float]] = []
        index: Dict[Tuple[float, float], int] = {}
        edges: List[Tuple[int, int]] = []

        def vid(xy: Tuple[float, float]) -> int:
            if xy not in index:
                index[xy] = len(vertices)
                vertices.append(xy)
            return index[xy]

        for tree in self._trees:
            for seg in tree.segments:
                edges.append((vid(seg.start.as_tuple()), vid(seg.end.as_tuple())))

        path = pathlib.Path(self.path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            f.write("ply\nformat ascii 1.0\n")
            f.write(f"element vertex {len(vertices)}\n")
            f.write("property double x\nproperty double y\nproperty double z\n")
            f.write(f"element edge {len(edges)}\n")
            f.write("property int vertex1\nproperty int vertex2\n")
            f.write("end_header\n")
            for x, y in vertices:
                f.write(f"{x!r} {y!r} 0.0\n")
            for a, b in edges:
                f.write(f"{a} {b}\n")
        _log.info("Wrote %d edges to %s", len(edges), path.name)
        self._trees.clear()


class NpzWriter:
    def __init__(self, path: str) -> None:
        self.path = path
        self._trees: List[Tree] = []

    def write_tree(self, tree: Tree) -> None:
        self._trees.append(tree)

    def close(self) -> None:
        if not self._trees:
            return
        path = pathlib.Path(self.path)
        path.parent.mkdir(parents=True, exist_ok=True)
        out: Dict[str, np.ndarray] = {
            "starts": np.vstack([t.starts for t in self._trees]),
            "ends": np.vstack([t.ends for t in self._trees]),
            "depth": np.concatenate([t.depths for t in self._trees]),
            "angle_deg": np.concatenate([t.angles_deg for t in self._trees]),
            "rgb": np.vstack([t.rgb for t in self._trees]),
            "tree_id": np.concatenate(
                [np.full(len(t), i, dtype=np.int32) for i, t in enumerate(self._trees)]
            ),
        }
        out["markers"] = out["ends"].copy()
        np.savez_compressed(path, **out)
        _log.info("Wrote %d segments to %s", len(out["starts"]), path.name)
        self._trees.clear()
