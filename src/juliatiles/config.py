"""Configuration objects and YAML loading for Julia tile rendering runs."""

from __future__ import annotations

from dataclasses import asdict, dataclass, replace
from itertools import product
from pathlib import Path
from typing import Dict, Iterable, List, Tuple

import yaml


@dataclass(frozen=True)
class ImageGeometry:
    """Pixel size of the full image and of one block."""

    width: int
    height: int
    block_width: int
    block_height: int

    @property
    def blocks_per_line(self) -> int:
        return self.width // self.block_width

    @property
    def blocks_per_column(self) -> int:
        return self.height // self.block_height

    @property
    def total_blocks(self) -> int:
        return self.blocks_per_line * self.blocks_per_column


@dataclass(frozen=True)
class PlaneWindow:
    """Rectangle of the complex plane mapped onto the full image."""

    min_real: float
    max_real: float
    min_imag: float
    max_imag: float


@dataclass(frozen=True)
class RunConfig:
    """Runtime configuration for a single Julia rendering run."""

    n_ranks: int = 1
    width: int = 1024
    height: int = 1024
    block_width: int = 16
    block_height: int = 16
    xlim: Tuple[float, float] = (-2.5, 2.5)
    ylim: Tuple[float, float] = (-2.0, 2.0)
    c: Tuple[float, float] = (-0.8, 0.156)
    iterations: int = 1000
    algorithm: str = "numba"  # 'legacy' or 'numba'
    color: str = "rgb"  # 'grey' or 'rgb'
    image_format: str = "png"  # 'png' or 'bmp'
    output_dir: str = "res/images"

    @property
    def geometry(self) -> ImageGeometry:
        return ImageGeometry(self.width, self.height, self.block_width, self.block_height)

    @property
    def window(self) -> PlaneWindow:
        return PlaneWindow(
            float(self.xlim[0]),
            float(self.xlim[1]),
            float(self.ylim[0]),
            float(self.ylim[1]),
        )

    @property
    def image_size(self) -> str:
        return f"{self.width}x{self.height}"

    @property
    def block_size(self) -> str:
        return f"{self.block_width}x{self.block_height}"

    @property
    def run_name(self) -> str:
        """Generate unique run name embedding the main parameters."""
        return (
            f"{self.algorithm}_{self.color}_n{self.n_ranks}_"
            f"{self.image_size}_b{self.block_size}_it{self.iterations}_"
            f"c{self.c[0]:+g}{self.c[1]:+g}j"
        )

    def to_dict(self) -> dict:
        """Convert to dictionary for MLflow logging."""
        return asdict(self)

    def to_cli_args(self) -> List[str]:
        """Convert config to CLI arguments understood by ``main.py``."""
        return [
            f"--n-ranks={self.n_ranks}",
            f"--image-size={self.image_size}",
            f"--block-size={self.block_size}",
            f"--xlim={self.xlim[0]}:{self.xlim[1]}",
            f"--ylim={self.ylim[0]}:{self.ylim[1]}",
            f"--c={self.c[0]}:{self.c[1]}",
            f"--iterations={self.iterations}",
            f"--algorithm={self.algorithm}",
            f"--color={self.color}",
            f"--format={self.image_format}",
            f"--output-dir={self.output_dir}",
        ]


DEFAULT_RUN_CONFIG = RunConfig()


def default_run_config(**overrides: object) -> RunConfig:
    """Return the canonical default config optionally overridden with kwargs."""
    return replace(DEFAULT_RUN_CONFIG, **_coerce_fields(overrides))


def load_sweep_configs(yaml_path: str | Path) -> List[RunConfig]:
    """Load YAML config and generate all parameter sweep combinations.

    Supports a top-level ``sweep`` as well as named suites nested under
    ``experiments``; in the latter case every suite is expanded in order.
    """
    return [config for _, configs in load_named_sweep_configs(yaml_path) for config in configs]


def get_config_by_index(yaml_path: str | Path, index: int) -> RunConfig:
    """Get a specific config by index from sweep."""
    configs = load_sweep_configs(yaml_path)
    if index < 0 or index >= len(configs):
        raise ValueError(f"Config index {index} out of range [0, {len(configs) - 1}]")
    return configs[index]


def load_named_sweep_configs(
    yaml_path: str | Path,
    suite: str | None = None,
) -> List[tuple[str, List[RunConfig]]]:
    """Expand a sweep file into ``(suite name, configs)`` pairs."""
    cfg = _read_yaml(yaml_path)

    defaults: Dict[str, object] = cfg.get("defaults", {}) or {}
    experiments = cfg.get("experiments")
    results: List[tuple[str, List[RunConfig]]] = []

    if experiments:
        for exp in experiments:
            name = exp.get("name")
            if not name:
                continue
            if suite and name != suite:
                continue
            sweep = exp.get("sweep") or {}
            exp_defaults = {**defaults, **(exp.get("defaults", {}) or {})}
            results.append((name, _expand_sweep(exp_defaults, sweep)))
        if suite and not results:
            raise ValueError(f"Suite '{suite}' not found in {yaml_path}")
        return results

    sweep: Dict[str, object] = cfg.get("sweep", {}) or {}
    label = cfg.get("name") or Path(yaml_path).stem
    return [(label, _expand_sweep(defaults, sweep))]


def load_suite_resources(yaml_path: str | Path, suite: str) -> Dict[str, object]:
    """Return the ``resources`` block of a named suite (empty if absent)."""
    cfg = _read_yaml(yaml_path)
    for exp in cfg.get("experiments") or []:
        if exp.get("name") == suite:
            return dict(exp.get("resources") or {})
    raise ValueError(f"Suite '{suite}' not found in {yaml_path}")


def parse_size(value: str) -> Tuple[int, int]:
    """Parse ``"WxH"`` into ``(W, H)``."""
    width_str, height_str = value.lower().split("x")
    return int(width_str.strip()), int(height_str.strip())


def parse_pair(value: str) -> Tuple[float, float]:
    """Parse ``"a:b"`` into a float pair."""
    first, second = value.split(":")
    return float(first), float(second)


def _read_yaml(yaml_path: str | Path) -> Dict[str, object]:
    with open(yaml_path) as f:
        return yaml.safe_load(f) or {}


def _build_run_config(raw_data: Dict[str, object]) -> RunConfig:
    data = _coerce_fields(raw_data)
    unknown = set(data) - set(RunConfig.__dataclass_fields__)
    if unknown:
        raise ValueError(f"Unknown configuration keys: {sorted(unknown)}")
    config = RunConfig(**data)  # type: ignore[arg-type]
    if "{run_name}" in config.output_dir:
        config = replace(config, output_dir=config.output_dir.format(run_name=config.run_name))
    return config


def _expand_sweep(defaults: Dict[str, object], sweep: Dict[str, object]) -> List[RunConfig]:
    """Expand sweep definition into RunConfig instances."""
    configs: List[RunConfig] = []

    domains = sweep.get("domains") or [None]
    param_grid = {k: sweep[k] for k in sweep if k not in {"domains", "image_shape", "block_shape"}}
    keys = list(param_grid.keys())

    for domain in domains:
        combos = product(*[param_grid[k] for k in keys]) if keys else [()]
        for combo in combos:
            data = {**defaults, **dict(zip(keys, combo))}
            if domain is not None:
                xlim, ylim = domain
                data["xlim"] = xlim
                data["ylim"] = ylim
            for shaped in _expand_shapes(data, sweep.get("image_shape"), "image_size"):
                configs.extend(
                    _build_run_config(entry)
                    for entry in _expand_shapes(shaped, sweep.get("block_shape"), "block_size")
                )

    return configs


def _expand_shapes(base: Dict[str, object], shape_options: object, key: str) -> List[Dict[str, object]]:
    if not shape_options:
        return [dict(base)]

    shapes: Iterable[object]
    if isinstance(shape_options, list):
        shapes = shape_options
    else:
        shapes = [shape_options]
    return [{**base, key: shape} for shape in shapes]


def _coerce_fields(data: Dict[str, object]) -> Dict[str, object]:
    result = dict(data)
    image = result.pop("image_size", None)
    if image is not None:
        result["width"], result["height"] = _normalize_shape_entry(image)
    block = result.pop("block_size", None)
    if block is not None:
        result["block_width"], result["block_height"] = _normalize_shape_entry(block)
    for name in ("n_ranks", "width", "height", "block_width", "block_height", "iterations"):
        if name in result:
            result[name] = int(result[name])
    for name in ("xlim", "ylim", "c"):
        if name in result:
            result[name] = _normalize_pair(result[name])
    if "output_dir" in result:
        result["output_dir"] = str(result["output_dir"])
    return result


def _normalize_pair(entry: object) -> Tuple[float, float]:
    if isinstance(entry, str):
        return parse_pair(entry)
    if isinstance(entry, (list, tuple)) and len(entry) == 2:
        return float(entry[0]), float(entry[1])
    raise ValueError(f"Unsupported pair specification: {entry!r}")


def _normalize_shape_entry(entry: object) -> Tuple[int, int]:
    if isinstance(entry, dict):
        width = entry.get("width")
        height = entry.get("height")
        if width is None or height is None:
            raise ValueError("shape dict must include 'width' and 'height'")
        return int(width), int(height)
    if isinstance(entry, (list, tuple)) and len(entry) == 2:
        return int(entry[0]), int(entry[1])
    if isinstance(entry, str):
        return parse_size(entry)
    if isinstance(entry, int):
        return entry, entry
    raise ValueError(f"Unsupported shape specification: {entry!r}")
