"""Config — load simulation parameters from YAML files.

Window and cell sizes are fixed for the lifetime of a run; the grid
dimensions are derived from them.  Material definitions live in a
separate JSON rule source referenced by ``materials_path``.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import yaml


@dataclass
class SimulationConfig:
    """Top-level simulation configuration.

    Attributes:
        seed: RNG seed for deterministic replay; None draws fresh OS
            entropy each run.
        window_width: Window width in pixels.
        window_height: Window height in pixels.
        cell_size: Pixel size of one grid cell.
        materials_path: Optional JSON rule source merged over the
            built-in materials.
        single_move_per_frame: If True, a particle moves at most once
            per frame; otherwise the scan may move it twice.
        reveal_fraction: Share of a brush square's cells sampled per
            frame by medium and big brushes.
    """

    seed: int | None = None
    window_width: int = 800
    window_height: int = 800
    cell_size: int = 10
    materials_path: str | None = None
    single_move_per_frame: bool = False
    reveal_fraction: float = 0.2

    def __post_init__(self) -> None:
        """Reject sizes the grid cannot be built from."""
        if self.window_width <= 0 or self.window_height <= 0:
            msg = (
                "window size must be positive, got "
                f"{self.window_width}x{self.window_height}"
            )
            raise ValueError(msg)
        if self.cell_size <= 0:
            msg = f"cell_size must be positive, got {self.cell_size}"
            raise ValueError(msg)
        if self.cell_size > min(self.window_width, self.window_height):
            msg = f"cell_size {self.cell_size} does not fit the window"
            raise ValueError(msg)
        if not 0.0 < self.reveal_fraction <= 1.0:
            msg = f"reveal_fraction must be in (0, 1], got {self.reveal_fraction}"
            raise ValueError(msg)

    @property
    def grid_width(self) -> int:
        return self.window_width // self.cell_size

    @property
    def grid_height(self) -> int:
        return self.window_height // self.cell_size

    @classmethod
    def from_yaml(cls, path: str | Path) -> SimulationConfig:
        """Load configuration from a YAML file.

        A relative ``materials_path`` is resolved against the directory
        holding the YAML file.

        Args:
            path: Path to the YAML config file.

        Returns:
            A populated SimulationConfig instance.

        Raises:
            FileNotFoundError: If the config file does not exist.
            ValueError: If a value is out of range.
        """
        path = Path(path)
        with path.open("r") as f:
            data = yaml.safe_load(f) or {}

        materials_path = data.get("materials_path", cls.materials_path)
        if materials_path is not None:
            materials_path = str(path.parent / materials_path)

        return cls(
            seed=data.get("seed", cls.seed),
            window_width=data.get("window_width", cls.window_width),
            window_height=data.get("window_height", cls.window_height),
            cell_size=data.get("cell_size", cls.cell_size),
            materials_path=materials_path,
            single_move_per_frame=data.get(
                "single_move_per_frame",
                cls.single_move_per_frame,
            ),
            reveal_fraction=data.get("reveal_fraction", cls.reveal_fraction),
        )
