"""Block and biome registries."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping


class CubeFace(enum.IntEnum):
    """Faces of a cube, in face-tile order."""

    FRONT = 0
    BACK = 1
    LEFT = 2
    RIGHT = 3
    TOP = 4
    BOTTOM = 5


@dataclass(frozen=True)
class FaceTile:
    """Atlas tile coordinates for one face."""

    x: int = 0
    y: int = 0


def _default_face_tiles() -> tuple[FaceTile, ...]:
    return tuple(FaceTile() for _ in CubeFace)


@dataclass
class TerrainInfo:
    """Where a block may appear during terrain generation."""

    temperature_min: float = -1.0
    temperature_max: float = 1.0
    elevation_min: int = -256
    elevation_max: int = 255
    depth_min: int = 0
    depth_max: int = 255
    biomes: list[str] = field(default_factory=list)


@dataclass
class BlockGroupData:
    """Shared terrain rules for a named group of blocks."""

    name: str
    terrain: TerrainInfo = field(default_factory=TerrainInfo)


@dataclass
class BlockData:
    """Definition of one block type."""

    block_id: int = 0
    name: str = ""
    face_tiles: tuple[FaceTile, ...] = field(default_factory=_default_face_tiles)
    atlas: Any = None
    affected_by_gravity: bool = False
    groups: list[str] = field(default_factory=list)
    terrain: TerrainInfo = field(default_factory=TerrainInfo)


class BlockRegistry:
    """Blocks keyed by id, and block groups keyed by name."""

    def __init__(self) -> None:
        self._blocks: dict[int, BlockData] = {}
        self._groups: dict[str, BlockGroupData] = {}

    def register(self, block: BlockData) -> bool:
        """Add a block; False if it has no name or atlas, or its id is taken."""
        if not block.name or block.atlas is None or block.block_id in self._blocks:
            return False
        self._blocks[block.block_id] = block
        return True

    def register_group(self, group: BlockGroupData) -> bool:
        """Add a group; False if it has no name or the name is taken."""
        if not group.name or group.name in self._groups:
            return False
        self._groups[group.name] = group
        return True

    def clear(self) -> None:
        self._blocks.clear()
        self._groups.clear()

    def get(self, block_id: int) -> BlockData | None:
        return self._blocks.get(block_id)

    def get_group(self, name: str) -> BlockGroupData | None:
        return self._groups.get(name)

    def blocks(self) -> Mapping[int, BlockData]:
        """Read-only view of all registered blocks."""
        return MappingProxyType(self._blocks)


@dataclass
class BiomeData:
    """One biome definition."""

    id: str = ""
    display_name: str = ""
    temperature_min: float = -1.0
    temperature_max: float = 1.0
    elevation_min: int = -256
    elevation_max: int = 255


class BiomeRegistry:
    """Ordered collection of biomes."""

    def __init__(self) -> None:
        self._biomes: list[BiomeData] = []

    def register(self, biome: BiomeData) -> None:
        self._biomes.append(biome)

    def clear(self) -> None:
        self._biomes.clear()

    def biomes(self) -> tuple[BiomeData, ...]:
        return tuple(self._biomes)

    def get_by_id(self, biome_id: str) -> BiomeData | None:
        return next((b for b in self._biomes if b.id == biome_id), None)

    def find_match(self, temperature: float, elevation: int) -> BiomeData | None:
        """Biome containing both values with the narrowest temperature span."""
        best: BiomeData | None = None
        best_span = float("inf")
        for b in self._biomes:
            if not b.temperature_min <= temperature <= b.temperature_max:
                continue
            if not b.elevation_min <= elevation <= b.elevation_max:
                continue
            span = b.temperature_max - b.temperature_min
            if span < best_span:
                best_span = span
                best = b
        return best