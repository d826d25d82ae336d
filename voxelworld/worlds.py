"""World listing and the settings gathered for a new world."""

from __future__ import annotations

import enum
import re
from dataclasses import dataclass, field, replace
from pathlib import Path

from voxelworld.registry import BiomeRegistry
from voxelworld.terrain import STONE_ID, SuperflatLayer
from voxelworld.worldfile import WorldFileError, WorldHeader, WorldType, read_header

WORLD_SUFFIX = ".world"
MAX_LAYER_THICKNESS = 255
_SEED_INPUT_LIMIT = 31
_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


class GameState(enum.Enum):
    """Top-level screens of the game."""

    MAIN_MENU = enum.auto()
    WORLDS_MENU = enum.auto()
    NEW_WORLD_MENU = enum.auto()
    SETTINGS_MENU = enum.auto()
    PAUSE_MENU = enum.auto()
    PLAYING = enum.auto()


@dataclass
class WorldEntry:
    """A saved world found on disk."""

    path: str
    name: str
    header: WorldHeader = field(default_factory=WorldHeader)


def scan_worlds(worlds_dir) -> list[WorldEntry]:
    """List the ``.world`` files in ``worlds_dir``, sorted by name.

    A file whose header cannot be read is listed with a default header; a
    missing or unreadable directory yields an empty list.
    """
    try:
        paths = list(Path(worlds_dir).iterdir())
    except OSError:
        return []
    result = []
    for path in paths:
        if path.suffix != WORLD_SUFFIX:
            continue
        try:
            header = read_header(path)
        except (WorldFileError, OSError):
            header = WorldHeader()
        result.append(WorldEntry(path=str(path), name=path.stem, header=header))
    result.sort(key=lambda entry: entry.name)
    return result


def _parse_seed(text: str) -> int:
    """Leading decimal integer of ``text`` as a 32-bit value; 0 if there is none."""
    match = _LEADING_INT.match(text[:_SEED_INPUT_LIMIT])
    if match is None:
        return 0
    value = int(match.group(1)) & 0xFFFFFFFF
    return value - (1 << 32) if value >= (1 << 31) else value


def _default_layers() -> list[SuperflatLayer]:
    return [
        SuperflatLayer(2, 4),  # stone (bottom)
        SuperflatLayer(1, 2),  # dirt
        SuperflatLayer(0, 1),  # grass (top)
    ]


@dataclass
class NewWorldParams:
    """Choices made on the new-world screen."""

    # Seed text; empty means a random seed is chosen later.
    seed_text: str = ""
    # 0 = default, 1 = single biome, 2 = superflat.
    world_type_idx: int = 0
    # Index into the biome registry, used for single-biome worlds.
    biome_idx: int = 0
    superflat_layers: list[SuperflatLayer] = field(default_factory=_default_layers)
    datapacks: list[str] = field(default_factory=list)

    def make_header(self, biomes: BiomeRegistry | None = None) -> WorldHeader:
        """Build the world header these choices describe."""
        header = WorldHeader(seed=_parse_seed(self.seed_text) if self.seed_text else 0)
        try:
            header.world_type = WorldType(self.world_type_idx)
        except ValueError:
            header.world_type = self.world_type_idx
        if header.world_type == WorldType.SINGLE_BIOME and biomes is not None:
            blist = biomes.biomes()
            if 0 <= self.biome_idx < len(blist):
                header.single_biome = blist[self.biome_idx].id
        if header.world_type == WorldType.SUPERFLAT:
            header.superflat_layers = [replace(layer) for layer in self.superflat_layers]
        header.datapacks = list(self.datapacks)
        return header

    def add_layer(self, block_id: int = STONE_ID) -> SuperflatLayer:
        """Add a one-block layer on top and return it."""
        layer = SuperflatLayer(block_id, 1)
        self.superflat_layers.append(layer)
        return layer

    def remove_layer(self, index: int) -> SuperflatLayer:
        """Remove and return the layer at ``index``; IndexError if there is none."""
        if not 0 <= index < len(self.superflat_layers):
            raise IndexError(f"no superflat layer at index {index}")
        return self.superflat_layers.pop(index)

    def move_layer_up(self, index: int) -> bool:
        """Swap the layer with the one above it; False when it cannot move."""
        if not 0 <= index < len(self.superflat_layers) - 1:
            return False
        layers = self.superflat_layers
        layers[index], layers[index + 1] = layers[index + 1], layers[index]
        return True

    def move_layer_down(self, index: int) -> bool:
        """Swap the layer with the one below it; False when it cannot move."""
        if not 0 < index < len(self.superflat_layers):
            return False
        layers = self.superflat_layers
        layers[index], layers[index - 1] = layers[index - 1], layers[index]
        return True

    def add_datapack(self, path) -> bool:
        """Add a data pack folder; an empty path (a cancelled pick) is ignored."""
        text = str(path) if path else ""
        if not text:
            return False
        self.datapacks.append(text)
        return True

    def remove_datapack(self, index: int) -> str:
        """Remove and return the data pack at ``index``; IndexError if there is none."""
        if not 0 <= index < len(self.datapacks):
            raise IndexError(f"no data pack at index {index}")
        return self.datapacks.pop(index)