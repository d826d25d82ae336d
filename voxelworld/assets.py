"""Loading block and biome definitions from parsed ``.data`` documents."""

from __future__ import annotations

from typing import Any

from voxelworld.dataformat import (
    DataObject,
    Document,
    FloatRange,
    IntRange,
    Tag,
    TypedArray,
    is_int,
)
from voxelworld.registry import (
    BiomeData,
    BiomeRegistry,
    BlockData,
    BlockGroupData,
    BlockRegistry,
    CubeFace,
    FaceTile,
    TerrainInfo,
)


class AssetError(Exception):
    """Raised when asset definitions cannot be loaded."""


_FACE_NAMES = {face: face.name.lower() for face in CubeFace}


def _tag_names(value: Any) -> list[str]:
    if not isinstance(value, TypedArray):
        return []
    return [elem.name for elem in value if isinstance(elem, Tag)]


def parse_terrain(obj: DataObject) -> TerrainInfo:
    """Read the terrain fields of a group or block object."""
    t = TerrainInfo()
    temp = obj.get("temp")
    if isinstance(temp, FloatRange):
        t.temperature_min, t.temperature_max = float(temp.lo), float(temp.hi)
    elevation = obj.get("elevation")
    if isinstance(elevation, IntRange):
        t.elevation_min, t.elevation_max = int(elevation.lo), int(elevation.hi)
    depth = obj.get("depth")
    if isinstance(depth, IntRange):
        t.depth_min, t.depth_max = int(depth.lo), int(depth.hi)
    if "biome" in obj:
        t.biomes.extend(_tag_names(obj.get("biome")))
    else:
        t.biomes.append("all")
    return t


def _face_tiles(obj: DataObject) -> tuple[FaceTile, ...] | None:
    tiles = []
    for name in _FACE_NAMES.values():
        arr = obj.get(name)
        if not isinstance(arr, TypedArray) or len(arr) < 2:
            return None
        fx, fy = arr.elements[0], arr.elements[1]
        if not (is_int(fx) and is_int(fy)):
            return None
        tiles.append(FaceTile(int(fx), int(fy)))
    return tuple(tiles)


def _objects(document: Document, key: str):
    return (val for k, val in document if k == key and isinstance(val, DataObject))


def load_blocks(document: Document, atlas: Any, registry: BlockRegistry) -> int:
    """Register all groups and blocks of ``document``; return the number of blocks.

    Malformed entries are skipped.  Raises AssetError when a block cannot be
    registered (e.g. a duplicate id or a missing atlas).
    """
    for obj in _objects(document, "group"):
        name = obj.get("name")
        if not isinstance(name, str):
            continue
        registry.register_group(BlockGroupData(name=name, terrain=parse_terrain(obj)))

    count = 0
    for obj in _objects(document, "block"):
        id_val, name, gravity = obj.get("id"), obj.get("name"), obj.get("gravity")
        if not (is_int(id_val) and isinstance(name, str) and isinstance(gravity, bool)):
            continue
        tiles = _face_tiles(obj)
        if tiles is None:
            continue
        block_id = id_val & 0xFFFFFFFF
        block = BlockData(
            block_id=block_id,
            name=name,
            face_tiles=tiles,
            atlas=atlas,
            affected_by_gravity=gravity,
            groups=_tag_names(obj.get("group")),
            terrain=parse_terrain(obj),
        )
        if not registry.register(block):
            raise AssetError(f"Block registration failed for ID {block_id} ({name}).")
        count += 1
    return count


def load_biomes(document: Document, registry: BiomeRegistry) -> tuple[BiomeData, ...]:
    """Replace the contents of ``registry`` with the biomes of ``document``.

    Raises AssetError when no biome was loaded.
    """
    registry.clear()
    for obj in _objects(document, "biome"):
        b = BiomeData()
        if isinstance(v := obj.get("id"), str):
            b.id = v
        if isinstance(v := obj.get("name"), str):
            b.display_name = v
        if isinstance(v := obj.get("temp"), FloatRange):
            b.temperature_min, b.temperature_max = float(v.lo), float(v.hi)
        if isinstance(v := obj.get("elevation"), IntRange):
            b.elevation_min, b.elevation_max = int(v.lo), int(v.hi)
        if b.id:
            registry.register(b)
    biomes = registry.biomes()
    if not biomes:
        raise AssetError("no biomes defined")
    return biomes