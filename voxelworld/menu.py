"""World management actions behind the menus: create, open, rename and delete."""

from __future__ import annotations

import secrets
from dataclasses import replace
from pathlib import Path

from voxelworld.registry import BiomeRegistry, BlockRegistry
from voxelworld.terrain import BlockMap, SuperflatLayer, TerrainParams, generate
from voxelworld.worldfile import (
    WorldFileError,
    WorldHeader,
    WorldType,
    load,
    save,
)
from voxelworld.worlds import WORLD_SUFFIX

_SEED_MASK = 0x7FFFFFFF


class MenuError(Exception):
    """Raised when a world action requested from a menu cannot be carried out."""


def terrain_params_for(header: WorldHeader) -> TerrainParams:
    """Terrain generation settings for a world described by ``header``."""
    params = TerrainParams(seed=header.seed)
    if header.world_type == WorldType.SUPERFLAT:
        params.superflat_layers = [
            SuperflatLayer(layer.block_id, layer.thickness)
            for layer in header.superflat_layers
        ]
        if not params.superflat_layers:
            params.noise_scale = 0.0001
            params.height_amplitude = 0
            params.base_height = 0
    elif header.world_type == WorldType.SINGLE_BIOME:
        params.force_biome = header.single_biome
    return params


def _random_seed() -> int:
    return (secrets.randbits(31) & _SEED_MASK) or 1


def create_world(
    worlds_dir,
    header: WorldHeader,
    registry: BlockRegistry,
    biomes: BiomeRegistry | None = None,
) -> tuple[str, WorldHeader, BlockMap]:
    """Generate a new world and save it as ``<seed>.world`` in ``worlds_dir``.

    A seed of 0 is replaced by a random non-zero seed.  Returns the saved path,
    the header actually used and the generated blocks.
    """
    seed = header.seed if header.seed != 0 else _random_seed()
    used = replace(
        header,
        seed=seed,
        superflat_layers=[replace(layer) for layer in header.superflat_layers],
        datapacks=list(header.datapacks),
    )
    blocks = generate(registry, biomes, terrain_params_for(used))

    directory = Path(worlds_dir)
    path = directory / f"{seed}{WORLD_SUFFIX}"
    try:
        directory.mkdir(parents=True, exist_ok=True)
        save(path, used, blocks)
    except (OSError, WorldFileError) as exc:
        raise MenuError(f"failed to save world '{path}': {exc}") from exc
    return str(path), used, blocks


def open_world(path) -> tuple[WorldHeader, BlockMap]:
    """Load the world at ``path``; raise MenuError if it cannot be read."""
    try:
        return load(path)
    except (OSError, WorldFileError) as exc:
        raise MenuError(f"failed to load world '{path}': {exc}") from exc


def rename_world(path, new_name: str) -> str:
    """Rename the world file at ``path`` to ``new_name`` and return the new path.

    Raises MenuError when the name is empty, a world of that name exists, or
    the rename fails.
    """
    if not new_name:
        raise MenuError("a world name must not be empty")
    old_path = Path(path)
    new_path = old_path.parent / f"{new_name}{WORLD_SUFFIX}"
    if new_path.exists():
        raise MenuError(f"a world named '{new_name}' already exists")
    try:
        old_path.rename(new_path)
    except OSError as exc:
        raise MenuError(f"failed to rename world: {exc}") from exc
    return str(new_path)


def delete_world(path) -> bool:
    """Delete the world file at ``path``; False when there was no such file."""
    try:
        Path(path).unlink()
    except FileNotFoundError:
        return False
    except OSError as exc:
        raise MenuError(f"failed to delete world '{path}': {exc}") from exc
    return True