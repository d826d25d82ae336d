# voxelworld

This package is the model behind a small voxel game. It has no rendering and no user interface. It works on plain Python data. A world is a mapping of `(x, y, z)` block positions to integer block ids.

## Modules

- **`voxelworld.dataformat`** holds the value types of `.data` documents:
  - `Tag`, `IntRange`, `FloatRange`, `Keybind`, `TypedArray` (with `ElemType`);
  - inline objects (`DataObject`);
  - ordered documents (`Document`), which offer `get` and `has`.
  - Scalar values are ordinary `None`, `int`, `float`, `bool` and `str`.
- **`voxelworld.registry`** holds the two registries:
  - `BlockRegistry` holds `BlockData` by id and `BlockGroupData` by name. `register` and `register_group` return `False` when the entry has no name, has no atlas, or its key is already taken.
  - `BiomeRegistry` holds `BiomeData` in order. `find_match(temperature, elevation)` returns the biome with the narrowest temperature span that contains both values.
  - `TerrainInfo`, `FaceTile` and `CubeFace` describe where blocks appear and which atlas tiles they use.
- **`voxelworld.assets`** turns a parsed `Document` into registry entries:
  - `load_blocks(document, atlas, registry)` registers groups and blocks and returns the number of blocks. It skips malformed entries and raises `AssetError` when a block cannot be registered.
  - `load_biomes(document, registry)` replaces the registry's contents. It raises `AssetError` when no biome was defined.
  - `parse_terrain(obj)` reads the `temp`, `elevation`, `depth` and `biome` fields.
- **`voxelworld.terrain`** generates seeded, deterministic terrain:
  - `noise_2d`, `voronoi_2d` and the `sample_*` helpers sample the noise fields.
  - `select_block` picks a block for a depth and a biome.
  - `generate(registry, biomes, params)` returns a block mapping. Settings come from `TerrainParams`. If `superflat_layers` holds any `SuperflatLayer`, the world is built from those layers instead of from noise.
- **`voxelworld.worldfile`** reads and writes the binary `.world` format:
  - The format has a `VXLW` magic and version 1.
  - The header (`WorldHeader`, `WorldType`) is followed by little-endian block records.
  - `save(path, header, blocks)` writes a file, `load(path)` returns `(header, blocks)`, and `read_header(path)` reads only the header.
  - Malformed files raise `WorldFileError`.
- **`voxelworld.physics`** simulates movement and collision. `Physics(blocks, registry, constants=None)` works directly on a mutable block mapping.
  - `step_entity` runs one Euler step for an `Entity`. It moves axis by axis with collision, and handles the standing, crouching and crawling postures (`PostureState`) and jumping.
  - `step_block_gravity` and `update_falling_blocks` handle blocks marked `affected_by_gravity`. These blocks detach, fall as `FallingBlock`s and land.
  - `can_place_block_at(entity, forward, place_pos)`, `force_entity_up_if_inside_block` and `teleport` handle placement checks, pushing an entity out of blocks, and teleporting.
  - Tunables live in `PhysicsConstants`.
- **`voxelworld.worlds`** covers world listing and new-world choices:
  - `GameState` lists the game's screens.
  - `scan_worlds(worlds_dir)` lists the `.world` files as `WorldEntry` items, sorted by name.
  - `NewWorldParams` collects the seed text, world type, biome index, superflat layers and data packs. Its layer and data-pack methods edit these lists, and `make_header` builds a `WorldHeader` from them.
- **`voxelworld.menu`** manages worlds:
  - `create_world(worlds_dir, header, registry, biomes=None)` generates and saves `<seed>.world`. A seed of 0 is replaced by a random one. It returns the path, the header it used and the blocks.
  - `open_world`, `rename_world` and `delete_world` act on saved worlds.
  - `terrain_params_for(header)` maps a header to `TerrainParams`.
  - Failures raise `MenuError`.

## Install

```
pip install .
pip install ".[test]"   # with pytest
```

## Example

```python
from voxelworld.registry import BlockRegistry, BiomeRegistry
from voxelworld.terrain import TerrainParams, SuperflatLayer, generate
from voxelworld.worldfile import WorldHeader, WorldType, save, load
from voxelworld.physics import Physics, Entity, PhysicsConstants

registry = BlockRegistry()
biomes = BiomeRegistry()

params = TerrainParams(seed=42, superflat_layers=[SuperflatLayer(2, 4), SuperflatLayer(1, 2)])
blocks = generate(registry, biomes, params)   # {(x, y, z): block_id}

header = WorldHeader(seed=42, world_type=WorldType.SUPERFLAT,
                     superflat_layers=params.superflat_layers)
save("flat.world", header, blocks)
loaded_header, loaded_blocks = load("flat.world")

physics = Physics(loaded_blocks, registry)
player = Entity()
physics.teleport(player, (0.5, 8.0, 0.5))
physics.step_entity(player, 1 / 60, (0.0, 0.0, 4.0), False, False, False, PhysicsConstants())
```

## What it does not do

- **No `.data` text parser.** The `.data` value types are defined here, but nothing reads `.data` text into a `Document`. You build documents in code before you pass them to `load_blocks` or `load_biomes`.
- **No game front end.** There is no rendering, window, menu screen, input handling or keybind storage. `voxelworld.worlds` and `voxelworld.menu` provide only the actions behind such screens.
- **No constants loading.** `PhysicsConstants` is not read from a file.
- **No command-line program.**

## Tests

```
pytest
```