"""Procedural terrain: value noise, smooth Voronoi, biome and block selection."""

from __future__ import annotations

import math
from dataclasses import dataclass, field

from voxelworld.registry import BiomeRegistry, BlockRegistry, TerrainInfo

BlockMap = dict[tuple[int, int, int], int]

_MASK32 = 0xFFFFFFFF
STONE_ID = 2


@dataclass
class SuperflatLayer:
    """One layer of a superflat world, stacked bottom to top."""

    block_id: int = 2
    thickness: int = 1


@dataclass
class TerrainParams:
    """Settings for terrain generation."""

    seed: int = 0
    # Non-empty forces every column into this biome.
    force_biome: str = ""
    noise_scale: float = 0.08
    voronoi_scale: float = 0.05
    voronoi_smoothness: float = 0.633
    base_height: int = 0
    height_amplitude: int = 12
    world_width: int = 64
    world_depth: int = 64
    # Non-empty replaces noise generation with these layers.
    superflat_layers: list[SuperflatLayer] = field(default_factory=list)


def _mix(h: int) -> int:
    h &= _MASK32
    h ^= h >> 13
    h = (h * 0xBF58476D) & _MASK32
    h ^= h >> 31
    return h


def _hash2(x: int, z: int, channel: int) -> float:
    h = _mix(x * 1619 + z * 31337 + channel * 6971)
    return (h & 0x00FFFFFF) / float(0x01000000)


def _smoothstep(t: float) -> float:
    return t * t * (3.0 - 2.0 * t)


def _half(extent: int) -> int:
    return int(extent / 2)


def noise_2d(x: float, z: float, scale: float, seed: int) -> float:
    """Single-octave value noise in [0, 1]."""
    x *= scale
    z *= scale
    ix = math.floor(x)
    iz = math.floor(z)
    sx = _smoothstep(x - ix)
    sz = _smoothstep(z - iz)

    v00 = _hash2(ix, iz, seed)
    v10 = _hash2(ix + 1, iz, seed)
    v01 = _hash2(ix, iz + 1, seed)
    v11 = _hash2(ix + 1, iz + 1, seed)

    return (
        v00 * (1 - sx) * (1 - sz)
        + v10 * sx * (1 - sz)
        + v01 * (1 - sx) * sz
        + v11 * sx * sz
    )


def voronoi_2d(x: float, z: float, scale: float, smoothness: float, seed: int) -> float:
    """Smooth F1 Voronoi: exponentially weighted blend of nearby cell colours, in [0, 1]."""
    x *= scale
    z *= scale
    ix = math.floor(x)
    iz = math.floor(z)
    k = smoothness * 4.0 + 0.001

    total_w = 0.0
    color_w = 0.0
    for dz in range(-2, 3):
        for dx in range(-2, 3):
            cx, cz = ix + dx, iz + dz
            fpx = cx + _hash2(cx, cz, seed)
            fpz = cz + _hash2(cx, cz, seed + 1)
            color = _hash2(cx, cz, seed + 2)
            dist = math.hypot(x - fpx, z - fpz)
            w = math.exp(-dist / k)
            total_w += w
            color_w += w * color
    return color_w / (total_w + 1e-10)


def sample_height_factor(x: float, z: float, params: TerrainParams) -> float:
    """sqrt(noise * voronoi), in [0, 1]."""
    noise = noise_2d(x, z, params.noise_scale, params.seed)
    voronoi = voronoi_2d(x, z, params.voronoi_scale, params.voronoi_smoothness, params.seed)
    return math.sqrt(noise * voronoi)


def sample_temperature(x: float, z: float, params: TerrainParams) -> float:
    """Large-scale temperature map in [-1, 1]."""
    return noise_2d(x, z, 0.008, params.seed + 9999) * 2.0 - 1.0


def sample_biome_factor(x: float, z: float, params: TerrainParams) -> float:
    """Legacy desert mask: zero below a Voronoi threshold of 0.8, smoothstepped above."""
    v = voronoi_2d(x, z, params.voronoi_scale, params.voronoi_smoothness, params.seed)
    raw = v if v >= 0.8 else 0.0
    return _smoothstep(raw)


def sample_surface_y(x: float, z: float, params: TerrainParams) -> int:
    """Surface height at world position (x, z)."""
    return params.base_height + int(
        sample_height_factor(x, z, params) * float(params.height_amplitude)
    )


def _is_any_biome(t: TerrainInfo) -> bool:
    return not t.biomes or "all" in t.biomes


def _terrain_matches(t: TerrainInfo, depth: int, biome: str) -> bool:
    if not t.depth_min <= depth <= t.depth_max:
        return False
    return _is_any_biome(t) or biome in t.biomes


def _terrain_score(t: TerrainInfo) -> int:
    return (0 if _is_any_biome(t) else 10) + (255 - (t.depth_max - t.depth_min))


def select_block(
    registry: BlockRegistry,
    x: int,
    y: int,
    z: int,
    depth: int,
    biome: str,
    fallback_id: int,
    seed: int,
) -> int:
    """Pick the block id best matching ``depth`` and ``biome``.

    Blocks matched through a group rule are picked by a position-stable hash;
    otherwise the most specific individual rule wins.  Returns ``fallback_id``
    when nothing matches.
    """
    candidates: list[tuple[int, int, bool]] = []
    for block in registry.blocks().values():
        group_terrain = next(
            (
                grp.terrain
                for grp in map(registry.get_group, block.groups)
                if grp is not None and _terrain_matches(grp.terrain, depth, biome)
            ),
            None,
        )
        if group_terrain is not None:
            candidates.append((block.block_id, _terrain_score(group_terrain), True))
        elif _terrain_matches(block.terrain, depth, biome):
            candidates.append((block.block_id, _terrain_score(block.terrain), False))

    if not candidates:
        return fallback_id

    best_score = max(score for _, score, _ in candidates)
    top_group = [bid for bid, score, grouped in candidates if score == best_score and grouped]
    top_individual = [
        bid for bid, score, grouped in candidates if score == best_score and not grouped
    ]

    if top_group:
        h = _mix(x * 1619 + y * 31337 + z * 6971 + seed * 1013)
        return top_group[h % len(top_group)]
    return top_individual[-1] if top_individual else fallback_id


def _generate_superflat(params: TerrainParams) -> BlockMap:
    half_w = _half(params.world_width)
    half_d = _half(params.world_depth)
    blocks: BlockMap = {}
    base_y = params.base_height
    for layer in params.superflat_layers:
        for ly in range(layer.thickness):
            for z in range(-half_d, half_d):
                for x in range(-half_w, half_w):
                    blocks[(x, base_y + ly, z)] = layer.block_id
        base_y += layer.thickness
    return blocks


def _column_biome(
    x: float, z: float, surface_y: int, biomes: BiomeRegistry | None, params: TerrainParams
) -> str:
    if params.force_biome:
        return params.force_biome
    if biomes is not None and biomes.biomes():
        match = biomes.find_match(sample_temperature(x, z, params), surface_y)
        return match.id if match is not None else biomes.biomes()[0].id
    return "desert" if sample_biome_factor(x, z, params) > 0.0 else "plains"


def generate(
    registry: BlockRegistry, biomes: BiomeRegistry | None, params: TerrainParams
) -> BlockMap:
    """Generate terrain and return it as a mapping of (x, y, z) to block id."""
    if params.superflat_layers:
        return _generate_superflat(params)

    half_w = _half(params.world_width)
    half_d = _half(params.world_depth)
    min_y = params.base_height - 4
    blocks: BlockMap = {}
    for z in range(-half_d, half_d):
        for x in range(-half_w, half_w):
            surface_y = sample_surface_y(float(x), float(z), params)
            biome = _column_biome(float(x), float(z), surface_y, biomes, params)
            for y in range(min_y, surface_y + 1):
                blocks[(x, y, z)] = select_block(
                    registry, x, y, z, surface_y - y, biome, STONE_ID, params.seed
                )
    return blocks