import pytest

from voxelworld.registry import (
    BiomeData,
    BiomeRegistry,
    BlockData,
    BlockGroupData,
    BlockRegistry,
    TerrainInfo,
)
from voxelworld.terrain import (
    SuperflatLayer,
    TerrainParams,
    generate,
    noise_2d,
    sample_biome_factor,
    sample_height_factor,
    sample_surface_y,
    sample_temperature,
    select_block,
    voronoi_2d,
)

ATLAS = object()
POINTS = [(x * 3.7, z * 5.1) for x in range(-10, 10) for z in range(-10, 10)]


def _block(block_id, **terrain):
    groups = terrain.pop("groups", [])
    return BlockData(
        block_id=block_id,
        name=f"b{block_id}",
        atlas=ATLAS,
        groups=groups,
        terrain=TerrainInfo(**terrain),
    )


@pytest.mark.parametrize("seed", [0, 7, -3, 123456])
def test_noise_in_unit_interval(seed):
    values = [noise_2d(x, z, 0.08, seed) for x, z in POINTS]
    assert all(0.0 <= v <= 1.0 for v in values)
    assert len(set(values)) > 10


def test_noise_is_deterministic_and_seed_dependent():
    a = [noise_2d(x, z, 0.3, 1) for x, z in POINTS]
    b = [noise_2d(x, z, 0.3, 1) for x, z in POINTS]
    c = [noise_2d(x, z, 0.3, 2) for x, z in POINTS]
    assert a == b
    assert a != c


def test_voronoi_in_unit_interval():
    values = [voronoi_2d(x, z, 0.05, 0.633, 4) for x, z in POINTS]
    assert all(0.0 <= v <= 1.0 for v in values)


def test_height_factor_and_temperature_ranges():
    p = TerrainParams(seed=11)
    for x, z in POINTS:
        assert 0.0 <= sample_height_factor(x, z, p) <= 1.0
        assert -1.0 <= sample_temperature(x, z, p) <= 1.0


def test_biome_factor_zero_or_above_threshold():
    p = TerrainParams(seed=5)
    for x, z in POINTS:
        f = sample_biome_factor(x, z, p)
        assert f == 0.0 or 0.8 * 0.8 * (3 - 1.6) <= f <= 1.0


def test_surface_y_within_bounds():
    p = TerrainParams(seed=42, base_height=5, height_amplitude=12)
    for x, z in POINTS:
        assert 5 <= sample_surface_y(x, z, p) <= 17


def test_surface_y_flat_with_zero_amplitude():
    p = TerrainParams(seed=3, base_height=9, height_amplitude=0)
    assert {sample_surface_y(x, z, p) for x, z in POINTS} == {9}


def test_select_block_fallback_on_empty_registry():
    assert select_block(BlockRegistry(), 0, 0, 0, 0, "plains", 99, 1) == 99


def test_select_block_prefers_narrow_depth_range():
    reg = BlockRegistry()
    reg.register(_block(5, depth_min=0, depth_max=0, biomes=["all"]))
    reg.register(_block(6, depth_min=0, depth_max=255, biomes=["all"]))
    assert select_block(reg, 0, 0, 0, 0, "plains", 2, 0) == 5
    assert select_block(reg, 0, 0, 0, 3, "plains", 2, 0) == 6


def test_select_block_biome_specific_wins_in_its_biome():
    reg = BlockRegistry()
    reg.register(_block(6, biomes=["all"]))
    reg.register(_block(7, biomes=["desert"]))
    assert select_block(reg, 1, 2, 3, 4, "desert", 2, 0) == 7
    assert select_block(reg, 1, 2, 3, 4, "plains", 2, 0) == 6


def test_select_block_out_of_depth_falls_back():
    reg = BlockRegistry()
    reg.register(_block(5, depth_min=2, depth_max=4))
    assert select_block(reg, 0, 0, 0, 10, "plains", 2, 0) == 2


def test_select_block_group_members_chosen_by_position():
    reg = BlockRegistry()
    reg.register_group(
        BlockGroupData(name="ores", terrain=TerrainInfo(depth_min=1, depth_max=5, biomes=["all"]))
    )
    reg.register(_block(10, groups=["ores"], depth_min=50, depth_max=50))
    reg.register(_block(11, groups=["ores"], depth_min=50, depth_max=50))
    picks = [select_block(reg, x, -x, 2 * x, 3, "plains", 2, 9) for x in range(60)]
    assert set(picks) == {10, 11}
    again = [select_block(reg, x, -x, 2 * x, 3, "plains", 2, 9) for x in range(60)]
    assert picks == again
    assert select_block(reg, 0, 0, 0, 8, "plains", 2, 9) == 2


def test_generate_superflat_layers():
    p = TerrainParams(
        world_width=2,
        world_depth=2,
        superflat_layers=[SuperflatLayer(2, 2), SuperflatLayer(1, 1)],
    )
    blocks = generate(BlockRegistry(), None, p)
    assert len(blocks) == 12
    assert {k[0] for k in blocks} == {-1, 0}
    assert {k[2] for k in blocks} == {-1, 0}
    assert all(v == 2 for (x, y, z), v in blocks.items() if y < 2)
    assert all(v == 1 for (x, y, z), v in blocks.items() if y == 2)


def test_generate_columns_are_solid_from_bottom_to_surface():
    p = TerrainParams(seed=17, world_width=8, world_depth=6, base_height=2)
    blocks = generate(BlockRegistry(), None, p)
    for x in range(-4, 4):
        for z in range(-3, 3):
            top = sample_surface_y(float(x), float(z), p)
            ys = sorted(y for (bx, y, bz) in blocks if bx == x and bz == z)
            assert ys == list(range(-2, top + 1))
    assert set(blocks.values()) == {2}


def test_generate_force_biome_selects_biome_blocks():
    reg = BlockRegistry()
    reg.register(_block(7, biomes=["desert"]))
    biomes = BiomeRegistry()
    biomes.register(BiomeData(id="plains"))
    p = TerrainParams(seed=1, world_width=4, world_depth=4, force_biome="desert")
    assert set(generate(reg, biomes, p).values()) == {7}
    p.force_biome = ""
    assert set(generate(reg, biomes, p).values()) == {2}