import pytest

from voxelworld.assets import AssetError, load_biomes, load_blocks, parse_terrain
from voxelworld.dataformat import (
    DataObject,
    Document,
    ElemType,
    FloatRange,
    IntRange,
    Tag,
    TypedArray,
)
from voxelworld.registry import BiomeRegistry, BlockRegistry, CubeFace, FaceTile

ATLAS = object()
FACES = ["front", "back", "left", "right", "top", "bottom"]


def tags(*names):
    return TypedArray(ElemType.TAG, [Tag(n) for n in names])


def block_obj(block_id, name, gravity=False, extra=(), tiles=None):
    entries = [("id", block_id), ("name", name), ("gravity", gravity)]
    for i, face in enumerate(FACES):
        tx, ty = tiles[i] if tiles else (i, i + 10)
        entries.append((face, TypedArray(ElemType.INT, [tx, ty])))
    entries.extend(extra)
    return DataObject(entries)


def test_parse_terrain_defaults_to_all_biomes():
    t = parse_terrain(DataObject())
    assert t.biomes == ["all"]
    assert (t.depth_min, t.depth_max) == (0, 255)


def test_parse_terrain_fields():
    obj = DataObject(
        [
            ("temp", FloatRange(-0.5, 0.5)),
            ("elevation", IntRange(-10, 20)),
            ("depth", IntRange(1, 3)),
            ("biome", tags("plains", "desert")),
        ]
    )
    t = parse_terrain(obj)
    assert (t.temperature_min, t.temperature_max) == (-0.5, 0.5)
    assert (t.elevation_min, t.elevation_max) == (-10, 20)
    assert (t.depth_min, t.depth_max) == (1, 3)
    assert t.biomes == ["plains", "desert"]


def test_parse_terrain_ignores_mismatched_types():
    obj = DataObject([("temp", IntRange(0, 1)), ("depth", FloatRange(0.0, 1.0)), ("biome", "x")])
    t = parse_terrain(obj)
    assert (t.temperature_min, t.temperature_max) == (-1.0, 1.0)
    assert (t.depth_min, t.depth_max) == (0, 255)
    assert t.biomes == []


def test_load_blocks_registers_blocks_and_groups():
    doc = Document(
        [
            ("group", DataObject([("name", "ores"), ("depth", IntRange(5, 50))])),
            ("block", block_obj(3, "sand", gravity=True, extra=[("group", tags("ores"))])),
            ("block", block_obj(1, "dirt")),
        ]
    )
    reg = BlockRegistry()
    assert load_blocks(doc, ATLAS, reg) == 2
    sand = reg.get(3)
    assert sand.name == "sand"
    assert sand.affected_by_gravity
    assert sand.groups == ["ores"]
    assert sand.atlas is ATLAS
    assert sand.face_tiles[CubeFace.TOP] == FaceTile(4, 14)
    assert reg.get_group("ores").terrain.depth_max == 50
    assert reg.get(1).groups == []


@pytest.mark.parametrize(
    "obj",
    [
        DataObject([("id", 1), ("name", "x")]),
        block_obj(True, "x"),
        block_obj(1, Tag("x")),
        block_obj(1, "x", gravity=1),
        DataObject(
            [("id", 1), ("name", "x"), ("gravity", False)]
            + [(f, TypedArray(ElemType.INT, [0])) for f in FACES]
        ),
        block_obj(1, "x", tiles=[(0.5, 0)] * 6),
    ],
)
def test_load_blocks_skips_malformed(obj):
    reg = BlockRegistry()
    assert load_blocks(Document([("block", obj)]), ATLAS, reg) == 0
    assert len(reg.blocks()) == 0


def test_load_blocks_duplicate_id_raises():
    doc = Document([("block", block_obj(1, "a")), ("block", block_obj(1, "b"))])
    reg = BlockRegistry()
    with pytest.raises(AssetError):
        load_blocks(doc, ATLAS, reg)
    assert reg.get(1).name == "a"


def test_load_blocks_without_atlas_raises():
    with pytest.raises(AssetError):
        load_blocks(Document([("block", block_obj(1, "a"))]), None, BlockRegistry())


def test_load_biomes():
    doc = Document(
        [
            (
                "biome",
                DataObject(
                    [
                        ("id", "desert"),
                        ("name", "Desert"),
                        ("temp", FloatRange(0.5, 1.0)),
                        ("elevation", IntRange(0, 40)),
                    ]
                ),
            ),
            ("biome", DataObject([("name", "Nameless")])),
            ("other", DataObject([("id", "ignored")])),
        ]
    )
    reg = BiomeRegistry()
    biomes = load_biomes(doc, reg)
    assert [b.id for b in biomes] == ["desert"]
    desert = reg.get_by_id("desert")
    assert desert.display_name == "Desert"
    assert (desert.temperature_min, desert.temperature_max) == (0.5, 1.0)
    assert (desert.elevation_min, desert.elevation_max) == (0, 40)


def test_load_biomes_replaces_existing():
    reg = BiomeRegistry()
    load_biomes(Document([("biome", DataObject([("id", "a")]))]), reg)
    load_biomes(Document([("biome", DataObject([("id", "b")]))]), reg)
    assert [b.id for b in reg.biomes()] == ["b"]


def test_load_biomes_empty_raises():
    reg = BiomeRegistry()
    with pytest.raises(AssetError):
        load_biomes(Document([]), reg)
    assert reg.biomes() == ()