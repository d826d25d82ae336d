"""Binary ``.world`` save files: a header followed by block records."""

from __future__ import annotations

import enum
import struct
from dataclasses import dataclass, field
from typing import BinaryIO, Mapping

from voxelworld.terrain import BlockMap, SuperflatLayer

MAGIC = b"VXLW"
VERSION = 1
HEADER_END = 0xFF


class WorldType(enum.IntEnum):
    """How a world's terrain was generated."""

    DEFAULT = 0
    SINGLE_BIOME = 1
    SUPERFLAT = 2


@dataclass
class WorldHeader:
    """Metadata stored at the start of a world file."""

    seed: int = 0
    world_type: WorldType | int = WorldType.DEFAULT
    single_biome: str = ""
    superflat_layers: list[SuperflatLayer] = field(default_factory=list)
    datapacks: list[str] = field(default_factory=list)


class WorldFileError(Exception):
    """Raised when a world file cannot be written or is malformed."""


def _pack(fmt: str, value: int) -> bytes:
    try:
        return struct.pack(fmt, value)
    except struct.error as exc:
        raise WorldFileError(f"value out of range: {value}") from exc


def _encode_string(text: str) -> bytes:
    data = text.encode("utf-8", "surrogateescape")
    if len(data) > 0xFFFF:
        raise WorldFileError("string too long")
    return struct.pack("<H", len(data)) + data


def _encode_header(header: WorldHeader) -> bytes:
    out = bytearray(MAGIC)
    out.append(VERSION)
    out += _pack("<i", header.seed)
    out += _pack("<B", int(header.world_type))
    if header.world_type == WorldType.SINGLE_BIOME:
        out += _encode_string(header.single_biome)
    if header.world_type == WorldType.SUPERFLAT:
        if len(header.superflat_layers) > 0xFF:
            raise WorldFileError("too many superflat layers")
        out.append(len(header.superflat_layers))
        for layer in header.superflat_layers:
            out += _pack("<I", layer.block_id)
            out.append(max(1, min(255, layer.thickness)))
    if len(header.datapacks) > 0xFF:
        raise WorldFileError("too many datapacks")
    out.append(len(header.datapacks))
    for path in header.datapacks:
        out += _encode_string(path)
    out.append(HEADER_END)
    return bytes(out)


def save(path, header: WorldHeader, blocks: Mapping[tuple[int, int, int], int]) -> None:
    """Write ``header`` and ``blocks`` to ``path``."""
    data = bytearray(_encode_header(header))
    for (x, y, z), block_id in blocks.items():
        data += _pack("<I", block_id)
        data += _pack("<i", x) + _pack("<i", y) + _pack("<i", z)
    with open(path, "wb") as f:
        f.write(data)


def _read_exact(f: BinaryIO, n: int) -> bytes:
    data = f.read(n)
    if len(data) != n:
        raise WorldFileError("unexpected end of file")
    return data


def _read_u8(f: BinaryIO) -> int:
    return _read_exact(f, 1)[0]


def _read_string(f: BinaryIO) -> str:
    (length,) = struct.unpack("<H", _read_exact(f, 2))
    return _read_exact(f, length).decode("utf-8", "surrogateescape")


def _world_type(value: int) -> WorldType | int:
    try:
        return WorldType(value)
    except ValueError:
        return value


def _read_header(f: BinaryIO) -> WorldHeader:
    if f.read(4) != MAGIC:
        raise WorldFileError("bad magic")
    if f.read(1) != bytes([VERSION]):
        raise WorldFileError("unsupported version")
    h = WorldHeader()
    (h.seed,) = struct.unpack("<i", _read_exact(f, 4))
    h.world_type = _world_type(_read_u8(f))
    if h.world_type == WorldType.SINGLE_BIOME:
        h.single_biome = _read_string(f)
    if h.world_type == WorldType.SUPERFLAT:
        for _ in range(_read_u8(f)):
            (block_id,) = struct.unpack("<I", _read_exact(f, 4))
            h.superflat_layers.append(SuperflatLayer(block_id, _read_u8(f)))
    h.datapacks = [_read_string(f) for _ in range(_read_u8(f))]
    if _read_u8(f) != HEADER_END:
        raise WorldFileError("missing end-of-header marker")
    return h


def load(path) -> tuple[WorldHeader, BlockMap]:
    """Read a whole world file; return its header and blocks.

    A trailing fragment shorter than a block id is treated as end of file.
    """
    with open(path, "rb") as f:
        header = _read_header(f)
        blocks: BlockMap = {}
        while len(raw_id := f.read(4)) == 4:
            (block_id,) = struct.unpack("<I", raw_id)
            x, y, z = struct.unpack("<iii", _read_exact(f, 12))
            blocks[(x, y, z)] = block_id
    return header, blocks


def read_header(path) -> WorldHeader:
    """Read only the header of a world file."""
    with open(path, "rb") as f:
        return _read_header(f)