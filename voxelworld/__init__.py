"""Voxel world model: data values, registries, asset loading, terrain generation, world files, physics and world management."""

__version__ = "0.1.0"
__all__ = ["assets", "dataformat", "menu", "physics", "registry", "terrain", "worldfile", "worlds"]