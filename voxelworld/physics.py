"""Entity movement, collision against the block grid, and falling blocks."""

from __future__ import annotations

import enum
import math
from dataclasses import dataclass, field
from typing import MutableMapping, Sequence

from voxelworld.registry import BlockRegistry

Vec3 = tuple[float, float, float]
BlockPos = tuple[int, int, int]

_AXIS_STEP = 0.05
_GROUND_PROBE = 0.03
_BLOCK_STEP_SECONDS = 0.12
_EPS = 0.0001
_PUSH_STEP = 0.05
_MAX_PUSH_STEPS = 200
_FALL_FLOOR = -200.0


@dataclass(frozen=True)
class AABB:
    """Axis-aligned bounding box."""

    min: Vec3
    max: Vec3


class PostureState(enum.Enum):
    STANDING = "STANDING"
    CROUCHING = "CROUCHED"
    CRAWLING = "CRAWLING"


@dataclass
class PhysicsConstants:
    """Tunable movement and collision constants."""

    move_speed: float = 4.3
    acceleration: float = 40.0
    ground_friction: float = 30.0
    air_resistance: float = 2.0
    max_velocity: float = 10.0
    jump_speed: float = 8.0
    gravity: float = 25.0
    stand_height: float = 1.8
    stand_eye_from_feet: float = 1.62
    crouch_height: float = 1.5
    crouch_eye_from_feet: float = 1.27
    crawl_height: float = 0.6
    crawl_eye_from_feet: float = 0.5
    crouch_slowdown: float = 1.3
    prone_slowdown: float = 2.5
    falling_block_fall_speed: float = 10.0


@dataclass
class Entity:
    """A movable body with a cylinder-like box around its eye position."""

    position: list[float] = field(default_factory=lambda: [0.0, 0.0, 0.0])
    velocity: list[float] = field(default_factory=lambda: [0.0, 0.0, 0.0])
    radius: float = 0.30
    height: float = 1.80
    eye_from_feet: float = 1.62
    on_ground: bool = False
    posture: PostureState = PostureState.STANDING
    crawl_active: bool = False

    def teleport_to(self, position: Sequence[float]) -> None:
        """Move to ``position`` and stop all motion."""
        self.position = [float(c) for c in position]
        self.velocity = [0.0, 0.0, 0.0]
        self.on_ground = False

    def posture_name(self) -> str:
        return self.posture.value


@dataclass
class FallingBlock:
    """A gravity block removed from the grid and falling smoothly."""

    grid_target: BlockPos
    pos: list[float]
    block_id: int


def _length2(x: float, z: float) -> float:
    return math.hypot(x, z)


def _block_intersects_aabb(block: BlockPos, aabb: AABB) -> bool:
    return all(
        aabb.min[i] < block[i] + 0.5 - _EPS and aabb.max[i] > block[i] - 0.5 + _EPS
        for i in range(3)
    )


class Physics:
    """Physics simulation over a mutable mapping of block positions to ids."""

    def __init__(
        self,
        blocks: MutableMapping[BlockPos, int],
        registry: BlockRegistry,
        constants: PhysicsConstants | None = None,
    ) -> None:
        self.blocks = blocks
        self.registry = registry
        self.constants = constants if constants is not None else PhysicsConstants()
        self.falling_blocks: list[FallingBlock] = []
        self._block_gravity_accumulator = 0.0

    # -- collision -------------------------------------------------------

    @staticmethod
    def _aabb_at(entity: Entity, position: Sequence[float], height: float,
                 eye_from_feet: float) -> AABB:
        x, y, z = position
        r = entity.radius
        return AABB(
            (x - r, y - eye_from_feet, z - r),
            (x + r, y + (height - eye_from_feet), z + r),
        )

    def entity_aabb(self, entity: Entity) -> AABB:
        """Bounding box of ``entity`` at its current position."""
        return self._aabb_at(entity, entity.position, entity.height, entity.eye_from_feet)

    def intersects_world(self, aabb: AABB) -> bool:
        """True when any block overlaps ``aabb``."""
        lo = [math.ceil(aabb.min[i] - 0.5 + _EPS) for i in range(3)]
        hi = [math.floor(aabb.max[i] + 0.5 - _EPS) for i in range(3)]
        return any(
            (x, y, z) in self.blocks
            for x in range(lo[0], hi[0] + 1)
            for y in range(lo[1], hi[1] + 1)
            for z in range(lo[2], hi[2] + 1)
        )

    def _move_axis(self, entity: Entity, axis: int, delta: float) -> bool:
        if abs(delta) < 0.00001:
            return False
        steps = max(1, math.ceil(abs(delta) / _AXIS_STEP))
        step_delta = delta / steps
        for _ in range(steps):
            candidate = list(entity.position)
            candidate[axis] += step_delta
            if self.intersects_world(
                self._aabb_at(entity, candidate, entity.height, entity.eye_from_feet)
            ):
                return True
            entity.position = candidate
        return False

    def _can_fit_posture(self, entity: Entity, height: float, eye: float) -> bool:
        feet_y = entity.position[1] - entity.eye_from_feet
        pos = (entity.position[0], feet_y + eye, entity.position[2])
        return not self.intersects_world(self._aabb_at(entity, pos, height, eye))

    @staticmethod
    def _apply_posture(entity: Entity, posture: PostureState, height: float,
                       eye: float) -> None:
        feet_y = entity.position[1] - entity.eye_from_feet
        entity.posture = posture
        entity.height = height
        entity.eye_from_feet = eye
        entity.position[1] = feet_y + eye

    # -- entity stepping -------------------------------------------------

    def _update_posture(self, entity: Entity, crouch_held: bool,
                        c: PhysicsConstants) -> None:
        if entity.crawl_active:
            desired = PostureState.CRAWLING
        elif crouch_held:
            desired = PostureState.CROUCHING
        else:
            desired = PostureState.STANDING
        if desired == entity.posture:
            return

        dims = {
            PostureState.STANDING: (c.stand_height, c.stand_eye_from_feet),
            PostureState.CROUCHING: (c.crouch_height, c.crouch_eye_from_feet),
            PostureState.CRAWLING: (c.crawl_height, c.crawl_eye_from_feet),
        }
        new_h, new_eye = dims[desired]
        going_taller = new_h > entity.height
        if not going_taller or self._can_fit_posture(entity, new_h, new_eye):
            self._apply_posture(entity, desired, new_h, new_eye)
        elif desired is PostureState.STANDING and entity.posture is PostureState.CRAWLING:
            if self._can_fit_posture(entity, c.crouch_height, c.crouch_eye_from_feet):
                self._apply_posture(entity, PostureState.CROUCHING,
                                    c.crouch_height, c.crouch_eye_from_feet)

    def step_entity(
        self,
        entity: Entity,
        delta_seconds: float,
        desired_velocity: Sequence[float],
        jump_requested: bool,
        crouch_held: bool,
        crawl_toggle: bool,
        constants: PhysicsConstants,
    ) -> None:
        """Advance ``entity`` by one explicit Euler step."""
        c = constants
        if crawl_toggle:
            entity.crawl_active = not entity.crawl_active
        self._update_posture(entity, crouch_held, c)

        slowdown = 0.0
        if entity.posture is PostureState.CROUCHING:
            slowdown = max(0.0, c.crouch_slowdown)
        elif entity.posture is PostureState.CRAWLING:
            slowdown = max(0.0, c.prone_slowdown)

        dx, dz = float(desired_velocity[0]), float(desired_velocity[2])
        desired_speed = _length2(dx, dz)
        if desired_speed > 0.0001:
            adjusted = max(0.0, desired_speed - slowdown)
            dx, dz = dx / desired_speed * adjusted, dz / desired_speed * adjusted

        cx, cz = entity.velocity[0], entity.velocity[2]
        if dx * dx + dz * dz > 0.0000001:
            ex, ez = dx - cx, dz - cz
            diff_len = _length2(ex, ez)
            step = c.acceleration * delta_seconds
            if step >= diff_len:
                cx, cz = dx, dz
            else:
                cx += ex / diff_len * step
                cz += ez / diff_len * step
        else:
            speed = _length2(cx, cz)
            drag_rate = c.ground_friction if entity.on_ground else c.air_resistance
            drag = drag_rate * delta_seconds
            if speed <= drag:
                cx, cz = 0.0, 0.0
            else:
                cx -= cx / speed * drag
                cz -= cz / speed * drag

        h_speed = _length2(cx, cz)
        if h_speed > c.max_velocity:
            scale = c.max_velocity / h_speed
            cx, cz = cx * scale, cz * scale
        entity.velocity[0] = cx
        entity.velocity[2] = cz

        if entity.on_ground and jump_requested:
            entity.velocity[1] = c.jump_speed
            entity.on_ground = False
        elif entity.on_ground:
            entity.velocity[1] = -c.gravity * delta_seconds
        else:
            entity.velocity[1] -= c.gravity * delta_seconds

        self._move_axis(entity, 0, entity.velocity[0] * delta_seconds)
        self._move_axis(entity, 2, entity.velocity[2] * delta_seconds)

        if self._move_axis(entity, 1, entity.velocity[1] * delta_seconds):
            if entity.velocity[1] < 0.0:
                entity.on_ground = True
            entity.velocity[1] = 0.0
        else:
            probe = (entity.position[0], entity.position[1] - _GROUND_PROBE,
                     entity.position[2])
            entity.on_ground = self.intersects_world(
                self._aabb_at(entity, probe, entity.height, entity.eye_from_feet)
            )

    # -- block gravity ---------------------------------------------------

    def step_block_gravity(self, delta_seconds: float) -> None:
        """Detach unsupported gravity blocks at a fixed tick rate."""
        self._block_gravity_accumulator += delta_seconds
        while self._block_gravity_accumulator >= _BLOCK_STEP_SECONDS:
            self._block_gravity_accumulator -= _BLOCK_STEP_SECONDS
            gravity_blocks = sorted(
                (
                    (pos, block_id)
                    for pos, block_id in self.blocks.items()
                    if (data := self.registry.get(block_id)) is not None
                    and data.affected_by_gravity
                ),
                key=lambda item: item[0][1],
            )
            for pos, block_id in gravity_blocks:
                if pos not in self.blocks:
                    continue
                below = (pos[0], pos[1] - 1, pos[2])
                if below in self.blocks:
                    continue
                del self.blocks[pos]
                self.falling_blocks.append(
                    FallingBlock(below, [float(c) for c in pos], block_id)
                )

    def update_falling_blocks(self, delta_seconds: float) -> None:
        """Move falling blocks down and place them where they land."""
        fall_speed = self.constants.falling_block_fall_speed
        kept: list[FallingBlock] = []
        for fb in reversed(self.falling_blocks):
            fb.pos[1] -= fall_speed * delta_seconds
            if fb.pos[1] < _FALL_FLOOR:
                continue
            tx, ty, tz = fb.grid_target
            if fb.pos[1] > float(ty):
                kept.append(fb)
                continue
            below = (tx, ty - 1, tz)
            if below not in self.blocks and fb.grid_target not in self.blocks:
                fb.grid_target = below
                kept.append(fb)
                continue
            land = fb.grid_target
            for _ in range(4):
                if land not in self.blocks:
                    break
                land = (land[0], land[1] + 1, land[2])
            if land not in self.blocks:
                self.blocks[land] = fb.block_id
        kept.reverse()
        self.falling_blocks = kept

    # -- placement and rescue --------------------------------------------

    def can_place_block_at(self, entity: Entity, forward: Sequence[float],
                           place_pos: BlockPos) -> bool:
        """True when a block may be placed at ``place_pos``.

        ``forward`` is the viewing direction; an entity stuck inside blocks may
        only place in front of itself.
        """
        aabb = self.entity_aabb(entity)
        if _block_intersects_aabb(place_pos, aabb):
            return False
        if self.intersects_world(aabb):
            to_place = [place_pos[i] - entity.position[i] for i in range(3)]
            length = math.sqrt(sum(c * c for c in to_place))
            if length * length > 0.0000001:
                f_len = math.sqrt(sum(float(c) * float(c) for c in forward))
                dot = sum(float(forward[i]) / f_len * to_place[i] / length for i in range(3))
                if dot < 0.0:
                    return False
        return True

    def force_entity_up_if_inside_block(self, entity: Entity) -> bool:
        """Push ``entity`` upward out of blocks; True if it was inside any."""
        if not self.intersects_world(self.entity_aabb(entity)):
            return False
        for _ in range(_MAX_PUSH_STEPS):
            if not self.intersects_world(self.entity_aabb(entity)):
                break
            entity.position[1] += _PUSH_STEP
        if entity.velocity[1] < 0.0:
            entity.velocity[1] = 0.0
        entity.on_ground = False
        return True

    def teleport(self, entity: Entity, position: Sequence[float]) -> Vec3:
        """Teleport ``entity`` and return its new position (e.g. for a camera)."""
        entity.teleport_to(position)
        x, y, z = entity.position
        return (x, y, z)