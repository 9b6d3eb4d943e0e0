"""core package initialization.

Low-level pieces shared by every system: constants, tuning, the ECS
world, the event bus, the tile map and the collision rules.
"""

__all__ = ["constants", "tuning", "ecs", "events", "tilemap", "sprites", "collision"]
