"""Scene module for the world container and demo scenes.

Components:
    world: World list of primitives, closest-hit query and SceneConfig
    presets: Ready-made scenes returning a (World, Camera) pair
"""

from .presets import ShowcaseParams, create_material_showcase_scene, create_two_sphere_scene
from .world import Primitive, SceneConfig, World, material_from_config, new_world

__all__ = [
    # World module
    "World",
    "Primitive",
    "SceneConfig",
    "material_from_config",
    "new_world",
    # Presets module
    "ShowcaseParams",
    "create_two_sphere_scene",
    "create_material_showcase_scene",
]
