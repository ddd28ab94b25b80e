"""Build graph assembly."""

from .build_graph import BuildGraph
from .component import Component, ComponentType
from .load_from_project import load_from_project, validate_graph

__all__ = ["BuildGraph", "Component", "ComponentType", "load_from_project", "validate_graph"]
