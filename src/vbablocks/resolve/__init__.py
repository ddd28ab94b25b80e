"""Dependency resolution."""

from .models import DependencyNode, Requirement, Solution
from .resolver import Resolver, resolve

__all__ = ["DependencyNode", "Requirement", "Resolver", "Solution", "resolve"]
