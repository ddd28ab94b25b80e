"""Version values and ranges."""

from .models import Range, Version, parse_version

__all__ = ["Range", "Version", "parse_version"]
