"""Components: source files loaded from [src] declarations."""
from __future__ import annotations

import asyncio
import os
import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ..constants import Constants
from ..errors import ComponentLoadFailed

_VB_NAME = re.compile(r'^\s*Attribute\s+VB_Name\s*=\s*"([^"]+)"', re.MULTILINE | re.IGNORECASE)


class ComponentType(str, Enum):
    MODULE = "module"
    CLASS = "class"
    FORM = "form"
    DOCUMENT = "document"


EXTENSIONS = {
    ".bas": ComponentType.MODULE,
    ".cls": ComponentType.CLASS,
    ".frm": ComponentType.FORM,
    ".doccls": ComponentType.DOCUMENT,
}


def by_component_name(component: "Component") -> str:
    return component.name


@dataclass(frozen=True)
class Component:
    """Loaded source unit; origin is the contributing dependency (None for the root)."""

    name: str
    type: ComponentType
    code: str
    path: str
    binary: Optional[bytes] = None
    binary_path: Optional[str] = None
    origin: Optional[str] = None

    @classmethod
    async def load(
        cls,
        path: str,
        binary_path: Optional[str] = None,
        origin: Optional[str] = None,
    ) -> "Component":
        """Read path (and its binary companion) without blocking the event loop.

        Raises:
            ComponentLoadFailed: If a file is missing, unreadable, or unsupported.
        """
        component_type = EXTENSIONS.get(os.path.splitext(path)[1].lower())
        if component_type is None:
            supported = ", ".join(sorted(EXTENSIONS))
            raise ComponentLoadFailed(path, f"Unsupported component type. Supported extensions: {supported}")

        code = await asyncio.to_thread(_read_text, path)
        binary = await asyncio.to_thread(_read_bytes, binary_path) if binary_path else None

        match = _VB_NAME.search(code)
        name = match.group(1).strip() if match else os.path.splitext(os.path.basename(path))[0]

        return cls(
            name=name,
            type=component_type,
            code=code,
            path=path,
            binary=binary,
            binary_path=binary_path,
            origin=origin,
        )


def _read_text(path: str) -> str:
    try:
        with open(path, "r", encoding=Constants.SOURCE_ENCODING, newline="") as fh:
            return fh.read()
    except FileNotFoundError as exc:
        raise ComponentLoadFailed(path, "File not found.") from exc
    except UnicodeDecodeError as exc:
        raise ComponentLoadFailed(path, f"File is not valid {Constants.SOURCE_ENCODING}: {exc}") from exc
    except OSError as exc:
        raise ComponentLoadFailed(path, str(exc)) from exc


def _read_bytes(path: str) -> bytes:
    try:
        with open(path, "rb") as fh:
            return fh.read()
    except FileNotFoundError as exc:
        raise ComponentLoadFailed(path, "Binary file not found.") from exc
    except OSError as exc:
        raise ComponentLoadFailed(path, str(exc)) from exc
