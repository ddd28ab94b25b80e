"""Constants used in the project."""

import os
from enum import Enum


class ExitCodes(Enum):
    """Exit codes for the program.

    Args:
        Enum (int): Exit codes for the program.
    """

    SUCCESS = 0
    FILE_ERROR = 1
    CONNECTION_ERROR = 2
    RESOLVE_ERROR = 3
    BUILD_ERROR = 4


class SourceKinds(Enum):
    """Places a dependency can be fetched from.

    Args:
        Enum (string): Source kinds supported by the program.
    """

    REGISTRY = "registry"
    GIT = "git"
    PATH = "path"


class Constants:  # pylint: disable=too-few-public-methods
    """General constants used in the project.
    Data holder for configuration constants; not intended to provide behavior.
    """

    MANIFEST_FILE = "vba-block.toml"
    PROJECT_NAME = "VBAProject"
    DEFAULT_REGISTRY = "vba-blocks"
    REGISTRY_URL_DEFAULT = "https://registry.vba-blocks.com/index"
    CACHE_DIR = os.path.join(os.path.expanduser("~"), ".vba-blocks", "cache")
    CONFIG_FILE_NAMES = ["vba-blocks.yaml", "vba-blocks.yml"]
    USER_CONFIG_FILE = os.path.join(os.path.expanduser("~"), ".vba-blocks", "config.yaml")
    ENV_CONFIG = "VBA_BLOCKS_CONFIG"
    ENV_LOG_LEVEL = "VBA_BLOCKS_LOG_LEVEL"
    LOG_FORMAT = "[%(levelname)s] %(message)s"
    SOURCE_ENCODING = "utf-8"
    DEFAULT_TARGET_PATH = "target"
    REQUEST_TIMEOUT = 30  # Timeout in seconds for all HTTP requests
    HTTP_RETRY_MAX = 3
    HTTP_RETRY_BASE_DELAY_SEC = 0.3
    GIT_EXECUTABLE = "git"
