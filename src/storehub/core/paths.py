"""Namespace and object path validation.

Every request passes through here before authentication or any backend
call, so a rejected path never reaches a storage driver.
"""

import re

from storehub.core.errors import BadPathError

MAX_PATH_LENGTH = 1024

_NAMESPACE_RE = re.compile(r"^[A-Za-z0-9]+$")
_CONTROL_CHARS_RE = re.compile(r"[\x00-\x1f\x7f]")


def validate_namespace(namespace: str) -> str:
    """Return namespace unchanged if it is a non-empty alphanumeric string."""
    if not namespace or not _NAMESPACE_RE.match(namespace):
        raise BadPathError("Invalid namespace")
    return namespace


def normalize_path(path: str) -> str:
    """Validate an object path and strip its trailing slash.

    Raises:
        BadPathError: If the path is empty, absolute, too long, or could
            resolve outside the namespace root.
    """
    if path.endswith("/"):
        path = path[:-1]

    if not path:
        raise BadPathError("Path must not be empty")
    if len(path) > MAX_PATH_LENGTH:
        raise BadPathError(f"Path exceeds {MAX_PATH_LENGTH} characters")
    if path.startswith("/"):
        raise BadPathError("Path must be relative")
    if "\\" in path or _CONTROL_CHARS_RE.search(path):
        raise BadPathError("Path contains invalid characters")

    for segment in path.split("/"):
        if segment in ("", ".", ".."):
            raise BadPathError("Path contains an empty or relative segment")

    return path
