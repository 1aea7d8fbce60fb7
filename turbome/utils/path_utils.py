from pathlib import Path, PurePosixPath, PureWindowsPath

from turbome.services.base import InvalidPathError


def is_safe_path(path_str: str) -> bool:
    """
    Check that a user-supplied path stays inside the storage root.

    A path is unsafe when it is empty, absolute (POSIX or Windows style) or
    contains a ``..`` segment anywhere.
    """
    if not path_str or "\x00" in path_str:
        return False

    if PurePosixPath(path_str).is_absolute() or path_str.startswith("\\"):
        return False
    windows_path = PureWindowsPath(path_str)
    if windows_path.drive or windows_path.root:
        return False

    segments = path_str.replace("\\", "/").split("/")
    return ".." not in segments


def resolve_storage_path(root: Path, path_str: str) -> Path:
    """
    Resolves a relative path against the storage root, ensuring it stays inside it.

    Args:
        root: The storage root directory.
        path_str: The repository-relative path provided by the caller.

    Returns:
        The absolute path inside ``root``.

    Raises:
        InvalidPathError: If the path is unsafe or resolves outside the root,
            for example through a symlink.
    """
    if not is_safe_path(path_str):
        raise InvalidPathError(path_str)

    target_path = root / path_str
    resolved_root = root.resolve()
    # Symlinks inside the tree must not lead out of it.
    if not target_path.resolve().is_relative_to(resolved_root):
        raise InvalidPathError(path_str)

    return target_path
