"""Local file operation helpers used by the disk storage adapter."""

from pathlib import Path

from backlog.utils.paths import BACKLOG_DIR, CONFIG_FILENAME


def ensure_dir(path: Path | str, recursive: bool = True) -> Path:
    """Create a directory if it doesn't exist.

    Args:
        path: Path to the directory to create.
        recursive: Whether to create missing parent directories.

    Returns:
        The Path object for the directory.
    """
    dir_path = Path(path)
    dir_path.mkdir(parents=recursive, exist_ok=True)
    return dir_path


def read_file(path: Path | str, encoding: str = "utf-8") -> str:
    """Read entire file contents as a string.

    Args:
        path: Path to the file to read.
        encoding: Character encoding to use (default: utf-8).

    Returns:
        The file contents as a string.

    Raises:
        FileNotFoundError: If the file does not exist.
        PermissionError: If the file cannot be read due to permissions.
    """
    return Path(path).read_text(encoding=encoding)


def write_file(path: Path | str, content: str, encoding: str = "utf-8") -> None:
    """Write content to a file, creating parent directories if needed.

    Args:
        path: Path to the file to write.
        content: Content to write to the file.
        encoding: Character encoding to use (default: utf-8).
    """
    file_path = Path(path)
    file_path.parent.mkdir(parents=True, exist_ok=True)
    file_path.write_text(content, encoding=encoding, newline="\n")


def delete_file(path: Path | str) -> None:
    """Delete a file.

    Raises:
        FileNotFoundError: If the file does not exist.
    """
    Path(path).unlink()


def list_dir(path: Path | str) -> list[str]:
    """Return the sorted entry names of a directory."""
    return sorted(entry.name for entry in Path(path).iterdir())


def file_exists(path: Path | str) -> bool:
    """Check if a file exists.

    Args:
        path: Path to check.

    Returns:
        True if the path exists and is a file, False otherwise.
    """
    return Path(path).is_file()


def get_project_root(start: Path | None = None) -> Path:
    """Find the directory holding backlog/config.yml.

    Walks up the directory tree from start (default: the current working
    directory) looking for a backlog/config.yml file.

    Returns:
        Path to the project root, or the starting directory if no
        project marker is found.
    """
    origin = (start or Path.cwd()).resolve()
    current = origin

    while True:
        if (current / BACKLOG_DIR / CONFIG_FILENAME).is_file():
            return current
        if current == current.parent:
            break
        current = current.parent

    # Fallback to the starting directory if no project was found
    return origin
