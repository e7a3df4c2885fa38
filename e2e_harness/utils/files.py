"""
File system helpers.

Every failure is raised as FileOperationError carrying the path and the
operation that failed.
"""

import shutil
from pathlib import Path
from typing import Union

from ..core.exceptions import FileOperationError
from ..core.logging_config import get_logger

logger = get_logger(__name__)

PathLike = Union[str, Path]


def _fail(operation: str, path: PathLike, error: Exception) -> FileOperationError:
    logger.error(f"Failed to {operation}: {path} ({error})")
    return FileOperationError(
        f"Failed to {operation}: {path}: {error}",
        file_path=str(path),
        operation=operation,
    )


def file_exists(path: PathLike) -> bool:
    return Path(path).exists()


def directory_exists(path: PathLike) -> bool:
    return Path(path).is_dir()


def create_directory(path: PathLike, recursive: bool = True) -> Path:
    directory = Path(path)
    try:
        directory.mkdir(parents=recursive, exist_ok=True)
    except OSError as e:
        raise _fail("create directory", path, e) from e
    logger.debug(f"Directory created: {directory}")
    return directory


def read_file(path: PathLike, encoding: str = "utf-8") -> str:
    try:
        return Path(path).read_text(encoding=encoding)
    except OSError as e:
        raise _fail("read file", path, e) from e


def write_file(path: PathLike, content: str, encoding: str = "utf-8") -> Path:
    """Write ``content``, creating parent directories as needed."""
    target = Path(path)
    create_directory(target.parent)
    try:
        target.write_text(content, encoding=encoding)
    except OSError as e:
        raise _fail("write file", path, e) from e
    logger.debug(f"File written successfully: {target}")
    return target


def append_file(path: PathLike, content: str, encoding: str = "utf-8") -> Path:
    target = Path(path)
    create_directory(target.parent)
    try:
        with open(target, "a", encoding=encoding) as f:
            f.write(content)
    except OSError as e:
        raise _fail("append to file", path, e) from e
    return target


def delete_file(path: PathLike) -> None:
    try:
        Path(path).unlink()
    except OSError as e:
        raise _fail("delete file", path, e) from e
    logger.debug(f"File deleted: {path}")


def delete_directory(path: PathLike, recursive: bool = True) -> None:
    """Remove a directory; a missing directory is not an error when recursive."""
    directory = Path(path)
    try:
        if not recursive:
            directory.rmdir()
        elif directory.exists():
            shutil.rmtree(directory)
    except OSError as e:
        raise _fail("delete directory", path, e) from e
    logger.debug(f"Directory deleted: {path}")


def copy_file(source: PathLike, destination: PathLike) -> Path:
    target = Path(destination)
    create_directory(target.parent)
    try:
        shutil.copy2(source, target)
    except OSError as e:
        raise _fail("copy file", source, e) from e
    return target


def move_file(source: PathLike, destination: PathLike) -> Path:
    target = Path(destination)
    create_directory(target.parent)
    try:
        shutil.move(str(source), str(target))
    except OSError as e:
        raise _fail("move file", source, e) from e
    return target


def get_file_name(path: PathLike, with_extension: bool = True) -> str:
    p = Path(path)
    return p.name if with_extension else p.stem


def get_directory_name(path: PathLike) -> str:
    return str(Path(path).parent)
