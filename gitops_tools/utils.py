"""Utility functions for file handling, console output, and common helpers."""

from pathlib import Path
from typing import Any, Union

import click
import yaml

PathLike = Union[str, Path]


class GitOpsError(Exception):
    """Base exception for GitOps Tools errors."""
    pass


class SourceConfigError(GitOpsError):
    """Exception raised when the source configuration cannot be loaded."""
    pass


class TemplateError(GitOpsError):
    """Exception raised when a job template fails to evaluate."""
    pass


def info(text: Any) -> str:
    """Highlight a value in console output."""
    return click.style(str(text), fg="green")


def log_info(message: str) -> None:
    """Print an informational message."""
    click.echo(message)


def log_warning(message: str) -> None:
    """Print a warning message."""
    click.echo(f"Warning: {message}", err=True)


def file_exists(path: PathLike) -> bool:
    """
    Check if a regular file exists.

    Args:
        path: Path to check

    Returns:
        True if path exists and is a file, False otherwise

    Raises:
        GitOpsError: If the path cannot be inspected
    """
    try:
        return Path(path).is_file()
    except OSError as e:
        raise GitOpsError(f"failed to check if file exists {path}: {e}") from e


def ensure_dir(path: PathLike) -> Path:
    """
    Create a directory and its parents if missing.

    Raises:
        GitOpsError: If the directory cannot be created
    """
    dir_path = Path(path)
    try:
        dir_path.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise GitOpsError(f"failed to create dir {dir_path}: {e}") from e
    return dir_path


def read_text(path: PathLike) -> str:
    """
    Read a text file.

    Raises:
        GitOpsError: If the file cannot be read
    """
    try:
        with open(path, encoding="utf-8") as f:
            return f.read()
    except (OSError, UnicodeDecodeError) as e:
        raise GitOpsError(f"failed to load file {path}: {e}") from e


def write_text(path: PathLike, content: str) -> None:
    """
    Write a text file, replacing any existing content.

    Raises:
        GitOpsError: If the file cannot be written
    """
    try:
        with open(path, "w", encoding="utf-8") as f:
            f.write(content)
    except OSError as e:
        raise GitOpsError(f"failed to save file {path}: {e}") from e


class _BlockDumper(yaml.SafeDumper):
    """SafeDumper that writes multi-line strings as literal blocks."""


def _represent_str(dumper: yaml.SafeDumper, data: str) -> yaml.ScalarNode:
    if "\n" in data:
        return dumper.represent_scalar("tag:yaml.org,2002:str", data, style="|")
    return dumper.represent_scalar("tag:yaml.org,2002:str", data)


_BlockDumper.add_representer(str, _represent_str)


def to_yaml(data: Any) -> str:
    """
    Serialize data to block-style YAML with sorted keys.

    Raises:
        GitOpsError: If the data cannot be represented as YAML
    """
    try:
        return yaml.dump(
            data,
            Dumper=_BlockDumper,
            default_flow_style=False,
            sort_keys=True,
            allow_unicode=True,
        )
    except yaml.YAMLError as e:
        raise GitOpsError(f"failed to marshal YAML: {e}") from e

