"""Rename Kubernetes YAML files to canonical names based on resource name and kind."""

import os
from pathlib import Path
from typing import Any, List, Tuple

import yaml

from .utils import GitOpsError, PathLike, info, log_info, log_warning

YAML_EXTENSIONS = (".yaml", ".yml")

# Lower case kind -> file name suffix; other kinds use the kind itself
KIND_SUFFIXES = {
    "clusterrolebinding": "crb",
    "configmap": "cm",
    "customresourcedefinition": "crd",
    "deployment": "deploy",
    "mutatingwebhookconfiguration": "mutwebhookcfg",
    "namespace": "ns",
    "rolebinding": "rb",
    "service": "svc",
    "serviceaccount": "sa",
    "validatingwebhookconfiguration": "valwebhookcfg",
}


def canonical_name(kind: str, name: str) -> str:
    """
    Return the canonical file name, without extension, for a resource.

    Args:
        kind: Resource kind, may be empty
        name: Resource name, must not be empty

    Returns:
        ``<name>-<suffix>``, or the name alone when there is no kind
    """
    if not kind:
        return name
    lk = kind.lower()
    suffix = KIND_SUFFIXES.get(lk, lk)
    return f"{name}-{suffix}"


def _load_document(path: Path) -> Any:
    try:
        with open(path, encoding="utf-8") as f:
            for doc in yaml.safe_load_all(f):
                if doc is not None:
                    return doc
    except (OSError, UnicodeDecodeError, yaml.YAMLError) as e:
        raise GitOpsError(f"failed to load file {path}: {e}") from e
    return None


def get_name(doc: Any) -> str:
    """Return metadata.name of a resource, or an empty string."""
    if not isinstance(doc, dict):
        return ""
    metadata = doc.get("metadata")
    if not isinstance(metadata, dict):
        return ""
    name = metadata.get("name")
    return str(name) if name else ""


def get_kind(doc: Any) -> str:
    """Return the kind of a resource, or an empty string."""
    if not isinstance(doc, dict):
        return ""
    kind = doc.get("kind")
    return str(kind) if kind else ""


def rename_file(path: Path) -> Path:
    """
    Rename a YAML file to its canonical name in the same directory.

    Returns:
        The new path, or the original path if it was not renamed

    Raises:
        GitOpsError: If the file cannot be loaded or renamed
    """
    doc = _load_document(path)
    name = get_name(doc)
    if not name:
        log_warning(f"no name for file {path} so ignoring")
        return path

    kind = get_kind(doc)
    new_file = canonical_name(kind, name) + path.suffix
    new_path = path.parent / new_file
    if new_path == path:
        return path

    log_info(f"renaming {info(path.name)} => {info(new_file)}")
    try:
        os.rename(path, new_path)
    except OSError as e:
        raise GitOpsError(f"failed to rename {path.name} to {new_file}: {e}") from e
    return new_path


def rename_files(dir: PathLike = ".") -> List[Tuple[Path, Path]]:
    """
    Recursively rename the *.yaml and *.yml files in a directory.

    Files whose canonical names collide overwrite each other.

    Args:
        dir: Directory to scan

    Returns:
        (old path, new path) for every renamed file

    Raises:
        GitOpsError: If a file cannot be loaded or renamed
    """
    renamed = []
    try:
        for root, dirs, files in os.walk(dir):
            dirs.sort()
            for file_name in sorted(files):
                path = Path(root) / file_name
                if not path.is_file() or not file_name.endswith(YAML_EXTENSIONS):
                    continue
                new_path = rename_file(path)
                if new_path != path:
                    renamed.append((path, new_path))
    except GitOpsError as e:
        raise GitOpsError(f"failed to rename YAML files in dir {dir}: {e}") from e
    return renamed
