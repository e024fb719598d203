"""GitOps Tools - Python library for Jenkins job generation and manifest housekeeping."""

__version__ = "0.1.0"

from . import config, jenkins, rename, sourceconfig, templater, utils

__all__ = ["config", "jenkins", "rename", "sourceconfig", "templater", "utils"]
