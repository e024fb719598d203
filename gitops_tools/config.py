"""Configuration management for GitOps Tools."""

import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

SOURCE_CONFIG_FILE_NAME = "source-config.yaml"


class Config:
    """Configuration class for managing environment variables and default paths."""

    def __init__(self, env_file: Optional[str] = None):
        """
        Initialize configuration.

        Args:
            env_file: Optional path to .env file.
        """
        if env_file:
            load_dotenv(env_file)

    @property
    def dir(self) -> str:
        """Working directory holding the GitOps repository."""
        return os.getenv("GITOPS_DIR", ".")

    @property
    def source_config_path(self) -> str:
        """Source config file path, relative to the working directory."""
        return os.getenv(
            "GITOPS_SOURCE_CONFIG",
            os.path.join(".jx", "gitops", SOURCE_CONFIG_FILE_NAME),
        )

    @property
    def jenkins_out_dir_name(self) -> str:
        """Name of the output directory for Jenkins values files."""
        return os.getenv("JENKINS_OUT_DIR_NAME", "jenkins")

    @property
    def jenkins_default_xml_template(self) -> str:
        """Default XML job template used when a repository configures none."""
        return os.getenv("JENKINS_DEFAULT_XML_TEMPLATE", "")

    def get_source_config_file(self, dir: Optional[str] = None) -> Path:
        """Return the source config file for a working directory."""
        return Path(dir or self.dir) / self.source_config_path

    def get_jenkins_out_dir(self, dir: Optional[str] = None) -> Path:
        """Return the Jenkins output directory for a working directory."""
        return Path(dir or self.dir) / self.jenkins_out_dir_name


# Global config instance
_config: Optional[Config] = None


def get_config(env_file: Optional[str] = None) -> Config:
    """
    Get or create the global configuration instance.

    Args:
        env_file: Optional path to .env file

    Returns:
        Config instance
    """
    global _config
    if _config is None:
        _config = Config(env_file)
    return _config


def reset_config() -> None:
    """Reset the global configuration instance."""
    global _config
    _config = None
