"""Source repository configuration: data model, YAML loading, and defaulting."""

from dataclasses import dataclass, field
from typing import List, Optional
from urllib.parse import urlparse

import yaml

from .utils import PathLike, SourceConfigError, file_exists, info, log_info, read_text

DEFAULT_PROVIDER = "https://github.com"

# Provider host fragments used to guess the provider kind
PROVIDER_KINDS = {
    "github": "github",
    "gitlab": "gitlab",
    "bitbucket": "bitbucketserver",
}


@dataclass
class JenkinsConfig:
    """Jenkins settings for a repository, group, or the whole config."""
    # Target Jenkins server; empty means the repository is not generated
    server: str = ""
    # XML job template path relative to the working directory
    xml_template: str = ""


@dataclass
class Repository:
    """A source repository tracked by the GitOps config."""
    name: str
    url: str = ""
    http_clone_url: str = ""
    # None when the repository is not built by Jenkins
    jenkins: Optional[JenkinsConfig] = None


@dataclass
class RepositoryGroup:
    """A group of repositories sharing git provider metadata."""
    owner: str = ""
    # Git server URL
    provider: str = ""
    provider_kind: str = ""
    provider_name: str = ""
    repositories: List[Repository] = field(default_factory=list)
    # Defaults for repository Jenkins settings
    jenkins: Optional[JenkinsConfig] = None


@dataclass
class SourceConfig:
    """Root of the source repository configuration."""
    groups: List[RepositoryGroup] = field(default_factory=list)
    jenkins: Optional[JenkinsConfig] = None


def _build_jenkins_config(config: Optional[dict], where: str) -> Optional[JenkinsConfig]:
    if config is None:
        return None
    if not isinstance(config, dict):
        raise SourceConfigError(f"jenkins in {where} must be a mapping")
    return JenkinsConfig(
        server=config.get("server") or "",
        xml_template=config.get("xmlTemplate") or "",
    )


def _build_repository(config: dict, where: str) -> Repository:
    if not isinstance(config, dict):
        raise SourceConfigError(f"repository in {where} must be a mapping")
    name = str(config.get("name") or "")
    return Repository(
        name=name,
        url=config.get("url") or "",
        http_clone_url=config.get("httpCloneURL") or "",
        jenkins=_build_jenkins_config(config.get("jenkins"), f"repository {name}"),
    )


def _build_group(config: dict, index: int) -> RepositoryGroup:
    where = f"group {index}"
    if not isinstance(config, dict):
        raise SourceConfigError(f"{where} must be a mapping")
    repositories = config.get("repositories") or []
    if not isinstance(repositories, list):
        raise SourceConfigError(f"repositories in {where} must be a list")
    return RepositoryGroup(
        owner=config.get("owner") or "",
        provider=config.get("provider") or "",
        provider_kind=config.get("providerKind") or "",
        provider_name=config.get("providerName") or "",
        repositories=[_build_repository(repo, where) for repo in repositories],
        jenkins=_build_jenkins_config(config.get("jenkins"), where),
    )


def build_source_config_from_dict(config: Optional[dict]) -> SourceConfig:
    """
    Build a source config from a parsed YAML document.

    Both the resource form (groups under ``spec``) and a bare top-level
    ``groups`` list are accepted.

    Args:
        config: Parsed YAML document, or None for an empty file

    Returns:
        SourceConfig instance

    Raises:
        SourceConfigError: If the document does not have the expected shape
    """
    if config is None:
        return SourceConfig()
    if not isinstance(config, dict):
        raise SourceConfigError("source config must be a mapping")

    spec = config.get("spec", config)
    if spec is None:
        return SourceConfig()
    if not isinstance(spec, dict):
        raise SourceConfigError("spec must be a mapping")

    groups = spec.get("groups") or []
    if not isinstance(groups, list):
        raise SourceConfigError("groups must be a list")

    return SourceConfig(
        groups=[_build_group(group, i) for i, group in enumerate(groups)],
        jenkins=_build_jenkins_config(spec.get("jenkins"), "spec"),
    )


def load_source_config(path: PathLike) -> SourceConfig:
    """
    Load the source config file.

    A missing file is not an error: an empty config is returned.

    Args:
        path: Path to the source-config.yaml file

    Returns:
        SourceConfig instance

    Raises:
        SourceConfigError: If the file cannot be parsed
    """
    if not file_exists(path):
        log_info(f"the source config file {info(path)} does not exist")
        return SourceConfig()

    text = read_text(path)
    try:
        return build_source_config_from_dict(yaml.safe_load(text))
    except (yaml.YAMLError, SourceConfigError) as e:
        raise SourceConfigError(f"failed to load file {path}: {e}") from e


def provider_kind_for(provider: str) -> str:
    """Guess the provider kind from a git server URL."""
    host = urlparse(provider).netloc or provider
    for fragment, kind in PROVIDER_KINDS.items():
        if fragment in host.lower():
            return kind
    return ""


def _join_url(*parts: str) -> str:
    base = parts[0].rstrip("/")
    if "://" not in base:
        base = "https://" + base
    rest = [p.strip("/") for p in parts[1:] if p]
    return "/".join([base] + rest)


def default_values(config: SourceConfig, group: RepositoryGroup, repo: Repository) -> None:
    """
    Apply group level defaults to a repository.

    Only unset fields are filled in. A repository without a jenkins block
    never gets one from its group.

    Args:
        config: The whole source config
        group: The group containing the repository
        repo: The repository to default
    """
    if not group.provider:
        group.provider = DEFAULT_PROVIDER
    if not group.provider_kind:
        group.provider_kind = provider_kind_for(group.provider)
    if not group.provider_name:
        group.provider_name = group.provider_kind

    if not repo.url:
        repo.url = _join_url(group.provider, group.owner, repo.name)
    if not repo.http_clone_url:
        repo.http_clone_url = repo.url if repo.url.endswith(".git") else repo.url + ".git"

    if repo.jenkins is None:
        return
    for defaults in (group.jenkins, config.jenkins):
        if defaults is None:
            continue
        if not repo.jenkins.server:
            repo.jenkins.server = defaults.server
        if not repo.jenkins.xml_template:
            repo.jenkins.xml_template = defaults.xml_template
