"""Jenkins job generation: render per-repository job XML into Helm values files."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from . import templater
from .config import get_config
from .sourceconfig import (
    JenkinsConfig,
    Repository,
    RepositoryGroup,
    SourceConfig,
    default_values,
    load_source_config,
)
from .utils import (
    GitOpsError,
    PathLike,
    ensure_dir,
    file_exists,
    info,
    log_info,
    read_text,
    to_yaml,
    write_text,
)

VALUES_FILE_NAME = "values.yaml"


@dataclass
class JenkinsTemplateConfig:
    """The data needed to render one Jenkins job."""
    # Jenkins server the job belongs to
    server: str
    # Job name in the values file (the repository name)
    key: str
    # Resolved template path, used in error messages
    xml_template_file: str
    xml_template_text: str
    template_data: Dict[str, Any] = field(default_factory=dict)


# Jenkins server name -> job configs in the order the repositories were processed
JenkinsServers = Dict[str, List[JenkinsTemplateConfig]]


def create_template_data(group: RepositoryGroup, repo: Repository) -> Dict[str, Any]:
    """Build the template variables for a repository."""
    return {
        "Owner": group.owner,
        "GitServerURL": group.provider,
        "GitKind": group.provider_kind,
        "GitName": group.provider_name,
        "Repository": repo.name,
        "URL": repo.url,
        "CloneURL": repo.http_clone_url,
    }


def resolve_xml_template(dir: PathLike, jenkins_config: JenkinsConfig, default_xml_template: str) -> str:
    """
    Resolve the XML template file for a repository.

    Args:
        dir: Working directory repository templates are relative to
        jenkins_config: The repository Jenkins config
        default_xml_template: Template used when the repository has none

    Returns:
        The template path, or an empty string if there is none

    Raises:
        GitOpsError: If the repository template does not exist
    """
    if not jenkins_config.xml_template:
        return default_xml_template or ""

    xml_template = str(Path(dir) / jenkins_config.xml_template)
    if not file_exists(xml_template):
        raise GitOpsError(f"the xmlTemplate file {xml_template} does not exist")
    return xml_template


def process_jenkins_config(
    servers: JenkinsServers,
    group: RepositoryGroup,
    repo: Repository,
    jenkins_config: JenkinsConfig,
    dir: PathLike = ".",
    default_xml_template: str = "",
) -> Optional[JenkinsTemplateConfig]:
    """
    Add the job for a repository to the server it is built on.

    Repositories without a server or a template are skipped.

    Args:
        servers: Jobs collected so far, updated in place
        group: Group of the repository, already defaulted
        repo: The repository, already defaulted
        jenkins_config: The repository Jenkins config
        dir: Working directory
        default_xml_template: Template used when the repository has none

    Returns:
        The added job config, or None if the repository was skipped

    Raises:
        GitOpsError: If the template is missing or cannot be read
    """
    server = jenkins_config.server
    if not server:
        log_info(f"ignoring repository {info(repo.url)} as it has no Jenkins server defined")
        return None

    xml_template = resolve_xml_template(dir, jenkins_config, default_xml_template)
    if not xml_template:
        # same message as a missing server
        log_info(f"ignoring repository {info(repo.url)} as it has no Jenkins server defined")
        return None

    job = JenkinsTemplateConfig(
        server=server,
        key=repo.name,
        xml_template_file=xml_template,
        xml_template_text=read_text(xml_template),
        template_data=create_template_data(group, repo),
    )
    servers.setdefault(server, []).append(job)
    return job


def collect_jenkins_servers(
    source_config: SourceConfig,
    dir: PathLike = ".",
    default_xml_template: str = "",
) -> JenkinsServers:
    """
    Group the Jenkins jobs of every repository by server.

    Group defaults are applied to each repository before its Jenkins
    config is looked at.

    Raises:
        GitOpsError: If a job template is missing or cannot be read
    """
    servers: JenkinsServers = {}
    for group in source_config.groups:
        for repo in group.repositories:
            default_values(source_config, group, repo)
            if repo.jenkins is None:
                continue
            try:
                process_jenkins_config(servers, group, repo, repo.jenkins, dir, default_xml_template)
            except GitOpsError as e:
                raise GitOpsError(f"failed to process Jenkins Config: {e}") from e
    return servers


def render_jobs(server: str, configs: List[JenkinsTemplateConfig]) -> Dict[str, str]:
    """
    Render the jobs of a server.

    Jobs sharing a key overwrite each other; the last one wins.

    Raises:
        TemplateError: If a template fails to evaluate
    """
    env = templater.create_environment()
    jobs: Dict[str, str] = {}
    for jcfg in configs:
        jobs[jcfg.key] = templater.evaluate(
            env,
            jcfg.template_data,
            jcfg.xml_template_text,
            jcfg.xml_template_file,
            f"Jenkins Server {server}",
        )
    return jobs


def create_values(jobs: Dict[str, str]) -> Dict[str, Any]:
    """Wrap rendered jobs in the Jenkins chart values structure."""
    return {"master": {"jobs": jobs}}


def write_server_values(out_dir: PathLike, server: str, configs: List[JenkinsTemplateConfig]) -> Path:
    """
    Render the jobs of a server and write its values.yaml file.

    Returns:
        Path of the written file

    Raises:
        GitOpsError: If rendering or writing fails
    """
    dir = ensure_dir(Path(out_dir) / server)
    path = dir / VALUES_FILE_NAME
    log_info(f"creating Jenkins values.yaml file {info(path)}")

    values = create_values(render_jobs(server, configs))
    try:
        data = to_yaml(values)
    except GitOpsError as e:
        raise GitOpsError(f"failed to marshal values YAML for server {server}: {e}") from e

    write_text(path, data)
    return path


def generate_jobs(
    dir: Optional[str] = None,
    out_dir: Optional[str] = None,
    config_file: Optional[str] = None,
    default_xml_template: Optional[str] = None,
) -> List[Path]:
    """
    Generate the Jenkins values.yaml files for every Jenkins server.

    Args:
        dir: Working directory (default: from config, usually ".")
        out_dir: Output directory (default: <dir>/jenkins)
        config_file: Source config file (default: <dir>/.jx/gitops/source-config.yaml)
        default_xml_template: Template for repositories without one

    Returns:
        Paths of the values.yaml files written

    Raises:
        GitOpsError: If generation fails
    """
    config = get_config()
    dir = dir or config.dir
    config_file = config_file or str(config.get_source_config_file(dir))
    out_dir = out_dir or str(config.get_jenkins_out_dir(dir))
    if default_xml_template is None:
        default_xml_template = config.jenkins_default_xml_template

    source_config = load_source_config(config_file)
    if not source_config.groups:
        return []

    if default_xml_template and not file_exists(default_xml_template):
        raise GitOpsError(f"the default-xml-template file {default_xml_template} does not exist")

    servers = collect_jenkins_servers(source_config, dir, default_xml_template)

    written = []
    for server, configs in servers.items():
        written.append(write_server_values(out_dir, server, configs))

    log_info(f"✅ Generated {len(written)} Jenkins values file(s) in {out_dir}")
    return written
