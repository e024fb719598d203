"""Tests for the command-line interface."""

import yaml
from click.testing import CliRunner

from gitops_tools.cli import cli


def test_jenkins_jobs_command(tmp_path, write_source_config):
    template = tmp_path / "job.xml"
    template.write_text("<job>${Repository}</job>")
    write_source_config(tmp_path, [
        {"owner": "acme", "repositories": [{"name": "app1", "jenkins": {"server": "ci1"}}]},
    ])

    result = CliRunner().invoke(
        cli, ["jenkins", "jobs", "--dir", str(tmp_path), "--default-xml-template", str(template)]
    )

    assert result.exit_code == 0, result.output
    assert "creating Jenkins values.yaml file" in result.output
    values = yaml.safe_load((tmp_path / "jenkins" / "ci1" / "values.yaml").read_text())
    assert values["master"]["jobs"]["app1"] == "<job>app1</job>"


def test_jenkins_job_alias(tmp_path):
    """'job' is an alias for 'jobs'."""
    result = CliRunner().invoke(cli, ["jenkins", "job", "-d", str(tmp_path)])

    assert result.exit_code == 0, result.output
    assert "does not exist" in result.output


def test_jenkins_jobs_out_and_config_options(tmp_path):
    template = tmp_path / "job.xml"
    template.write_text("<job>${Owner}/${Repository}</job>")
    config_file = tmp_path / "repos.yaml"
    config_file.write_text(yaml.safe_dump({
        "spec": {"groups": [{"owner": "acme", "repositories": [{"name": "app1", "jenkins": {"server": "ci1"}}]}]},
    }))
    out_dir = tmp_path / "generated"

    result = CliRunner().invoke(cli, [
        "jenkins", "jobs",
        "-d", str(tmp_path),
        "-c", str(config_file),
        "-o", str(out_dir),
        "--default-xml-template", str(template),
    ])

    assert result.exit_code == 0, result.output
    values = yaml.safe_load((out_dir / "ci1" / "values.yaml").read_text())
    assert values == {"master": {"jobs": {"app1": "<job>acme/app1</job>"}}}


def test_jenkins_jobs_failure_exits_non_zero(tmp_path, write_source_config):
    write_source_config(tmp_path, [
        {"owner": "acme", "repositories": [{"name": "app1", "jenkins": {"server": "ci1"}}]},
    ])

    result = CliRunner().invoke(
        cli, ["jenkins", "jobs", "-d", str(tmp_path), "--default-xml-template", str(tmp_path / "nope.xml")]
    )

    assert result.exit_code == 1
    assert "❌ Error: the default-xml-template file" in result.output


def test_rename_command(tmp_path):
    (tmp_path / "svc.yaml").write_text("kind: Service\nmetadata:\n  name: web\n")

    result = CliRunner().invoke(cli, ["rename", "--dir", str(tmp_path)])

    assert result.exit_code == 0, result.output
    assert (tmp_path / "web-svc.yaml").is_file()
    assert "renaming svc.yaml => web-svc.yaml" in result.output


def test_rename_command_failure_exits_non_zero(tmp_path):
    (tmp_path / "broken.yaml").write_text("kind: [unclosed\n")

    result = CliRunner().invoke(cli, ["rename", "-d", str(tmp_path)])

    assert result.exit_code == 1
    assert "failed to load file" in result.output


def test_env_file_sets_defaults(tmp_path, monkeypatch, write_source_config):
    template = tmp_path / "job.xml"
    template.write_text("<job>${Repository}</job>")
    write_source_config(tmp_path, [
        {"owner": "acme", "repositories": [{"name": "app1", "jenkins": {"server": "ci1"}}]},
    ])
    env_file = tmp_path / ".env"
    env_file.write_text(
        f"GITOPS_DIR={tmp_path}\n"
        f"JENKINS_DEFAULT_XML_TEMPLATE={template}\n"
    )
    # register the variables so monkeypatch removes them after the test
    monkeypatch.setenv("GITOPS_DIR", "")
    monkeypatch.setenv("JENKINS_DEFAULT_XML_TEMPLATE", "")
    monkeypatch.delenv("GITOPS_DIR")
    monkeypatch.delenv("JENKINS_DEFAULT_XML_TEMPLATE")

    result = CliRunner().invoke(cli, ["--env-file", str(env_file), "jenkins", "jobs"])

    assert result.exit_code == 0, result.output
    assert (tmp_path / "jenkins" / "ci1" / "values.yaml").is_file()


def test_help_lists_aliases():
    result = CliRunner().invoke(cli, ["jenkins", "--help"])

    assert result.exit_code == 0
    assert "jobs (job)" in result.output


def test_jenkins_jobs_non_utf8_template_exits_non_zero(tmp_path, write_source_config):
    template = tmp_path / "job.xml"
    template.write_bytes("<job>caf\xe9</job>".encode("latin-1"))
    write_source_config(tmp_path, [
        {"owner": "acme", "repositories": [{"name": "app1", "jenkins": {"server": "ci1"}}]},
    ])

    result = CliRunner().invoke(
        cli, ["jenkins", "jobs", "-d", str(tmp_path), "--default-xml-template", str(template)]
    )

    assert result.exit_code == 1
    assert "failed to load file" in result.output
