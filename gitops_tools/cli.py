"""Command-line interface for GitOps Tools."""

import sys

import click

from . import config, jenkins, rename
from .utils import GitOpsError


class AliasedCommand(click.Command):
    """A Click Command that can be invoked by alias."""

    def __init__(self, *args, **kwargs):
        self.aliases = kwargs.pop('aliases', [])
        super().__init__(*args, **kwargs)


class AliasedGroup(click.Group):
    """A Click Group that supports command aliases."""

    def __init__(self, *args, **kwargs):
        self.aliases = kwargs.pop('aliases', [])
        super().__init__(*args, **kwargs)

    def get_command(self, ctx, cmd_name):
        rv = click.Group.get_command(self, ctx, cmd_name)
        if rv is not None:
            return rv
        # Check if cmd_name is an alias for any command
        for name, cmd in self.commands.items():
            if hasattr(cmd, 'aliases') and cmd_name in cmd.aliases:
                return cmd
        return None

    def format_commands(self, ctx, formatter):
        """Extra format methods for multi methods that adds all the commands."""
        commands = []
        for subcommand in self.list_commands(ctx):
            cmd = self.get_command(ctx, subcommand)
            if cmd is None:
                continue
            if cmd.hidden:
                continue

            cmd_name = subcommand
            if hasattr(cmd, 'aliases') and cmd.aliases:
                cmd_name = f"{subcommand} ({', '.join(cmd.aliases)})"

            commands.append((cmd_name, cmd))

        if len(commands):
            limit = formatter.width - 6 - max(len(cmd[0]) for cmd in commands)

            rows = []
            for subcommand, cmd in commands:
                help = cmd.get_short_help_str(limit)
                rows.append((subcommand, help))

            if rows:
                with formatter.section("Commands"):
                    formatter.write_dl(rows)


@click.group(cls=AliasedGroup)
@click.option("--env-file", type=click.Path(exists=True), help="Path to .env file")
@click.pass_context
def cli(ctx, env_file):
    """GitOps Tools - Generate Jenkins job values and tidy Kubernetes manifests."""
    ctx.ensure_object(dict)
    if env_file:
        config.reset_config()
        config.get_config(env_file)
    else:
        config.get_config()


# Jenkins commands
@cli.group(name="jenkins", cls=AliasedGroup)
def jenkins_group():
    """
    Jenkins operations.

    Common commands:
        gt jenkins jobs
        gt jenkins jobs -d ./cluster --default-xml-template templates/job.xml
    """
    pass


@jenkins_group.command("jobs", cls=AliasedCommand, aliases=["job"])
@click.option("--dir", "-d", default=None, show_default=".", help="The current working directory")
@click.option(
    "--out", "-o", default=None,
    help="The output directory for the generated config files. Defaults to the jenkins dir in the working directory",
)
@click.option(
    "--config", "-c", "config_file", default=None,
    help="The configuration file to load for the repository configurations. Defaults to ./.jx/gitops/source-config.yaml",
)
@click.option(
    "--default-xml-template", default=None,
    help="The default XML template file if none is configured for a repository",
)
def jobs(dir, out, config_file, default_xml_template):
    """Generates the Jenkins Jobs helm files."""
    try:
        jenkins.generate_jobs(dir, out, config_file, default_xml_template)
    except GitOpsError as e:
        click.echo(f"❌ Error: {e}", err=True)
        sys.exit(1)


# Rename command
@cli.command("rename")
@click.option("--dir", "-d", default=".", show_default=True,
              help="The directory to recursively look for the *.yaml or *.yml files")
def rename_cmd(dir):
    """Renames yaml files to use canonical file names based on the resource name and kind."""
    try:
        rename.rename_files(dir)
    except GitOpsError as e:
        click.echo(f"❌ Error: {e}", err=True)
        sys.exit(1)


if __name__ == "__main__":
    cli()
