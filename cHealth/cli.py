import sys

import click
from rich.console import Console
from rich.text import Text

from cHealth.config import Config, ConfigError
from cHealth.docker_client import DockerDaemonClient
from cHealth.health_check import HealthCheck
from cHealth.logger import configure_logging
from cHealth.outputs.report import ReportPrinter


@click.command(context_settings={'help_option_names': ['-h', '--help']})
@click.option('--env-file', type=click.Path(exists=True, dir_okay=False), default=None,
              help='Dotenv file to read settings from.')
@click.option('--log-level', default=None, help='Logging level, overrides LOG_LEVEL.')
@click.argument('containers', nargs=-1)
def cli(env_file, log_level, containers):
    """
    Print a health report for Docker containers.

    CONTAINERS are names or ids to check. Without any, every running container is checked. Exits with 1 when a
    container is unhealthy, not running or missing, or when the Docker daemon cannot be reached.
    """
    try:
        config = Config.load_env_from_file(env_file)
        configure_logging(log_level or config.log_level, config.log_file)
    except ConfigError as e:
        Console(stderr=True, highlight=False).print(Text.assemble(("Error:", "red"), f" {e}"))
        sys.exit(1)

    client = DockerDaemonClient(config)
    try:
        code = HealthCheck(client, ReportPrinter(config)).run(containers)
    finally:
        client.close()
    sys.exit(code)


def main():
    cli()
