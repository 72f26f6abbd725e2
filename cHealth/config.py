import os

from dotenv import load_dotenv


class ConfigError(Exception):
    pass


def _read_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or value == '':
        return default
    try:
        number = int(value)
    except ValueError:
        raise ConfigError(f"{name} must be an integer, got '{value}'")
    if number <= 0:
        raise ConfigError(f"{name} must be positive, got {number}")
    return number


class Config:
    def __init__(self, docker_socket_url, docker_timeout, health_log_lines, log_level, log_file,
                 container_running_style, container_paused_style, container_other_style, health_healthy_style,
                 health_unhealthy_style, health_starting_style, health_none_style):
        # Docker daemon options
        self.docker_socket_url = docker_socket_url
        self.docker_timeout = docker_timeout

        # Report options
        self.health_log_lines = health_log_lines
        self.container_running_style = container_running_style
        self.container_paused_style = container_paused_style
        self.container_other_style = container_other_style
        self.health_healthy_style = health_healthy_style
        self.health_unhealthy_style = health_unhealthy_style
        self.health_starting_style = health_starting_style
        self.health_none_style = health_none_style

        # Logging options
        self.log_level = log_level
        self.log_file = log_file

    @staticmethod
    def load_env_from_file(path: str = None):
        """
        Builds a Config from the process environment. A dotenv file is only read when its path is given explicitly,
        variables already set in the environment take precedence over it.

        :param path: Optional path to a dotenv file
        :return: A Config instance
        :raises ConfigError: If a numeric option is not a positive integer
        """
        if path:
            load_dotenv(path)

        config = {
            # Docker daemon options
            'docker_socket_url': os.getenv("DOCKER_SOCKET_URL") or None,
            'docker_timeout': _read_int("DOCKER_TIMEOUT", 60),

            # Report options
            'health_log_lines': _read_int("HEALTH_LOG_LINES", 5),
            'container_running_style': os.getenv("CONTAINER_RUNNING_STYLE", "green"),
            'container_paused_style': os.getenv("CONTAINER_PAUSED_STYLE", "yellow"),
            'container_other_style': os.getenv("CONTAINER_OTHER_STYLE", "red"),
            'health_healthy_style': os.getenv("HEALTH_HEALTHY_STYLE", "green"),
            'health_unhealthy_style': os.getenv("HEALTH_UNHEALTHY_STYLE", "red"),
            'health_starting_style': os.getenv("HEALTH_STARTING_STYLE", "yellow"),
            'health_none_style': os.getenv("HEALTH_NONE_STYLE", "dim"),

            # Logging options
            'log_level': os.getenv("LOG_LEVEL", "WARNING"),
            'log_file': os.getenv("LOG_FILE") or None,
        }

        return Config(**config)
