from cHealth.docker_client.container_runtime import (ContainerNotFoundError, ContainerRuntime, RuntimeQueryError,
                                                     RuntimeUnavailableError)
from cHealth.docker_client.docker_daemon_client import DockerDaemonClient
