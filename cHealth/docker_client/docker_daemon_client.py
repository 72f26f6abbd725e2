import logging
from datetime import datetime
from typing import Dict, List, Optional

from docker import DockerClient
from docker.errors import DockerException, NotFound
from docker.models.containers import Container
from pydantic import ValidationError
from requests.exceptions import RequestException

from cHealth.config import Config
from cHealth.docker_client.container_runtime import (ContainerNotFoundError, ContainerRuntime, RuntimeQueryError,
                                                     RuntimeUnavailableError)
from cHealth.docker_client.container_stat_sampler import ContainerStatSampler
from cHealth.models import ContainerDescriptor, HealthState, PortMapping, ResourceUsage


def read_iso_timestamp(timestamp_str: str) -> datetime:
    """
    A utility method to convert Docker API's timestamp into datetime objects.
    Removes characters after `.` or `Z` in the timestamp as datetime doesnt accept nanoseconds
    :param timestamp_str: ISO 8061 string timestamp
    :return: corresponding datetime instance
    """
    # Hard coding to 19 chars as that filters out excess text
    return datetime.fromisoformat(timestamp_str[:19])


class DockerDaemonClient(ContainerRuntime):
    """
    This class is a wrapper around DockerClient that answers the health check queries and converts the Docker API's
    inspect output into ContainerDescriptor objects.
    """

    def __init__(self, config: Config, client: DockerClient = None):
        self.__config = config
        self.__client: Optional[DockerClient] = client
        self.__containers: Dict[str, Container] = {}

    def connect(self) -> None:
        """
        Instantiates the DockerClient with the given config options. Without an explicit socket url the standard
        DOCKER_HOST / DOCKER_TLS_VERIFY / DOCKER_CERT_PATH variables are honoured.

        :raises RuntimeUnavailableError: If the client cannot be created
        """
        if self.__client:
            return

        try:
            if self.__config.docker_socket_url:
                self.__client = DockerClient(base_url=self.__config.docker_socket_url,
                                             timeout=self.__config.docker_timeout)
            else:
                self.__client = DockerClient.from_env(timeout=self.__config.docker_timeout)
        except DockerException as e:
            self.__client = None
            logging.info(f"DockerDaemonClient - Failed to establish connection to docker daemon ({e})")
            raise RuntimeUnavailableError(str(e)) from e

    def close(self) -> None:
        self.__containers.clear()
        if self.__client:
            self.__client.close()
            self.__client = None

    def ping(self) -> None:
        self.connect()
        try:
            self.__client.ping()
        except (DockerException, RequestException) as e:
            logging.info(f"DockerDaemonClient - Ping failed ({e})")
            raise RuntimeUnavailableError(str(e)) from e

    def list_running_identifiers(self) -> List[str]:
        self.connect()
        try:
            containers = self.__client.containers.list() or []
        except (DockerException, RequestException) as e:
            logging.error(f"DockerDaemonClient - Failed to get containers list ({e})")
            raise RuntimeUnavailableError(str(e)) from e

        logging.debug(f"DockerDaemonClient - {len(containers)} running container(s)")
        return [container.id for container in containers]

    def inspect(self, container_key: str) -> ContainerDescriptor:
        self.connect()
        try:
            container = self.__client.containers.get(container_key)
        except NotFound as e:
            logging.info(f"DockerDaemonClient - No such container {container_key}")
            raise ContainerNotFoundError(container_key) from e
        except (DockerException, RequestException) as e:
            logging.info(f"DockerDaemonClient - Failed to inspect {container_key} ({e})")
            raise ContainerNotFoundError(container_key, str(e)) from e

        self.__containers[container_key] = container
        try:
            return self.__generate_descriptor(container)
        except (KeyError, TypeError, ValueError, ValidationError) as e:
            logging.error(f"DockerDaemonClient - Unexpected inspect output for {container_key} ({e})")
            raise RuntimeQueryError(f"Unexpected inspect output for {container_key}") from e

    def sample_resource_usage(self, container_key: str) -> Optional[ResourceUsage]:
        container = self.__containers.get(container_key)
        if container is None:
            try:
                self.connect()
                container = self.__client.containers.get(container_key)
            except (RuntimeQueryError, DockerException, RequestException) as e:
                logging.debug(f"DockerDaemonClient - Cannot sample {container_key} ({e})")
                return None

        return ContainerStatSampler(container).sample()

    def __generate_descriptor(self, container: Container) -> ContainerDescriptor:
        """
        Generates a ContainerDescriptor from the container's inspect output.

        :param container: The Container to describe
        :return: A ContainerDescriptor
        """
        attrs = container.attrs
        state = attrs['State']
        health = state.get('Health') or {}

        descriptor = {
            'id': attrs['Id'],
            'name': attrs['Name'].lstrip('/'),
            'image': attrs['Config']['Image'],
            'created_at': read_iso_timestamp(attrs['Created']),
            'state': state['Status'],
            'pid': state.get('Pid') or 0,
            'restart_count': attrs.get('RestartCount') or 0,
            'health': health.get('Status') or HealthState.NONE,
            'health_output': self.__last_health_output(health),
            'ports': self.__published_ports(attrs),
        }

        return ContainerDescriptor(**descriptor)

    @staticmethod
    def __last_health_output(health: Dict) -> Optional[str]:
        log = health.get('Log') or []
        if not log:
            return None
        return log[-1].get('Output') or None

    @staticmethod
    def __published_ports(attrs: Dict) -> List[PortMapping]:
        """
        Collects host bindings from NetworkSettings.Ports. Docker lists an IPv4 and an IPv6 binding for the same host
        port; only the first is kept.
        """
        ports = []
        seen = set()
        bindings_by_port = (attrs.get('NetworkSettings') or {}).get('Ports') or {}

        for port_proto, bindings in bindings_by_port.items():
            if not bindings:
                continue
            container_port, _, protocol = port_proto.partition('/')
            for binding in bindings:
                key = (binding.get('HostPort'), port_proto)
                if key in seen:
                    continue
                seen.add(key)
                ports.append(PortMapping(container_port=int(container_port), protocol=protocol or 'tcp',
                                         host_ip=binding.get('HostIp') or '', host_port=binding.get('HostPort') or ''))

        return ports
