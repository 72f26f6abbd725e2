from datetime import datetime
from typing import Dict, List, Optional

from cHealth.config import Config
from cHealth.docker_client.container_runtime import (ContainerNotFoundError, ContainerRuntime, RuntimeQueryError,
                                                     RuntimeUnavailableError)
from cHealth.models import ContainerDescriptor, ResourceUsage


def make_config(**overrides) -> Config:
    options = {
        'docker_socket_url': None,
        'docker_timeout': 60,
        'health_log_lines': 5,
        'log_level': 'WARNING',
        'log_file': None,
        'container_running_style': 'green',
        'container_paused_style': 'yellow',
        'container_other_style': 'red',
        'health_healthy_style': 'green',
        'health_unhealthy_style': 'red',
        'health_starting_style': 'yellow',
        'health_none_style': 'dim',
    }
    options.update(overrides)
    return Config(**options)


def make_descriptor(name: str, state: str = 'running', health: str = 'none', **fields) -> ContainerDescriptor:
    descriptor = {
        'id': f"{name}-id",
        'name': name,
        'image': f"{name}:latest",
        'created_at': datetime(2024, 3, 1, 12, 30, 45),
        'state': state,
        'health': health,
        'pid': 4242 if state == 'running' else 0,
    }
    descriptor.update(fields)
    return ContainerDescriptor(**descriptor)


class FakeRuntime(ContainerRuntime):

    def __init__(self, descriptors: List[ContainerDescriptor] = (), running: Optional[List[str]] = None,
                 usage: Dict[str, ResourceUsage] = None, reachable: bool = True, malformed: List[str] = ()):
        self.descriptors = {d.name: d for d in descriptors}
        self.running = running if running is not None else [d.name for d in descriptors if d.state == 'running']
        self.usage = usage or {}
        self.reachable = reachable
        self.malformed = set(malformed)
        self.calls = []

    def ping(self) -> None:
        self.calls.append(('ping',))
        if not self.reachable:
            raise RuntimeUnavailableError("connection refused")

    def list_running_identifiers(self) -> List[str]:
        self.calls.append(('list',))
        return list(self.running)

    def inspect(self, container_key: str) -> ContainerDescriptor:
        self.calls.append(('inspect', container_key))
        if container_key in self.malformed:
            raise RuntimeQueryError(f"Unexpected inspect output for {container_key}")
        if container_key not in self.descriptors:
            raise ContainerNotFoundError(container_key)
        return self.descriptors[container_key]

    def sample_resource_usage(self, container_key: str) -> Optional[ResourceUsage]:
        self.calls.append(('sample', container_key))
        return self.usage.get(container_key)
