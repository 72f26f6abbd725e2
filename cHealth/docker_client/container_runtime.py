from abc import ABC, abstractmethod
from typing import List, Optional

from cHealth.models import ContainerDescriptor, ResourceUsage


class RuntimeQueryError(Exception):
    pass


class RuntimeUnavailableError(RuntimeQueryError):
    pass


class ContainerNotFoundError(RuntimeQueryError):
    def __init__(self, container_key: str, reason: str = ''):
        super().__init__(f"Container {container_key} not found" + (f" ({reason})" if reason else ''))
        self.container_key = container_key
        self.reason = reason


class ContainerRuntime(ABC):
    """
    The queries a health check needs from a container runtime. Implementations translate their own failures into
    RuntimeQueryError subclasses so callers never see transport specific exceptions.
    """

    @abstractmethod
    def ping(self) -> None:
        """
        Confirms the runtime is reachable.

        :raises RuntimeUnavailableError: If the runtime cannot be reached
        """
        ...

    @abstractmethod
    def list_running_identifiers(self) -> List[str]:
        """
        Returns the ids of the currently running containers.
        """
        ...

    @abstractmethod
    def inspect(self, container_key: str) -> ContainerDescriptor:
        """
        Returns a fresh descriptor for the container with the given name or id.

        :raises ContainerNotFoundError: If the container does not exist or the lookup failed
        """
        ...

    @abstractmethod
    def sample_resource_usage(self, container_key: str) -> Optional[ResourceUsage]:
        """
        Returns a single resource usage sample, or None if stats are unavailable. Never raises.
        """
        ...

    def close(self) -> None:
        pass
