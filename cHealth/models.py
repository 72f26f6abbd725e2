from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel


class ContainerState(str, Enum):
    CREATED = 'created'
    RUNNING = 'running'
    PAUSED = 'paused'
    RESTARTING = 'restarting'
    REMOVING = 'removing'
    EXITED = 'exited'
    DEAD = 'dead'


class HealthState(str, Enum):
    HEALTHY = 'healthy'
    UNHEALTHY = 'unhealthy'
    STARTING = 'starting'
    NONE = 'none'


class Outcome(str, Enum):
    HEALTHY = 'healthy'
    WARNING = 'warning'
    PROBLEM = 'problem'


class ResourceUsage(BaseModel):
    cpu_percent: Optional[float] = None
    memory_usage: Optional[int] = None
    memory_limit: Optional[int] = None
    memory_percent: Optional[float] = None
    net_rx: Optional[int] = None
    net_tx: Optional[int] = None


class PortMapping(BaseModel):
    container_port: int
    protocol: str = 'tcp'
    host_ip: str = ''
    host_port: str


class ContainerDescriptor(BaseModel):
    id: str
    name: str
    image: str
    created_at: datetime
    state: ContainerState
    pid: int = 0
    restart_count: int = 0
    health: HealthState = HealthState.NONE
    health_output: Optional[str] = None
    ports: List[PortMapping] = []


class RunSummary(BaseModel):
    """
    Outcome counters for one run. `total` is derived so it always equals the sum of the buckets.
    """
    model_config = {'frozen': True}

    healthy: int = 0
    warnings: int = 0
    problems: int = 0

    @property
    def total(self) -> int:
        return self.healthy + self.warnings + self.problems

    def record(self, outcome: Outcome) -> 'RunSummary':
        """
        Returns a new summary with the outcome folded in.

        :param outcome: The Outcome of one checked target
        :return: The updated RunSummary
        """
        if outcome is Outcome.HEALTHY:
            return self.model_copy(update={'healthy': self.healthy + 1})
        if outcome is Outcome.WARNING:
            return self.model_copy(update={'warnings': self.warnings + 1})
        return self.model_copy(update={'problems': self.problems + 1})
