from datetime import datetime
from typing import List, Optional, Tuple, Union

from rich.console import Group, RenderableType
from rich.rule import Rule
from rich.table import Table
from rich.text import Text

from cHealth.config import Config
from cHealth.models import ContainerDescriptor, ContainerState, HealthState, PortMapping, ResourceUsage

NOT_AVAILABLE = 'n/a'
NO_PORTS = 'none'
NO_HEALTH_OUTPUT = 'no output'
PORT_ARROW = '→'

LABEL_WIDTH = 14


class RichFormatter:
    """
    Turns descriptors into rich renderables. Nothing here touches the console or the runtime.
    """

    def __init__(self, config: Config):
        self.config = config

    def get_container_block(self, descriptor: ContainerDescriptor,
                            usage: Optional[ResourceUsage] = None) -> RenderableType:
        title = Text.assemble(("  Container: ", "bold"), (descriptor.name, "bold cyan"))

        grid = Table.grid(padding=(0, 1))
        grid.add_column(width=LABEL_WIDTH)
        grid.add_column()
        for label, value in self.get_detail_rows(descriptor, usage):
            grid.add_row(Text(f"  {label}:"), value)

        parts = [Text(""), title, Rule(style="dim"), grid]
        if descriptor.health is HealthState.UNHEALTHY:
            parts.extend([
                Text(""),
                Text.assemble(("⚠", "yellow"), "  Last healthcheck output:"),
                Text(self.get_health_excerpt(descriptor), style="dim"),
            ])
        return Group(*parts)

    def get_detail_rows(self, descriptor: ContainerDescriptor,
                        usage: Optional[ResourceUsage] = None) -> List[Tuple[str, Text]]:
        return [
            ("Image", Text(descriptor.image)),
            ("Created", Text(self.format_created(descriptor.created_at))),
            ("State", Text(descriptor.state.value, style=self.get_state_style(descriptor.state))),
            ("Health", Text(descriptor.health.value, style=self.get_health_style(descriptor.health))),
            ("PID", Text(str(descriptor.pid))),
            ("Restarts", Text(str(descriptor.restart_count))),
            ("CPU", Text(self.format_cpu(usage))),
            ("Memory", Text(self.format_memory(usage))),
            ("Net I/O", Text(self.format_net_io(usage))),
            ("Ports", Text(self.format_ports(descriptor.ports))),
        ]

    def get_state_style(self, state: ContainerState) -> str:
        if state is ContainerState.RUNNING:
            return self.config.container_running_style
        if state is ContainerState.PAUSED:
            return self.config.container_paused_style
        return self.config.container_other_style

    def get_health_style(self, health: HealthState) -> str:
        health_styles = {
            HealthState.HEALTHY: self.config.health_healthy_style,
            HealthState.UNHEALTHY: self.config.health_unhealthy_style,
            HealthState.STARTING: self.config.health_starting_style,
            HealthState.NONE: self.config.health_none_style,
        }
        return health_styles[health]

    def get_health_excerpt(self, descriptor: ContainerDescriptor) -> str:
        """
        Returns the first `health_log_lines` lines of the last health check output, indented for the report.
        """
        output = (descriptor.health_output or '').strip('\n')
        if not output.strip():
            return f"  {NO_HEALTH_OUTPUT}"
        lines = output.splitlines()[:self.config.health_log_lines]
        return "\n".join(f"  {line}" for line in lines)

    @staticmethod
    def format_created(created_at: datetime) -> str:
        return created_at.date().isoformat()

    @staticmethod
    def format_ports(ports: List[PortMapping]) -> str:
        if not ports:
            return NO_PORTS
        return ", ".join(f"{port.host_port} {PORT_ARROW} {port.container_port}/{port.protocol}" for port in ports)

    @staticmethod
    def format_cpu(usage: Optional[ResourceUsage]) -> str:
        if usage is None or usage.cpu_percent is None:
            return NOT_AVAILABLE
        return f"{usage.cpu_percent:.2f}%"

    def format_memory(self, usage: Optional[ResourceUsage]) -> str:
        if usage is None or usage.memory_usage is None:
            return NOT_AVAILABLE
        memory = f"{self._auto_unit(usage.memory_usage)} / {self._auto_unit(usage.memory_limit)}"
        if usage.memory_percent is not None:
            memory += f" ({usage.memory_percent:.2f}%)"
        return memory

    def format_net_io(self, usage: Optional[ResourceUsage]) -> str:
        if usage is None or usage.net_rx is None:
            return NOT_AVAILABLE
        return f"{self._auto_unit(usage.net_rx)} / {self._auto_unit(usage.net_tx)}"

    @staticmethod
    def _auto_unit(number: Union[int, float, None]) -> str:
        if number is None:
            return NOT_AVAILABLE
        units = [
            (1125899906842624, 'PiB'),
            (1099511627776, 'TiB'),
            (1073741824, 'GiB'),
            (1048576, 'MiB'),
            (1024, 'KiB'),
        ]

        for unit, suffix in units:
            value = float(number) / unit
            if value >= 1:
                precision = 0
                if value < 10:
                    precision = 2
                elif value < 100:
                    precision = 1
                return '{:.{decimal}f}{suffix}'.format(value, decimal=precision, suffix=suffix)

        return '{!s}B'.format(number)
