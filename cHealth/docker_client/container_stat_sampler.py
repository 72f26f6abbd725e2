import logging
from typing import Dict, Optional, Tuple

from docker.errors import DockerException
from docker.models.containers import Container
from pydantic import ValidationError
from requests.exceptions import RequestException

from cHealth.models import ResourceUsage


class ContainerStatSampler:
    """
    Takes a single stats snapshot of a container and reduces it to the figures `docker stats` shows.
    """

    def __init__(self, container: Container):
        self.container = container
        self.stats: Dict = {}

    def sample(self) -> Optional[ResourceUsage]:
        try:
            self.stats = self.container.stats(stream=False) or {}
        except (DockerException, RequestException) as e:
            logging.debug(f"StatSampler - Failed to get stats for `{self.container.name}` ({e})")
            return None

        try:
            usage = {}
            cpu_percent = self.get_cpu_percent()
            if cpu_percent is not None:
                usage['cpu_percent'] = cpu_percent
            usage |= self.get_memory_stats()
            usage |= self.get_network_io()

            return ResourceUsage(**usage) if usage else None
        except (AttributeError, KeyError, TypeError, ValueError, ValidationError) as e:
            logging.debug(f"StatSampler - Unexpected stats for `{self.container.name}` ({e})")
            return None

    def get_cpu_percent(self) -> Optional[float]:
        """
        Returns a container's CPU usage relative to a single core, as `docker stats` reports it
        :return: a float value or None when the snapshot has no usable CPU figures
        """
        stats = self.stats

        try:
            cpu_total = stats['cpu_stats']['cpu_usage']['total_usage']
            cpu_system = stats['cpu_stats']['system_cpu_usage']
            precpu_total = stats['precpu_stats']['cpu_usage']['total_usage']
            precpu_system = stats['precpu_stats']['system_cpu_usage']

            count = stats['cpu_stats'].get('online_cpus')
            if count is None:
                count = len(stats['cpu_stats']['cpu_usage'].get('percpu_usage') or [])
        except (KeyError, TypeError) as e:
            logging.debug(f"StatSampler - Failed to get CPU usage for `{self.container.name}` ({e})")
            return None

        # CPU usage % = cpu_delta / system_cpu_delta * number_of_cpus * 100
        cpu_delta = cpu_total - precpu_total
        system_cpu_delta = cpu_system - precpu_system
        if system_cpu_delta <= 0 or cpu_delta < 0:
            return 0.0
        return cpu_delta / system_cpu_delta * max(count, 1) * 100

    def get_memory_stats(self) -> Dict:
        """
        Returns a container's memory usage without page cache, its limit and the percentage of the limit in use
        :return: a dict with `memory_usage`, `memory_limit` and `memory_percent` keys, empty if unavailable
        """
        memory_stats = {}

        try:
            container_mem_stats = self.stats['memory_stats']
            usage = container_mem_stats['usage']
            limit = container_mem_stats['limit']
        except (KeyError, TypeError) as e:
            logging.debug(f"StatSampler - Failed to get Memory stats for `{self.container.name}` ({e})")
            return memory_stats

        # cgroup v2 reports inactive_file, cgroup v1 total_inactive_file
        details = container_mem_stats.get('stats') or {}
        for cache_key in ('inactive_file', 'total_inactive_file'):
            if cache_key in details and details[cache_key] < usage:
                usage -= details[cache_key]
                break

        memory_stats['memory_usage'] = usage
        memory_stats['memory_limit'] = limit
        if limit:
            memory_stats['memory_percent'] = usage / limit * 100

        return memory_stats

    def get_network_io(self) -> Dict:
        """
        Returns the bytes received and transmitted over all of a container's interfaces
        :return: a dict with `net_rx` and `net_tx` keys, empty if the container has no networks
        """
        networks = self.stats.get('networks')
        if not networks:
            logging.debug(f"StatSampler - No network stats for `{self.container.name}`")
            return {}

        rx, tx = self._sum_network_io(networks)
        return {'net_rx': rx, 'net_tx': tx}

    @staticmethod
    def _sum_network_io(networks: Dict) -> Tuple[int, int]:
        rx = sum(interface.get('rx_bytes', 0) for interface in networks.values())
        tx = sum(interface.get('tx_bytes', 0) for interface in networks.values())
        return rx, tx
