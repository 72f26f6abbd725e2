import logging
from typing import List, Optional, Sequence

from cHealth.classifier import EXIT_FAILURE, EXIT_OK, classify, exit_code
from cHealth.docker_client.container_runtime import (ContainerNotFoundError, ContainerRuntime, RuntimeQueryError,
                                                     RuntimeUnavailableError)
from cHealth.models import ContainerDescriptor, ContainerState, Outcome, RunSummary
from cHealth.outputs.report import ReportPrinter

DAEMON_UNREACHABLE = "Cannot connect to Docker daemon. Is it running?"
NO_RUNNING_CONTAINERS = "No running containers found."


class HealthCheck:
    """
    Runs one health report: resolves the targets, checks them one after another and folds every Outcome into a
    RunSummary that decides the exit code.
    """

    def __init__(self, runtime: ContainerRuntime, printer: ReportPrinter):
        self.runtime = runtime
        self.printer = printer

    def run(self, targets: Sequence[str] = ()) -> int:
        """
        :param targets: Container names or ids. When empty, every running container is checked
        :return: The process exit code
        """
        try:
            self.runtime.ping()
            resolved = self.resolve_targets(targets)
        except RuntimeUnavailableError as e:
            self.printer.print_error(f"{DAEMON_UNREACHABLE} ({e})")
            return EXIT_FAILURE

        if not resolved:
            self.printer.print_info(NO_RUNNING_CONTAINERS)
            return EXIT_OK

        self.printer.print_header()
        summary = self.check_all(resolved)
        self.printer.print_summary(summary)
        logging.info(f"HealthCheck - {summary.total} checked, {summary.healthy} healthy, "
                     f"{summary.warnings} warnings, {summary.problems} problems")
        return exit_code(summary)

    def resolve_targets(self, targets: Sequence[str]) -> List[str]:
        if targets:
            return list(targets)
        return self.runtime.list_running_identifiers()

    def check_all(self, container_keys: Sequence[str]) -> RunSummary:
        summary = RunSummary()
        for container_key in container_keys:
            summary = summary.record(self.check_container(container_key))
        return summary

    def check_container(self, container_key: str) -> Outcome:
        descriptor = self.fetch_descriptor(container_key)
        if descriptor is None:
            return classify(None)

        usage = None
        if descriptor.state is ContainerState.RUNNING:
            usage = self.runtime.sample_resource_usage(container_key)
            if usage is None:
                logging.debug(f"HealthCheck - No resource usage for {descriptor.name}")

        self.printer.print_container(descriptor, usage)
        return classify(descriptor)

    def fetch_descriptor(self, container_key: str) -> Optional[ContainerDescriptor]:
        try:
            return self.runtime.inspect(container_key)
        except ContainerNotFoundError as e:
            self.printer.print_not_found(container_key, e.reason)
        except RuntimeQueryError as e:
            logging.info(f"HealthCheck - Lookup of {container_key} failed ({e})")
            self.printer.print_lookup_failed(container_key, str(e))
        return None
