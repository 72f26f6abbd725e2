from typing import Optional

from cHealth.models import ContainerDescriptor, ContainerState, HealthState, Outcome, RunSummary

EXIT_OK = 0
EXIT_FAILURE = 1


def classify(descriptor: Optional[ContainerDescriptor]) -> Outcome:
    """
    Maps a container to its Outcome. A missing descriptor means the lookup failed.

    +-------------------+--------------+---------+
    | state             | health       | outcome |
    +===================+==============+=========+
    | lookup failed     | -            | PROBLEM |
    | anything but      | -            | PROBLEM |
    | running           |              |         |
    | running           | unhealthy    | WARNING |
    | running           | healthy,     | HEALTHY |
    |                   | starting,    |         |
    |                   | none         |         |
    +-------------------+--------------+---------+
    """
    if descriptor is None:
        return Outcome.PROBLEM

    if descriptor.state is not ContainerState.RUNNING:
        return Outcome.PROBLEM

    if descriptor.health is HealthState.UNHEALTHY:
        return Outcome.WARNING

    return Outcome.HEALTHY


def exit_code(summary: RunSummary) -> int:
    if summary.warnings or summary.problems:
        return EXIT_FAILURE
    return EXIT_OK
