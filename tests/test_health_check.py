import io
import unittest
from unittest import mock

from rich.console import Console

from cHealth.health_check import HealthCheck
from cHealth.models import Outcome, ResourceUsage
from cHealth.outputs.report import ReportPrinter
from tests.fake_runtime import FakeRuntime, make_config, make_descriptor


def counts(summary):
    return summary.total, summary.healthy, summary.warnings, summary.problems


class TestHealthCheck(unittest.TestCase):

    def setUp(self):
        self.out = Console(file=io.StringIO(), width=100, color_system=None)
        self.err = Console(file=io.StringIO(), width=100, color_system=None)
        self.printer = ReportPrinter(make_config(), console=self.out, error_console=self.err)

    def output(self) -> str:
        return self.out.file.getvalue()

    def errors(self) -> str:
        return self.err.file.getvalue()

    def mixed_runtime(self):
        return FakeRuntime([
            make_descriptor("a", health="healthy"),
            make_descriptor("b", health="unhealthy", health_output="probe failed"),
            make_descriptor("c", state="exited"),
        ])

    def test_mixed_targets_summary(self):
        check = HealthCheck(self.mixed_runtime(), self.printer)

        self.assertEqual(counts(check.check_all(["a", "b", "c"])), (3, 1, 1, 1))

    def test_mixed_targets_report(self):
        check = HealthCheck(self.mixed_runtime(), self.printer)

        self.assertEqual(check.run(["a", "b", "c"]), 1)
        output = self.output()
        self.assertIn("Summary: 3 container(s) checked", output)
        self.assertIn("1 healthy", output)
        self.assertIn("1 unhealthy (running but failing health checks)", output)
        self.assertIn("1 not running", output)
        self.assertIn("probe failed", output)

    def test_all_healthy(self):
        runtime = FakeRuntime([make_descriptor("a", health="healthy"), make_descriptor("b", health="starting")])
        check = HealthCheck(runtime, self.printer)

        self.assertEqual(check.run(["a", "b"]), 0)
        output = self.output()
        self.assertIn("2 healthy", output)
        self.assertNotIn("not running", output)
        self.assertNotIn("unhealthy", output)

    def test_missing_target_is_problem(self):
        check = HealthCheck(FakeRuntime(), self.printer)

        self.assertEqual(counts(check.check_all(["z"])), (1, 0, 0, 1))
        self.assertIn("Container z not found.", self.output())

    def test_missing_target_exits_one(self):
        self.assertEqual(HealthCheck(FakeRuntime(), self.printer).run(["z"]), 1)

    def test_missing_target_does_not_stop_the_run(self):
        runtime = FakeRuntime([make_descriptor("a")])
        check = HealthCheck(runtime, self.printer)

        self.assertEqual(counts(check.check_all(["z", "a"])), (2, 1, 0, 1))
        self.assertIn(('inspect', 'a'), runtime.calls)

    def test_empty_identifier_is_problem(self):
        runtime = FakeRuntime([make_descriptor("a")])
        check = HealthCheck(runtime, self.printer)

        self.assertEqual(counts(check.check_all(["", "a"])), (2, 1, 0, 1))

    def test_malformed_inspect_output_is_problem(self):
        runtime = FakeRuntime([make_descriptor("a")], malformed=["a"])
        check = HealthCheck(runtime, self.printer)

        self.assertIs(check.check_container("a"), Outcome.PROBLEM)
        output = self.output()
        self.assertIn("Container a could not be inspected.", output)
        self.assertNotIn("not found", output)

    def test_targets_are_used_verbatim(self):
        runtime = FakeRuntime([make_descriptor("a")])
        check = HealthCheck(runtime, self.printer)

        self.assertEqual(check.resolve_targets(["a", "a"]), ["a", "a"])
        self.assertEqual(check.check_all(["a", "a"]).total, 2)
        self.assertNotIn(('list',), runtime.calls)

    def test_discovers_running_containers(self):
        runtime = FakeRuntime([make_descriptor("a"), make_descriptor("b", health="unhealthy")])
        check = HealthCheck(runtime, self.printer)

        self.assertEqual(check.run(), 1)
        self.assertIn(('list',), runtime.calls)
        self.assertIn("Summary: 2 container(s) checked", self.output())

    def test_no_running_containers(self):
        runtime = FakeRuntime([make_descriptor("old", state="exited")], running=[])
        check = HealthCheck(runtime, self.printer)

        self.assertEqual(check.run(), 0)
        output = self.output()
        self.assertIn("No running containers found.", output)
        self.assertNotIn("Summary", output)
        self.assertNotIn("Container:", output)
        self.assertNotIn(('inspect', 'old'), runtime.calls)

    def test_unreachable_runtime(self):
        runtime = FakeRuntime([make_descriptor("a")], reachable=False)
        check = HealthCheck(runtime, self.printer)

        self.assertEqual(check.run(["a"]), 1)
        self.assertEqual(runtime.calls, [('ping',)])
        self.assertEqual(self.output(), "")
        self.assertIn("Cannot connect to Docker daemon", self.errors())

    def test_samples_only_running_containers(self):
        runtime = FakeRuntime([make_descriptor("a"), make_descriptor("p", state="paused")])
        check = HealthCheck(runtime, self.printer)

        check.check_all(["a", "p"])
        self.assertIn(('sample', 'a'), runtime.calls)
        self.assertNotIn(('sample', 'p'), runtime.calls)

    def test_missing_stats_do_not_change_outcome(self):
        runtime = FakeRuntime([make_descriptor("a", health="healthy")])
        check = HealthCheck(runtime, self.printer)

        self.assertIs(check.check_container("a"), Outcome.HEALTHY)
        self.assertIn("n/a", self.output())

    def test_usage_is_rendered(self):
        runtime = FakeRuntime([make_descriptor("a")], usage={"a": ResourceUsage(cpu_percent=3.25)})
        check = HealthCheck(runtime, self.printer)

        check.check_container("a")
        self.assertIn("3.25%", self.output())

    def test_render_failure_does_not_fail_the_run(self):
        runtime = FakeRuntime([make_descriptor("a", health="healthy")])
        check = HealthCheck(runtime, self.printer)

        with mock.patch.object(self.printer.formatter, "get_container_block", side_effect=RuntimeError("boom")):
            self.assertEqual(check.run(["a"]), 0)
        self.assertIn("1 healthy", self.output())


if __name__ == "__main__":
    unittest.main()
