import sys
from pathlib import Path
import unittest

sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))

from heromom.application.services.event_bus import EventBus


class ExampleEvent:
    pass


class FollowUpEvent:
    pass


class EventBusTests(unittest.TestCase):
    def test_publish_notifies_all_handlers_for_event_type(self) -> None:
        bus = EventBus()
        seen: list[str] = []

        bus.subscribe(ExampleEvent, lambda evt: seen.append("first"))
        bus.subscribe(ExampleEvent, lambda evt: seen.append("second"))

        bus.publish(ExampleEvent())

        self.assertEqual(["first", "second"], seen)

    def test_publish_filters_handlers_by_event_class(self) -> None:
        bus = EventBus()
        seen: list[str] = []

        bus.subscribe(ExampleEvent, lambda evt: seen.append("example"))
        bus.subscribe(FollowUpEvent, lambda evt: seen.append("follow-up"))

        bus.publish(ExampleEvent())

        self.assertEqual(["example"], seen)

    def test_publish_honors_priority_then_subscription_order(self) -> None:
        bus = EventBus()
        seen: list[str] = []

        bus.subscribe(ExampleEvent, lambda evt: seen.append("dialogue"), priority=30)
        bus.subscribe(ExampleEvent, lambda evt: seen.append("deadlines"), priority=20)
        bus.subscribe(ExampleEvent, lambda evt: seen.append("progress"), priority=10)
        bus.subscribe(ExampleEvent, lambda evt: seen.append("progress-late"), priority=10)

        bus.publish(ExampleEvent())

        self.assertEqual(["progress", "progress-late", "deadlines", "dialogue"], seen)

    def test_failing_handler_is_isolated_and_reported(self) -> None:
        bus = EventBus()
        seen: list[str] = []

        def broken(_event) -> None:
            raise RuntimeError("boom")

        bus.subscribe(ExampleEvent, broken, priority=1)
        bus.subscribe(ExampleEvent, lambda evt: seen.append("after"), priority=2)

        with self.assertLogs("heromom.application.services.event_bus", level="ERROR"):
            errors = bus.publish(ExampleEvent())

        self.assertEqual(["after"], seen)
        self.assertEqual(1, len(errors))
        self.assertEqual("boom", str(bus.last_publish_errors()[0]))

    def test_publish_strict_reraises_first_failure_after_all_handlers_ran(self) -> None:
        bus = EventBus()
        seen: list[str] = []

        def first(_event) -> None:
            raise ValueError("first")

        def second(_event) -> None:
            raise KeyError("second")

        bus.subscribe(ExampleEvent, first, priority=1)
        bus.subscribe(ExampleEvent, second, priority=2)
        bus.subscribe(ExampleEvent, lambda evt: seen.append("ran"), priority=3)

        with self.assertLogs("heromom.application.services.event_bus", level="ERROR"):
            with self.assertRaises(ValueError):
                bus.publish_strict(ExampleEvent())

        self.assertEqual(["ran"], seen)

    def test_nested_publish_does_not_clear_outer_errors(self) -> None:
        bus = EventBus()

        def broken(_event) -> None:
            raise RuntimeError("outer")

        bus.subscribe(ExampleEvent, broken, priority=1)
        bus.subscribe(ExampleEvent, lambda evt: bus.publish(FollowUpEvent()), priority=2)

        with self.assertLogs("heromom.application.services.event_bus", level="ERROR"):
            errors = bus.publish(ExampleEvent())

        self.assertEqual(["outer"], [str(error) for error in errors])
        self.assertEqual(["outer"], [str(error) for error in bus.last_publish_errors()])

    def test_handler_names_follow_dispatch_order(self) -> None:
        bus = EventBus()

        def later(_event) -> None:
            return None

        def sooner(_event) -> None:
            return None

        bus.subscribe(ExampleEvent, later, priority=50)
        bus.subscribe(ExampleEvent, sooner, priority=5)

        names = bus.handler_names(ExampleEvent)

        self.assertTrue(names[0].endswith("sooner"))
        self.assertTrue(names[1].endswith("later"))


if __name__ == "__main__":
    unittest.main()
