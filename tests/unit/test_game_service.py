import sys
from pathlib import Path
import unittest

sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))

from heromom.application.dtos import IntentOutcome
from heromom.application.services.dialogue_content import REQUEST_DIALOGUES
from heromom.application.services.placement_service import ItemKind
from heromom.bootstrap import create_game_service
from heromom.domain.events import TickAdvanced
from heromom.domain.models.materials import MaterialKey
from heromom.domain.models.son_action import SonAction
from heromom.infrastructure.clock import FixedWallClock
from heromom.presentation.autoplay import autoplay


def _request(template_id: str):
    return next(template for template in REQUEST_DIALOGUES if template.id == template_id)


class GameServiceTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.clock = FixedWallClock(1_000_000)
        self.game = create_game_service(seed=17, clock=self.clock)

    def live_state(self):
        return self.game.state_repo.load()


class TickTests(GameServiceTestCase):
    def test_tick_advances_game_time_by_the_configured_step(self) -> None:
        result = self.game.tick_intent()

        self.assertEqual(2.0, result.game_time)
        self.assertEqual(2.0, self.game.snapshot().game_time)

        self.game.tick_intent(0.5)
        self.assertEqual(2.5, self.game.snapshot().game_time)

    def test_negative_delta_is_rejected(self) -> None:
        with self.assertRaises(ValueError):
            self.game.tick_intent(-1.0)

    def test_failing_tick_handler_rolls_the_whole_tick_back(self) -> None:
        def explode(event: TickAdvanced) -> None:
            raise RuntimeError("handler failed")

        self.game.event_bus.subscribe(TickAdvanced, explode, priority=50)

        with self.assertRaises(RuntimeError):
            self.game.tick_intent()

        self.assertEqual(0.0, self.game.snapshot().game_time)

    def test_snapshot_is_detached_from_the_live_document(self) -> None:
        snapshot = self.game.snapshot()
        snapshot.inventory.materials[MaterialKey.GOLD] = 9999

        self.assertEqual(50, self.live_state().inventory.count(MaterialKey.GOLD))

    def test_tick_handlers_run_in_quest_then_dialogue_order(self) -> None:
        names = self.game.event_bus.handler_names(TickAdvanced)

        self.assertEqual(3, len(names))
        self.assertTrue(names[0].endswith("on_tick_progress"))
        self.assertTrue(names[1].endswith("on_tick_deadlines"))
        self.assertTrue(names[2].endswith("on_tick"))


class QuestFlowTests(GameServiceTestCase):
    def test_completed_quest_is_reported_by_the_tick(self) -> None:
        state = self.live_state()
        quest = self.game.quests.create_quest_from_template(state, _request("req-herb"))
        state.inventory.materials[MaterialKey.RED_HERB] = 3

        result = self.game.tick_intent()

        self.assertEqual([quest.id], result.completed_quests)
        self.assertEqual([], self.game.active_quests())
        self.assertEqual(70, self.live_state().inventory.count(MaterialKey.GOLD))

    def test_expired_quest_is_reported_as_failed(self) -> None:
        state = self.live_state()
        quest = self.game.quests.create_quest_from_template(state, _request("req-bread"))
        state.home.table.clear()
        state.game_time = 89.0

        result = self.game.tick_intent()

        self.assertEqual([quest.id], result.failed_quests)


class AdventureFlowTests(GameServiceTestCase):
    def test_departure_adventure_and_return(self) -> None:
        son = self.live_state().son
        son.current_action = SonAction.DEPARTING
        son.action_timer = 0.0

        started = self.game.tick_intent()

        self.assertTrue(started.adventure_started)
        self.assertEqual(["start"], [letter.kind for letter in started.new_letters])
        self.assertFalse(self.game.snapshot().son.is_home)
        self.assertTrue(self.game.adventure_status_intent().active)

        self.clock.advance(seconds=400)
        returned = self.game.tick_intent()

        self.assertIsNotNone(returned.adventure_result)
        snapshot = self.game.snapshot()
        self.assertTrue(snapshot.son.is_home)
        self.assertIsNone(snapshot.adventure)
        self.assertIs(returned.adventure_result, self.live_state().last_adventure_result)
        self.assertFalse(self.game.adventure_status_intent().active)


class IntentTests(GameServiceTestCase):
    def test_intents_act_on_the_stored_document(self) -> None:
        self.assertEqual(IntentOutcome.SUCCESS, self.game.work_intent().outcome)
        self.assertEqual(IntentOutcome.BLOCKED, self.game.work_intent().outcome)
        self.assertEqual(IntentOutcome.SUCCESS, self.game.plant_intent(0).outcome)
        self.assertEqual(IntentOutcome.SUCCESS, self.game.remove_intent(ItemKind.BOOK, 0).outcome)

        state = self.live_state()
        self.assertEqual(53, state.inventory.count(MaterialKey.GOLD))
        self.assertEqual(11, state.inventory.count(MaterialKey.SEED))
        self.assertEqual([], state.home.desk)

    def test_capability_queries_do_not_mutate(self) -> None:
        before = self.game.snapshot()

        self.game.can_refine()
        self.game.can_cook_food("bread")
        self.game.can_maintain("starter_sword")

        self.assertEqual(before, self.game.snapshot())

    def test_new_game_resets_the_household(self) -> None:
        self.game.work_intent()

        self.game.new_game_intent()

        self.assertEqual(50, self.live_state().inventory.count(MaterialKey.GOLD))


class ReplayTests(unittest.TestCase):
    def _play(self, seed: int):
        clock = FixedWallClock(0)
        game = create_game_service(seed=seed, clock=clock)

        def advance(_result) -> None:
            clock.advance(seconds=2)

        autoplay(game, 60, on_tick=advance)
        return game.snapshot()

    def test_same_seed_replays_identically(self) -> None:
        self.assertEqual(self._play(5), self._play(5))


if __name__ == "__main__":
    unittest.main()
