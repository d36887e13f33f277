import random
import sys
from pathlib import Path
import unittest

sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))

from heromom.application.services.dialogue_content import REQUEST_DIALOGUES
from heromom.application.services.event_bus import EventBus
from heromom.application.services.new_game import initial_state
from heromom.application.services.quest_service import QuestService, register_quest_handlers
from heromom.application.services.registry import RecipeRegistry
from heromom.domain.events import QuestAccepted, QuestCompleted, QuestFailed, TickAdvanced
from heromom.domain.models.dialogue import DialogueChoice, DialogueTemplate, DialogueType
from heromom.domain.models.equipment import Equipment
from heromom.domain.models.items import Book, Food, Potion
from heromom.domain.models.materials import MaterialKey
from heromom.domain.models.quest import (
    QuestData,
    QuestObjectiveKind,
    QuestObjectiveSpec,
    QuestPenalty,
    QuestReward,
    QuestRewardKind,
    QuestStatus,
)
from heromom.domain.models.timekeeping import game_seconds
from heromom.infrastructure.inmemory.inmemory_state_repo import InMemoryGameStateRepository


def _template(kind, target_id=None, amount=1, deadline=60, reward=None, penalty=-5) -> DialogueTemplate:
    return DialogueTemplate(
        id="req-test",
        type=DialogueType.REQUEST,
        son_text="Could you help me?",
        choices=(DialogueChoice("accept", "Sure"), DialogueChoice("decline", "Not now")),
        quest_data=QuestData(
            objectives=(QuestObjectiveSpec(kind, amount, target_id),),
            deadline_seconds=deadline,
            reward=reward or QuestReward(QuestRewardKind.MATERIALS, 20, "20 gold"),
            fail_penalty=QuestPenalty(penalty, "disappointed"),
        ),
    )


def _request(template_id: str) -> DialogueTemplate:
    return next(template for template in REQUEST_DIALOGUES if template.id == template_id)


class QuestServiceTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.state = initial_state()
        self.repo = InMemoryGameStateRepository(self.state)
        self.bus = EventBus()
        self.service = QuestService(self.repo, self.bus, RecipeRegistry(), random.Random(5))


class QuestCreationTests(QuestServiceTestCase):
    def test_accepting_creates_an_active_quest_with_absolute_deadline(self) -> None:
        seen = []
        self.bus.subscribe(QuestAccepted, seen.append)
        self.state.game_time = game_seconds(40)

        quest = self.service.create_quest_from_template(self.state, _template(QuestObjectiveKind.PLACE_BOOK))

        self.assertEqual(QuestStatus.ACTIVE, quest.status)
        self.assertEqual(100.0, quest.deadline)
        self.assertEqual(40.0, quest.accepted_at)
        self.assertEqual([quest], self.state.son.quest_state.active_quests)
        self.assertEqual(40.0, self.state.son.quest_state.last_quest_offered_at)
        self.assertEqual([quest.id], [event.quest_id for event in seen])

    def test_templates_without_quest_data_create_nothing(self) -> None:
        template = DialogueTemplate("daily", DialogueType.DAILY, "Hi", (DialogueChoice("ok", "Hi"),))

        self.assertIsNone(self.service.create_quest_from_template(self.state, template))


class GatherScenarioTests(QuestServiceTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.quest = self.service.create_quest_from_template(
            self.state, _template(QuestObjectiveKind.GATHER_MATERIAL, "ironOre", 5, deadline=60)
        )

    def test_completes_before_deadline_when_gathered(self) -> None:
        self.state.game_time = game_seconds(59)
        self.state.inventory.materials[MaterialKey.IRON_ORE] = 5

        completed = self.service.check_quest_progress(self.state)
        failed = self.service.check_quest_deadlines(self.state)

        self.assertEqual([self.quest], completed)
        self.assertEqual([], failed)
        self.assertEqual(QuestStatus.COMPLETED, self.quest.status)

    def test_fails_after_deadline_when_short(self) -> None:
        self.state.game_time = game_seconds(61)
        self.state.inventory.materials[MaterialKey.IRON_ORE] = 4

        completed = self.service.check_quest_progress(self.state)
        failed = self.service.check_quest_deadlines(self.state)

        self.assertEqual([], completed)
        self.assertEqual([self.quest], failed)
        self.assertEqual(QuestStatus.FAILED, self.quest.status)
        self.assertEqual(4, self.quest.objectives[0].current_amount)

    def test_exactly_at_deadline_is_not_yet_failed(self) -> None:
        self.state.game_time = game_seconds(60)

        self.assertEqual([], self.service.check_quest_deadlines(self.state))

    def test_completion_wins_a_same_tick_tie_through_handler_priority(self) -> None:
        self.service.register_handlers()
        completed, failed = [], []
        self.bus.subscribe(QuestCompleted, completed.append)
        self.bus.subscribe(QuestFailed, failed.append)
        self.state.game_time = game_seconds(61)
        self.state.inventory.materials[MaterialKey.IRON_ORE] = 5

        self.bus.publish_strict(TickAdvanced(game_time_after=61.0, delta_seconds=2.0, now_ms=0))

        self.assertEqual(QuestStatus.COMPLETED, self.quest.status)
        self.assertEqual(1, len(completed))
        self.assertEqual([], failed)
        self.assertEqual([self.quest], self.state.son.quest_state.completed_quests)

    def test_progress_check_is_idempotent(self) -> None:
        self.state.inventory.materials[MaterialKey.IRON_ORE] = 3

        self.service.check_quest_progress(self.state)
        first = [objective.current_amount for objective in self.quest.objectives]
        self.service.check_quest_progress(self.state)
        second = [objective.current_amount for objective in self.quest.objectives]

        self.assertEqual([3], first)
        self.assertEqual(first, second)

        self.state.inventory.materials[MaterialKey.IRON_ORE] = 5
        self.service.check_quest_progress(self.state)
        self.service.check_quest_progress(self.state)
        self.assertEqual(1, len(self.state.son.quest_state.completed_quests))

    def test_progress_is_derived_not_accumulated(self) -> None:
        self.state.inventory.materials[MaterialKey.IRON_ORE] = 4
        self.service.check_quest_progress(self.state)
        self.state.inventory.materials[MaterialKey.IRON_ORE] = 1
        self.service.check_quest_progress(self.state)

        self.assertEqual(1, self.quest.objectives[0].current_amount)


class TrivialQuestTests(QuestServiceTestCase):
    def test_zero_target_objective_completes_at_once(self) -> None:
        quest = self.service.create_quest_from_template(
            self.state, _template(QuestObjectiveKind.GATHER_MATERIAL, "stardust", 0)
        )

        self.assertEqual([quest], self.service.check_quest_progress(self.state))
        self.assertEqual(QuestStatus.COMPLETED, quest.status)

    def test_quest_without_objectives_completes_at_once(self) -> None:
        template = _template(QuestObjectiveKind.PLACE_BOOK)
        empty = DialogueTemplate(
            id=template.id,
            type=template.type,
            son_text=template.son_text,
            choices=template.choices,
            quest_data=QuestData(
                objectives=(),
                deadline_seconds=60,
                reward=template.quest_data.reward,
                fail_penalty=template.quest_data.fail_penalty,
            ),
        )
        quest = self.service.create_quest_from_template(self.state, empty)

        self.service.check_quest_progress(self.state)
        self.state.game_time = game_seconds(61)

        self.assertEqual(QuestStatus.COMPLETED, quest.status)
        self.assertEqual([], self.service.check_quest_deadlines(self.state))


class ObjectiveDerivationTests(QuestServiceTestCase):
    def _progress(self, template: DialogueTemplate) -> int:
        quest = self.service.create_quest_from_template(self.state, template)
        self.service.refresh_progress(self.state, quest)
        return quest.objectives[0].current_amount

    def test_food_is_counted_on_table_and_in_inventory_by_name(self) -> None:
        self.state.inventory.food.append(Food(id="f1", name="Bread", hunger_restore=20))
        self.state.inventory.food.append(Food(id="f2", name="Meat Stew", hunger_restore=50, recipe_id="meat_stew"))

        self.assertEqual(3, self._progress(_template(QuestObjectiveKind.PLACE_FOOD, "bread", 5)))
        self.assertEqual(1, self._progress(_template(QuestObjectiveKind.CRAFT_FOOD, "meat_stew", 5)))

    def test_any_food_counts_only_the_table(self) -> None:
        self.state.inventory.food.append(Food(id="f1", name="Bread", hunger_restore=20))

        self.assertEqual(2, self._progress(_template(QuestObjectiveKind.PLACE_ANY_FOOD, amount=5)))

    def test_equipment_matches_slot_or_name_suffix(self) -> None:
        self.state.inventory.equipment.append(Equipment(id="e1", name="Fine Iron Sword", slot="weapon", grade="uncommon"))
        self.state.home.equipment_rack.append(Equipment(id="e2", name="Leather Armor", slot="armor", grade="common"))

        self.assertEqual(1, self._progress(_template(QuestObjectiveKind.CRAFT_EQUIPMENT, "iron_sword", 5)))
        self.assertEqual(1, self._progress(_template(QuestObjectiveKind.PLACE_EQUIPMENT, "weapon", 5)))
        self.assertEqual(1, self._progress(_template(QuestObjectiveKind.CRAFT_EQUIPMENT, "leather_armor", 5)))

    def test_potions_and_books(self) -> None:
        self.state.home.potion_shelf.append(Potion(id="p1", name="Health Potion", effect="instant", stat="hp", value=30))
        self.state.inventory.potions.append(
            Potion(id="p2", name="Health Potion", effect="instant", stat="hp", value=30, recipe_id="health_potion")
        )
        self.state.inventory.books.append(Book(id="b1", name="Reflex Drills", stat="agi", value=1))

        self.assertEqual(2, self._progress(_template(QuestObjectiveKind.BREW_POTION, "health_potion", 5)))
        self.assertEqual(1, self._progress(_template(QuestObjectiveKind.PLACE_POTION, amount=5)))
        self.assertEqual(1, self._progress(_template(QuestObjectiveKind.PLACE_BOOK, amount=5)))

    def test_unknown_material_counts_zero(self) -> None:
        self.assertEqual(0, self._progress(_template(QuestObjectiveKind.GATHER_MATERIAL, "stardust", 5)))


class RewardAndPenaltyTests(QuestServiceTestCase):
    def test_materials_reward_pays_gold_and_sets_a_line(self) -> None:
        self.state.home.desk.clear()
        quest = self.service.create_quest_from_template(self.state, _template(QuestObjectiveKind.PLACE_BOOK))
        self.state.home.desk.append(Book(id="b1", name="Intro to Magic", stat="int", value=1))

        self.service.check_quest_progress(self.state)

        self.assertEqual(QuestStatus.COMPLETED, quest.status)
        self.assertEqual(70, self.state.inventory.count(MaterialKey.GOLD))
        self.assertIsNotNone(self.state.son.dialogue)

    def test_buff_exp_and_mood_rewards(self) -> None:
        state = self.state
        state.son.dialogue_state.mood = 95
        rewards = (
            QuestReward(QuestRewardKind.BUFF, 2, "STR+2", "str"),
            QuestReward(QuestRewardKind.EXP, 15, "EXP+15"),
            QuestReward(QuestRewardKind.MOOD, 10, "Joy+10"),
        )
        for reward in rewards:
            self.service.create_quest_from_template(state, _template(QuestObjectiveKind.PLACE_BOOK, reward=reward))
        self.service.check_quest_progress(state)

        self.assertEqual(["str"], [buff.stat for buff in state.son.temp_buffs])
        self.assertEqual(15, state.son.stats.exp)
        self.assertEqual(100, state.son.dialogue_state.mood)

    def test_penalty_lowers_mood_by_its_magnitude_and_clamps(self) -> None:
        self.state.son.dialogue_state.mood = 6
        self.service.create_quest_from_template(
            self.state, _template(QuestObjectiveKind.GATHER_MATERIAL, "mithril", 1, deadline=10, penalty=-8)
        )
        self.state.game_time = game_seconds(11)

        self.service.check_quest_deadlines(self.state)

        self.assertEqual(0, self.state.son.dialogue_state.mood)

    def test_completed_history_keeps_last_ten(self) -> None:
        for _ in range(12):
            self.service.create_quest_from_template(self.state, _template(QuestObjectiveKind.PLACE_BOOK))
            self.service.check_quest_progress(self.state)

        self.assertEqual(10, len(self.state.son.quest_state.completed_quests))
        self.assertEqual("quest_3", self.state.son.quest_state.completed_quests[0].id)

    def test_shipped_request_templates_produce_quests(self) -> None:
        quest = self.service.create_quest_from_template(self.state, _request("req-herb"))

        self.assertEqual(QuestObjectiveKind.GATHER_MATERIAL, quest.objectives[0].kind)
        self.assertEqual(3, quest.objectives[0].target_amount)


class QuestHandlerRegistrationTests(unittest.TestCase):
    def test_register_returns_none_without_repository(self) -> None:
        self.assertIsNone(register_quest_handlers(EventBus(), None, RecipeRegistry(), random.Random(1)))

    def test_register_subscribes_progress_before_deadlines(self) -> None:
        bus = EventBus()

        register_quest_handlers(bus, InMemoryGameStateRepository(initial_state()), RecipeRegistry(), random.Random(1))

        names = bus.handler_names(TickAdvanced)
        self.assertTrue(names[0].endswith("on_tick_progress"))
        self.assertTrue(names[1].endswith("on_tick_deadlines"))


if __name__ == "__main__":
    unittest.main()
