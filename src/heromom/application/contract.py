CONTRACT_VERSION = "1.0.0"

COMMAND_INTENTS = (
    "new_game_intent",
    "cook_intent",
    "brew_intent",
    "craft_equipment_intent",
    "refine_intent",
    "enhance_intent",
    "maintain_intent",
    "smelt_intent",
    "place_intent",
    "remove_intent",
    "respond_dialogue_intent",
    "dismiss_dialogue_intent",
    "plant_intent",
    "harvest_intent",
    "work_intent",
    "buy_intent",
    "sell_intent",
    "tick_intent",
)

QUERY_INTENTS = (
    "snapshot",
    "adventure_status_intent",
    "active_quests",
    "can_cook_food",
    "can_brew_potion",
    "can_craft_equipment",
    "can_refine",
    "can_enhance",
    "can_maintain",
    "can_smelt",
)

CONTRACT_DTO_TYPES = (
    "ActionResult",
    "CraftResult",
    "RefineResult",
    "EnhanceResult",
    "MaintainResult",
    "SmeltResult",
    "PlacementResult",
    "DialogueResponseResult",
    "TradeResult",
    "FarmResult",
    "JobResult",
    "TickResult",
    "AdventureStatusView",
)
