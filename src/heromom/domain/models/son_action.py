from __future__ import annotations

from enum import Enum


class SonAction(str, Enum):
    IDLE = "IDLE"
    SLEEPING = "SLEEPING"
    TRAINING = "TRAINING"
    EATING = "EATING"
    READING = "READING"
    RESTING = "RESTING"
    HEALING = "HEALING"
    DRINKING_POTION = "DRINKING_POTION"
    DEPARTING = "DEPARTING"
    ADVENTURING = "ADVENTURING"


class Furniture(str, Enum):
    BED = "bed"
    DESK = "desk"
    POTION_SHELF = "potionShelf"
    CHAIR = "chair"
    EQUIPMENT_RACK = "equipmentRack"
    DUMMY = "dummy"
    TABLE = "table"
    DOOR = "door"


_ACTION_FURNITURE = {
    SonAction.SLEEPING: Furniture.BED,
    SonAction.TRAINING: Furniture.DUMMY,
    SonAction.EATING: Furniture.TABLE,
    SonAction.READING: Furniture.DESK,
    SonAction.RESTING: Furniture.CHAIR,
    SonAction.DRINKING_POTION: Furniture.POTION_SHELF,
    SonAction.DEPARTING: Furniture.DOOR,
}


def furniture_for_action(action: SonAction) -> Furniture | None:
    return _ACTION_FURNITURE.get(SonAction(action))
