from __future__ import annotations

import logging
from typing import Dict

from heromom.application.dtos import IntentOutcome, JobResult, TradeResult
from heromom.application.services.balance_tables import (
    JOB_LEVEL_CAP,
    SELL_PRICE_BOOK,
    SELL_PRICE_EQUIPMENT,
    SELL_PRICE_FOOD,
    SELL_PRICE_POTION,
    SHOP_INVENTORY,
    ShopItem,
    job_level_data,
)
from heromom.application.services.placement_service import ItemKind, resolve_index
from heromom.domain.models.game_state import GameState
from heromom.domain.models.items import Book
from heromom.domain.models.materials import MaterialKey
from heromom.domain.models.timekeeping import WallClockMs, wall_clock_ms


logger = logging.getLogger(__name__)


class EconomyService:
    """Mom's part-time job plus the village shop."""

    def __init__(self, shop: tuple[ShopItem, ...] = SHOP_INVENTORY) -> None:
        self.shop: Dict[str, ShopItem] = {item.id: item for item in shop}

    # --- Job ---------------------------------------------------------------

    def job_cooldown_remaining(self, state: GameState, now: WallClockMs) -> int:
        cooldown_ms = job_level_data(state.mom.job_level).cooldown_seconds * 1000
        return max(0, int(state.mom.last_job_at) + cooldown_ms - int(now))

    def can_work(self, state: GameState, now: WallClockMs) -> bool:
        return self.job_cooldown_remaining(state, now) == 0

    def work(self, state: GameState, now: WallClockMs) -> JobResult:
        mom = state.mom
        if not self.can_work(state, now):
            seconds = self.job_cooldown_remaining(state, now) / 1000.0
            return JobResult(IntentOutcome.BLOCKED, [f"Mom needs {seconds:.1f}s more rest."], job_level=mom.job_level)

        gold = job_level_data(mom.job_level).gold_reward
        state.inventory.add(MaterialKey.GOLD, gold)
        mom.last_job_at = wall_clock_ms(now)
        mom.job_exp += 1
        leveled_up = False
        while mom.job_exp >= mom.job_max_exp and mom.job_level < JOB_LEVEL_CAP:
            mom.job_exp -= mom.job_max_exp
            mom.job_level += 1
            mom.job_max_exp = job_level_data(mom.job_level).exp_required
            leveled_up = True
        if leveled_up:
            logger.info("Mom's job reached level %s", mom.job_level)
        messages = [f"Earned {gold} gold."]
        if leveled_up:
            messages.append(f"Job level {mom.job_level}!")
        return JobResult(IntentOutcome.SUCCESS, messages, gold_earned=gold, job_level=mom.job_level, leveled_up=leveled_up)

    # --- Shop ---------------------------------------------------------------

    def can_buy(self, state: GameState, shop_item_id: str) -> bool:
        item = self.shop.get(shop_item_id)
        return item is not None and state.inventory.count(MaterialKey.GOLD) >= item.gold_cost

    def buy(self, state: GameState, shop_item_id: str) -> TradeResult:
        item = self.shop.get(shop_item_id)
        if item is None:
            return TradeResult(IntentOutcome.NOT_FOUND, [f"The shop does not sell {shop_item_id}."])
        if not self.can_buy(state, shop_item_id):
            return TradeResult(IntentOutcome.BLOCKED, [f"{item.name} costs {item.gold_cost} gold."])

        state.inventory.add(MaterialKey.GOLD, -item.gold_cost)
        item_id = ""
        if item.book is not None:
            book = Book(id=state.issue_id("book"), name=item.book.name, stat=item.book.stat, value=item.book.value)
            state.inventory.books.append(book)
            item_id = book.id
        elif item.material is not None:
            state.inventory.add(item.material, item.amount)
        return TradeResult(IntentOutcome.SUCCESS, [f"Bought {item.name}."], gold_delta=-item.gold_cost, item_id=item_id)

    def sell(self, state: GameState, kind: ItemKind, ref: int | str) -> TradeResult:
        """Sell from the free inventory only; placed or equipped items are out of reach."""
        kind = ItemKind(kind)
        inventory = state.inventory
        if kind == ItemKind.FOOD:
            items = inventory.food
        elif kind == ItemKind.POTION:
            items = inventory.potions
        elif kind == ItemKind.BOOK:
            items = inventory.books
        else:
            items = inventory.equipment

        index = resolve_index(items, ref)
        if index is None:
            return TradeResult(IntentOutcome.NOT_FOUND, [f"No {kind.value} at {ref!r} in the inventory."])
        item = items.pop(index)
        if kind == ItemKind.FOOD:
            price = SELL_PRICE_FOOD
        elif kind == ItemKind.POTION:
            price = SELL_PRICE_POTION
        elif kind == ItemKind.BOOK:
            price = SELL_PRICE_BOOK
        else:
            price = SELL_PRICE_EQUIPMENT[item.grade]
        inventory.add(MaterialKey.GOLD, price)
        return TradeResult(IntentOutcome.SUCCESS, [f"Sold {item.name} for {price} gold."], gold_delta=price, item_id=item.id)
