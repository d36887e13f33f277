from __future__ import annotations

from typing import Dict, Tuple

from heromom.domain.models.dialogue import (
    ACCEPT_CHOICE_ID,
    DECLINE_CHOICE_ID,
    DialogueChoice,
    DialogueConditions,
    DialogueEffect,
    DialogueEffectKind,
    DialogueTemplate,
    DialogueType,
)
from heromom.domain.models.quest import (
    QuestData,
    QuestObjectiveKind,
    QuestObjectiveSpec,
    QuestPenalty,
    QuestReward,
    QuestRewardKind,
)
from heromom.domain.models.son_action import Furniture, SonAction


A = SonAction
K = DialogueEffectKind
T = DialogueType


def _choice(choice_id: str, text: str, kind: DialogueEffectKind, value: int, source: str, stat: str | None = None):
    return DialogueChoice(choice_id, text, DialogueEffect(kind, value, source, stat))


def _when(**kwargs) -> DialogueConditions:
    return DialogueConditions(**kwargs)


EMOTION_DIALOGUES: Tuple[DialogueTemplate, ...] = (
    DialogueTemplate("emo-low-hp", T.EMOTION, "Ow... it hurts a little...", (
        _choice("comfort", "Let me take a look", K.HEAL, 5, "mom's touch"),
        _choice("encourage", "You're a strong kid", K.BUFF, 1, "encouragement", "def"),
        _choice("worry-food", "Have you been eating?", K.MOOD, 5, "worry"),
    ), _when(hp_percent_range=(0, 40)), priority=9),
    DialogueTemplate("emo-hungry", T.EMOTION, "I'm hungry...", (
        _choice("feed", "I'll make something right away!", K.MOOD, 5, "meal promise"),
        _choice("ack", "You must be starving", K.HUNGER, 5, "snack"),
    ), _when(hunger_range=(0, 30)), priority=8),
    DialogueTemplate("emo-return-injured", T.EMOTION, "That was a rough adventure...", (
        _choice("comfort", "You did well, come here", K.HEAL, 10, "mom's hug"),
        _choice("proud", "I'm glad you made it home", K.EXP, 5, "pride"),
        _choice("rest", "Rest now, I'll keep watch", K.MOOD, 8, "relief"),
    ), _when(just_returned=True, is_injured=True), priority=10),
    DialogueTemplate("emo-return-success", T.EMOTION, "Mom! Today was amazing!", (
        _choice("proud", "That's my boy!", K.MOOD, 8, "pride"),
        _choice("curious", "What happened out there?", K.EXP, 3, "story"),
    ), _when(just_returned=True, is_injured=False), priority=10),
    DialogueTemplate("emo-depart", T.EMOTION, "I'm heading out, Mom!", (
        _choice("bless", "Go get them, I'm cheering for you!", K.BUFF, 1, "mom's blessing", "str"),
        _choice("safe", "Be careful out there", K.BUFF, 1, "mom's prayer", "def"),
    ), _when(son_actions=(A.DEPARTING,)), priority=9),
    DialogueTemplate("emo-training", T.EMOTION, "I think I'm getting stronger!", (
        _choice("praise", "You've improved so much!", K.EXP, 5, "praise"),
        _choice("cheer", "Keep it up!", K.MOOD, 5, "cheer"),
    ), _when(son_actions=(A.TRAINING,)), priority=5),
    DialogueTemplate("emo-high-level", T.EMOTION, "Mom, I'm pretty strong now, right?", (
        _choice("agree", "Of course! I'm so proud of you", K.MOOD, 10, "recognition"),
        _choice("worry", "Still, stay careful", K.BUFF, 1, "worry", "def"),
    ), _when(min_level=10), priority=4),
    DialogueTemplate("emo-low-mood", T.EMOTION, "Mom... I feel a bit lonely...", (
        _choice("hug", "Come here, let me hug you", K.MOOD, 15, "hug"),
        _choice("promise", "I'll always be by your side", K.MOOD, 10, "promise"),
    ), _when(son_actions=(A.IDLE, A.RESTING), mood_range=(0, 40)), priority=8),
    DialogueTemplate("emo-reading", T.EMOTION, "This book is really fun!", (
        _choice("curious", "What's it about?", K.EXP, 3, "curiosity"),
        _choice("happy", "I'm glad you like it", K.MOOD, 5, "empathy"),
    ), _when(son_actions=(A.READING,)), priority=4),
    DialogueTemplate("emo-resting", T.EMOTION, "I want to take it easy~", (
        _choice("rest", "Rest up~", K.HEAL, 3, "rest"),
        _choice("snack", "Want a snack?", K.MOOD, 3, "snack"),
    ), _when(son_actions=(A.RESTING,), near_furniture=(Furniture.CHAIR,)), priority=4),
    DialogueTemplate("emo-idle", T.EMOTION, "What should I do~", (
        _choice("suggest", "How about some training?", K.MOOD, 3, "suggestion"),
        _choice("together", "Stay with me for a bit", K.MOOD, 5, "together"),
    ), _when(son_actions=(A.IDLE,)), priority=2),
    DialogueTemplate("emo-potion", T.EMOTION, "This potion tastes...", (
        _choice("sympathize", "Awful, right? Hang in there", K.MOOD, 3, "empathy"),
        _choice("encourage", "It's good for you!", K.HEAL, 2, "encouragement"),
    ), _when(son_actions=(A.DRINKING_POTION,)), priority=4),
)

BEDTIME_DIALOGUES: Tuple[DialogueTemplate, ...] = (
    DialogueTemplate("bed-adventure", T.BEDTIME, "Mom, I met a scary monster today...", (
        _choice("proud", "You fought well, I'm proud", K.MOOD, 8, "praise"),
        _choice("careful", "Be more careful next time", K.BUFF, 1, "advice", "def"),
    ), _when(son_actions=(A.SLEEPING,)), priority=6),
    DialogueTemplate("bed-grow", T.BEDTIME, "Mom, I've grown a lot, haven't I?", (
        _choice("yes", "You're almost as tall as me!", K.MOOD, 10, "recognition"),
        _choice("baby", "You'll always be my baby", K.MOOD, 8, "love"),
    ), _when(son_actions=(A.SLEEPING,)), priority=5),
    DialogueTemplate("bed-miss", T.BEDTIME, "I miss you when I'm on adventures", (
        _choice("always", "I think of you all the time too", K.MOOD, 10, "heart"),
        _choice("amulet", "Shall I make you a charm?", K.BUFF, 1, "charm", "str"),
    ), _when(son_actions=(A.SLEEPING,)), priority=7),
    DialogueTemplate("bed-food", T.BEDTIME, "Your cooking is the best...", (
        _choice("happy", "Thanks for eating it all", K.MOOD, 8, "gratitude"),
        _choice("more", "I'll make something better tomorrow", K.HUNGER, 5, "anticipation"),
    ), _when(son_actions=(A.SLEEPING,)), priority=5),
    DialogueTemplate("bed-dream", T.BEDTIME, "I beat a dragon in my dream!", (
        _choice("amazing", "Amazing!", K.EXP, 3, "imagination"),
        _choice("real", "Someday you'll do it for real", K.MOOD, 5, "faith"),
    ), _when(son_actions=(A.SLEEPING,)), priority=4),
    DialogueTemplate("bed-tired", T.BEDTIME, "Today was kind of hard...", (
        _choice("good", "You worked hard, well done", K.MOOD, 8, "comfort"),
        _choice("rest", "Sleep well, tomorrow will be better", K.HEAL, 5, "deep sleep"),
    ), _when(son_actions=(A.SLEEPING,)), priority=6),
    DialogueTemplate("bed-happy", T.BEDTIME, "Today was a really good day!", (
        _choice("glad", "I was happy too", K.MOOD, 10, "happiness"),
        _choice("everyday", "Every day will be this fun", K.MOOD, 5, "anticipation"),
    ), _when(son_actions=(A.SLEEPING,)), priority=4),
    DialogueTemplate("bed-question", T.BEDTIME, "Mom, what's good about being a hero?", (
        _choice("help", "You get to help people", K.MOOD, 8, "lesson"),
        _choice("beyou", "Just do what you love", K.MOOD, 10, "respect"),
    ), _when(son_actions=(A.SLEEPING,)), priority=5),
)

DAILY_DIALOGUES: Tuple[DialogueTemplate, ...] = (
    DialogueTemplate("daily-dummy", T.DAILY, "What's the training dummy's name?", (
        _choice("name", "Hmm... let's call it Dummy Jr.!", K.MOOD, 5, "naming"),
        _choice("no", "It's just a dummy~", K.MOOD, 2, "reality"),
    ), _when(son_actions=(A.TRAINING,), near_furniture=(Furniture.DUMMY,)), priority=3),
    DialogueTemplate("daily-table", T.DAILY, "What is this made of?", (
        _choice("explain", "Fresh ingredients~", K.MOOD, 5, "explanation"),
        _choice("secret", "Mom's secret recipe!", K.MOOD, 3, "secret"),
    ), _when(son_actions=(A.EATING,), near_furniture=(Furniture.TABLE,)), priority=3),
    DialogueTemplate("daily-desk", T.DAILY, "How do you read this word?", (
        _choice("teach", "You read it like this", K.EXP, 3, "teaching"),
        _choice("self", "Try reading it yourself!", K.MOOD, 2, "independence"),
    ), _when(son_actions=(A.READING,), near_furniture=(Furniture.DESK,)), priority=3),
    DialogueTemplate("daily-chair", T.DAILY, "You should rest too, Mom~", (
        _choice("sweet", "What a sweet boy~", K.MOOD, 8, "touched"),
        _choice("fine", "I'm fine~", K.MOOD, 3, "chat"),
    ), _when(son_actions=(A.RESTING,), near_furniture=(Furniture.CHAIR,)), priority=3),
    DialogueTemplate("daily-potion", T.DAILY, "The potions are so sparkly!", (
        _choice("pretty", "Pretty, right?", K.MOOD, 3, "empathy"),
        _choice("careful", "Don't touch them carelessly~", K.MOOD, 2, "caution"),
    ), _when(near_furniture=(Furniture.POTION_SHELF,)), priority=2),
    DialogueTemplate("daily-equip", T.DAILY, "This armor looks so cool!", (
        _choice("wear", "Wear it well~", K.MOOD, 5, "anticipation"),
        _choice("made", "I made it!", K.MOOD, 8, "pride"),
    ), _when(near_furniture=(Furniture.EQUIPMENT_RACK,)), priority=3),
    DialogueTemplate("daily-bed", T.DAILY, "The blanket is so warm~", (
        _choice("snuggle", "Cozy, isn't it?", K.MOOD, 5, "cozy"),
        _choice("wash", "Time to do the laundry soon~", K.MOOD, 2, "chores"),
    ), _when(near_furniture=(Furniture.BED,)), priority=2),
    DialogueTemplate("daily-door", T.DAILY, "I wonder what's outside?", (
        _choice("adventure", "Adventure awaits!", K.MOOD, 5, "excitement"),
        _choice("careful", "Be careful~", K.MOOD, 3, "advice"),
    ), _when(son_actions=(A.IDLE,), near_furniture=(Furniture.DOOR,)), priority=3),
    DialogueTemplate("daily-train-hard", T.DAILY, "Hyah! Hyah! Are you watching, Mom?", (
        _choice("watch", "Yes! You look great~", K.MOOD, 8, "attention"),
        _choice("careful", "Don't hurt yourself~", K.MOOD, 3, "worry"),
    ), _when(son_actions=(A.TRAINING,)), priority=4),
    DialogueTemplate("daily-eat-happy", T.DAILY, "Yum~ just one more bite!", (
        _choice("more", "Sure, eat up~", K.HUNGER, 3, "seconds"),
        _choice("save", "Save some for later~", K.MOOD, 3, "discipline"),
    ), _when(son_actions=(A.EATING,)), priority=3),
)


def _request_choices(accept_mood: int = 5) -> Tuple[DialogueChoice, ...]:
    return (
        _choice(ACCEPT_CHOICE_ID, "Sure, I'll do it!", K.MOOD, accept_mood, "promise"),
        _choice(DECLINE_CHOICE_ID, "That's a bit hard right now...", K.MOOD, -2, "disappointment"),
    )


def _quest(kind: QuestObjectiveKind, deadline: float, reward: QuestReward, penalty: QuestPenalty,
           target_id: str | None = None, amount: int = 1) -> QuestData:
    return QuestData((QuestObjectiveSpec(kind, amount, target_id),), deadline, reward, penalty)


Q = QuestObjectiveKind
R = QuestRewardKind

REQUEST_DIALOGUES: Tuple[DialogueTemplate, ...] = (
    DialogueTemplate("req-stew", T.REQUEST, "I want some meat stew...", _request_choices(),
        _when(son_actions=(A.IDLE, A.RESTING)), priority=6,
        quest_data=_quest(Q.CRAFT_FOOD, 180, QuestReward(R.BUFF, 2, "STR+2", "str"),
                          QuestPenalty(-5, "disappointed"), "meat_stew")),
    DialogueTemplate("req-sword", T.REQUEST, "I wish I had a new sword", _request_choices(),
        _when(son_actions=(A.TRAINING, A.IDLE)), priority=6,
        quest_data=_quest(Q.CRAFT_EQUIPMENT, 240, QuestReward(R.EXP, 15, "EXP+15"),
                          QuestPenalty(-8, "disappointed"), "iron_sword")),
    DialogueTemplate("req-potion", T.REQUEST, "I'm out of health potions", _request_choices(),
        _when(son_actions=(A.IDLE, A.RESTING)), priority=7,
        quest_data=_quest(Q.BREW_POTION, 120, QuestReward(R.MOOD, 10, "Joy+10"),
                          QuestPenalty(-5, "uneasy"), "health_potion")),
    DialogueTemplate("req-book", T.REQUEST, "I want to read but there are no books", _request_choices(),
        _when(son_actions=(A.IDLE,), near_furniture=(Furniture.DESK,)), priority=5,
        quest_data=_quest(Q.PLACE_BOOK, 60, QuestReward(R.BUFF, 1, "INT+1", "int"),
                          QuestPenalty(-3, "let down"))),
    DialogueTemplate("req-bread", T.REQUEST, "Even some bread would be nice...", _request_choices(),
        _when(hunger_range=(0, 50)), priority=6,
        quest_data=_quest(Q.PLACE_ANY_FOOD, 90, QuestReward(R.MOOD, 8, "Happiness+8"),
                          QuestPenalty(-5, "hungry"))),
    DialogueTemplate("req-herb", T.REQUEST, "I need a few herbs", _request_choices(),
        _when(son_actions=(A.IDLE, A.RESTING)), priority=5,
        quest_data=_quest(Q.GATHER_MATERIAL, 300, QuestReward(R.MATERIALS, 20, "20 gold"),
                          QuestPenalty(-5, "disappointed"), "redHerb", 3)),
    DialogueTemplate("req-armor", T.REQUEST, "My armor feels a bit flimsy...", _request_choices(),
        _when(son_actions=(A.IDLE, A.TRAINING)), priority=6,
        quest_data=_quest(Q.CRAFT_EQUIPMENT, 240, QuestReward(R.BUFF, 2, "DEF+2", "def"),
                          QuestPenalty(-8, "uneasy"), "leather_armor")),
    DialogueTemplate("req-place-potion", T.REQUEST, "Could you pack me some potions?", _request_choices(),
        _when(son_actions=(A.IDLE,)), priority=5,
        quest_data=_quest(Q.PLACE_POTION, 90, QuestReward(R.MOOD, 8, "Relief+8"),
                          QuestPenalty(-3, "let down"))),
)

ALL_DIALOGUES: Tuple[DialogueTemplate, ...] = EMOTION_DIALOGUES + BEDTIME_DIALOGUES + DAILY_DIALOGUES + REQUEST_DIALOGUES

RESPONSE_LINES: Dict[str, Tuple[str, ...]] = {
    DialogueType.EMOTION.value: ("Thanks, Mom!", "You're the best, Mom!", "Hehe, that feels nice~"),
    DialogueType.BEDTIME.value: ("Good night, Mom...", "Tomorrow too... zzZ", "Love you, Mom..."),
    DialogueType.DAILY.value: ("Hehe~", "Mom, you're funny!", "Oh, I see!"),
    DialogueType.REQUEST.value: ("It's a promise!", "Thank you!", "I can't wait!"),
    "decline": ("That's okay...", "Maybe next time...", "I understand..."),
    "quest_complete": ("Wow! Thank you, Mom!", "Mom, you're the best!", "That's my mom!"),
    "quest_fail": ("It's okay, next time...", "Too bad, but I understand", "You must have been busy..."),
}

FALLBACK_LINES: Dict[str, str] = {
    "decline": "Okay...",
    "quest_complete": "Thanks, Mom!",
    "quest_fail": "...It's okay.",
}

SON_LINES: Dict[SonAction | str, Tuple[str, ...]] = {
    A.EATING: ("Ooh! That looks tasty!", "Mom's cooking is the best!", "Nom nom, yummy~"),
    "no_food": ("I'm hungry...", "Isn't there anything to eat?", "*stomach growls*"),
    A.TRAINING: ("Hyah! Getting stronger today!", "At this rate I could beat a dragon!", "Hup! Hup! Hup!"),
    A.READING: ("Hmm... this is hard.", "Whoa, a technique like this?!", "The letters are kind of small..."),
    A.SLEEPING: ("zzZ...", "Five more minutes...", "Snore..."),
    A.RESTING: ("Let's take a breather~", "Even heroes need a break!", "Ahh, comfy~"),
    A.DEPARTING: ("I'm off!", "Today's going to be great!", "Don't worry, I'll be back soon!"),
    A.DRINKING_POTION: ("Gulp! I feel the power!", "The taste is... well...", "Blegh... but it works!"),
    A.IDLE: ("What should I do~?", "I'm bored...", "Hmm~"),
}

LETTER_TEMPLATES: Dict[str, Tuple[str, ...]] = {
    "start": ("I've set off! The weather is lovely today~", "Adventure time! I wonder what I'll meet today?"),
    "overwhelming": ("I took down a goblin in one hit! This sword is amazing!", "Too easy! The gear you made is the best!"),
    "victory": ("Beat a slime. I'm a little sticky but fine!", "I won! It was tough but I did it!"),
    "narrow": ("Ugh... the orc was stronger than I thought. But I won!", "That was close... but I'm okay! Still in one piece!"),
    "defeat": ("Ouch... a wolf got me a bit. Don't worry, I'm fine.", "It hurts a little, but I'm okay... I'll win next time!"),
    "low_hp": ("It's getting hard... I miss your cooking.", "I'm pretty banged up... but I can keep going!"),
    "treasure": ("I found something shiny and picked it up! No idea what it is...", "Wow! A treasure chest! What's inside?"),
    "boss": ("There's something huge up ahead...! Here I go!", "A boss monster...! I'm nervous but I'll try!"),
    "returning": ("Adventure over! I'm on my way home~", "All done! I'll be home soon!"),
}

MILESTONE_MESSAGES: Dict[int, str] = {
    5: "Congratulations! Your son defeated his first boss! \"Mom! I did it!\"",
    10: "Your son is now registered with the Adventurers' Guild! \"I'm a real adventurer now!\"",
    15: "The villagers recognise your son's name! \"I've become a famous hero!\"",
    20: "The king awarded your son a medal! \"Mom... it's all thanks to you. Thank you.\"",
}


def pick_line(rng, pool: Tuple[str, ...] | None, fallback: str | None = None) -> str | None:
    """Random line from a pool; the fallback covers an empty or missing pool."""
    if pool:
        return rng.choice(pool)
    return fallback
