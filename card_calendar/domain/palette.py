"""Display colour tags for cards and urgency states"""

import random
from typing import List

GREEN = "4CAF50"
YELLOW = "FFC107"
ORANGE = "FF9800"
RED = "F44336"
BLUE = "2196F3"
PURPLE = "9C27B0"
TEAL = "009688"
INDIGO = "3F51B5"


def all_colors() -> List[str]:
    return [GREEN, YELLOW, ORANGE, RED, BLUE, PURPLE, TEAL, INDIGO]


def random_color() -> str:
    """Pick a colour tag for a card created without one"""
    return random.choice(all_colors())
