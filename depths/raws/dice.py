"""Dice expression helpers shared by raw definitions and the templater."""

from __future__ import annotations

import re
from dataclasses import dataclass

__all__ = ["DiceExpression", "parse_dice_string"]

_DICE_RE = re.compile(r"(\d+)d(\d+)([+-]\d+)?")


@dataclass(frozen=True)
class DiceExpression:
    """A parsed ``NdS+K`` damage expression."""

    n_dice: int = 1
    die_type: int = 4
    bonus: int = 0

    def with_bonus(self, delta: int) -> "DiceExpression":
        return DiceExpression(self.n_dice, self.die_type, self.bonus + delta)

    def __str__(self) -> str:
        if self.bonus > 0:
            return f"{self.n_dice}d{self.die_type}+{self.bonus}"
        if self.bonus < 0:
            return f"{self.n_dice}d{self.die_type}{self.bonus}"
        return f"{self.n_dice}d{self.die_type}"


def parse_dice_string(dice: str) -> DiceExpression:
    """Parse ``dice`` into a :class:`DiceExpression`.

    Missing parts fall back to ``1d4+0``; the last expression in the string
    wins when several are present.
    """

    n_dice, die_type, bonus = 1, 4, 0
    for match in _DICE_RE.finditer(dice):
        n_dice = int(match.group(1))
        die_type = int(match.group(2))
        if match.group(3):
            bonus = int(match.group(3))
    return DiceExpression(n_dice, die_type, bonus)
