# landing/engine/board_layout.py
"""
Loads the static board layout (spaces, card decks, jail rules, dice) from JSON
and freezes it into a BoardModel.

Layout JSON shape:
    {
      "spaces": [{"name": "Go", "type": "go"}, {"name": "Chance", "type": "card", "deck": "chance"}, ...],
      "decks":  {"chance": [{"name": "Advance to Go", "action": "advance", "target": 0}, ...]},
      "jail":   {"just_visiting": 10, "max_turns": 3},
      "dice":   {"count": 2, "sides": 6, "max_doubles": 3}
    }
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from ..utils.jsonio import deep_update
from .cards import Card, CardAction, Deck
from .dice import Dice
from .errors import ErrorCode, ProbabilityError
from .spaces import CardSpace, Jail, Space, SpaceType

__all__ = ["BoardModel", "load_board_layout", "validate_board_layout", "load_board"]

def _default_json_path() -> Path:
    # this file: landing/engine/board_layout.py
    # assets:     landing/assets/boards/standard_40.json
    return (Path(__file__).resolve().parents[1] / "assets" / "boards" / "standard_40.json")


def _invalid(message: str, **details: Any) -> ProbabilityError:
    return ProbabilityError(ErrorCode.ERR_INVALID_BOARD, message, details=details)


class BoardModel:
    """Immutable board: physical spaces, the jail, its sentence length and the dice."""

    def __init__(self, spaces: Tuple[Space, ...], jail: Jail, max_turns_in_jail: int, dice: Dice):
        self._spaces = tuple(spaces)
        self._jail = jail
        self._max_turns_in_jail = int(max_turns_in_jail)
        self._dice = dice

    @property
    def physical_space_count(self) -> int:
        return len(self._spaces)

    @property
    def max_turns_in_jail(self) -> int:
        return self._max_turns_in_jail

    @property
    def spaces(self) -> Tuple[Space, ...]:
        return self._spaces

    def get_space(self, space_id: int) -> Space:
        if space_id == self._jail.id:
            return self._jail
        if not (0 <= space_id < len(self._spaces)):
            raise ProbabilityError(ErrorCode.ERR_SPACE_OUT_OF_RANGE, details={"id": space_id})
        return self._spaces[space_id]

    def jail(self) -> Jail:
        return self._jail

    def dice(self) -> Dice:
        return self._dice

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "BoardModel":
        validate_board_layout(data)
        decks = {
            name: Deck(name, tuple(Card.from_dict(c) for c in cards))
            for name, cards in data.get("decks", {}).items()
        }
        spaces: List[Space] = []
        for i, raw in enumerate(data["spaces"]):
            stype = SpaceType(raw["type"])
            name = str(raw.get("name", f"space-{i}"))
            if stype == SpaceType.CARD:
                spaces.append(CardSpace(i, name, stype, deck=decks[raw["deck"]]))
            else:
                spaces.append(Space(i, name, stype))

        jail_cfg = data["jail"]
        jail = Jail(len(spaces), "Jail", SpaceType.JAIL, just_visiting=int(jail_cfg["just_visiting"]))
        dice_cfg = dict(data.get("dice", {}))
        dice = Dice(
            count=int(dice_cfg.get("count", 2)),
            sides=int(dice_cfg.get("sides", 6)),
            max_doubles=int(dice_cfg.get("max_doubles", 3)),
        )
        model = cls(tuple(spaces), jail, int(jail_cfg.get("max_turns", 3)), dice)
        _check_card_chains(model)
        return model


def load_board_layout(path: Path | str | None = None) -> Dict[str, Any]:
    src = Path(path) if path else _default_json_path()
    with src.open("r", encoding="utf-8") as f:
        return json.load(f)


def validate_board_layout(data: Dict[str, Any]) -> None:
    spaces = data.get("spaces", None)
    if not (isinstance(spaces, list) and spaces):
        raise _invalid("Board must define a non-empty 'spaces' list")
    n = len(spaces)

    known_types = {t.value for t in SpaceType}
    present_types = set()
    decks = data.get("decks", {}) or {}
    for i, raw in enumerate(spaces):
        stype = raw.get("type")
        if stype not in known_types or stype == SpaceType.JAIL.value:
            raise _invalid(f"Unknown space type {stype!r} at {i}", id=i, type=stype)
        present_types.add(stype)
        if stype == SpaceType.CARD.value:
            deck = raw.get("deck")
            if deck not in decks or not decks[deck]:
                raise _invalid(f"Card space {i} references missing or empty deck {deck!r}", id=i, deck=deck)

    jail_cfg = data.get("jail", None)
    if not isinstance(jail_cfg, dict):
        raise _invalid("Board must define a 'jail' section")
    jv = int(jail_cfg.get("just_visiting", -1))
    if not (0 <= jv < n):
        raise _invalid("just_visiting out of range", just_visiting=jv, spaces=n)
    if int(jail_cfg.get("max_turns", 3)) < 1:
        raise _invalid("max_turns must be >= 1", max_turns=jail_cfg.get("max_turns"))

    actions = {a.value for a in CardAction}
    for name, cards in decks.items():
        for card in cards:
            action = card.get("action", "stay")
            if action not in actions:
                raise _invalid(f"Unknown card action {action!r} in deck {name!r}", deck=name, action=action)
            target = card.get("target")
            if action == CardAction.ADVANCE.value and not (isinstance(target, int) and 0 <= target < n):
                raise _invalid(f"Card target out of range in deck {name!r}", deck=name, card=card.get("name"))
            if action == CardAction.NEAREST.value and card.get("kind") not in present_types:
                raise _invalid(f"No space of type {card.get('kind')!r} for deck {name!r}", deck=name, card=card.get("name"))


def _check_card_chains(model: BoardModel) -> None:
    # A card may redirect onto another card space; the chain has to end.
    card_ids = [s.id for s in model.spaces if isinstance(s, CardSpace)]
    state: Dict[int, int] = {}  # 1 = visiting, 2 = done

    def visit(space_id: int, path: List[int]) -> None:
        if state.get(space_id) == 2:
            return
        if state.get(space_id) == 1:
            raise _invalid("Card redirection cycle", cycle=path + [space_id])
        state[space_id] = 1
        space = model.get_space(space_id)
        for card in space.deck:
            dest = card.apply(model, space)
            if dest.id != space_id and isinstance(dest, CardSpace):
                visit(dest.id, path + [space_id])
        state[space_id] = 2

    for sid in card_ids:
        visit(sid, [])


def load_board(path: Path | str | None = None, overrides: Optional[Dict[str, Any]] = None) -> BoardModel:
    data = load_board_layout(path)
    if overrides:
        data = deep_update(data, overrides)
    return BoardModel.from_dict(data)
