"""
Pending actions: turn-blocking prompts awaiting the active player.

Each tag has exactly one payload shape.
"""
from dataclasses import dataclass
from typing import ClassVar, Union

from shared.enums import PendingActionType


@dataclass(frozen=True)
class BuyPrompt:
    """The active player may buy the unowned tile they landed on."""
    type: ClassVar[PendingActionType] = PendingActionType.BUY_PROMPT

    tile_id: str
    tile_name: str
    price: int
    country: str | None = None

    def to_dict(self) -> dict:
        return {
            "type": self.type.value,
            "payload": {
                "tileId": self.tile_id,
                "tileName": self.tile_name,
                "price": self.price,
                "country": self.country,
            },
        }


@dataclass(frozen=True)
class RentPaid:
    """The active player just paid rent or tax."""
    type: ClassVar[PendingActionType] = PendingActionType.RENT_PAID

    amount: int
    payee_label: str

    def to_dict(self) -> dict:
        return {
            "type": self.type.value,
            "payload": {"amount": self.amount, "to": self.payee_label},
        }


PendingAction = Union[BuyPrompt, RentPaid]
