"""
Trade offers between two players.
"""
import uuid
from dataclasses import dataclass, field
from typing import List

from shared.enums import TradeStatus


@dataclass
class TradeOffer:
    """A proposal from one player to another, resolved once by the recipient."""

    from_id: str
    to_id: str
    offer_tiles: List[str] = field(default_factory=list)
    offer_cash: int = 0
    request_tiles: List[str] = field(default_factory=list)
    request_cash: int = 0
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    status: TradeStatus = TradeStatus.PENDING

    @property
    def is_pending(self) -> bool:
        return self.status == TradeStatus.PENDING

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "from": self.from_id,
            "to": self.to_id,
            "offerProperties": list(self.offer_tiles),
            "offerCash": self.offer_cash,
            "requestProperties": list(self.request_tiles),
            "requestCash": self.request_cash,
            "status": self.status.value,
        }
