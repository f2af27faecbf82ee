from __future__ import annotations

import logging
from typing import Iterable

from ..vendors.models import Vendor
from .models import BookingHandoff, ShortlistCard

logger = logging.getLogger(__name__)


class CheckoutCollaborator:
    """Receives the shortlist when the user continues to booking."""

    def submit(self, handoff: BookingHandoff) -> None:
        raise NotImplementedError


class InMemoryCheckout(CheckoutCollaborator):
    def __init__(self) -> None:
        self.handoffs: list[BookingHandoff] = []

    def submit(self, handoff: BookingHandoff) -> None:
        self.handoffs.append(handoff)


class Shortlist:
    """Cross-category multi-select of vendors, in selection order."""

    def __init__(self) -> None:
        self._cards: dict[str, ShortlistCard] = {}

    def __contains__(self, vendor_id: object) -> bool:
        return vendor_id in self._cards

    def __len__(self) -> int:
        return len(self._cards)

    @property
    def vendor_ids(self) -> list[str]:
        return list(self._cards)

    def toggle(self, vendor_id: str, vendors: Iterable[Vendor]) -> bool:
        """
        Flip membership of ``vendor_id`` and return whether it is selected.

        Ids missing from the current vendor collection are ignored whatever
        their membership; use ``remove`` to drop them.
        """
        vendor = next((v for v in vendors if v.id == vendor_id), None)
        if vendor is None:
            logger.debug("Ignoring toggle for unknown vendor id %s", vendor_id)
            return vendor_id in self._cards

        if vendor_id in self._cards:
            del self._cards[vendor_id]
            return False

        self._cards[vendor_id] = ShortlistCard.from_vendor(vendor)
        return True

    def remove(self, vendor_id: str) -> None:
        self._cards.pop(vendor_id, None)

    def clear(self) -> None:
        self._cards.clear()

    def view(self) -> dict[str, list[ShortlistCard]]:
        grouped: dict[str, list[ShortlistCard]] = {}
        for card in self._cards.values():
            grouped.setdefault(card.category, []).append(card)
        return grouped

    def continue_to_booking(self, checkout: CheckoutCollaborator) -> BookingHandoff:
        handoff = BookingHandoff(vendor_ids=self.vendor_ids, cards=list(self._cards.values()))
        checkout.submit(handoff)
        logger.info("Handed %d shortlisted vendors to checkout", len(handoff.vendor_ids))
        return handoff
