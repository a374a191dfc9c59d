"""Notarization backends for registry transitions.

A notary records ``(entity_type, entity_id, action, payload)`` somewhere
tamper-evident and returns an opaque receipt. The registry calls it after
a transition commits and never depends on the result.
"""

import logging
import secrets
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from django.db import transaction

logger = logging.getLogger(__name__)


@dataclass
class NotaryReceipt:
    """Receipt returned by a notary backend."""

    tx_hash: str
    network: str
    block_number: Optional[int] = None


class BaseNotary(ABC):
    """Abstract base class for notary backends."""

    network: str = "base"

    @abstractmethod
    def record(self, entity_type: str, entity_id: str, action: str, payload: dict) -> NotaryReceipt:
        """Record a transition and return a receipt.

        Args:
            entity_type: project, credit, verification or adjustment
            entity_id: projectId, serial number or primary key
            action: created, updated, transferred, retired or adjusted
            payload: JSON-serializable snapshot of the change
        """
        raise NotImplementedError


class MockNotary(BaseNotary):
    """Notary that fabricates a transaction hash and logs it (for development)."""

    network = "mock"

    def record(self, entity_type: str, entity_id: str, action: str, payload: dict) -> NotaryReceipt:
        receipt = NotaryReceipt(tx_hash="0x" + secrets.token_hex(32), network=self.network, block_number=0)
        logger.info(
            "Notarized %s %s:%s as %s", action, entity_type, entity_id, receipt.tx_hash
        )
        return receipt


def _notarize_now(entity_type: str, entity_id: str, action: str, payload: dict):
    from .conf import get_notary

    try:
        return get_notary().record(entity_type, str(entity_id), action, payload)
    except Exception:
        logger.exception("Notary failed for %s %s:%s", action, entity_type, entity_id)
        return None


def notarize(entity_type: str, entity_id, action: str, payload: dict = None) -> None:
    """
    Schedule notarization once the current transaction commits.

    Failures are logged and never propagate to the caller.
    """
    transaction.on_commit(
        lambda: _notarize_now(entity_type, entity_id, action, payload or {})
    )
