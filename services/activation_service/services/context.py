"""Per-request context handed to the activation tracker."""

import uuid
from dataclasses import dataclass, field
from typing import Optional

from libs.common.config import Settings, get_settings
from libs.common.events import EventBus
from libs.db.retry import DatabaseRetryPolicy
from sqlalchemy.ext.asyncio import AsyncSession


@dataclass
class ActivationContext:
    """Everything one unit of activation work needs.

    ``doer_id`` is None when the caller is not an authenticated doer; the
    tracker then short-circuits without touching storage.
    """

    db: AsyncSession
    bus: EventBus
    doer_id: Optional[uuid.UUID] = None
    settings: Settings = field(default_factory=get_settings)
    retry: DatabaseRetryPolicy = field(default_factory=DatabaseRetryPolicy.from_settings)

    @property
    def is_authenticated(self) -> bool:
        return self.doer_id is not None
