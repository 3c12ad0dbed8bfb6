"""Page lifecycle state machine: Active -> Archived -> Deleted.

Archive is the soft delete and is reversible through restore. Deleted is
terminal. Active -> Deleted is allowed when called directly even though the
UI always archives first. Favorite is not part of this machine.
"""

import logging
from enum import Enum

from notezero.errors import InvalidTransition
from notezero.models.page import Page, PageState

logger = logging.getLogger(__name__)


class LifecycleAction(str, Enum):
    ARCHIVE = "archive"
    RESTORE = "restore"
    DELETE = "delete"


TRANSITIONS: dict[tuple[PageState, LifecycleAction], PageState] = {
    (PageState.ACTIVE, LifecycleAction.ARCHIVE): PageState.ARCHIVED,
    (PageState.ACTIVE, LifecycleAction.RESTORE): PageState.ACTIVE,
    (PageState.ACTIVE, LifecycleAction.DELETE): PageState.DELETED,
    (PageState.ARCHIVED, LifecycleAction.ARCHIVE): PageState.ARCHIVED,
    (PageState.ARCHIVED, LifecycleAction.RESTORE): PageState.ACTIVE,
    (PageState.ARCHIVED, LifecycleAction.DELETE): PageState.DELETED,
}


class PageLifecycle:
    """Validates and applies lifecycle transitions to pages."""

    @staticmethod
    def next_state(page_id: str, state: PageState, action: LifecycleAction) -> PageState:
        try:
            return TRANSITIONS[(state, action)]
        except KeyError:
            raise InvalidTransition(page_id, state.value, action.value) from None

    @classmethod
    def check(cls, page: Page, action: LifecycleAction) -> PageState:
        """Target state for ``action``, raising InvalidTransition without touching the page."""
        return cls.next_state(page.id, page.state, action)

    @classmethod
    def apply(cls, page: Page, action: LifecycleAction) -> bool:
        """Apply ``action``; returns False when the page was already in the target state."""
        current = page.state
        target = cls.next_state(page.id, current, action)
        if target == current:
            return False
        if target == PageState.ACTIVE:
            page.is_archived = False
        elif target == PageState.ARCHIVED:
            page.is_archived = True
        else:
            page.is_deleted = True
        page.touch()
        logger.info("Page %s: %s -> %s", page.id, current.value, target.value)
        return True
