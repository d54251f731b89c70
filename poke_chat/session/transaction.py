"""Pending-action lifecycle: apply, dismiss or retry one suggestion at a time."""

from __future__ import annotations

from collections import deque
from enum import Enum
from typing import Callable, Deque, List, Optional, Sequence

from ..actions import ActionSynthesizer, merge_member
from ..models import Action, ActionType
from ..stores import ChatLog, HistoryStore, TeamStore


class PendingActionError(RuntimeError):
    """Raised when a decision is requested that the current state does not allow."""


class TransactionState(str, Enum):
    NO_PENDING = "no_pending"
    PENDING_VALID = "pending_valid"
    PENDING_INVALID = "pending_invalid"


class TransactionController:
    """Owns the queue of Actions produced by the latest response.

    Only the head of the queue is pending. Applying or dismissing it
    surfaces the next Action, rebased onto the team store as it stands
    then. Retry drops the whole queue. The team store, history and chat
    log are only written from here.
    """

    def __init__(
        self,
        team_store: TeamStore,
        history: HistoryStore,
        chat_log: ChatLog,
        *,
        synthesizer: Optional[ActionSynthesizer] = None,
        debug_logger: Optional[Callable[[str], None]] = None,
    ) -> None:
        self.team_store = team_store
        self.history = history
        self.chat_log = chat_log
        self.synthesizer = synthesizer or ActionSynthesizer()
        self.last_prompt: Optional[str] = None
        self._queue: Deque[Action] = deque()
        self._debug_logger = debug_logger

    def _debug(self, message: str) -> None:
        if self._debug_logger:
            self._debug_logger(message)

    # ------------------------------------------------------------------
    # Queue
    # ------------------------------------------------------------------
    def remember_prompt(self, prompt: str) -> None:
        self.last_prompt = prompt

    def load(self, actions: Sequence[Action]) -> Optional[Action]:
        """Start a new cycle; any Actions left from the previous one are dropped."""

        if self._queue:
            self._debug(f"Discarding {len(self._queue)} unresolved actions from previous response")
        self._queue = deque(actions)
        return self.pending

    @property
    def pending(self) -> Optional[Action]:
        return self._queue[0] if self._queue else None

    @property
    def queued(self) -> List[Action]:
        return list(self._queue)

    @property
    def state(self) -> TransactionState:
        action = self.pending
        if action is None:
            return TransactionState.NO_PENDING
        if action.is_valid:
            return TransactionState.PENDING_VALID
        return TransactionState.PENDING_INVALID

    # ------------------------------------------------------------------
    # Decisions
    # ------------------------------------------------------------------
    def apply(self) -> Action:
        action = self.pending
        if action is None:
            raise PendingActionError("No pending action to apply")
        if not action.is_valid:
            messages = "; ".join(err.message for err in action.validation_errors)
            raise PendingActionError(f"Pending action failed validation: {messages}")

        self._queue.popleft()
        self._commit(action)
        self.history.push_state(self.team_store.get(), f"Applied: {action.reason}", "ai")
        self.chat_log.append("system", f"Applied: {action.reason}")
        self._debug(f"Applied {action.type.value} at slot {action.slot}")
        self._surface_next()
        return action

    def dismiss(self) -> Action:
        action = self.pending
        if action is None:
            raise PendingActionError("No pending action to dismiss")
        self._queue.popleft()
        self.chat_log.append("system", "Suggestion dismissed")
        self._debug(f"Dismissed {action.type.value} at slot {action.slot}")
        self._surface_next()
        return action

    def rebase_pending(self) -> Optional[Action]:
        """Recompute the pending preview after the team was replaced outside the queue."""

        if self._queue:
            self._debug("Team replaced; rebasing pending action")
            self._surface_next()
        return self.pending

    def retry(self) -> str:
        """Drop the queue and hand back the prompt to re-submit."""

        if self.last_prompt is None:
            raise PendingActionError("No previous prompt to retry")
        self._queue.clear()
        self._debug("Retrying last prompt")
        return self.last_prompt

    def _commit(self, action: Action) -> None:
        slot = action.slot
        if action.type is ActionType.REMOVE:
            self.team_store.remove_slot(slot)
            return
        current = self.team_store.get()[slot]
        member = merge_member(action.type, action.update, current)
        self.team_store.set_slot(slot, member)

    def _surface_next(self) -> None:
        if not self._queue:
            return
        head = self._queue.popleft()
        self._queue.appendleft(self.synthesizer.rebase(head, self.team_store.get()))
