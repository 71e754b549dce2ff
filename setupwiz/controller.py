"""
Reconciliation controller for the setup wizard.

The controller is the only stateful piece of the engine. It sits between an
editing surface that holds configuration text and the wizard UI that edits a
draft, and keeps them in step without feedback loops: text the controller
emits itself is remembered, and when the surface reports it back the echo is
ignored instead of being re-parsed.
"""

from __future__ import annotations

import threading
from dataclasses import replace
from enum import Enum
from typing import Any, Callable, List, Optional

from setupwiz.codecs.text import TextCodec
from setupwiz.logging import format_exception_summary, get_logger
from setupwiz.mapping.apply import apply_draft
from setupwiz.mapping.draft import Draft, select_performance_tier, update_draft
from setupwiz.mapping.extract import extract_draft
from setupwiz.mapping.tree import ConfigTree, is_record
from setupwiz.presets.resolver import recommended_allocator_policy
from setupwiz.preview.diff import LineDiffStats, calculate_line_diff_stats
from setupwiz.preview.preview import ConfigPreviewItem, build_preview_items

logger = get_logger(__name__)

ContentListener = Callable[[str], None]

MAX_PENDING_ECHOES = 16


class WizardState(str, Enum):
    """
    Reconciliation state of a controller.
    """

    UNINITIALIZED = "uninitialized"
    SYNCED = "synced"
    DIRTY_INTERNAL = "dirty_internal"
    """A wizard edit was emitted and its echo has not come back yet."""
    ERROR = "error"


class WizardStateError(RuntimeError):
    """Raised when the draft is edited while no valid draft is loaded."""


class ReconciliationController:
    """
    Keep a wizard draft and configuration text synchronized.

    Event handlers are serialized with a re-entrant lock, so a listener that
    reports the emitted text straight back from inside ``on_content_change``
    is handled as an echo.
    """

    def __init__(
        self,
        codec: TextCodec,
        runtime_os: Optional[str] = None,
        recommended_policy: Optional[str] = None,
        on_content_change: Optional[ContentListener] = None,
    ) -> None:
        self.codec = codec
        self.recommended_policy = recommended_policy or recommended_allocator_policy(runtime_os)
        self.on_content_change = on_content_change
        self._lock = threading.RLock()
        self._state = WizardState.UNINITIALIZED
        self._content = ""
        self._tree: Optional[ConfigTree] = None
        self._draft: Optional[Draft] = None
        self._parse_error: Optional[str] = None
        self._pending_echoes: List[str] = []

    @property
    def state(self) -> WizardState:
        return self._state

    @property
    def draft(self) -> Optional[Draft]:
        return self._draft

    @property
    def tree(self) -> Optional[ConfigTree]:
        return self._tree

    @property
    def content(self) -> str:
        return self._content

    @property
    def parse_error(self) -> Optional[str]:
        return self._parse_error

    @property
    def preview(self) -> List[ConfigPreviewItem]:
        with self._lock:
            if self._draft is None:
                return []
            return build_preview_items(self._draft, self.recommended_policy)

    def open(self, content: str) -> WizardState:
        """Open the wizard on ``content``; a fresh draft is always extracted."""
        with self._lock:
            self._content = content
            self._pending_echoes.clear()
            self._initialize(content)
            return self._state

    def close(self) -> None:
        """Drop the draft; reopening starts again from the current text."""
        with self._lock:
            self._state = WizardState.UNINITIALIZED
            self._draft = None
            self._tree = None
            self._parse_error = None
            self._pending_echoes.clear()
            logger.debug("Wizard closed")

    def on_external_text(self, text: str) -> bool:
        """
        Handle a text update reported by the editing surface.

        Returns:
            True when the text was parsed, False when it was ignored (an echo
            of our own output, or the wizard is closed)
        """
        with self._lock:
            if text in self._pending_echoes:
                # older emissions are superseded by this one
                del self._pending_echoes[: self._pending_echoes.index(text) + 1]
                if not self._pending_echoes and self._state == WizardState.DIRTY_INTERNAL:
                    self._state = WizardState.SYNCED
                logger.debug("Ignoring echo of emitted configuration text")
                return False

            self._content = text
            self._pending_echoes.clear()
            if self._state == WizardState.UNINITIALIZED:
                return False
            self._initialize(text)
            return True

    def edit(self, **changes: Any) -> str:
        """
        Apply draft field changes and emit the resulting text.

        Raises:
            WizardStateError: If no valid draft is loaded
        """
        with self._lock:
            draft = update_draft(self._require_draft(), **changes)
            return self._emit(draft)

    def select_tier(self, tier: str) -> str:
        """Switch performance tier (with its recommendations) and emit the text."""
        with self._lock:
            draft = select_performance_tier(self._require_draft(), tier)
            return self._emit(draft)

    def diff_against(self, saved_content: str) -> LineDiffStats:
        """Line statistics between saved text and the current text."""
        with self._lock:
            return calculate_line_diff_stats(saved_content, self._content)

    def _require_draft(self) -> Draft:
        if self._state not in (WizardState.SYNCED, WizardState.DIRTY_INTERNAL) or self._draft is None:
            raise WizardStateError(f"Cannot edit the wizard draft in state '{self._state.value}'")
        return self._draft

    def _initialize(self, text: str) -> None:
        try:
            tree = self.codec.parse(text)
        except Exception as exc:
            self._fail(format_exception_summary(exc))
            return
        if not is_record(tree):
            self._fail("Configuration root must be a mapping")
            return

        draft = extract_draft(tree, self.recommended_policy)
        self._tree = tree
        self._draft = replace(draft, allocator_policy=self.recommended_policy)
        self._parse_error = None
        self._state = WizardState.SYNCED
        logger.debug("Wizard draft extracted (tier=%s)", self._draft.performance_tier)

    def _fail(self, message: str) -> None:
        # draft and tree stay as they were
        self._parse_error = message
        self._state = WizardState.ERROR
        logger.warning("Failed to parse configuration text: %s", message)

    def _emit(self, draft: Draft) -> str:
        draft = replace(draft, allocator_policy=self.recommended_policy)
        tree = apply_draft(self._tree or {}, draft, self.recommended_policy)
        text = self.codec.serialize(tree)

        self._draft = draft
        self._tree = tree
        self._content = text
        self._pending_echoes.append(text)
        del self._pending_echoes[:-MAX_PENDING_ECHOES]
        self._state = WizardState.DIRTY_INTERNAL
        logger.debug("Emitting configuration text for tier=%s", draft.performance_tier)

        if self.on_content_change is not None:
            self.on_content_change(text)
        return text
