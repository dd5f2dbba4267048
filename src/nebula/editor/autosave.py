"""Debounced autosave of edit sessions.

Edits accumulate in memory; a save fires after an idle window and is
rescheduled by every further edit. A save that has already started is
never cancelled, and saves run one at a time (last writer wins).
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from nebula.editor.session import EditSession
    from nebula.models import DocumentUpdate

logger = logging.getLogger(__name__)


class DocumentStore(Protocol):
    """External key-value store holding document records."""

    async def save(self, update: DocumentUpdate) -> None: ...


class AutosaveScheduler:
    """Schedules debounced saves of registered sessions.

    Attributes:
        debounce_seconds: Idle window before a save fires.
        _pending_saves: doc_id -> task still waiting out the idle window.
        _dirty_docs: doc_ids with unsaved changes.
        _sessions: doc_id -> registered session.
        _generations: doc_id -> edit counter, to detect edits during a save.
    """

    def __init__(self, store: DocumentStore, debounce_seconds: float = 1.0) -> None:
        self.store = store
        self.debounce_seconds = debounce_seconds
        self._pending_saves: dict[str, asyncio.Task[None]] = {}
        self._dirty_docs: set[str] = set()
        self._sessions: dict[str, EditSession] = {}
        self._generations: dict[str, int] = {}
        self._save_lock = asyncio.Lock()

    def attach(self, session: EditSession) -> None:
        """Register a session and hook its change notifications."""
        self._sessions[session.doc_id] = session
        session.on_dirty = self.mark_dirty

    def detach(self, doc_id: str) -> None:
        """Unregister a session, dropping any pending save."""
        session = self._sessions.pop(doc_id, None)
        if session is not None:
            session.on_dirty = None
        self._cancel_pending_save(doc_id)
        self._dirty_docs.discard(doc_id)
        self._generations.pop(doc_id, None)

    def is_dirty(self, doc_id: str) -> bool:
        return doc_id in self._dirty_docs

    def mark_dirty(self, doc_id: str) -> None:
        """Record a change and (re)start the idle window. Needs a running loop."""
        self._dirty_docs.add(doc_id)
        self._generations[doc_id] = self._generations.get(doc_id, 0) + 1
        self._schedule_debounced_save(doc_id)

    def _schedule_debounced_save(self, doc_id: str) -> None:
        self._cancel_pending_save(doc_id)

        async def debounced_save() -> None:
            await asyncio.sleep(self.debounce_seconds)
            # Past the idle window: the save is no longer cancellable.
            self._pending_saves.pop(doc_id, None)
            await self._persist_document(doc_id)

        self._pending_saves[doc_id] = asyncio.create_task(debounced_save())

    def _cancel_pending_save(self, doc_id: str) -> None:
        task = self._pending_saves.pop(doc_id, None)
        if task and not task.done():
            task.cancel()

    async def _persist_document(self, doc_id: str) -> None:
        session = self._sessions.get(doc_id)
        if session is None:
            logger.warning("Session %s not registered, skipping save", doc_id)
            return

        async with self._save_lock:
            generation = self._generations.get(doc_id, 0)
            update = session.to_update()
            try:
                await self.store.save(update)
            except Exception:
                logger.exception("Failed to save document %s", doc_id)
                return

            if self._generations.get(doc_id, 0) == generation:
                self._dirty_docs.discard(doc_id)
                session.dirty = False
            logger.info("Saved document %s (%d chars)", doc_id, len(update.markdown))

    async def force_save(self, doc_id: str) -> None:
        """Save now, skipping the idle window (explicit save, close)."""
        self._cancel_pending_save(doc_id)
        if doc_id in self._dirty_docs:
            await self._persist_document(doc_id)

    async def persist_all_dirty(self) -> None:
        """Save every dirty document (e.g. on shutdown)."""
        for doc_id in list(self._dirty_docs):
            await self.force_save(doc_id)

    def cancel(self) -> None:
        """Drop all pending saves without saving."""
        for doc_id in list(self._pending_saves):
            self._cancel_pending_save(doc_id)
