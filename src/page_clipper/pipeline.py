"""Cancellable state machine driving one share operation.

The orchestrator owns a single state value and at most one in-flight
``asyncio.Task``. Every user action that starts work cancels the previous
task first, so a superseded task can never write state: it is interrupted at
its next await and its results are discarded.
"""

import asyncio
import logging
from collections.abc import AsyncIterator, Callable, Coroutine
from contextlib import asynccontextmanager
from dataclasses import dataclass
from enum import Enum
from typing import Any

import httpx

from page_clipper.ai.client import GeminiClient
from page_clipper.config import AppConfig
from page_clipper.credentials import Credentials
from page_clipper.editing import apply_edit, resolve_image_url
from page_clipper.errors import InvalidTransition, MissingCredentials, describe_error
from page_clipper.extractor.metadata import extract_preview_image, extract_title
from page_clipper.fetcher.page_fetcher import PageFetcher
from page_clipper.http.executor import ResilientExecutor
from page_clipper.store.client import CollectionStoreClient
from page_clipper.store.models import Collection, DraftItem, DraftValue, Schema
from page_clipper.validation.sanitizer import sanitize

logger = logging.getLogger(__name__)


class PipelineState(str, Enum):
    """Observable state of a share operation."""

    IDLE = "idle"
    FETCHING_COLLECTIONS = "fetching_collections"
    ANALYZING = "analyzing"
    EDITING = "editing"
    SAVING = "saving"
    ERROR = "error"
    DONE = "done"


class PipelineEvent(str, Enum):
    """User actions and task outcomes."""

    START = "start"
    COLLECTIONS_LOADED = "collections_loaded"
    SELECT = "select"
    ANALYZED = "analyzed"
    SAVE = "save"
    SAVED = "saved"
    CANCEL_EDIT = "cancel_edit"
    FAILED = "failed"
    TEARDOWN = "teardown"


_S = PipelineState
_E = PipelineEvent

_TRANSITIONS: dict[tuple[PipelineState, PipelineEvent], PipelineState] = {
    (_S.IDLE, _E.START): _S.FETCHING_COLLECTIONS,
    (_S.ERROR, _E.START): _S.FETCHING_COLLECTIONS,
    (_S.FETCHING_COLLECTIONS, _E.START): _S.FETCHING_COLLECTIONS,
    (_S.FETCHING_COLLECTIONS, _E.COLLECTIONS_LOADED): _S.IDLE,
    (_S.FETCHING_COLLECTIONS, _E.FAILED): _S.ERROR,
    (_S.IDLE, _E.SELECT): _S.ANALYZING,
    (_S.ERROR, _E.SELECT): _S.ANALYZING,
    (_S.ANALYZING, _E.SELECT): _S.ANALYZING,
    (_S.ANALYZING, _E.ANALYZED): _S.EDITING,
    (_S.ANALYZING, _E.FAILED): _S.ERROR,
    (_S.EDITING, _E.SAVE): _S.SAVING,
    (_S.ERROR, _E.SAVE): _S.SAVING,
    (_S.EDITING, _E.CANCEL_EDIT): _S.IDLE,
    (_S.ERROR, _E.CANCEL_EDIT): _S.IDLE,
    (_S.SAVING, _E.SAVED): _S.DONE,
    (_S.SAVING, _E.FAILED): _S.ERROR,
}

_STATUS_TEXT = {
    _S.IDLE: "Choose a collection",
    _S.FETCHING_COLLECTIONS: "Fetching collections...",
    _S.ANALYZING: "Analyzing...",
    _S.EDITING: "Review the draft",
    _S.SAVING: "Saving...",
    _S.ERROR: "Something went wrong",
    _S.DONE: "Saved",
}


def transition(state: PipelineState, event: PipelineEvent) -> PipelineState:
    """Next state for ``event`` in ``state``; teardown is valid everywhere."""
    if event is PipelineEvent.TEARDOWN:
        return PipelineState.IDLE
    try:
        return _TRANSITIONS[(state, event)]
    except KeyError:
        raise InvalidTransition(f"Cannot {event.value} while {state.value}") from None


@dataclass
class Services:
    """Remote collaborators used by one orchestrator."""

    store: CollectionStoreClient
    model: GeminiClient
    fetcher: PageFetcher


@asynccontextmanager
async def open_services(credentials: Credentials, config: AppConfig | None = None) -> AsyncIterator[Services]:
    """Build clients sharing one connection pool; closes them on exit."""
    if not credentials.is_valid:
        raise MissingCredentials("Missing API keys. Run 'page-clipper configure' first.")
    config = config or AppConfig()

    async with httpx.AsyncClient(follow_redirects=True) as api_client:
        executor = ResilientExecutor(api_client, config.retry)
        async with PageFetcher(config.fetcher) as fetcher:
            yield Services(
                store=CollectionStoreClient(
                    executor, credentials.store_token, credentials.space_id, config.store
                ),
                model=GeminiClient(executor, credentials.ai_key, config.model),
                fetcher=fetcher,
            )


Listener = Callable[["Orchestrator"], None]


class Orchestrator:
    """Sequences fetch, schema, extraction, editing and commit for one URL."""

    def __init__(self, url: str, services: Services, user_guidance: str = ""):
        self.url = url
        self.services = services
        self.user_guidance = user_guidance

        self.state = PipelineState.IDLE
        self.status = _STATUS_TEXT[PipelineState.IDLE]
        self.collections: list[Collection] = []
        self.selected: Collection | None = None
        self.schema: Schema | None = None
        self.draft: DraftItem = {}
        self.image_url: str | None = None
        self.item_id: str | None = None
        self.error_message: str | None = None

        self._task: asyncio.Task | None = None
        self._listeners: list[Listener] = []

    # -- observation --------------------------------------------------------

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call ``listener`` after every change; returns an unsubscribe function."""
        self._listeners.append(listener)
        return lambda: self._listeners.remove(listener)

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self)

    def _apply(self, event: PipelineEvent) -> None:
        previous = self.state
        self.state = transition(self.state, event)
        self.status = _STATUS_TEXT[self.state]
        logger.debug("%s --%s--> %s", previous.value, event.value, self.state.value)
        self._notify()

    def _set_status(self, status: str) -> None:
        self.status = status
        self._notify()

    def _fail(self, exc: BaseException) -> None:
        logger.debug("Pipeline step failed", exc_info=exc)
        self.error_message = describe_error(exc)
        self._apply(PipelineEvent.FAILED)

    # -- task management ----------------------------------------------------

    def _cancel_current(self) -> None:
        if self._task is not None and not self._task.done():
            logger.debug("Cancelling in-flight task")
            self._task.cancel()
        self._task = None

    def _run(self, coro: Coroutine[Any, Any, None]) -> asyncio.Task:
        self._cancel_current()
        self._task = asyncio.create_task(coro)
        return self._task

    async def wait(self) -> None:
        """Wait for the current unit of work, ignoring cancellation."""
        while self._task is not None:
            task = self._task
            try:
                await task
            except asyncio.CancelledError:
                if asyncio.current_task().cancelling():
                    raise
            if task is self._task:
                return

    # -- user actions -------------------------------------------------------

    def start(self) -> asyncio.Task:
        """Load the collection menu."""
        self._apply(PipelineEvent.START)
        self.error_message = None
        return self._run(self._load_collections())

    def select(self, collection: Collection) -> asyncio.Task:
        """Analyze the page for ``collection``, superseding any analysis in flight."""
        self._apply(PipelineEvent.SELECT)
        self.selected = collection
        self.error_message = None
        self.schema = None
        self.draft = {}
        return self._run(self._analyze(collection))

    def update_field(self, key: str, value: DraftValue) -> None:
        """Edit one draft field; ``None`` removes it."""
        if self.state is not PipelineState.EDITING:
            raise InvalidTransition(f"Cannot edit while {self.state.value}")
        self.draft = apply_edit(self.draft, key, value)
        self._notify()

    def save(self, on_done: Callable[[], None] | None = None) -> asyncio.Task:
        """Sanitize the draft and commit it to the selected collection."""
        if self.selected is None or self.schema is None:
            raise InvalidTransition("Nothing to save: no analyzed draft")
        item = self.commit_payload()
        image_url = resolve_image_url(self.draft, self.image_url)
        self._apply(PipelineEvent.SAVE)
        self.error_message = None
        return self._run(self._commit(self.selected, self.schema, item, image_url, on_done))

    def cancel_editing(self) -> None:
        """Discard the draft and return to the collection menu."""
        self._apply(PipelineEvent.CANCEL_EDIT)
        self._cancel_current()
        self.selected = None
        self.schema = None
        self.draft = {}
        self.image_url = None
        self.error_message = None
        self._notify()

    def teardown(self) -> None:
        """Cancel any in-flight work and reset."""
        self._cancel_current()
        self.selected = None
        self.draft = {}
        self._apply(PipelineEvent.TEARDOWN)

    def commit_payload(self) -> DraftItem:
        """Sanitized draft restricted to the content key and schema properties."""
        if self.schema is None:
            return {}
        sanitized = sanitize(self.draft, self.schema)
        content_key = self.schema.content_key
        return {
            key: value
            for key, value in sanitized.items()
            if key == content_key or self.schema.get(key) is not None
        }

    # -- units of work ------------------------------------------------------

    async def _load_collections(self) -> None:
        try:
            collections = await self.services.store.list_collections()
        except asyncio.CancelledError:
            raise
        except Exception as e:
            self._fail(e)
            return
        self.collections = collections
        logger.info("Loaded %d collections", len(collections))
        self._apply(PipelineEvent.COLLECTIONS_LOADED)

    async def _analyze(self, collection: Collection) -> None:
        try:
            html = await self.services.fetcher.fetch(self.url)
            schema = await self.services.store.fetch_schema(collection.id)
            image_url = extract_preview_image(html, self.url)
            draft = await self.services.model.generate_item(
                self.url,
                html,
                schema.properties,
                schema.content_key,
                user_guidance=self.user_guidance,
                suggested_image_url=image_url,
            )
        except asyncio.CancelledError:
            raise
        except Exception as e:
            self.selected = None
            self._fail(e)
            return

        content_key = schema.content_key
        if draft.get(content_key) in (None, ""):
            draft[content_key] = extract_title(html)
            logger.debug("Model omitted %r, using page title", content_key)

        self.schema = schema
        self.draft = draft
        self.image_url = image_url or None
        self._apply(PipelineEvent.ANALYZED)

    async def _commit(
        self,
        collection: Collection,
        schema: Schema,
        item: DraftItem,
        image_url: str | None,
        on_done: Callable[[], None] | None,
    ) -> None:
        try:
            item_id = await self.services.store.create_item(collection.id, item, schema.content_key)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            self._fail(e)
            return

        self.item_id = item_id
        self._set_status("Adding content...")
        try:
            await self.services.store.append_content(item_id, self.url, image_url)
        except asyncio.CancelledError:
            logger.warning("Cancelled after creating item %s; its content blocks are missing", item_id)
            raise
        except Exception as e:
            # No compensating delete exists: the item stays without its blocks.
            logger.warning("Item %s was created but appending content failed: %s", item_id, e)
            self._fail(e)
            return

        self._apply(PipelineEvent.SAVED)
        if on_done is not None:
            on_done()
