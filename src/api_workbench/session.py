"""Session: the control-thread context tying store, executor and search together.

A session holds what a UI would otherwise keep in globals: the selected
workspace and collection, the last response and the search over it. Only the
control thread touches it. Network calls may run on a worker thread via
``dispatch``, but their outcomes are queued and applied by the control thread
in ``process_pending``, one at a time.
"""

import logging
import queue
from concurrent.futures import Future, ThreadPoolExecutor

from api_workbench.codec.postman import dump_collection, import_collection
from api_workbench.errors import WorkbenchError
from api_workbench.http.executor import ExecutionResult, RequestExecutor
from api_workbench.model.base import Collection, RequestDraft
from api_workbench.search.engine import ResponseSearch
from api_workbench.store.workspace import WorkspaceStore

logger = logging.getLogger(__name__)


class Session:
    def __init__(
        self,
        store: WorkspaceStore,
        executor: RequestExecutor | None = None,
        search: ResponseSearch | None = None,
    ):
        self.store = store
        self.executor = executor or RequestExecutor()
        self.search = search or ResponseSearch()
        self.selected_workspace: str | None = None
        self.selected_collection = -1
        self.last_result: ExecutionResult | None = None
        self.last_error: WorkbenchError | None = None
        self._pending: queue.Queue = queue.Queue()
        self._pool: ThreadPoolExecutor | None = None

    # -- selection ---------------------------------------------------------

    def select_workspace(self, name: str) -> bool:
        if self.store.find_workspace(name) is None:
            return False
        self.selected_workspace = name
        self.selected_collection = -1
        return True

    def select_collection(self, index: int) -> bool:
        if self.selected_workspace is None:
            return False
        if self.store.collection_at(self.selected_workspace, index) is None:
            return False
        self.selected_collection = index
        return True

    def current_collection(self) -> Collection | None:
        """The selected collection, re-resolved against the store each call."""
        if self.selected_workspace is None:
            return None
        return self.store.collection_at(self.selected_workspace, self.selected_collection)

    # -- requests ----------------------------------------------------------

    def save_draft(self, draft: RequestDraft, name: str | None = None) -> bool:
        """Append the draft to the selected collection. Unnamed drafts take the URL."""
        col = self.current_collection()
        if col is None:
            return False
        col.requests.append(draft.to_request(name))
        self.store.save()
        return True

    def load_request(self, req_index: int) -> RequestDraft | None:
        col = self.current_collection()
        if col is None or not 0 <= req_index < len(col.requests):
            return None
        return RequestDraft.from_request(col.requests[req_index])

    def import_collection(self, payload: str | bytes) -> Collection | None:
        """Decode a Postman collection and append it to the selected workspace."""
        if self.selected_workspace is None:
            return None
        collection = import_collection(payload)
        if not self.store.attach_collection(self.selected_workspace, collection):
            return None
        ws = self.store.find_workspace(self.selected_workspace)
        self.selected_collection = len(ws.collections) - 1
        return collection

    def export_collection(self, col_index: int | None = None) -> str | None:
        if col_index is not None and not self.select_collection(col_index):
            return None
        col = self.current_collection()
        if col is None:
            return None
        return dump_collection(col)

    # -- execution ---------------------------------------------------------

    def send(self, draft: RequestDraft) -> ExecutionResult | None:
        """Execute on the calling thread and apply the outcome immediately."""
        self._apply(self._run(draft))
        return self.last_result

    def dispatch(self, draft: RequestDraft) -> Future:
        """Execute on a worker thread; call ``process_pending`` to apply."""
        if self._pool is None:
            self._pool = ThreadPoolExecutor(max_workers=4, thread_name_prefix="api-workbench")
        return self._pool.submit(self._run_queued, draft)

    def process_pending(self) -> int:
        """Apply queued outcomes in completion order; returns how many."""
        applied = 0
        while True:
            try:
                outcome = self._pending.get_nowait()
            except queue.Empty:
                return applied
            self._apply(outcome)
            applied += 1

    def close(self) -> None:
        if self._pool is not None:
            self._pool.shutdown(wait=True)
            self._pool = None

    def _run(self, draft: RequestDraft) -> ExecutionResult | WorkbenchError:
        try:
            return self.executor.execute(draft.method, draft.url, draft.headers, draft.body)
        except WorkbenchError as e:
            logger.debug("Request to %s failed: %s", draft.url, e)
            return e

    def _run_queued(self, draft: RequestDraft) -> ExecutionResult | WorkbenchError:
        outcome = self._run(draft)
        self._pending.put(outcome)
        return outcome

    def _apply(self, outcome: ExecutionResult | WorkbenchError) -> None:
        if isinstance(outcome, WorkbenchError):
            self.last_result = None
            self.last_error = outcome
            self.search.show(str(outcome))
        else:
            self.last_result = outcome
            self.last_error = None
            self.search.show(outcome.response_body)
