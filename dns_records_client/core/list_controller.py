"""
List Controller - Paginated, searchable view of a remote collection

This module keeps one page of a server-owned collection in sync with the
backend. Every fetch replaces the page wholesale, every successful mutation
is followed by a refetch, and responses that arrive after a newer request
was issued are dropped.

The generic controller is configured per view:
    RecordListController(admin=False)  - the signed-in user's records
    RecordListController(admin=True)   - every record, with its owner
    UserAdminController                - account list with enable/disable
"""

import logging
import math
import threading
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple

from ..utils.validators import validate_record_form
from .debounce import Debouncer
from .errors import ApiError, DNSRecordsClientError, SessionExpired
from .models import Page

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 10
DEFAULT_SEARCH_DEBOUNCE = 0.5

DIALOG_CREATE = "create"
DIALOG_EDIT = "edit"
DIALOG_DELETE = "delete"

SESSION_EXPIRED_MESSAGE = "Session expired, please log in again."


@dataclass(frozen=True)
class Column:
    header: str
    accessor: str
    render: Optional[Callable[[Any], str]] = None

    def value(self, item: Any) -> str:
        if self.render is not None:
            return self.render(item)
        value = getattr(item, self.accessor, None)
        return "" if value is None else str(value)


RECORD_COLUMNS: Tuple[Column, ...] = (
    Column("ID", "id"),
    Column("Domain Name", "domain_name"),
    Column("Type", "record_type"),
    Column("Value", "value"),
)
OWNER_COLUMN = Column("Owner", "owner_username")
USER_COLUMNS: Tuple[Column, ...] = (
    Column("ID", "id"),
    Column("Username", "username"),
    Column("Role", "role"),
    Column("Status", "enabled", lambda user: "Enabled" if user.enabled else "Disabled"),
)


@dataclass
class Dialog:
    """An open create, edit or delete dialog and its feedback."""

    mode: str
    item: Optional[Any] = None
    form: Dict[str, str] = field(default_factory=dict)
    field_errors: Dict[str, str] = field(default_factory=dict)
    server_error: Optional[str] = None
    submitting: bool = False


class ResourceListController:
    """Keep one page of a remote collection consistent with the server."""

    fetch_error_message = "Failed to fetch items."
    noun = "item"

    def __init__(
        self,
        fetcher: Callable[..., Page],
        page_size: int = DEFAULT_PAGE_SIZE,
        search_debounce: float = DEFAULT_SEARCH_DEBOUNCE,
        reset_page_on_search: bool = True,
        paginated: bool = True,
        columns: Tuple[Column, ...] = (),
    ):
        """
        Initialize the controller.

        Args:
            fetcher: Returns a Page; called with ``page``, ``page_size`` and
                ``search`` keywords when ``paginated``, with no arguments
                otherwise
            page_size: Fixed number of items per page
            search_debounce: Quiet window in seconds before a search runs
            reset_page_on_search: Return to page 1 when the search changes
            paginated: Whether the backend pages this collection
            columns: Columns shown for each item
        """
        if page_size < 1:
            raise ValueError("page_size must be at least 1")

        self.fetcher = fetcher
        self.page_size = page_size
        self.reset_page_on_search = reset_page_on_search
        self.paginated = paginated
        self.columns = columns

        self.items: List[Any] = []
        self.loading = False
        self.error: Optional[str] = None
        self.page = 1
        self.total_count = 0
        self.search_term = ""
        self.debounced_search_term = ""
        self.dialog: Optional[Dialog] = None
        self.session_expired = False

        self._request_seq = 0
        self._lock = threading.RLock()
        self._debouncer = Debouncer(
            self._apply_search, search_debounce, on_error=self._search_failed
        )

    @property
    def last_page(self) -> int:
        if not self.paginated:
            return 1
        return math.ceil(self.total_count / self.page_size)

    def fetch_page(self) -> bool:
        """
        Replace the current page with the server's view of it.

        Returns:
            True if the response was applied, False on failure or when a
            newer fetch superseded this one
        """
        with self._lock:
            self._request_seq += 1
            request_id = self._request_seq
            self.loading = True
            self.error = None
            params = {
                "page": self.page,
                "page_size": self.page_size,
                "search": self.debounced_search_term,
            }

        try:
            result = self.fetcher(**params) if self.paginated else self.fetcher()
        except DNSRecordsClientError as e:
            logger.error(f"{self.fetch_error_message} {e}")
            with self._lock:
                if request_id == self._request_seq:
                    self.error = self.fetch_error_message
                    self.loading = False
            if isinstance(e, SessionExpired):
                raise
            return False

        with self._lock:
            if request_id != self._request_seq:
                logger.debug(f"Discarding stale response for request {request_id}")
                return False
            self.items = list(result.items)
            self.total_count = result.total_count
            self.loading = False

        logger.debug(
            f"Applied page {params['page']} with {len(self.items)} of "
            f"{self.total_count} {self.noun}s"
        )
        return True

    def change_page(self, page: int) -> bool:
        """Move to ``page`` and refetch; out-of-range pages are ignored."""
        with self._lock:
            if page < 1 or page > self.last_page or page == self.page:
                logger.debug(f"Ignoring page change to {page} (last page {self.last_page})")
                return False
            self.page = page
        self.fetch_page()
        return True

    def next_page(self) -> bool:
        return self.change_page(self.page + 1)

    def previous_page(self) -> bool:
        return self.change_page(self.page - 1)

    def load(self, page: int = 1, search: str = "") -> bool:
        """
        Show ``page`` of the results for ``search`` with a single fetch.

        A page past the end falls back to the last page, which costs a
        second fetch.

        Returns:
            True if the requested page was shown
        """
        self._debouncer.cancel()
        with self._lock:
            self.search_term = search
            self.debounced_search_term = search
            self.page = max(1, page)

        if not self.fetch_page():
            return False

        last_page = max(1, self.last_page)
        if self.page <= last_page:
            return True

        logger.debug(f"Page {self.page} is past the last page {last_page}")
        with self._lock:
            self.page = last_page
        self.fetch_page()
        return False

    def set_search(self, term: str) -> None:
        """Update the search input; the query follows after the quiet window."""
        self.search_term = term
        self._debouncer(term)

    def flush_search(self) -> bool:
        """Run a pending search immediately."""
        return self._debouncer.flush()

    def close(self) -> None:
        self._debouncer.cancel()

    def _apply_search(self, term: str) -> None:
        with self._lock:
            if term == self.debounced_search_term:
                return
            self.debounced_search_term = term
            if self.reset_page_on_search:
                self.page = 1
        self.fetch_page()

    def _search_failed(self, error: Exception) -> None:
        """Record a failure of a search run by the debounce timer."""
        with self._lock:
            if isinstance(error, SessionExpired):
                logger.warning("Session expired during search")
                self.session_expired = True
                self.error = SESSION_EXPIRED_MESSAGE
            else:
                logger.error(f"Search failed: {error}")
                self.error = self.fetch_error_message
            self.loading = False

    def open_dialog(self, mode: str, item: Optional[Any] = None) -> Dialog:
        form = item.to_form() if item is not None and hasattr(item, "to_form") else {}
        self.dialog = Dialog(mode=mode, item=item, form=form)
        return self.dialog

    def close_dialog(self) -> None:
        self.dialog = None

    def _mutate(self, mode: str, action: Callable[[], Any]) -> bool:
        """Run a mutation, then close the dialog and refetch on success."""
        dialog = self.dialog
        if dialog is None or dialog.mode != mode:
            dialog = self.open_dialog(mode)

        dialog.submitting = True
        dialog.server_error = None
        try:
            action()
        except SessionExpired:
            raise
        except ApiError as e:
            if e.status_code >= 300:
                dialog.server_error = e.message or f"Failed to {mode} {self.noun}."
                logger.error(f"Failed to {mode} {self.noun}: {e}")
                return False
            # Applied server-side; only the response body was unusable.
            logger.warning(f"{mode} {self.noun} succeeded with an unreadable response: {e}")
        except DNSRecordsClientError as e:
            dialog.server_error = f"Failed to {mode} {self.noun}."
            logger.error(f"Failed to {mode} {self.noun}: {e}")
            return False
        finally:
            dialog.submitting = False

        self.close_dialog()
        self.fetch_page()
        return True


class RecordListController(ResourceListController):
    """DNS record listing for a user, or for every user when ``admin``."""

    fetch_error_message = "Failed to fetch DNS records."
    noun = "record"

    def __init__(self, api, admin: bool = False, **kwargs):
        columns = RECORD_COLUMNS + (OWNER_COLUMN,) if admin else RECORD_COLUMNS
        super().__init__(api.list, columns=columns, **kwargs)
        self.api = api
        self.admin = admin

    def create(self, payload: Dict[str, str]) -> bool:
        return self._mutate(DIALOG_CREATE, lambda: self.api.create(payload))

    def update(self, record_id: int, payload: Dict[str, str]) -> bool:
        return self._mutate(DIALOG_EDIT, lambda: self.api.update(record_id, payload))

    def remove(self, record_id: int) -> bool:
        return self._mutate(DIALOG_DELETE, lambda: self.api.delete(record_id))

    def submit_form(self, form: Dict[str, str]) -> bool:
        """
        Validate the record form and send it.

        The open dialog decides between create and update; without one a
        create dialog is opened. Validation failures stay on the dialog and
        nothing is sent.
        """
        dialog = self.dialog or self.open_dialog(DIALOG_CREATE)
        dialog.form = dict(form)
        dialog.field_errors = validate_record_form(form)
        if dialog.field_errors:
            return False

        payload = {
            "DomainName": form["DomainName"],
            "Type": form["Type"],
            "Value": form["Value"],
        }
        if dialog.mode == DIALOG_EDIT and dialog.item is not None:
            return self.update(dialog.item.id, payload)
        return self.create(payload)

    def confirm_delete(self) -> bool:
        dialog = self.dialog
        if dialog is None or dialog.mode != DIALOG_DELETE or dialog.item is None:
            return False
        return self.remove(dialog.item.id)


class UserAdminController(ResourceListController):
    """Unpaginated account list with an enable/disable toggle."""

    fetch_error_message = "Failed to fetch users."
    noun = "user"

    def __init__(self, api, **kwargs):
        kwargs.setdefault("paginated", False)
        super().__init__(api.users_page, columns=USER_COLUMNS, **kwargs)
        self.api = api
        self.status_error: Optional[str] = None

    def find(self, user_id: int) -> Optional[Any]:
        for user in self.items:
            if user.id == user_id:
                return user
        return None

    def toggle_status(self, user) -> bool:
        """Flip a user's enabled flag, then refetch the list."""
        self.status_error = None
        try:
            self.api.update_user_status(user.id, not user.enabled)
        except SessionExpired:
            raise
        except DNSRecordsClientError as e:
            self.status_error = f"Failed to update status for user {user.username}."
            logger.error(f"{self.status_error} {e}")
            return False

        self.fetch_page()
        return True
