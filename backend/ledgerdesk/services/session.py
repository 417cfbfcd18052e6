"""Per-reviewer working state.

A ``ReviewSession`` holds what a reviewer currently has on screen: the
selected client, the categories resolved for it, its transactions, the last
push outcomes and any unanswered rule offers. Every client selection bumps
``selection_token`` as soon as it starts; a response that comes back after
the selection moved on must not be committed.
"""

import time
from collections import OrderedDict
from contextlib import contextmanager

import structlog

from ledgerdesk.core.exceptions import ConflictError, NotFoundError, ValidationError
from ledgerdesk.schemas.category import CategoryResolution
from ledgerdesk.schemas.client import Client
from ledgerdesk.schemas.export import PushOutcome
from ledgerdesk.schemas.rule import RuleOffer
from ledgerdesk.schemas.transaction import Transaction

logger = structlog.get_logger()


class ReviewSession:
    def __init__(self, session_id: str) -> None:
        self.id = session_id
        self.client: Client | None = None
        self.selection_token = 0
        self.categories = CategoryResolution(client_id=None)
        self.transactions: dict[str, Transaction] = {}
        self.push_outcomes: dict[str, PushOutcome] = {}
        self.rule_offers: dict[str, RuleOffer] = {}
        self._exporting = False

    def begin_selection(self) -> int:
        """Claim the next selection token before the client is known.

        In-flight work for the previous selection stops being current from
        this point on, even if the new client lookup is still pending.
        """
        self.selection_token += 1
        return self.selection_token

    def select(self, client: Client | None, token: int | None = None) -> bool:
        """Switch to another client and drop everything tied to the old one.

        With ``token``, the switch only happens if no later selection has
        started since the token was claimed. Returns whether it happened.
        """
        if token is None:
            token = self.begin_selection()
        elif token != self.selection_token:
            logger.info(
                "client_selection_superseded",
                session=self.id,
                client_id=client.id if client else None,
            )
            return False

        self.client = client
        self.categories = CategoryResolution(client_id=client.id if client else None)
        self.transactions = {}
        self.push_outcomes = {}
        self.rule_offers = {}
        return True

    def is_current(self, token: int, client_id: str) -> bool:
        return (
            token == self.selection_token
            and self.client is not None
            and self.client.id == client_id
        )

    def require_client(self) -> Client:
        if self.client is None:
            raise ValidationError("Select a client first")
        return self.client

    def get_transaction(self, transaction_id: str) -> Transaction:
        txn = self.transactions.get(transaction_id)
        if txn is None:
            raise NotFoundError("Transaction")
        return txn

    @property
    def exporting(self) -> bool:
        return self._exporting

    @contextmanager
    def export_lock(self):
        """Hold the export control disabled until the request settles."""
        if self._exporting:
            raise ConflictError("An export is already running for this session")
        self._exporting = True
        try:
            yield
        finally:
            self._exporting = False


class SessionStore:
    """In-process registry of review sessions, keyed by session id.

    Sessions are created by ``open`` only. Idle sessions expire after
    ``idle_timeout`` seconds and the least recently used ones are evicted
    beyond ``max_sessions``.
    """

    def __init__(self, idle_timeout: float = 4 * 3600, max_sessions: int = 500, clock=time.monotonic) -> None:
        self.idle_timeout = idle_timeout
        self.max_sessions = max_sessions
        self._clock = clock
        self._sessions: OrderedDict[str, tuple[ReviewSession, float]] = OrderedDict()

    def get(self, session_id: str) -> ReviewSession:
        """Look up an existing session; raises ``NotFoundError`` if there is none."""
        self._expire()
        entry = self._sessions.get(session_id)
        if entry is None:
            raise NotFoundError("Review session")
        return self._touch(session_id, entry[0])

    def open(self, session_id: str) -> ReviewSession:
        """Return the session, creating it if needed."""
        self._expire()
        entry = self._sessions.get(session_id)
        if entry is not None:
            return self._touch(session_id, entry[0])

        session = ReviewSession(session_id)
        self._touch(session_id, session)
        logger.debug("review_session_created", session=session_id)
        while len(self._sessions) > self.max_sessions:
            evicted, _ = self._sessions.popitem(last=False)
            logger.info("review_session_evicted", session=evicted)
        return session

    def drop(self, session_id: str) -> None:
        self._sessions.pop(session_id, None)

    def __contains__(self, session_id: str) -> bool:
        self._expire()
        return session_id in self._sessions

    def _touch(self, session_id: str, session: ReviewSession) -> ReviewSession:
        self._sessions[session_id] = (session, self._clock())
        self._sessions.move_to_end(session_id)
        return session

    def _expire(self) -> None:
        cutoff = self._clock() - self.idle_timeout
        # Ordered by last use, so stop at the first live one
        while self._sessions:
            session_id, (session, last_used) = next(iter(self._sessions.items()))
            if last_used > cutoff or session.exporting:
                break
            self._sessions.popitem(last=False)
            logger.info("review_session_expired", session=session_id)
