"""
Session state machine for logging in with an identity PCD.

    logged-out --login--> logging-in --proof ok--> logged-in
                              |                        |
                              +----proof failed----+   |
                                                   v   v
    logged-out <------------------logout----------------+

The session owns its state and the single storage slot holding the
serialized PCD. Consumers read snapshots through `state` and send
requests through `dispatch()`; they never mutate the state directly.

logged-in is only ever reached with a proof that was just generated or
that passed verify() when rehydrated from storage.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Callable, ClassVar, List, Mapping, Optional, Set, Tuple, Union

from .api import IdentityPCDPackage, ProveArgsLike
from .exceptions import LoginError, LoginInProgressError
from .pcd import IdentityPCD
from .storage import SESSION_KEY, SessionStorage


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LoggedOut:
    status: ClassVar[str] = "logged-out"


@dataclass(frozen=True)
class LoggingIn:
    status: ClassVar[str] = "logging-in"


@dataclass(frozen=True)
class LoggedIn:
    """
    An authenticated session.

    serialized_pcd always decodes to a value equal to pcd.
    """

    serialized_pcd: bytes
    pcd: IdentityPCD
    status: ClassVar[str] = "logged-in"


SessionState = Union[LoggedOut, LoggingIn, LoggedIn]


@dataclass(frozen=True)
class LoginRequest:
    args: ProveArgsLike


@dataclass(frozen=True)
class LogoutRequest:
    pass


SessionRequest = Union[LoginRequest, LogoutRequest]
Listener = Callable[[SessionState], None]


def _coerce_request(request: Union[SessionRequest, Mapping[str, Any]]) -> SessionRequest:
    if isinstance(request, (LoginRequest, LogoutRequest)):
        return request
    if isinstance(request, Mapping):
        kind = request.get("type")
        if kind == "login":
            if "args" not in request:
                raise ValueError("Login request is missing 'args'")
            return LoginRequest(args=request["args"])
        if kind == "logout":
            return LogoutRequest()
        raise ValueError(f"Unknown session request type {kind!r}")
    raise ValueError(f"Unsupported session request {request!r}")


class IdentitySession:
    """
    Owner of the current identity session.

    Attributes:
        package: Package used to prove, verify and (de)serialize PCDs.
        storage: Durable storage for the serialized session.
        key: Storage key of the session slot.
        last_error: Exception behind the most recent failed login, if any.

    Example:
        >>> session = IdentitySession(package, FileStorage("session.json"))
        >>> await session.rehydrate()
        >>> state, dispatch = use_identity(session)
        >>> dispatch({"type": "login", "args": args})
    """

    def __init__(
        self,
        package: IdentityPCDPackage,
        storage: SessionStorage,
        key: str = SESSION_KEY,
    ):
        self.package = package
        self.storage = storage
        self.key = key
        self.last_error: Optional[BaseException] = None
        self._state: SessionState = LoggedOut()
        # Bumped by every login and logout; a login whose generation is
        # stale when its proof arrives must not touch state or storage.
        self._generation = 0
        self._listeners: List[Listener] = []
        self._tasks: Set["asyncio.Task[SessionState]"] = set()

    @property
    def state(self) -> SessionState:
        return self._state

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """
        Call listener with the new state after every transition.

        Returns:
            A function that removes the listener.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _set_state(self, state: SessionState) -> None:
        logger.debug("Session %s -> %s", self._state.status, state.status)
        self._state = state
        for listener in list(self._listeners):
            try:
                listener(state)
            except Exception:
                logger.exception("Session listener %r failed", listener)

    async def rehydrate(self) -> SessionState:
        """
        Restore a persisted session at startup.

        The stored PCD is decoded and verified; anything that fails
        either step is deleted. Never raises.
        """
        if not isinstance(self._state, LoggedOut):
            logger.warning("Skipping rehydration: session is already %s", self._state.status)
            return self._state

        generation = self._generation
        try:
            data = self.storage.get(self.key)
        except Exception as e:
            logger.warning("Could not read stored session: %s", e)
            return self._state
        if data is None:
            return self._state

        pcd = None
        valid = False
        try:
            pcd = self.package.deserialize(data)
            valid = await self.package.verify(pcd)
        except Exception as e:
            logger.warning("Stored session is unreadable: %s", e)

        if generation != self._generation:
            logger.debug("Rehydration superseded by a newer request")
            return self._state

        if not valid:
            logger.warning("Discarding stored session that failed verification")
            try:
                self.storage.delete(self.key)
            except Exception as e:
                logger.warning("Could not delete stored session: %s", e)
            return self._state

        logger.info("Restored identity session %s", pcd.id)
        self._set_state(LoggedIn(serialized_pcd=bytes(data), pcd=pcd))
        return self._state

    def _begin_login(self) -> Tuple[int, bool]:
        if isinstance(self._state, LoggingIn):
            logger.warning("Ignoring login request: a login is already in progress")
            raise LoginInProgressError()
        relogin = isinstance(self._state, LoggedIn)
        self._generation += 1
        self.last_error = None
        self._set_state(LoggingIn())
        return self._generation, relogin

    async def _complete_login(self, args: ProveArgsLike, generation: int, relogin: bool) -> SessionState:
        try:
            pcd = await self.package.prove(args)
            if generation != self._generation:
                logger.warning("Discarding proof %s: session was logged out while proving", pcd.id)
                return self._state
            serialized = self.package.serialize(pcd)
            self.storage.set(self.key, serialized)
        except asyncio.CancelledError:
            if generation == self._generation:
                self._set_state(LoggedOut())
            raise
        except Exception as e:
            if generation != self._generation:
                logger.info("Login failed after logout: %s", e)
                return self._state
            self.last_error = e
            self._set_state(LoggedOut())
            if relogin:
                try:
                    self.storage.delete(self.key)
                except Exception as delete_error:
                    logger.warning("Could not delete stored session: %s", delete_error)
            raise LoginError(f"Login failed: {e}") from e

        state = LoggedIn(serialized_pcd=serialized, pcd=pcd)
        self._set_state(state)
        return state

    async def login(self, args: ProveArgsLike) -> SessionState:
        """
        Prove args and log in with the resulting PCD.

        Returns:
            The state after the attempt. This is logged-out when a
            logout arrived while proving.

        Raises:
            LoginInProgressError: If another login is still proving.
            LoginError: If proving or persisting failed; the cause is
                chained. The session is logged-out afterwards.
        """
        generation, relogin = self._begin_login()
        return await self._complete_login(args, generation, relogin)

    def logout(self) -> None:
        """
        Log out, clear the stored session and discard any in-flight login.

        The session is logged-out even when clearing storage fails; that
        storage error is then re-raised.
        """
        self._generation += 1
        self._set_state(LoggedOut())
        self.storage.delete(self.key)

    def dispatch(
        self, request: Union[SessionRequest, Mapping[str, Any]]
    ) -> Optional["asyncio.Task[SessionState]"]:
        """
        Handle a login or logout request from a consumer.

        Logout takes effect immediately. Login moves to logging-in
        immediately and proves in a background task, which is returned;
        its failure is recorded in last_error. A login while another
        is in flight is ignored and returns None.

        Must be called from a running event loop for login requests.

        Raises:
            ValueError: If the request is not a login or logout.
        """
        request = _coerce_request(request)
        if isinstance(request, LogoutRequest):
            self.logout()
            return None

        try:
            generation, relogin = self._begin_login()
        except LoginInProgressError:
            return None

        task = asyncio.get_running_loop().create_task(
            self._complete_login(request.args, generation, relogin)
        )
        self._tasks.add(task)
        task.add_done_callback(self._on_login_done)
        return task

    def _on_login_done(self, task: "asyncio.Task[SessionState]") -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.warning("%s", exc)

    async def wait_pending(self) -> None:
        """Wait until logins started by dispatch() have finished."""
        if self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)


def use_identity(
    session: IdentitySession,
) -> Tuple[SessionState, Callable[[Union[SessionRequest, Mapping[str, Any]]], Optional["asyncio.Task[SessionState]"]]]:
    """
    Access facade for UI consumers.

    Returns:
        The current state snapshot and the session's dispatch function.
    """
    return session.state, session.dispatch
