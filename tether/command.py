"""
Tether Commands - Executable Actions for View Models
====================================================

A command is an action a view can trigger, together with a predicate telling
whether it can run right now and a `can_execute_changed` event announcing when
that answer may have changed.

Core Components
---------------

**CommandBase**: Template for commands; `execute()` only runs when
`can_execute()` allows it.

**Command**: Relay command wrapping an `action(parameter)` callable and an
optional `can_execute(parameter)` predicate.

**AsyncCommandBase / AsyncCommand**: Commands whose action is awaitable. They
track `is_running`, capture the last `error` instead of propagating it, expose a
`token` for cooperative cancellation and a `cancel_command` companion.

**CancellationTokenSource / CancellationToken**: Explicit, advisory
cancellation passed to running actions.

Scheduling
----------

Async commands never start threads. `await command.execute_async(p)` runs the
action on the caller's event loop and re-raises a captured error. The
synchronous `execute(p)` starts the run immediately (so `is_running` flips
before it returns) and hands the remaining awaitable to the command's
`scheduler`, `asyncio.ensure_future` unless the host supplies another one.

```python
async def load(parameter):
    await delay(1.0, command.token)
    ...

command = AsyncCommand(load)
await command.execute_async()
```
"""

import asyncio
import inspect
import logging
from abc import ABC, abstractmethod
from typing import Any, Awaitable, Callable, Optional

from .errors import (
    InvalidStateError,
    OperationCancelledError,
    require_argument,
    require_state,
)
from .events import Event, Subscription
from .notify import NotifyPropertyChanged
from .property import Property, notifying_property


# ============================================================================
# CANCELLATION
# ============================================================================


class CancellationToken:
    """Read side of a CancellationTokenSource handed to running actions."""

    def __init__(self, source: Optional["CancellationTokenSource"] = None) -> None:
        self._source = source

    @property
    def is_cancellation_requested(self) -> bool:
        return self._source is not None and self._source.is_cancellation_requested

    def raise_if_cancellation_requested(self) -> None:
        if self.is_cancellation_requested:
            raise OperationCancelledError("Operation was cancelled")

    def register(self, callback: Callable[[], None]) -> Optional[Subscription]:
        """
        Call `callback` when cancellation is requested.

        Runs immediately if cancellation was already requested, in which case
        None is returned.
        """
        require_argument(callback, "callback")
        if self.is_cancellation_requested:
            callback()
            return None
        if self._source is None:
            return None
        return self._source._cancelled.subscribe(callback)


CancellationToken.NONE = CancellationToken()


class CancellationTokenSource:
    """Issues a token and requests cancellation through it."""

    def __init__(self) -> None:
        self._requested = False
        self._cancelled = Event("cancelled")
        self.token = CancellationToken(self)

    @property
    def is_cancellation_requested(self) -> bool:
        return self._requested

    def cancel(self) -> None:
        if self._requested:
            return
        self._requested = True
        self._cancelled.emit()
        self._cancelled.clear()


async def delay(seconds: float, token: Optional[CancellationToken] = None) -> None:
    """Sleep for `seconds`, raising OperationCancelledError if `token` is cancelled."""
    token = token or CancellationToken.NONE
    token.raise_if_cancellation_requested()
    loop = asyncio.get_running_loop()
    waiter = loop.create_future()

    def finish() -> None:
        if not waiter.done():
            waiter.set_result(None)

    def cancel() -> None:
        if not waiter.done():
            waiter.set_exception(OperationCancelledError("Delay was cancelled"))

    handle = loop.call_later(seconds, finish)
    registration = token.register(cancel)
    try:
        await waiter
    finally:
        handle.cancel()
        if registration is not None:
            registration.dispose()


async def _completed() -> None:
    return None


# ============================================================================
# COMMANDS
# ============================================================================


class CommandBase(ABC):
    """Command template: `execute` runs only when `can_execute` allows it."""

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.can_execute_changed = Event("can_execute_changed")

    def raise_can_execute_changed(self) -> None:
        self.can_execute_changed.emit(self)

    def can_execute(self, parameter: Any = None) -> bool:
        return self.check_can_execute(parameter)

    def execute(self, parameter: Any = None) -> Any:
        if self.check_can_execute(parameter):
            return self.do_execute(parameter)
        return None

    @abstractmethod
    def check_can_execute(self, parameter: Any) -> bool:
        pass

    @abstractmethod
    def do_execute(self, parameter: Any) -> Any:
        pass


class Command(CommandBase):
    """
    Relay command.

    Args:
        action: Called with the execution parameter.
        can_execute: Optional predicate over the parameter.
    """

    def __init__(
        self,
        action: Optional[Callable[[Any], None]] = None,
        can_execute: Optional[Callable[[Any], bool]] = None,
    ) -> None:
        super().__init__()
        self.action = action
        self.can_execute_predicate = can_execute

    def check_can_execute(self, parameter: Any) -> bool:
        return self.action is not None and (
            self.can_execute_predicate is None or self.can_execute_predicate(parameter)
        )

    def do_execute(self, parameter: Any) -> None:
        self.action(parameter)

    def __repr__(self) -> str:
        return f"Command({getattr(self.action, '__name__', self.action)!r})"


class AsyncCommandBase(CommandBase, NotifyPropertyChanged):
    """
    Command whose action completes asynchronously.

    Subclasses implement `command_action(parameter)`, which is called
    synchronously and returns the awaitable doing the actual work.
    """

    def __init__(self, scheduler: Optional[Callable[[Awaitable], Any]] = None) -> None:
        super().__init__()
        self.scheduler = scheduler or asyncio.ensure_future
        self._running_count = 0
        self._is_running = False
        self._error: Optional[BaseException] = None
        self._recursive_execution = False
        self._cancellation_source: Optional[CancellationTokenSource] = None
        self._cancel_command: Optional["CancelAsyncCommand"] = None

    @abstractmethod
    def command_action(self, parameter: Any) -> Awaitable[None]:
        pass

    def do_execute(self, parameter: Any) -> Any:
        action = self._begin(parameter)
        run = _completed() if action is None else self._run(action)
        try:
            return self.scheduler(run)
        except Exception as e:
            run.close()
            if action is not None:
                if inspect.iscoroutine(action):
                    action.close()
                self._finish(e)
            raise

    async def execute_async(self, parameter: Any = None) -> None:
        """Run the command and re-raise the error it captured, if any."""
        if not self.check_can_execute(parameter):
            return
        await self._start(parameter)
        if self._error is not None:
            raise self._error

    def _start(self, parameter: Any) -> Awaitable[None]:
        action = self._begin(parameter)
        if action is None:
            return _completed()
        return self._run(action)

    def _begin(self, parameter: Any) -> Optional[Awaitable[None]]:
        """Mark a run as started and create its action; None if creation failed."""
        if self._recursive_execution:
            raise InvalidStateError("Cannot run async command action recursively")
        self.error = None
        self._set_running_count(self._running_count + 1)
        try:
            self._recursive_execution = True
            try:
                return self.command_action(parameter)
            finally:
                self._recursive_execution = False
        except Exception as e:
            self._finish(e)
            return None

    async def _run(self, action: Awaitable[None]) -> None:
        error = None
        try:
            await action
        except Exception as e:
            error = e
        finally:
            self._finish(error)

    def _finish(self, error: Optional[BaseException]) -> None:
        if error is not None:
            logging.debug(f"{self!r} failed: {error!r}")
            self.error = error
        self._set_running_count(self._running_count - 1)
        if self._cancel_command is not None and self._cancel_command.is_running:
            self._cancel_command.is_running = False
        self._cancellation_source = None

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    def _set_running_count(self, count: int) -> None:
        self._running_count = count
        self._set_is_running(count > 0)

    @property
    def is_running(self) -> bool:
        return self._is_running

    def _set_is_running(self, value: bool) -> None:
        if self._is_running == value:
            return
        self._is_running = value
        self.raise_property_changed("is_running")
        self.raise_can_execute_changed()

    @property
    def error(self) -> Optional[BaseException]:
        """Error produced by the last execution."""
        return self._error

    @error.setter
    def error(self, value: Optional[BaseException]) -> None:
        if self._error is not value:
            self._error = value
            self.raise_property_changed("error")

    def is_running_property(self) -> Property:
        return notifying_property(self, "is_running", bool)

    def error_property(self) -> Property:
        return notifying_property(self, "error", BaseException)

    # ------------------------------------------------------------------
    # Cancellation
    # ------------------------------------------------------------------

    @property
    def cancellation_source(self) -> CancellationTokenSource:
        if self._cancellation_source is None:
            self._cancellation_source = CancellationTokenSource()
        return self._cancellation_source

    @cancellation_source.setter
    def cancellation_source(self, value: CancellationTokenSource) -> None:
        require_argument(value, "cancellation_source")
        require_state(
            not self.is_running,
            "Cannot change cancellation_source while command is running",
        )
        self._cancellation_source = value

    @property
    def token(self) -> CancellationToken:
        return self.cancellation_source.token

    @property
    def cancel_command(self) -> "CancelAsyncCommand":
        if self._cancel_command is None:
            self._cancel_command = CancelAsyncCommand(self)
        return self._cancel_command

    @property
    def is_cancel_running(self) -> bool:
        return self._cancel_command is not None and self._cancel_command.is_running

    def _cancel(self) -> None:
        if not self.is_running:
            return
        source = self.cancellation_source
        if source.is_cancellation_requested:
            return
        source.cancel()
        # Still running: the cancel command waits for the owner to settle.
        if self.is_running:
            self.cancel_command.is_running = True


class CancelAsyncCommand(CommandBase, NotifyPropertyChanged):
    """
    Companion command cancelling a running AsyncCommandBase.

    Executable exactly while the owner runs and no cancellation is pending.
    `execute_async` completes once the owner has settled.
    """

    def __init__(self, owner: AsyncCommandBase) -> None:
        super().__init__()
        self._owner = owner
        self._completion: Optional[asyncio.Event] = None
        self._error: Optional[BaseException] = None
        owner.property_changed.subscribe(self._owner_changed)

    def check_can_execute(self, parameter: Any) -> bool:
        return not self.is_running and self._owner.is_running

    def do_execute(self, parameter: Any) -> None:
        self._request_cancel()

    async def execute_async(self, parameter: Any = None) -> None:
        if not self.check_can_execute(parameter):
            return
        self._request_cancel()
        if self._completion is not None:
            await self._completion.wait()

    def _request_cancel(self) -> None:
        try:
            self.is_running = True
            self._owner._cancel()
        except Exception as e:
            self.error = e
            self.is_running = False

    def _owner_changed(self, sender: Any, args: Any) -> None:
        if args.property_name == "is_running":
            if not self._owner.is_running and self.is_running:
                self.is_running = False
            else:
                self.raise_can_execute_changed()

    @property
    def is_running(self) -> bool:
        return self._completion is not None

    @is_running.setter
    def is_running(self, value: bool) -> None:
        if value == self.is_running:
            return
        if value:
            self._completion = asyncio.Event()
        else:
            self._completion.set()
            self._completion = None
        self.raise_property_changed("is_running")
        self.raise_can_execute_changed()

    @property
    def error(self) -> Optional[BaseException]:
        return self._error

    @error.setter
    def error(self, value: Optional[BaseException]) -> None:
        if value is not self._error:
            self._error = value
            self.raise_property_changed("error")


class AsyncCommand(AsyncCommandBase):
    """
    Async relay command.

    Args:
        action: `action(parameter)` returning an awaitable (or None).
        can_execute: Predicate over the parameter; defaults to "not running".
        delay: Seconds to wait before running the action. A newer execution
            cancels a pending delayed one, and the predicate is checked again
            after the wait.
        scheduler: Receives the awaitable of a synchronous `execute()`.
    """

    def __init__(
        self,
        action: Optional[Callable[[Any], Optional[Awaitable]]] = None,
        can_execute: Optional[Callable[[Any], bool]] = None,
        delay: float = 0.0,
        scheduler: Optional[Callable[[Awaitable], Any]] = None,
    ) -> None:
        super().__init__(scheduler)
        self._action = action
        self._can_execute = can_execute
        self.delay = delay
        self._delay_source: Optional[CancellationTokenSource] = None

    @property
    def action(self) -> Optional[Callable[[Any], Optional[Awaitable]]]:
        return self._action

    @action.setter
    def action(self, value: Callable[[Any], Optional[Awaitable]]) -> None:
        self._action = require_argument(value, "action")

    @property
    def can_execute_predicate(self) -> Optional[Callable[[Any], bool]]:
        """User predicate; None means "not running"."""
        return self._can_execute

    @can_execute_predicate.setter
    def can_execute_predicate(self, value: Callable[[Any], bool]) -> None:
        self._can_execute = require_argument(value, "can_execute_predicate")

    def check_can_execute(self, parameter: Any) -> bool:
        if self._action is None:
            return False
        if self._can_execute is None:
            return not self.is_running
        return self._can_execute(parameter)

    def command_action(self, parameter: Any) -> Awaitable[None]:
        if self._delay_source is not None:
            self._delay_source.cancel()
            self._delay_source = None
        if self._action is None:
            return _completed()
        if self.delay > 0:
            self._delay_source = CancellationTokenSource()
            return self._run_delayed(parameter, self.delay, self._delay_source)
        try:
            result = self._action(parameter)
        except OperationCancelledError:
            logging.debug(f"{self!r} cancelled")
            return _completed()
        return self._await_result(result)

    async def _await_result(self, result: Any) -> None:
        try:
            if inspect.isawaitable(result):
                await result
        except OperationCancelledError:
            logging.debug(f"{self!r} cancelled")

    async def _run_delayed(
        self, parameter: Any, wait: float, delay_source: CancellationTokenSource
    ) -> None:
        try:
            await delay(wait, delay_source.token)
        except OperationCancelledError:
            return
        # The run itself keeps is_running set, so only a user predicate is rechecked.
        if self._can_execute is not None and not self._can_execute(parameter):
            return
        await self._await_result(self._action(parameter))

    async def execute_without_delay(self, parameter: Any = None) -> None:
        if not self.check_can_execute(parameter):
            return
        old_delay, self.delay = self.delay, 0.0
        try:
            running = self._start(parameter)
        finally:
            self.delay = old_delay
        await running
        if self.error is not None:
            raise self.error

    def __repr__(self) -> str:
        return f"AsyncCommand({getattr(self._action, '__name__', self._action)!r})"
