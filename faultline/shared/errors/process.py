"""
Process-wide fault handlers.

Guards the process against faults that escape every request scope:

- Unhandled asyncio faults: logged; in production the process exits
  after a short grace delay, in debug mode it keeps running.
- Uncaught synchronous exceptions (main thread or worker threads):
  fatal, the process exits immediately with status 1.
- SIGTERM: graceful shutdown, exit status 0 once the stack unwinds.
- SIGINT: exit status 0.

Handlers are installed once per process. Installing again is a no-op.
"""

import asyncio
import logging
import os
import signal
import sys
import threading
from typing import Any, Callable, Optional

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FATAL = 1

_install_lock = threading.Lock()
_installed: Optional["ProcessFaultHandlers"] = None


class ProcessFaultHandlers:
    """Process-level listeners for faults outside any request.

    Args:
        debug: Keep running after unhandled asyncio faults.
        grace_seconds: Delay before exiting after an unhandled asyncio
            fault in production.
        exit_func: Terminates the process with a status. Defaults to
            ``os._exit`` so that a fatal fault cannot be caught.
    """

    def __init__(
        self,
        debug: bool = False,
        grace_seconds: float = 1.0,
        exit_func: Callable[[int], Any] = os._exit,
    ) -> None:
        self.debug = debug
        self.grace_seconds = grace_seconds
        self._exit_func = exit_func
        self._previous: dict[str, Any] = {}
        self._exit_scheduled = False

    # -- registration -------------------------------------------------

    def install(self) -> bool:
        """Register all handlers once per process.

        Returns:
            True if this call installed the handlers, False if some
            handlers were already installed.
        """
        global _installed
        with _install_lock:
            if _installed is not None:
                logger.debug("Process fault handlers already installed")
                return False

            self._previous = {
                "excepthook": sys.excepthook,
                "threading_excepthook": threading.excepthook,
            }
            sys.excepthook = self.on_uncaught_exception
            threading.excepthook = self.on_thread_exception

            if threading.current_thread() is threading.main_thread():
                self._previous["sigterm"] = signal.getsignal(signal.SIGTERM)
                self._previous["sigint"] = signal.getsignal(signal.SIGINT)
                signal.signal(signal.SIGTERM, self.on_sigterm)
                signal.signal(signal.SIGINT, self.on_sigint)
            else:
                logger.warning("Not in the main thread; signal handlers not installed")

            _installed = self
        logger.info("Process fault handlers installed (debug=%s)", self.debug)
        return True

    def attach_loop(self, loop: asyncio.AbstractEventLoop) -> None:
        """Route unhandled asyncio faults of ``loop`` to this instance."""
        loop.set_exception_handler(self.on_unhandled_async)

    def uninstall(self) -> None:
        """Restore the hooks that were active before ``install``."""
        global _installed
        with _install_lock:
            if _installed is not self:
                return
            sys.excepthook = self._previous["excepthook"]
            threading.excepthook = self._previous["threading_excepthook"]
            if "sigterm" in self._previous:
                signal.signal(signal.SIGTERM, self._previous["sigterm"])
                signal.signal(signal.SIGINT, self._previous["sigint"])
            self._previous = {}
            _installed = None

    # -- listeners ----------------------------------------------------

    def on_unhandled_async(
        self, loop: asyncio.AbstractEventLoop, context: dict[str, Any]
    ) -> None:
        exc = context.get("exception")
        logger.error(
            "Unhandled async fault: %s",
            context.get("message", "no message"),
            exc_info=exc,
        )
        if self.debug or self._exit_scheduled:
            return
        self._exit_scheduled = True
        logger.critical(
            "Exiting in %.1fs after unhandled async fault", self.grace_seconds
        )
        loop.call_later(self.grace_seconds, self.terminate, EXIT_FATAL)

    def on_uncaught_exception(self, exc_type, exc, tb) -> None:
        if issubclass(exc_type, KeyboardInterrupt):
            self.terminate(EXIT_OK)
            return
        logger.critical("Uncaught exception, exiting", exc_info=(exc_type, exc, tb))
        self.terminate(EXIT_FATAL)

    def on_thread_exception(self, args: threading.ExceptHookArgs) -> None:
        # A thread calling sys.exit() only ends itself
        if args.exc_type is SystemExit:
            return
        thread_name = args.thread.name if args.thread is not None else "unknown"
        logger.critical(
            "Uncaught exception in thread %s, exiting",
            thread_name,
            exc_info=(args.exc_type, args.exc_value, args.exc_traceback),
        )
        self.terminate(EXIT_FATAL)

    def on_sigterm(self, signum: int, frame: Any) -> None:
        logger.info("SIGTERM received, shutting down")
        sys.exit(EXIT_OK)

    def on_sigint(self, signum: int, frame: Any) -> None:
        logger.info("SIGINT received, shutting down")
        sys.exit(EXIT_OK)

    def terminate(self, status: int) -> None:
        """Flush logging and end the process with ``status``."""
        for handler in logging.getLogger().handlers:
            handler.flush()
        self._exit_func(status)


def install_process_handlers(
    debug: bool = False,
    grace_seconds: float = 1.0,
    exit_func: Callable[[int], Any] = os._exit,
) -> ProcessFaultHandlers:
    """Install the process handlers once and return the active instance."""
    handlers = ProcessFaultHandlers(debug, grace_seconds, exit_func)
    if handlers.install():
        return handlers
    return current_process_handlers()


def current_process_handlers() -> Optional[ProcessFaultHandlers]:
    """Return the installed handlers, or None."""
    return _installed


def reset_process_handlers() -> None:
    """Uninstall the active handlers, if any."""
    handlers = _installed
    if handlers is not None:
        handlers.uninstall()
