"""Trigger dispatcher: runs the rule's command for each trigger.

Every trigger runs in its own asyncio task and its own child process. A
failing script only affects its own trigger. There is no timeout and no
cancellation; a script runs until it exits or the host shuts down.
"""

import asyncio
import logging
import os
import shlex
from collections.abc import Callable
from pathlib import PureWindowsPath

from propscript.models import DispatchResult, Trigger, format_value
from propscript.notifier import NoOpNotifier, PropscriptNotifier

logger = logging.getLogger(__name__)

# Extensions run through the Windows console interpreter
CONSOLE_SCRIPT_EXTENSIONS = (".bat", ".cmd")


def build_environment(trigger: Trigger, base: dict[str, str] | None = None) -> dict[str, str]:
    """Merge the trigger variables over the ambient process environment."""
    env = dict(os.environ if base is None else base)
    env.update(
        {
            "PROPERTY_NAME": trigger.property_name,
            "PROPERTY_VALUE": format_value(trigger.new_value),
            "PREVIOUS_VALUE": "" if trigger.old_value is None else format_value(trigger.old_value),
            "FILE_PATH": trigger.file.path,
            "FILE_NAME": trigger.file.name,
            "VAULT_PATH": trigger.file.vault_path,
        }
    )
    return env


def resolve_command(command: str, posix: bool | None = None) -> list[str]:
    """Turn a configured command into an argv list.

    Batch and cmd scripts are wrapped in ``cmd.exe /c``. Anything else is split
    into arguments and executed directly, without a shell.

    Raises:
        ValueError: If the command has unbalanced quotes.
    """
    command = command.strip()
    if posix is None:
        posix = os.name != "nt"

    unquoted = command.strip('"')
    if PureWindowsPath(unquoted).suffix.lower() in CONSOLE_SCRIPT_EXTENSIONS:
        return ["cmd.exe", "/c", unquoted]

    if posix:
        return shlex.split(command)
    return [part.strip('"') for part in shlex.split(command, posix=False)]


class TriggerDispatcher:
    """Execute triggers as external processes and report the outcome."""

    def __init__(
        self,
        notifier: PropscriptNotifier | None = None,
        loop: asyncio.AbstractEventLoop | None = None,
    ):
        """Initialize dispatcher.

        Args:
            notifier: Receives failure notices and, when requested, run notices
            loop: Loop used by :meth:`submit`; defaults to the running loop
        """
        self.notifier = notifier or NoOpNotifier()
        self.loop = loop
        self._tasks: set[asyncio.Task] = set()

        # Outbound event (host wires this)
        self.on_result: Callable[[DispatchResult], None] | None = None

    @property
    def in_flight(self) -> int:
        return len(self._tasks)

    def submit(self, trigger: Trigger) -> asyncio.Task:
        """Start a trigger without waiting for it (fire-and-forget)."""
        loop = self.loop or asyncio.get_running_loop()
        task = loop.create_task(self.dispatch(trigger))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def drain(self) -> None:
        """Wait until every submitted trigger has finished."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def dispatch(self, trigger: Trigger) -> DispatchResult:
        """Run one trigger to completion. Never raises for script problems."""
        rule = trigger.rule
        if not rule.command.strip():
            message = f"No script path configured for property: {rule.property_name}"
            logger.warning(message)
            try:
                self.notifier.warning(message)
            except Exception as e:
                logger.error(f"Error reporting dispatch result: {e}")
            result = DispatchResult(trigger=trigger, status="misconfigured", error=message)
        else:
            try:
                result = await self._run(trigger)
            except Exception as e:
                logger.exception(f"Unexpected error dispatching '{rule.property_name}' for {trigger.file.path}")
                result = DispatchResult(trigger=trigger, status="failed", error=str(e))
            try:
                self._report(result)
            except Exception as e:
                logger.error(f"Error reporting dispatch result: {e}")

        if self.on_result:
            try:
                self.on_result(result)
            except Exception as e:
                logger.error(f"Error in dispatch result callback: {e}")
        return result

    async def _run(self, trigger: Trigger) -> DispatchResult:
        command = trigger.rule.command
        try:
            argv = resolve_command(command)
        except ValueError as e:
            return DispatchResult(trigger=trigger, status="failed", error=f"Invalid command {command!r}: {e}")

        logger.debug(f"Running {argv} for {trigger.file.path} ({trigger.property_name})")
        try:
            process = await asyncio.create_subprocess_exec(
                *argv,
                cwd=trigger.file.vault_path,
                env=build_environment(trigger),
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            return DispatchResult(trigger=trigger, status="failed", error=str(e))

        out, err = await process.communicate()
        stdout = out.decode("utf-8", errors="replace")
        stderr = err.decode("utf-8", errors="replace")

        if process.returncode != 0:
            error = f"Command failed: {command} (exit code {process.returncode})"
            if stderr.strip():
                error = f"{error}\n{stderr.strip()}"
            return DispatchResult(
                trigger=trigger,
                status="failed",
                exit_code=process.returncode,
                stdout=stdout,
                stderr=stderr,
                error=error,
            )

        return DispatchResult(
            trigger=trigger,
            status="succeeded",
            exit_code=process.returncode,
            stdout=stdout,
            stderr=stderr,
        )

    def _report(self, result: DispatchResult) -> None:
        rule = result.trigger.rule
        if not result.ok:
            logger.error(f"Script execution error: {result.error}")
            self.notifier.error(f"Script error: {result.error}")
            return

        if result.stderr.strip():
            logger.warning(f"Script stderr: {result.stderr.strip()}")

        output = result.stdout.strip()
        if output:
            logger.info(f"Script output: {output}")

        if rule.notify_on_run:
            self.notifier.info(output or f"Script executed for property: {rule.property_name}")
