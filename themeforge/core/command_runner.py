"""Utilities for executing external toolchain commands."""
from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Mapping, Sequence
import os
import shlex
import subprocess
import threading

from ..errors import ExternalProcessFailure


@dataclass
class CommandResult:
    """Represents the outcome of an executed command."""

    command: Sequence[str]
    returncode: int
    stdout: str
    stderr: str
    streamed: bool = False
    cwd: str | None = None
    interrupted: bool = False

    @property
    def succeeded(self) -> bool:
        return self.returncode == 0


class CancellationToken:
    """Lets a caller request termination of a long-running watch process."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()


@contextmanager
def working_directory(path: Path) -> Iterator[Path]:
    """Temporarily switch the process working directory to ``path``."""

    previous = Path.cwd()
    os.chdir(path)
    try:
        yield path
    finally:
        os.chdir(previous)


class CommandRunner:
    """Abstract command runner interface."""

    def run(
        self,
        command: Sequence[str],
        *,
        cwd: Path | None = None,
        env: Mapping[str, str] | None = None,
        check: bool = True,
        note: str | None = None,
        stream: bool = False,
    ) -> CommandResult:
        raise NotImplementedError

    def watch(
        self,
        command: Sequence[str],
        *,
        cwd: Path | None = None,
        env: Mapping[str, str] | None = None,
        token: CancellationToken | None = None,
        note: str | None = None,
    ) -> CommandResult:
        raise NotImplementedError

    def execute(
        self,
        command: Sequence[str],
        *,
        cwd: Path | None = None,
        env: Mapping[str, str] | None = None,
        note: str | None = None,
    ) -> str:
        """Run ``command`` and return its stdout, raising on a non-zero exit."""

        return self.run(command, cwd=cwd, env=env, check=True, note=note).stdout

    def format_command(self, command: Sequence[str]) -> str:
        return " ".join(shlex.quote(part) for part in command)


class SubprocessCommandRunner(CommandRunner):
    """Command runner that executes commands via :mod:`subprocess`."""

    def __init__(self, *, poll_interval: float = 0.5) -> None:
        self._poll_interval = poll_interval

    @staticmethod
    def _merge_environment(env: Mapping[str, str] | None) -> Dict[str, str] | None:
        if env is None:
            return None
        merged = os.environ.copy()
        merged.update(env)
        return merged

    def _finalize(self, result: CommandResult, *, check: bool) -> CommandResult:
        if check and result.returncode != 0:
            raise ExternalProcessFailure(result)
        return result

    def run(
        self,
        command: Sequence[str],
        *,
        cwd: Path | None = None,
        env: Mapping[str, str] | None = None,
        check: bool = True,
        note: str | None = None,
        stream: bool = False,
    ) -> CommandResult:
        merged_env = self._merge_environment(env)
        cwd_str = str(cwd) if cwd else None
        try:
            if not stream:
                process = subprocess.run(
                    command,
                    cwd=cwd_str,
                    env=merged_env,
                    capture_output=True,
                    text=True,
                    check=False,
                )
                result = CommandResult(
                    command=command,
                    returncode=process.returncode,
                    stdout=process.stdout,
                    stderr=process.stderr,
                    cwd=cwd_str,
                )
            else:
                process = subprocess.run(command, cwd=cwd_str, env=merged_env, check=False)
                result = CommandResult(
                    command=command,
                    returncode=process.returncode,
                    stdout="",
                    stderr="",
                    streamed=True,
                    cwd=cwd_str,
                )
        except FileNotFoundError as exc:
            # A missing executable is reported like a shell would report it.
            result = CommandResult(
                command=command,
                returncode=127,
                stdout="",
                stderr=str(exc),
                cwd=cwd_str,
            )
        return self._finalize(result, check=check)

    def watch(
        self,
        command: Sequence[str],
        *,
        cwd: Path | None = None,
        env: Mapping[str, str] | None = None,
        token: CancellationToken | None = None,
        note: str | None = None,
    ) -> CommandResult:
        cwd_str = str(cwd) if cwd else None
        try:
            process = subprocess.Popen(command, cwd=cwd_str, env=self._merge_environment(env))
        except FileNotFoundError as exc:
            return CommandResult(command=command, returncode=127, stdout="", stderr=str(exc), cwd=cwd_str)

        interrupted = False
        try:
            while True:
                if token is not None and token.cancelled and process.poll() is None:
                    interrupted = True
                    process.terminate()
                try:
                    returncode = process.wait(timeout=self._poll_interval)
                    break
                except subprocess.TimeoutExpired:
                    continue
        except KeyboardInterrupt:
            # The child shares our process group and received the same signal.
            interrupted = True
            returncode = process.wait()

        return CommandResult(
            command=command,
            returncode=returncode,
            stdout="",
            stderr="",
            streamed=True,
            cwd=cwd_str,
            interrupted=interrupted,
        )


@dataclass(slots=True)
class RecordedCommand:
    command: List[str]
    cwd: str | None
    env: Dict[str, str]
    note: str | None
    stream: bool


@dataclass(slots=True)
class _ScriptedResponse:
    prefix: List[str]
    returncode: int = 0
    stdout: str = ""
    stderr: str = ""
    remaining: int | None = None


class RecordingCommandRunner(CommandRunner):
    """Command runner that records commands instead of executing them.

    Responses can be scripted per command prefix with :meth:`script`; the most
    recently scripted matching prefix wins. Unscripted commands succeed with
    empty output.
    """

    def __init__(self) -> None:
        self.commands: List[RecordedCommand] = []
        self._responses: List[_ScriptedResponse] = []

    def script(
        self,
        prefix: Sequence[str],
        *,
        returncode: int = 0,
        stdout: str = "",
        stderr: str = "",
        times: int | None = None,
    ) -> None:
        self._responses.append(
            _ScriptedResponse(
                prefix=list(prefix),
                returncode=returncode,
                stdout=stdout,
                stderr=stderr,
                remaining=times,
            )
        )

    def _respond(self, command: Sequence[str], cwd: Path | None, *, streamed: bool) -> CommandResult:
        parts = list(command)
        for response in reversed(self._responses):
            if response.remaining == 0:
                continue
            if parts[: len(response.prefix)] != response.prefix:
                continue
            if response.remaining is not None:
                response.remaining -= 1
            return CommandResult(
                command=command,
                returncode=response.returncode,
                stdout=response.stdout,
                stderr=response.stderr,
                streamed=streamed,
                cwd=str(cwd) if cwd else None,
            )
        return CommandResult(
            command=command,
            returncode=0,
            stdout="",
            stderr="",
            streamed=streamed,
            cwd=str(cwd) if cwd else None,
        )

    @staticmethod
    def _record_entry(
        *,
        command: Sequence[str],
        cwd: Path | None,
        env: Mapping[str, str] | None,
        note: str | None,
        stream: bool,
    ) -> RecordedCommand:
        return RecordedCommand(
            command=list(command),
            cwd=str(cwd) if cwd else None,
            env=dict(env) if env else {},
            note=note,
            stream=stream,
        )

    def run(
        self,
        command: Sequence[str],
        *,
        cwd: Path | None = None,
        env: Mapping[str, str] | None = None,
        check: bool = True,
        note: str | None = None,
        stream: bool = False,
    ) -> CommandResult:
        self.commands.append(
            self._record_entry(command=command, cwd=cwd, env=env, note=note, stream=stream)
        )
        result = self._respond(command, cwd, streamed=stream)
        if check and result.returncode != 0:
            raise ExternalProcessFailure(result)
        return result

    def watch(
        self,
        command: Sequence[str],
        *,
        cwd: Path | None = None,
        env: Mapping[str, str] | None = None,
        token: CancellationToken | None = None,
        note: str | None = None,
    ) -> CommandResult:
        self.commands.append(
            self._record_entry(command=command, cwd=cwd, env=env, note=note, stream=True)
        )
        result = self._respond(command, cwd, streamed=True)
        result.interrupted = token is not None and token.cancelled
        return result

    def command_lines(self) -> List[str]:
        return [self.format_command(record.command) for record in self.commands]

    def iter_formatted(self, *, workspace: Path | None = None) -> Iterable[str]:
        default_cwd = str(workspace) if workspace else None
        for record in self.commands:
            cmd = self.format_command(record.command)
            cwd = record.cwd or default_cwd
            parts: List[str] = ["[dry-run]"]
            if record.note:
                parts.append(record.note)
            if cwd:
                parts.append(f"(cwd={cwd})")
            parts.append(cmd)
            yield " ".join(parts)


__all__ = [
    "CancellationToken",
    "CommandResult",
    "CommandRunner",
    "RecordedCommand",
    "RecordingCommandRunner",
    "SubprocessCommandRunner",
    "working_directory",
]
