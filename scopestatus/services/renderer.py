"""Sky-visibility image rendering through the external ``astrosky`` tool."""

from __future__ import annotations

import asyncio
import logging
import os
import shlex
import tempfile
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol, Sequence

from scopestatus.core.config import Settings
from scopestatus.core.metrics import RENDER_FAILURE, RENDER_SECONDS, RENDER_SUCCESS

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RenderParams:
    epoch_seconds: int
    right_ascension_deg: float
    declination_deg: float
    site_latitude_deg: float
    site_longitude_deg: float
    size_px: int
    cardinal_markers: bool
    debug: bool = False


@dataclass(frozen=True)
class RenderDiagnostic:
    """Everything an operator needs to rerun a failed render by hand."""

    command: tuple[str, ...]
    reason: str
    returncode: int | None = None
    output: str = ""

    @property
    def invocation(self) -> str:
        return shlex.join(self.command)

    def as_text(self) -> str:
        status = "n/a" if self.returncode is None else str(self.returncode)
        return (
            f"sky image rendering failed: {self.reason}\n"
            f"command: {self.invocation}\n"
            f"exit status: {status}\n"
            f"output:\n{self.output}"
        )


@dataclass(frozen=True)
class RenderResult:
    image: bytes | None = None
    diagnostic: RenderDiagnostic | None = None

    @property
    def ok(self) -> bool:
        return self.image is not None


class SkyRenderer(Protocol):
    async def render(self, params: RenderParams, timeout: float | None = None) -> RenderResult:
        ...


def build_command(base: Sequence[str], params: RenderParams, output_path: str) -> list[str]:
    """Assemble the astrosky argv; the output file is the final positional argument."""

    cmd = list(base)
    cmd.append(f"--size={params.size_px}")
    if params.cardinal_markers:
        cmd.append("--cardinal")
    if params.debug:
        cmd.append("--debug")
    cmd += [
        f"--time={params.epoch_seconds}",
        f"--latitude={params.site_latitude_deg}",
        f"--longitude={params.site_longitude_deg}",
        # astrosky reads the telescope RA in hours
        f"--rightascension={params.right_ascension_deg / 15.0}",
        f"--declination={params.declination_deg}",
        output_path,
    ]
    return cmd


class SubprocessSkyRenderer:
    """Run the renderer as a child process writing into a private scratch file."""

    def __init__(self, command: Sequence[str], scratch_dir: str | Path | None = None) -> None:
        if not command:
            raise ValueError("renderer command must not be empty")
        self.command = tuple(command)
        self.scratch_dir = str(scratch_dir) if scratch_dir else None

    @classmethod
    def from_settings(cls, settings: Settings) -> "SubprocessSkyRenderer":
        return cls(shlex.split(settings.renderer_command), scratch_dir=settings.render_scratch_dir)

    async def render(self, params: RenderParams, timeout: float | None = None) -> RenderResult:
        fd, scratch = tempfile.mkstemp(prefix="sky-", suffix=".png", dir=self.scratch_dir)
        os.close(fd)
        cmd = tuple(build_command(self.command, params, scratch))
        started = time.monotonic()
        try:
            result = await self._run(cmd, Path(scratch), timeout)
        finally:
            Path(scratch).unlink(missing_ok=True)
            RENDER_SECONDS.observe(time.monotonic() - started)

        if result.ok:
            RENDER_SUCCESS.inc()
            logger.info("Sky image rendered", extra={"bytes": len(result.image or b"")})
        else:
            diagnostic = result.diagnostic
            RENDER_FAILURE.labels(reason=_reason_label(diagnostic.reason)).inc()
            logger.warning(
                "Sky image rendering failed",
                extra={
                    "reason": diagnostic.reason,
                    "command": diagnostic.invocation,
                    "returncode": diagnostic.returncode,
                },
            )
        return result

    async def _run(self, cmd: tuple[str, ...], output: Path, timeout: float | None) -> RenderResult:
        logger.debug("Launching renderer: %s", shlex.join(cmd))
        try:
            proc = await asyncio.create_subprocess_exec(
                *cmd,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.STDOUT,
                stdin=asyncio.subprocess.DEVNULL,
            )
        except OSError as exc:
            return RenderResult(diagnostic=RenderDiagnostic(cmd, f"cannot start renderer: {exc}"))

        try:
            stdout, _ = await asyncio.wait_for(proc.communicate(), timeout=timeout)
        except asyncio.TimeoutError:
            partial = await _terminate(proc)
            return RenderResult(
                diagnostic=RenderDiagnostic(
                    cmd, f"renderer timed out after {timeout:g}s", proc.returncode, partial
                )
            )
        except asyncio.CancelledError:
            await asyncio.shield(_terminate(proc))
            logger.info("Render cancelled, renderer process killed", extra={"pid": proc.pid})
            raise

        text = stdout.decode("utf-8", errors="replace") if stdout else ""
        if proc.returncode != 0:
            return RenderResult(
                diagnostic=RenderDiagnostic(
                    cmd, f"renderer exited with status {proc.returncode}", proc.returncode, text
                )
            )
        try:
            image = output.read_bytes()
        except OSError as exc:
            return RenderResult(
                diagnostic=RenderDiagnostic(cmd, f"cannot read output file: {exc}", proc.returncode, text)
            )
        if not image:
            return RenderResult(
                diagnostic=RenderDiagnostic(cmd, "renderer produced no output file", proc.returncode, text)
            )
        return RenderResult(image=image)


async def _terminate(proc: asyncio.subprocess.Process) -> str:
    """Kill a running renderer and collect whatever it printed."""

    if proc.returncode is None:
        try:
            proc.kill()
        except ProcessLookupError:
            pass
    stdout = b""
    if proc.stdout is not None:
        try:
            stdout = await asyncio.wait_for(proc.stdout.read(), timeout=5)
        except asyncio.TimeoutError:
            stdout = b""
    await proc.wait()
    return stdout.decode("utf-8", errors="replace")


def _reason_label(reason: str) -> str:
    if reason.startswith("renderer exited"):
        return "exit_status"
    if reason.startswith("renderer timed out"):
        return "timeout"
    if reason.startswith("cannot start"):
        return "spawn"
    return "output"


__all__ = [
    "RenderParams",
    "RenderDiagnostic",
    "RenderResult",
    "SkyRenderer",
    "SubprocessSkyRenderer",
    "build_command",
]
