# engine.py
from __future__ import annotations

import os
import subprocess
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Protocol

from .model import BuildJob, OutputFormat


ENGINE_ENV_VAR = "BUNDLEPIPE_ESBUILD"

TOOL_HINTS = {
    "esbuild": "Install esbuild (e.g., npm install --save-dev esbuild) or set BUNDLEPIPE_ESBUILD.",
    "node": "Install Node.js or fix PATH.",
    "npx": "Install Node.js (includes npx) or fix PATH.",
}

# error header fragments -> error kind, checked in order
_DIAGNOSTIC_KINDS = [
    ("failed to write", "io"),
    ("failed to create", "io"),
    ("permission denied", "io"),
    ("eacces", "io"),
    ("eisdir", "io"),
    ("is a directory", "io"),
    ("could not resolve", "resolution"),
    ("could not read", "resolution"),
]


@dataclass
class BuildError(Exception):
    """
    Structured bundler failure.

    kind is one of: resolution, transform, io, tool_unavailable.
    The bundler's own output is kept verbatim in details["diagnostic"].
    """
    kind: str
    job: str
    message: str
    details: dict = field(default_factory=dict)

    def __str__(self) -> str:
        lines = [f"{self.kind}: {self.message}", f"job={self.job}"]
        for k, v in self.details.items():
            if k == "diagnostic":
                continue
            lines.append(f"{k}={v}")
        diagnostic = self.details.get("diagnostic")
        if diagnostic:
            lines.append(diagnostic.rstrip("\n"))
        return "\n".join(lines)


class BundlerEngine(Protocol):
    """Anything that can turn a BuildJob into an artifact on disk."""

    def build(self, job: BuildJob) -> None:
        """Write job.outfile or raise BuildError."""
        ...


def _error_headers(text: str) -> List[str]:
    """
    The "[ERROR] ..." / "error: ..." lines of a diagnostic.

    Source excerpts esbuild prints under each error are skipped; if no header
    line is found the whole text is used.
    """
    lines = (text or "").splitlines()
    headers = [
        ln for ln in lines
        if "[ERROR]" in ln or ln.lstrip().lower().startswith("error:")
    ]
    return headers or lines


def classify_diagnostic(text: str) -> str:
    lowered = "\n".join(_error_headers(text)).lower()
    for fragment, kind in _DIAGNOSTIC_KINDS:
        if fragment in lowered:
            return kind
    return "transform"


# ---------------------------------------------------------------------
# esbuild CLI engine
# ---------------------------------------------------------------------

class EsbuildEngine:
    """Runs the esbuild command line tool once per job."""

    def __init__(self, binary: Optional[str] = None, cwd: str | Path = "."):
        self.binary = binary or os.environ.get(ENGINE_ENV_VAR) or "esbuild"
        self.cwd = Path(cwd)

    def command(self, job: BuildJob) -> List[str]:
        cmd = [self.binary, job.entry_point]
        if job.bundle:
            cmd.append("--bundle")
        if job.minify:
            cmd.append("--minify")
        if job.sourcemap:
            cmd.append("--sourcemap")
        cmd.append(f"--target={job.target}")
        cmd.append(f"--format={OutputFormat(job.format).value}")
        # esbuild only honours global-name for iife output
        if OutputFormat(job.format) is OutputFormat.IIFE:
            cmd.append(f"--global-name={job.global_name}")
        cmd.append(f"--outfile={job.outfile}")
        cmd.append("--log-level=warning")
        return cmd

    def _check_tool_available(self, job: BuildJob) -> None:
        try:
            subprocess.run(
                [self.binary, "--version"],
                cwd=str(self.cwd),
                capture_output=True,
                check=True,
            )
        except (subprocess.CalledProcessError, FileNotFoundError, PermissionError):
            tool = Path(self.binary).name
            hint = TOOL_HINTS.get(tool, f"Install {tool} or fix PATH.")
            raise BuildError(
                kind="tool_unavailable",
                job=job.name,
                message=f"{self.binary} is not available",
                details={"hint": hint, "tool": self.binary},
            )

    def _prepare_output(self, job: BuildJob) -> None:
        out = self.cwd / job.outfile
        if out.is_dir():
            raise BuildError(
                kind="io",
                job=job.name,
                message=f"output path is a directory: {job.outfile}",
                details={"outfile": job.outfile},
            )
        try:
            out.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise BuildError(
                kind="io",
                job=job.name,
                message=f"cannot create output directory: {out.parent}",
                details={"outfile": job.outfile, "diagnostic": str(e)},
            ) from e

    def build(self, job: BuildJob) -> None:
        entry = self.cwd / job.entry_point
        if not entry.is_file():
            raise BuildError(
                kind="resolution",
                job=job.name,
                message=f"entry module not found: {job.entry_point}",
                details={"entry_point": job.entry_point},
            )

        self._prepare_output(job)
        self._check_tool_available(job)

        cmd = self.command(job)
        proc = subprocess.run(
            cmd,
            shell=False,
            cwd=str(self.cwd),
            text=True,
            capture_output=True,
        )

        if proc.returncode != 0:
            diagnostic = proc.stderr or proc.stdout or ""
            kind = classify_diagnostic(diagnostic)
            raise BuildError(
                kind=kind,
                job=job.name,
                message=f"esbuild failed (exit={proc.returncode})",
                details={
                    "exit_code": proc.returncode,
                    "cmd": " ".join(cmd),
                    "diagnostic": diagnostic,
                },
            )
