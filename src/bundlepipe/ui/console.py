"""Console output formatting utilities for bundlepipe."""

from __future__ import annotations

import sys
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from ..model import BuildJob, BuildResult


class Console:
    """Centralized console output formatting."""

    def __init__(self, debug: bool = False):
        """
        Initialize console formatter.

        Args:
            debug: If True, show full diagnostics and stack traces
        """
        self.debug = debug

    def print_header(self, title: str) -> None:
        """Print a section header."""
        print(f"\n{title}")
        print("-" * len(title))

    def print_run_started(
        self,
        entry: str,
        global_name: str,
        job_count: int,
    ) -> None:
        """Print run start information."""
        print("\nBUILD STARTED")
        print(f"Entry: {entry}")
        print(f"Global: {global_name}")
        print(f"Jobs: {job_count}")
        print()

    def print_job_start(self, name: str, outfile: str) -> None:
        """Print job start message."""
        print(f"\nJOB STARTED: {name} -> {outfile}")

    def print_success(self, result: "BuildResult") -> None:
        """Print success message with artifact size and digest."""
        print(f"STATUS: success ({result.size} bytes, sha256 {result.sha256[:12]}..., {result.duration:.2f}s)")

    def print_failure(
        self,
        name: str,
        reason: str,
        kind: Optional[str] = None,
    ) -> None:
        """
        Print job failure message.

        Args:
            name: Job name
            reason: Rendered error (first line shown unless debug)
            kind: Optional error kind (resolution, transform, io, ...)
        """
        print(f"JOB FAILED: {name}")
        if kind:
            print(f"Kind: {kind}")
        if self.debug:
            print(f"Error details: {reason}")
        else:
            error_line = reason.split("\n")[0] if reason else "Unknown error"
            print(f"Error: {error_line}")

    def print_plan_job(self, job: "BuildJob") -> None:
        """Print one job descriptor of the build plan."""
        flags = []
        if job.bundle:
            flags.append("bundle")
        if job.minify:
            flags.append("minify")
        if job.sourcemap:
            flags.append("sourcemap")
        print(f"  {job.name}: {job.entry_point} -> {job.outfile}")
        print(f"    format={job.format.value} target={job.target} global={job.global_name} [{', '.join(flags)}]")

    def print_results(self, results: dict) -> None:
        """Print final results summary."""
        print("\n" + "=" * 40)
        print("RESULTS")
        print("=" * 40)
        for name, res in results.items():
            status_display = res.status.upper() if res.status != "ok" else "SUCCESS"
            print(f"  {name}: {status_display} ({res.outfile})")

    def print_error(
        self,
        title: str,
        message: str,
        details: Optional[list[str]] = None,
        suggestion: Optional[str] = None,
    ) -> None:
        """
        Print structured error message.

        Args:
            title: Error title
            message: Main error message
            details: Optional list of detail lines
            suggestion: Optional suggestion for user
        """
        print(f"\nERROR: {title}", file=sys.stderr)
        print(f"{message}", file=sys.stderr)
        if details:
            for detail in details:
                print(f"  {detail}", file=sys.stderr)
        if suggestion:
            print(f"\n{suggestion}", file=sys.stderr)

    def print_exception(self, exc: BaseException) -> None:
        """Print exception, with full traceback only in debug mode."""
        if self.debug:
            import traceback
            traceback.print_exception(type(exc), exc, exc.__traceback__)
        else:
            print(f"Error: {exc}", file=sys.stderr)

    def print_info(self, message: str) -> None:
        """Print informational message."""
        print(message)

    def print_debug(self, message: str) -> None:
        """Print debug message (only if debug mode enabled)."""
        if self.debug:
            print(f"[DEBUG] {message}", file=sys.stderr)


# Global console instance (will be initialized by CLI)
_console: Optional[Console] = None


def get_console() -> Console:
    """Get the global console instance."""
    global _console
    if _console is None:
        _console = Console()
    return _console


def set_console(console: Console) -> None:
    """Set the global console instance."""
    global _console
    _console = console
