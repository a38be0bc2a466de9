# pipeline.py
from __future__ import annotations

import hashlib
import time
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from .dsl import check_shared_template, pipeline_jobs
from .engine import BuildError, BundlerEngine, EsbuildEngine
from .model import BuildJob, BuildResult, PipelineConfig
from .ui.console import get_console


# ----------------------------------------------------------------------
# Errors
# ----------------------------------------------------------------------

class PipelineError(Exception):
    """Fatal pipeline failure, attributed to the job that failed first."""

    def __init__(self, job: str, cause: BaseException, results: Dict[str, BuildResult]):
        super().__init__(job, cause)
        self.job = job
        self.cause = cause
        self.results = results

    @property
    def kind(self) -> str:
        return getattr(self.cause, "kind", type(self.cause).__name__)

    def __str__(self) -> str:
        return f"[{self.job}] {self.cause}"


# ----------------------------------------------------------------------
# Artifact helpers
# ----------------------------------------------------------------------

def file_digest(path: str | Path) -> str:
    h = hashlib.sha256()
    with Path(path).open("rb") as f:
        while True:
            chunk = f.read(1024 * 1024)
            if not chunk:
                break
            h.update(chunk)
    return h.hexdigest()


def _artifact_result(job: BuildJob, root: Path, started: float) -> BuildResult:
    out = root / job.outfile
    if not out.is_file():
        raise BuildError(
            kind="io",
            job=job.name,
            message=f"engine reported success but wrote no artifact: {job.outfile}",
            details={"outfile": job.outfile},
        )
    return BuildResult(
        job=job.name,
        status="ok",
        outfile=job.outfile,
        size=out.stat().st_size,
        sha256=file_digest(out),
        duration=time.monotonic() - started,
    )


def verify_artifacts(results: Dict[str, BuildResult], *, root: str | Path = ".") -> List[str]:
    """
    Post-build sanity checks. Returns a list of problems, empty if all hold:
      - every successful artifact exists and is non-empty
      - minified artifact is no larger than the unminified one
    """
    root_p = Path(root)
    problems: List[str] = []

    for res in results.values():
        if not res.ok:
            problems.append(f"{res.job}: not built ({res.status})")
            continue
        out = root_p / res.outfile
        if not out.is_file():
            problems.append(f"{res.job}: artifact missing: {res.outfile}")
        elif out.stat().st_size == 0:
            problems.append(f"{res.job}: artifact is empty: {res.outfile}")

    minified = results.get("minified")
    debug = results.get("debug")
    if minified and debug and minified.ok and debug.ok and minified.size > debug.size:
        problems.append(
            f"minified artifact ({minified.size} bytes) is larger than "
            f"debug artifact ({debug.size} bytes)"
        )

    return problems


# ----------------------------------------------------------------------
# Execution
# ----------------------------------------------------------------------

def _run_jobs(
    jobs: List[BuildJob],
    engine: BundlerEngine,
    root: Path,
    fail_fast: bool,
) -> Tuple[Dict[str, BuildResult], Optional[BuildError]]:
    console = get_console()
    results: Dict[str, BuildResult] = {}
    first_error: Optional[BuildError] = None

    for job in jobs:
        if first_error is not None and fail_fast:
            results[job.name] = BuildResult(job=job.name, status="not-run", outfile=job.outfile)
            continue

        console.print_job_start(job.name, job.outfile)
        started = time.monotonic()
        try:
            engine.build(job)
            res = _artifact_result(job, root, started)
        except BuildError as e:
            if first_error is None:
                first_error = e
            results[job.name] = BuildResult(
                job=job.name,
                status="failed",
                outfile=job.outfile,
                duration=time.monotonic() - started,
                error=str(e),
            )
            console.print_failure(job.name, str(e), kind=e.kind)
            continue

        results[job.name] = res
        console.print_success(res)

    return results, first_error


def run_pipeline(
    jobs: List[BuildJob],
    engine: BundlerEngine,
    *,
    root: str | Path = ".",
    fail_fast: bool = True,
) -> Dict[str, BuildResult]:
    """
    Run jobs one after another, in list order.

    Each engine.build() call is awaited fully before the next job starts.
    A failure marks the job "failed" and, with fail_fast, every later job
    "not-run". Artifacts already written are left in place.
    """
    results, _error = _run_jobs(list(jobs), engine, Path(root), fail_fast)
    return results


def run_bundle_pipeline(
    config: PipelineConfig,
    engine: Optional[BundlerEngine] = None,
    *,
    root: str | Path = ".",
) -> Dict[str, BuildResult]:
    """
    Build the minified and debug artifacts for `config`.

    Raises PipelineError on the first failed job.
    """
    jobs = pipeline_jobs(config)
    check_shared_template(jobs)

    if engine is None:
        engine = EsbuildEngine(config.engine_binary, cwd=root)

    console = get_console()
    console.print_run_started(
        entry=config.entry_point,
        global_name=config.global_name,
        job_count=len(jobs),
    )

    results, error = _run_jobs(jobs, engine, Path(root), fail_fast=True)
    if error is not None:
        raise PipelineError(error.job, error, results)

    return results
