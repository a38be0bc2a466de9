# src/bundlepipe/dsl.py
from __future__ import annotations

import re
from dataclasses import fields, replace
from typing import List, Optional

from .model import BuildJob, OutputFormat, PipelineConfig


# dotted JS identifier path, e.g. "COBieCoach" or "app.lib"
_GLOBAL_NAME_RE = re.compile(r"^[A-Za-z_$][\w$]*(\.[A-Za-z_$][\w$]*)*$")

# fields allowed to differ between jobs of one pipeline run
_PER_JOB_FIELDS = ("name", "minify", "outfile")


def is_valid_global_name(name: str) -> bool:
    return bool(_GLOBAL_NAME_RE.match(name or ""))


# ---------------------------------------------------------------------
# Builder API
# ---------------------------------------------------------------------

class BuildJobBuilder:
    def __init__(self, name: str):
        self.name = name
        self._entry: Optional[str] = None
        self._outfile: Optional[str] = None
        self._global_name: Optional[str] = None
        self._target: str = "es2022"
        self._format: OutputFormat = OutputFormat.IIFE
        self._bundle: bool = True
        self._minify: bool = False
        self._sourcemap: bool = False

    def entry(self, path: str):
        self._entry = path
        return self

    def output(self, path: str):
        self._outfile = path
        return self

    def global_name(self, name: str):
        self._global_name = name
        return self

    def target(self, tag: str):
        self._target = tag
        return self

    def format(self, fmt: OutputFormat | str):
        # accept the raw esbuild spelling too ("iife")
        self._format = OutputFormat(fmt)
        return self

    def bundle(self, enabled: bool = True):
        self._bundle = enabled
        return self

    def minify(self, enabled: bool = True):
        self._minify = enabled
        return self

    def sourcemap(self, enabled: bool = True):
        self._sourcemap = enabled
        return self

    def build(self) -> BuildJob:
        if not self._entry:
            raise ValueError(f"Build job '{self.name}' has no entry point")
        if not self._outfile:
            raise ValueError(f"Build job '{self.name}' has no output path")
        if not self._global_name:
            raise ValueError(f"Build job '{self.name}' has no global name")
        if not is_valid_global_name(self._global_name):
            raise ValueError(
                f"Build job '{self.name}' has invalid global name {self._global_name!r} "
                "(expected a JavaScript identifier, optionally dotted)"
            )

        return BuildJob(
            name=self.name,
            entry_point=self._entry,
            outfile=self._outfile,
            global_name=self._global_name,
            bundle=self._bundle,
            minify=self._minify,
            sourcemap=self._sourcemap,
            target=self._target,
            format=self._format,
        )


def build_job(name: str) -> BuildJobBuilder:
    """Convenience: build_job('minified').entry(...).output(...).build()"""
    return BuildJobBuilder(name)


# ---------------------------------------------------------------------
# Shared template -> per-artifact jobs
# ---------------------------------------------------------------------

def derive(base: BuildJob, *, name: str, outfile: str, minify: bool) -> BuildJob:
    """Copy of `base` overriding only the per-artifact fields."""
    return replace(base, name=name, outfile=outfile, minify=minify)


def base_job(config: PipelineConfig) -> BuildJob:
    """
    The template every pipeline job is derived from.

    Its outfile is the debug artifact; derive() overrides it per job.
    """
    return (
        build_job("base")
        .entry(config.entry_point)
        .output(config.debug_outfile)
        .global_name(config.global_name)
        .target(config.target)
        .format(config.format)
        .bundle(config.bundle)
        .sourcemap(config.sourcemap)
        .minify(False)
        .build()
    )


def pipeline_jobs(config: PipelineConfig) -> List[BuildJob]:
    """The two jobs of a run, in execution order: minified first, then debug."""
    base = base_job(config)
    return [
        derive(base, name="minified", outfile=config.min_outfile, minify=True),
        derive(base, name="debug", outfile=config.debug_outfile, minify=False),
    ]


def job_to_dict(job: BuildJob) -> dict:
    """Serialize a job descriptor to plain JSON-compatible types."""
    return {
        "name": job.name,
        "entry_point": job.entry_point,
        "outfile": job.outfile,
        "global_name": job.global_name,
        "bundle": job.bundle,
        "minify": job.minify,
        "sourcemap": job.sourcemap,
        "target": job.target,
        "format": OutputFormat(job.format).value,
    }


def check_shared_template(jobs: List[BuildJob]) -> None:
    """Raise ValueError if jobs differ in anything but name/minify/outfile."""
    if not jobs:
        return

    names = [j.name for j in jobs]
    if len(set(names)) != len(names):
        dupes = sorted({n for n in names if names.count(n) > 1})
        raise ValueError(f"Duplicate build job names found: {dupes}")

    outfiles = [j.outfile for j in jobs]
    if len(set(outfiles)) != len(outfiles):
        raise ValueError(f"Build jobs must write disjoint output files, got: {outfiles}")

    first = jobs[0]
    for j in jobs[1:]:
        for f in fields(BuildJob):
            if f.name in _PER_JOB_FIELDS:
                continue
            a, b = getattr(first, f.name), getattr(j, f.name)
            if a != b:
                raise ValueError(
                    f"Build job '{j.name}' differs from '{first.name}' on shared field "
                    f"'{f.name}': {b!r} != {a!r}"
                )
