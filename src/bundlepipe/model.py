# model.py
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional


class OutputFormat(str, Enum):
    """Output module shape understood by the bundler engine."""
    IIFE = "iife"
    ESM = "esm"
    CJS = "cjs"


@dataclass(frozen=True)
class BuildJob:
    """
    One bundler invocation: entry module in, one artifact out.

    Within a pipeline run every job shares entry_point + global_name;
    only minify and outfile are expected to differ.
    """
    name: str
    entry_point: str
    outfile: str
    global_name: str

    bundle: bool = True
    minify: bool = False
    sourcemap: bool = False
    target: str = "es2022"
    format: OutputFormat = OutputFormat.IIFE


@dataclass
class BuildResult:
    """Outcome of a single job in a pipeline run."""
    job: str
    status: str                  # "ok" | "failed" | "not-run"
    outfile: str
    size: int = 0
    sha256: str = ""
    duration: float = 0.0
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status == "ok"


@dataclass(frozen=True)
class PipelineConfig:
    """
    Deployment knobs for the two-artifact pipeline.

    Defaults reproduce the interop build: ./Interop/JS.fs.js bundled into
    fable_build/cobie-coach(.min).js under the global COBieCoach.
    """
    entry_point: str = "./Interop/JS.fs.js"
    out_dir: str = "fable_build"
    package: str = "cobie-coach"
    global_name: str = "COBieCoach"
    target: str = "es2022"
    format: OutputFormat = OutputFormat.IIFE
    bundle: bool = True
    sourcemap: bool = False

    engine_binary: str = "esbuild"

    @property
    def min_outfile(self) -> str:
        return (Path(self.out_dir) / f"{self.package}.min.js").as_posix()

    @property
    def debug_outfile(self) -> str:
        return (Path(self.out_dir) / f"{self.package}.js").as_posix()
