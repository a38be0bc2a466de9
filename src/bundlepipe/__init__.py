from .dsl import build_job, derive, pipeline_jobs, BuildJobBuilder
from .engine import BuildError, BundlerEngine, EsbuildEngine
from .model import BuildJob, BuildResult, OutputFormat, PipelineConfig
from .pipeline import PipelineError, run_bundle_pipeline, run_pipeline, verify_artifacts

__all__ = [
    "build_job", "derive", "pipeline_jobs", "BuildJobBuilder",
    "BuildError", "BundlerEngine", "EsbuildEngine",
    "BuildJob", "BuildResult", "OutputFormat", "PipelineConfig",
    "PipelineError", "run_bundle_pipeline", "run_pipeline", "verify_artifacts",
]
