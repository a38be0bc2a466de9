# bundlepipe_config.py
# Build config for the COBie Coach interop bundles.
from __future__ import annotations

from bundlepipe.model import PipelineConfig


def config():
    return PipelineConfig(
        entry_point="./Interop/JS.fs.js",
        out_dir="fable_build",
        package="cobie-coach",
        global_name="COBieCoach",
        target="es2022",
    )
