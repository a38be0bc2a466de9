# config.py
from __future__ import annotations

import runpy
from dataclasses import replace
from pathlib import Path
from typing import Optional

from .model import PipelineConfig

DEFAULT_CONFIG_FILE = "bundlepipe_config.py"


def load_config(path: str | Path) -> PipelineConfig:
    """
    Load a pipeline config from a python file path.

    The file must define either:
      - config() -> PipelineConfig
      - CONFIG = PipelineConfig(...)
    """
    cfg_path = Path(path).expanduser().resolve()
    if not cfg_path.exists():
        raise FileNotFoundError(f"Config file not found: {cfg_path}")
    if cfg_path.suffix != ".py":
        raise ValueError(f"Config must be a .py file, got: {cfg_path.name}")

    module_name = f"bundlepipe_config_{cfg_path.stem}"
    globals_dict = runpy.run_path(str(cfg_path), run_name=module_name)

    cfg = None
    if "config" in globals_dict and callable(globals_dict["config"]):
        cfg = globals_dict["config"]()
    elif "CONFIG" in globals_dict:
        cfg = globals_dict["CONFIG"]

    if not isinstance(cfg, PipelineConfig):
        raise TypeError(
            "Config file must return/define a PipelineConfig. "
            "Define config() -> PipelineConfig or CONFIG = PipelineConfig(...)."
        )
    return cfg


def resolve_config(path: str | Path | None = None, **overrides) -> PipelineConfig:
    """
    Pick the config for a run:
      explicit file > ./bundlepipe_config.py > built-in defaults,
    then apply every override that is not None (CLI options).
    """
    if path is not None:
        cfg = load_config(path)
    elif Path(DEFAULT_CONFIG_FILE).exists():
        cfg = load_config(DEFAULT_CONFIG_FILE)
    else:
        cfg = PipelineConfig()

    unknown = sorted(k for k in overrides if not hasattr(cfg, k))
    if unknown:
        raise TypeError(f"Unknown config overrides: {unknown}")

    changes = {k: v for k, v in overrides.items() if v is not None}
    return replace(cfg, **changes) if changes else cfg


def describe(cfg: PipelineConfig) -> dict:
    """Plain-dict view used by `bundlepipe plan --json`."""
    return {
        "entry_point": cfg.entry_point,
        "out_dir": cfg.out_dir,
        "package": cfg.package,
        "global_name": cfg.global_name,
        "target": cfg.target,
        "format": cfg.format.value,
        "engine_binary": cfg.engine_binary,
    }


def config_source(path: Optional[str]) -> str:
    if path is not None:
        return str(path)
    if Path(DEFAULT_CONFIG_FILE).exists():
        return DEFAULT_CONFIG_FILE
    return "<defaults>"
