# cli.py
from __future__ import annotations

import json
import sys

import click

from bundlepipe.config import config_source, describe, resolve_config
from bundlepipe.dsl import job_to_dict, pipeline_jobs
from bundlepipe.engine import EsbuildEngine
from bundlepipe.pipeline import PipelineError, run_bundle_pipeline, verify_artifacts
from bundlepipe.ui.console import Console, get_console, set_console


def _load(ctx, config_path, **overrides):
    """Resolve config or exit(1) with a structured error."""
    console = get_console()
    try:
        return resolve_config(config_path, **overrides)
    except (FileNotFoundError, ValueError, TypeError) as e:
        console.print_error(
            "Failed to load config",
            f"Could not load config from {config_source(config_path)}",
            details=[str(e)],
            suggestion="Define CONFIG = PipelineConfig(...) in bundlepipe_config.py or pass --config.",
        )
        if ctx.obj.get("debug", False):
            import traceback
            traceback.print_exc()
        sys.exit(1)


@click.group(invoke_without_command=True)
@click.option(
    "--debug",
    is_flag=True,
    default=False,
    help="Enable debug mode (show stack traces and full diagnostics)",
)
@click.pass_context
def cli(ctx, debug):
    """bundlepipe: build the minified and debug bundles of the interop entry module."""
    console = Console(debug=debug)
    set_console(console)
    ctx.ensure_object(dict)
    ctx.obj["debug"] = debug

    # bare `bundlepipe` behaves like `bundlepipe build`
    if ctx.invoked_subcommand is None:
        ctx.invoke(build)


@cli.command()
@click.option("--config", "config_path", default=None, help="Config file (defaults to bundlepipe_config.py if present)")
@click.option("--entry", default=None, help="Entry module path")
@click.option("--out-dir", default=None, help="Output directory for both artifacts")
@click.option("--package", default=None, help="Artifact base name (<package>.js / <package>.min.js)")
@click.option("--global-name", default=None, help="Global identifier the bundles expose")
@click.option("--target", default=None, help="JavaScript language-level target (e.g. es2022)")
@click.option("--esbuild", "engine_binary", default=None, help="esbuild executable to run")
@click.option("--verify/--no-verify", default=True, show_default=True, help="Check artifacts after building")
@click.pass_context
def build(ctx, config_path, entry, out_dir, package, global_name, target, engine_binary, verify):
    """Build <package>.min.js then <package>.js."""
    console = get_console()
    cfg = _load(
        ctx,
        config_path,
        entry_point=entry,
        out_dir=out_dir,
        package=package,
        global_name=global_name,
        target=target,
        engine_binary=engine_binary,
    )
    console.print_debug(f"config: {describe(cfg)}")

    try:
        results = run_bundle_pipeline(cfg, EsbuildEngine(cfg.engine_binary))
    except KeyboardInterrupt:
        console.print_info("\nInterrupted by user")
        sys.exit(130)
    except PipelineError as e:
        console.print_results(e.results)
        console.print_error(
            "Build failed",
            f"Job '{e.job}' failed ({e.kind})",
            details=[str(e.cause)],
        )
        sys.exit(1)
    except Exception as e:
        console.print_exception(e)
        sys.exit(1)

    console.print_results(results)

    if verify:
        problems = verify_artifacts(results)
        if problems:
            console.print_error("Artifact verification failed", "Built artifacts did not pass checks:", details=problems)
            sys.exit(1)


@cli.command()
@click.option("--config", "config_path", default=None, help="Config file (defaults to bundlepipe_config.py if present)")
@click.option("--json", "as_json", is_flag=True, default=False, help="Print job descriptors as JSON")
@click.pass_context
def plan(ctx, config_path, as_json):
    """Show the build jobs without running them."""
    console = get_console()
    cfg = _load(ctx, config_path)

    try:
        jobs = pipeline_jobs(cfg)
    except ValueError as e:
        console.print_error("Invalid config", str(e))
        sys.exit(1)

    if as_json:
        click.echo(json.dumps([job_to_dict(j) for j in jobs], indent=2))
        return

    console.print_header(f"PLAN ({config_source(config_path)})")
    for j in jobs:
        console.print_plan_job(j)


if __name__ == "__main__":
    cli()
