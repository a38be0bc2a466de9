from __future__ import annotations

import json
import os
import shutil
import subprocess

import pytest

from bundlepipe.engine import EsbuildEngine
from bundlepipe.pipeline import PipelineError, run_bundle_pipeline, verify_artifacts

ESBUILD = os.environ.get("BUNDLEPIPE_ESBUILD") or shutil.which("esbuild")
NODE = shutil.which("node")

pytestmark = pytest.mark.skipif(
    not (ESBUILD and NODE),
    reason="needs esbuild (PATH or BUNDLEPIPE_ESBUILD) and node",
)

# Evaluate a bundle the way a <script> tag would: top-level var lands on the global.
LOAD_BUNDLE = """
const vm = require("vm");
const fs = require("fs");
const sandbox = {};
vm.createContext(sandbox);
vm.runInContext(fs.readFileSync(process.argv[1], "utf8"), sandbox);
const lib = sandbox.COBieCoach;
console.log(JSON.stringify({greet: lib.greet(), members: Object.keys(lib).sort()}));
"""


def _load(path):
    out = subprocess.check_output([NODE, "-e", LOAD_BUNDLE, str(path)], text=True)
    return json.loads(out)


def test_greet_from_both_bundles(project, config):
    results = run_bundle_pipeline(config, EsbuildEngine(ESBUILD, cwd=project), root=project)

    assert verify_artifacts(results, root=project) == []
    minified = _load(project / "fable_build" / "cobie-coach.min.js")
    debug = _load(project / "fable_build" / "cobie-coach.js")

    assert minified["greet"] == "hi"
    assert debug["greet"] == "hi"
    assert minified["members"] == debug["members"] == ["greet"]


def test_real_build_is_deterministic(project, config):
    engine = EsbuildEngine(ESBUILD, cwd=project)
    first = run_bundle_pipeline(config, engine, root=project)
    second = run_bundle_pipeline(config, engine, root=project)
    assert {n: r.sha256 for n, r in first.items()} == {n: r.sha256 for n, r in second.items()}


def test_syntax_error_is_reported_as_transform(project, config):
    (project / "Interop" / "JS.fs.js").write_text("export function greet( {\n", encoding="utf-8")

    with pytest.raises(PipelineError) as exc_info:
        run_bundle_pipeline(config, EsbuildEngine(ESBUILD, cwd=project), root=project)

    assert exc_info.value.job == "minified"
    assert exc_info.value.kind == "transform"
    assert not (project / "fable_build" / "cobie-coach.js").exists()


def test_unresolved_import_is_reported_as_resolution(project, config):
    (project / "Interop" / "JS.fs.js").write_text(
        'import { x } from "./Missing.fs.js";\nexport const y = x;\n', encoding="utf-8"
    )

    with pytest.raises(PipelineError) as exc_info:
        run_bundle_pipeline(config, EsbuildEngine(ESBUILD, cwd=project), root=project)

    assert exc_info.value.kind == "resolution"
