import json
import os
import subprocess
import sys
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).resolve().parent.parent

VALID_TENET = """\
---
id: simplicity
last_modified: '2025-05-09'
version: '0.1.0'
---

# Tenet: Simplicity
"""

VALID_BINDING = """\
---
id: hex-arch
last_modified: '2025-05-09'
derived_from: simplicity
enforced_by: code review
version: '0.1.0'
---

# Binding: Hexagonal architecture
"""


def run_cli(args, cwd=None, env=None, timeout=60):
    """
    Run the CLI as a subprocess: python -m metascan.cli <args>
    Returns CompletedProcess with stdout/stderr text captured.
    """
    cmd = [sys.executable, "-m", "metascan.cli"] + list(map(str, args))
    full_env = dict(os.environ)
    full_env.pop("NO_COLOR", None)
    full_env.pop("METASCAN_STRUCTURED_LOGGING", None)
    full_env.pop("METASCAN_VERSION_FILE", None)
    full_env["PYTHONPATH"] = os.pathsep.join(p for p in [str(PROJECT_ROOT), full_env.get("PYTHONPATH", "")] if p)
    full_env.update(env or {})
    return subprocess.run(cmd, cwd=cwd, env=full_env, capture_output=True, text=True, timeout=timeout)


def write_doc(root: Path, relative: str, text: str) -> Path:
    path = root / relative
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


@pytest.fixture()
def docs_repo(tmp_path: Path) -> Path:
    """
    A minimal repository: VERSION plus one valid tenet and one valid binding.
    """
    root = tmp_path / "repo"
    root.mkdir()
    (root / "VERSION").write_text("0.1.0\n", encoding="utf-8")
    write_doc(root, "docs/tenets/simplicity.md", VALID_TENET)
    write_doc(root, "docs/tenets/00-index.md", "# Index\n")
    write_doc(root, "docs/bindings/core/hex-arch.md", VALID_BINDING)
    return root


@pytest.fixture()
def out_dir(tmp_path: Path) -> Path:
    d = tmp_path / "out"
    d.mkdir(parents=True, exist_ok=True)
    return d


def load_json(p: Path):
    with p.open("r") as f:
        return json.load(f)


def assert_exit(proc, expected):
    assert proc.returncode == expected, (
        f"Exit {proc.returncode}, expected {expected}:\nSTDOUT:\n{proc.stdout}\nSTDERR:\n{proc.stderr}"
    )


def assert_file(p: Path):
    assert p.exists(), f"Expected file missing: {p}"
    return p
