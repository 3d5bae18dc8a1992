\
from pathlib import Path
from conftest import VALID_BINDING, VALID_TENET, assert_exit, assert_file, load_json, run_cli, write_doc


def test_valid_repository_passes(docs_repo: Path):
    proc = run_cli(["dir", docs_repo, "--no-progress"])
    assert_exit(proc, 0)
    assert "All files validated successfully!" in proc.stdout
    assert "Validation failed" not in proc.stderr


def test_errors_are_grouped_and_sorted_by_file(docs_repo: Path):
    write_doc(docs_repo, "docs/tenets/b-bad.md", "# No metadata here\n")
    write_doc(docs_repo, "docs/tenets/a-bad.md", VALID_TENET.replace("simplicity", "a-bad").replace("0.1.0", "9.9.9"))

    proc = run_cli(["dir", docs_repo, "--no-progress"])
    assert_exit(proc, 1)
    assert "Validation failed with 2 errors in 2 files:" in proc.stderr
    assert proc.stderr.index("a-bad.md:") < proc.stderr.index("b-bad.md:")
    assert "[ERROR] line 4, field 'version': Version mismatch" in proc.stderr
    assert "type: no_frontmatter" in proc.stderr
    assert "Metadata validation failed!" in proc.stderr


def test_piped_output_has_no_escape_sequences(docs_repo: Path):
    write_doc(docs_repo, "docs/bindings/core/broken.md", VALID_BINDING.replace("id: hex-arch", "id: Broken_ID"))
    proc = run_cli(["dir", docs_repo, "--no-progress"])
    assert_exit(proc, 1)
    assert "[ERROR]" in proc.stderr
    assert "\x1b[" not in proc.stderr
    assert "\x1b[" not in proc.stdout


def test_misplaced_binding_is_only_a_warning(docs_repo: Path):
    write_doc(docs_repo, "docs/bindings/stray.md", VALID_BINDING.replace("hex-arch", "stray"))
    proc = run_cli(["dir", docs_repo, "--no-progress"])
    assert_exit(proc, 0)
    assert "Validation passed with 1 warning in 1 file:" in proc.stderr
    assert "[WARNING]" in proc.stderr
    assert "All files validated successfully!" in proc.stdout


def test_category_bindings_and_duplicate_ids(docs_repo: Path):
    write_doc(docs_repo, "docs/bindings/categories/python/dup.md", VALID_BINDING)
    proc = run_cli(["dir", docs_repo, "--no-progress"])
    assert_exit(proc, 1)
    assert "type: duplicate_id" in proc.stderr


def test_out_directory_gets_reports(docs_repo: Path, out_dir: Path):
    write_doc(docs_repo, "docs/bindings/core/extra.md", VALID_BINDING.replace("hex-arch", "extra").replace("code review", "''"))
    proc = run_cli(["dir", docs_repo, "--no-progress", "--out", out_dir])
    assert_exit(proc, 1)

    findings = load_json(assert_file(out_dir / "findings.json"))
    assert [f["type"] for f in findings] == ["invalid_enforced_by_format"]
    assert findings[0]["severity"] == "error"
    summary = assert_file(out_dir / "summary.md").read_text()
    assert "- exit code: 1" in summary


def test_unknown_check_selector_exits_two(docs_repo: Path):
    proc = run_cli(["dir", docs_repo, "--no-progress", "--checks", "nonexistent"])
    assert_exit(proc, 2)
    assert "No checks selected" in proc.stderr
