"""Unit tests for CLI command handling."""

from __future__ import annotations

import shutil
from pathlib import Path

from cli.main import main
from tests.fixture_paths import snapshot_fixture


def test_cli_ingest_prints_summary(config, capsys) -> None:
    """CLI ingest should print the per-file summary line."""
    source_path = snapshot_fixture("relays-2024-03-01.csv")
    args = ["--data-root", str(config.data_root), "ingest", str(source_path)]

    exit_code = main(args)
    output = capsys.readouterr().out.strip()

    assert exit_code == 0
    assert output == (
        f"Imported 3 relays from {source_path} (1 of 4 skipped due to malformed data)"
    )


def test_cli_ingest_twice_reports_existing_date(config, capsys) -> None:
    """Second run of the same file is a successful no-op."""
    args = [
        "--data-root",
        str(config.data_root),
        "ingest",
        str(snapshot_fixture("relays-2024-03-01.csv")),
    ]
    main(args)
    capsys.readouterr()

    exit_code = main(args)
    output = capsys.readouterr().out

    assert exit_code == 0 and "already ingested" in output


def test_cli_ingest_reports_failed_stage(config, capsys) -> None:
    """Failures name the stage on stderr and exit non-zero."""
    args = [
        "--data-root",
        str(config.data_root),
        "ingest",
        str(snapshot_fixture("bad-header-2024-03-02.csv")),
    ]

    exit_code = main(args)
    captured = capsys.readouterr()

    assert exit_code == 1
    assert "at stage extract" in captured.err
    assert captured.out == ""


def test_cli_ingest_dir_processes_files_in_name_order(config, capsys, tmp_path: Path) -> None:
    """Directory ingest handles matching files sorted by name."""
    source_dir = tmp_path / "incoming"
    source_dir.mkdir()
    shutil.copy(snapshot_fixture("relays-2024-03-01.csv"), source_dir)
    shutil.copy(snapshot_fixture("header-only-2024-03-03.csv"), source_dir)
    (source_dir / "README.txt").write_text("not a snapshot", encoding="utf-8")
    args = ["--data-root", str(config.data_root), "ingest-dir", str(source_dir)]

    exit_code = main(args)
    lines = capsys.readouterr().out.strip().splitlines()

    assert exit_code == 0
    assert len(lines) == 2
    assert lines[0].startswith("Imported 0 relays from") and "header-only" in lines[0]
    assert lines[1].startswith("Imported 3 relays from")


def test_cli_ingest_dir_reports_missing_directory(config, capsys, tmp_path: Path) -> None:
    """Missing directories are reported as errors."""
    args = ["--data-root", str(config.data_root), "ingest-dir", str(tmp_path / "absent")]

    exit_code = main(args)

    assert exit_code == 1
    assert "error:" in capsys.readouterr().err


def test_cli_reads_settings_file(capsys, tmp_path: Path) -> None:
    """The --config YAML file supplies the data root."""
    settings_path = tmp_path / "relayscope.yaml"
    settings_path.write_text(f"data_root: {tmp_path / 'from-yaml'}\n", encoding="utf-8")
    args = ["--config", str(settings_path), "ingest", str(snapshot_fixture("relays-2024-03-01.csv"))]

    exit_code = main(args)

    assert exit_code == 0
    assert (tmp_path / "from-yaml" / "dates.json").exists()
