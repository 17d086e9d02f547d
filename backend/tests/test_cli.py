"""
Tests for the knowledge base command line.

Run with:
    cd backend && python -m pytest tests/test_cli.py -v
"""

import os
import sys

import pytest

# ── Ensure backend is importable ──
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from cli import build_parser, main
from exporters.markdown_encoder import format_timestamp
from knowledge import SEED_RECORDS


class TestCli:

    def test_list_seeded_knowledge_base(self, tmp_path, capsys):
        assert main(["--data-dir", str(tmp_path), "list"]) == 0
        out = capsys.readouterr().out
        for record in SEED_RECORDS:
            assert record.id in out
        assert f"{len(SEED_RECORDS)} solution(s)" in out

    def test_list_shows_local_date(self, tmp_path, capsys):
        main(["--data-dir", str(tmp_path), "list"])
        out = capsys.readouterr().out
        for record in SEED_RECORDS:
            assert f"{record.id}  {format_timestamp(record.timestamp)[:10]}  " in out

    def test_list_with_filter(self, tmp_path, capsys):
        assert main(["--data-dir", str(tmp_path), "list", "--area", "logistics"]) == 0
        out = capsys.readouterr().out
        assert "seed-002" in out
        assert "seed-001" not in out

    def test_show(self, tmp_path, capsys):
        assert main(["--data-dir", str(tmp_path), "show", "seed-002"]) == 0
        assert capsys.readouterr().out.startswith("# Solution for: Regional distributor")

    def test_show_missing(self, tmp_path, capsys):
        assert main(["--data-dir", str(tmp_path), "show", "nope"]) == 1
        assert "Solution not found: nope" in capsys.readouterr().err

    def test_export_selected_markdown(self, tmp_path):
        out_dir = tmp_path / "out"
        args = ["--data-dir", str(tmp_path), "export", "markdown", "--ids", "seed-001", "--out", str(out_dir)]
        assert main(args) == 0

        files = list(out_dir.glob("exported_solutions_*.md"))
        assert len(files) == 1
        text = files[0].read_text(encoding="utf-8")
        assert "Fashion e-commerce" in text
        assert "Regional distributor" not in text

    def test_export_csv(self, tmp_path):
        out_dir = tmp_path / "out"
        assert main(["--data-dir", str(tmp_path), "export", "csv", "--out", str(out_dir)]) == 0
        [path] = out_dir.glob("knowledge_base_*.csv")
        assert len(path.read_text(encoding="utf-8").split("\n")) == len(SEED_RECORDS) + 1

    def test_export_unknown_ids(self, tmp_path, capsys):
        args = ["--data-dir", str(tmp_path), "export", "markdown", "--ids", "gone", "--out", str(tmp_path / "out")]
        assert main(args) == 1
        assert "Nothing to export." in capsys.readouterr().err

    def test_rejects_unknown_format(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["export", "xml"])
