"""Tests for the scs-build command line."""

from survey_core.cli import main, parse_args
from survey_core.config import OUTPUT_COLUMNS, SHEETS
from tests.conftest import full_row, write_workbook


class TestParseArgs:
    def test_defaults(self):
        args = parse_args([])
        assert args.sheets == list(SHEETS)
        assert args.verbose is False

    def test_sheet_override(self):
        assert parse_args(["--sheets", "T1", "T9"]).sheets == ["T1", "T9"]


class TestMain:
    def test_builds_csv(self, full_workbook, tmp_path, capsys):
        out = tmp_path / "clean.csv"
        code = main(["--source", str(full_workbook), "--output", str(out), "--sheets", "T1", "T3"])
        assert code == 0
        assert out.read_text(encoding="utf-8").splitlines()[0] == ",".join(OUTPUT_COLUMNS)
        assert "Wrote" in capsys.readouterr().out

    def test_missing_source(self, tmp_path, capsys):
        code = main(["--source", str(tmp_path / "absent.xlsx"), "--output", str(tmp_path / "x.csv")])
        assert code == 2
        assert "not found" in capsys.readouterr().err

    def test_data_fault_writes_nothing(self, tmp_path, capsys):
        path = write_workbook(tmp_path / "bad.xlsx", {"T1": [full_row("Base: All"), full_row("Yes")]})
        out = tmp_path / "clean.csv"
        code = main(["--source", str(path), "--output", str(out), "--sheets", "T1"])
        assert code == 1
        assert not out.exists()
        err = capsys.readouterr().err
        assert err.count("Prefer not to say") == 1
        assert "nothing written" in err
