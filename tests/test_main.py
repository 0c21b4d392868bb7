# tests/test_main.py
"""
End-to-end tests for the ``javatime-check`` CLI.
"""

import json

import pytest

from conftest import call_json
from javatime_shims import __version__
from javatime_shims.main import EXIT_ERROR, EXIT_INFRA, EXIT_OK, main

LOCAL_DATE = "java.time.LocalDate"
MONTH = "java.time.Month"
INSTANT = "java.time.Instant"

JAVA_SOURCE = """package com.example;

class Dates {
  Object a(Month month) { return LocalDate.from(month); }
  Object b(Instant now) { return Instant.from(now); }
}
"""


def _span(needle):
    start = JAVA_SOURCE.index(needle)
    return start, start + len(needle)


@pytest.fixture
def project(tmp_path, write_dump):
    """A source file on disk plus a dump describing its two calls."""
    (tmp_path / "Dates.java").write_text(JAVA_SOURCE, encoding="utf-8")
    r_start, r_end = _span("Instant.from(now)")
    a_start, a_end = _span("now)")
    dump = write_dump([{
        "file": "Dates.java",
        "package": "com.example",
        "calls": [
            call_json(LOCAL_DATE, MONTH, "month", line=4),
            call_json(INSTANT, INSTANT, "now", line=5,
                      start=r_start, end=r_end, arg_start=a_start, arg_end=a_end - 1),
        ],
    }])
    return tmp_path, dump


class TestCheckCommand:

    def test_json_output(self, project, capsys):
        _, dump = project
        assert main(["check", str(dump), "-f", "json"]) == EXIT_ERROR
        records = [json.loads(line) for line in capsys.readouterr().out.splitlines()]
        assert [r["errorId"] for r in records] == [
            "fromTemporalAccessorThrows", "fromTemporalAccessorRedundant",
        ]
        assert records[1]["fix"][0]["replacement"] == "now"

    def test_gcc_output_default(self, project, capsys):
        _, dump = project
        main(["check", str(dump)])
        out = capsys.readouterr().out
        assert "Dates.java:4:1: error:" in out
        assert "[fromTemporalAccessorThrows]" in out

    def test_suppress_everything(self, project, capsys):
        _, dump = project
        assert main(["check", str(dump), "--suppress", "FromTemporalAccessor"]) == EXIT_OK
        assert capsys.readouterr().out == ""

    def test_no_invalid(self, project, capsys):
        _, dump = project
        main(["check", str(dump), "--no-invalid", "-f", "json"])
        out = capsys.readouterr().out
        assert "fromTemporalAccessorThrows" not in out
        assert "fromTemporalAccessorRedundant" in out

    def test_trusted_package(self, project):
        _, dump = project
        assert main(["check", str(dump), "--trusted", "com.example"]) == EXIT_OK

    def test_output_file(self, project, tmp_path):
        _, dump = project
        report = tmp_path / "out" / "report.txt"
        main(["check", str(dump), "-o", str(report)])
        assert "fromTemporalAccessorRedundant" in report.read_text(encoding="utf-8")

    def test_fix_rewrites_source(self, project):
        root, dump = project
        assert main(["check", str(dump), "--fix"]) == EXIT_ERROR
        fixed = (root / "Dates.java").read_text(encoding="utf-8")
        assert "return now;" in fixed
        assert "LocalDate.from(month)" in fixed

    def test_fix_keeps_crlf_line_endings(self, tmp_path, write_dump):
        source = JAVA_SOURCE.replace("\n", "\r\n")
        (tmp_path / "Dates.java").write_bytes(source.encode("utf-8"))
        start = source.index("Instant.from(now)")
        arg = source.index("now)", start)
        dump = write_dump([{
            "file": "Dates.java",
            "calls": [call_json(INSTANT, INSTANT, "now", line=5, start=start,
                                end=start + len("Instant.from(now)"),
                                arg_start=arg, arg_end=arg + 3)],
        }])
        assert main(["check", str(dump), "--fix"]) == EXIT_ERROR
        fixed = (tmp_path / "Dates.java").read_bytes()
        assert fixed == source.replace("Instant.from(now)", "now").encode("utf-8")
        assert fixed.count(b"\r\n") == JAVA_SOURCE.count("\n")
        assert b"\n" not in fixed.replace(b"\r\n", b"")

    def test_fix_nested_redundant_calls(self, tmp_path, write_dump):
        source = "class A {\n  Object b(Instant now) { return Instant.from(Instant.from(now)); }\n}\n"
        (tmp_path / "A.java").write_text(source, encoding="utf-8")
        outer = source.index("Instant.from(Instant.from(now))")
        inner = source.index("Instant.from(now)")
        arg = source.index("now))")
        dump = write_dump([{
            "file": "A.java",
            "calls": [
                call_json(INSTANT, INSTANT, "Instant.from(now)", line=2,
                          start=outer, end=outer + len("Instant.from(Instant.from(now))"),
                          arg_start=inner, arg_end=inner + len("Instant.from(now)")),
                call_json(INSTANT, INSTANT, "now", line=2,
                          start=inner, end=inner + len("Instant.from(now)"),
                          arg_start=arg, arg_end=arg + 3),
            ],
        }])
        assert main(["check", str(dump), "--fix"]) == EXIT_ERROR
        assert "return now;" in (tmp_path / "A.java").read_text(encoding="utf-8")

    def test_fix_failure_writes_nothing(self, tmp_path, write_dump):
        good = "class A { Object a(Instant now) { return Instant.from(now); } }"
        bad = "class B { Object b(Instant now) { return Instant.from(now); } }"
        (tmp_path / "A.java").write_text(good, encoding="utf-8")
        (tmp_path / "B.java").write_text(bad, encoding="utf-8")
        start = good.index("Instant.from(now)")
        end = start + len("Instant.from(now)")
        dump = write_dump([
            {"file": "A.java",
             "calls": [call_json(INSTANT, INSTANT, "now", line=1, start=start, end=end)]},
            # two fixes over crossing spans of B.java cannot both apply
            {"file": "B.java",
             "calls": [
                 call_json(INSTANT, INSTANT, "now", line=1, start=start, end=end),
                 call_json(INSTANT, INSTANT, "now", line=1, start=start + 2, end=end + 2),
             ]},
        ])
        assert main(["check", str(dump), "--fix"]) == EXIT_INFRA
        assert (tmp_path / "A.java").read_text(encoding="utf-8") == good
        assert (tmp_path / "B.java").read_text(encoding="utf-8") == bad

    def test_missing_dump(self, tmp_path):
        assert main(["check", str(tmp_path / "none.json")]) == EXIT_INFRA

    def test_bad_dump(self, tmp_path):
        bad = tmp_path / "bad.json"
        bad.write_text('{"version": 9, "units": []}', encoding="utf-8")
        assert main(["check", str(bad)]) == EXIT_INFRA


class TestTableCommand:

    def test_grid(self, capsys):
        assert main(["table"]) == EXIT_OK
        out = capsys.readouterr().out
        assert "LocalDate" in out
        assert " X" in out

    def test_target_json(self, capsys):
        assert main(["table", "--target", "LocalDate", "-f", "json"]) == EXIT_OK
        data = json.loads(capsys.readouterr().out)
        assert "Month" in data["LocalDate"]

    def test_source_text(self, capsys):
        assert main(["table", "--source", "java.time.Month"]) == EXIT_OK
        out = capsys.readouterr().out
        assert "  LocalDate" in out.splitlines()

    def test_unknown_type(self):
        assert main(["table", "--target", "Duration"]) == EXIT_INFRA

    def test_target_and_source_exclusive(self):
        with pytest.raises(SystemExit):
            main(["table", "--target", "LocalDate", "--source", "Month"])


class TestMiscCommands:

    def test_explain(self, capsys):
        assert main(["explain"]) == EXIT_OK
        out = capsys.readouterr().out
        assert out.startswith("FromTemporalAccessor (error)")
        assert "Not all java.time types" in out

    def test_explain_unknown(self):
        assert main(["explain", "Nope"]) == EXIT_INFRA

    def test_list_checkers(self, capsys):
        assert main(["list-checkers"]) == EXIT_OK
        out = capsys.readouterr().out
        assert "FromTemporalAccessor" in out
        assert "fromTemporalAccessorRedundant" in out

    def test_no_command(self):
        assert main([]) == EXIT_INFRA

    def test_version(self, capsys):
        with pytest.raises(SystemExit) as info:
            main(["--version"])
        assert info.value.code == 0
        assert __version__ in capsys.readouterr().out
