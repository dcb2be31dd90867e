from __future__ import annotations

from pathlib import Path

from cwsim.callsign_pool import CallerRecord, load_callers_file, parse_caller_text


def test_parse_caller_text_ignores_comments_and_duplicates():
    text = "\ufeff" + """
# this is a comment
N1MM,John,MA

K1ABC,Anna
  # another comment
ea4xyz
N1MM,duplicate
"""
    callers = parse_caller_text(text)
    assert callers == [
        CallerRecord("N1MM", "JOHN", "MA"),
        CallerRecord("K1ABC", "ANNA", ""),
        CallerRecord("EA4XYZ", "", ""),
    ]


def test_load_callers_file(tmp_path: Path):
    p = tmp_path / "callers.csv"
    p.write_text("W2XYZ,BOB,NY\nN3DEF,SUE,PA\n", encoding="utf-8")
    assert [c.callsign for c in load_callers_file(p)] == ["W2XYZ", "N3DEF"]
