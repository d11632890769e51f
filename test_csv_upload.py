"""Tests for medprep.csv_upload: tokenizing, header validation, payload mapping."""
import pytest

from medprep.csv_upload import (
    parse_csv,
    map_rows,
    build_payload,
    prepare_upload,
    parse_correct_answer,
    normalize_header,
    CsvUploadError,
)

UCAT_HEADER = "question,answer1,answer2,answer3,answer4,answer5,correct_answer,type"


def test_parse_simple_rows():
    assert parse_csv("a,b\nc,d\n") == [["a", "b"], ["c", "d"]]


def test_parse_quoted_delimiters_and_newlines():
    rows = parse_csv('question,answer\n"Hello, world","line one\nline two"\n')
    assert rows == [["question", "answer"], ["Hello, world", "line one\nline two"]]


def test_parse_escaped_quote():
    assert parse_csv('"He said ""hi"""') == [['He said "hi"']]


def test_parse_crlf_and_lone_cr():
    assert parse_csv("a,b\r\nc,d\re,f") == [["a", "b"], ["c", "d"], ["e", "f"]]


def test_parse_trims_cells_and_drops_blank_rows():
    assert parse_csv("  a , b  \n , \n\n c,d") == [["a", "b"], ["c", "d"]]


def test_parse_trailing_comma_keeps_empty_cell():
    assert parse_csv("a,") == [["a", ""]]


def test_parse_empty_input():
    assert parse_csv("") == []


def test_normalize_header():
    assert normalize_header("  Question ") == "question"


def test_map_rows_empty():
    with pytest.raises(CsvUploadError, match="CSV file is empty."):
        map_rows([], "mmi")


def test_map_rows_missing_headers_in_required_order():
    with pytest.raises(CsvUploadError) as exc:
        map_rows([["question", "answer1"], ["q", "a"]], "ucat")
    assert str(exc.value) == "Missing headers: answer2, answer3, answer4, answer5, correct_answer, type"


def test_map_rows_no_data_rows():
    with pytest.raises(CsvUploadError, match="No data rows found."):
        map_rows([["Question", "Answer"]], "mmi")


def test_map_rows_fills_missing_cells_and_keeps_extra_columns():
    rows = map_rows([["Question", "ANSWER", "notes"], ["q1"]], "mmi")
    assert rows == [{"question": "q1", "answer": "", "notes": ""}]


def test_mmi_payload_trims():
    payload = build_payload([{"question": " q ", "answer": " a "}], "mmi")
    assert payload == [{"question": "q", "answer": "a"}]


def test_ucat_payload_maps_columns():
    rows = map_rows(parse_csv(UCAT_HEADER + "\nWhich?,A,B,,,,2,VR"), "ucat")
    assert build_payload(rows, "ucat") == [
        {
            "question": "Which?",
            "answer 1": "A",
            "answer 2": "B",
            "answer 3": None,
            "answer 4": None,
            "answer 5": None,
            "correct_answer": 2,
            "type": "VR",
        }
    ]


@pytest.mark.parametrize(
    "value, expected",
    [("3", 3), ("5", 5), ("", None), ("abc", None), ("0", None), ("2.5", None), ("nan", None), ("-1", None), ("7", None)],
)
def test_parse_correct_answer(value, expected):
    assert parse_correct_answer(value) == expected


def test_prepare_upload_preview_is_first_four_rows():
    body = "\n".join(f"q{i},a{i}" for i in range(6))
    batch = prepare_upload("question,answer\n" + body, "mmi")
    assert len(batch.payload) == 6
    assert [r["question"] for r in batch.preview] == ["q0", "q1", "q2", "q3"]


def test_prepare_upload_unknown_type():
    with pytest.raises(CsvUploadError):
        prepare_upload("question,answer\nq,a", "gamsat")
