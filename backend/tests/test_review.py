from types import SimpleNamespace

from trellis.services.review import build_review_input, to_string_list


def test_to_string_list() -> None:
    assert to_string_list(None) == []
    assert to_string_list(42) == []
    assert to_string_list(" one \n\n two ") == ["one", "two"]
    assert to_string_list([" a ", "", None, "b"]) == ["a", "b"]


def test_build_review_input_splits_ssk_lines() -> None:
    ssk = [
        SimpleNamespace(start_text="A\n\n B", stop_text="", keep_text="C"),
        SimpleNamespace(start_text="D", stop_text=None, keep_text=""),
    ]
    swot = [SimpleNamespace(strengths=["Brand"], weaknesses=[], opportunities=None, threats=["Rates", " "])]

    review = build_review_input(ssk, swot)

    assert review.start_items == ["A", "B", "D"]
    assert review.stop_items == []
    assert review.keep_items == ["C"]
    assert review.strengths == ["Brand"]
    assert review.opportunities == []
    assert review.threats == ["Rates"]
