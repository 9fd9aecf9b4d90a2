import contextlib

from prompt_toolkit import PromptSession
from prompt_toolkit.input import create_pipe_input
from prompt_toolkit.output import DummyOutput

from expense_intake.models import CATEGORY_LABELS
from expense_intake.reconcile import BatchReconciler
from expense_intake.term_ui import (
    confirm,
    edit_item_interactively,
    prompt_amount,
    resolve_category_input,
    review_batch,
    select_category,
)

ITEMS = (
    '[{"date":"2024-05-01","title":"Coffee","amount":450,"category":"食費","is_business":false},'
    '{"date":"2024-05-01","title":"Cake","amount":600,"category":"食費","is_business":false},'
    '{"date":"bad","title":"Taxi","amount":1500,"category":"Taxi","is_business":true}]'
)


@contextlib.contextmanager
def pipe_session():
    with create_pipe_input() as pipe:
        sess = PromptSession(input=pipe, output=DummyOutput())
        yield pipe, sess


def _ready() -> BatchReconciler:
    rec = BatchReconciler()
    rec.begin_scan()
    rec.complete_scan(ITEMS)
    return rec


def test_resolve_category_input():
    assert resolve_category_input("1") == "食費"
    assert resolve_category_input("9") == "その他"
    assert resolve_category_input("10") is None
    assert resolve_category_input("交通費") == "交通費"
    assert resolve_category_input("transport") == "交通費"
    assert resolve_category_input("健康") == "健康・美容"
    assert resolve_category_input("nope") is None
    assert resolve_category_input("") is None
    # Non-ASCII digits such as superscripts are not list numbers.
    assert resolve_category_input("²") is None


def test_select_category_accepts_default_with_enter():
    with pipe_session() as (pipe, sess):
        pipe.send_text("\r")
        assert select_category(CATEGORY_LABELS, default="食費", session=sess) == "食費"


def test_select_category_by_number():
    with pipe_session() as (pipe, sess):
        pipe.send_text("\x01\x0b3\r")  # Ctrl-A, Ctrl-K to clear, then "3"
        assert select_category(CATEGORY_LABELS, default="食費", session=sess) == "交通費"


def test_prompt_amount_reprompts_until_valid():
    with pipe_session() as (pipe, sess):
        pipe.send_text("\x01\x0b-5\r\x01\x0b1200\r")
        assert prompt_amount(default=450, session=sess) == 1200


def test_prompt_amount_rejects_non_ascii_and_oversize_numbers():
    with pipe_session() as (pipe, sess):
        pipe.send_text("\x01\x0b²\r\x01\x0b99999999999999999999\r\x01\x0b7\r")
        assert prompt_amount(session=sess) == 7


def test_confirm_default_and_explicit():
    with pipe_session() as (pipe, sess):
        pipe.send_text("\r")
        assert confirm("Save?", default=True, session=sess) is True
    with pipe_session() as (pipe, sess):
        pipe.send_text("n\r")
        assert confirm("Save?", default=True, session=sess) is False


def test_review_batch_keep_delete_edit_and_save():
    rec = _ready()
    lines: list[str] = []
    with pipe_session() as (pipe, sess):
        pipe.send_text(
            "\r"  # keep Coffee
            "d\r"  # delete Cake
            "e\r"  # edit Taxi
            "\r"  # title unchanged
            "\x01\x0b1600\r"  # amount
            "\x01\x0b2024-05-02\r"  # date
            "\x01\x0b3\r"  # category 交通費
            "\r"  # business: keep default (yes)
            "Shibuya\r"  # from
            "Shinjuku\r"  # to
            "y\r"  # save
        )
        assert review_batch(rec, session=sess, echo=lines.append) is True

    coffee, taxi = rec.items
    assert coffee.title == "Coffee"
    assert (taxi.title, taxi.amount, taxi.date, taxi.category, taxi.is_business) == (
        "Taxi",
        1600,
        "2024-05-02",
        "交通費",
        True,
    )
    assert (taxi.location_from, taxi.location_to) == ("Shibuya", "Shinjuku")
    assert any("deleted" in line for line in lines)


def test_review_batch_decline_save():
    rec = _ready()
    with pipe_session() as (pipe, sess):
        pipe.send_text("\r\r\rn\r")
        assert review_batch(rec, session=sess, echo=lambda s: None) is False
    assert len(rec.items) == 3


def test_edit_keeps_missing_locations_as_none():
    rec = _ready()
    coffee = rec.items[0]
    with pipe_session() as (pipe, sess):
        pipe.send_text("\r\r\r\r\r\r\r")  # accept every default
        updated = edit_item_interactively(rec, coffee, session=sess)
    assert updated.location_from is None
    assert updated.location_to is None
    assert updated == coffee
