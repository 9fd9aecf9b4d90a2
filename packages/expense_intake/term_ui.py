"""Tiny terminal UI helpers (prompt_toolkit-based).

Small, focused prompts for reviewing a scanned batch. They are kept apart
from the reconciler so they can be tested in isolation with a pipe input.
Every helper accepts an optional ``session``; its ``input``/``output`` are
reused so tests can drive the prompts headlessly.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Sequence

from prompt_toolkit import PromptSession
from prompt_toolkit.completion import WordCompleter
from prompt_toolkit.validation import ValidationError, Validator

from .models import CATEGORY_LABELS, MAX_AMOUNT, Category, EditableBatchItem
from .reconcile import BatchReconciler

_DIGITS = re.compile(r"[0-9]+")


def _session_for(session: PromptSession | None) -> PromptSession:
    if session is None:
        return PromptSession()
    return PromptSession(
        input=getattr(session, "input", None),
        output=getattr(session, "output", None),
    )


# ----------------------------------------------------------------------------
# Category selector
# ----------------------------------------------------------------------------


def resolve_category_input(text: str, categories: Sequence[str] = CATEGORY_LABELS) -> str | None:
    """Map typed text to one of ``categories``.

    Accepts, in order: a 1-based list number, an exact label, a
    :class:`Category` member name (case-insensitive, e.g. ``food``), or an
    unambiguous label prefix. Returns ``None`` when nothing matches.
    """

    s = text.strip()
    if not s:
        return None
    if _DIGITS.fullmatch(s):
        idx = int(s) - 1
        return categories[idx] if 0 <= idx < len(categories) else None
    if s in categories:
        return s
    member = Category.__members__.get(s.upper())
    if member is not None and member.value in categories:
        return member.value
    matches = [c for c in categories if c.startswith(s)]
    return matches[0] if len(matches) == 1 else None


def select_category(
    categories: Sequence[str] = CATEGORY_LABELS,
    *,
    default: str,
    message: str = "Category (number, name or label; Enter to accept): ",
    session: PromptSession | None = None,
) -> str:
    """Prompt until the user picks one of ``categories``; returns the label."""

    words = list(categories)
    completer = WordCompleter(words, ignore_case=True, match_middle=True, sentence=True)

    class _CategoryValidator(Validator):
        def validate(self, document) -> None:
            if resolve_category_input(document.text, words) is None:
                raise ValidationError(message="Pick a category from the list (1-9 or a label).")

    sess = _session_for(session)
    value = sess.prompt(
        message,
        default=default,
        completer=completer,
        validator=_CategoryValidator(),
        validate_while_typing=False,
    )
    resolved = resolve_category_input(value, words)
    assert resolved is not None  # guaranteed by the validator
    return resolved


# ----------------------------------------------------------------------------
# Field prompts
# ----------------------------------------------------------------------------


class _AmountValidator(Validator):
    def validate(self, document) -> None:
        text = document.text.strip()
        if not _DIGITS.fullmatch(text) or int(text) > MAX_AMOUNT:
            raise ValidationError(message="Amount must be a whole number >= 0.")


def prompt_text(
    message: str,
    *,
    default: str = "",
    session: PromptSession | None = None,
    required: bool = False,
) -> str:
    """Free-text prompt; ``required`` rejects blank input."""

    validator = None
    if required:
        validator = Validator.from_callable(
            lambda t: bool(t.strip()), error_message="A value is required."
        )
    sess = _session_for(session)
    return sess.prompt(message, default=default, validator=validator, validate_while_typing=False)


def prompt_amount(
    message: str = "Amount: ",
    *,
    default: int | None = None,
    session: PromptSession | None = None,
) -> int:
    """Prompt for a non-negative integer amount."""

    sess = _session_for(session)
    value = sess.prompt(
        message,
        default="" if default is None or default < 0 else str(default),
        validator=_AmountValidator(),
        validate_while_typing=False,
    )
    return int(value.strip())


_YES = {"y", "yes"}
_NO = {"n", "no"}


def confirm(
    message: str,
    *,
    default: bool = True,
    session: PromptSession | None = None,
) -> bool:
    """Yes/no prompt; Enter on empty input returns ``default``."""

    class _YesNoValidator(Validator):
        def validate(self, document) -> None:
            t = document.text.strip().lower()
            if t and t not in _YES | _NO:
                raise ValidationError(message="Answer y or n.")

    hint = "[Y/n]" if default else "[y/N]"
    sess = _session_for(session)
    answer = sess.prompt(
        f"{message} {hint}: ", validator=_YesNoValidator(), validate_while_typing=False
    )
    t = answer.strip().lower()
    if not t:
        return default
    return t in _YES


# ----------------------------------------------------------------------------
# Batch review
# ----------------------------------------------------------------------------


def format_item(position: int, item: EditableBatchItem) -> str:
    """One-line summary of a batch item for display."""

    flags = " [business]" if item.is_business else ""
    route = ""
    if item.location_from or item.location_to:
        route = f" ({item.location_from or '?'} → {item.location_to or '?'})"
    return (
        f"{position:>2}. {item.date}  {item.title}  ¥{item.amount:,}  "
        f"{item.category}{flags}{route}"
    )


def edit_item_interactively(
    reconciler: BatchReconciler,
    item: EditableBatchItem,
    *,
    session: PromptSession | None = None,
) -> EditableBatchItem:
    """Walk the user through the editable fields and apply the changes."""

    default_category = (
        item.category if item.category in CATEGORY_LABELS else Category.OTHER.value
    )
    changes = {
        "title": prompt_text("Title: ", default=item.title, session=session, required=True),
        "amount": prompt_amount("Amount: ", default=item.amount, session=session),
        "date": prompt_text("Date (YYYY-MM-DD): ", default=item.date, session=session),
        "category": select_category(default=default_category, session=session),
        "is_business": confirm(
            "Business expense?", default=item.is_business, session=session
        ),
        # Blank means "no location".
        "location_from": prompt_text(
            "From (optional): ", default=item.location_from or "", session=session
        ).strip()
        or None,
        "location_to": prompt_text(
            "To / shop (optional): ", default=item.location_to or "", session=session
        ).strip()
        or None,
    }
    changed = {k: v for k, v in changes.items() if getattr(item, k) != v}
    if not changed:
        return item
    return reconciler.edit(item.item_id, **changed)


def review_batch(
    reconciler: BatchReconciler,
    *,
    session: PromptSession | None = None,
    echo: Callable[[str], None] = print,
) -> bool:
    """Interactive per-item review of a ``Ready`` batch.

    For each item the user keeps, edits or deletes it; a final prompt asks
    whether to save. Returns ``True`` to commit and ``False`` to discard.
    Usable directly as the ``review`` callback of the scan workflow.
    """

    items = list(reconciler.items)
    if not items:
        echo("No items were found on the receipt.")
        return False

    for position, item in enumerate(items, start=1):
        echo(format_item(position, item))
        action = prompt_text(
            "[k]eep / [e]dit / [d]elete (Enter = keep): ", session=session
        ).strip().lower()
        if action in ("d", "delete"):
            reconciler.delete(item.item_id)
            echo("  deleted")
        elif action in ("e", "edit"):
            updated = edit_item_interactively(reconciler, item, session=session)
            echo("  " + format_item(position, updated).strip())

    remaining = len(reconciler.items)
    if remaining == 0:
        echo("All items were deleted; nothing to save.")
        return False
    return confirm(f"Save {remaining} item(s)?", default=True, session=session)


__all__ = [
    "resolve_category_input",
    "select_category",
    "prompt_text",
    "prompt_amount",
    "confirm",
    "format_item",
    "edit_item_interactively",
    "review_batch",
]
