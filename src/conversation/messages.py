"""Reply texts shared by several steps (overview, edit menu, variant menu)."""

from html import escape
from typing import Optional, Union

from src.bot.keyboards import Button, KeyboardLayout
from src.conversation.coercion import parse_price
from src.conversation.steps.base import StepResult
from src.schemas.conversation import ChatSession
from src.schemas.product import ProductDraft, VariantDraft

EDIT_MENU_TEXT = "Which field to edit?"
NO_STOCK_INFO_TEXT = "No variants/stock info available."


def format_number(value: Union[float, int, str, None]) -> str:
    """1200.0 → "1200", 12.5 → "12.5"."""
    number = parse_price(value)
    if number.is_integer():
        return str(int(number))
    return str(number)


def _text(value: Optional[str]) -> str:
    return escape(value or "", quote=False)


def variant_price(variant: VariantDraft, draft: ProductDraft) -> float:
    if variant.price is not None:
        return variant.price
    return parse_price(draft.base_price)


def format_variant(index: int, variant: VariantDraft, draft: ProductDraft) -> str:
    return (
        f"#{index} - Color: {_text(variant.color.name)} ({_text(variant.color.hex)})\n"
        f"Price: {format_number(variant_price(variant, draft))} | Stock: {_text(variant.stock)}\n"
        f"Images: {variant.image_count} | Videos: {variant.video_count}"
    )


def format_overview(draft: ProductDraft) -> str:
    """Render the full draft as the HTML overview shown before publishing."""
    lines = [
        "🧾 <b>Product overview</b>",
        "",
        f"<b>Name:</b> {_text(draft.name)}",
        f"<b>Brand:</b> {_text(draft.brand)}",
        f"<b>Description:</b> {_text(draft.description)}",
        f"<b>Base Price:</b> {format_number(draft.base_price)}",
        f"<b>Category:</b> {_text(draft.category_id)}",
        f"<b>Tags:</b> {_text(', '.join(draft.tags))}",
        "",
    ]
    if not draft.variants:
        lines.append("<b>Variants:</b> None")
    else:
        lines.append("<b>Variants:</b>")
        lines.append(
            "\n\n".join(
                format_variant(i, variant, draft)
                for i, variant in enumerate(draft.variants, start=1)
            )
        )
    return "\n".join(lines)


def format_stock_summary(variants: tuple[VariantDraft, ...]) -> str:
    """Per-variant stock lines for the publish confirmation."""
    if not variants:
        return NO_STOCK_INFO_TEXT
    return "\n".join(
        f"Variant {i} stock: {_text(v.stock or '0')}"
        for i, v in enumerate(variants, start=1)
    )


def overview_result(session: ChatSession, prefix: str = "") -> StepResult:
    """Overview with the Publish/Edit/Cancel keyboard."""
    text = format_overview(session.draft)
    if prefix:
        text = f"{prefix}\n\n{text}"
    return StepResult(response_text=text, session=session, keyboard=KeyboardLayout.CONFIRM)


def edit_menu_result(session: ChatSession, prefix: str = "") -> StepResult:
    text = f"{prefix}\n\n{EDIT_MENU_TEXT}" if prefix else EDIT_MENU_TEXT
    return StepResult(response_text=text, session=session, keyboard=KeyboardLayout.EDIT_FIELDS)


def variant_menu_result(session: ChatSession, prefix: str = "") -> StepResult:
    """Prompt shown at ``variant_prompt``."""
    draft = session.draft
    lines = []
    if prefix:
        lines += [prefix, ""]
    lines.append(f"🎨 Variants added: {len(draft.variants)}")
    for i, variant in enumerate(draft.variants, start=1):
        lines.append(f"#{i} - {_text(variant.color.name) or 'no color'} (stock {_text(variant.stock)})")
    lines.append("")
    lines.append(
        f"Press {Button.ADD_VARIANT} to add a variant or {Button.DONE} to review the product."
    )
    if draft.variants:
        lines.append("Send <code>remove N</code> to delete variant N.")
    return StepResult(
        response_text="\n".join(lines),
        session=session,
        keyboard=KeyboardLayout.VARIANT_MENU,
    )


def describe_value(value: object) -> str:
    """Human-readable, HTML-safe rendering of a draft field value."""
    if isinstance(value, (int, float)) or value is None:
        return format_number(value)
    if isinstance(value, (tuple, list)):
        return _text(", ".join(value))
    return _text(str(value))
