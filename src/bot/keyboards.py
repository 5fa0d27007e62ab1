"""Fixed reply-keyboard layouts used by the intake bot."""

from enum import Enum

from aiogram.types import KeyboardButton, ReplyKeyboardMarkup


class Button:
    """Button labels. The same label can mean different things per step."""

    PREVIOUS = "⬅️ Previous"
    NEXT = "➡️ Next"
    SKIP = "✅ Skip"
    CANCEL = "❌ Cancel"
    NEW_PRODUCT = "➕ New Product"
    ADD_VARIANT = "➕ Add Variant"
    DONE = "✅ Done"
    BACK = "⬅️ Back"
    PUBLISH = "✅ Publish"
    EDIT = "✏️ Edit"

    NAME = "Name"
    BRAND = "Brand"
    DESCRIPTION = "Description"
    BASE_PRICE = "Base Price"
    CATEGORY = "Category"
    TAGS = "Tags"
    VARIANTS = "Variants"


class KeyboardLayout(str, Enum):
    REPLY = "reply"
    NEW = "new"
    EDIT_FIELDS = "edit_fields"
    DONE_CANCEL = "done_cancel"
    DONE_BACK_CANCEL = "done_back_cancel"
    CONFIRM = "confirm"
    VARIANT_MENU = "variant_menu"


LAYOUTS: dict[KeyboardLayout, list[list[str]]] = {
    KeyboardLayout.REPLY: [
        [Button.PREVIOUS, Button.NEXT],
        [Button.SKIP, Button.CANCEL],
    ],
    KeyboardLayout.NEW: [[Button.NEW_PRODUCT]],
    KeyboardLayout.EDIT_FIELDS: [
        [Button.NAME, Button.BRAND, Button.DESCRIPTION],
        [Button.BASE_PRICE, Button.CATEGORY, Button.TAGS],
        [Button.VARIANTS],
        [Button.BACK, Button.CANCEL],
    ],
    KeyboardLayout.DONE_CANCEL: [[Button.DONE, Button.CANCEL]],
    KeyboardLayout.DONE_BACK_CANCEL: [[Button.DONE, Button.BACK, Button.CANCEL]],
    KeyboardLayout.CONFIRM: [[Button.PUBLISH, Button.EDIT, Button.CANCEL]],
    KeyboardLayout.VARIANT_MENU: [
        [Button.ADD_VARIANT, Button.DONE],
        [Button.CANCEL],
    ],
}


def build_keyboard(layout: KeyboardLayout) -> ReplyKeyboardMarkup:
    """Build the aiogram markup for a named layout."""
    return ReplyKeyboardMarkup(
        keyboard=[
            [KeyboardButton(text=label) for label in row]
            for row in LAYOUTS[layout]
        ],
        resize_keyboard=True,
    )
