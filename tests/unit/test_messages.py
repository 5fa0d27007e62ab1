"""Tests for the overview and summary texts."""

from src.bot.keyboards import KeyboardLayout, LAYOUTS, build_keyboard
from src.conversation.messages import (
    NO_STOCK_INFO_TEXT,
    format_number,
    format_overview,
    format_stock_summary,
)
from src.schemas.product import ColorOption, ProductDraft, VariantDraft


class TestFormatOverview:
    def test_labeled_lines_in_order(self, sample_draft):
        text = format_overview(sample_draft)
        lines = text.splitlines()

        start = lines.index("<b>Name:</b> Watch X")
        assert lines[start:start + 6] == [
            "<b>Name:</b> Watch X",
            "<b>Brand:</b> Acme",
            "<b>Description:</b> Steel diver",
            "<b>Base Price:</b> 1200",
            "<b>Category:</b> watches",
            "<b>Tags:</b> steel, limited",
        ]
        assert "<b>Variants:</b>" in lines
        assert "#1 - Color: Silver (#C0C0C0)" in lines
        assert "Price: 1250 | Stock: 3" in lines
        assert "Images: 2 | Videos: 0" in lines

    def test_no_variants(self):
        text = format_overview(ProductDraft(name="Watch X"))
        assert text.splitlines()[-1] == "<b>Variants:</b> None"

    def test_variant_without_price_shows_base_price(self):
        draft = ProductDraft(
            name="Ring",
            base_price=50.5,
            variants=(VariantDraft(color=ColorOption(name="Gold", hex="#FFD700")),),
        )
        assert "Price: 50.5 | Stock: 0" in format_overview(draft)

    def test_user_text_is_escaped(self):
        text = format_overview(ProductDraft(name="<b>Bold</b> & co"))
        assert "<b>Name:</b> &lt;b&gt;Bold&lt;/b&gt; &amp; co" in text


class TestFormatHelpers:
    def test_format_number(self):
        assert format_number(1200.0) == "1200"
        assert format_number(12.5) == "12.5"
        assert format_number(None) == "0"

    def test_stock_summary(self, sample_draft):
        assert format_stock_summary(sample_draft.variants) == "Variant 1 stock: 3"
        assert format_stock_summary(()) == NO_STOCK_INFO_TEXT


class TestKeyboards:
    def test_confirm_layout(self):
        markup = build_keyboard(KeyboardLayout.CONFIRM)
        assert [[b.text for b in row] for row in markup.keyboard] == [
            ["✅ Publish", "✏️ Edit", "❌ Cancel"]
        ]
        assert markup.resize_keyboard

    def test_every_layout_builds(self):
        for layout in KeyboardLayout:
            markup = build_keyboard(layout)
            assert [[b.text for b in row] for row in markup.keyboard] == LAYOUTS[layout]

    def test_edit_fields_layout(self):
        assert LAYOUTS[KeyboardLayout.EDIT_FIELDS] == [
            ["Name", "Brand", "Description"],
            ["Base Price", "Category", "Tags"],
            ["Variants"],
            ["⬅️ Back", "❌ Cancel"],
        ]
