"""Tests for lenient input coercion."""

import math

import pytest

from src.conversation.coercion import (
    coerce_field,
    normalize_hex,
    parse_price,
    parse_stock,
    parse_tags,
    split_media_urls,
)
from src.schemas.product import DraftField


class TestParsePrice:
    @pytest.mark.parametrize(
        "text, expected",
        [
            ("1200", 1200.0),
            (" 99.90 ", 99.9),
            ("12.5 usd", 12.5),
            (".5", 0.5),
            ("-3", -3.0),
            ("1e3", 1000.0),
        ],
    )
    def test_numeric_text(self, text, expected):
        assert parse_price(text) == expected

    @pytest.mark.parametrize("text", ["abc", "", "  ", "$100", "NaN", "Infinity"])
    def test_non_numeric_text_is_zero(self, text):
        assert parse_price(text) == 0.0

    def test_never_returns_nan_or_inf(self):
        assert parse_price(float("nan")) == 0.0
        assert parse_price(float("inf")) == 0.0
        assert parse_price("1e400") == 0.0
        assert not math.isnan(parse_price("abc"))

    def test_none_and_numbers(self):
        assert parse_price(None) == 0.0
        assert parse_price(7) == 7.0


class TestParseTags:
    def test_comma_split_and_trim(self):
        assert parse_tags("steel, limited") == ("steel", "limited")

    def test_drops_empty_entries(self):
        assert parse_tags(" a,, b ,") == ("a", "b")
        assert parse_tags("") == ()


class TestParseStock:
    @pytest.mark.parametrize(
        "text, expected",
        [("5", "5"), (" 12 pcs", "12"), ("007", "7"), ("many", "0"), ("", "0"), ("-4", "0")],
    )
    def test_digit_string(self, text, expected):
        assert parse_stock(text) == expected


class TestNormalizeHex:
    @pytest.mark.parametrize(
        "text, expected",
        [
            ("#ffd700", "#FFD700"),
            ("ffd700", "#FFD700"),
            ("#abc", "#AABBCC"),
            ("gold", "gold"),
            ("#12345", "#12345"),
        ],
    )
    def test_normalize(self, text, expected):
        assert normalize_hex(text) == expected


class TestCoerceField:
    def test_price_field(self):
        assert coerce_field(DraftField.BASE_PRICE, "abc") == 0.0

    def test_tags_field(self):
        assert coerce_field(DraftField.TAGS, "a, b") == ("a", "b")

    def test_text_fields_are_trimmed(self):
        assert coerce_field(DraftField.NAME, "  Watch X ") == "Watch X"


class TestSplitMediaUrls:
    def test_images_and_videos(self):
        images, videos = split_media_urls(
            "https://cdn.example/a.jpg and https://cdn.example/clip.MP4?x=1"
        )
        assert images == ["https://cdn.example/a.jpg"]
        assert videos == ["https://cdn.example/clip.MP4?x=1"]

    def test_no_urls(self):
        assert split_media_urls("hello") == ([], [])
        assert split_media_urls(None) == ([], [])
