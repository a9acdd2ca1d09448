"""Tests for notification template rendering."""

import pytest

from app.services.notification import TEMPLATES, render
from app.utils.exceptions import ValidationError
from app.utils.formatters import escape_md


class TestRender:
    """Test render."""

    def test_referral_bonus_message(self):
        text = render(
            "referral_bonus",
            {
                "amount": "10.00",
                "level": 1,
                "source_name": "Alice",
                "source_amount": "100.00",
            },
        )
        assert "10.00 USDT" in text
        assert "Level 1" in text
        assert "Alice" in text

    def test_every_template_renders_with_its_fields(self):
        """Each template only references the fields it documents."""
        fields = {
            "amount": "1",
            "level": 1,
            "source_name": "x",
            "source_amount": "1",
            "level_name": "Gold",
            "daily_earning": "1",
            "currency": "USDT",
            "status": "COMPLETED",
            "reason": "r",
        }
        for name in TEMPLATES:
            assert render(name, fields)

    def test_unknown_template(self):
        with pytest.raises(ValidationError):
            render("no_such_template", {})

    def test_missing_field(self):
        with pytest.raises(ValidationError) as exc_info:
            render("session_completed", {})
        assert "amount" in exc_info.value.message


class TestMarkdownEscaping:
    """User-supplied values must not break Telegram Markdown."""

    @pytest.mark.parametrize(
        "raw,escaped",
        [
            ("john_doe@x.com", "john\\_doe@x.com"),
            ("*star*", "\\*star\\*"),
            ("`code`", "\\`code\\`"),
            ("[link](x)", "\\[link](x)"),
            (0, "0"),
            (None, ""),
        ],
    )
    def test_escape_md(self, raw, escaped):
        assert escape_md(raw) == escaped

    def test_referrer_name_is_escaped(self):
        text = render(
            "referral_bonus",
            {
                "amount": "10.00",
                "level": 1,
                "source_name": "john_doe@x.com",
                "source_amount": "100.00",
            },
        )

        assert "from john\\_doe@x.com" in text
        assert text.startswith("💰 *Referral bonus!*")

    def test_rejection_reason_is_escaped(self):
        text = render(
            "withdrawal_rejected",
            {"amount": "5.00", "currency": "USDT", "reason": "bad *address*"},
        )

        assert "Reason: bad \\*address\\*" in text
