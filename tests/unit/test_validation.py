"""Unit tests for validation utilities."""

from decimal import Decimal

import pytest

from app.utils.validation import (
    same_address,
    sanitize_input,
    validate_amount,
    validate_evm_address,
    validate_transaction_hash,
    validate_withdrawal_address,
)


EVM = "0x742d35cc6634c0532925a3b844bc9e7595f0beb0"
TRON = "TXYZopYRdj2D9XRtbG411XZZ3kM5VkAeBf"
BTC = "1A1zP1eP5QGefi2DMPTfTL5SLmv7DivfNa"


class TestEvmAddressValidation:
    """Tests for EVM address validation."""

    def test_empty_address_invalid(self):
        assert not validate_evm_address("")

    def test_short_address_invalid(self):
        assert not validate_evm_address("0x1234")

    def test_zero_address_invalid(self):
        """The zero address is never a payout destination."""
        assert not validate_evm_address("0x" + "0" * 40)

    def test_lowercase_address_valid(self):
        assert validate_evm_address(EVM)

    def test_invalid_hex_characters(self):
        assert not validate_evm_address("0x" + "z" * 40)


class TestWithdrawalAddressValidation:
    """Tests for validate_withdrawal_address."""

    @pytest.mark.parametrize(
        "address,currency,network",
        [
            (EVM, "USDT", "BEP20"),
            (EVM, "USDT", None),
            (EVM, "USDC", "POLYGON"),
            (TRON, "USDT", "TRC20"),
            (BTC, "BTC", None),
        ],
    )
    def test_valid_pairs(self, address, currency, network):
        assert validate_withdrawal_address(address, currency, network)

    @pytest.mark.parametrize(
        "address,currency,network",
        [
            (TRON, "USDT", "BEP20"),
            (EVM, "USDT", "TRC20"),
            (EVM, "BTC", None),
            (EVM, "USDT", "SOLANA"),
        ],
    )
    def test_mismatched_pairs(self, address, currency, network):
        assert not validate_withdrawal_address(address, currency, network)


class TestTransactionHashValidation:
    """Tests for validate_transaction_hash."""

    def test_evm_hash(self):
        assert validate_transaction_hash("0x" + "a" * 64)

    def test_tron_hash_without_prefix(self):
        assert validate_transaction_hash("A" * 64)

    def test_too_short(self):
        assert not validate_transaction_hash("0x" + "a" * 63)

    def test_empty(self):
        assert not validate_transaction_hash("")


class TestAmountValidation:
    """Tests for validate_amount."""

    def test_within_range(self):
        assert validate_amount(Decimal("10"), min_amount=Decimal("10"))

    def test_below_minimum(self):
        assert not validate_amount(Decimal("9.99"), min_amount=Decimal("10"))

    def test_zero_and_negative(self):
        assert not validate_amount(Decimal("0"))
        assert not validate_amount(Decimal("-1"))

    def test_not_a_decimal(self):
        assert not validate_amount(10.0)

    def test_not_finite(self):
        assert not validate_amount(Decimal("NaN"))


class TestHelpers:
    """Tests for address comparison and input sanitizing."""

    def test_same_evm_address_ignores_case(self):
        assert same_address(EVM, "0x" + EVM[2:].upper())

    def test_tron_address_is_case_sensitive(self):
        assert not same_address(TRON, TRON.lower())

    def test_missing_address_never_matches(self):
        assert not same_address(None, EVM)

    def test_sanitize_truncates(self):
        assert len(sanitize_input("x" * 1000, max_length=10)) <= 10
