"""
Tests for explorer response decoding.

Covers ERC-20 Transfer logs, transfer() call data, native transfers,
pending transactions and Tronscan TRC-20 payloads.
"""

from decimal import Decimal

from app.services.oracle.decoding import (
    TRANSFER_SELECTOR,
    TRANSFER_TOPIC,
    decode_transfer_input,
    parse_evm_lookup,
    parse_tronscan_lookup,
    token_decimals,
)


BSC_USDT = "0x55d398326f99059fF775485246999027B3197955"
ETH_USDT = "0xdAC17F958D2ee523a2206206994597C13D831ec7"
SENDER = "0x8ba1f109551bd432803012645ac136ddd64dba72"
RECIPIENT = "0x742d35cc6634c0532925a3b844bc9e7595f0beb0"


def _topic(address: str) -> str:
    return "0x" + "0" * 24 + address[2:]


def _word(value: int) -> str:
    return format(value, "064x")


class TestTokenDecimals:
    """Test token_decimals."""

    def test_known_contracts(self):
        assert token_decimals(BSC_USDT, "BSC") == 18
        assert token_decimals(ETH_USDT, "ETHEREUM") == 6

    def test_unknown_contract_uses_network_default(self):
        assert token_decimals("0x" + "1" * 40, "POLYGON") == 6
        assert token_decimals(None, "UNKNOWN") == 18


class TestDecodeTransferInput:
    """Test decode_transfer_input."""

    def test_transfer_call(self):
        """transfer(address,uint256) yields recipient and scaled amount."""
        data = (
            TRANSFER_SELECTOR
            + "0" * 24 + RECIPIENT[2:]
            + _word(25 * 10**6)
        )
        recipient, amount = decode_transfer_input(data, 6)
        assert recipient == RECIPIENT
        assert amount == Decimal("25")

    def test_other_method(self):
        assert decode_transfer_input("0x095ea7b3" + "0" * 128, 6) is None

    def test_truncated_input(self):
        assert decode_transfer_input(TRANSFER_SELECTOR + "00", 6) is None


class TestParseEvmLookup:
    """Test parse_evm_lookup."""

    def test_missing_transaction(self):
        assert parse_evm_lookup("BSC", None, None).found is False

    def test_transfer_log(self):
        """The ERC-20 Transfer log gives sender, recipient and amount."""
        tx = {"from": SENDER, "to": BSC_USDT, "blockNumber": "0x10"}
        receipt = {
            "status": "0x1",
            "logs": [
                {
                    "address": BSC_USDT,
                    "topics": [
                        TRANSFER_TOPIC, _topic(SENDER), _topic(RECIPIENT)
                    ],
                    "data": "0x" + _word(50 * 10**18),
                }
            ],
        }

        lookup = parse_evm_lookup("BSC", tx, receipt)

        assert lookup.found is True
        assert lookup.confirmed is True
        assert lookup.network == "BSC"
        assert lookup.recipient == RECIPIENT
        assert lookup.sender == SENDER
        assert lookup.amount == Decimal("50")
        assert lookup.block_number == 16

    def test_pending_transaction_not_confirmed(self):
        """No receipt and no block means not confirmed."""
        tx = {"from": SENDER, "to": RECIPIENT, "value": hex(10**18)}
        lookup = parse_evm_lookup("ETHEREUM", tx, None)
        assert lookup.found is True
        assert lookup.confirmed is False

    def test_failed_transaction_not_confirmed(self):
        tx = {"from": SENDER, "to": RECIPIENT, "blockNumber": "0x1"}
        lookup = parse_evm_lookup("BSC", tx, {"status": "0x0", "logs": []})
        assert lookup.confirmed is False

    def test_native_transfer(self):
        """Without token data the native value is reported."""
        tx = {
            "from": SENDER,
            "to": RECIPIENT,
            "value": hex(2 * 10**18),
            "blockNumber": "0x5",
            "input": "0x",
        }
        lookup = parse_evm_lookup("BSC", tx, {"status": "0x1", "logs": []})
        assert lookup.recipient == RECIPIENT
        assert lookup.amount == Decimal("2")


class TestParseTronscanLookup:
    """Test parse_tronscan_lookup."""

    def test_not_found(self):
        assert parse_tronscan_lookup({}).found is False
        assert parse_tronscan_lookup(None).found is False

    def test_trc20_transfer(self):
        data = {
            "hash": "ab" * 32,
            "block": 123,
            "confirmed": True,
            "trc20TransferInfo": [
                {
                    "to_address": "TXYZopYRdj2D9XRtbG411XZZ3kM5VkAeBf",
                    "from_address": "TJRabPrwbZy45sbavfcjinPJC18kjpRTv8",
                    "amount_str": "15000000",
                    "decimals": 6,
                }
            ],
        }

        lookup = parse_tronscan_lookup(data)

        assert lookup.found is True
        assert lookup.network == "TRON"
        assert lookup.confirmed is True
        assert lookup.amount == Decimal("15")
        assert lookup.recipient == "TXYZopYRdj2D9XRtbG411XZZ3kM5VkAeBf"
