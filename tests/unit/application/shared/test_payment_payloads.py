"""Unit tests for the wire models and header helpers."""

from __future__ import annotations

import json

import pytest

from x402_solana.application.shared.payment_payloads import (
    FacilitatorRequest,
    Network,
    PaymentPayload,
    PaymentRequirements,
    PaymentScheme,
    SettleResponse,
    decode_payment_payload,
    decode_payment_requirements,
    encode_header,
)
from x402_solana.domain import payments
from x402_solana.domain.errors import DecodeError

PAY_TO = "9WzDXwBbmkg8ZTbNMqUxvQRAyrZzDsGYdLVL9zYtAWWM"


class TestPaymentRequirementsWireForm:
    def test_uses_camel_case_and_omits_unset_fields(self) -> None:
        requirements = PaymentRequirements(
            network=Network.SOLANA_DEVNET,
            max_amount_required="1800",
            pay_to=PAY_TO,
            memo="Weather information",
        )

        wire = json.loads(encode_header(requirements))

        assert wire == {
            "x402Version": 1,
            "scheme": "exact",
            "network": "solana-devnet",
            "maxAmountRequired": "1800",
            "payTo": PAY_TO,
            "memo": "Weather information",
        }

    def test_token_fields_round_trip(self) -> None:
        requirements = PaymentRequirements(
            network=Network.SOLANA,
            max_amount_required="150000",
            pay_to=PAY_TO,
            token_address="EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v",
            token_decimals=6,
            token_name="USDC",
        )

        decoded = decode_payment_requirements(encode_header(requirements))

        assert decoded == requirements
        assert decoded.is_native is False
        assert decoded.amount == 150000

    def test_header_value_is_ascii(self) -> None:
        requirements = PaymentRequirements(
            network=Network.SOLANA_DEVNET,
            max_amount_required="1",
            pay_to=PAY_TO,
            memo="Météo ☀",
        )

        header = encode_header(requirements)

        header.encode("ascii")
        assert decode_payment_requirements(header).memo == "Météo ☀"

    def test_accepts_wire_names_from_peers(self) -> None:
        raw = (
            '{"x402Version":1,"scheme":"exact","network":"solana-localnet",'
            '"maxAmountRequired":"42","payTo":"%s","nonce":"abc"}' % PAY_TO
        )

        requirements = decode_payment_requirements(raw)

        assert requirements.network is Network.SOLANA_LOCALNET
        assert requirements.scheme is PaymentScheme.EXACT
        assert requirements.nonce == "abc"


class TestDecodeErrors:
    @pytest.mark.parametrize(
        "raw",
        [
            "not json",
            "{}",
            '{"network":"solana-devnet","maxAmountRequired":"12a","payTo":"x"}',
            '{"network":"solana-devnet","maxAmountRequired":"-5","payTo":"x"}',
            '{"network":"ethereum","maxAmountRequired":"5","payTo":"x"}',
            '{"network":"solana-devnet","scheme":"upto","maxAmountRequired":"5","payTo":"x"}',
        ],
    )
    def test_malformed_requirements_raise_decode_error(self, raw: str) -> None:
        with pytest.raises(DecodeError):
            decode_payment_requirements(raw)

    def test_payload_without_transaction_raises_decode_error(self) -> None:
        with pytest.raises(DecodeError, match="payment payload"):
            decode_payment_payload('{"network":"solana-devnet","from":"abc"}')


class TestPaymentPayloadWireForm:
    def test_from_field_uses_reserved_word_alias(self) -> None:
        payload = PaymentPayload(
            network=Network.SOLANA_DEVNET,
            signed_transaction="AQID",
            from_address=PAY_TO,
        )

        wire = json.loads(encode_header(payload))

        assert wire["from"] == PAY_TO
        assert wire["signedTransaction"] == "AQID"
        assert decode_payment_payload(encode_header(payload)) == payload

    def test_facilitator_request_nests_both_messages(self) -> None:
        payload = PaymentPayload(
            network=Network.SOLANA_DEVNET,
            signed_transaction="AQID",
            from_address=PAY_TO,
        )
        requirements = PaymentRequirements(
            network=Network.SOLANA_DEVNET, max_amount_required="1", pay_to=PAY_TO
        )

        wire = FacilitatorRequest(
            payment_payload=payload, payment_requirements=requirements
        ).to_wire()

        assert set(wire) == {"paymentPayload", "paymentRequirements"}
        assert wire["paymentRequirements"]["maxAmountRequired"] == "1"

    def test_settle_response_omits_missing_message(self) -> None:
        assert SettleResponse(signature="sig", settled=True).to_wire() == {
            "signature": "sig",
            "settled": True,
        }


class TestAmountBounds:
    def _raw(self, amount: str) -> str:
        return (
            '{"network":"solana-devnet","maxAmountRequired":"%s","payTo":"%s"}'
            % (amount, PAY_TO)
        )

    def test_largest_u64_amount_is_accepted(self) -> None:
        requirements = decode_payment_requirements(self._raw(str(2**64 - 1)))

        assert requirements.amount == 2**64 - 1

    @pytest.mark.parametrize("amount", [str(2**64), "9" * 21, "9" * 5000])
    def test_amount_outside_u64_is_a_decode_error(self, amount: str) -> None:
        with pytest.raises(DecodeError, match="payment requirements"):
            decode_payment_requirements(self._raw(amount))

    def test_enums_are_shared_with_domain(self) -> None:
        assert Network is payments.Network
        assert PaymentScheme is payments.PaymentScheme
