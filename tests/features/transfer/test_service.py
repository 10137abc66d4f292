"""Tests for the send flow service."""

from __future__ import annotations

import threading
from decimal import Decimal

import pytest

from mini_wallet.features.transfer.service import (
    EstimateStatus,
    TransferService,
    TransferState,
    TransferStatus,
)

ONE_ETHER = 10**18
FEE = 21000 * 10**9


@pytest.fixture
def service(chain, sessions):
    return TransferService(chain, sessions, poll_interval_seconds=0.01)


@pytest.fixture
def funded_session(sessions, chain, test_private_key, test_address):
    chain.set_balance(test_address, ONE_ETHER)
    return sessions.import_session(test_private_key).normalized_value


@pytest.mark.unit
class TestResolveRecipient:
    def test_plain_address_is_checksummed(self, service, recipient_address):
        result = service.resolve_recipient(recipient_address.lower())
        assert result.is_valid is True
        assert result.normalized_value == recipient_address

    def test_invalid_address(self, service):
        result = service.resolve_recipient("0x1234")
        assert result.is_valid is False
        assert result.error_message == "Please enter a valid address or ENS name."
        assert result.field == "recipient"

    def test_bad_checksum_is_not_corrected(self, service, recipient_address):
        result = service.resolve_recipient(recipient_address[:-1] + "D")
        assert result.is_valid is False
        assert result.field == "recipient"

    def test_ens_name_resolves(self, service, chain, recipient_address):
        chain.names["alice.eth"] = recipient_address
        result = service.resolve_recipient("alice.eth")
        assert result.normalized_value == recipient_address

    def test_ens_name_not_found(self, service):
        result = service.resolve_recipient("nobody.eth")
        assert result.is_valid is False
        assert result.error_message == "ENS name not found."

    def test_ens_lookup_failure(self, service, chain):
        chain.resolve_error = ConnectionError("rpc down")
        result = service.resolve_recipient("alice.eth")
        assert result.error_message == "Could not resolve ENS name."


@pytest.mark.unit
class TestEstimateCost:
    def test_requires_session(self, service, chain, recipient_address):
        estimate = service.estimate_cost(recipient_address, "0.1")
        assert estimate.status == EstimateStatus.INVALID
        assert chain.estimate_calls == 0

    def test_invalid_amount_skips_network(
        self, service, chain, funded_session, recipient_address
    ):
        estimate = service.estimate_cost(recipient_address, "0")
        assert estimate.status == EstimateStatus.INVALID
        assert estimate.field == "amount"
        assert chain.estimate_calls == 0

    def test_invalid_recipient_skips_network(self, service, chain, funded_session):
        estimate = service.estimate_cost("0xnope", "0.1")
        assert estimate.status == EstimateStatus.INVALID
        assert estimate.field == "recipient"
        assert chain.estimate_calls == 0

    def test_fee_is_gas_times_price(self, service, funded_session, recipient_address):
        estimate = service.estimate_cost(recipient_address, "0.1")

        assert estimate.available is True
        assert estimate.gas == 21000
        assert estimate.fee_wei == FEE
        assert estimate.fee_ether == Decimal("0.000021")

    def test_estimate_failure_is_unavailable(
        self, service, chain, funded_session, recipient_address
    ):
        chain.estimate_error = ValueError("execution reverted")
        estimate = service.estimate_cost(recipient_address, "0.1")

        assert estimate.status == EstimateStatus.UNAVAILABLE
        assert estimate.error_message == "Unavailable"
        assert estimate.fee_for_checks == 0


@pytest.mark.unit
class TestSubmitTransfer:
    def test_confirmed_transfer(self, service, chain, funded_session, recipient_address):
        states = []
        broadcasts = []

        outcome = service.submit_transfer(
            recipient_address,
            "0.1",
            on_state=lambda state, detail: states.append(state),
            on_broadcast=broadcasts.append,
        )

        assert outcome.status == TransferStatus.CONFIRMED
        assert outcome.broadcast is True
        assert broadcasts == [outcome.tx_hash]
        assert chain.sent[0]["value"] == ONE_ETHER // 10
        assert chain.sent[0]["gas"] == 21000
        assert chain.sent[0]["gas_price"] == 10**9
        assert states == [
            TransferState.VALIDATING,
            TransferState.ESTIMATING,
            TransferState.SUBMITTING,
            TransferState.AWAITING_CONFIRMATION,
            TransferState.CONFIRMED,
        ]

    def test_confirmation_refreshes_balance(
        self, service, chain, funded_session, recipient_address
    ):
        before = chain.balance_calls
        service.submit_transfer(recipient_address, "0.1")
        # One call for the funds check, one for the post-confirmation refresh.
        assert chain.balance_calls == before + 2

    def test_reverted_transfer(self, service, chain, funded_session, recipient_address):
        chain.receipt_status = 0
        outcome = service.submit_transfer(recipient_address, "0.1")

        assert outcome.status == TransferStatus.REVERTED
        assert outcome.tx_hash is not None

    def test_no_session(self, service, chain, recipient_address):
        outcome = service.submit_transfer(recipient_address, "0.1")
        assert outcome.status == TransferStatus.INVALID
        assert chain.sent == []

    def test_amount_checked_before_recipient(self, service, chain, funded_session):
        outcome = service.submit_transfer("garbage", "abc")
        assert outcome.status == TransferStatus.INVALID
        assert outcome.field == "amount"
        assert outcome.error_message == "Please enter a valid amount greater than 0."

    def test_invalid_recipient(self, service, chain, funded_session):
        outcome = service.submit_transfer("garbage", "0.1")
        assert outcome.status == TransferStatus.INVALID
        assert outcome.field == "recipient"
        assert chain.sent == []

    def test_insufficient_funds_includes_fee(
        self, service, chain, funded_session, recipient_address
    ):
        outcome = service.submit_transfer(recipient_address, "1")

        assert outcome.status == TransferStatus.INSUFFICIENT_FUNDS
        assert outcome.total_cost_wei == ONE_ETHER + FEE
        assert outcome.error_message == (
            "Insufficient funds. Total cost is approx. 1.000021 ETH."
        )
        assert chain.sent == []

    def test_exact_balance_is_enough(
        self, service, chain, funded_session, test_address, recipient_address
    ):
        chain.set_balance(test_address, ONE_ETHER // 10 + FEE)
        outcome = service.submit_transfer(recipient_address, "0.1")
        assert outcome.status == TransferStatus.CONFIRMED

    def test_unavailable_fee_blocks_send(
        self, service, chain, funded_session, recipient_address
    ):
        chain.estimate_error = ValueError("execution reverted")
        outcome = service.submit_transfer(recipient_address, "0.1")

        assert outcome.status == TransferStatus.FAILED
        assert chain.sent == []

    def test_broadcast_failure(self, service, chain, funded_session, recipient_address):
        chain.send_error = ValueError("nonce too low")
        states = []
        outcome = service.submit_transfer(
            recipient_address, "0.1", on_state=lambda state, detail: states.append(state)
        )

        assert outcome.status == TransferStatus.FAILED
        assert outcome.broadcast is False
        assert "pending" in outcome.error_message.lower()
        assert states[-2:] == [TransferState.FAILED, TransferState.IDLE]
        assert TransferState.AWAITING_CONFIRMATION not in states

    def test_balance_lookup_failure(
        self, service, chain, funded_session, recipient_address
    ):
        chain.balance_error = ConnectionError("connection refused")
        outcome = service.submit_transfer(recipient_address, "0.1")
        assert outcome.status == TransferStatus.FAILED
        assert chain.sent == []

    def test_ens_recipient_is_resolved_before_send(
        self, service, chain, funded_session, recipient_address
    ):
        chain.names["alice.eth"] = recipient_address
        outcome = service.submit_transfer("alice.eth", "0.1")

        assert outcome.status == TransferStatus.CONFIRMED
        assert chain.sent[0]["to"] == recipient_address

    def test_second_submission_is_rejected_while_in_flight(
        self, service, chain, funded_session, recipient_address
    ):
        chain.receipt_status = None
        broadcast = threading.Event()
        results = []

        worker = threading.Thread(
            target=lambda: results.append(
                service.submit_transfer(
                    recipient_address, "0.1", on_broadcast=lambda h: broadcast.set()
                )
            )
        )
        worker.start()
        assert broadcast.wait(2.0)

        assert service.is_submitting is True
        second = service.submit_transfer(recipient_address, "0.1")
        assert second.status == TransferStatus.BUSY
        assert len(chain.sent) == 1

        chain.receipts[chain.sent[0]["hash"]] = {"status": 1}
        worker.join(2.0)
        assert results[0].status == TransferStatus.CONFIRMED
        assert service.is_submitting is False

    def test_ending_session_stops_waiting(
        self, service, chain, sessions, funded_session, recipient_address
    ):
        chain.receipt_status = None
        broadcast = threading.Event()
        results = []

        worker = threading.Thread(
            target=lambda: results.append(
                service.submit_transfer(
                    recipient_address, "0.1", on_broadcast=lambda h: broadcast.set()
                )
            )
        )
        worker.start()
        assert broadcast.wait(2.0)
        sessions.end_session()
        worker.join(2.0)

        assert results[0].status == TransferStatus.PENDING
        assert results[0].tx_hash == chain.sent[0]["hash"]


@pytest.mark.unit
def test_explorer_url(service):
    assert service.explorer_url("0xabc") == "https://sepolia.etherscan.io/tx/0xabc"
