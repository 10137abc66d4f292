"""Send flow business logic for Mini Wallet.

A submission walks ``Idle -> Validating -> Estimating -> Submitting ->
AwaitingConfirmation`` and ends ``Confirmed``, ``Reverted`` or ``Failed``.
Everything before ``Submitting`` is side-effect free; once the transfer is
broadcast the flow can no longer be rolled back.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Any, Callable

from web3 import Web3

from mini_wallet.shared.logging import format_error_for_user
from mini_wallet.shared.protocols import ChainClientProtocol
from mini_wallet.shared.validation import (
    AddressValidator,
    AmountValidator,
    ValidationResult,
    is_ens_name,
)
from mini_wallet.wallet import SessionManager, WalletSession

logger = logging.getLogger(__name__)

NO_WALLET_MESSAGE = "Please create or import a wallet first."


class TransferState(Enum):
    IDLE = "idle"
    VALIDATING = "validating"
    ESTIMATING = "estimating"
    SUBMITTING = "submitting"
    AWAITING_CONFIRMATION = "awaiting_confirmation"
    CONFIRMED = "confirmed"
    REVERTED = "reverted"
    FAILED = "failed"


class EstimateStatus(Enum):
    OK = "ok"
    INVALID = "invalid"
    UNAVAILABLE = "unavailable"


@dataclass
class CostEstimate:
    status: EstimateStatus
    fee_wei: int | None = None
    gas: int | None = None
    gas_price: int | None = None
    error_message: str | None = None
    field: str | None = None

    @property
    def available(self) -> bool:
        return self.status == EstimateStatus.OK

    @property
    def fee_for_checks(self) -> int:
        """Fee to use in funds checks; an unavailable estimate counts as zero."""
        return self.fee_wei if self.fee_wei is not None else 0

    @property
    def fee_ether(self) -> Decimal | None:
        if self.fee_wei is None:
            return None
        return Decimal(str(Web3.from_wei(self.fee_wei, "ether")))


class TransferStatus(Enum):
    CONFIRMED = "confirmed"
    REVERTED = "reverted"
    FAILED = "failed"
    INVALID = "invalid"
    INSUFFICIENT_FUNDS = "insufficient_funds"
    BUSY = "busy"
    PENDING = "pending"


@dataclass
class TransferOutcome:
    status: TransferStatus
    tx_hash: str | None = None
    error_message: str | None = None
    field: str | None = None
    total_cost_wei: int | None = None
    receipt: dict[str, Any] | None = None

    @property
    def broadcast(self) -> bool:
        return self.tx_hash is not None


StateCallback = Callable[[TransferState, str], None]


class TransferService:
    """Validates, prices, submits and tracks native-token transfers."""

    def __init__(
        self,
        chain: ChainClientProtocol,
        sessions: SessionManager,
        poll_interval_seconds: float = 4.0,
    ):
        self.chain = chain
        self.sessions = sessions
        self.poll_interval_seconds = poll_interval_seconds
        self._in_flight = threading.Lock()

    @property
    def is_submitting(self) -> bool:
        return self._in_flight.locked()

    def explorer_url(self, tx_hash: str) -> str:
        return f"{self.chain.explorer_url.rstrip('/')}/tx/{tx_hash}"

    def resolve_recipient(self, text: str) -> ValidationResult:
        value = (text or "").strip()
        if is_ens_name(value):
            try:
                resolved = self.chain.resolve_name(value)
            except Exception as e:
                logger.warning("ENS resolution failed for %s: %s", value, e)
                return ValidationResult(
                    is_valid=False,
                    error_message="Could not resolve ENS name.",
                    field="recipient",
                )
            if not resolved:
                return ValidationResult(
                    is_valid=False,
                    error_message="ENS name not found.",
                    field="recipient",
                )
            return ValidationResult(is_valid=True, normalized_value=resolved)

        result = AddressValidator.validate(value)
        if not result.is_valid:
            return ValidationResult(
                is_valid=False,
                error_message="Please enter a valid address or ENS name.",
                field="recipient",
            )
        return result

    def estimate_cost(self, recipient: str, amount: str | Decimal) -> CostEstimate:
        """Price a transfer to an already resolved ``recipient`` address.

        Invalid input is reported without touching the network; any failure
        of the estimate itself yields ``EstimateStatus.UNAVAILABLE``.
        """
        session = self.sessions.session
        if session is None:
            return CostEstimate(
                status=EstimateStatus.INVALID, error_message=NO_WALLET_MESSAGE
            )

        recipient_result = AddressValidator.validate(recipient)
        if not recipient_result.is_valid:
            return CostEstimate(
                status=EstimateStatus.INVALID,
                error_message=recipient_result.error_message,
                field="recipient",
            )

        amount_result = AmountValidator.validate_full(amount)
        if not amount_result.is_valid:
            return CostEstimate(
                status=EstimateStatus.INVALID,
                error_message="Please enter a valid amount greater than 0.",
                field="amount",
            )

        return self._estimate(
            session, recipient_result.normalized_value, amount_result.normalized_value
        )

    def _estimate(
        self, session: WalletSession, to_address: str, value_wei: int
    ) -> CostEstimate:
        try:
            gas = self.chain.estimate_gas(session.address, to_address, value_wei)
            gas_price = self.chain.get_gas_price()
        except Exception as e:
            logger.warning("Gas estimation failed: %s", e)
            return CostEstimate(
                status=EstimateStatus.UNAVAILABLE, error_message="Unavailable"
            )
        return CostEstimate(
            status=EstimateStatus.OK,
            fee_wei=gas * gas_price,
            gas=gas,
            gas_price=gas_price,
        )

    def submit_transfer(
        self,
        recipient: str,
        amount: str | Decimal,
        on_state: StateCallback | None = None,
        on_broadcast: Callable[[str], None] | None = None,
    ) -> TransferOutcome:
        """Run one submission end to end.

        Inputs are validated and priced again here, whatever the form showed
        earlier. Only one submission may be in flight at a time; a second
        call returns ``TransferStatus.BUSY`` immediately.
        """
        if not self._in_flight.acquire(blocking=False):
            return TransferOutcome(
                status=TransferStatus.BUSY,
                error_message="A transaction is already being sent.",
            )

        def report(state: TransferState, detail: str = "") -> None:
            if on_state:
                on_state(state, detail)

        try:
            return self._submit(recipient, amount, report, on_broadcast)
        finally:
            self._in_flight.release()

    def _submit(
        self,
        recipient: str,
        amount: str | Decimal,
        report: StateCallback,
        on_broadcast: Callable[[str], None] | None,
    ) -> TransferOutcome:
        session = self.sessions.session
        if session is None:
            return TransferOutcome(
                status=TransferStatus.INVALID, error_message=NO_WALLET_MESSAGE
            )

        report(TransferState.VALIDATING, "Validating transfer")
        amount_result = AmountValidator.validate_full(amount)
        if not amount_result.is_valid:
            report(TransferState.IDLE, "")
            return TransferOutcome(
                status=TransferStatus.INVALID,
                error_message="Please enter a valid amount greater than 0.",
                field="amount",
            )
        value_wei: int = amount_result.normalized_value

        recipient_result = self.resolve_recipient(recipient)
        if not recipient_result.is_valid:
            report(TransferState.IDLE, "")
            return TransferOutcome(
                status=TransferStatus.INVALID,
                error_message=recipient_result.error_message,
                field="recipient",
            )
        to_address: str = recipient_result.normalized_value

        report(TransferState.ESTIMATING, "Estimating network fee")
        estimate = self._estimate(session, to_address, value_wei)
        if not estimate.available:
            report(TransferState.IDLE, "")
            return TransferOutcome(
                status=TransferStatus.FAILED,
                error_message="Network fee is unavailable. Please try again.",
            )

        total_cost = value_wei + estimate.fee_for_checks
        try:
            balance = self.chain.get_balance(session.address)
        except Exception as e:
            logger.warning("Balance check before send failed: %s", e)
            report(TransferState.IDLE, "")
            return TransferOutcome(
                status=TransferStatus.FAILED,
                error_message=format_error_for_user(e),
            )

        if balance < total_cost:
            total_ether = Web3.from_wei(total_cost, "ether")
            report(TransferState.IDLE, "")
            return TransferOutcome(
                status=TransferStatus.INSUFFICIENT_FUNDS,
                error_message=f"Insufficient funds. Total cost is approx. {total_ether} ETH.",
                total_cost_wei=total_cost,
            )

        if not self.sessions.is_current(session):
            report(TransferState.IDLE, "")
            return TransferOutcome(
                status=TransferStatus.FAILED,
                error_message="The wallet session changed before sending.",
            )

        report(TransferState.SUBMITTING, "Signing and sending")
        try:
            tx_hash = self.chain.send_transfer(
                session.credential.private_key,
                to_address,
                value_wei,
                gas=estimate.gas,
                gas_price=estimate.gas_price,
            )
        except Exception as e:
            logger.error("Transaction submission failed: %s", e)
            message = format_error_for_user(e)
            report(TransferState.FAILED, message)
            report(TransferState.IDLE, "")
            return TransferOutcome(
                status=TransferStatus.FAILED,
                error_message=message,
                total_cost_wei=total_cost,
            )

        logger.info("Transfer of %s wei to %s sent: hash=%s", value_wei, to_address, tx_hash)
        if on_broadcast:
            on_broadcast(tx_hash)
        report(
            TransferState.AWAITING_CONFIRMATION,
            "Transaction sent! Waiting for confirmation...",
        )

        receipt = self.wait_for_receipt(session, tx_hash)
        if receipt is None:
            return TransferOutcome(
                status=TransferStatus.PENDING,
                tx_hash=tx_hash,
                error_message="Stopped waiting for confirmation; the transaction is still pending.",
                total_cost_wei=total_cost,
            )

        if self.sessions.is_current(session):
            self.sessions.request_refresh()

        if receipt.get("status") == 1:
            report(TransferState.CONFIRMED, "Transaction confirmed!")
            return TransferOutcome(
                status=TransferStatus.CONFIRMED,
                tx_hash=tx_hash,
                total_cost_wei=total_cost,
                receipt=receipt,
            )

        report(TransferState.REVERTED, "Transaction failed.")
        return TransferOutcome(
            status=TransferStatus.REVERTED,
            tx_hash=tx_hash,
            error_message="Transaction failed to confirm.",
            total_cost_wei=total_cost,
            receipt=receipt,
        )

    def wait_for_receipt(
        self, session: WalletSession, tx_hash: str
    ) -> dict[str, Any] | None:
        """Poll for the receipt until it exists or the session ends.

        There is no deadline: a stalled network keeps the transfer pending.
        """
        while True:
            try:
                receipt = self.chain.get_receipt(tx_hash)
            except Exception as e:
                logger.debug("Receipt lookup failed for hash=%s: %s", tx_hash, e)
                receipt = None

            if receipt is not None:
                return receipt

            if session.ended.wait(self.poll_interval_seconds):
                logger.info("Session ended while awaiting hash=%s", tx_hash)
                return None
