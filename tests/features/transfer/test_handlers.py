"""Tests for the send form callbacks that run back on the UI thread."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from mini_wallet.features.transfer.handlers import TransferHandlersMixin
from mini_wallet.features.transfer.service import (
    TransferOutcome,
    TransferState,
    TransferStatus,
)

OTHER_KEY = "0x" + "11" * 32


@pytest.fixture
def app(sessions):
    fake = MagicMock()
    fake.sessions = sessions
    fake.transfer_service.explorer_url.side_effect = lambda h: f"https://explorer/tx/{h}"
    return fake


@pytest.fixture
def first_session(sessions, test_private_key):
    return sessions.import_session(test_private_key).normalized_value


@pytest.mark.unit
class TestTransferCallbacks:
    def test_outcome_of_replaced_session_is_dropped(self, app, sessions, first_session):
        sessions.import_session(OTHER_KEY)
        outcome = TransferOutcome(status=TransferStatus.CONFIRMED, tx_hash="0xabc")

        TransferHandlersMixin._on_transfer_finished(app, first_session, outcome)

        app._set_send_enabled.assert_called_once_with(True)
        app.query_main.assert_not_called()
        app.notify.assert_not_called()
        app.refresh_history_async.assert_not_called()

    def test_pending_outcome_after_logout_is_dropped(self, app, sessions, first_session):
        sessions.end_session()
        outcome = TransferOutcome(status=TransferStatus.PENDING, tx_hash="0xabc")

        TransferHandlersMixin._on_transfer_finished(app, first_session, outcome)

        app.query_main.assert_not_called()

    def test_outcome_of_current_session_is_shown(self, app, first_session):
        outcome = TransferOutcome(status=TransferStatus.CONFIRMED, tx_hash="0xabc")

        TransferHandlersMixin._on_transfer_finished(app, first_session, outcome)

        app.notify.assert_called_once()
        app.refresh_history_async.assert_called_once()
        status_update = app.query_main.return_value.update
        assert "https://explorer/tx/0xabc" in status_update.call_args_list[0].args[0]

    def test_broadcast_and_state_of_replaced_session_are_dropped(
        self, app, sessions, first_session
    ):
        sessions.import_session(OTHER_KEY)

        TransferHandlersMixin._on_transfer_broadcast(app, first_session, "0xabc")
        TransferHandlersMixin._on_transfer_state(
            app, first_session, TransferState.SUBMITTING, "Signing and sending"
        )

        app.query_main.assert_not_called()
