"""Tests for payments module models and errors."""

import pytest
from pydantic import ValidationError

from modules.payments.exceptions import PaymentError, PaymentErrorType
from modules.payments.models import (
    CardDetails,
    PaymentIntent,
    PaymentIntentStatus,
    RetryStatus,
    SubscriptionAttempt,
    new_idempotency_key,
)


class TestIdempotencyKey:
    def test_keys_are_unique(self):
        assert new_idempotency_key() != new_idempotency_key()


class TestSubscriptionAttempt:
    def test_active_without_intent_is_paid(self):
        assert SubscriptionAttempt(status="active").is_paid

    def test_incomplete_without_intent_is_not_paid(self):
        assert not SubscriptionAttempt(status="incomplete").is_paid

    @pytest.mark.parametrize(
        "status,paid",
        [
            (PaymentIntentStatus.SUCCEEDED, True),
            (PaymentIntentStatus.PROCESSING, False),
            (PaymentIntentStatus.REQUIRES_ACTION, False),
            (PaymentIntentStatus.REQUIRES_PAYMENT_METHOD, False),
        ],
    )
    def test_intent_status_decides(self, status, paid):
        attempt = SubscriptionAttempt(
            status="active",
            payment_intent=PaymentIntent(status=status),
        )
        assert attempt.is_paid is paid


class TestCardDetails:
    def test_secrets_are_masked(self):
        card = CardDetails(number="4242424242424242", exp_month=1, exp_year=2030, cvc="123")
        assert "4242424242424242" not in repr(card)
        assert card.number.get_secret_value() == "4242424242424242"

    def test_rejects_bad_month(self):
        with pytest.raises(ValidationError):
            CardDetails(number="4242", exp_month=13, exp_year=2030, cvc="123")


class TestRetryStatus:
    def test_is_immutable(self):
        status = RetryStatus(invoice_id="in_1")
        with pytest.raises(ValidationError):
            status.invoice_id = "in_2"


class TestPaymentError:
    def test_card_declined(self):
        error = PaymentError.card_declined()
        assert error.type == PaymentErrorType.CARD_ERROR
        assert error.code == "card_declined"
        assert error.to_dict()["details"] == {"type": "card_error"}

    def test_custom_message(self):
        error = PaymentError(PaymentErrorType.API_ERROR, "UNKNOWN", "backend down")
        assert str(error) == "backend down"


class TestProcessingAttempt:
    def test_processing_intent(self):
        attempt = SubscriptionAttempt(
            status="incomplete",
            payment_intent=PaymentIntent(status=PaymentIntentStatus.PROCESSING),
        )
        assert attempt.is_processing
        assert not attempt.is_paid

    def test_no_intent_is_not_processing(self):
        assert not SubscriptionAttempt(status="active").is_processing
