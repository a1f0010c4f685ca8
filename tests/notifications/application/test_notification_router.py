"""Application tests for recipient resolution, fan-out and token pruning."""

import json
from datetime import datetime

import pytest
from protean.exceptions import ValidationError
from protean.utils.globals import current_domain

from florist.accounts.management import RegisterAccount
from florist.config import Settings
from florist.errors import PersistenceFailure, UpstreamFailure
from florist.notifications.channel.push_port import TOKEN_NOT_REGISTERED, PushMessage
from florist.notifications.router import NotificationRouter
from florist.notifications.tokens.management import (
    PruneDeviceTokens,
    RegisterDeviceToken,
    UnregisterDeviceToken,
    find_token_set,
)
from florist.order.events import OrderPlaced, OrderStatusChanged


def _register_token(recipient_id, token):
    return current_domain.process(RegisterDeviceToken(recipient_id=recipient_id, token=token), asynchronous=False)


def _register_account(account_id, role="customer"):
    current_domain.process(RegisterAccount(account_id=account_id, name=account_id, role=role), asynchronous=False)


def _tokens(recipient_id):
    token_set = find_token_set(recipient_id)
    return token_set.token_list() if token_set else []


@pytest.fixture()
def router(fake_push):
    return NotificationRouter(fake_push, Settings())


def _message():
    return PushMessage(title="t", body="b", data={"type": "order_status_update", "orderId": "ORDER-1"})


def _unavailable_token_store(recipient_id):
    raise PersistenceFailure("token store unavailable")


class TestDeviceTokenCommands:
    def test_register_is_idempotent(self):
        _register_token("user-1", "tok-a")
        assert _register_token("user-1", " tok-a ") == ["tok-a"]

    def test_blank_token_rejected(self):
        with pytest.raises(ValidationError):
            _register_token("user-1", "   ")

    def test_unregister(self):
        _register_token("user-1", "tok-a")
        _register_token("user-1", "tok-b")
        current_domain.process(UnregisterDeviceToken(recipient_id="user-1", token="tok-a"), asynchronous=False)
        assert _tokens("user-1") == ["tok-b"]

    def test_unregister_unknown_recipient(self):
        result = current_domain.process(UnregisterDeviceToken(recipient_id="nobody", token="tok"), asynchronous=False)
        assert result == []

    def test_prune_across_recipients(self):
        _register_token("user-1", "tok-shared")
        _register_token("user-2", "tok-shared")
        _register_token("user-2", "tok-b")

        pruned = current_domain.process(
            PruneDeviceTokens(recipient_ids=json.dumps(["user-1", "user-2", "ghost"]), tokens='["tok-shared"]'),
            asynchronous=False,
        )
        assert pruned == 2
        assert _tokens("user-1") == []
        assert _tokens("user-2") == ["tok-b"]


class TestStaffRecipients:
    def test_staff_by_role_excluding_owner(self, router):
        _register_account("admin-1", role="admin")
        _register_account("admin-2", role="Admin")
        _register_account("user-1")

        assert sorted(router.staff_recipients(exclude="admin-2")) == ["admin-1"]

    def test_fallback_ids_when_no_staff(self, fake_push):
        _register_account("user-1")
        router = NotificationRouter(fake_push, Settings(fallback_staff_ids=("owner-phone", "user-1")))
        assert router.staff_recipients(exclude="user-1") == ["owner-phone"]

    def test_scan_when_role_query_fails(self, router, monkeypatch):
        _register_account("admin-1", role="ADMIN")
        _register_account("user-1")

        def broken_variants(roles):
            raise RuntimeError("role index unavailable")

        monkeypatch.setattr("florist.notifications.router._role_variants", broken_variants)
        assert router.staff_recipients() == ["admin-1"]

    def test_status_change_goes_to_owner(self, router):
        event = OrderStatusChanged(
            order_id="ORDER-1",
            owner_id="user-1",
            status="shipping",
            source="staff",
            changed_at=datetime.now(),
        )
        assert router.resolve_recipients(event) == ["user-1"]

    def test_unsupported_event(self, router):
        with pytest.raises(ValueError):
            router.resolve_recipients(object())


class TestFanOut:
    def test_no_tokens_means_no_provider_call(self, router, fake_push):
        result = router.deliver(["user-1"], _message())
        assert (result.success_count, result.failure_count) == (0, 0)
        assert fake_push.sent_batches == []

    def test_tokens_deduplicated_across_recipients(self, router, fake_push):
        _register_token("user-1", "tok-shared")
        _register_token("user-2", "tok-shared")
        _register_token("user-2", "tok-b")

        result = router.deliver(["user-1", "user-2"], _message())
        assert result.success_count == 2
        assert sorted(fake_push.sent_batches[0]["tokens"]) == ["tok-b", "tok-shared"]

    def test_permanent_failure_pruned_transient_kept(self, router, fake_push):
        for token in ("tok-ok", "tok-dead", "tok-flaky"):
            _register_token("user-1", token)
        fake_push.configure(fail_tokens={"tok-dead": TOKEN_NOT_REGISTERED, "tok-flaky": "unavailable"})

        result = router.deliver(["user-1"], _message())
        assert result.success_count == 1
        assert result.failure_count == 2
        assert _tokens("user-1") == ["tok-flaky", "tok-ok"]

    def test_prune_failure_does_not_fail_delivery(self, router, fake_push, monkeypatch):
        _register_token("user-1", "tok-ok")
        _register_token("user-1", "tok-dead")
        fake_push.configure(fail_tokens={"tok-dead": TOKEN_NOT_REGISTERED})
        monkeypatch.setattr("florist.notifications.tokens.management.find_token_set", _unavailable_token_store)

        result = router.deliver(["user-1"], _message())

        assert (result.success_count, result.failure_count) == (1, 1)
        assert result.permanently_failed_tokens == ["tok-dead"]
        assert len(fake_push.sent_batches) == 1
        assert _tokens("user-1") == ["tok-dead", "tok-ok"]

    def test_provider_outage_propagates(self, router, fake_push):
        _register_token("user-1", "tok-a")
        fake_push.configure(should_succeed=False)
        with pytest.raises(UpstreamFailure):
            router.deliver(["user-1"], _message())
        assert _tokens("user-1") == ["tok-a"]

    def test_new_order_without_staff_sends_nothing(self, router, fake_push):
        event = OrderPlaced(
            order_id="ORDER-1",
            owner_id="user-1",
            total_price=1000,
            status="pending",
            payment_method="cod",
            delivery_method="pickup",
            placed_at=datetime.now(),
        )
        result = router.notify_new_order(event)
        assert result.success_count == 0
        assert fake_push.sent_batches == []
