"""Order changes fan out push notifications through the event handler."""

import json

from protean.utils.globals import current_domain

from florist.accounts.management import RegisterAccount
from florist.cart.management import AddToCart
from florist.errors import PersistenceFailure
from florist.notifications.channel.push_port import TOKEN_NOT_REGISTERED
from florist.notifications.templates.new_order import ADMIN_ORDER_NEW
from florist.notifications.templates.order_status_update import ORDER_STATUS_UPDATE
from florist.notifications.tokens.management import RegisterDeviceToken, find_token_set
from florist.order.fulfillment import UpdateOrderStatus
from florist.order.order import Order
from florist.order.payment import notification_from_webhook
from florist.order.placement import PlaceOrder


def _register_token(recipient_id, token):
    current_domain.process(RegisterDeviceToken(recipient_id=recipient_id, token=token), asynchronous=False)


def _place(bouquet_id, payment_method="cod"):
    current_domain.process(
        AddToCart(owner_id="user-1", bouquet_id=bouquet_id, size="small", quantity=1),
        asynchronous=False,
    )
    return current_domain.process(
        PlaceOrder(owner_id="user-1", delivery_method="pickup", payment_method=payment_method, customer_name="Ayu"),
        asynchronous=False,
    )


def _messages_of_type(fake_push, notification_type):
    return [m for m in fake_push.sent_messages if m.data["type"] == notification_type]


class TestStatusUpdateNotifications:
    def test_staff_update_notifies_owner(self, rose_bouquet, fake_gateway, fake_push):
        _register_token("user-1", "tok-customer")
        order_id = _place(rose_bouquet)

        current_domain.process(UpdateOrderStatus(order_id=order_id, status="processing"), asynchronous=False)

        [message] = _messages_of_type(fake_push, ORDER_STATUS_UPDATE)
        assert message.data["orderId"] == order_id
        assert message.data["status"] == "processing"
        assert message.body == "Ayu • Order is being prepared"
        assert json.loads(message.data["items_json"]) == ["Red Romance"]
        assert fake_push.sent_batches[-1]["tokens"] == ["tok-customer"]

    def test_same_status_update_still_notifies(self, rose_bouquet, fake_gateway, fake_push):
        _register_token("user-1", "tok-customer")
        order_id = _place(rose_bouquet)

        current_domain.process(UpdateOrderStatus(order_id=order_id, status="pending"), asynchronous=False)
        assert len(_messages_of_type(fake_push, ORDER_STATUS_UPDATE)) == 1

    def test_webhook_replay_notifies_once(self, rose_bouquet, fake_gateway, fake_push):
        _register_token("user-1", "tok-customer")
        order_id = _place(rose_bouquet, payment_method="midtrans")
        body = {"order_id": order_id, "transaction_status": "settlement", "fraud_status": "accept"}

        current_domain.process(notification_from_webhook(body), asynchronous=False)
        current_domain.process(notification_from_webhook(body), asynchronous=False)

        messages = _messages_of_type(fake_push, ORDER_STATUS_UPDATE)
        assert [m.data["status"] for m in messages] == ["dibayar"]

    def test_push_outage_does_not_undo_status_change(self, rose_bouquet, fake_gateway, fake_push):
        _register_token("user-1", "tok-customer")
        order_id = _place(rose_bouquet)
        fake_push.configure(should_succeed=False)

        current_domain.process(UpdateOrderStatus(order_id=order_id, status="shipping"), asynchronous=False)
        assert current_domain.repository_for(Order).get(order_id).status == "shipping"

    def test_dead_token_pruned_after_fan_out(self, rose_bouquet, fake_gateway, fake_push):
        _register_token("user-1", "tok-live")
        _register_token("user-1", "tok-dead")
        fake_push.configure(fail_tokens={"tok-dead": TOKEN_NOT_REGISTERED})
        order_id = _place(rose_bouquet)

        current_domain.process(UpdateOrderStatus(order_id=order_id, status="processing"), asynchronous=False)
        assert find_token_set("user-1").token_list() == ["tok-live"]

    def test_prune_failure_leaves_status_change_and_notification(
        self, rose_bouquet, fake_gateway, fake_push, monkeypatch
    ):
        _register_token("user-1", "tok-live")
        _register_token("user-1", "tok-dead")
        fake_push.configure(fail_tokens={"tok-dead": TOKEN_NOT_REGISTERED})
        order_id = _place(rose_bouquet)

        def unavailable(recipient_id):
            raise PersistenceFailure("token store unavailable")

        monkeypatch.setattr("florist.notifications.tokens.management.find_token_set", unavailable)
        current_domain.process(UpdateOrderStatus(order_id=order_id, status="processing"), asynchronous=False)

        assert current_domain.repository_for(Order).get(order_id).status == "processing"
        [message] = _messages_of_type(fake_push, ORDER_STATUS_UPDATE)
        assert message.data["status"] == "processing"
        assert find_token_set("user-1").token_list() == ["tok-dead", "tok-live"]


class TestNewOrderNotifications:
    def test_staff_alerted_on_new_order(self, rose_bouquet, fake_gateway, fake_push):
        current_domain.process(RegisterAccount(account_id="admin-1", name="Sari", role="admin"), asynchronous=False)
        _register_token("admin-1", "tok-admin")
        _register_token("user-1", "tok-customer")

        order_id = _place(rose_bouquet)

        [message] = _messages_of_type(fake_push, ADMIN_ORDER_NEW)
        assert message.title == f"New order #{order_id}"
        assert message.data["total_price"] == "13500"
        assert fake_push.sent_batches[0]["tokens"] == ["tok-admin"]

    def test_staff_owner_not_alerted_about_own_order(self, rose_bouquet, fake_gateway, fake_push):
        current_domain.process(RegisterAccount(account_id="user-1", name="Ayu", role="admin"), asynchronous=False)
        _register_token("user-1", "tok-customer")

        _place(rose_bouquet)
        assert _messages_of_type(fake_push, ADMIN_ORDER_NEW) == []
