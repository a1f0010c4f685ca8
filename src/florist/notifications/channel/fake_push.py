"""Fake push adapter: records batches in memory for test assertions."""

from uuid import uuid4

from florist.errors import UpstreamFailure
from florist.notifications.channel.push_port import BatchResult, PushGateway, PushMessage, TokenResult


class FakePushGateway(PushGateway):
    """Push adapter that records sent batches instead of delivering them.

    ``fail_tokens`` maps a token to the error code it should fail with, so
    tests can mark tokens as permanently invalid or transiently failing.
    """

    def __init__(self):
        self.sent_batches: list[dict] = []
        self.fail_tokens: dict[str, str] = {}
        self.should_succeed = True
        self.failure_reason = "Push provider unavailable"

    def configure(
        self,
        should_succeed: bool = True,
        fail_tokens: dict[str, str] | None = None,
        failure_reason: str = "Push provider unavailable",
    ):
        """Configure the fake adapter behavior for testing."""
        self.should_succeed = should_succeed
        self.fail_tokens = dict(fail_tokens or {})
        self.failure_reason = failure_reason

    def send_batch(self, tokens: list[str], message: PushMessage) -> BatchResult:
        if not self.should_succeed:
            raise UpstreamFailure(self.failure_reason, provider="push")

        self.sent_batches.append({"tokens": list(tokens), "message": message})

        responses = []
        for token in tokens:
            error_code = self.fail_tokens.get(token)
            if error_code:
                responses.append(TokenResult(token=token, success=False, error_code=error_code))
            else:
                responses.append(TokenResult(token=token, success=True, message_id=f"push-{uuid4().hex[:12]}"))

        success_count = sum(1 for r in responses if r.success)
        return BatchResult(
            success_count=success_count,
            failure_count=len(responses) - success_count,
            responses=tuple(responses),
        )

    @property
    def sent_messages(self) -> list[PushMessage]:
        return [batch["message"] for batch in self.sent_batches]

    def reset(self):
        """Clear sent batches (useful between tests)."""
        self.sent_batches.clear()
        self.fail_tokens.clear()
        self.should_succeed = True
        self.failure_reason = "Push provider unavailable"
