"""Tests for the notification queue client's configuration and parsing."""

from unittest.mock import MagicMock

import pytest

from safetunes.config.settings import settings
from safetunes.shared.adapters import sqs_adapter
from safetunes.shared.adapters.sqs_adapter import SQSAdapter

QUEUE_URL = "https://sqs.us-east-1.amazonaws.com/123456789012/notifications"


@pytest.fixture
def boto3_client(monkeypatch) -> MagicMock:
    client = MagicMock()
    monkeypatch.setattr(sqs_adapter.boto3, "client", client)
    return client


class TestClient:
    def test_bounded_timeouts(self, boto3_client):
        SQSAdapter(queue_url=QUEUE_URL, region="us-east-1").client

        _, kwargs = boto3_client.call_args
        config = kwargs["config"]
        assert config.connect_timeout == settings.HTTP_TIMEOUT_SECONDS
        assert config.read_timeout == settings.HTTP_TIMEOUT_SECONDS
        assert config.retries == {"max_attempts": 2}

    def test_long_poll_read_timeout(self, boto3_client):
        SQSAdapter(queue_url=QUEUE_URL, region="us-east-1", read_timeout=30).client

        assert boto3_client.call_args.kwargs["config"].read_timeout == 30


class TestReceive:
    def test_non_json_body(self, boto3_client):
        boto3_client.return_value.receive_message.return_value = {
            "Messages": [
                {"MessageId": "m-1", "ReceiptHandle": "r-1", "Body": '{"kind": "kid_push"}'},
                {"MessageId": "m-2", "ReceiptHandle": "r-2", "Body": "not json"},
            ]
        }

        messages = SQSAdapter(queue_url=QUEUE_URL, region="us-east-1").receive_messages(
            wait_time_seconds=0
        )

        assert [m.body for m in messages] == [{"kind": "kid_push"}, None]
        _, kwargs = boto3_client.return_value.receive_message.call_args
        assert kwargs["QueueUrl"] == QUEUE_URL
        assert kwargs["WaitTimeSeconds"] == 0
