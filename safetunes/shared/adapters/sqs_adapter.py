"""
SQS adapter - the notification queue on AWS SQS.

Provides:
- Publishing serialized NotificationMessages
- Long-poll receive for the notification worker
- Acknowledgement (delete) after a message is processed

boto3 is blocking; async callers wrap these methods in asyncio.to_thread.
"""

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import boto3
from botocore.config import Config
from botocore.exceptions import ClientError

from ...config.settings import settings

logger = logging.getLogger(__name__)

# SQS caps a single receive at 10 messages
MAX_BATCH = 10


@dataclass
class QueueMessage:
    """
    One received notification message.

    ``body`` is None when the payload was not valid JSON; such messages can
    never be processed and should be acknowledged and dropped.
    """

    message_id: str
    receipt_handle: str
    body: Optional[Dict[str, Any]]
    attributes: Dict[str, str] = field(default_factory=dict)


class SQSAdapter:
    """
    Client for the notification queue.

    The queue URL is bound at construction so callers never pass it around.
    Calls are bounded by HTTP_TIMEOUT_SECONDS and a single retry.
    """

    def __init__(
        self,
        queue_url: Optional[str] = None,
        region: Optional[str] = None,
        aws_access_key_id: Optional[str] = None,
        aws_secret_access_key: Optional[str] = None,
        read_timeout: Optional[float] = None,
    ):
        self.queue_url = queue_url or settings.SQS_NOTIFICATION_QUEUE_URL
        self.region = region or settings.AWS_REGION
        self.aws_access_key_id = aws_access_key_id or settings.AWS_ACCESS_KEY_ID
        self.aws_secret_access_key = aws_secret_access_key or settings.AWS_SECRET_ACCESS_KEY
        # Long-poll receivers must allow for wait_time_seconds on top of this
        self.read_timeout = read_timeout or settings.HTTP_TIMEOUT_SECONDS
        self._client = None

    @property
    def client(self):
        """Lazy-loaded SQS client."""
        if self._client is None:
            credentials = {}
            if self.aws_access_key_id and self.aws_secret_access_key:
                credentials = {
                    "aws_access_key_id": self.aws_access_key_id,
                    "aws_secret_access_key": self.aws_secret_access_key,
                }
            # Publishing runs inside API requests
            config = Config(
                connect_timeout=settings.HTTP_TIMEOUT_SECONDS,
                read_timeout=self.read_timeout,
                retries={"max_attempts": 2},
            )
            # Without explicit keys boto3 falls back to the IAM role / environment
            self._client = boto3.client(
                "sqs", region_name=self.region, config=config, **credentials
            )
        return self._client

    def send_notification(self, message_body: Dict[str, Any]) -> str:
        """
        Publish a serialized NotificationMessage.

        The message kind is copied into a message attribute so queue
        tooling can filter without parsing the body.

        Returns:
            SQS message id

        Raises:
            ClientError: If SQS rejects the message
        """
        kind = str(message_body.get("kind", "unknown"))
        try:
            response = self.client.send_message(
                QueueUrl=self.queue_url,
                MessageBody=json.dumps(message_body),
                MessageAttributes={"kind": {"StringValue": kind, "DataType": "String"}},
            )
        except ClientError as e:
            logger.error("Failed to publish %s notification: %s", kind, e)
            raise

        logger.debug("Published %s notification %s", kind, response["MessageId"])
        return response["MessageId"]

    def receive_messages(
        self,
        max_messages: int = MAX_BATCH,
        wait_time_seconds: int = 20,
        visibility_timeout: int = 60,
    ) -> List[QueueMessage]:
        """
        Long-poll the queue.

        Args:
            max_messages: Messages per call (capped at 10)
            wait_time_seconds: Long-poll wait; 0 returns immediately
            visibility_timeout: Seconds a received message stays hidden
                before SQS redelivers it

        Returns:
            Received messages, possibly empty
        """
        try:
            response = self.client.receive_message(
                QueueUrl=self.queue_url,
                MaxNumberOfMessages=min(max_messages, MAX_BATCH),
                WaitTimeSeconds=wait_time_seconds,
                VisibilityTimeout=visibility_timeout,
                AttributeNames=["ApproximateReceiveCount"],
            )
        except ClientError as e:
            logger.error("Failed to receive notifications: %s", e)
            raise

        messages = []
        for raw in response.get("Messages", []):
            try:
                body = json.loads(raw["Body"])
            except json.JSONDecodeError:
                logger.warning("Notification %s has a non-JSON body", raw["MessageId"])
                body = None

            messages.append(
                QueueMessage(
                    message_id=raw["MessageId"],
                    receipt_handle=raw["ReceiptHandle"],
                    body=body,
                    attributes=raw.get("Attributes", {}),
                )
            )

        return messages

    def delete_message(self, receipt_handle: str) -> None:
        """Acknowledge a processed message so SQS does not redeliver it."""
        try:
            self.client.delete_message(QueueUrl=self.queue_url, ReceiptHandle=receipt_handle)
        except ClientError as e:
            logger.error("Failed to delete notification: %s", e)
            raise


# Singleton instance
_sqs_adapter: Optional[SQSAdapter] = None


def get_sqs_adapter() -> SQSAdapter:
    """Get or create SQS adapter singleton."""
    global _sqs_adapter
    if _sqs_adapter is None:
        _sqs_adapter = SQSAdapter()
    return _sqs_adapter
