"""
Notification worker entry point.

Long-polls the SQS notification queue. Each message is processed in its own
database session; the message is deleted only after the session commits, so
a failure leaves it on the queue for redelivery.
"""

import asyncio
import signal

from safetunes.config.settings import settings
from safetunes.shared.adapters.push_adapter import get_push_adapter
from safetunes.shared.adapters.sqs_adapter import QueueMessage, SQSAdapter
from safetunes.shared.core.logging import clear_log_context, get_logger, log_context
from safetunes.shared.db.session import AsyncSessionLocal, close_db
from safetunes.worker.processors.notification_processor import NotificationProcessor

logger = get_logger(__name__)


async def handle_message(sqs: SQSAdapter, message: QueueMessage) -> bool:
    """Process and acknowledge one message. Returns False if it was left on the queue."""
    clear_log_context()
    log_context(message_id=message.message_id)

    if message.body is None:
        # Unparseable; redelivery cannot help
        logger.warning("Dropping malformed notification")
        await asyncio.to_thread(sqs.delete_message, message.receipt_handle)
        return True

    log_context(kind=message.body.get("kind"))

    async with AsyncSessionLocal() as session:
        try:
            await NotificationProcessor(session).process(message.body)
            await session.commit()
        except Exception as e:
            await session.rollback()
            logger.error("Notification processing failed", error=str(e))
            return False

    await asyncio.to_thread(sqs.delete_message, message.receipt_handle)
    return True


async def run(stop: asyncio.Event) -> None:
    if not settings.SQS_NOTIFICATION_QUEUE_URL:
        raise RuntimeError("SQS_NOTIFICATION_QUEUE_URL is not configured")

    sqs = SQSAdapter(
        read_timeout=settings.WORKER_POLL_WAIT_SECONDS + settings.HTTP_TIMEOUT_SECONDS
    )
    logger.info("Notification worker started", queue_url=sqs.queue_url)

    while not stop.is_set():
        messages = await asyncio.to_thread(
            sqs.receive_messages,
            wait_time_seconds=settings.WORKER_POLL_WAIT_SECONDS,
        )
        for message in messages:
            await handle_message(sqs, message)

    logger.info("Notification worker stopping")


async def main() -> None:
    stop = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, stop.set)

    try:
        await run(stop)
    finally:
        await get_push_adapter().close()
        await close_db()


if __name__ == "__main__":
    asyncio.run(main())
