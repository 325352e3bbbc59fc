"""
Adapters Package

External service integrations.

Contents:
=========
- openai_adapter: OpenAI API client (AI reviewer, discovery)
- lyrics_adapter: Musixmatch lyric provider client
- push_adapter: Expo push notification client
- sqs_adapter: AWS SQS queue client (notification queue)

Note: Database access is handled by shared/db/session.py using async SQLAlchemy.

Usage:
======
    from safetunes.shared.adapters.openai_adapter import get_openai_adapter
    from safetunes.shared.adapters.lyrics_adapter import get_lyrics_adapter
"""
