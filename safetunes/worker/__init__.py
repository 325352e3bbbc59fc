"""
SafeTunes notification worker.

Consumes the SQS notification queue and delivers pushes and email batch items.

Usage:
======
    python -m safetunes.worker.main
"""
