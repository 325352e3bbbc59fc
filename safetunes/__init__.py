"""
SafeTunes Backend

Parental approval and AI content moderation for kids' music.

Package Structure:
==================
    safetunes/
    ├── api/        ← FastAPI application
    ├── worker/     ← Notification queue consumer
    ├── shared/     ← Shared code (models, services, etc.)
    └── config/     ← Configuration

Running the Application:
========================
    # API Server
    uvicorn safetunes.api.main:app --reload

    # Worker
    python -m safetunes.worker.main
"""
