"""
Shared Module

Contains code shared between API and Worker components:
- Models: SQLAlchemy ORM models
- Repositories: Data access layer
- Services: Business logic layer
- Schemas: Pydantic request/response models
- Core: Logging, exceptions, utilities
- Adapters: External service integrations

Package Structure:
==================
    shared/
    ├── core/           ← Logging, exceptions
    ├── db/             ← Database session management
    ├── models/         ← SQLAlchemy models
    ├── repositories/   ← Data access layer
    ├── services/       ← Business logic
    ├── schemas/        ← Pydantic schemas
    ├── adapters/       ← External services
    └── utils/          ← Utilities

Usage:
======
    from safetunes.shared.models import SongRequest, ApprovedSong
    from safetunes.shared.repositories import SongRequestRepository
    from safetunes.shared.services import ApprovalService
    from safetunes.shared.schemas import SongRequestCreate, SongRequestResponse
    from safetunes.shared.core import logger, SafeTunesException
"""
