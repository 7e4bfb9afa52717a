"""Data models for the MiroTrak dashboard backend."""

# Import SQLAlchemy ORM models to register them with Base.metadata
# This ensures all tables are known when create_tables() is called
from mirotrak.models.calendar import EventCreate, EventDB, EventFields, EventRead  # noqa: F401
from mirotrak.models.clients import (  # noqa: F401
    ClientDB,
    ClientFields,
    ClientRead,
    SubscriptionCreate,
    SubscriptionDB,
    SubscriptionFields,
    SubscriptionRead,
    SubscriptionWithClient,
)
from mirotrak.models.library import (  # noqa: F401
    AiPhotoCreate,
    AiPhotoDB,
    AiPhotoFields,
    AiPhotoRead,
    PromptCreate,
    PromptDB,
    PromptRead,
    PromptUpdate,
)
from mirotrak.models.settings import (  # noqa: F401
    EmailTemplate,
    PdfTemplate,
    SettingDB,
    SettingRead,
    SettingWrite,
)

__all__ = [
    # Clients
    "ClientFields",
    "ClientRead",
    "SubscriptionCreate",
    "SubscriptionFields",
    "SubscriptionRead",
    "SubscriptionWithClient",
    # Calendar
    "EventCreate",
    "EventFields",
    "EventRead",
    # Library
    "AiPhotoCreate",
    "AiPhotoFields",
    "AiPhotoRead",
    "PromptCreate",
    "PromptRead",
    "PromptUpdate",
    # Settings
    "EmailTemplate",
    "PdfTemplate",
    "SettingRead",
    "SettingWrite",
]
