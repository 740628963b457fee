"""Import all models so Alembic can discover them via Base.metadata."""
from dm_service.infrastructure.db.models.conversation import ConversationModel
from dm_service.infrastructure.db.models.membership import MembershipModel
from dm_service.infrastructure.db.models.message import MessageModel
from dm_service.infrastructure.db.models.outbox import OutboxMessageModel
from dm_service.infrastructure.db.models.typing_status import TypingStatusModel
from dm_service.infrastructure.db.models.user import UserModel

__all__ = [
    "ConversationModel",
    "MembershipModel",
    "MessageModel",
    "OutboxMessageModel",
    "TypingStatusModel",
    "UserModel",
]
