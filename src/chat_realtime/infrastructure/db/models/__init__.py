"""Import all models so Base.metadata knows every table."""
from chat_realtime.infrastructure.db.models.actor import ActorModel
from chat_realtime.infrastructure.db.models.conversation import ConversationModel
from chat_realtime.infrastructure.db.models.member import ConversationMemberModel
from chat_realtime.infrastructure.db.models.message import MessageModel, MessageReadModel

__all__ = [
    "ActorModel",
    "ConversationMemberModel",
    "ConversationModel",
    "MessageModel",
    "MessageReadModel",
]
