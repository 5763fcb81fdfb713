"""
ContactRecall Database Models
"""

from sqlalchemy import Column, Index, Integer, LargeBinary, String, Text
from sqlalchemy.orm import declarative_base

Base = declarative_base()

CONTACT_FIELDS = ("name", "email", "linkedin", "company", "last_contacted")


# =============================================================================
# Messages (stored knowledge, contacts and free-text logs)
# =============================================================================

class Message(Base):
    __tablename__ = "messages"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(255), nullable=False)
    conversation_id = Column(String(255), nullable=False, default="default")

    # Contact fields (all optional, email is the merge key)
    name = Column(String(255))
    email = Column(String(255))
    linkedin = Column(String(500))
    company = Column(String(255))
    last_contacted = Column(String(100))

    content = Column(Text, nullable=False)
    embedding = Column(LargeBinary, nullable=False)  # float32 little-endian
    created_at = Column(String(40), nullable=False)  # ISO-8601, sortable as text
    connected_already = Column(String(5))  # 'true' | 'false' | NULL

    __table_args__ = (
        Index("ix_messages_user_conversation", "user_id", "conversation_id"),
        Index("ix_messages_email", "email"),
    )

    def to_history_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "linkedin": self.linkedin,
            "company": self.company,
            "last_contacted": self.last_contacted,
            "content": self.content,
            "created_at": self.created_at,
            "connected_already": self.connected_already,
        }
