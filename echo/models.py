from sqlalchemy import Column, Integer, String, Text, Index
from echo.database import Base


class EndpointRecord(Base):
    """A registered mock endpoint. Ids are never reused (AUTOINCREMENT)."""
    __tablename__ = "endpoints"
    __table_args__ = (
        Index("ix_endpoints_verb_path", "verb", "path"),
        {"sqlite_autoincrement": True},
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    type = Column(String(50), nullable=False)
    verb = Column(String(10), nullable=False)
    path = Column(Text, nullable=False)
    code = Column(Integer, nullable=False)
    headers = Column(Text, nullable=False)  # JSON string
    body = Column(Text, nullable=False)
