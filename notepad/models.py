from sqlalchemy import Column, Integer, Text

from notepad.db import DATABASE_TABLE, Base


class Note(Base):
    """SQLAlchemy model representing a note."""
    __tablename__ = DATABASE_TABLE
    # AUTOINCREMENT keeps ids of deleted notes from being handed out again.
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column("_id", Integer, primary_key=True)
    title = Column(Text, nullable=False)
    body = Column(Text, nullable=False)
