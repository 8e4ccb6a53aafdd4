# models.py

import uuid

import sqlalchemy as sa
from sqlalchemy.orm import declarative_base

Base = declarative_base()


def new_post_id() -> str:
    return uuid.uuid4().hex


class Post(Base):
    __tablename__ = "posts"
    # AUTOINCREMENT keeps SQLite from reusing the seq of a deleted row
    __table_args__ = {"sqlite_autoincrement": True}

    seq = sa.Column(sa.Integer, primary_key=True, autoincrement=True)
    id = sa.Column(sa.String(32), unique=True, index=True, nullable=False, default=new_post_id)
    title = sa.Column(sa.String, nullable=False)
    category = sa.Column(sa.String, index=True, nullable=False)
    author = sa.Column(sa.String, nullable=False)
    content = sa.Column(sa.Text, nullable=False)
    created_at = sa.Column(sa.DateTime(timezone=True), nullable=False, index=True)
    updated_at = sa.Column(sa.DateTime(timezone=True), nullable=True)

    def __repr__(self):
        return f"<Post(id={self.id}, title='{self.title}', category='{self.category}')>"
