"""
SQLAlchemy model and CRUD operations for the target directory.

A target is a WhatsApp group (or phone) id that can receive broadcasts,
with a friendly name and a category used to select groups of targets.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import Column, DateTime, Integer, String, create_engine, func
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    pass


def _utcnow() -> datetime:
    # Naive UTC; SQLite does not keep tz offsets.
    return datetime.now(timezone.utc).replace(tzinfo=None)


class Target(Base):
    """A saved broadcast recipient."""

    __tablename__ = "targets"

    id = Column(String(128), primary_key=True)
    name = Column(String(256), nullable=False)
    category = Column(String(128), nullable=False, index=True)
    # insertion order, used for stable listing
    position = Column(Integer, nullable=False, index=True)
    date_added = Column(DateTime, default=_utcnow, nullable=False)

    def __repr__(self) -> str:
        return f"<Target(id='{self.id}', name='{self.name}', category='{self.category}')>"

    def to_dict(self) -> dict[str, str]:
        return {"id": self.id, "name": self.name, "category": self.category}


class TargetDirectory:
    """
    CRUD interface for saved targets.

    Usage:
        directory = TargetDirectory("sqlite:///wa_targets.db")
        directory.add_target("1203630@g.us", "Youth group", "Church")
        ids = directory.target_ids(categories=["Church"])
        directory.remove_target("1203630@g.us")
    """

    def __init__(self, db_url: str = "sqlite:///wa_targets.db") -> None:
        self.engine = create_engine(db_url, echo=False)
        Base.metadata.create_all(self.engine)
        self.SessionFactory = sessionmaker(bind=self.engine, expire_on_commit=False)

    def _session(self) -> Session:
        return self.SessionFactory()

    # ---- Create ----

    def add_target(self, target_id: str, name: str, category: str) -> Optional[Target]:
        """Save a new target.

        Returns the stored Target, or None if a target with the same id
        already exists (the existing record is left untouched).

        Raises:
            ValueError: If any of id, name or category is blank.
        """
        target_id = (target_id or "").strip()
        name = (name or "").strip()
        category = (category or "").strip()
        if not target_id or not name or not category:
            raise ValueError("Target id, name and category are required.")

        with self._session() as session:
            if session.get(Target, target_id) is not None:
                logger.warning("Target %s already exists; not adding it again.", target_id)
                return None
            last = session.query(func.max(Target.position)).scalar() or 0
            target = Target(id=target_id, name=name, category=category, position=last + 1)
            session.add(target)
            session.commit()
            logger.info("Added target %s (%s) in category %s", name, target_id, category)
            return target

    # ---- Read ----

    def get_target(self, target_id: str) -> Optional[Target]:
        with self._session() as session:
            return session.get(Target, target_id)

    def list_targets(self, category: Optional[str] = None) -> list[Target]:
        """Return targets in the order they were added, optionally by category."""
        with self._session() as session:
            q = session.query(Target)
            if category:
                q = q.filter(Target.category == category)
            return q.order_by(Target.position).all()

    def list_categories(self) -> list[str]:
        with self._session() as session:
            rows = session.query(Target.category).distinct().order_by(Target.category).all()
            return [row[0] for row in rows]

    def target_ids(self, categories: Optional[list[str]] = None) -> list[str]:
        """Ids of all targets, or of those in any of ``categories``."""
        with self._session() as session:
            q = session.query(Target.id)
            if categories:
                q = q.filter(Target.category.in_(categories))
            return [row[0] for row in q.order_by(Target.position).all()]

    # ---- Delete ----

    def remove_target(self, target_id: str) -> bool:
        with self._session() as session:
            target = session.get(Target, target_id)
            if target is None:
                logger.warning("Target %s not found; nothing removed.", target_id)
                return False
            session.delete(target)
            session.commit()
            logger.info("Removed target %s", target_id)
            return True
