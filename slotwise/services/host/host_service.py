# slotwise/services/host/host_service.py
"""Service for managing hosts"""
from typing import Optional
from uuid import UUID
from sqlalchemy.orm import Session
import logging

from slotwise.config.settings import get_settings
from slotwise.domain.result import Result
from slotwise.domain.value_objects import Slug, is_valid_timezone
from slotwise.models.host import Host
from slotwise.schemas.host import HostCreate

logger = logging.getLogger(__name__)


class HostService:
    """Handles host registration and profile"""

    @staticmethod
    def create_host(db: Session, data: HostCreate) -> Result[Host]:
        """Register a new host; email addresses are unique"""
        email = data.email.lower()
        existing = db.query(Host).filter(Host.email == email).first()
        if existing:
            return Result.conflict("A host with this email already exists.")

        slug = HostService._assign_slug(db, data.slug, data.name)
        if slug.is_failure:
            return slug.propagate()

        host = Host(
            name=data.name.strip(),
            email=email,
            slug=slug.value.value,
            timezone=data.timezone or get_settings().DEFAULT_TIMEZONE
        )
        db.add(host)
        db.commit()
        db.refresh(host)

        logger.info(f"Created host {host.id} ({host.timezone})")
        return Result.success(host)

    @staticmethod
    def get_host(db: Session, host_id: UUID) -> Optional[Host]:
        return db.query(Host).filter(Host.id == host_id).first()

    @staticmethod
    def get_host_by_slug(db: Session, slug: str) -> Optional[Host]:
        return db.query(Host).filter(Host.slug == slug.lower()).first()

    @staticmethod
    def update_timezone(db: Session, host: Host, timezone_name: str) -> Result[Host]:
        """Change the host's timezone; weekly rules keep their wall-clock hours"""
        if not is_valid_timezone(timezone_name):
            return Result.failure(f"Invalid timezone: {timezone_name}")

        host.timezone = timezone_name
        db.commit()
        db.refresh(host)
        return Result.success(host)

    @staticmethod
    def _assign_slug(db: Session, requested: Optional[str], name: str) -> Result[Slug]:
        """A requested slug must be free; a derived one gets a numeric suffix instead"""
        if requested:
            slug = Slug.create(requested)
            if slug.is_failure:
                return slug
            if db.query(Host).filter(Host.slug == slug.value.value).first():
                return Result.conflict("A host with this slug already exists.")
            return slug

        slug = Slug.from_name(name)
        if slug.is_failure:
            return slug
        taken = db.query(Host.slug).filter(Host.slug.like(f"{slug.value.value}%")).all()
        return Result.success(slug.value.first_free(row.slug for row in taken))
