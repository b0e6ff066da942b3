"""Tenant onboarding service."""

from typing import Optional
from ledgerbook.database.base import Database
from ledgerbook.domain.entities import Tenant
from ledgerbook.domain.errors import ConflictError, ValidationError
from ledgerbook.logging_config import get_logger

logger = get_logger(__name__)


class TenantService:
    """Creates and lists tenants.

    Onboarding is a system-level operation and takes no caller.
    """

    def __init__(self, db: Database):
        self.db = db

    def create_tenant(self, name: str, tenant_id: Optional[str] = None) -> Tenant:
        """Create a tenant.

        Args:
            name: Display name
            tenant_id: Optional fixed id (generated when omitted)

        Raises:
            ValidationError: If name is blank
            ConflictError: If tenant_id is already taken
        """
        if not name or not name.strip():
            raise ValidationError("Tenant name is required")
        if tenant_id is not None and self.db.get_tenant(tenant_id) is not None:
            raise ConflictError(f"Tenant '{tenant_id}' already exists")

        with self.db.atomic():
            new_id = self.db.create_tenant(name=name.strip(), tenant_id=tenant_id)
        logger.info("tenant_created", tenant_id=new_id)
        return self.db.get_tenant(new_id)

    def get_tenant(self, tenant_id: str) -> Optional[Tenant]:
        return self.db.get_tenant(tenant_id)

    def list_tenants(self) -> list[Tenant]:
        return self.db.list_tenants()
