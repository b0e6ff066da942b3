"""Business unit domain service."""

from typing import Optional, Any
from ledgerbook.database.base import Database
from ledgerbook.domain.access import Caller, READ_ROLES, WRITE_ROLES, require_role
from ledgerbook.domain.entities import BusinessUnit, TreeNode
from ledgerbook.domain.errors import (
    NotFoundError,
    ReferentialError,
    ValidationError,
    node_not_found,
    reference_not_found,
)
from ledgerbook.domain.tree import build_tree, check_new_parent, format_path, required_name
from ledgerbook.logging_config import get_logger

logger = get_logger(__name__)

KIND = "Business unit"


class BusinessUnitService:
    """Service for managing business units.

    Units are never removed; deleting one only deactivates it, so entries
    that reference it keep resolving.
    """

    def __init__(self, db: Database):
        self.db = db

    def list_business_units(self, caller: Caller, include_inactive: bool = False) -> list[BusinessUnit]:
        require_role(caller, READ_ROLES, "view business units")
        return self.db.list_business_units(caller.tenant_id, include_inactive=include_inactive)

    def get_business_unit(self, caller: Caller, unit_id: str) -> Optional[BusinessUnit]:
        require_role(caller, READ_ROLES, "view business units")
        return self.db.get_business_unit(caller.tenant_id, unit_id)

    def create_business_unit(
        self,
        caller: Caller,
        name: str,
        description: Optional[str] = None,
        parent_id: Optional[str] = None,
    ) -> BusinessUnit:
        """Create a business unit.

        Raises:
            ValidationError: If name is missing
            ReferentialError: If the parent is not in the tenant
        """
        require_role(caller, WRITE_ROLES, "edit business units")
        name = required_name(name)
        with self.db.atomic():
            if parent_id is not None and self.db.get_business_unit(caller.tenant_id, parent_id) is None:
                raise ReferentialError(reference_not_found(KIND, parent_id))
            unit_id = self.db.create_business_unit(
                caller.tenant_id, name=name, description=description, parent_id=parent_id
            )
        logger.info("business_unit_created", tenant_id=caller.tenant_id, unit_id=unit_id)
        return self.db.get_business_unit(caller.tenant_id, unit_id)

    def update_business_unit(
        self,
        caller: Caller,
        unit_id: str,
        name: Optional[str] = None,
        description: Optional[str] = None,
        parent_id: Optional[str] = None,
        is_active: Optional[bool] = None,
        clear_parent: bool = False,
    ) -> BusinessUnit:
        """Update a business unit; ``is_active=True`` reactivates it.

        Raises:
            NotFoundError: If the unit is not in the tenant
            ValidationError: If a value is invalid or the move would create a cycle
            ReferentialError: If the new parent is not in the tenant
        """
        require_role(caller, WRITE_ROLES, "edit business units")
        if clear_parent and parent_id is not None:
            raise ValidationError("Cannot set both parent_id and clear_parent")

        fields: dict[str, Any] = {}
        if name is not None:
            fields["name"] = required_name(name)
        if description is not None:
            fields["description"] = description
        if is_active is not None:
            fields["is_active"] = is_active

        with self.db.atomic():
            if self.db.get_business_unit(caller.tenant_id, unit_id) is None:
                raise NotFoundError(node_not_found(KIND, unit_id))
            if clear_parent:
                fields["parent_id"] = None
            elif parent_id is not None:
                if self.db.get_business_unit(caller.tenant_id, parent_id) is None:
                    raise ReferentialError(reference_not_found(KIND, parent_id))
                check_new_parent(
                    self.db.list_business_units(caller.tenant_id, include_inactive=True), unit_id, parent_id
                )
                fields["parent_id"] = parent_id
            if fields:
                self.db.update_business_unit(caller.tenant_id, unit_id, fields)
        return self.db.get_business_unit(caller.tenant_id, unit_id)

    def delete_business_unit(self, caller: Caller, unit_id: str) -> BusinessUnit:
        """Deactivate a business unit. Children and entries are untouched."""
        require_role(caller, WRITE_ROLES, "edit business units")
        with self.db.atomic():
            if self.db.get_business_unit(caller.tenant_id, unit_id) is None:
                raise NotFoundError(node_not_found(KIND, unit_id))
            self.db.update_business_unit(caller.tenant_id, unit_id, {"is_active": False})
        logger.info("business_unit_deactivated", tenant_id=caller.tenant_id, unit_id=unit_id)
        return self.db.get_business_unit(caller.tenant_id, unit_id)

    def get_tree(self, caller: Caller, include_inactive: bool = False) -> list[TreeNode]:
        return build_tree(self.list_business_units(caller, include_inactive=include_inactive))

    def format_unit_path(self, caller: Caller, unit_id: str) -> str:
        return format_path(self.list_business_units(caller, include_inactive=True), unit_id)
