"""Chart of accounts domain service."""

from typing import Optional, Any
from ledgerbook.database.base import Database
from ledgerbook.domain.access import Caller, READ_ROLES, WRITE_ROLES, require_role
from ledgerbook.domain.entities import ChartOfAccount, CoaType, NormalBalance, TreeNode
from ledgerbook.domain.errors import (
    ConflictError,
    NotFoundError,
    ReferentialError,
    ValidationError,
    duplicate_coa_code,
    node_not_found,
    reference_not_found,
)
from ledgerbook.domain.tree import (
    build_tree,
    check_new_parent,
    direct_children,
    format_path,
    required_name,
)
from ledgerbook.logging_config import get_logger
from ledgerbook.utils.csv_reader import read_csv_rows

logger = get_logger(__name__)

KIND = "Chart of account"

_TYPE_BY_LEADING_DIGIT = {
    "1": CoaType.ASSET,
    "2": CoaType.LIABILITY,
    "3": CoaType.EQUITY,
    "4": CoaType.INCOME,
}


def default_coa_type(code: str) -> CoaType:
    """Account type implied by the first digit of a code.

    1 asset, 2 liability, 3 equity, 4 income, 5-9 expense; anything else asset.
    """
    first = code.strip()[:1]
    if first in _TYPE_BY_LEADING_DIGIT:
        return _TYPE_BY_LEADING_DIGIT[first]
    if first and first in "56789":
        return CoaType.EXPENSE
    return CoaType.ASSET


def default_normal_balance(coa_type: CoaType) -> NormalBalance:
    if coa_type in (CoaType.ASSET, CoaType.EXPENSE):
        return NormalBalance.DEBIT
    return NormalBalance.CREDIT


def _coa_type(value: Any) -> CoaType:
    try:
        return CoaType(str(getattr(value, "value", value)).strip().upper())
    except ValueError:
        valid = ", ".join(t.value for t in CoaType)
        raise ValidationError(f"Invalid account type '{value}'. Use: {valid}")


def _normal_balance(value: Any) -> NormalBalance:
    try:
        return NormalBalance(str(getattr(value, "value", value)).strip().upper())
    except ValueError:
        raise ValidationError(f"Invalid normal balance '{value}'. Use: DEBIT, CREDIT")


class ChartOfAccountService:
    """Service for managing the chart of accounts."""

    def __init__(self, db: Database):
        """Initialize chart of account service.

        Args:
            db: Database instance
        """
        self.db = db

    def list_coa(self, caller: Caller, include_inactive: bool = False) -> list[ChartOfAccount]:
        """List COA nodes ordered by code."""
        require_role(caller, READ_ROLES, "view the chart of accounts")
        return self.db.list_coa(caller.tenant_id, include_inactive=include_inactive)

    def get_coa(self, caller: Caller, coa_id: str) -> Optional[ChartOfAccount]:
        require_role(caller, READ_ROLES, "view the chart of accounts")
        return self.db.get_coa(caller.tenant_id, coa_id)

    def get_coa_by_code(self, caller: Caller, code: str) -> Optional[ChartOfAccount]:
        require_role(caller, READ_ROLES, "view the chart of accounts")
        return self.db.get_coa_by_code(caller.tenant_id, code.strip())

    def _check_parent(self, tenant_id: str, parent_id: str) -> None:
        if self.db.get_coa(tenant_id, parent_id) is None:
            raise ReferentialError(reference_not_found(KIND, parent_id))

    def create_coa(
        self,
        caller: Caller,
        code: str,
        name: str,
        type: Optional[CoaType | str] = None,
        normal_balance: Optional[NormalBalance | str] = None,
        parent_id: Optional[str] = None,
        description: Optional[str] = None,
    ) -> ChartOfAccount:
        """Create a COA node.

        Args:
            caller: Caller context
            code: Account code, unique within the tenant
            name: Account name
            type: Account type (defaults from the code's first digit)
            normal_balance: DEBIT or CREDIT (defaults from the type)
            parent_id: Optional parent node in the same tenant
            description: Optional description

        Raises:
            ValidationError: If code or name is missing, or type is invalid
            ConflictError: If the code is already used in the tenant
            ReferentialError: If the parent is not in the tenant
        """
        require_role(caller, WRITE_ROLES, "edit the chart of accounts")
        code = required_name(code, "Code")
        name = required_name(name, "Name")
        coa_type = _coa_type(type) if type else default_coa_type(code)
        balance_side = _normal_balance(normal_balance) if normal_balance else default_normal_balance(coa_type)

        with self.db.atomic():
            if self.db.get_coa_by_code(caller.tenant_id, code) is not None:
                raise ConflictError(duplicate_coa_code(code))
            if parent_id is not None:
                self._check_parent(caller.tenant_id, parent_id)
            coa_id = self.db.create_coa(
                caller.tenant_id,
                code=code,
                name=name,
                type=coa_type.value,
                normal_balance=balance_side.value,
                parent_id=parent_id,
                description=description,
            )
        logger.info("coa_created", tenant_id=caller.tenant_id, coa_id=coa_id, code=code)
        return self.db.get_coa(caller.tenant_id, coa_id)

    def update_coa(
        self,
        caller: Caller,
        coa_id: str,
        code: Optional[str] = None,
        name: Optional[str] = None,
        type: Optional[CoaType | str] = None,
        normal_balance: Optional[NormalBalance | str] = None,
        parent_id: Optional[str] = None,
        description: Optional[str] = None,
        is_active: Optional[bool] = None,
        clear_parent: bool = False,
    ) -> ChartOfAccount:
        """Update a COA node.

        Raises:
            NotFoundError: If the node is not in the tenant
            ConflictError: If the new code is taken
            ValidationError: If a value is invalid or the move would create a cycle
            ReferentialError: If the new parent is not in the tenant
        """
        require_role(caller, WRITE_ROLES, "edit the chart of accounts")
        if clear_parent and parent_id is not None:
            raise ValidationError("Cannot set both parent_id and clear_parent")

        fields: dict[str, Any] = {}
        if code is not None:
            fields["code"] = required_name(code, "Code")
        if name is not None:
            fields["name"] = required_name(name, "Name")
        if type is not None:
            fields["type"] = _coa_type(type).value
        if normal_balance is not None:
            fields["normal_balance"] = _normal_balance(normal_balance).value
        if description is not None:
            fields["description"] = description
        if is_active is not None:
            fields["is_active"] = is_active

        with self.db.atomic():
            node = self.db.get_coa(caller.tenant_id, coa_id)
            if node is None:
                raise NotFoundError(node_not_found(KIND, coa_id))
            if "code" in fields and fields["code"] != node.code:
                if self.db.get_coa_by_code(caller.tenant_id, fields["code"]) is not None:
                    raise ConflictError(duplicate_coa_code(fields["code"]))
            if clear_parent:
                fields["parent_id"] = None
            elif parent_id is not None:
                self._check_parent(caller.tenant_id, parent_id)
                check_new_parent(
                    self.db.list_coa(caller.tenant_id, include_inactive=True), coa_id, parent_id
                )
                fields["parent_id"] = parent_id
            if fields:
                self.db.update_coa(caller.tenant_id, coa_id, fields)
        return self.db.get_coa(caller.tenant_id, coa_id)

    def delete_coa(self, caller: Caller, coa_id: str) -> int:
        """Delete a node and its direct children.

        Grandchildren are kept and become roots. Entries pointing at a deleted
        node lose their COA reference; balances are untouched.

        Returns:
            Number of nodes deleted

        Raises:
            NotFoundError: If the node is not in the tenant
        """
        require_role(caller, WRITE_ROLES, "edit the chart of accounts")
        with self.db.atomic():
            if self.db.get_coa(caller.tenant_id, coa_id) is None:
                raise NotFoundError(node_not_found(KIND, coa_id))
            nodes = self.db.list_coa(caller.tenant_id, include_inactive=True)
            children = direct_children(nodes, coa_id)
            doomed = [coa_id] + [c.id for c in children]
            for grandchild in (n for n in nodes if n.parent_id in doomed and n.id not in doomed):
                self.db.update_coa(caller.tenant_id, grandchild.id, {"parent_id": None})
            cleared = self.db.clear_entry_references(caller.tenant_id, "coa_id", doomed)
            deleted = self.db.delete_coa_nodes(caller.tenant_id, doomed)
        logger.info(
            "coa_deleted",
            tenant_id=caller.tenant_id,
            coa_id=coa_id,
            nodes=deleted,
            entries_cleared=cleared,
        )
        return deleted

    def get_tree(self, caller: Caller, include_inactive: bool = False) -> list[TreeNode]:
        """Get the chart as nested nodes labelled "code - name"."""
        return build_tree(self.list_coa(caller, include_inactive=include_inactive), label=lambda c: c.label)

    def format_coa_path(self, caller: Caller, coa_id: str) -> str:
        """Get full path for a node (e.g., "1000 - Assets > 1100 - Cash")."""
        return format_path(self.list_coa(caller, include_inactive=True), coa_id, label=lambda c: c.label)

    def import_csv(self, caller: Caller, csv_file_path: str) -> dict[str, Any]:
        """Upsert COA nodes from a CSV file.

        Columns: Code, Name, Type (optional), Normal Balance (optional),
        Description (optional). Existing codes are updated and reactivated;
        new codes are created. All upserts share one unit of work.

        Returns:
            Dict with import statistics:
            - imported: number of rows written
            - created: number of new nodes
            - updated: number of existing nodes updated
            - errors: list of error messages for skipped rows
        """
        require_role(caller, WRITE_ROLES, "import the chart of accounts")
        rows = read_csv_rows(csv_file_path, required_columns=("Code", "Name"))

        errors = []
        seen_codes = set()
        to_import = []
        for row_num, row in rows:
            code = row.get("code", "")
            name = row.get("name", "")
            if not code or not name:
                errors.append(f"Row {row_num}: Code and Name are required")
                continue
            if code in seen_codes:
                errors.append(f"Row {row_num}: Duplicate code '{code}' in file, row skipped")
                continue
            try:
                coa_type = _coa_type(row["type"]) if row.get("type") else default_coa_type(code)
                balance_side = (
                    _normal_balance(row["normal balance"])
                    if row.get("normal balance")
                    else default_normal_balance(coa_type)
                )
            except ValidationError as e:
                errors.append(f"Row {row_num}: {e}")
                continue
            seen_codes.add(code)
            to_import.append(
                {
                    "code": code,
                    "name": name,
                    "type": coa_type.value,
                    "normal_balance": balance_side.value,
                    "description": row.get("description") or None,
                }
            )

        created = 0
        updated = 0
        with self.db.atomic():
            for values in to_import:
                existing = self.db.get_coa_by_code(caller.tenant_id, values["code"])
                if existing is None:
                    self.db.create_coa(caller.tenant_id, **values)
                    created += 1
                else:
                    fields = {k: v for k, v in values.items() if k != "code"}
                    fields["is_active"] = True
                    self.db.update_coa(caller.tenant_id, existing.id, fields)
                    updated += 1

        logger.info(
            "coa_imported",
            tenant_id=caller.tenant_id,
            created=created,
            updated=updated,
            errors=len(errors),
        )
        return {
            "imported": created + updated,
            "created": created,
            "updated": updated,
            "errors": errors,
        }
