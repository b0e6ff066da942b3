"""Category domain service."""

from typing import Optional, Any
from ledgerbook.database.base import Database
from ledgerbook.domain.access import Caller, READ_ROLES, WRITE_ROLES, require_role
from ledgerbook.domain.entities import CategoryType, TransactionCategory, TreeNode
from ledgerbook.domain.errors import (
    NotFoundError,
    ReferentialError,
    ValidationError,
    node_not_found,
    node_path_not_found,
    reference_not_found,
)
from ledgerbook.domain.tree import (
    build_tree,
    check_new_parent,
    direct_children,
    find_by_path,
    format_path,
    required_name,
)
from ledgerbook.logging_config import get_logger
from ledgerbook.utils.csv_reader import read_csv_rows

logger = get_logger(__name__)

KIND = "Category"


def _category_type(value: Any) -> CategoryType:
    if value is None or not str(getattr(value, "value", value)).strip():
        raise ValidationError("Category type is required")
    try:
        return CategoryType(str(getattr(value, "value", value)).strip().upper())
    except ValueError:
        raise ValidationError(f"Invalid category type '{value}'. Use: INCOME, EXPENSE")


class CategoryService:
    """Service for managing categories."""

    def __init__(self, db: Database):
        """Initialize category service.

        Args:
            db: Database instance
        """
        self.db = db

    def _resolve_parent(
        self, tenant_id: str, parent_id: Optional[str], parent_path: Optional[str]
    ) -> Optional[str]:
        if parent_id is not None and parent_path is not None:
            raise ValidationError("Give either parent_id or parent_path, not both")
        if parent_path is not None:
            parent = find_by_path(self.db.list_categories(tenant_id), parent_path)
            if parent is None:
                raise ReferentialError(node_path_not_found(f"Parent {KIND.lower()}", parent_path))
            return parent.id
        if parent_id is not None and self.db.get_category(tenant_id, parent_id) is None:
            raise ReferentialError(reference_not_found(KIND, parent_id))
        return parent_id

    def create_category(
        self,
        caller: Caller,
        name: str,
        type: CategoryType | str,
        parent_id: Optional[str] = None,
        parent_path: Optional[str] = None,
    ) -> TransactionCategory:
        """Create a category.

        Args:
            caller: Caller context
            name: Category name
            type: INCOME or EXPENSE
            parent_id: Optional parent category ID
            parent_path: Optional parent category path (e.g., "Operating")

        Raises:
            ValidationError: If name or type is missing or invalid
            ReferentialError: If the parent is not in the tenant
        """
        require_role(caller, WRITE_ROLES, "edit categories")
        name = required_name(name)
        category_type = _category_type(type)

        with self.db.atomic():
            parent = self._resolve_parent(caller.tenant_id, parent_id, parent_path)
            category_id = self.db.create_category(
                caller.tenant_id, name=name, type=category_type.value, parent_id=parent
            )
        logger.info("category_created", tenant_id=caller.tenant_id, category_id=category_id)
        return self.db.get_category(caller.tenant_id, category_id)

    def get_category(self, caller: Caller, category_id: str) -> Optional[TransactionCategory]:
        """Get category by ID.

        Returns:
            Category or None if not found
        """
        require_role(caller, READ_ROLES, "view categories")
        return self.db.get_category(caller.tenant_id, category_id)

    def get_category_by_path(self, caller: Caller, path: str) -> Optional[TransactionCategory]:
        """Get category by path.

        Args:
            caller: Caller context
            path: Category path (e.g., "Operating > Utilities")

        Returns:
            Category or None if not found
        """
        return find_by_path(self.list_categories(caller), path)

    def list_categories(self, caller: Caller) -> list[TransactionCategory]:
        """List categories ordered by type, then name."""
        require_role(caller, READ_ROLES, "view categories")
        return self.db.list_categories(caller.tenant_id)

    def update_category(
        self,
        caller: Caller,
        category_id: str,
        name: Optional[str] = None,
        type: Optional[CategoryType | str] = None,
        parent_id: Optional[str] = None,
        parent_path: Optional[str] = None,
        clear_parent: bool = False,
    ) -> TransactionCategory:
        """Rename, retype or move a category.

        Raises:
            NotFoundError: If category not found
            ValidationError: If a value is invalid or the move would create a cycle
            ReferentialError: If the new parent is not in the tenant
        """
        require_role(caller, WRITE_ROLES, "edit categories")
        if clear_parent and (parent_id is not None or parent_path is not None):
            raise ValidationError("Cannot set both a parent and clear_parent")

        fields: dict[str, Any] = {}
        if name is not None:
            fields["name"] = required_name(name)
        if type is not None:
            fields["type"] = _category_type(type).value

        with self.db.atomic():
            if self.db.get_category(caller.tenant_id, category_id) is None:
                raise NotFoundError(node_not_found(KIND, category_id))
            if clear_parent:
                fields["parent_id"] = None
            elif parent_id is not None or parent_path is not None:
                new_parent = self._resolve_parent(caller.tenant_id, parent_id, parent_path)
                check_new_parent(self.db.list_categories(caller.tenant_id), category_id, new_parent)
                fields["parent_id"] = new_parent
            if fields:
                self.db.update_category(caller.tenant_id, category_id, fields)
        return self.db.get_category(caller.tenant_id, category_id)

    def delete_category(self, caller: Caller, category_id: str) -> int:
        """Delete a category and its direct children.

        Grandchildren become roots. Entries pointing at a deleted category
        lose their category reference.

        Returns:
            Number of categories deleted

        Raises:
            NotFoundError: If category not found
        """
        require_role(caller, WRITE_ROLES, "edit categories")
        with self.db.atomic():
            if self.db.get_category(caller.tenant_id, category_id) is None:
                raise NotFoundError(node_not_found(KIND, category_id))
            categories = self.db.list_categories(caller.tenant_id)
            doomed = [category_id] + [c.id for c in direct_children(categories, category_id)]
            for orphan in (c for c in categories if c.parent_id in doomed and c.id not in doomed):
                self.db.update_category(caller.tenant_id, orphan.id, {"parent_id": None})
            self.db.clear_entry_references(caller.tenant_id, "category_id", doomed)
            deleted = self.db.delete_categories(caller.tenant_id, doomed)
        logger.info("category_deleted", tenant_id=caller.tenant_id, category_id=category_id, nodes=deleted)
        return deleted

    def get_category_tree(self, caller: Caller) -> list[TreeNode]:
        """Get full category tree.

        Returns:
            List of root categories with nested children
        """
        return build_tree(self.list_categories(caller))

    def format_category_path(self, caller: Caller, category_id: str) -> str:
        """Get full path for a category (e.g., "Operating > Utilities")."""
        return format_path(self.list_categories(caller), category_id)

    def import_csv(self, caller: Caller, csv_file_path: str) -> dict[str, Any]:
        """Create categories from a CSV file.

        Columns: Name, Type, Parent (optional, the parent's name). Names are
        matched case-insensitively within a type; categories that already
        exist are skipped. Roots are created first, then children in file
        order, so a child may name a parent defined anywhere above it or
        among the roots. All inserts share one unit of work.

        Returns:
            Dict with import statistics:
            - imported: number of categories created
            - skipped: number of rows naming an existing category
            - errors: list of error messages for rejected rows
        """
        require_role(caller, WRITE_ROLES, "import categories")
        rows = read_csv_rows(csv_file_path, required_columns=("Name", "Type"))

        errors = []
        parsed = []
        for row_num, row in rows:
            try:
                name = required_name(row.get("name"))
                category_type = _category_type(row.get("type"))
            except ValidationError as e:
                errors.append(f"Row {row_num}: {e}")
                continue
            parsed.append((row_num, name, category_type, row.get("parent") or None))

        imported = 0
        skipped = 0
        with self.db.atomic():
            known = {
                (c.name.upper(), c.type.value): c.id for c in self.db.list_categories(caller.tenant_id)
            }
            roots = [p for p in parsed if p[3] is None]
            children = [p for p in parsed if p[3] is not None]
            for row_num, name, category_type, parent_name in roots + children:
                key = (name.upper(), category_type.value)
                if key in known:
                    skipped += 1
                    continue
                parent_id = None
                if parent_name is not None:
                    parent_id = known.get((parent_name.upper(), category_type.value))
                    if parent_id is None:
                        errors.append(
                            f"Row {row_num}: Parent {KIND.lower()} '{parent_name}' not found "
                            f"for type {category_type.value}"
                        )
                        continue
                known[key] = self.db.create_category(
                    caller.tenant_id, name=name, type=category_type.value, parent_id=parent_id
                )
                imported += 1

        logger.info(
            "categories_imported",
            tenant_id=caller.tenant_id,
            imported=imported,
            skipped=skipped,
            errors=len(errors),
        )
        return {"imported": imported, "skipped": skipped, "errors": errors}
