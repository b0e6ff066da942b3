"""Shared domain error messages and error types."""


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""


class NotFoundError(DomainError):
    """Requested entity does not exist in the caller's tenant.

    Raised identically for ids that exist in another tenant.
    """


class ReferentialError(DomainError):
    """A referenced account, category, COA node or unit is not usable by the caller's tenant."""


class ConflictError(DomainError):
    """Domain conflict, such as uniqueness violations."""


class BatchNotFoundError(NotFoundError, ConflictError):
    """Undo requested for a batch id that has no ledger rows."""


class PermissionDeniedError(DomainError):
    """Caller's role may not perform the operation."""


class TransactionAbortError(DomainError):
    """The store aborted a unit of work; nothing from it was committed."""


def account_not_found(account_id: str) -> str:
    """Return message for missing financial account."""
    return f"Account {account_id} not found"


def entry_not_found(entry_id: str) -> str:
    """Return message for missing ledger entry."""
    return f"Transaction {entry_id} not found"


def node_not_found(kind: str, node_id: str) -> str:
    """Return message for a missing tree node (COA, category, business unit)."""
    return f"{kind} {node_id} not found"


def node_path_not_found(kind: str, path: str) -> str:
    """Return message for missing tree node by path."""
    return f"{kind} '{path}' not found"


def reference_not_found(kind: str, node_id: str) -> str:
    """Return message for a reference that does not resolve in the tenant."""
    return f"{kind} {node_id} does not exist in this tenant"


def batch_not_found(batch_id: str) -> str:
    """Return message for an undo against an empty or already-undone batch."""
    return f"Batch '{batch_id}' not found or already undone"


def duplicate_account_name(name: str) -> str:
    """Return message for duplicate account name within a tenant."""
    return f"Account with name '{name}' already exists"


def duplicate_coa_code(code: str) -> str:
    """Return message for duplicate COA code within a tenant."""
    return f"Account code '{code}' is already in use"


def role_not_allowed(role: str, action: str) -> str:
    """Return message for a role-gated operation."""
    return f"Role {role} is not allowed to {action}"
