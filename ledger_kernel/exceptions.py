"""
Typed Exception Hierarchy for the Ledger Kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

Callers must never parse error messages to decide what happened.  Every
error raised by the kernel or its modules:
  1. Has a TYPED exception class (catch by type, not message)
  2. Has a CODE class attribute (machine-readable, API-safe)
  3. Has a KIND inherited from one of three bases, which is what the API
     layer maps to a transport status
  4. Carries structured DATA as attributes (not just a message string)

Example:
    try:
        payments.create_payment(tenant_id, invoice_id, amount, ...)
    except PaymentExceedsOutstandingError as e:
        respond(400, code=e.code, outstanding=str(e.outstanding))
    except NotFoundError as e:
        respond(404, code=e.code, message=str(e))

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    LedgerError (base)
    |
    +-- NotFoundError                       kind = NOT_FOUND
    |   +-- TenantNotFoundError
    |   +-- AccountNotFoundError
    |   +-- JournalEntryNotFoundError
    |   +-- InvoiceNotFoundError
    |   +-- PaymentNotFoundError
    |   +-- UnknownModuleError
    |   +-- TenantModuleNotEnabledError
    |
    +-- ConflictError                       kind = CONFLICT
    |   +-- DuplicateTenantSlugError
    |   +-- InvalidTenantNameError
    |   +-- DuplicateAccountCodeError
    |   +-- ChartAlreadySeededError
    |   +-- ModuleUnavailableError
    |   +-- DocumentNumberConflictError
    |
    +-- BadRequestError                     kind = BAD_REQUEST
        +-- JournalLineError
        |   +-- InsufficientLinesError
        |   +-- NegativeAmountError
        |   +-- EmptyLineError
        |   +-- DoubleSidedLineError
        +-- UnbalancedEntryError
        +-- UnresolvedAccountsError
        +-- ParentAccountNotFoundError
        +-- AccountTypeMismatchError
        +-- AccountHasChildrenError
        +-- AccountReferencedError
        +-- MissingWellKnownAccountsError
        +-- InvalidInvoiceLineError
        +-- InvalidStatusError
        +-- InvoiceCancelledError
        +-- InvoicePaidCancellationError
        +-- InvalidPaymentAmountError
        +-- PaymentExceedsOutstandingError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Kind        | Code                        | When Raised
------------|-----------------------------|-----------------------------------------
NOT_FOUND   | TENANT_NOT_FOUND            | Tenant id / slug doesn't exist
            | ACCOUNT_NOT_FOUND           | Account absent or in another tenant
            | JOURNAL_ENTRY_NOT_FOUND     | Entry absent or in another tenant
            | INVOICE_NOT_FOUND           | Invoice absent or in another tenant
            | PAYMENT_NOT_FOUND           | Payment absent or in another tenant
            | UNKNOWN_MODULE              | Module code not in the catalog
            | MODULE_NOT_ENABLED          | Module not enabled for the tenant
------------|-----------------------------|-----------------------------------------
CONFLICT    | DUPLICATE_TENANT_SLUG       | Company name slug already registered
            | INVALID_TENANT_NAME         | Company name slugifies to ""
            | DUPLICATE_ACCOUNT_CODE      | Account code already used in tenant
            | CHART_ALREADY_SEEDED        | Reseed over an existing chart
            | MODULE_UNAVAILABLE          | Catalog module is inactive
            | DOCUMENT_NUMBER_CONFLICT    | Entry/invoice number collided at flush
------------|-----------------------------|-----------------------------------------
BAD_REQUEST | INSUFFICIENT_LINES          | Fewer than 2 journal lines
            | NEGATIVE_AMOUNT             | Debit or credit < 0
            | EMPTY_LINE                  | Debit and credit both zero
            | DOUBLE_SIDED_LINE           | Debit and credit both > 0
            | UNBALANCED_ENTRY            | |debits - credits| > 0.01
            | UNRESOLVED_ACCOUNTS         | Line account not in tenant
            | PARENT_ACCOUNT_NOT_FOUND    | parent_id not in tenant
            | ACCOUNT_TYPE_MISMATCH       | Child type differs from parent
            | ACCOUNT_HAS_CHILDREN        | Remove with child accounts
            | ACCOUNT_REFERENCED          | Remove with journal line references
            | MISSING_WELL_KNOWN_ACCOUNTS | Cash/Bank/AR/Revenue missing
            | INVALID_INVOICE_LINE        | Bad quantity / unit price / no lines
            | INVALID_STATUS              | Unknown invoice status value
            | INVOICE_CANCELLED           | Payment against cancelled invoice
            | INVOICE_HAS_PAYMENTS        | Cancelling a (partially) paid invoice
            | INVALID_PAYMENT_AMOUNT      | Payment amount <= 0
            | INVALID_PAYMENT_METHOD      | Payment method not CASH, BANK or CHEQUE
            | PAYMENT_EXCEEDS_OUTSTANDING | Payment amount > outstanding balance

===============================================================================
"""

from decimal import Decimal


class LedgerError(Exception):
    """
    Base exception for all ledger errors.

    All subclasses must have a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "LEDGER_ERROR"
    kind: str = "INTERNAL"


# Kind bases


class NotFoundError(LedgerError):
    """Referenced entity absent or outside tenant scope."""

    code: str = "NOT_FOUND"
    kind: str = "NOT_FOUND"


class ConflictError(LedgerError):
    """Duplicate unique key."""

    code: str = "CONFLICT"
    kind: str = "CONFLICT"


class BadRequestError(LedgerError):
    """Semantic or business-rule violation."""

    code: str = "BAD_REQUEST"
    kind: str = "BAD_REQUEST"


# Not found


class TenantNotFoundError(NotFoundError):
    """Tenant was not found."""

    code: str = "TENANT_NOT_FOUND"

    def __init__(self, tenant_ref: str):
        self.tenant_ref = tenant_ref
        super().__init__(f"Tenant not found: {tenant_ref}")


class AccountNotFoundError(NotFoundError):
    """Account was not found in the tenant."""

    code: str = "ACCOUNT_NOT_FOUND"

    def __init__(self, account_id: str):
        self.account_id = account_id
        super().__init__("Account not found")


class JournalEntryNotFoundError(NotFoundError):
    """Journal entry was not found in the tenant."""

    code: str = "JOURNAL_ENTRY_NOT_FOUND"

    def __init__(self, entry_id: str):
        self.entry_id = entry_id
        super().__init__("Journal entry not found")


class InvoiceNotFoundError(NotFoundError):
    """Invoice was not found in the tenant."""

    code: str = "INVOICE_NOT_FOUND"

    def __init__(self, invoice_id: str):
        self.invoice_id = invoice_id
        super().__init__("Invoice not found")


class PaymentNotFoundError(NotFoundError):
    """Payment was not found in the tenant."""

    code: str = "PAYMENT_NOT_FOUND"

    def __init__(self, payment_id: str):
        self.payment_id = payment_id
        super().__init__("Payment not found")


class UnknownModuleError(NotFoundError):
    """Module code is not in the catalog."""

    code: str = "UNKNOWN_MODULE"

    def __init__(self, module_code: str):
        self.module_code = module_code
        super().__init__(f"Module '{module_code}' not found")


class TenantModuleNotEnabledError(NotFoundError):
    """Module is not enabled for the tenant."""

    code: str = "MODULE_NOT_ENABLED"

    def __init__(self, module_code: str):
        self.module_code = module_code
        super().__init__(
            f"Module '{module_code}' is not enabled for your organization"
        )


# Conflict


class DuplicateTenantSlugError(ConflictError):
    """A tenant with the same slug already exists."""

    code: str = "DUPLICATE_TENANT_SLUG"

    def __init__(self, slug: str):
        self.slug = slug
        super().__init__(
            f'Company with slug "{slug}" already exists. '
            "Try a different company name."
        )


class InvalidTenantNameError(ConflictError):
    """Company name produces an empty slug."""

    code: str = "INVALID_TENANT_NAME"

    def __init__(self, name: str):
        self.name = name
        super().__init__("Invalid company name")


class DuplicateAccountCodeError(ConflictError):
    """Account code already used in the tenant."""

    code: str = "DUPLICATE_ACCOUNT_CODE"

    def __init__(self, account_code: str):
        self.account_code = account_code
        super().__init__(f"Account with code '{account_code}' already exists")


class ChartAlreadySeededError(ConflictError):
    """Tenant already has accounts; the default chart cannot be reseeded."""

    code: str = "CHART_ALREADY_SEEDED"

    def __init__(self, tenant_id: str):
        self.tenant_id = tenant_id
        super().__init__(
            "Chart of accounts already exists. "
            "Delete existing accounts first to reseed."
        )


class ModuleUnavailableError(ConflictError):
    """Catalog module exists but is inactive."""

    code: str = "MODULE_UNAVAILABLE"

    def __init__(self, module_code: str):
        self.module_code = module_code
        super().__init__(f"Module '{module_code}' is not available")


class DocumentNumberConflictError(ConflictError):
    """A generated entry or invoice number collided with an existing one."""

    code: str = "DOCUMENT_NUMBER_CONFLICT"

    def __init__(self, document_number: str):
        self.document_number = document_number
        super().__init__(f"Document number already in use: {document_number}")


# Bad request: journal lines


class JournalLineError(BadRequestError):
    """Base exception for per-line journal validation failures."""

    code: str = "JOURNAL_LINE_ERROR"


class InsufficientLinesError(JournalLineError):
    """Fewer than two lines supplied."""

    code: str = "INSUFFICIENT_LINES"

    def __init__(self, line_count: int):
        self.line_count = line_count
        super().__init__("Minimum 2 lines required for double-entry")


class NegativeAmountError(JournalLineError):
    """A line carries a negative debit or credit."""

    code: str = "NEGATIVE_AMOUNT"

    def __init__(self, line_number: int):
        self.line_number = line_number
        super().__init__(f"Line {line_number}: Amounts must be >= 0")


class EmptyLineError(JournalLineError):
    """A line has neither debit nor credit."""

    code: str = "EMPTY_LINE"

    def __init__(self, line_number: int):
        self.line_number = line_number
        super().__init__(f"Line {line_number}: Either debit or credit must be > 0")


class DoubleSidedLineError(JournalLineError):
    """A line carries both debit and credit."""

    code: str = "DOUBLE_SIDED_LINE"

    def __init__(self, line_number: int):
        self.line_number = line_number
        super().__init__(
            f"Line {line_number}: Cannot have both debit and credit > 0"
        )


class UnbalancedEntryError(BadRequestError):
    """Journal entry debits do not equal credits."""

    code: str = "UNBALANCED_ENTRY"

    def __init__(self, debits: Decimal, credits: Decimal):
        self.debits = debits
        self.credits = credits
        super().__init__(f"Debits ({debits}) must equal credits ({credits})")


class UnresolvedAccountsError(BadRequestError):
    """Journal lines reference accounts outside the tenant."""

    code: str = "UNRESOLVED_ACCOUNTS"

    def __init__(self, account_ids: list[str]):
        self.account_ids = account_ids
        super().__init__(
            "Account(s) not found or do not belong to your organization: "
            + ", ".join(account_ids)
        )


# Bad request: account registry


class ParentAccountNotFoundError(BadRequestError):
    """parent_id does not resolve to an account in the tenant."""

    code: str = "PARENT_ACCOUNT_NOT_FOUND"

    def __init__(self, parent_id: str):
        self.parent_id = parent_id
        super().__init__(
            "Parent account not found or does not belong to your organization"
        )


class AccountTypeMismatchError(BadRequestError):
    """Child account type differs from its parent's."""

    code: str = "ACCOUNT_TYPE_MISMATCH"

    def __init__(self, parent_type: str, child_type: str):
        self.parent_type = parent_type
        self.child_type = child_type
        super().__init__("Child account type must match parent account type")


class AccountHasChildrenError(BadRequestError):
    """Account cannot be removed while it has child accounts."""

    code: str = "ACCOUNT_HAS_CHILDREN"

    def __init__(self, account_id: str):
        self.account_id = account_id
        super().__init__(
            "Cannot delete account that has child accounts. "
            "Remove or reassign children first."
        )


class AccountReferencedError(BadRequestError):
    """Account cannot be removed because journal lines reference it."""

    code: str = "ACCOUNT_REFERENCED"

    def __init__(self, account_id: str):
        self.account_id = account_id
        super().__init__(
            "Cannot delete account that has been used in journal entries. "
            "Deactivate it instead."
        )


class MissingWellKnownAccountsError(BadRequestError):
    """Accounts required for automatic postings are missing."""

    code: str = "MISSING_WELL_KNOWN_ACCOUNTS"

    def __init__(self, required: dict[str, str]):
        self.required = required
        listing = ", ".join(f"{name} ({code})" for name, code in required.items())
        super().__init__(f"Chart of accounts incomplete. Ensure {listing} exist.")


# Bad request: subledger


class InvalidInvoiceLineError(BadRequestError):
    """Invoice lines are missing or carry invalid quantity / price."""

    code: str = "INVALID_INVOICE_LINE"

    def __init__(self, reason: str, line_number: int | None = None):
        self.reason = reason
        self.line_number = line_number
        prefix = f"Line {line_number}: " if line_number is not None else ""
        super().__init__(f"{prefix}{reason}")


class InvalidStatusError(BadRequestError):
    """Unknown invoice status value."""

    code: str = "INVALID_STATUS"

    def __init__(self, status: str):
        self.status = status
        super().__init__(f"Invalid invoice status: {status}")


class InvoiceCancelledError(BadRequestError):
    """Payment attempted against a cancelled invoice."""

    code: str = "INVOICE_CANCELLED"

    def __init__(self, invoice_number: str):
        self.invoice_number = invoice_number
        super().__init__(f"Invoice {invoice_number} is cancelled")


class InvoicePaidCancellationError(BadRequestError):
    """Invoice with payments cannot be cancelled."""

    code: str = "INVOICE_HAS_PAYMENTS"

    def __init__(self, invoice_number: str, paid_amount: Decimal):
        self.invoice_number = invoice_number
        self.paid_amount = paid_amount
        super().__init__("Cannot cancel invoice that has received payments")


class InvalidPaymentAmountError(BadRequestError):
    """Payment amount must be strictly positive."""

    code: str = "INVALID_PAYMENT_AMOUNT"

    def __init__(self, amount: Decimal):
        self.amount = amount
        super().__init__("Amount must be greater than 0")


class PaymentExceedsOutstandingError(BadRequestError):
    """Payment amount is larger than the invoice's outstanding balance."""

    code: str = "PAYMENT_EXCEEDS_OUTSTANDING"

    def __init__(self, amount: Decimal, outstanding: Decimal):
        self.amount = amount
        self.outstanding = outstanding
        super().__init__(
            f"Amount ({amount}) exceeds outstanding balance ({outstanding})"
        )


class InvalidPaymentMethodError(BadRequestError):
    """Payment method is not one of CASH, BANK, CHEQUE."""

    code: str = "INVALID_PAYMENT_METHOD"

    def __init__(self, method: str):
        self.method = method
        super().__init__(f"Invalid payment method: {method}")
