"""Validation -- Pure input validation for the stock ledger.

Field-level helpers return ``list[ValidationError]``; the entry points a
service calls return a ``ValidationResult``.  Nothing here touches storage.
"""

from decimal import Decimal, InvalidOperation
from typing import Any

from inventory_kernel.domain.dtos import (
    ProposedMovement,
    SupplyAttributes,
    SupplyPatch,
    ValidationError,
    ValidationResult,
)
from inventory_kernel.domain.values import (
    MAX_DESCRIPTION_LENGTH,
    MAX_HISTORY_LIMIT,
    MAX_MOVEMENT_QUANTITY,
    MAX_NOTE_LENGTH,
    MAX_REF_TABLE_LENGTH,
    QUANTITY_DECIMAL_PLACES,
    ZERO,
    MovementKind,
    to_quantity,
)
from inventory_kernel.exceptions import InventoryValidationError
from inventory_kernel.logging_config import get_logger

logger = get_logger("domain.validation")


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def require_valid(result: ValidationResult) -> None:
    """Raise InventoryValidationError carrying every violation in ``result``."""
    if not result.is_valid:
        raise InventoryValidationError(result.errors)


def _result(operation: str, errors: list[ValidationError]) -> ValidationResult:
    if errors:
        logger.warning(
            "validation_failed",
            extra={
                "operation": operation,
                "error_count": len(errors),
                "error_codes": [e.code for e in errors],
            },
        )
        return ValidationResult.failure(*errors)
    return ValidationResult.success()


# Field validators


def validate_id(value: Any, field: str = "id_supply") -> list[ValidationError]:
    """Validate a required positive integer id."""
    if not _is_int(value) or value <= 0:
        return [
            ValidationError(
                code="INVALID_ID",
                message=f"{field} must be a positive integer",
                field=field,
            )
        ]
    return []


def validate_optional_id(value: Any, field: str) -> list[ValidationError]:
    if value is None:
        return []
    return validate_id(value, field)


def validate_description(value: Any) -> list[ValidationError]:
    """Description is required, non-blank and at most 200 characters."""
    if value is None or (isinstance(value, str) and not value.strip()):
        return [
            ValidationError(
                code="DESCRIPTION_REQUIRED",
                message="description is required",
                field="description",
            )
        ]
    if not isinstance(value, str):
        return [
            ValidationError(
                code="INVALID_DESCRIPTION",
                message="description must be a string",
                field="description",
            )
        ]
    if len(value) > MAX_DESCRIPTION_LENGTH:
        return [
            ValidationError(
                code="DESCRIPTION_TOO_LONG",
                message=f"description cannot exceed {MAX_DESCRIPTION_LENGTH} characters",
                field="description",
                details={"length": len(value), "max": MAX_DESCRIPTION_LENGTH},
            )
        ]
    return []


def validate_note(value: Any, field: str = "notes") -> list[ValidationError]:
    if value is None:
        return []
    if not isinstance(value, str):
        return [
            ValidationError(
                code="INVALID_NOTE",
                message=f"{field} must be a string",
                field=field,
            )
        ]
    if len(value) > MAX_NOTE_LENGTH:
        return [
            ValidationError(
                code="NOTE_TOO_LONG",
                message=f"{field} cannot exceed {MAX_NOTE_LENGTH} characters",
                field=field,
                details={"length": len(value), "max": MAX_NOTE_LENGTH},
            )
        ]
    return []


def validate_ref(ref_table: Any, ref_id: Any) -> list[ValidationError]:
    """
    Validate an optional provenance tag.

    ref_table and ref_id must be given together.  The tag is opaque: the
    referenced table and row are not checked for existence.
    """
    if ref_table is None and ref_id is None:
        return []
    if ref_table is None or ref_id is None:
        return [
            ValidationError(
                code="INCOMPLETE_REFERENCE",
                message="ref_table and ref_id must be provided together",
                field="ref_table" if ref_table is None else "ref_id",
            )
        ]

    errors: list[ValidationError] = []
    if not isinstance(ref_table, str) or not ref_table.strip():
        errors.append(
            ValidationError(
                code="INVALID_REFERENCE",
                message="ref_table must be a non-empty string",
                field="ref_table",
            )
        )
    elif len(ref_table) > MAX_REF_TABLE_LENGTH:
        errors.append(
            ValidationError(
                code="INVALID_REFERENCE",
                message=f"ref_table cannot exceed {MAX_REF_TABLE_LENGTH} characters",
                field="ref_table",
            )
        )
    errors.extend(validate_id(ref_id, "ref_id"))
    return errors


def _parse_quantity(value: Any, field: str) -> tuple[Decimal | None, list[ValidationError]]:
    if value is None:
        return None, [
            ValidationError(
                code="QUANTITY_REQUIRED",
                message=f"{field} is required",
                field=field,
            )
        ]
    if isinstance(value, bool) or not isinstance(value, (Decimal, int, float, str)):
        return None, [
            ValidationError(
                code="INVALID_QUANTITY",
                message=f"{field} must be a number",
                field=field,
            )
        ]
    try:
        quantity = to_quantity(value)
    except (InvalidOperation, ValueError):
        return None, [
            ValidationError(
                code="INVALID_QUANTITY",
                message=f"{field} must be a number",
                field=field,
            )
        ]
    if not quantity.is_finite():
        return None, [
            ValidationError(
                code="INVALID_QUANTITY",
                message=f"{field} must be a finite number",
                field=field,
            )
        ]
    return quantity, []


def _check_magnitude(quantity: Decimal, field: str) -> list[ValidationError]:
    errors: list[ValidationError] = []
    if abs(quantity) > MAX_MOVEMENT_QUANTITY:
        errors.append(
            ValidationError(
                code="QUANTITY_TOO_LARGE",
                message=f"{field} cannot exceed {MAX_MOVEMENT_QUANTITY}",
                field=field,
                details={"max": str(MAX_MOVEMENT_QUANTITY)},
            )
        )
    elif quantity.normalize().as_tuple().exponent < -QUANTITY_DECIMAL_PLACES:
        errors.append(
            ValidationError(
                code="QUANTITY_TOO_PRECISE",
                message=f"{field} allows at most {QUANTITY_DECIMAL_PLACES} decimal places",
                field=field,
            )
        )
    return errors


def validate_positive_quantity(value: Any, field: str = "quantity") -> list[ValidationError]:
    """A stock request quantity: > 0, <= 999999.9999, <= 4 decimal places."""
    quantity, errors = _parse_quantity(value, field)
    if errors:
        return errors
    if quantity <= ZERO:
        return [
            ValidationError(
                code="QUANTITY_NOT_POSITIVE",
                message=f"{field} must be greater than 0",
                field=field,
            )
        ]
    return _check_magnitude(quantity, field)


def validate_signed_quantity(value: Any, kind: MovementKind) -> list[ValidationError]:
    """A movement quantity: non-zero, and its sign must match the kind."""
    quantity, errors = _parse_quantity(value, "quantity")
    if errors:
        return errors
    if quantity == ZERO:
        return [
            ValidationError(
                code="ZERO_QUANTITY",
                message="quantity cannot be zero",
                field="quantity",
            )
        ]
    if (quantity > ZERO) != kind.is_positive:
        expected = "positive" if kind.is_positive else "negative"
        return [
            ValidationError(
                code="SIGN_MISMATCH",
                message=f"{kind.value} movements require a {expected} quantity",
                field="quantity",
                details={"kind": kind.value, "quantity": str(quantity)},
            )
        ]
    return _check_magnitude(quantity, "quantity")


# Entry points


def validate_supply_attributes(attributes: SupplyAttributes) -> ValidationResult:
    errors = validate_description(attributes.description)
    errors += validate_optional_id(attributes.id_supply_type, "id_supply_type")
    errors += validate_optional_id(attributes.id_supply_color, "id_supply_color")
    errors += validate_optional_id(attributes.measuring_uom_id, "measuring_uom_id")
    return _result("create_supply", errors)


def validate_supply_patch(patch: SupplyPatch) -> ValidationResult:
    """Reject an empty patch; re-validate every attribute it carries."""
    if patch.is_empty:
        return _result(
            "update_supply",
            [
                ValidationError(
                    code="EMPTY_PATCH",
                    message="At least one field must be provided for update",
                )
            ],
        )
    errors: list[ValidationError] = []
    if patch.description is not None:
        errors += validate_description(patch.description)
    errors += validate_optional_id(patch.id_supply_type, "id_supply_type")
    errors += validate_optional_id(patch.id_supply_color, "id_supply_color")
    errors += validate_optional_id(patch.measuring_uom_id, "measuring_uom_id")
    return _result("update_supply", errors)


def validate_stock_request(
    supply_id: Any,
    quantity: Any,
    notes: Any = None,
    ref_table: Any = None,
    ref_id: Any = None,
) -> ValidationResult:
    """Validate the arguments of receive/issue/return."""
    errors = validate_id(supply_id)
    errors += validate_positive_quantity(quantity)
    errors += validate_note(notes)
    errors += validate_ref(ref_table, ref_id)
    return _result("stock_request", errors)


def validate_proposed_movement(movement: ProposedMovement) -> ValidationResult:
    """Validate kind, sign, non-zero quantity, note, and provenance tag."""
    errors = validate_id(movement.supply_id)
    if not isinstance(movement.kind, MovementKind):
        errors.append(
            ValidationError(
                code="INVALID_MOVEMENT_KIND",
                message=f"Unknown movement kind: {movement.kind!r}",
                field="kind",
            )
        )
    else:
        errors += validate_signed_quantity(movement.quantity, movement.kind)
    errors += validate_note(movement.notes)
    errors += validate_ref(movement.ref_table, movement.ref_id)
    return _result("record_movement", errors)


def validate_history_window(limit: Any, offset: Any) -> ValidationResult:
    errors: list[ValidationError] = []
    if not _is_int(limit) or not 1 <= limit <= MAX_HISTORY_LIMIT:
        errors.append(
            ValidationError(
                code="INVALID_LIMIT",
                message=f"limit must be an integer between 1 and {MAX_HISTORY_LIMIT}",
                field="limit",
            )
        )
    if not _is_int(offset) or offset < 0:
        errors.append(
            ValidationError(
                code="INVALID_OFFSET",
                message="offset must be a non-negative integer",
                field="offset",
            )
        )
    return _result("history", errors)


def validate_threshold(threshold: Any) -> ValidationResult:
    if not _is_int(threshold) or threshold < 0:
        return _result(
            "low_stock",
            [
                ValidationError(
                    code="INVALID_THRESHOLD",
                    message="threshold must be a non-negative integer",
                    field="threshold",
                )
            ],
        )
    return ValidationResult.success()


def validate_supply_id(supply_id: Any) -> ValidationResult:
    return _result("supply_lookup", validate_id(supply_id))


def validate_list_filters(id_supply_type: Any, id_supply_color: Any) -> ValidationResult:
    errors = validate_optional_id(id_supply_type, "id_supply_type")
    errors += validate_optional_id(id_supply_color, "id_supply_color")
    return _result("list_supplies", errors)


def validate_adjustment(supply_id: Any, quantity: Any, notes: Any = None) -> ValidationResult:
    """A manual correction: non-zero signed quantity within the request limits."""
    errors = validate_id(supply_id)
    parsed, quantity_errors = _parse_quantity(quantity, "quantity")
    if not quantity_errors and parsed == ZERO:
        quantity_errors = [
            ValidationError(
                code="ZERO_QUANTITY",
                message="quantity cannot be zero",
                field="quantity",
            )
        ]
    elif not quantity_errors:
        quantity_errors = _check_magnitude(parsed, "quantity")
    errors += quantity_errors
    errors += validate_note(notes)
    return _result("adjust_stock", errors)
