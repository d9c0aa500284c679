"""Mass-balance reconciliation between mapped ingredients and package weight.

Everything here is a pure function of the mappings passed in; results are
recomputed on every read and never stored.
"""

from collections.abc import Iterable

from src.models.enums import BalanceStatus, Unit
from src.schemas.formulation import Reconciliation
from src.schemas.mapping import ProductMapping

# Absolute tolerance, in the product's own unit
DEFAULT_TOLERANCE = 0.01


def mapped_weight(mappings: Iterable[ProductMapping], product_id: str) -> float:
    """Sum of mapped quantities for one product (0 when it has none)."""
    return sum(
        (mapping.quantity for mapping in mappings if mapping.product_id == product_id), 0.0
    )


def effective_tolerance(
    target: float,
    tolerance: float = DEFAULT_TOLERANCE,
    relative_tolerance: float | None = None,
) -> float:
    """Absolute tolerance, widened to a fraction of the target when one is configured."""
    if relative_tolerance is None:
        return tolerance
    return max(tolerance, abs(target) * relative_tolerance)


def classify(target: float, mapped: float, tolerance: float = DEFAULT_TOLERANCE) -> BalanceStatus:
    """Classify mapped weight against the target.

    A difference of exactly the tolerance is not balanced.
    """
    delta = mapped - target
    if abs(delta) < tolerance:
        return BalanceStatus.BALANCED
    if delta > 0:
        return BalanceStatus.OVERFILLED
    return BalanceStatus.UNDERFILLED


def formulation_state(
    target: float, mapped: float, tolerance: float = DEFAULT_TOLERANCE
) -> BalanceStatus:
    """Like classify, but a product with nothing mapped is EMPTY."""
    if mapped == 0:
        return BalanceStatus.EMPTY
    return classify(target, mapped, tolerance)


def percentage(quantity: float, total: float) -> float:
    """Share of one mapping in the mapped weight, 0 when nothing is mapped."""
    if total <= 0:
        return 0.0
    return quantity / total * 100


def reconcile(
    target: float,
    mapped: float,
    unit: Unit | str | None = None,
    tolerance: float = DEFAULT_TOLERANCE,
    relative_tolerance: float | None = None,
) -> Reconciliation:
    """Full reconciliation record with the user-facing message."""
    tolerance = effective_tolerance(target, tolerance, relative_tolerance)
    status = classify(target, mapped, tolerance)
    state = formulation_state(target, mapped, tolerance)
    delta = mapped - target
    unit_label = Unit(unit).value if unit else Unit.G.value

    if state == BalanceStatus.EMPTY and status == BalanceStatus.BALANCED:
        # Nothing mapped against a zero target
        magnitude = 0.0
        level = "warning"
        message = "No ingredients mapped yet."
    elif status == BalanceStatus.BALANCED:
        magnitude = 0.0
        level = "success"
        message = "Perfect! Ingredient quantities match package weight."
    elif status == BalanceStatus.OVERFILLED:
        magnitude = delta
        level = "error"
        message = f"Exceeds package weight by {magnitude:.2f}{unit_label}"
    else:
        magnitude = -delta
        level = "warning"
        message = f"Short by {magnitude:.2f}{unit_label} from package weight"

    return Reconciliation(
        status=state,
        target_weight=target,
        mapped_weight=mapped,
        delta=delta,
        magnitude=magnitude,
        tolerance=tolerance,
        level=level,
        message=message,
    )
