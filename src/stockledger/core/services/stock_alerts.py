"""
Stock alert evaluation.

Pure classification of a material's stock into low / normal / high.
Nothing here writes state; the evaluator only reads the material it is
given and logs alerts after committed changes.
"""

from decimal import Decimal

from stockledger.config import get_logger
from stockledger.core.entities.material import Material
from stockledger.core.entities.stock import StockAssessment, StockStatus

logger = get_logger(__name__)

DEFAULT_HIGH_MULTIPLIER = Decimal("2")
DEFAULT_TARGET_MULTIPLIER = Decimal("2")


def high_threshold(
    material: Material, high_multiplier: Decimal = DEFAULT_HIGH_MULTIPLIER
) -> Decimal | None:
    """Upper band: max level, else ``min level x multiplier``, else none."""
    if material.max_stock_level is not None:
        return material.max_stock_level
    if material.min_stock_level is not None:
        return material.min_stock_level * high_multiplier
    return None


def suggest_reorder_quantity(
    material: Material, target_multiplier: Decimal = DEFAULT_TARGET_MULTIPLIER
) -> Decimal | None:
    """Quantity that brings stock back to ``min level x multiplier``."""
    if material.min_stock_level is None:
        return None
    quantity = material.min_stock_level * target_multiplier - material.current_stock
    return quantity if quantity > 0 else None


def evaluate_stock_status(
    material: Material,
    high_multiplier: Decimal = DEFAULT_HIGH_MULTIPLIER,
    target_multiplier: Decimal = DEFAULT_TARGET_MULTIPLIER,
) -> StockAssessment:
    """Classify one material. Low wins over high when bands overlap."""
    stock = material.current_stock
    upper = high_threshold(material, high_multiplier)
    suggested = None

    if material.min_stock_level is not None and stock <= material.min_stock_level:
        status = StockStatus.LOW
        suggested = suggest_reorder_quantity(material, target_multiplier)
    elif upper is not None and stock >= upper:
        status = StockStatus.HIGH
    else:
        status = StockStatus.NORMAL

    return StockAssessment(
        material_id=material.id or "",
        current_stock=stock,
        min_stock_level=material.min_stock_level,
        max_stock_level=material.max_stock_level,
        high_threshold=upper,
        status=status,
        suggested_quantity=suggested,
    )


class StockAlertEvaluator:
    """Applies the configured alert policy and reports alerts."""

    def __init__(
        self,
        high_multiplier: Decimal = DEFAULT_HIGH_MULTIPLIER,
        target_multiplier: Decimal = DEFAULT_TARGET_MULTIPLIER,
    ) -> None:
        self.high_multiplier = high_multiplier
        self.target_multiplier = target_multiplier

    def evaluate(self, material: Material) -> StockAssessment:
        return evaluate_stock_status(
            material, self.high_multiplier, self.target_multiplier
        )

    def evaluate_many(self, materials: list[Material]) -> list[StockAssessment]:
        return [self.evaluate(m) for m in materials]

    def low_stock(self, materials: list[Material]) -> list[StockAssessment]:
        """Low-stock subset, lowest stock first."""
        low = [a for a in self.evaluate_many(materials) if a.status is StockStatus.LOW]
        return sorted(low, key=lambda a: a.current_stock)

    def on_stock_changed(self, material: Material) -> StockAssessment:
        """Re-evaluate after a committed change and log non-normal bands."""
        assessment = self.evaluate(material)
        if assessment.status is StockStatus.LOW:
            logger.warning(
                "stock_alert_low",
                material_id=material.id,
                current_stock=str(material.current_stock),
                min_stock_level=str(material.min_stock_level),
                suggested_quantity=str(assessment.suggested_quantity),
            )
        elif assessment.status is StockStatus.HIGH:
            logger.info(
                "stock_alert_high",
                material_id=material.id,
                current_stock=str(material.current_stock),
                high_threshold=str(assessment.high_threshold),
            )
        return assessment
