from exceptions import InvalidInputError


class WeightConverter:
    """Utility for converting between kg and lb."""

    KG_TO_LB = 2.20462
    UNITS = ("kg", "lb")

    @staticmethod
    def kg_to_lb(kg: float) -> float:
        return round(kg * WeightConverter.KG_TO_LB, 2)

    @staticmethod
    def lb_to_kg(lb: float) -> float:
        return round(lb / WeightConverter.KG_TO_LB, 2)

    @staticmethod
    def convert(value: float, from_unit: str, to_unit: str) -> float:
        """Convert ``value`` between units without rounding."""
        for unit in (from_unit, to_unit):
            if unit not in WeightConverter.UNITS:
                raise InvalidInputError(f"unknown weight unit {unit!r}")
        if from_unit == to_unit:
            return float(value)
        if from_unit == "kg":
            return value * WeightConverter.KG_TO_LB
        return value / WeightConverter.KG_TO_LB
