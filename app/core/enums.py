from enum import Enum


class PremiumType(str, Enum):
    BASE = "base"

    def __str__(self):
        return self.value


class CalculationOutcome(str, Enum):
    COMPUTED = "computed"
    EMPTY = "empty"

    def __str__(self):
        return self.value
