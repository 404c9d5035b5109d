"""
Slot-Setting Classifier: decides which keys stay pinned to a slot.
"""

from typing import AbstractSet, FrozenSet, Sequence

from .models import Target
from .operator import Operator
from .log_manager import get_logger


class SlotSettingClassifier:
    """Partitions loaded keys into slot-sticky and shared"""

    def __init__(self, operator: Operator, default_keys: Sequence[str]):
        self.operator = operator
        self.default_keys = list(default_keys)
        self.logger = get_logger('SlotSettingClassifier', component='manager')

    async def classify(self, target: Target, available_keys: AbstractSet[str]) -> FrozenSet[str]:
        """
        Args:
            target: Where the settings go
            available_keys: Keys loaded from the local file

        Returns:
            Keys to mark as slot settings; always empty for production
        """
        if target.is_production:
            return frozenset()

        use_default = await self.operator.confirm(
            f"Use default slot settings? ({', '.join(self.default_keys)})", default=True
        )
        if use_default:
            selected = frozenset(key for key in self.default_keys if key in available_keys)
            skipped = [key for key in self.default_keys if key not in available_keys]
            if skipped:
                self.logger.info(f"Default slot settings not in local file, skipped: {', '.join(skipped)}")
            return selected

        chosen = await self.operator.choose_many(
            "Select environment variables to mark as slot settings:", sorted(available_keys)
        )
        return frozenset(chosen)
