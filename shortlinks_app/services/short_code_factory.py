"""
Factory for creating short code generation strategies.
Configuration comes from the Settings object passed in.
"""

from enum import Enum
from typing import Optional

from shortlinks_app.config import Settings
from shortlinks_app.services.short_code_strategies import (
    ShortCodeStrategy,
    DigestShortCodeStrategy,
    RandomShortCodeStrategy
)


class ShortCodeStrategyType(Enum):
    """Available short code generation strategies"""
    DIGEST = "digest"
    RANDOM = "random"


class ShortCodeFactory:
    """Factory for creating short code generation strategies"""

    @classmethod
    def create_strategy(
        cls,
        settings: Settings,
        strategy_type: Optional[ShortCodeStrategyType] = None
    ) -> ShortCodeStrategy:
        """
        Create a short code generation strategy.

        Args:
            settings: Application settings (code length, digest algorithm)
            strategy_type: Type of strategy to create.
                          If None, uses value from settings.

        Returns:
            A new ShortCodeStrategy instance

        Raises:
            ValueError: If strategy_type is unknown
        """
        if strategy_type is None:
            strategy_type = ShortCodeStrategyType(settings.short_code_strategy)

        if strategy_type == ShortCodeStrategyType.DIGEST:
            return DigestShortCodeStrategy(
                length=settings.short_code_length,
                algorithm=settings.digest_algorithm
            )
        elif strategy_type == ShortCodeStrategyType.RANDOM:
            return RandomShortCodeStrategy(length=settings.short_code_length)

        raise ValueError(f"Unknown strategy type: {strategy_type}")
