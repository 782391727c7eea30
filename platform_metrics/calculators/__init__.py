"""
Platform calculators, one per platform family.

calculate_platform_metrics() dispatches a tagged PlatformData
variant to the matching calculator.
"""

from datetime import datetime
from typing import Optional

from ..config import PlatformMetricsConfig, get_default_config
from ..types import BlogData, GitHubData, LinkedInData, PlatformData, PlatformMetrics, TwitterData
from .base import BasePlatformCalculator, round_half_up
from .code_hosting import CodeHostingCalculator
from .long_form_content import LongFormContentCalculator
from .professional_network import ProfessionalNetworkCalculator
from .short_form_social import ShortFormSocialCalculator


def calculate_platform_metrics(
    data: PlatformData,
    config: Optional[PlatformMetricsConfig] = None,
    now: Optional[datetime] = None,
) -> PlatformMetrics:
    """
    Run the calculator matching a platform data variant.

    Args:
        data: Decoded platform data
        config: Calculator thresholds (defaults if omitted)
        now: Reference time for time-windowed checks

    Returns:
        PlatformMetrics for data.platform
    """
    config = config or get_default_config()

    calculator: BasePlatformCalculator
    if isinstance(data, GitHubData):
        calculator = CodeHostingCalculator(config.code_hosting)
    elif isinstance(data, LinkedInData):
        calculator = ProfessionalNetworkCalculator(config.professional_network)
    elif isinstance(data, TwitterData):
        calculator = ShortFormSocialCalculator(config.short_form_social)
    elif isinstance(data, BlogData):
        calculator = LongFormContentCalculator(config.long_form_content)
    else:
        raise TypeError(f"Unsupported platform data: {type(data).__name__}")

    return calculator.calculate(data.profile, data.activity, now=now)


__all__ = [
    "BasePlatformCalculator",
    "CodeHostingCalculator",
    "ProfessionalNetworkCalculator",
    "LongFormContentCalculator",
    "ShortFormSocialCalculator",
    "calculate_platform_metrics",
    "round_half_up",
]
