"""
indsketch application factory
"""
import logging
from typing import Optional

from indsketch.config import Settings, settings as default_settings
from indsketch.core.tester import InclusionTester


def create_tester(settings: Optional[Settings] = None) -> InclusionTester:
    """
    Create and configure an InclusionTester

    Args:
        settings: Settings to use (global settings if None)

    Returns:
        Unregistered InclusionTester instance
    """
    settings = settings or default_settings

    # Configure logging
    logging.basicConfig(
        level=settings.get_log_level(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    tester = InclusionTester.from_settings(settings)
    logging.getLogger(__name__).debug(f"Created {tester!r} for {settings.APP_NAME} {settings.APP_VERSION}")
    return tester
