"""
Configuration Providers

Sources for the active grading configuration. The closure engine never
fetches configuration itself; the service asks one of these providers
and passes the value in.
"""

import logging

from pydantic import ValidationError

from practicum import settings
from practicum.schemas.closure import GradingConfiguration
from practicum.workflow.errors import DependencyUnavailableError, InvalidConfigurationError

logger = logging.getLogger(__name__)


class StaticConfigurationProvider:
    """Always returns the configuration it was built with."""

    def __init__(self, configuration: GradingConfiguration):
        self.configuration = configuration

    def get_active_configuration(self) -> GradingConfiguration:
        return self.configuration


class EnvConfigurationProvider:
    """
    Reads weights from PRACTICUM_REPORT_WEIGHT / PRACTICUM_EMPLOYER_WEIGHT /
    PRACTICUM_MIN_PASSING_GRADE, falling back to the 50/50 defaults.
    """

    def get_active_configuration(self) -> GradingConfiguration:
        try:
            configuration = GradingConfiguration(**settings.grading_defaults())
        except (ValidationError, ValueError, ArithmeticError) as e:
            logger.warning("Grading configuration from environment is unusable: %s", e)
            raise DependencyUnavailableError("grading configuration", str(e)) from e

        if not configuration.is_balanced:
            raise InvalidConfigurationError(
                configuration.report_weight, configuration.employer_weight
            )
        return configuration
