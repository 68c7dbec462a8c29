"""Billing collector: organization consumption per project and category."""

import logging
from collections.abc import Callable
from typing import Any, NamedTuple

from scaleway_exporter.collectors.descriptors import MetricDescriptor, NoLabels
from scaleway_exporter.collectors.errors import ErrorCounter
from scaleway_exporter.collectors.model import ConsumptionReport, Project
from scaleway_exporter.collectors.scope import ScrapeScope

logger = logging.getLogger(__name__)

ListProjects = Callable[[str, float], list[Project]]
GetConsumption = Callable[[str, float], ConsumptionReport]


class ConsumptionLabels(NamedTuple):
    project_id: str
    project_name: str
    category: str
    operation_path: str
    description: str
    currency_code: str


CONSUMPTIONS = MetricDescriptor(
    "scaleway_billing_consumptions", "Consumptions", ConsumptionLabels
)
UPDATE_TIMESTAMP = MetricDescriptor(
    "scaleway_billing_update_timestamp_seconds", "Timestamp of the last update", NoLabels
)


class BillingCollector:
    """Reports the organization's consumption report.

    Unlike resource collectors there is no partition fan-out: the projects of
    the organization are resolved first, then one organization-wide report is
    fetched and split into one sample per consumption line.
    """

    name = "billing"

    def __init__(
        self,
        organization_id: str,
        list_projects: ListProjects,
        get_consumption: GetConsumption,
        errors: ErrorCounter,
    ) -> None:
        self.organization_id = organization_id
        self._list_projects = list_projects
        self._get_consumption = get_consumption
        self._errors = errors

        errors.register(self.name)
        logger.info("Billing collector enabled")

    def describe(self) -> list[MetricDescriptor[Any]]:
        return [CONSUMPTIONS, UPDATE_TIMESTAMP]

    def collect(self, scope: ScrapeScope) -> None:
        scope.spawn(self._collect_report, scope, name="billing")

    def _collect_report(self, scope: ScrapeScope) -> None:
        context = {"collector": self.name, "organization_id": self.organization_id}

        try:
            projects = self._list_projects(self.organization_id, scope.remaining())
        except Exception as e:
            self._errors.increment(self.name)
            logger.warning(
                "Can't fetch the list of projects",
                extra={**context, "error": str(e)},
            )
            return

        if not projects:
            self._errors.increment(self.name)
            logger.error(
                "No projects were found, perhaps you are missing the "
                "'ProjectManager' permission",
                extra=context,
            )
            return

        project_names = {project.id: project.name for project in projects}

        try:
            report = self._get_consumption(self.organization_id, scope.remaining())
        except Exception as e:
            self._errors.increment(self.name)
            logger.warning(
                "Could not fetch the billing data, perhaps you are missing the "
                "'BillingReadOnly' permission",
                extra={**context, "error": str(e)},
            )
            return

        for consumption in report.consumptions:
            scope.emit(
                CONSUMPTIONS.observe(
                    consumption.value,
                    ConsumptionLabels(
                        consumption.project_id,
                        project_names.get(consumption.project_id, ""),
                        consumption.category,
                        consumption.operation_path,
                        consumption.description,
                        consumption.currency,
                    ),
                )
            )

        if report.updated_at is not None:
            scope.emit(UPDATE_TIMESTAMP.observe(report.updated_at.timestamp(), NoLabels()))
