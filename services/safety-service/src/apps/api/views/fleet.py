# services/safety-service/src/apps/api/views/fleet.py
"""
Fleet Compliance API Views
"""

from rest_framework.response import Response
from rest_framework.views import APIView

from apps.core.services import ComplianceValidationError, FleetComplianceService
from .base import (
    ExceptionHandlerMixin,
    OrganizationMixin,
    ReportingDateMixin,
    _parse_id_list,
    _parse_uuid,
)


class FleetSummaryView(OrganizationMixin, ReportingDateMixin, ExceptionHandlerMixin, APIView):
    """
    Compliance rollup across the fleet or one vessel.

    Query params:
    - vessel_id: restrict to one vessel
    - as_of: reporting date (YYYY-MM-DD), defaults to today
    - window_days: compliance-rate window, defaults to COMPLIANCE_REPORT_WINDOW_DAYS
    - crew_ids: comma-separated crew for mandatory-read completion
    """

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.service = FleetComplianceService()

    def get(self, request):
        params = request.query_params

        vessel_id = params.get('vessel_id')
        window_days = params.get('window_days')
        if window_days is not None:
            try:
                window_days = int(window_days)
            except ValueError:
                raise ComplianceValidationError("window_days must be an integer", field='window_days')
            if window_days <= 0:
                raise ComplianceValidationError("window_days must be positive", field='window_days')

        crew_ids = params.get('crew_ids')
        summary = self.service.summary(
            self.get_organization_id(),
            self.get_today(),
            vessel_id=_parse_uuid(vessel_id, 'vessel_id') if vessel_id else None,
            window_days=window_days,
            crew_ids=_parse_id_list(crew_ids, 'crew_ids') if crew_ids is not None else None,
        )
        return Response(summary)
