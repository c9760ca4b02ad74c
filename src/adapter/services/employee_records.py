from src.app.services.employee_records import (
    EmployeeProfile,
    EmployeeRecord,
    IEmployeeRecords,
)
from src.app.services.upstream import UpstreamUnavailable

from .http_client import ServiceClient, read_json


class HttpEmployeeRecords(ServiceClient, IEmployeeRecords):
    """Employee record creation over the employee service REST API"""

    service = "employee"

    async def create_employee(self, profile: EmployeeProfile) -> EmployeeRecord:
        response = await self.request(
            "POST",
            "/api/v1/employees",
            json=profile.model_dump(mode="json"),
            accept=(409,),
        )
        if response.status_code == 409:
            # One employee per subject; link to the record that already exists
            response = await self.request(
                "GET", f"/api/v1/employees/by-subject/{profile.subject_id}"
            )
        body = read_json(self.service, response)
        employee_id = body.get("employee_id") or body.get("id")
        if not employee_id:
            raise UpstreamUnavailable(self.service, "response carries no employee id")
        return EmployeeRecord(employee_id=str(employee_id))
