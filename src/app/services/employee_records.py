from abc import ABC, abstractmethod
from datetime import date
from typing import Optional

from pydantic import BaseModel


class EmployeeProfile(BaseModel):
    """Employee record payload: HR-set job data plus optional personal details"""

    subject_id: str
    email: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone: Optional[str] = None

    # HR-set, carried over from the invitation
    role: str
    job_title: str
    department: Optional[str] = None
    team: Optional[str] = None
    manager_id: Optional[str] = None
    salary: float
    salary_currency: str
    employment_type: str
    joining_date: date
    probation_months: Optional[int] = None
    probation_end_date: Optional[date] = None
    contract_start_date: Optional[date] = None
    contract_end_date: Optional[date] = None
    performance_review_date: Optional[date] = None
    salary_increment_date: Optional[date] = None

    # Personal
    date_of_birth: Optional[date] = None
    gender: Optional[str] = None
    nationality: Optional[str] = None

    # Address
    address_line_1: Optional[str] = None
    address_line_2: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    postal_code: Optional[str] = None
    country: Optional[str] = None

    # Emergency contact
    emergency_contact_name: Optional[str] = None
    emergency_contact_phone: Optional[str] = None
    emergency_contact_relationship: Optional[str] = None

    # Banking
    bank_name: Optional[str] = None
    bank_account_number: Optional[str] = None
    bank_routing_number: Optional[str] = None


class EmployeeRecord(BaseModel):
    """Employee record created by the employee service"""

    employee_id: str


class IEmployeeRecords(ABC):
    """Employee record collaborator - application layer"""

    @abstractmethod
    async def create_employee(self, profile: EmployeeProfile) -> EmployeeRecord:
        """
        Create (or find the existing) employee record for a subject id.

        Raises:
            UpstreamUnavailable: transient failure, safe to retry
            UpstreamRejected: the employee service refused the record
        """
        pass
