from .base_service import BaseService
from .enrollment_service import EnrollmentService
from .contract_service import ContractService
from .contract_template_service import ContractTemplateService
from .reenrollment_service import ReenrollmentService

__all__ = [
    "BaseService",
    "EnrollmentService",
    "ContractService",
    "ContractTemplateService",
    "ReenrollmentService",
]
