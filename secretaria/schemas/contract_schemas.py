# secretaria/schemas/contract_schemas.py
import enum


class ContractStatusFilter(str, enum.Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"

    @property
    def accepted(self) -> bool:
        return self is ContractStatusFilter.ACCEPTED
