# secretaria/models/contract_template.py
from sqlalchemy import Column, String, Text, Boolean
from sqlalchemy.orm import relationship
from .base import Base


class ContractTemplate(Base):
    __tablename__ = "contract_templates"

    name = Column(String(100), nullable=False)
    content = Column(Text, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)

    contracts = relationship("Contract", back_populates="template")
