# secretaria/models/contract.py
from sqlalchemy import Column, String, Integer, DateTime, ForeignKey, CheckConstraint
from sqlalchemy.orm import relationship
from .base import Base


class Contract(Base):
    __tablename__ = "contracts"
    __table_args__ = (
        CheckConstraint(
            "(file_path IS NULL AND file_name IS NULL) OR (file_path IS NOT NULL AND file_name IS NOT NULL)",
            name="ck_contracts_file_fields_together",
        ),
        CheckConstraint("semester BETWEEN 1 AND 12", name="ck_contracts_semester_range"),
        CheckConstraint("year BETWEEN 2020 AND 2100", name="ck_contracts_year_range"),
    )

    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    # Legacy contracts predate the enrollment link
    enrollment_id = Column(Integer, ForeignKey("enrollments.id"), nullable=True, index=True)
    template_id = Column(Integer, ForeignKey("contract_templates.id"), nullable=True)

    # Both null for reenrollment acceptances (no PDF)
    file_path = Column(String(255), nullable=True)
    file_name = Column(String(255), nullable=True)

    semester = Column(Integer, nullable=False)
    year = Column(Integer, nullable=False)
    accepted_at = Column(DateTime(timezone=True), nullable=True)

    user = relationship("User", back_populates="contracts")
    enrollment = relationship("Enrollment", back_populates="contracts")
    template = relationship("ContractTemplate", back_populates="contracts")

    @property
    def is_accepted(self) -> bool:
        return self.accepted_at is not None

    @property
    def has_pdf(self) -> bool:
        return self.file_path is not None and self.file_name is not None

    @property
    def contract_type(self) -> str:
        return "pdf" if self.has_pdf else "digital_acceptance"

    @property
    def period_label(self) -> str:
        return f"{self.semester}/{self.year}"
