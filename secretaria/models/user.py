# secretaria/models/user.py
import enum

from sqlalchemy import Column, String, Integer, Enum, ForeignKey
from sqlalchemy.orm import relationship
from .base import Base


class UserRole(str, enum.Enum):
    ADMIN = "admin"
    TEACHER = "teacher"
    STUDENT = "student"


class User(Base):
    __tablename__ = "users"

    role = Column(
        Enum(UserRole, name="user_role", native_enum=False, length=20,
             values_callable=lambda roles: [r.value for r in roles]),
        nullable=False,
        default=UserRole.STUDENT,
        index=True,
    )
    name = Column(String(100), nullable=False)
    login = Column(String(100), nullable=False, unique=True, index=True)
    email = Column(String(200), nullable=True)
    cpf = Column(String(20), nullable=True)
    password_hash = Column(String(255), nullable=False)

    # Authentication identity of a student points at the academic profile
    student_id = Column(Integer, ForeignKey("students.id"), nullable=True, index=True)

    student = relationship("Student", back_populates="users")
    contracts = relationship("Contract", back_populates="user")

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN
