# secretaria/models/student.py
from sqlalchemy import Column, String, BigInteger
from sqlalchemy.orm import relationship
from .base import Base

class Student(Base):
    __tablename__ = "students"

    # Basic Information
    name = Column(String(200), nullable=False)
    cpf = Column(String(20), nullable=True, unique=True)
    email = Column(String(200), nullable=True, index=True)
    phone = Column(String(20))
    birth_date = Column(String(20))
    address = Column(String(500))

    # Academic Information
    registration_number = Column(BigInteger, nullable=True, index=True)

    # Relationships
    users = relationship("User", back_populates="student")
    enrollments = relationship("Enrollment", back_populates="student")
    documents = relationship("Document", back_populates="student")
