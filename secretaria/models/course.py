# secretaria/models/course.py
from sqlalchemy import Column, String, Integer, Text
from sqlalchemy.orm import relationship
from .base import Base

class Course(Base):
    __tablename__ = "courses"

    name = Column(String(255), nullable=False, unique=True)
    description = Column(Text)
    duration_semesters = Column(Integer, nullable=False, default=1)

    enrollments = relationship("Enrollment", back_populates="course")
