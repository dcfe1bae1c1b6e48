import pytest
import pytest_asyncio
from datetime import date
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from secretaria.main import app
from secretaria.core.database import get_db
from secretaria.core.security import create_access_token, hash_password
from secretaria.models import (
    Base, Contract, ContractTemplate, Course, Document, DocumentStatus, DocumentTarget,
    DocumentType, Enrollment, EnrollmentStatus, Student, User, UserRole,
)

DATABASE_URL = "sqlite+aiosqlite:///:memory:"
PASSWORD = "s3cret-pass"
PASSWORD_HASH = hash_password(PASSWORD)


class Factory:
    """Persists test rows through the shared session."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self._seq = 0

    def _next(self) -> int:
        self._seq += 1
        return self._seq

    async def _save(self, obj):
        self.session.add(obj)
        await self.session.commit()
        return obj

    async def student(self, **kwargs) -> Student:
        n = self._next()
        data = {
            "name": f"Student {n}",
            "cpf": f"000.000.{n:03d}-00",
            "email": f"student{n}@example.com",
            "phone": "(11) 99999-0000",
            "birth_date": "2001-05-10",
            "address": "Rua das Flores, 10",
            "registration_number": 20240000 + n,
        }
        data.update(kwargs)
        return await self._save(Student(**data))

    async def course(self, **kwargs) -> Course:
        n = self._next()
        data = {"name": f"Course {n}", "description": "Undergraduate course", "duration_semesters": 8}
        data.update(kwargs)
        return await self._save(Course(**data))

    async def user(self, role: UserRole = UserRole.STUDENT, student: Student = None, **kwargs) -> User:
        n = self._next()
        data = {
            "role": role,
            "name": f"{role.value.title()} {n}",
            "login": f"{role.value}{n}",
            "email": f"{role.value}{n}@example.com",
            "password_hash": PASSWORD_HASH,
            "student_id": student.id if student else None,
        }
        data.update(kwargs)
        return await self._save(User(**data))

    async def admin(self) -> User:
        return await self.user(UserRole.ADMIN)

    async def enrollment(
        self,
        student: Student,
        course: Course,
        status: EnrollmentStatus = EnrollmentStatus.ACTIVE,
        **kwargs
    ) -> Enrollment:
        data = {
            "student_id": student.id,
            "course_id": course.id,
            "status": status,
            "enrollment_date": date(2024, 2, 1),
            "current_semester": 3,
        }
        data.update(kwargs)
        return await self._save(Enrollment(**data))

    async def template(self, name: str = "Reenrollment contract", content: str = None, **kwargs) -> ContractTemplate:
        content = content or (
            "<h1>{{institutionName}}</h1>"
            "<p>{{studentName}} ({{studentCPF}}) - {{courseName}} - {{semester}}/{{year}}</p>"
            "<p>{{unknownToken}}</p>"
        )
        data = {"name": name, "content": content, "is_active": True}
        data.update(kwargs)
        return await self._save(ContractTemplate(**data))

    async def contract(self, user: User, **kwargs) -> Contract:
        data = {
            "user_id": user.id,
            "semester": 1,
            "year": 2025,
            "file_path": "uploads/contracts/contract.pdf",
            "file_name": "contract.pdf",
        }
        data.update(kwargs)
        return await self._save(Contract(**data))

    async def document_type(self, name: str, is_required: bool = True,
                            user_type: DocumentTarget = DocumentTarget.STUDENT) -> DocumentType:
        return await self._save(DocumentType(name=name, is_required=is_required, user_type=user_type))

    async def document(self, student: Student, document_type: DocumentType,
                       status: DocumentStatus = DocumentStatus.APPROVED) -> Document:
        return await self._save(Document(
            student_id=student.id,
            document_type_id=document_type.id,
            status=status,
            file_path=f"uploads/documents/{student.id}-{document_type.id}.pdf",
        ))


def auth_headers(user: User) -> dict:
    token = create_access_token({"sub": str(user.id), "role": user.role.value})
    return {"Authorization": f"Bearer {token}"}


@pytest_asyncio.fixture(name="session")
async def session_fixture():
    engine = create_async_engine(
        DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(engine, expire_on_commit=False, autoflush=False, class_=AsyncSession)
    async with session_factory() as session:
        yield session

    await engine.dispose()


@pytest_asyncio.fixture(name="client")
async def client_fixture(session: AsyncSession):
    async def get_db_override():
        yield session

    app.dependency_overrides[get_db] = get_db_override
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


@pytest.fixture(name="factory")
def factory_fixture(session: AsyncSession) -> Factory:
    return Factory(session)


@pytest.fixture(name="auth")
def auth_fixture():
    return auth_headers
