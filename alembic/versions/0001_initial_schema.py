"""initial schema: users, students, courses, enrollments, contracts, templates, documents

Revision ID: 0001_initial_schema
Revises:
Create Date: 2026-03-02 10:14:31.482907

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '0001_initial_schema'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _common_columns():
    return [
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('deleted_at', sa.DateTime(timezone=True), nullable=True),
    ]


def _common_indexes(table: str) -> None:
    op.create_index(f'ix_{table}_id', table, ['id'])
    op.create_index(f'ix_{table}_deleted_at', table, ['deleted_at'])


def upgrade() -> None:
    op.create_table(
        'students',
        *_common_columns(),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('cpf', sa.String(20), nullable=True, unique=True),
        sa.Column('email', sa.String(200), nullable=True),
        sa.Column('phone', sa.String(20), nullable=True),
        sa.Column('birth_date', sa.String(20), nullable=True),
        sa.Column('address', sa.String(500), nullable=True),
        sa.Column('registration_number', sa.BigInteger(), nullable=True),
    )
    _common_indexes('students')
    op.create_index('ix_students_email', 'students', ['email'])
    op.create_index('ix_students_registration_number', 'students', ['registration_number'])

    op.create_table(
        'users',
        *_common_columns(),
        sa.Column('role', sa.String(20), nullable=False),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('login', sa.String(100), nullable=False),
        sa.Column('email', sa.String(200), nullable=True),
        sa.Column('cpf', sa.String(20), nullable=True),
        sa.Column('password_hash', sa.String(255), nullable=False),
        sa.Column('student_id', sa.Integer(), sa.ForeignKey('students.id'), nullable=True),
    )
    _common_indexes('users')
    op.create_index('ix_users_role', 'users', ['role'])
    op.create_index('ix_users_login', 'users', ['login'], unique=True)
    op.create_index('ix_users_student_id', 'users', ['student_id'])

    op.create_table(
        'courses',
        *_common_columns(),
        sa.Column('name', sa.String(255), nullable=False, unique=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('duration_semesters', sa.Integer(), nullable=False),
    )
    _common_indexes('courses')

    op.create_table(
        'enrollments',
        *_common_columns(),
        sa.Column('student_id', sa.Integer(), sa.ForeignKey('students.id'), nullable=False),
        sa.Column('course_id', sa.Integer(), sa.ForeignKey('courses.id'), nullable=False),
        sa.Column('status', sa.String(20), nullable=False),
        sa.Column('enrollment_date', sa.Date(), nullable=False),
        sa.Column('current_semester', sa.Integer(), nullable=True),
    )
    _common_indexes('enrollments')
    op.create_index('ix_enrollments_student_id', 'enrollments', ['student_id'])
    op.create_index('ix_enrollments_course_id', 'enrollments', ['course_id'])
    op.create_index('ix_enrollments_status', 'enrollments', ['status'])
    op.create_index(
        'uq_enrollments_open_student_course',
        'enrollments',
        ['student_id', 'course_id'],
        unique=True,
        postgresql_where=sa.text("status <> 'cancelled' AND deleted_at IS NULL"),
        sqlite_where=sa.text("status <> 'cancelled' AND deleted_at IS NULL"),
    )

    op.create_table(
        'contract_templates',
        *_common_columns(),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
    )
    _common_indexes('contract_templates')

    op.create_table(
        'contracts',
        *_common_columns(),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('enrollment_id', sa.Integer(), sa.ForeignKey('enrollments.id'), nullable=True),
        sa.Column('template_id', sa.Integer(), sa.ForeignKey('contract_templates.id'), nullable=True),
        sa.Column('file_path', sa.String(255), nullable=True),
        sa.Column('file_name', sa.String(255), nullable=True),
        sa.Column('semester', sa.Integer(), nullable=False),
        sa.Column('year', sa.Integer(), nullable=False),
        sa.Column('accepted_at', sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint(
            "(file_path IS NULL AND file_name IS NULL) OR (file_path IS NOT NULL AND file_name IS NOT NULL)",
            name='ck_contracts_file_fields_together',
        ),
        sa.CheckConstraint('semester BETWEEN 1 AND 12', name='ck_contracts_semester_range'),
        sa.CheckConstraint('year BETWEEN 2020 AND 2100', name='ck_contracts_year_range'),
    )
    _common_indexes('contracts')
    op.create_index('ix_contracts_user_id', 'contracts', ['user_id'])
    op.create_index('ix_contracts_enrollment_id', 'contracts', ['enrollment_id'])

    op.create_table(
        'document_types',
        *_common_columns(),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('is_required', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('user_type', sa.String(20), nullable=False),
    )
    _common_indexes('document_types')

    op.create_table(
        'documents',
        *_common_columns(),
        sa.Column('student_id', sa.Integer(), sa.ForeignKey('students.id'), nullable=False),
        sa.Column('document_type_id', sa.Integer(), sa.ForeignKey('document_types.id'), nullable=False),
        sa.Column('status', sa.String(20), nullable=False),
        sa.Column('file_path', sa.String(255), nullable=True),
    )
    _common_indexes('documents')
    op.create_index('ix_documents_student_id', 'documents', ['student_id'])
    op.create_index('ix_documents_document_type_id', 'documents', ['document_type_id'])


def downgrade() -> None:
    for table in (
        'documents',
        'document_types',
        'contracts',
        'contract_templates',
        'enrollments',
        'courses',
        'users',
        'students',
    ):
        op.drop_table(table)
