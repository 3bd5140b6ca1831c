"""create organizations, classrooms, sessions, signature tokens and attendances

Revision ID: 5c1e0a9b7d42
Revises:
Create Date: 2026-10-19 09:12:40.118203

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '5c1e0a9b7d42'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'organizations',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(), nullable=False),
    )
    op.create_index('ix_organizations_id', 'organizations', ['id'])

    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('email', sa.String(), nullable=False),
        sa.Column('hashed_password', sa.String(), nullable=True),
        sa.Column('name', sa.String(), nullable=True),
        sa.Column('role', sa.Enum('SUPER_ADMIN', 'ADMIN', 'TEACHER', 'STUDENT', name='user_role'), nullable=False),
        sa.Column('organization_id', sa.Integer(), sa.ForeignKey('organizations.id'), nullable=True),
    )
    op.create_index('ix_users_id', 'users', ['id'])
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    op.create_table(
        'classrooms',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('organization_id', sa.Integer(), sa.ForeignKey('organizations.id'), nullable=False),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('location_on_site', sa.String(), nullable=True),
        sa.Column('location_online', sa.String(), nullable=True),
    )
    op.create_index('ix_classrooms_id', 'classrooms', ['id'])

    op.create_table(
        'classroom_teachers',
        sa.Column('classroom_id', sa.Integer(), sa.ForeignKey('classrooms.id'), primary_key=True),
        sa.Column('teacher_id', sa.Integer(), sa.ForeignKey('users.id'), primary_key=True),
    )

    op.create_table(
        'classroom_enrollments',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('classroom_id', sa.Integer(), sa.ForeignKey('classrooms.id'), nullable=False),
        sa.Column('student_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.UniqueConstraint('classroom_id', 'student_id', name='uq_enrollment_classroom_student'),
    )
    op.create_index('ix_classroom_enrollments_id', 'classroom_enrollments', ['id'])

    op.create_table(
        'class_sessions',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('classroom_id', sa.Integer(), sa.ForeignKey('classrooms.id'), nullable=False),
        sa.Column('teacher_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=True),
        sa.Column('title', sa.String(), nullable=True),
        sa.Column('type', sa.Enum('ONSITE', 'ONLINE', 'HOMEWORK', name='session_type'), nullable=False),
        sa.Column('start_time', sa.DateTime(), nullable=False),
        sa.Column('end_time', sa.DateTime(), nullable=False),
        sa.Column('teacher_signature', sa.Text(), nullable=True),
    )
    op.create_index('ix_class_sessions_id', 'class_sessions', ['id'])
    op.create_index('ix_class_sessions_classroom_id', 'class_sessions', ['classroom_id'])

    op.create_table(
        'signature_tokens',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('token', sa.String(), nullable=False),
        sa.Column('session_id', sa.Integer(), sa.ForeignKey('class_sessions.id'), nullable=False),
        sa.Column('student_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('expires_at', sa.DateTime(), nullable=False),
        sa.Column('used_at', sa.DateTime(), nullable=True),
        sa.Column('email_sent_at', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_signature_tokens_id', 'signature_tokens', ['id'])
    op.create_index('ix_signature_tokens_token', 'signature_tokens', ['token'], unique=True)
    # One unconsumed token per (session, student)
    op.create_index(
        'uq_signature_tokens_open',
        'signature_tokens',
        ['session_id', 'student_id'],
        unique=True,
        sqlite_where=sa.text('used_at IS NULL'),
        postgresql_where=sa.text('used_at IS NULL'),
    )

    op.create_table(
        'attendances',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('session_id', sa.Integer(), sa.ForeignKey('class_sessions.id'), nullable=False),
        sa.Column('student_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('status', sa.Enum('PRESENT', 'ABSENT', 'EXCUSED', name='attendance_status'), nullable=False),
        sa.Column('signature_url', sa.Text(), nullable=True),
        sa.Column('proof_url', sa.String(), nullable=True),
        sa.Column('signed_at', sa.DateTime(), nullable=True),
        sa.Column('ip_address', sa.String(), nullable=True),
        sa.UniqueConstraint('session_id', 'student_id', name='uq_attendance_session_student'),
    )
    op.create_index('ix_attendances_id', 'attendances', ['id'])


def downgrade() -> None:
    op.drop_table('attendances')
    op.drop_index('uq_signature_tokens_open', table_name='signature_tokens')
    op.drop_table('signature_tokens')
    op.drop_table('class_sessions')
    op.drop_table('classroom_enrollments')
    op.drop_table('classroom_teachers')
    op.drop_table('classrooms')
    op.drop_table('users')
    op.drop_table('organizations')
