"""Initial task log schema

Revision ID: 001_initial_schema
Revises:
Create Date: 2026-10-19

"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '001_initial_schema'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Skip if tables already exist (e.g. SQLite DB created by the app's create_all())
    bind = op.get_bind()
    inspector = sa.inspect(bind)
    existing = inspector.get_table_names()
    if 'employees' in existing:
        return

    op.create_table(
        'employees',
        sa.Column('id', sa.String(), nullable=False),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('job_title', sa.String(), nullable=True),
        sa.Column('email', sa.String(), nullable=True),
        sa.Column('active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('role', sa.String(), nullable=False, server_default='User'),
        sa.Column('permissions', sa.JSON(), nullable=False),
        sa.Column('password_hash', sa.String(), nullable=True),
        sa.Column('last_modified', sa.DateTime(timezone=True), nullable=True),
        # Use SQL-standard CURRENT_TIMESTAMP so it works on SQLite and Postgres
        sa.Column(
            'created_at',
            sa.DateTime(timezone=True),
            server_default=sa.text('CURRENT_TIMESTAMP'),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_employees_id'), 'employees', ['id'], unique=False)

    op.create_table(
        'tasks',
        sa.Column('id', sa.String(), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('category', sa.String(), nullable=False, server_default='General'),
        sa.Column('last_modified', sa.DateTime(timezone=True), nullable=True),
        sa.Column(
            'created_at',
            sa.DateTime(timezone=True),
            server_default=sa.text('CURRENT_TIMESTAMP'),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_tasks_id'), 'tasks', ['id'], unique=False)

    op.create_table(
        'assignments',
        sa.Column('id', sa.String(), nullable=False),
        sa.Column('employee_id', sa.String(), nullable=False),
        sa.Column('task_id', sa.String(), nullable=False),
        sa.ForeignKeyConstraint(['employee_id'], ['employees.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['task_id'], ['tasks.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('employee_id', 'task_id', name='uq_assignments_employee_task')
    )
    op.create_index(op.f('ix_assignments_id'), 'assignments', ['id'], unique=False)
    op.create_index(op.f('ix_assignments_employee_id'), 'assignments', ['employee_id'], unique=False)
    op.create_index(op.f('ix_assignments_task_id'), 'assignments', ['task_id'], unique=False)

    # Enum columns store the enum values as plain strings
    op.create_table(
        'task_logs',
        sa.Column('id', sa.String(), nullable=False),
        sa.Column('log_date', sa.Date(), nullable=False),
        sa.Column('employee_id', sa.String(), nullable=False),
        sa.Column('task_id', sa.String(), nullable=False),
        sa.Column('task_type', sa.String(length=32), nullable=False),
        sa.Column('status', sa.String(length=32), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('approval_status', sa.String(length=32), nullable=False),
        sa.Column('approved_by', sa.String(), nullable=True),
        sa.Column('approved_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('manager_note', sa.Text(), nullable=True),
        sa.Column('rejected_by', sa.String(), nullable=True),
        sa.Column('rejected_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('committed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_task_logs_id'), 'task_logs', ['id'], unique=False)
    op.create_index(op.f('ix_task_logs_log_date'), 'task_logs', ['log_date'], unique=False)
    op.create_index(op.f('ix_task_logs_employee_id'), 'task_logs', ['employee_id'], unique=False)
    op.create_index('ix_task_logs_employee_date', 'task_logs', ['employee_id', 'log_date'], unique=False)

    op.create_table(
        'task_log_actions',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('task_log_id', sa.String(), nullable=False),
        sa.Column('action', sa.String(length=32), nullable=False),
        sa.Column('action_by', sa.String(), nullable=False),
        sa.Column('remarks', sa.Text(), nullable=True),
        sa.Column('action_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['task_log_id'], ['task_logs.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_task_log_actions_id'), 'task_log_actions', ['id'], unique=False)
    op.create_index(op.f('ix_task_log_actions_task_log_id'), 'task_log_actions', ['task_log_id'], unique=False)

    op.create_table(
        'daily_submissions',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('employee_id', sa.String(), nullable=False),
        sa.Column('log_date', sa.Date(), nullable=False),
        sa.Column('submitted_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('employee_id', 'log_date', name='uq_daily_submissions_employee_date')
    )
    op.create_index(op.f('ix_daily_submissions_id'), 'daily_submissions', ['id'], unique=False)
    op.create_index(op.f('ix_daily_submissions_employee_id'), 'daily_submissions', ['employee_id'], unique=False)

    op.create_table(
        'system_audit_logs',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('actor_id', sa.String(), nullable=True),
        sa.Column('actor_name', sa.String(), nullable=False),
        sa.Column('action_type', sa.String(), nullable=False),
        sa.Column('target', sa.String(), nullable=False),
        sa.Column('details', sa.Text(), nullable=True),
        sa.Column('meta_json', sa.JSON(), nullable=True),
        sa.Column('timestamp', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_system_audit_logs_id'), 'system_audit_logs', ['id'], unique=False)
    op.create_index(op.f('ix_system_audit_logs_actor_id'), 'system_audit_logs', ['actor_id'], unique=False)
    op.create_index(op.f('ix_system_audit_logs_timestamp'), 'system_audit_logs', ['timestamp'], unique=False)

    op.create_table(
        'announcements',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('title', sa.String(), nullable=False),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('priority', sa.String(), nullable=False, server_default='Normal'),
        sa.Column('created_by', sa.String(), nullable=False),
        sa.Column('target_type', sa.String(), nullable=False, server_default='All'),
        sa.Column('target_employee_ids', sa.JSON(), nullable=False),
        sa.Column('likes', sa.JSON(), nullable=False),
        sa.Column('archived', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_announcements_id'), 'announcements', ['id'], unique=False)

    op.create_table(
        'announcement_replies',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('announcement_id', sa.Integer(), nullable=False),
        sa.Column('author_id', sa.String(), nullable=False),
        sa.Column('author_name', sa.String(), nullable=False),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['announcement_id'], ['announcements.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_announcement_replies_id'), 'announcement_replies', ['id'], unique=False)
    op.create_index(
        op.f('ix_announcement_replies_announcement_id'), 'announcement_replies', ['announcement_id'], unique=False
    )


def downgrade() -> None:
    op.drop_table('announcement_replies')
    op.drop_table('announcements')
    op.drop_table('system_audit_logs')
    op.drop_table('daily_submissions')
    op.drop_table('task_log_actions')
    op.drop_table('task_logs')
    op.drop_table('assignments')
    op.drop_table('tasks')
    op.drop_table('employees')
