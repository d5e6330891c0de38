"""Create alumni, survey and response tables.

Revision ID: initial_001
Revises:
Create Date: 2026-10-19

Answers keep one nullable column per payload kind; which one is meaningful is
decided by the owning question's type, so there is no discriminator column.
"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa
from alumni_tracer.migrations.util import bool_default, get_timestamp_default, uuid_column


# revision identifiers, used by Alembic.
revision: str = "initial_001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create all tables."""
    now = get_timestamp_default()

    op.create_table(
        'users',
        uuid_column('user_id', primary_key=True),
        sa.Column('email', sa.String(255), nullable=False, unique=True),
        sa.Column('password_hash', sa.String(255), nullable=False),
        sa.Column('role', sa.String(20), nullable=False, server_default='alumni'),
        sa.Column('status', sa.String(20), nullable=False, server_default='active'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=now),
        sa.Column('last_login_date', sa.DateTime(timezone=True), nullable=True),
    )

    op.create_table(
        'batches',
        uuid_column('batch_id', primary_key=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('graduation_year', sa.Integer(), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('status', sa.String(20), nullable=False, server_default='active'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=now),
    )
    op.create_index('ix_batches_graduation_year', 'batches', ['graduation_year'])

    op.create_table(
        'alumni_profiles',
        uuid_column('profile_id', primary_key=True),
        uuid_column('user_id', sa.ForeignKey('users.user_id', ondelete='CASCADE'), nullable=False, unique=True),
        uuid_column('batch_id', sa.ForeignKey('batches.batch_id', ondelete='SET NULL'), nullable=True),
        sa.Column('first_name', sa.String(100), nullable=True),
        sa.Column('last_name', sa.String(100), nullable=True),
        sa.Column('middle_name', sa.String(100), nullable=True),
        sa.Column('student_id', sa.String(100), nullable=True),
        sa.Column('birth_date', sa.Date(), nullable=True),
        sa.Column('gender', sa.String(30), nullable=True),
        sa.Column('phone', sa.String(50), nullable=True),
        sa.Column('current_address', sa.Text(), nullable=True),
        sa.Column('city', sa.String(100), nullable=True),
        sa.Column('country', sa.String(100), nullable=True),
        sa.Column('degree_program', sa.String(255), nullable=True),
        sa.Column('major', sa.String(255), nullable=True),
        sa.Column('graduation_year', sa.Integer(), nullable=True),
        sa.Column('gpa', sa.Numeric(4, 2), nullable=True),
        sa.Column('employment_status', sa.String(40), nullable=True),
        sa.Column('current_job_title', sa.String(255), nullable=True),
        sa.Column('current_employer', sa.String(255), nullable=True),
        sa.Column('current_salary', sa.Numeric(12, 2), nullable=True),
        sa.Column('profile_completed', sa.Boolean(), nullable=False, server_default=bool_default(False)),
        sa.Column('profile_completed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=now),
    )

    op.create_table(
        'surveys',
        uuid_column('survey_id', primary_key=True),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('instructions', sa.Text(), nullable=True),
        sa.Column('survey_type', sa.String(50), nullable=False, server_default='tracer'),
        sa.Column('status', sa.String(20), nullable=False, server_default='draft'),
        sa.Column('start_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('end_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('is_anonymous', sa.Boolean(), nullable=False, server_default=bool_default(False)),
        sa.Column('allow_multiple_responses', sa.Boolean(), nullable=False, server_default=bool_default(False)),
        sa.Column('require_authentication', sa.Boolean(), nullable=False, server_default=bool_default(False)),
        sa.Column('is_registration_survey', sa.Boolean(), nullable=False, server_default=bool_default(False)),
        sa.Column('send_reminder_emails', sa.Boolean(), nullable=False, server_default=bool_default(False)),
        sa.Column('reminder_interval_days', sa.Integer(), nullable=True),
        sa.Column('total_sent', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('total_responses', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('response_rate', sa.Numeric(5, 2), nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=now),
    )
    op.create_index('ix_surveys_status', 'surveys', ['status'])

    op.create_table(
        'survey_questions',
        uuid_column('question_id', primary_key=True),
        uuid_column('survey_id', sa.ForeignKey('surveys.survey_id', ondelete='CASCADE'), nullable=False),
        sa.Column('question_text', sa.String(500), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('question_type', sa.String(30), nullable=False, server_default='text'),
        sa.Column('options', sa.JSON(), nullable=True),
        sa.Column('validation_rules', sa.JSON(), nullable=True),
        sa.Column('is_required', sa.Boolean(), nullable=False, server_default=bool_default(False)),
        sa.Column('order', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=bool_default(True)),
        sa.Column('matrix_rows', sa.JSON(), nullable=True),
        sa.Column('matrix_columns', sa.JSON(), nullable=True),
        sa.Column('rating_min', sa.Integer(), nullable=True),
        sa.Column('rating_max', sa.Integer(), nullable=True),
        sa.Column('rating_min_label', sa.String(100), nullable=True),
        sa.Column('rating_max_label', sa.String(100), nullable=True),
        sa.Column('placeholder', sa.String(255), nullable=True),
        sa.Column('help_text', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=now),
    )
    op.create_index('ix_survey_questions_survey_order', 'survey_questions', ['survey_id', 'order'])
    op.create_index('ix_survey_questions_survey_active', 'survey_questions', ['survey_id', 'is_active'])

    op.create_table(
        'survey_responses',
        uuid_column('response_id', primary_key=True),
        uuid_column('survey_id', sa.ForeignKey('surveys.survey_id', ondelete='CASCADE'), nullable=False),
        uuid_column('user_id', sa.ForeignKey('users.user_id', ondelete='SET NULL'), nullable=True),
        sa.Column('response_token', sa.String(128), nullable=False, unique=True),
        sa.Column('status', sa.String(20), nullable=False, server_default='in_progress'),
        sa.Column('started_at', sa.DateTime(timezone=True), nullable=False, server_default=now),
        sa.Column('completed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('last_updated_at', sa.DateTime(timezone=True), nullable=False, server_default=now),
        sa.Column('respondent_email', sa.String(255), nullable=True),
        sa.Column('respondent_name', sa.String(255), nullable=True),
        sa.Column('respondent_student_id', sa.String(100), nullable=True),
        sa.Column('ip_address', sa.String(64), nullable=True),
        sa.Column('user_agent', sa.Text(), nullable=True),
        sa.Column('total_questions', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('answered_questions', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('completion_percentage', sa.Numeric(5, 2), nullable=False, server_default='0'),
    )
    op.create_index('ix_survey_responses_survey_status', 'survey_responses', ['survey_id', 'status'])
    op.create_index('ix_survey_responses_user_survey', 'survey_responses', ['user_id', 'survey_id'])
    op.create_index('ix_survey_responses_respondent_email', 'survey_responses', ['respondent_email'])

    op.create_table(
        'survey_answers',
        uuid_column('answer_id', primary_key=True),
        uuid_column('response_id', sa.ForeignKey('survey_responses.response_id', ondelete='CASCADE'), nullable=False),
        uuid_column('question_id', sa.ForeignKey('survey_questions.question_id', ondelete='RESTRICT'), nullable=False),
        sa.Column('answer_text', sa.Text(), nullable=True),
        sa.Column('answer_json', sa.JSON(), nullable=True),
        sa.Column('answer_number', sa.Numeric(15, 4), nullable=True),
        sa.Column('answer_date', sa.Date(), nullable=True),
        sa.Column('answer_boolean', sa.Boolean(), nullable=True),
        sa.Column('file_path', sa.String(500), nullable=True),
        sa.Column('file_name', sa.String(255), nullable=True),
        sa.Column('file_type', sa.String(100), nullable=True),
        sa.Column('file_size', sa.Integer(), nullable=True),
        sa.Column('answered_at', sa.DateTime(timezone=True), nullable=False, server_default=now),
        sa.Column('is_skipped', sa.Boolean(), nullable=False, server_default=bool_default(False)),
        sa.UniqueConstraint('response_id', 'question_id', name='uq_survey_answers_response_question'),
    )
    op.create_index('ix_survey_answers_question_id', 'survey_answers', ['question_id'])
    op.create_index('ix_survey_answers_answered_at', 'survey_answers', ['answered_at'])

    op.create_table(
        'survey_invitations',
        uuid_column('invitation_id', primary_key=True),
        uuid_column('survey_id', sa.ForeignKey('surveys.survey_id', ondelete='CASCADE'), nullable=False),
        uuid_column('batch_id', sa.ForeignKey('batches.batch_id', ondelete='SET NULL'), nullable=True),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('name', sa.String(255), nullable=True),
        sa.Column('student_id', sa.String(100), nullable=True),
        sa.Column('invitation_token', sa.String(128), nullable=False, unique=True),
        sa.Column('status', sa.String(20), nullable=False, server_default='pending'),
        sa.Column('sent_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('opened_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('clicked_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('responded_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('reminder_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('last_reminder_sent', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=now),
    )
    op.create_index('ix_survey_invitations_survey_email', 'survey_invitations', ['survey_id', 'email'])

    op.create_table(
        'activity_logs',
        uuid_column('log_id', primary_key=True),
        uuid_column('user_id', sa.ForeignKey('users.user_id', ondelete='SET NULL'), nullable=True),
        sa.Column('action', sa.String(100), nullable=False),
        sa.Column('entity_kind', sa.String(30), nullable=True),
        uuid_column('entity_id', nullable=True),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('metadata', sa.JSON(), nullable=True),
        sa.Column('ip_address', sa.String(64), nullable=True),
        sa.Column('user_agent', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=now),
    )
    op.create_index('ix_activity_logs_user_action', 'activity_logs', ['user_id', 'action'])
    op.create_index('ix_activity_logs_entity', 'activity_logs', ['entity_kind', 'entity_id'])


def downgrade() -> None:
    """Drop all tables."""
    op.drop_table('activity_logs')
    op.drop_table('survey_invitations')
    op.drop_table('survey_answers')
    op.drop_table('survey_responses')
    op.drop_table('survey_questions')
    op.drop_table('surveys')
    op.drop_table('alumni_profiles')
    op.drop_table('batches')
    op.drop_table('users')
