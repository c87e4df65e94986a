"""Initial quiz schema

Revision ID: a20261019quiz
Revises:
Create Date: 2026-10-19 09:00:00.000000
"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "a20261019quiz"
down_revision = None
branch_labels = None
depends_on = None

question_type = sa.Enum("multiple_choice", "true_false", "text", name="question_type")


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
        sa.Column('username', sa.String(50), nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('password_hash', sa.String(255), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index('ix_users_username', 'users', ['username'], unique=True)
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    op.create_table(
        'quizzes',
        sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
        sa.Column('title', sa.String(200), nullable=False),
        sa.Column('description', sa.Text, nullable=True),
        sa.Column('created_by', sa.Integer, sa.ForeignKey('users.id'), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index('ix_quizzes_created_by', 'quizzes', ['created_by'])

    op.create_table(
        'questions',
        sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
        sa.Column('quiz_id', sa.Integer, sa.ForeignKey('quizzes.id'), nullable=False),
        sa.Column('question_text', sa.Text, nullable=False),
        sa.Column('question_type', question_type, nullable=False),
        sa.Column('order_index', sa.Integer, nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.UniqueConstraint('quiz_id', 'order_index', name='uq_questions_quiz_order'),
    )
    op.create_index('ix_questions_quiz_id', 'questions', ['quiz_id'])

    op.create_table(
        'answer_options',
        sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
        sa.Column('question_id', sa.Integer, sa.ForeignKey('questions.id'), nullable=False),
        sa.Column('option_text', sa.Text, nullable=False),
        sa.Column('is_correct', sa.Boolean, nullable=False),
        sa.Column('order_index', sa.Integer, nullable=False),
    )
    op.create_index('ix_answer_options_question_id', 'answer_options', ['question_id'])

    op.create_table(
        'quiz_attempts',
        sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
        sa.Column('user_id', sa.Integer, sa.ForeignKey('users.id'), nullable=False),
        sa.Column('quiz_id', sa.Integer, sa.ForeignKey('quizzes.id'), nullable=False),
        sa.Column('score', sa.Numeric(5, 2), nullable=False),
        sa.Column('total_questions', sa.Integer, nullable=False),
        sa.Column('completed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('started_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index('ix_quiz_attempts_user_id', 'quiz_attempts', ['user_id'])
    op.create_index('ix_quiz_attempts_quiz_id', 'quiz_attempts', ['quiz_id'])

    op.create_table(
        'user_answers',
        sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
        sa.Column('user_id', sa.Integer, sa.ForeignKey('users.id'), nullable=False),
        sa.Column('question_id', sa.Integer, sa.ForeignKey('questions.id'), nullable=False),
        sa.Column('attempt_id', sa.Integer, sa.ForeignKey('quiz_attempts.id'), nullable=True),
        sa.Column('answer_text', sa.Text, nullable=True),
        sa.Column('selected_option_id', sa.Integer, sa.ForeignKey('answer_options.id'), nullable=True),
        sa.Column('is_correct', sa.Boolean, nullable=False),
        sa.Column('answered_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index('ix_user_answers_user_id', 'user_answers', ['user_id'])
    op.create_index('ix_user_answers_question_id', 'user_answers', ['question_id'])
    op.create_index('ix_user_answers_attempt_id', 'user_answers', ['attempt_id'])


def downgrade() -> None:
    op.drop_table('user_answers')
    op.drop_table('quiz_attempts')
    op.drop_table('answer_options')
    op.drop_table('questions')
    op.drop_table('quizzes')
    op.drop_table('users')
    question_type.drop(op.get_bind(), checkfirst=True)
