"""mission control tables

Revision ID: 001_mission_control_tables
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

revision = '001_mission_control_tables'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'audits',
        sa.Column('id', sa.String(64), primary_key=True),
        sa.Column('site_slug', sa.String(32), nullable=False),
        sa.Column('audit_date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('lighthouse_score', sa.Integer, nullable=False),
        sa.Column('lcp_ms', sa.Float, nullable=False),
        sa.Column('cls', sa.Float, nullable=False),
        sa.Column('fid_ms', sa.Float, nullable=False),
        sa.Column('estimated_seo_visibility', sa.Integer, nullable=False),
        sa.Column('conversion_rate', sa.Float, nullable=False),
        sa.Column('critical_issues', sa.Integer, nullable=False, server_default='0'),
        sa.Column('high_priority_issues', sa.Integer, nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('NOW()'), nullable=False),
        sa.CheckConstraint('estimated_seo_visibility BETWEEN 0 AND 100', name='ck_audits_seo_visibility'),
        sa.CheckConstraint('lighthouse_score BETWEEN 0 AND 100', name='ck_audits_lighthouse'),
    )
    op.create_index('idx_audits_site_date', 'audits', ['site_slug', 'audit_date'])

    op.create_table(
        'findings',
        sa.Column('id', sa.String(64), primary_key=True),
        sa.Column('site_slug', sa.String(32), nullable=False),
        sa.Column('audit_id', sa.String(64), sa.ForeignKey('audits.id', ondelete='CASCADE'), nullable=False),
        sa.Column('title', sa.String(500), nullable=False),
        sa.Column('severity', sa.String(16), nullable=False),
        sa.Column('description', sa.Text, nullable=False, server_default=''),
        sa.Column('type', sa.String(32), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('NOW()'), nullable=False),
    )
    op.create_index('idx_findings_site_severity', 'findings', ['site_slug', 'severity'])
    op.create_index('idx_findings_created_at', 'findings', ['created_at'])

    op.create_table(
        'recommendations',
        sa.Column('id', sa.String(64), primary_key=True),
        sa.Column('site_slug', sa.String(32), nullable=False),
        sa.Column('title', sa.String(500), nullable=False),
        sa.Column('description', sa.Text, nullable=False, server_default=''),
        sa.Column('impact', sa.String(16), nullable=False),
        sa.Column('effort_hours', sa.Float, nullable=False, server_default='0'),
        sa.Column('priority', sa.String(16), nullable=False),
        sa.Column('status', sa.String(32), nullable=False, server_default='not_started'),
        sa.Column('blocker_notes', sa.Text, nullable=True),
        sa.Column('category', sa.String(32), nullable=False),
        sa.Column('owner', sa.String(255), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('NOW()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('NOW()'), nullable=False),
    )
    op.create_index('idx_recommendations_site_slug', 'recommendations', ['site_slug'])


def downgrade():
    op.drop_index('idx_recommendations_site_slug', table_name='recommendations')
    op.drop_table('recommendations')

    op.drop_index('idx_findings_created_at', table_name='findings')
    op.drop_index('idx_findings_site_severity', table_name='findings')
    op.drop_table('findings')

    op.drop_index('idx_audits_site_date', table_name='audits')
    op.drop_table('audits')
