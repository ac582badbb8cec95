"""Create campaign workflow tables

This migration adds:
1. users, brands, creator_profiles
2. campaigns (aggregate state, selection commit stamps, brief)
3. engagements (negotiation / script / content sub-states)
4. negotiation_events
5. notifications

Revision ID: create_workflow_tables_001
Revises:
Create Date: 2026-10-19
"""

from alembic import op
import sqlalchemy as sa

# revision identifiers
revision = 'create_workflow_tables_001'
down_revision = None
branch_labels = None
depends_on = None


USER_TYPES = ('admin', 'brand_owner', 'brand_emp', 'creator')
CAMPAIGN_STATES = ('sourcing', 'creators_shortlisted', 'creators_are_final', 'brief_published', 'in_production', 'completed')
SELECTION_STATUSES = ('pending', 'accepted', 'rejected')
NEGOTIATION_STATES = ('none', 'bid_pending', 'amount_negotiated', 'amount_finalized', 'accepted', 'rejected')
SCRIPT_STATES = ('none', 'pending', 'approved', 'rejected', 'revision_requested')
CONTENT_STATES = ('none', 'pending', 'approved', 'rejected', 'revision_requested', 'live')


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime, server_default=sa.func.now()),
    ]


def upgrade():
    # 1. Identity-side tables
    op.create_table('brands',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('industry', sa.String(255)),
        sa.Column('description', sa.Text),
        sa.Column('is_active', sa.Boolean, server_default=sa.true()),
        *_timestamps(),
    )

    op.create_table('users',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('name', sa.String(255)),
        sa.Column('user_type', sa.Enum(*USER_TYPES, name='usertypedb'), nullable=False, server_default='creator'),
        sa.Column('brand_id', sa.String(36), sa.ForeignKey('brands.id', ondelete='SET NULL'), nullable=True),
        sa.Column('is_active', sa.Boolean, server_default=sa.true()),
        *_timestamps(),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    op.create_table('creator_profiles',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('user_id', sa.String(36), sa.ForeignKey('users.id', ondelete='CASCADE'), unique=True, nullable=False),
        sa.Column('display_name', sa.String(100), nullable=False),
        sa.Column('category', sa.String(100)),
        sa.Column('followers', sa.Integer, server_default='0'),
        sa.Column('avg_views', sa.Integer, server_default='0'),
        sa.Column('channel_url', sa.String(500)),
        *_timestamps(),
    )

    # 2. Campaigns
    op.create_table('campaigns',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('brand_id', sa.String(36), sa.ForeignKey('brands.id'), nullable=False),
        sa.Column('created_by', sa.String(36), sa.ForeignKey('users.id'), nullable=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('description', sa.Text),
        sa.Column('budget', sa.Integer, server_default='0'),
        sa.Column('cost_per_view', sa.Integer, server_default='0'),
        sa.Column('target_categories', sa.JSON),
        sa.Column('min_followers', sa.Integer),
        sa.Column('max_followers', sa.Integer),
        sa.Column('creator_count', sa.Integer),
        sa.Column('go_live_date', sa.DateTime),
        sa.Column('negotiation_deadline', sa.DateTime),
        sa.Column('negotiation_rounds', sa.Integer),
        sa.Column('state', sa.Enum(*CAMPAIGN_STATES, name='campaignstatedb'), nullable=False, server_default='sourcing'),
        sa.Column('shortlisted_at', sa.DateTime),
        sa.Column('amounts_finalized_at', sa.DateTime),
        sa.Column('creators_finalized_at', sa.DateTime),
        sa.Column('production_started_at', sa.DateTime),
        sa.Column('completed_at', sa.DateTime),
        sa.Column('archived_at', sa.DateTime),
        # Brief
        sa.Column('video_title', sa.String(255)),
        sa.Column('primary_focus', sa.Text),
        sa.Column('secondary_focus', sa.Text),
        sa.Column('dos', sa.Text),
        sa.Column('donts', sa.Text),
        sa.Column('cta', sa.Text),
        sa.Column('sample_video_uri', sa.String(1000)),
        sa.Column('script_template', sa.Text),
        sa.Column('brief_published_at', sa.DateTime),
        sa.Column('brief_updated_at', sa.DateTime),
        sa.Column('version', sa.Integer, nullable=False, server_default='1'),
        *_timestamps(),
    )

    # 3. Engagements
    op.create_table('engagements',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('campaign_id', sa.String(36), sa.ForeignKey('campaigns.id', ondelete='CASCADE'), nullable=False),
        sa.Column('creator_id', sa.String(36), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('selection_status', sa.Enum(*SELECTION_STATUSES, name='selectionstatusdb'), nullable=False, server_default='pending'),
        sa.Column('selection_comment', sa.Text),
        sa.Column('negotiation_status', sa.Enum(*NEGOTIATION_STATES, name='negotiationstatedb'), nullable=False, server_default='none'),
        sa.Column('creator_bid_amount', sa.Integer),
        sa.Column('brand_proposed_amount', sa.Integer),
        sa.Column('final_amount', sa.Integer),
        sa.Column('bid_rounds', sa.Integer, nullable=False, server_default='0'),
        sa.Column('amount_locked_at', sa.DateTime),
        sa.Column('negotiation_updated_at', sa.DateTime),
        sa.Column('script_status', sa.Enum(*SCRIPT_STATES, name='scriptstatedb'), nullable=False, server_default='none'),
        sa.Column('script_content', sa.Text),
        sa.Column('script_feedback', sa.Text),
        sa.Column('script_submitted_at', sa.DateTime),
        sa.Column('script_reviewed_at', sa.DateTime),
        sa.Column('content_status', sa.Enum(*CONTENT_STATES, name='contentstatedb'), nullable=False, server_default='none'),
        sa.Column('content_uri', sa.String(1000)),
        sa.Column('live_uri', sa.String(1000)),
        sa.Column('content_feedback', sa.Text),
        sa.Column('content_submitted_at', sa.DateTime),
        sa.Column('content_reviewed_at', sa.DateTime),
        sa.Column('went_live_at', sa.DateTime),
        sa.Column('version', sa.Integer, nullable=False, server_default='1'),
        *_timestamps(),
        sa.UniqueConstraint('campaign_id', 'creator_id', name='uq_engagement_campaign_creator'),
    )
    op.create_index('ix_engagements_campaign_id', 'engagements', ['campaign_id'])
    op.create_index('ix_engagements_creator_id', 'engagements', ['creator_id'])

    # 4. Negotiation history
    op.create_table('negotiation_events',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('engagement_id', sa.String(36), sa.ForeignKey('engagements.id', ondelete='CASCADE'), nullable=False),
        sa.Column('actor_id', sa.String(36), sa.ForeignKey('users.id'), nullable=True),
        sa.Column('event', sa.String(50), nullable=False),
        sa.Column('amount', sa.Integer),
        sa.Column('from_state', sa.String(30)),
        sa.Column('to_state', sa.String(30)),
        sa.Column('created_at', sa.DateTime),
    )
    op.create_index('ix_negotiation_events_engagement_id', 'negotiation_events', ['engagement_id'])

    # 5. Notifications
    op.create_table('notifications',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('user_id', sa.String(36), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('type', sa.String(50), nullable=False),
        sa.Column('title', sa.String(200), nullable=False),
        sa.Column('message', sa.Text),
        sa.Column('data', sa.JSON),
        sa.Column('read', sa.Boolean, server_default=sa.false()),
        sa.Column('read_at', sa.DateTime),
        sa.Column('created_at', sa.DateTime, server_default=sa.func.now()),
    )
    op.create_index('ix_notifications_user_id', 'notifications', ['user_id'])


def downgrade():
    op.drop_table('notifications')
    op.drop_table('negotiation_events')
    op.drop_table('engagements')
    op.drop_table('campaigns')
    op.drop_table('creator_profiles')
    op.drop_table('users')
    op.drop_table('brands')

    bind = op.get_bind()
    if bind.dialect.name == 'postgresql':
        for name in ('contentstatedb', 'scriptstatedb', 'negotiationstatedb', 'selectionstatusdb', 'campaignstatedb', 'usertypedb'):
            op.execute(f"DROP TYPE IF EXISTS {name}")
