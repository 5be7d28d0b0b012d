"""Create route graph tables

Revision ID: 001
Revises:
Create Date: 2026-10-19
"""
from alembic import op
import sqlalchemy as sa
from geoalchemy2 import Geometry


# revision identifiers
revision = '001'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.execute('CREATE EXTENSION IF NOT EXISTS postgis')

    # Routes table (written by the route editor)
    op.create_table(
        'routes',
        sa.Column('id', sa.String(100), primary_key=True),
        sa.Column('name', sa.String(255), nullable=True),
        sa.Column('status', sa.String(20), nullable=True),
        sa.Column('deleted_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column(
            'geometry',
            Geometry(geometry_type='GEOMETRY', srid=4326, spatial_index=False),
            nullable=True,
        ),
    )
    op.create_index('ix_routes_status', 'routes', ['status'])

    # Graph nodes table (stops and intersections)
    op.create_table(
        'graph_nodes',
        sa.Column('id', sa.String(100), primary_key=True),
        sa.Column('name', sa.String(255), nullable=True),
        sa.Column('lat', sa.Float(), nullable=False),
        sa.Column('lng', sa.Float(), nullable=False),
    )

    # Route <-> node links, owned by the route graph builder
    op.create_table(
        'route_graph_nodes',
        sa.Column(
            'route_id', sa.String(100),
            sa.ForeignKey('routes.id', ondelete='CASCADE'), primary_key=True,
        ),
        sa.Column(
            'graph_node_id', sa.String(100),
            sa.ForeignKey('graph_nodes.id', ondelete='CASCADE'), primary_key=True,
        ),
        sa.Column('order_index', sa.Integer(), nullable=False),
        sa.Column('distance_from_start_m', sa.Integer(), nullable=False),
    )
    op.create_index(
        'idx_route_graph_nodes_order', 'route_graph_nodes', ['route_id', 'order_index']
    )


def downgrade() -> None:
    op.drop_index('idx_route_graph_nodes_order', table_name='route_graph_nodes')
    op.drop_table('route_graph_nodes')
    op.drop_table('graph_nodes')
    op.drop_index('ix_routes_status', table_name='routes')
    op.drop_table('routes')
