"""Create scheduling tables

Revision ID: 001
Revises:
Create Date: 2026-09-28
"""
from alembic import op
import sqlalchemy as sa


# revision identifiers
revision = '001'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    # Calendars
    op.create_table(
        'calendars',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('code', sa.String(100), nullable=False, unique=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('country', sa.String(2), nullable=True),
        sa.Column('region', sa.String(100), nullable=True),
        sa.Column('type', sa.String(20), nullable=False, server_default='custom'),
        sa.Column('year', sa.Integer(), nullable=True),
        sa.Column('company_id', sa.String(36), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default='true'),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.func.now()),
    )
    op.create_index('ix_calendars_company_id', 'calendars', ['company_id'])

    op.create_table(
        'calendar_entries',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('calendar_id', sa.String(36), sa.ForeignKey('calendars.id', ondelete='CASCADE'), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('date_type', sa.String(20), nullable=False),
        sa.Column('fixed_date', sa.String(10), nullable=True),
        sa.Column('easter_offset', sa.Integer(), nullable=True),
        sa.Column('nth_weekday', sa.JSON(), nullable=True),
        sa.Column('start_date', sa.String(10), nullable=True),
        sa.Column('end_date', sa.String(10), nullable=True),
        sa.Column('is_recurring', sa.Boolean(), nullable=False, server_default='true'),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now()),
    )
    op.create_index('ix_calendar_entries_calendar_id', 'calendar_entries', ['calendar_id'])

    # Stops and versioned routes
    op.create_table(
        'stops',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('lat', sa.Float(), nullable=False),
        sa.Column('lon', sa.Float(), nullable=False),
    )

    op.create_table(
        'routes',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('company_id', sa.String(36), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('current_version_id', sa.String(36), nullable=True),
    )
    op.create_index('ix_routes_company_id', 'routes', ['company_id'])

    op.create_table(
        'route_versions',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('route_id', sa.String(36), sa.ForeignKey('routes.id', ondelete='CASCADE'), nullable=False),
        sa.Column('version_number', sa.Integer(), nullable=False, server_default='1'),
        sa.UniqueConstraint('route_id', 'version_number', name='uq_route_versions_route_number'),
    )
    op.create_index('ix_route_versions_route_id', 'route_versions', ['route_id'])

    op.create_table(
        'route_stops',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('route_version_id', sa.String(36), sa.ForeignKey('route_versions.id', ondelete='CASCADE'), nullable=False),
        sa.Column('stop_id', sa.String(36), sa.ForeignKey('stops.id'), nullable=False),
        sa.Column('sequence_number', sa.Integer(), nullable=False),
        sa.Column('distance_from_start', sa.Float(), nullable=False, server_default='0'),
        sa.Column('duration_from_start', sa.Integer(), nullable=False, server_default='0'),
    )
    op.create_index('ix_route_stops_route_version_id', 'route_stops', ['route_version_id'])

    # Schedules
    op.create_table(
        'schedules',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('company_id', sa.String(36), nullable=False),
        sa.Column('route_id', sa.String(36), sa.ForeignKey('routes.id'), nullable=False),
        sa.Column('vehicle_id', sa.String(36), nullable=True),
        sa.Column('driver_id', sa.String(36), nullable=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('departure_time', sa.String(5), nullable=False),
        sa.Column('arrival_time', sa.String(5), nullable=False),
        sa.Column('schedule_type', sa.String(20), nullable=False, server_default='recurring'),
        sa.Column('recurrence_rule', sa.Text(), nullable=True),
        sa.Column('valid_from', sa.Date(), nullable=False),
        sa.Column('valid_to', sa.Date(), nullable=True),
        sa.Column('calendar_modifiers', sa.JSON(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default='true'),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.func.now()),
    )
    op.create_index('ix_schedules_company_id', 'schedules', ['company_id'])
    op.create_index('ix_schedules_route_id', 'schedules', ['route_id'])
    op.create_index('ix_schedules_driver_id', 'schedules', ['driver_id'])

    op.create_table(
        'schedule_stop_times',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('schedule_id', sa.String(36), sa.ForeignKey('schedules.id', ondelete='CASCADE'), nullable=False),
        sa.Column('route_stop_id', sa.String(36), sa.ForeignKey('route_stops.id'), nullable=False),
        sa.Column('arrival_time', sa.String(5), nullable=False),
        sa.Column('departure_time', sa.String(5), nullable=False),
        sa.UniqueConstraint('schedule_id', 'route_stop_id', name='uq_schedule_stop_times_stop'),
    )
    op.create_index('ix_schedule_stop_times_schedule_id', 'schedule_stop_times', ['schedule_id'])

    op.create_table(
        'schedule_exceptions',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('schedule_id', sa.String(36), sa.ForeignKey('schedules.id', ondelete='CASCADE'), nullable=False),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('exception_type', sa.String(10), nullable=False),
        sa.Column('departure_time', sa.String(5), nullable=True),
        sa.Column('arrival_time', sa.String(5), nullable=True),
        sa.Column('vehicle_id', sa.String(36), nullable=True),
        sa.Column('driver_id', sa.String(36), nullable=True),
        sa.Column('reason', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now()),
        sa.UniqueConstraint('schedule_id', 'date', name='uq_schedule_exceptions_date'),
    )
    op.create_index('ix_schedule_exceptions_schedule_id', 'schedule_exceptions', ['schedule_id'])

    # Materialized and manual trips
    op.create_table(
        'trips',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('schedule_id', sa.String(36), sa.ForeignKey('schedules.id'), nullable=True),
        sa.Column('schedule_date', sa.Date(), nullable=True),
        sa.Column('company_id', sa.String(36), nullable=False),
        sa.Column('route_id', sa.String(36), sa.ForeignKey('routes.id'), nullable=False),
        sa.Column('route_version_id', sa.String(36), sa.ForeignKey('route_versions.id'), nullable=False),
        sa.Column('vehicle_id', sa.String(36), nullable=True),
        sa.Column('driver_id', sa.String(36), nullable=True),
        sa.Column('departure_time', sa.DateTime(), nullable=False),
        sa.Column('arrival_time', sa.DateTime(), nullable=False),
        sa.Column('actual_departure', sa.DateTime(), nullable=True),
        sa.Column('actual_arrival', sa.DateTime(), nullable=True),
        sa.Column('status', sa.String(20), nullable=False, server_default='scheduled'),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.func.now()),
        sa.UniqueConstraint('schedule_id', 'schedule_date', name='uq_trips_schedule_date'),
    )
    op.create_index('ix_trips_company_departure', 'trips', ['company_id', 'departure_time'])
    op.create_index('ix_trips_driver_id', 'trips', ['driver_id'])

    op.create_table(
        'trip_stop_times',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('trip_id', sa.String(36), sa.ForeignKey('trips.id', ondelete='CASCADE'), nullable=False),
        sa.Column('route_stop_id', sa.String(36), sa.ForeignKey('route_stops.id'), nullable=False),
        sa.Column('scheduled_arrival', sa.DateTime(), nullable=False),
        sa.Column('scheduled_departure', sa.DateTime(), nullable=False),
        sa.Column('actual_arrival', sa.DateTime(), nullable=True),
        sa.Column('actual_departure', sa.DateTime(), nullable=True),
        sa.UniqueConstraint('trip_id', 'route_stop_id', name='uq_trip_stop_times_stop'),
    )
    op.create_index('ix_trip_stop_times_trip_id', 'trip_stop_times', ['trip_id'])


def downgrade() -> None:
    op.drop_table('trip_stop_times')
    op.drop_table('trips')
    op.drop_table('schedule_exceptions')
    op.drop_table('schedule_stop_times')
    op.drop_table('schedules')
    op.drop_table('route_stops')
    op.drop_table('route_versions')
    op.drop_table('routes')
    op.drop_table('stops')
    op.drop_table('calendar_entries')
    op.drop_table('calendars')
