"""Initial schema with PostGIS extension and all core tables.

Revision ID: 001
Create Date: 2026-10-18
"""

from alembic import op
import sqlalchemy as sa
from geoalchemy2 import Geometry
from sqlalchemy.dialects.postgresql import JSONB


revision = "001"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
        ),
    ]


def upgrade() -> None:
    # Enable PostGIS extension
    op.execute("CREATE EXTENSION IF NOT EXISTS postgis")

    # ── users ─────────────────────────────────────────────────────────
    op.create_table(
        "users",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(120), nullable=False),
        sa.Column("email", sa.String(255), unique=True, nullable=False),
        sa.Column("phone_number", sa.String(32), nullable=False),
        sa.Column("avatar", sa.String(512), nullable=True),
        sa.Column("notifications", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column("home_lat", sa.Float, nullable=True),
        sa.Column("home_lng", sa.Float, nullable=True),
        *_timestamps(),
    )

    # ── parking_locations ─────────────────────────────────────────────
    op.create_table(
        "parking_locations",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("address", sa.String(300), nullable=False),
        sa.Column(
            "point",
            Geometry("POINT", srid=4326, spatial_index=False),
            nullable=False,
        ),
        sa.Column("longitude", sa.Float, nullable=False),
        sa.Column("latitude", sa.Float, nullable=False),
        sa.Column("total_slots", sa.Integer, nullable=False),
        sa.Column("available_slots", sa.Integer, nullable=False),
        sa.Column("price_per_hour", sa.Float, nullable=False),
        sa.Column("rating", sa.Float, nullable=False, server_default="0"),
        sa.Column("reviews", sa.Integer, nullable=False, server_default="0"),
        sa.Column("features", JSONB, nullable=False, server_default="[]"),
        sa.Column("slots", JSONB, nullable=False, server_default="[]"),
        sa.Column("version", sa.Integer, nullable=False),
        *_timestamps(),
        sa.CheckConstraint("total_slots >= 1", name="chk_parking_total_slots"),
        sa.CheckConstraint("available_slots >= 0", name="chk_parking_available_slots"),
        sa.CheckConstraint("price_per_hour >= 0", name="chk_parking_price"),
        sa.CheckConstraint("rating >= 0 AND rating <= 5", name="chk_parking_rating"),
        sa.CheckConstraint("reviews >= 0", name="chk_parking_reviews"),
    )
    op.create_index(
        "idx_parking_point",
        "parking_locations",
        ["point"],
        postgresql_using="gist",
    )

    # ── rides ─────────────────────────────────────────────────────────
    op.create_table(
        "rides",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column(
            "user_id", sa.Integer, sa.ForeignKey("users.id"), nullable=False
        ),
        sa.Column("driver_id", sa.String(64), nullable=True),
        sa.Column("origin_address", sa.String(300), nullable=False),
        sa.Column(
            "origin_point",
            Geometry("POINT", srid=4326, spatial_index=False),
            nullable=False,
        ),
        sa.Column("origin_lat", sa.Float, nullable=False),
        sa.Column("origin_lng", sa.Float, nullable=False),
        sa.Column("destination_address", sa.String(300), nullable=False),
        sa.Column(
            "destination_point",
            Geometry("POINT", srid=4326, spatial_index=False),
            nullable=False,
        ),
        sa.Column("destination_lat", sa.Float, nullable=False),
        sa.Column("destination_lng", sa.Float, nullable=False),
        sa.Column(
            "vehicle_type",
            sa.Enum("Sedan", "SUV", "Luxury", "Van", name="ridevehicletype"),
            nullable=False,
        ),
        sa.Column(
            "status",
            sa.Enum(
                "pending",
                "confirmed",
                "in-progress",
                "completed",
                "cancelled",
                name="ridestatus",
            ),
            server_default="pending",
            nullable=False,
        ),
        sa.Column("booking_time", sa.DateTime(timezone=True), nullable=False),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("price", sa.Float, nullable=False),
        sa.Column("distance_km", sa.Float, nullable=False),
        sa.Column("idempotency_key", sa.String(64), nullable=True),
        *_timestamps(),
        sa.CheckConstraint("price >= 0", name="chk_rides_price"),
        sa.CheckConstraint("distance_km >= 0", name="chk_rides_distance"),
        sa.UniqueConstraint(
            "user_id", "idempotency_key", name="uq_rides_user_idempotency"
        ),
    )
    op.create_index(
        "idx_rides_origin", "rides", ["origin_point"], postgresql_using="gist"
    )
    op.create_index(
        "idx_rides_destination",
        "rides",
        ["destination_point"],
        postgresql_using="gist",
    )
    op.create_index("idx_rides_status", "rides", ["status"])
    op.create_index("idx_rides_user", "rides", ["user_id"])
    op.create_index("idx_rides_vehicle_type", "rides", ["vehicle_type"])


def downgrade() -> None:
    op.drop_table("rides")
    op.drop_table("parking_locations")
    op.drop_table("users")
    op.execute("DROP TYPE IF EXISTS ridestatus")
    op.execute("DROP TYPE IF EXISTS ridevehicletype")
