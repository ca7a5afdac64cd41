"""Property hierarchy ORM models: site > building > floor, and assets."""

from sqlalchemy import Float, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from app.infrastructure.persistence.database import Base
from app.infrastructure.persistence.models.mixins import TenantScopedModel


class Site(TenantScopedModel, Base):
    """Site (street address). Table: site."""

    __tablename__ = "site"

    site_name: Mapped[str] = mapped_column(String, nullable=False)
    street: Mapped[str | None] = mapped_column(String, nullable=True)
    suburb: Mapped[str | None] = mapped_column(String, nullable=True)
    state: Mapped[str | None] = mapped_column(String, nullable=True)
    postcode: Mapped[str | None] = mapped_column(String(10), nullable=True)
    latitude: Mapped[float | None] = mapped_column(Float, nullable=True)
    longitude: Mapped[float | None] = mapped_column(Float, nullable=True)


class Building(TenantScopedModel, Base):
    """Building on a site. Table: building."""

    __tablename__ = "building"

    site_id: Mapped[str | None] = mapped_column(
        String, ForeignKey("site.id", ondelete="CASCADE"), nullable=True, index=True
    )
    building_name: Mapped[str] = mapped_column(String, nullable=False)
    building_code: Mapped[str | None] = mapped_column(String, nullable=True)
    category: Mapped[str | None] = mapped_column(String, nullable=True)


class Floor(TenantScopedModel, Base):
    """Floor of a building. Table: floor."""

    __tablename__ = "floor"

    building_id: Mapped[str | None] = mapped_column(
        String, ForeignKey("building.id", ondelete="CASCADE"), nullable=True, index=True
    )
    floor_name: Mapped[str] = mapped_column(String, nullable=False)
    floor_number: Mapped[int | None] = mapped_column(Integer, nullable=True)
    floor_type: Mapped[str | None] = mapped_column(String, nullable=True)
    occupancy: Mapped[int | None] = mapped_column(Integer, nullable=True)


class Asset(TenantScopedModel, Base):
    """Physical asset (plant, device). Table: asset."""

    __tablename__ = "asset"

    site_id: Mapped[str | None] = mapped_column(
        String, ForeignKey("site.id", ondelete="SET NULL"), nullable=True
    )
    building_id: Mapped[str | None] = mapped_column(
        String, ForeignKey("building.id", ondelete="SET NULL"), nullable=True
    )
    floor_id: Mapped[str | None] = mapped_column(
        String, ForeignKey("floor.id", ondelete="SET NULL"), nullable=True
    )
    asset_no: Mapped[str | None] = mapped_column(String, nullable=True)
    device_id: Mapped[str | None] = mapped_column(String, nullable=True)
    category: Mapped[str | None] = mapped_column(String, nullable=True)
    status: Mapped[str | None] = mapped_column(String, nullable=True)
