"""
Database Models - Ledger Schema

Relational layout of the assembled sales graph. Every table has an integer
surrogate key; natural keys (uuid, store code, item code, sale code) are
unique columns used to resolve references.

Dimension Tables:
- DimAddress: Deduplicated postal addresses
- DimPerson: Persons, with their ordered DimEmail rows
- DimStore: Stores and their managers
- DimItem: Catalog item definitions

Fact Tables:
- FactSale: Sale headers with priced totals
- FactSaleItem: Sale lines, one row per derived item, with variant columns
"""

from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import (
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    """Base class for all database models"""
    pass


# =============================================================================
# DIMENSION TABLES
# =============================================================================

class DimAddress(Base):
    """
    Address Dimension Table

    Shared by persons and stores; identical addresses are stored once.
    """
    __tablename__ = "dim_address"

    address_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    street: Mapped[str] = mapped_column(String(255), nullable=False)
    city: Mapped[str] = mapped_column(String(255), nullable=False)
    state: Mapped[str] = mapped_column(String(255), nullable=False)
    zip_code: Mapped[int] = mapped_column(Integer, nullable=False)

    __table_args__ = (
        UniqueConstraint("street", "city", "state", "zip_code", name="uq_dim_address"),
    )


class DimPerson(Base):
    """Person Dimension Table"""
    __tablename__ = "dim_person"

    person_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    uuid: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    first_name: Mapped[Optional[str]] = mapped_column(String(255))
    last_name: Mapped[str] = mapped_column(String(255), nullable=False)
    address_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("dim_address.address_id"), nullable=False
    )

    # Relationships
    address: Mapped[DimAddress] = relationship()
    emails: Mapped[List["DimEmail"]] = relationship(
        back_populates="person",
        order_by="DimEmail.position",
        cascade="all, delete-orphan",
    )


class DimEmail(Base):
    """
    Email Table

    Position keeps the input order of a person's emails.
    """
    __tablename__ = "dim_email"

    email_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    person_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("dim_person.person_id"), nullable=False
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False)
    address: Mapped[str] = mapped_column(String(255), nullable=False)

    person: Mapped[DimPerson] = relationship(back_populates="emails")

    __table_args__ = (
        Index("ix_dim_email_person", "person_id", "position"),
    )


class DimStore(Base):
    """Store Dimension Table"""
    __tablename__ = "dim_store"

    store_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    store_code: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    manager_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("dim_person.person_id"), nullable=False
    )
    address_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("dim_address.address_id"), nullable=False
    )


class DimItem(Base):
    """
    Item Dimension Table

    Catalog definitions. type_code is the raw one-letter discriminator;
    base_price keeps its input precision.
    """
    __tablename__ = "dim_item"

    item_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    unique_code: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    type_code: Mapped[str] = mapped_column(String(1), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    base_price: Mapped[Decimal] = mapped_column(Numeric, nullable=False)


# =============================================================================
# FACT TABLES
# =============================================================================

class FactSale(Base):
    """
    Sale Fact Table

    One row per sale with its priced totals.
    """
    __tablename__ = "fact_sale"

    sale_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    unique_code: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    sale_date: Mapped[date] = mapped_column(Date, nullable=False)

    # Dimension foreign keys
    store_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("dim_store.store_id"), nullable=False
    )
    customer_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("dim_person.person_id"), nullable=False
    )
    salesman_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("dim_person.person_id"), nullable=False
    )

    # Measures
    gross_price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    total_tax: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    net_price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)

    # Audit
    loaded_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())

    # Relationships
    lines: Mapped[List["FactSaleItem"]] = relationship(
        back_populates="sale",
        order_by="FactSaleItem.line_number",
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        Index("ix_fact_sale_store", "store_id"),
        Index("ix_fact_sale_date", "sale_date"),
    )


class FactSaleItem(Base):
    """
    Sale Line Fact Table

    Grain is one derived item on one sale. Variant columns are filled
    according to item_type (P, L, S, D or V) and left null otherwise.
    Quantities keep the precision they were read with; only the priced
    measures are stored in cents.
    """
    __tablename__ = "fact_sale_item"

    sale_item_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    sale_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("fact_sale.sale_id"), nullable=False
    )
    item_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("dim_item.item_id"), nullable=False
    )
    line_number: Mapped[int] = mapped_column(Integer, nullable=False)
    item_type: Mapped[str] = mapped_column(String(1), nullable=False)

    # Lease
    start_date: Mapped[Optional[date]] = mapped_column(Date)
    end_date: Mapped[Optional[date]] = mapped_column(Date)

    # Service
    total_hours: Mapped[Optional[Decimal]] = mapped_column(Numeric)
    employee_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("dim_person.person_id")
    )

    # Data plan
    total_gb: Mapped[Optional[Decimal]] = mapped_column(Numeric)

    # Voice plan
    phone_number: Mapped[Optional[str]] = mapped_column(String(40))
    total_period: Mapped[Optional[Decimal]] = mapped_column(Numeric)

    # Measures
    gross_price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    tax: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)

    sale: Mapped[FactSale] = relationship(back_populates="lines")

    __table_args__ = (
        UniqueConstraint("sale_id", "line_number", name="uq_fact_sale_item_line"),
        Index("ix_fact_sale_item_item", "item_id"),
    )
