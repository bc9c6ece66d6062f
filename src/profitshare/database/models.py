"""SQLAlchemy models for the profitshare database."""

from datetime import datetime, UTC
from sqlalchemy import (
    Column,
    Integer,
    String,
    ForeignKey,
    DateTime,
    Numeric,
    Boolean,
    Index,
    create_engine,
    event,
)
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import declarative_base, relationship, sessionmaker, Session

Base = declarative_base()

# Seconds a SQLite connection waits for another writer before failing.
SQLITE_BUSY_TIMEOUT = 30


def _utcnow() -> datetime:
    return datetime.now(UTC).replace(tzinfo=None)


class Transaction(Base):
    """Classified ledger transaction model."""

    __tablename__ = "transactions"

    id = Column(Integer, primary_key=True)
    transaction_time = Column(DateTime, nullable=False, index=True)
    bill_account = Column(String, nullable=False, index=True)
    category = Column(String, nullable=False, index=True)
    direction = Column(String, nullable=False)
    status = Column(String, nullable=False, default="")
    amount = Column(Numeric(14, 2), nullable=False)
    internal_transfer = Column(Boolean, default=False, nullable=False)
    order_id = Column(String, nullable=False, default="")
    description = Column(String, nullable=False, default="")
    incremental_settled_at = Column(DateTime, nullable=True)
    incremental_settlement_batch_id = Column(
        Integer, ForeignKey("settlement_batches.id"), nullable=True
    )
    created_at = Column(DateTime, default=_utcnow, nullable=False)

    __table_args__ = (Index("ix_transactions_incremental_settled_at", "incremental_settled_at"),)


class ProfitParticipant(Base):
    """Profit participant model."""

    __tablename__ = "profit_participants"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    bill_account = Column(String, unique=True, nullable=True)
    ratio = Column(Numeric(8, 6), nullable=False)
    note = Column(String, nullable=False, default="")
    created_at = Column(DateTime, default=_utcnow, nullable=False)
    updated_at = Column(DateTime, default=_utcnow, onupdate=_utcnow, nullable=False)


class SettlementBatch(Base):
    """Settlement batch model."""

    __tablename__ = "settlement_batches"

    id = Column(Integer, primary_key=True)
    batch_no = Column(String, unique=True, nullable=False)
    strategy = Column(String, nullable=False, default="cumulative")
    bill_account = Column(String, nullable=False, default="")
    settlement_time = Column(DateTime, nullable=False, index=True)
    carry_ratio = Column(Numeric(4, 2), nullable=False)
    period_net_amount = Column(Numeric(14, 2), nullable=False)
    previous_carry_forward_amount = Column(Numeric(14, 2), nullable=False)
    cumulative_net_amount = Column(Numeric(14, 2), nullable=False)
    settled_base_amount = Column(Numeric(14, 2), nullable=False)
    distributable_amount = Column(Numeric(14, 2), nullable=False)
    paid_amount = Column(Numeric(14, 2), nullable=False)
    carry_forward_amount = Column(Numeric(14, 2), nullable=False)
    cumulative_settled_amount = Column(Numeric(14, 2), nullable=False)
    note = Column(String, nullable=False, default="")
    is_effective = Column(Boolean, default=False, nullable=False, index=True)
    created_at = Column(DateTime, default=_utcnow, nullable=False)

    __table_args__ = (Index("ix_settlement_batches_scope", "strategy", "bill_account"),)

    # Relationships
    allocations = relationship(
        "SettlementAllocation",
        back_populates="settlement_batch",
        order_by="SettlementAllocation.id",
    )


class SettlementAllocation(Base):
    """Allocation snapshot row of a settlement batch."""

    __tablename__ = "settlement_allocations"

    id = Column(Integer, primary_key=True)
    settlement_batch_id = Column(Integer, ForeignKey("settlement_batches.id"), nullable=False)
    participant_id = Column(
        Integer, ForeignKey("profit_participants.id", ondelete="SET NULL"), nullable=True
    )
    participant_name = Column(String, nullable=False)
    participant_bill_account = Column(String, nullable=True)
    ratio = Column(Numeric(8, 6), nullable=False)
    amount = Column(Numeric(14, 2), nullable=False)
    account_held_amount = Column(Numeric(14, 2), nullable=False)
    actual_transfer_amount = Column(Numeric(14, 2), nullable=False)
    note = Column(String, nullable=False, default="")
    created_at = Column(DateTime, default=_utcnow, nullable=False)

    # Relationships
    settlement_batch = relationship("SettlementBatch", back_populates="allocations")


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_session_factory(database_url: str) -> sessionmaker[Session]:
    """Create a SQLAlchemy session factory."""
    connect_args = {}
    if make_url(database_url).get_backend_name() == "sqlite":
        connect_args["timeout"] = SQLITE_BUSY_TIMEOUT
    engine: Engine = create_engine(database_url, echo=False, connect_args=connect_args)
    if engine.dialect.name == "sqlite":
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine)
