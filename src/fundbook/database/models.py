"""SQLAlchemy models for fundbook database."""

from datetime import datetime, UTC
from sqlalchemy import (
    Column,
    Integer,
    String,
    ForeignKey,
    DateTime,
    Date,
    Numeric,
    Boolean,
    Index,
    UniqueConstraint,
    create_engine,
    text,
)
from sqlalchemy.orm import declarative_base, relationship, sessionmaker, Session

Base = declarative_base()

# Money columns
Money = Numeric(12, 2, asdecimal=True)


class Account(Base):
    """Bank account model."""

    __tablename__ = "accounts"

    id = Column(Integer, primary_key=True)
    name = Column(String, unique=True, nullable=False)
    account_type = Column(String, nullable=False, default="checking")
    opening_balance = Column(Money, nullable=True, default=0)
    is_active = Column(Boolean, default=True, nullable=False)
    fee_percentage = Column(Numeric(7, 4), nullable=True)
    fee_flat_amount = Column(Money, nullable=True)
    fee_category_id = Column(Integer, ForeignKey("categories.id"), nullable=True)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    # Relationships
    transactions = relationship("Transaction", back_populates="account")
    reconciliation_sessions = relationship(
        "ReconciliationSession", back_populates="account", cascade="all, delete-orphan"
    )


class Category(Base):
    """Income or expense category model with an optional parent."""

    __tablename__ = "categories"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    category_type = Column(String, nullable=False)
    parent_id = Column(Integer, ForeignKey("categories.id", ondelete="SET NULL"), nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    __table_args__ = (UniqueConstraint("name", "category_type", name="uq_category_name_type"),)

    # Relationships
    parent = relationship("Category", remote_side=[id], backref="children")
    transactions = relationship("Transaction", back_populates="category")


class Transaction(Base):
    """Transaction model."""

    __tablename__ = "transactions"

    id = Column(Integer, primary_key=True)
    account_id = Column(Integer, ForeignKey("accounts.id"), nullable=False)
    date = Column(Date, nullable=False)
    amount = Column(Money, nullable=False)
    transaction_type = Column(String, nullable=False)
    status = Column(String, nullable=False, default="uncleared")
    description = Column(String, nullable=True)
    category_id = Column(Integer, ForeignKey("categories.id"), nullable=True)
    reconciliation_session_id = Column(
        Integer, ForeignKey("reconciliation_sessions.id"), nullable=True
    )
    template_id = Column(
        Integer, ForeignKey("recurring_templates.id", ondelete="SET NULL"), nullable=True
    )
    cleared_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    # Relationships
    account = relationship("Account", back_populates="transactions")
    category = relationship("Category", back_populates="transactions")
    reconciliation_session = relationship("ReconciliationSession", back_populates="transactions")


class ReconciliationSession(Base):
    """Reconciliation session model.

    A partial unique index allows one in-progress session per account.
    """

    __tablename__ = "reconciliation_sessions"

    id = Column(Integer, primary_key=True)
    account_id = Column(Integer, ForeignKey("accounts.id"), nullable=False)
    statement_date = Column(Date, nullable=False)
    statement_ending_balance = Column(Money, nullable=False)
    starting_balance = Column(Money, nullable=False)
    status = Column(String, nullable=False, default="in_progress")
    finished_at = Column(DateTime, nullable=True)
    transaction_count = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    __table_args__ = (
        Index(
            "uq_reconciliation_in_progress",
            "account_id",
            unique=True,
            sqlite_where=text("status = 'in_progress'"),
            postgresql_where=text("status = 'in_progress'"),
        ),
    )

    # Relationships
    account = relationship("Account", back_populates="reconciliation_sessions")
    transactions = relationship("Transaction", back_populates="reconciliation_session")


class RecurringTemplate(Base):
    """Recurring transaction template model."""

    __tablename__ = "recurring_templates"

    id = Column(Integer, primary_key=True)
    account_id = Column(Integer, ForeignKey("accounts.id"), nullable=False)
    transaction_type = Column(String, nullable=False)
    amount = Column(Money, nullable=False)
    description = Column(String, nullable=False)
    category_id = Column(Integer, ForeignKey("categories.id"), nullable=True)
    rule = Column(String, nullable=False)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=True)
    next_occurrence_date = Column(Date, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)


class Season(Base):
    """Fee-based season model."""

    __tablename__ = "seasons"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    fee_amount = Column(Money, nullable=False, default=0)
    start_date = Column(Date, nullable=True)
    end_date = Column(Date, nullable=True)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    enrollments = relationship("Enrollment", back_populates="season", cascade="all, delete-orphan")


class Student(Base):
    """Student model."""

    __tablename__ = "students"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    guardian_name = Column(String, nullable=True)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)


class Enrollment(Base):
    """Season enrollment model."""

    __tablename__ = "enrollments"

    id = Column(Integer, primary_key=True)
    season_id = Column(Integer, ForeignKey("seasons.id"), nullable=False)
    student_id = Column(Integer, ForeignKey("students.id"), nullable=False)
    fee_amount = Column(Money, nullable=False)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    __table_args__ = (UniqueConstraint("season_id", "student_id", name="uq_season_student"),)

    season = relationship("Season", back_populates="enrollments")
    payments = relationship("Payment", back_populates="enrollment", cascade="all, delete-orphan")


class Payment(Base):
    """Enrollment payment model."""

    __tablename__ = "payments"

    id = Column(Integer, primary_key=True)
    enrollment_id = Column(Integer, ForeignKey("enrollments.id"), nullable=False)
    payment_date = Column(Date, nullable=False)
    amount = Column(Money, nullable=False)
    payment_method = Column(String, nullable=True)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    enrollment = relationship("Enrollment", back_populates="payments")


def create_session_factory(database_url: str) -> sessionmaker[Session]:
    """Create a SQLAlchemy session factory."""
    engine = create_engine(database_url, echo=False)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine)
