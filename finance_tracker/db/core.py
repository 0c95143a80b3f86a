import os
from typing import Optional
from sqlalchemy import create_engine, ForeignKey, Index, UniqueConstraint, String, Text, DECIMAL, DateTime, Date
from sqlalchemy.types import Enum
from sqlalchemy.orm import sessionmaker, DeclarativeBase, Mapped, relationship, mapped_column
from datetime import datetime, date
from decimal import Decimal
from dotenv import load_dotenv
import enum


load_dotenv()

DATABASE_URL = os.environ.get("DATABASE_URL", "sqlite:///finance_tracker.db")


class NotFoundError(Exception):
    """Entity is absent or not owned by the caller. The two cases are never told apart."""
    pass


class Base(DeclarativeBase):
    pass


class CategoryType(enum.Enum):
    INCOME = "INCOME"
    EXPENSE = "EXPENSE"


class TransactionType(enum.Enum):
    INCOME = "INCOME"
    EXPENSE = "EXPENSE"


class DebtType(enum.Enum):
    OWE = "OWE"    # the user owes someone
    LEND = "LEND"  # someone owes the user


class DebtStatus(enum.Enum):
    ACTIVE = "ACTIVE"
    PAID_OFF = "PAID_OFF"
    OVERDUE = "OVERDUE"


class UserDB(Base):
    __tablename__ = "users"

    __table_args__ = (
        UniqueConstraint("email", name="uq_user_email"),
        UniqueConstraint("username", name="uq_user_username"),
        Index("idx_users_email", "email"),
    )

    db_id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    username: Mapped[str] = mapped_column(String(100), nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    # Relationships
    categories = relationship("CategoryDB", back_populates="user", cascade="all, delete-orphan")
    transactions = relationship("TransactionDB", back_populates="user", cascade="all, delete-orphan")
    budgets = relationship("BudgetDB", back_populates="user", cascade="all, delete-orphan")
    debts = relationship("DebtDB", back_populates="user", cascade="all, delete-orphan")
    goals = relationship("GoalDB", back_populates="user", cascade="all, delete-orphan")


class CategoryDB(Base):
    __tablename__ = "categories"

    __table_args__ = (
        # Category names are unique per user, not globally
        UniqueConstraint("user_id", "name", name="uq_user_category_name"),
        Index("idx_categories_user", "user_id"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.db_id"), nullable=False)

    name: Mapped[str] = mapped_column(String(100), nullable=False)
    color: Mapped[str] = mapped_column(String(7), default="#6B7280")  # Hex color code
    icon: Mapped[Optional[str]] = mapped_column(String(50))
    category_type: Mapped[CategoryType] = mapped_column(Enum(CategoryType), nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    # Relationships
    user = relationship("UserDB", back_populates="categories")
    transactions = relationship("TransactionDB", back_populates="category")
    budgets = relationship("BudgetDB", back_populates="category")


class TransactionDB(Base):
    __tablename__ = "transactions"

    __table_args__ = (
        Index("idx_transactions_user_date", "user_id", "transaction_date"),
        Index("idx_transactions_user_category", "user_id", "category_id"),
        Index("idx_transactions_user_type", "user_id", "transaction_type"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.db_id"), nullable=False)
    category_id: Mapped[Optional[int]] = mapped_column(ForeignKey("categories.id"))

    # Amount is always a magnitude; the sign comes from transaction_type
    amount: Mapped[Decimal] = mapped_column(DECIMAL(15, 2), nullable=False)
    description: Mapped[str] = mapped_column(String(500), nullable=False)
    transaction_date: Mapped[date] = mapped_column(Date, nullable=False)
    transaction_type: Mapped[TransactionType] = mapped_column(Enum(TransactionType), nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    user = relationship("UserDB", back_populates="transactions")
    category = relationship("CategoryDB", back_populates="transactions")


class BudgetDB(Base):
    __tablename__ = "budgets"

    __table_args__ = (
        Index("idx_budgets_user_period", "user_id", "start_date", "end_date"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.db_id"), nullable=False)
    # NULL means the cap applies to every category
    category_id: Mapped[Optional[int]] = mapped_column(ForeignKey("categories.id"))

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    amount: Mapped[Decimal] = mapped_column(DECIMAL(15, 2), nullable=False)
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date] = mapped_column(Date, nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    user = relationship("UserDB", back_populates="budgets")
    category = relationship("CategoryDB", back_populates="budgets")


class DebtDB(Base):
    __tablename__ = "debts"

    __table_args__ = (
        Index("idx_debts_user_type", "user_id", "debt_type"),
        Index("idx_debts_user_status", "user_id", "status"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.db_id"), nullable=False)

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    debt_type: Mapped[DebtType] = mapped_column(Enum(DebtType), nullable=False)
    total_amount: Mapped[Decimal] = mapped_column(DECIMAL(15, 2), nullable=False)
    interest_rate: Mapped[Optional[Decimal]] = mapped_column(DECIMAL(7, 4))  # e.g., 5.2500 for 5.25%
    creditor_name: Mapped[Optional[str]] = mapped_column(String(255))
    description: Mapped[Optional[str]] = mapped_column(Text)
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    due_date: Mapped[Optional[date]] = mapped_column(Date)

    # Balance cache, refreshed when payments change. Reads recompute from payments.
    remaining_amount: Mapped[Decimal] = mapped_column(DECIMAL(15, 2), nullable=False)
    status: Mapped[DebtStatus] = mapped_column(Enum(DebtStatus), default=DebtStatus.ACTIVE)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    user = relationship("UserDB", back_populates="debts")
    payments = relationship("DebtPaymentDB", back_populates="debt", cascade="all, delete-orphan")


class DebtPaymentDB(Base):
    __tablename__ = "debt_payments"

    __table_args__ = (
        Index("idx_debt_payments_debt", "debt_id"),
        Index("idx_debt_payments_user_date", "user_id", "payment_date"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.db_id"), nullable=False)
    debt_id: Mapped[int] = mapped_column(ForeignKey("debts.id"), nullable=False)

    amount: Mapped[Decimal] = mapped_column(DECIMAL(15, 2), nullable=False)
    payment_date: Mapped[date] = mapped_column(Date, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(String(500))

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    # Relationships
    debt = relationship("DebtDB", back_populates="payments")


class GoalDB(Base):
    __tablename__ = "goals"

    __table_args__ = (
        Index("idx_goals_user_target_date", "user_id", "target_date"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.db_id"), nullable=False)

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    target_amount: Mapped[Decimal] = mapped_column(DECIMAL(15, 2), nullable=False)
    # Entered by the user, never derived from transactions
    current_amount: Mapped[Decimal] = mapped_column(DECIMAL(15, 2), default=Decimal("0.00"))
    description: Mapped[Optional[str]] = mapped_column(Text)
    target_date: Mapped[date] = mapped_column(Date, nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    user = relationship("UserDB", back_populates="goals")


connect_args = {"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {}
engine = create_engine(
    DATABASE_URL,
    echo=os.getenv("SQL_ECHO", "false").lower() == "true",
    connect_args=connect_args,
)
session_local = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_db(bind=None):
    """Create any missing tables. Alembic owns real migrations."""
    Base.metadata.create_all(bind=bind or engine)


# Dependency to get the database session
def get_db():
    database = session_local()
    try:
        yield database
    finally:
        database.close()
