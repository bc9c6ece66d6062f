"""Shared pytest fixtures for profitshare tests."""

import tempfile
import os
from datetime import datetime
from decimal import Decimal

import pytest

from profitshare.database.factories import create_sqlite_database
from profitshare.domain.entities import ParticipantInput, SETTLED_STATUS
from profitshare.domain.participant import ParticipantService
from profitshare.domain.profit import ProfitService
from profitshare.domain.settlement import SettlementService
from profitshare.domain.transaction import TransactionService
from profitshare.settings import ProfitPolicy


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    # Create a temporary file for the database
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    # Create database
    db = create_sqlite_database(database_path=db_path)
    # Store the path for tests that need it
    db.database_path = db_path
    db.connect()
    db.initialize_schema()

    yield db

    # Cleanup
    db.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def policy():
    """Default profit policy."""
    return ProfitPolicy()


@pytest.fixture
def transaction_service(temp_db):
    """Create a TransactionService with a temporary database."""
    return TransactionService(temp_db)


@pytest.fixture
def participant_service(temp_db):
    """Create a ParticipantService with a temporary database."""
    return ParticipantService(temp_db)


@pytest.fixture
def profit_service(temp_db, policy):
    """Create a ProfitService with a temporary database."""
    return ProfitService(temp_db, policy)


@pytest.fixture
def settlement_service(temp_db, policy):
    """Create a SettlementService with a temporary database."""
    return SettlementService(temp_db, policy)


@pytest.fixture
def add_txn(temp_db):
    """Return a helper that writes a ledger transaction straight to the store."""

    def _add(
        amount,
        direction="income",
        category="main_business",
        status=SETTLED_STATUS,
        bill_account="shop-a",
        when=datetime(2026, 2, 10, 12, 0, 0),
        internal_transfer=False,
    ):
        return temp_db.create_transaction(
            transaction_time=when,
            bill_account=bill_account,
            category=category,
            direction=direction,
            amount=Decimal(str(amount)),
            status=status,
            internal_transfer=internal_transfer,
        )

    return _add


@pytest.fixture
def sample_participants(participant_service):
    """Alice owns shop-a with 60%, Bob has no bill account and 40%."""
    return participant_service.save_participants(
        [
            ParticipantInput(name="Alice", ratio=Decimal("0.6"), bill_account="shop-a"),
            ParticipantInput(name="Bob", ratio=Decimal("0.4")),
        ]
    )


@pytest.fixture
def february_ledger(add_txn):
    """Income 100.00 and traffic cost 8.00 on shop-a: settlement net 92.00."""
    income_id = add_txn("100.00", when=datetime(2026, 2, 10, 12, 0, 0))
    cost_id = add_txn(
        "8.00", direction="expense", category="traffic_cost", when=datetime(2026, 2, 11, 9, 30, 0)
    )
    return [income_id, cost_id]


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()
