"""End-to-end tests for the profitshare CLI."""

import json

from profitshare.cli.main import cli


def _invoke(cli_runner, temp_db, *args, **kwargs):
    return cli_runner.invoke(cli, ["--db-path", temp_db.database_path, *args], **kwargs)


def test_help(cli_runner):
    result = cli_runner.invoke(cli, ["--help"])

    assert result.exit_code == 0
    assert "settlement" in result.output
    assert "participant" in result.output


def test_add_and_list_transactions(cli_runner, temp_db):
    result = _invoke(
        cli_runner,
        temp_db,
        "transaction",
        "add",
        "--account",
        "shop-a",
        "--time",
        "2026-02-16 10:00:00",
        "--amount",
        "¥1,200.50",
        "--direction",
        "income",
    )
    assert result.exit_code == 0
    assert "Created transaction" in result.output

    result = _invoke(cli_runner, temp_db, "transaction", "list")
    assert result.exit_code == 0
    assert "1200.50" in result.output
    assert "manual_add" in result.output


def test_add_transaction_invalid_amount(cli_runner, temp_db):
    result = _invoke(
        cli_runner,
        temp_db,
        "transaction",
        "add",
        "--account",
        "shop-a",
        "--time",
        "2026-02-16",
        "--amount",
        "lots",
        "--direction",
        "income",
    )

    assert result.exit_code == 1
    assert "Invalid amount" in result.output


def test_list_without_transactions(cli_runner, temp_db):
    result = _invoke(cli_runner, temp_db, "transaction", "list")

    assert result.exit_code == 0
    assert "No transactions found." in result.output


def test_participant_save_and_list(cli_runner, temp_db, tmp_path):
    participants_file = tmp_path / "participants.json"
    participants_file.write_text(
        json.dumps(
            [
                {"name": "Alice", "billAccount": "shop-a", "ratio": "0.6", "note": "owner"},
                {"name": "Bob", "ratio": 0.4},
            ]
        ),
        encoding="utf-8",
    )

    result = _invoke(cli_runner, temp_db, "participant", "save", str(participants_file))
    assert result.exit_code == 0
    assert "Saved 2 participant(s)" in result.output

    result = _invoke(cli_runner, temp_db, "participant", "list")
    assert result.exit_code == 0
    assert "Alice" in result.output
    assert "0.600000" in result.output
    assert "1.000000" in result.output


def test_participant_save_rejects_bad_ratio_sum(cli_runner, temp_db, tmp_path):
    participants_file = tmp_path / "participants.json"
    participants_file.write_text(json.dumps([{"name": "Alice", "ratio": "0.5"}]), encoding="utf-8")

    result = _invoke(cli_runner, temp_db, "participant", "save", str(participants_file))

    assert result.exit_code == 1
    assert "Error: Participant ratios must sum to 1.000000" in result.output


def test_participant_save_rejects_malformed_file(cli_runner, temp_db, tmp_path):
    participants_file = tmp_path / "participants.json"
    participants_file.write_text('{"name": "Alice"}', encoding="utf-8")

    result = _invoke(cli_runner, temp_db, "participant", "save", str(participants_file))

    assert result.exit_code == 1
    assert "Invalid participant file" in result.output


def test_profit_summary(cli_runner, temp_db, february_ledger, add_txn):
    add_txn("10.00", category="closed")

    result = _invoke(cli_runner, temp_db, "profit", "summary", "--bill-account", "shop-a")
    assert result.exit_code == 0
    assert "102.00" in result.output

    result = _invoke(
        cli_runner, temp_db, "--exclude-closed", "profit", "summary", "--end-date", "2026-02-28"
    )
    assert result.exit_code == 0
    assert "92.00" in result.output
    assert "102.00" not in result.output


def test_settlement_preview_json(cli_runner, temp_db, sample_participants, february_ledger):
    result = _invoke(
        cli_runner, temp_db, "settlement", "preview", "--time", "2026-02-28", "--json"
    )

    assert result.exit_code == 0
    payload = json.loads(result.output)
    assert payload["settlementTime"] == "2026-02-28T23:59:59"
    assert payload["paidAmount"] == "92.00"
    assert [a["amount"] for a in payload["allocations"]] == ["55.20", "36.80"]


def test_settlement_preview_invalid_time(cli_runner, temp_db):
    result = _invoke(cli_runner, temp_db, "settlement", "preview", "--time", "someday")

    assert result.exit_code == 1
    assert "Invalid settlement time" in result.output


def test_settlement_create_and_list(cli_runner, temp_db, sample_participants, february_ledger):
    result = _invoke(
        cli_runner,
        temp_db,
        "settlement",
        "create",
        "--time",
        "2026-02-28",
        "--carry-ratio",
        "0.2",
        "--note",
        "February",
        "--json",
    )
    assert result.exit_code == 0
    batch = json.loads(result.output)
    assert batch["paidAmount"] == "73.60"
    assert batch["carryForwardAmount"] == "18.40"
    assert batch["note"] == "February"
    assert batch["isEffective"] is True

    result = _invoke(cli_runner, temp_db, "settlement", "list")
    assert result.exit_code == 0
    assert batch["batchNo"] in result.output
    assert "73.60" in result.output


def test_settlement_delete_is_rejected(cli_runner, temp_db, february_ledger):
    created = _invoke(cli_runner, temp_db, "settlement", "create", "--time", "2026-02-28")
    assert created.exit_code == 0

    result = _invoke(cli_runner, temp_db, "settlement", "delete", "1")

    assert result.exit_code == 1
    assert "cannot be deleted" in result.output

    listed = _invoke(cli_runner, temp_db, "settlement", "list", "--json")
    assert len(json.loads(listed.output)) == 1


def test_incrementally_settled_transaction_cannot_be_deleted(
    cli_runner, temp_db, february_ledger
):
    created = _invoke(
        cli_runner,
        temp_db,
        "settlement",
        "create",
        "--time",
        "2026-02-28",
        "--strategy",
        "incremental",
    )
    assert created.exit_code == 0

    result = _invoke(
        cli_runner, temp_db, "transaction", "delete", str(february_ledger[0]), input="y\n"
    )

    assert result.exit_code == 1
    assert "already been marked by an incremental settlement" in result.output

    listed = _invoke(cli_runner, temp_db, "transaction", "list", "--unsettled")
    assert "No transactions found." in listed.output


def test_update_and_categorize_transactions(cli_runner, temp_db, add_txn):
    first = add_txn("5.00", status="等待发货")
    second = add_txn("6.00")

    result = _invoke(
        cli_runner, temp_db, "transaction", "update", str(first), "--status", "交易成功", "--amount", "5.50"
    )
    assert result.exit_code == 0
    assert f"Updated transaction {first}" in result.output

    result = _invoke(
        cli_runner,
        temp_db,
        "transaction",
        "categorize",
        str(first),
        str(second),
        "--category",
        "internal_transfer",
    )
    assert result.exit_code == 0
    assert "Categorized 2 transaction(s)" in result.output

    result = _invoke(cli_runner, temp_db, "profit", "summary", "--json")
    assert json.loads(result.output)["settledIncome"] == "0.00"


def test_update_missing_transaction(cli_runner, temp_db):
    result = _invoke(cli_runner, temp_db, "transaction", "update", "42", "--status", "x")

    assert result.exit_code == 1
    assert "Transaction 42 not found" in result.output
