from pathlib import Path

from fliptracker.main import main


def _run(capsys, db: Path, *args: str, user: str = "tester") -> tuple[int, str, str]:
    code = main(["--db", str(db), "--user", user, *args])
    out, err = capsys.readouterr()
    return code, out.strip(), err.strip()


def test_cli_records_and_summarises(tmp_path: Path, capsys):
    db = tmp_path / "cli.db"

    assert _run(capsys, db, "configure", "--capital", "1000", "--start-date", "2023-12-31")[0] == 0
    code, product_id, _ = _run(capsys, db, "add-product", "Sneakers", "--price", "50", "--qty", "10", "--date", "2024-01-01")
    assert code == 0
    assert product_id.startswith("p_")
    assert _run(capsys, db, "add-sale", product_id, "--qty", "4", "--price", "80", "--date", "2024-02-01")[0] == 0
    assert _run(capsys, db, "adjust", "200", "aporte", "--date", "2024-03-01")[0] == 0

    code, out, _ = _run(capsys, db, "summary")
    assert code == 0
    assert "Current capital:  1020.00" in out
    assert "Variation:        2.00%" in out
    assert "Inventory value:  300.00" in out

    _, out, _ = _run(capsys, db, "products")
    assert "stock=6" in out

    _, out, _ = _run(capsys, db, "series")
    assert out.splitlines()[0] == "2023-12-31\t1000.00"
    assert out.splitlines()[-1] == "2024-03-01\t1020.00"


def test_cli_reports_validation_errors(tmp_path: Path, capsys):
    db = tmp_path / "cli.db"
    _, product_id, _ = _run(capsys, db, "add-product", "Cap", "--price", "5", "--qty", "1")

    code, _, err = _run(capsys, db, "add-sale", product_id, "--qty", "2", "--price", "9")

    assert code == 2
    assert err == "error: Quantity (2) exceeds stock (1)."


def test_cli_negative_adjustment_and_delete(tmp_path: Path, capsys):
    db = tmp_path / "cli.db"

    code, adj_id, _ = _run(capsys, db, "adjust", "-50", "withdrawal", "--date", "2024-01-02")
    assert code == 0

    _, out, _ = _run(capsys, db, "movements")
    assert out == "2024-01-02\tADJUSTMENT\t-50.00\twithdrawal"

    assert _run(capsys, db, "delete-adjustment", adj_id)[0] == 0
    _, out, _ = _run(capsys, db, "adjustments")
    assert out == ""


def test_cli_backup_and_restore(tmp_path: Path, capsys):
    db = tmp_path / "cli.db"
    backup_file = tmp_path / "backup.json"
    _run(capsys, db, "add-product", "Lamp", "--price", "20", "--qty", "2")

    assert _run(capsys, db, "backup", str(backup_file))[0] == 0
    assert backup_file.exists()

    code, out, _ = _run(capsys, db, "restore", str(backup_file), user="other")
    assert code == 0
    assert "Restored 1 products" in out


def test_cli_rejects_out_of_range_price(tmp_path: Path, capsys):
    db = tmp_path / "cli.db"

    code, _, err = _run(capsys, db, "add-product", "Big", "--price", "1e999999", "--qty", "10")
    assert code == 2
    assert err.startswith("error: Purchase price is out of range")

    code, out, _ = _run(capsys, db, "summary")
    assert code == 0
    assert "Variation:        0.00%" in out
