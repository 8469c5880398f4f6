import json

from xpathcraft.__main__ import main, run
from xpathcraft.lxml_adapter import LxmlTreeAdapter

CHECKOUT_PAGE = """<!DOCTYPE html>
<html>
  <body>
    <form id="checkout">
      <label for="card-number">Card number</label>
      <input id="card-number" name="card" type="text">
      <button type="submit">Pay now</button>
    </form>
  </body>
</html>
"""


def test_cli_prints_the_generated_locator(tmp_path, capsys) -> None:
    page = tmp_path / "checkout.html"
    page.write_text(CHECKOUT_PAGE, encoding="utf-8")

    code = main([str(page), "--target", "//button"])

    record = json.loads(capsys.readouterr().out)
    assert code == 0
    assert record["success"] is True
    assert record["primary"]["expression"] == "//button[text()='Pay now']"
    assert record["element"]["tag"] == "button"


def test_cli_validate_mode(tmp_path, capsys) -> None:
    page = tmp_path / "checkout.html"
    page.write_text(CHECKOUT_PAGE, encoding="utf-8")

    code = main([str(page), "--target", "//input", "--validate", "//*[@name='card']"])

    record = json.loads(capsys.readouterr().out)
    assert code == 0
    assert record == {
        "valid": True,
        "unique": True,
        "correct": True,
        "matchCount": 1,
        "message": "Validation succeeded",
    }


def test_cli_reports_missing_files(tmp_path, capsys) -> None:
    code = main([str(tmp_path / "absent.html"), "--target", "//p"])
    assert code == 2
    assert "file not found" in capsys.readouterr().err


def test_run_distinguishes_bad_targets_from_missing_ones() -> None:
    adapter = LxmlTreeAdapter.from_html(CHECKOUT_PAGE)

    record, code = run(adapter, "//table")
    assert code == 1
    assert record["error"] == "Target element not found"

    record, code = run(adapter, "//input[")
    assert code == 2
    assert record["error"].startswith("Invalid --target expression")


def test_run_validate_flags_ambiguous_expressions() -> None:
    adapter = LxmlTreeAdapter.from_html(CHECKOUT_PAGE)
    record, code = run(adapter, "//input", validate="//*[@id]")

    assert code == 1
    assert record["matchCount"] == 2
    assert record["unique"] is False


def test_cli_reads_xhtml_with_an_encoding_declaration(tmp_path, capsys) -> None:
    page = tmp_path / "page.xhtml"
    page.write_bytes(
        b'<?xml version="1.0" encoding="UTF-8"?>\n'
        b'<html xmlns="http://www.w3.org/1999/xhtml"><body><p>Hello</p></body></html>'
    )

    code = main([str(page), "--target", "//p"])

    record = json.loads(capsys.readouterr().out)
    assert code == 0
    assert record["primary"]["expression"] == "//p[text()='Hello']"


def test_cli_honours_a_declared_legacy_charset(tmp_path, capsys) -> None:
    page = tmp_path / "legacy.html"
    page.write_bytes(
        "<html><head>"
        "<meta http-equiv='Content-Type' content='text/html; charset=iso-8859-1'>"
        "</head><body><h1>Café</h1></body></html>".encode("latin-1")
    )

    code = main([str(page), "--target", "//h1"])

    record = json.loads(capsys.readouterr().out)
    assert code == 0
    assert record["element"]["text"] == "Café"
