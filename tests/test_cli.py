# tests/test_cli.py
import cli
from sdk.board import BoardState


def test_lookup_barcode_creates_then_finds(sdk, store):
    first = cli.lookup_barcode(sdk, " 4006381333931 ")
    assert first.ok and first.created
    assert first.product["name"] == "Milk 1L"

    again = cli.lookup_barcode(sdk, "4006381333931")
    assert again.ok and not again.created
    assert len(store.products) == 1

def test_lookup_barcode_blank_sends_nothing(sdk):
    result = cli.lookup_barcode(sdk, "   ")
    assert not result.ok
    assert result.error == "Barcode cannot be empty."
    assert sdk.calls == []

def test_board_title_shows_search_term(client, sdk):
    client.post("/products", json={"barcode": "1", "name": "Milk"})
    board = BoardState(sdk)
    board.load()
    with cli.console.capture() as capture:
        cli.show_board(board, "milk")
    out = capture.get()
    assert "Product Board - matching 'milk'" in out
    assert "—" not in out
