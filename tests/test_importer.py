# tests/test_importer.py
import pytest

from studysphere.importer import import_deck, parse_csv, parse_lines, parse_structured, read_cards
from studysphere.models import ActionRejected
from studysphere.store import PersistentStore

def test_parse_lines_separators():
    text = "Être :: To be\nAvoir | To have\nAller\tTo go\n"
    assert parse_lines(text) == [("Être", "To be"), ("Avoir", "To have"), ("Aller", "To go")]

def test_parse_lines_skips_headings_and_blanks():
    text = "# French verbs\n\n- Faire :: To do\n* Venir :: To come\nno separator here\n"
    assert parse_lines(text) == [("Faire", "To do"), ("Venir", "To come")]

def test_parse_lines_splits_once():
    assert parse_lines("Ratio :: 1 :: 2") == [("Ratio", "1 :: 2")]

def test_parse_csv_skips_header():
    text = "front,back\nH2O,Water\n\"NaCl, solid\",Salt\nlonely\n"
    assert parse_csv(text) == [("H2O", "Water"), ("NaCl, solid", "Salt")]

def test_parse_structured_list_and_dict():
    assert parse_structured([{"front": "a", "back": "b"}, "junk"]) == (None, [("a", "b")])
    name, pairs = parse_structured({"name": "Deck", "cards": [{"front": "x", "back": "y"}]})
    assert name == "Deck"
    assert pairs == [("x", "y")]

def test_parse_structured_rejects_scalar():
    with pytest.raises(ActionRejected):
        parse_structured("not cards")

def test_read_txt_file(tmp_path):
    f = tmp_path / "verbs.txt"
    f.write_text("Être :: To be\n", encoding="utf-8")
    assert read_cards(str(f)) == (None, [("Être", "To be")])

def test_read_md_file(tmp_path):
    f = tmp_path / "cells.md"
    f.write_text("# Cells\n\n- Nucleus :: Stores DNA\n", encoding="utf-8")
    assert read_cards(str(f)) == (None, [("Nucleus", "Stores DNA")])

def test_read_json_file(tmp_path):
    f = tmp_path / "deck.json"
    f.write_text('{"name": "Capitals", "cards": [{"front": "France", "back": "Paris"}]}')
    assert read_cards(str(f)) == ("Capitals", [("France", "Paris")])

def test_read_yaml_file(tmp_path):
    f = tmp_path / "deck.yaml"
    f.write_text("name: Capitals\ncards:\n  - front: Japan\n    back: Tokyo\n")
    assert read_cards(str(f)) == ("Capitals", [("Japan", "Tokyo")])

def test_import_deck(tmp_path, store, tmp_db):
    f = tmp_path / "chemistry.csv"
    f.write_text("front,back\nH2O,Water\nNaCl,\nCO2,Carbon dioxide\n")
    result = import_deck(store, str(f))
    assert result["name"] == "chemistry"
    assert result["cards"] == 2
    assert result["skipped"] == 1
    deck = PersistentStore(tmp_db).state.flashcards.decks[0]
    assert deck.id == result["deck_id"]
    assert [c.front for c in deck.cards] == ["H2O", "CO2"]

def test_import_deck_name_override(tmp_path, store):
    f = tmp_path / "deck.json"
    f.write_text('{"name": "From file", "cards": [{"front": "a", "back": "b"}]}')
    assert import_deck(store, str(f), name="Mine")["name"] == "Mine"
    assert import_deck(store, str(f))["name"] == "From file"

def test_import_empty_file_rejected(tmp_path, store):
    f = tmp_path / "empty.txt"
    f.write_text("just prose, no cards\n")
    before = len(store.state.flashcards.decks)
    with pytest.raises(ActionRejected, match="No cards found"):
        import_deck(store, str(f))
    assert len(store.state.flashcards.decks) == before
