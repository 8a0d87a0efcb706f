"""Import a flashcard deck from text, CSV, JSON or YAML files."""
import csv
import io
import json
from pathlib import Path

from studysphere.models import ActionRejected, Card, Deck
from studysphere.seed import uid
from studysphere.store import PersistentStore

LINE_SEPARATORS = ("::", "|", "\t")


def parse_lines(text: str) -> list[tuple[str, str]]:
    """One card per line, `front :: back` (also `|` or tab). Blank and # lines skipped."""
    pairs = []
    for line in text.splitlines():
        line = line.strip().lstrip("-*").strip()
        if not line or line.startswith("#"):
            continue
        for sep in LINE_SEPARATORS:
            if sep in line:
                front, back = line.split(sep, 1)
                pairs.append((front.strip(), back.strip()))
                break
    return pairs


def parse_csv(text: str) -> list[tuple[str, str]]:
    rows = csv.reader(io.StringIO(text))
    pairs = []
    for row in rows:
        if len(row) < 2:
            continue
        front, back = row[0].strip(), row[1].strip()
        if (front.lower(), back.lower()) == ("front", "back"):
            continue
        pairs.append((front, back))
    return pairs


def parse_structured(data) -> tuple[str | None, list[tuple[str, str]]]:
    """Accept `[{front, back}, ...]` or `{name, cards: [...]}`."""
    name = None
    if isinstance(data, dict):
        name = data.get("name")
        data = data.get("cards", [])
    if not isinstance(data, list):
        raise ActionRejected("Expected a list of cards")
    pairs = [
        (str(item.get("front", "")).strip(), str(item.get("back", "")).strip())
        for item in data
        if isinstance(item, dict)
    ]
    return name, pairs


def read_cards(file_path: str) -> tuple[str | None, list[tuple[str, str]]]:
    path = Path(file_path)
    suffix = path.suffix.lower()
    text = path.read_text(encoding="utf-8")

    if suffix == ".json":
        return parse_structured(json.loads(text))
    elif suffix in (".yaml", ".yml"):
        import yaml
        return parse_structured(yaml.safe_load(text))
    elif suffix == ".csv":
        return None, parse_csv(text)
    else:
        # .txt, .md and anything else read as plain lines
        return None, parse_lines(text)


def import_deck(store: PersistentStore, file_path: str, name: str | None = None) -> dict:
    """Create a new deck from a file. Pairs with an empty side are skipped."""
    file_name, pairs = read_cards(file_path)
    cards = [Card(id=uid(), front=f, back=b) for f, b in pairs if f and b]
    if not cards:
        raise ActionRejected(f"No cards found in {Path(file_path).name}")
    deck = Deck(id=uid(), name=(name or file_name or Path(file_path).stem).strip(), cards=cards)
    with store.mutate() as state:
        state.flashcards.decks.insert(0, deck)
    return {
        "deck_id": deck.id,
        "name": deck.name,
        "cards": len(cards),
        "skipped": len(pairs) - len(cards),
    }
