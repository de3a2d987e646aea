"""Word catalog loading and lookup helpers."""

import json
import random
from pathlib import Path

import structlog
import yaml
from pydantic import ValidationError

from vocab_trainer.config import _find_project_root
from vocab_trainer.errors import CatalogError
from vocab_trainer.models.word import WordEntry

logger = structlog.get_logger()

DEFAULT_CATALOG_PATH = _find_project_root() / "config" / "words.yaml"


def load_catalog(path: Path) -> list[WordEntry]:
    """Load an ordered word catalog from a YAML or JSON file.

    The file holds either a list of word records or a mapping with a
    ``words`` list. Catalog order is preserved.

    Args:
        path: Catalog file (``.yaml``, ``.yml`` or ``.json``).

    Returns:
        Validated word entries in file order.

    Raises:
        CatalogError: If the file is missing, malformed, or repeats an id.
    """
    if not path.exists():
        raise CatalogError(f"Catalog file not found: {path}")

    with open(path, encoding="utf-8") as f:
        if path.suffix == ".json":
            data = json.load(f)
        else:
            data = yaml.safe_load(f)

    if isinstance(data, dict):
        data = data.get("words", [])
    if not isinstance(data, list):
        raise CatalogError(f"Catalog must be a list of words: {path}")

    words: list[WordEntry] = []
    seen: set[str] = set()
    for index, record in enumerate(data):
        try:
            word = WordEntry.model_validate(record)
        except ValidationError as e:
            raise CatalogError(f"Invalid word record #{index} in {path}: {e}") from e
        if word.id in seen:
            raise CatalogError(f"Duplicate word id {word.id!r} in {path}")
        seen.add(word.id)
        words.append(word)

    logger.info("catalog_loaded", path=str(path), word_count=len(words))
    return words


def default_catalog() -> list[WordEntry]:
    """Load the bundled sample catalog."""
    return load_catalog(DEFAULT_CATALOG_PATH)


def index_by_id(words: list[WordEntry]) -> dict[str, WordEntry]:
    return {w.id: w for w in words}


def words_by_difficulty(words: list[WordEntry]) -> dict[str, list[WordEntry]]:
    """Bucket words into easy (1-2), medium (3) and hard (4-5)."""
    return {
        "easy": [w for w in words if w.difficulty <= 2],
        "medium": [w for w in words if w.difficulty == 3],
        "hard": [w for w in words if w.difficulty >= 4],
    }


def words_by_part_of_speech(words: list[WordEntry], part_of_speech: str) -> list[WordEntry]:
    return [
        w for w in words
        if any(d.part_of_speech == part_of_speech for d in w.definitions)
    ]


def words_by_tag(words: list[WordEntry], tag: str) -> list[WordEntry]:
    return [w for w in words if tag in w.tags]


def random_words(
    words: list[WordEntry],
    count: int,
    difficulty: int | None = None,
    rng: random.Random | None = None,
) -> list[WordEntry]:
    """Pick up to ``count`` distinct words, optionally of one difficulty."""
    rng = rng or random.Random()
    pool = [w for w in words if difficulty is None or w.difficulty == difficulty]
    return rng.sample(pool, min(count, len(pool)))
