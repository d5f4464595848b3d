from pathlib import Path

from checkout.promos.storage import DEFAULT_PROMOTIONS, JsonPromotionStorage

BASE_DIR = Path(__file__).resolve().parent.parent.parent
DATA_DIR = BASE_DIR / "data"

DEFAULT_PROMOTIONS_PATH = str(DATA_DIR / "promotions.json")


def load_promotions(path: str | None = None):
    return JsonPromotionStorage(path or DEFAULT_PROMOTIONS_PATH).load()


__all__ = ["DEFAULT_PROMOTIONS", "DEFAULT_PROMOTIONS_PATH", "load_promotions"]
