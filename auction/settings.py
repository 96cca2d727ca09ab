from decouple import config


def number(value: str) -> float:
    """Cast a setting to ``int`` when it is integral, otherwise to ``float``."""
    parsed = float(value)
    return int(parsed) if parsed.is_integer() else parsed


AUCTION_INCREMENT = config("AUCTION_INCREMENT", default="1", cast=number)
AUCTION_MIN_INCREMENT = config("AUCTION_MIN_INCREMENT", default="1", cast=number)

LOG_LEVEL = config("LOG_LEVEL", default="INFO")

HOST = config("HOST", default="127.0.0.1")
PORT = config("PORT", default=5000, cast=int)
