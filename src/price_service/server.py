import argparse
import logging
from typing import List, Optional
from uuid import UUID

from flask import Flask, jsonify, request

from price_service.config import Settings
from price_service.store import PriceNotFound, PriceStore


logger = logging.getLogger(__name__)

MAX_PRICE = 2 ** 64 - 1


class InvalidPrice(ValueError):
    pass


def _read_price() -> int:
    data = request.get_json(silent=True)
    if not isinstance(data, dict) or "price" not in data:
        raise InvalidPrice("body must be a JSON object with a price field")
    price = data["price"]
    # bool is an int subclass
    if isinstance(price, bool) or not isinstance(price, int):
        raise InvalidPrice("price must be an integer")
    if price < 0 or price > MAX_PRICE:
        raise InvalidPrice(f"price must be between 0 and {MAX_PRICE}")
    return price


def create_app(store: Optional[PriceStore] = None) -> Flask:
    store = store if store is not None else PriceStore()

    app = Flask(__name__)

    @app.errorhandler(PriceNotFound)
    def price_not_found(exc: PriceNotFound):
        logger.debug("%s", exc)
        return "", 404

    @app.errorhandler(404)
    def not_found(exc):
        return "", 404

    @app.errorhandler(InvalidPrice)
    def invalid_price(exc: InvalidPrice):
        logger.debug("rejected body on %s %s: %s", request.method, request.path, exc)
        return jsonify({"error": str(exc)}), 400

    @app.get("/health")
    def health():
        return jsonify({"status": "ok", "prices": len(store)}), 200

    @app.get("/price")
    def list_prices():
        prices: List[int] = store.list_all()
        return jsonify(prices), 200

    @app.post("/price")
    def create_price():
        price_id = store.create(_read_price())
        return str(price_id), 200, {"Content-Type": "text/plain"}

    @app.get("/price/<uuid:price_id>")
    def get_price(price_id: UUID):
        return str(store.get(price_id)), 200, {"Content-Type": "text/plain"}

    @app.patch("/price/<uuid:price_id>")
    def update_price(price_id: UUID):
        store.update(price_id, _read_price())
        return "", 200

    @app.delete("/price/<uuid:price_id>")
    def delete_price(price_id: UUID):
        store.delete(price_id)
        return "", 200

    return app


def parse_args(argv: Optional[List[str]] = None, settings: Optional[Settings] = None) -> Settings:
    defaults = settings or Settings.from_env()
    parser = argparse.ArgumentParser(description="In-memory price CRUD service")
    parser.add_argument("--host", default=defaults.host, help="Listen address (env HOST)")
    parser.add_argument("--port", type=int, default=defaults.port, help="Listen port (env PORT)")
    parser.add_argument(
        "--log-level",
        default=defaults.log_level,
        help="Logging level (env LOG_LEVEL)",
    )
    args = parser.parse_args(argv)
    return Settings(host=args.host, port=args.port, log_level=args.log_level.upper())


def main(argv: Optional[List[str]] = None) -> None:
    settings = parse_args(argv)
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    app = create_app(PriceStore())
    logger.info("Listening on %s:%d", settings.host, settings.port)
    # threaded=True so requests are served concurrently against the shared store
    app.run(host=settings.host, port=settings.port, threaded=True)


if __name__ == "__main__":
    main()
