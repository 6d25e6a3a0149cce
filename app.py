# app.py
import os
import logging
import threading
from logging.handlers import RotatingFileHandler
from flask import Blueprint, Flask, current_app, jsonify, request
from flask_cors import CORS

from config import load_settings
from database.memory_store import MarketStore
from helper_functions import parse_payload, to_json, to_json_list
from services import market_service
from services.featured_policy import build_featured_policy
from services.news_fetcher import NewsFetcher
from services.quote_fetcher import QuoteFetcher
from services.stock_generator import build_seeded_store
from shared.contracts import MarketDataCreate, NewsArticleCreate, PreferredStockCreate, PreferredStockUpdate
from pydantic import ValidationError

EXTENSION_KEY = "market"


# --- 1. Logging Setup ---
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
MODULE_LOGGERS = (
    "providers.finnhub_provider",
    "providers.alpha_vantage_provider",
    "services.quote_fetcher",
    "services.news_fetcher",
    "services.market_service",
    "services.stock_generator",
    "database.memory_store",
    "helper_functions",
)


def _build_handlers(level: int, log_dir: str) -> list:
    formatter = logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")
    handlers = [logging.StreamHandler()]
    # empty LOG_DIR: console only
    if log_dir:
        os.makedirs(log_dir, exist_ok=True)
        handlers.append(RotatingFileHandler(
            os.path.join(log_dir, "market_service.log"), maxBytes=5 * 1024 * 1024, backupCount=5
        ))
    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
    return handlers


def setup_logging(app):
    """Routes the app logger and the service's module loggers to one set of handlers."""
    level = getattr(logging, app.config.get("LOG_LEVEL", "INFO"), logging.INFO)
    handlers = _build_handlers(level, app.config.get("LOG_DIR"))

    for target in [app.logger] + [logging.getLogger(name) for name in MODULE_LOGGERS]:
        target.setLevel(level)
        target.propagate = False
        target.handlers = list(handlers)

    app.logger.info("Market service logging initialized.")


# --- 2. Collaborator access ---
def _deps() -> dict:
    return current_app.extensions[EXTENSION_KEY]


def _store() -> MarketStore:
    return _deps()["store"]


def _message(text: str, status: int):
    return jsonify({"message": text}), status


# --- 3. API routes ---
api = Blueprint("api", __name__, url_prefix="/api")


@api.route('/stocks', methods=['GET'])
def get_stocks():
    try:
        search = request.args.get("search", "")
        stocks = _store().search_stocks(search) if search else _store().list_stocks()
        return jsonify(to_json_list(stocks))
    except Exception as e:
        current_app.logger.error(f"Error listing stocks: {e}", exc_info=True)
        return _message("Failed to fetch stocks", 500)


@api.route('/stocks/featured', methods=['GET'])
def get_featured_stocks():
    try:
        deps = _deps()
        stocks = market_service.get_featured_stocks(
            deps["store"],
            deps["quote_fetcher"],
            deps["featured_policy"],
            live_tickers=current_app.config["FEATURED_TICKERS"],
        )
        return jsonify(to_json_list(stocks))
    except Exception as e:
        current_app.logger.error(f"Error fetching featured stocks: {e}", exc_info=True)
        return _message("Failed to fetch featured stocks", 500)


@api.route('/stocks/top-performers', methods=['GET'])
def get_top_performers():
    try:
        stocks = _store().top_performers(current_app.config["TOP_PERFORMERS_COUNT"])
        return jsonify(to_json_list(stocks))
    except Exception as e:
        current_app.logger.error(f"Error fetching top performers: {e}", exc_info=True)
        return _message("Failed to fetch top performers", 500)


@api.route('/stocks/search/<string:ticker>', methods=['GET'])
def search_ticker(ticker: str):
    try:
        deps = _deps()
        result = market_service.lookup_ticker(deps["store"], deps["quote_fetcher"], ticker)
        if result is None:
            return _message("Stock not found", 404)
        return jsonify(to_json(result))
    except Exception as e:
        current_app.logger.error(f"Error searching for {ticker}: {e}", exc_info=True)
        return _message("Failed to search for stock", 500)


@api.route('/stocks/<string:ticker>', methods=['GET'])
def get_stock(ticker: str):
    try:
        stock = _store().get_stock(ticker)
        if stock is None:
            return _message("Stock not found", 404)
        return jsonify(to_json(stock))
    except Exception as e:
        current_app.logger.error(f"Error fetching stock {ticker}: {e}", exc_info=True)
        return _message("Failed to fetch stock", 500)


@api.route('/stocks', methods=['POST'])
def create_stock():
    try:
        payload = parse_payload(PreferredStockCreate, request.get_json(silent=True), "POST /api/stocks")
        if payload is None:
            return _message("Invalid stock data", 400)
        stock = _store().upsert_stock(payload)
        current_app.logger.info(f"Stored stock {stock.ticker}")
        return jsonify(to_json(stock)), 201
    except Exception as e:
        current_app.logger.error(f"Error creating stock: {e}", exc_info=True)
        return _message("Failed to create stock", 500)


@api.route('/stocks/<string:ticker>', methods=['PATCH'])
def update_stock(ticker: str):
    try:
        patch = parse_payload(PreferredStockUpdate, request.get_json(silent=True), f"PATCH /api/stocks/{ticker}")
        if patch is None:
            return _message("Invalid stock data", 400)
        deps = _deps()
        try:
            stock = market_service.update_stock_with_live_quote(
                deps["store"], deps["quote_fetcher"], ticker, patch.model_dump(exclude_unset=True)
            )
        except ValidationError as e:
            current_app.logger.warning(f"Update of {ticker} produced an invalid record: {e}")
            return _message("Invalid stock data", 400)
        if stock is None:
            return _message("Stock not found", 404)
        return jsonify(to_json(stock))
    except Exception as e:
        current_app.logger.error(f"Error updating stock {ticker}: {e}", exc_info=True)
        return _message("Failed to update stock", 500)


@api.route('/news', methods=['GET'])
def get_news():
    try:
        limit = max(request.args.get("limit", 10, type=int), 0)
        return jsonify(to_json_list(_store().latest_articles(limit)))
    except Exception as e:
        current_app.logger.error(f"Error fetching news: {e}", exc_info=True)
        return _message("Failed to fetch news", 500)


@api.route('/news/ticker/<string:ticker>', methods=['GET'])
def get_news_for_ticker(ticker: str):
    try:
        return jsonify(to_json_list(_store().articles_for_ticker(ticker)))
    except Exception as e:
        current_app.logger.error(f"Error fetching news for {ticker}: {e}", exc_info=True)
        return _message("Failed to fetch news", 500)


@api.route('/news/<string:article_id>', methods=['GET'])
def get_article(article_id: str):
    try:
        article = _store().get_article(article_id)
        if article is None:
            return _message("Article not found", 404)
        return jsonify(to_json(article))
    except Exception as e:
        current_app.logger.error(f"Error fetching article {article_id}: {e}", exc_info=True)
        return _message("Failed to fetch article", 500)


@api.route('/news', methods=['POST'])
def create_article():
    try:
        payload = parse_payload(NewsArticleCreate, request.get_json(silent=True), "POST /api/news")
        if payload is None:
            return _message("Invalid article data", 400)
        article = _store().create_article(payload)
        return jsonify(to_json(article)), 201
    except Exception as e:
        current_app.logger.error(f"Error creating article: {e}", exc_info=True)
        return _message("Failed to create article", 500)


@api.route('/news/refresh', methods=['POST'])
def refresh_news():
    try:
        deps = _deps()
        count = market_service.refresh_news(
            deps["store"],
            deps["news_fetcher"],
            current_app.config["NEWS_SYMBOLS"],
            lookback_days=current_app.config["NEWS_LOOKBACK_DAYS"],
        )
        return jsonify({"message": "News refreshed successfully", "count": count})
    except Exception as e:
        current_app.logger.error(f"Error refreshing news: {e}", exc_info=True)
        return _message("Failed to refresh news", 500)


@api.route('/market-data', methods=['GET'])
def get_market_data():
    try:
        deps = _deps()
        store = deps["store"]
        if current_app.config["MARKET_DATA_LIVE"]:
            try:
                market_service.refresh_market_snapshot(store, deps["quote_fetcher"])
            except Exception as e:
                # Serve whatever snapshot is already stored
                current_app.logger.error(f"Market snapshot refresh failed: {e}", exc_info=True)

        snapshot = store.get_market_data()
        if snapshot is None:
            return _message("Market data not found", 404)
        body = to_json(snapshot)
        status = store.get_market_data_status()
        body["dataStatus"] = to_json(status) if status is not None else {"status": "stored"}
        return jsonify(body)
    except Exception as e:
        current_app.logger.error(f"Error fetching market data: {e}", exc_info=True)
        return _message("Failed to fetch market data", 500)


@api.route('/market-data', methods=['POST'])
def set_market_data():
    try:
        payload = parse_payload(MarketDataCreate, request.get_json(silent=True), "POST /api/market-data")
        if payload is None:
            return _message("Invalid market data", 400)
        snapshot = _store().set_market_data(payload)
        return jsonify(to_json(snapshot)), 201
    except Exception as e:
        current_app.logger.error(f"Error storing market data: {e}", exc_info=True)
        return _message("Failed to store market data", 500)


# --- 4. Application factory ---
def _refresh_news_bg(app):
    with app.app_context():
        try:
            deps = app.extensions[EXTENSION_KEY]
            market_service.refresh_news(
                deps["store"],
                deps["news_fetcher"],
                app.config["NEWS_SYMBOLS"],
                lookback_days=app.config["NEWS_LOOKBACK_DAYS"],
            )
        except Exception as e:
            app.logger.warning(f"Startup news refresh failed (background): {e}")


def create_app(store=None, quote_fetcher=None, news_fetcher=None, config_overrides=None):
    """
    Builds the Flask app around an explicit store and fetchers.

    Args:
        store: A MarketStore; a seeded one is built when omitted.
        quote_fetcher: Live quote source; defaults to QuoteFetcher.
        news_fetcher: Company news source; defaults to NewsFetcher.
        config_overrides: Settings that replace values read from the environment.
    """
    app = Flask(__name__)
    app.config.from_mapping(load_settings())
    if config_overrides:
        app.config.update(config_overrides)

    setup_logging(app)
    CORS(app, resources={r"/api/*": {"origins": app.config["CORS_ORIGINS"]}})

    if store is None:
        store = build_seeded_store(seed=app.config["STOCK_SEED"])
    app.extensions[EXTENSION_KEY] = {
        "store": store,
        "quote_fetcher": quote_fetcher or QuoteFetcher(timeout=app.config["PROVIDER_TIMEOUT_SECONDS"]),
        "news_fetcher": news_fetcher or NewsFetcher(max_workers=app.config["NEWS_FETCH_WORKERS"]),
        "featured_policy": build_featured_policy(app.config),
    }

    app.register_blueprint(api)

    @app.route('/health', methods=['GET'])
    def health():
        return jsonify({
            "status": "healthy",
            "stocks": store.stock_count(),
            "articles": store.article_count(),
        })

    if app.config["NEWS_REFRESH_ON_STARTUP"]:
        threading.Thread(target=_refresh_news_bg, args=(app,), daemon=True).start()

    app.logger.info(f"Market service ready with {store.stock_count()} stocks.")
    return app


if __name__ == '__main__':
    application = create_app()
    application.run(host='0.0.0.0', port=application.config["PORT"])
