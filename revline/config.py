import os
from pathlib import Path


def _env_list(name, default):
    raw = os.environ.get(name)
    if not raw:
        return default
    return [part.strip() for part in raw.split('|') if part.strip()]


def _env_bool(name, default):
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in ('1', 'true', 'yes', 'on')


class Config:
    """Base configuration - shared across all environments"""

    SECRET_KEY = os.environ.get('SECRET_KEY', 'dev-secret-key')
    JSON_SORT_KEYS = False

    BASE_DIR = os.path.dirname(os.path.abspath(__file__))

    # Backend REST API that owns orders, employees and salaries
    ORDER_API_URL = os.environ.get('ORDER_API_URL', 'http://localhost:8080')
    ORDER_API_TIMEOUT = float(os.environ.get('ORDER_API_TIMEOUT', '10'))

    # Document rendering
    DISPLAY_TIMEZONE = os.environ.get('DISPLAY_TIMEZONE', 'Asia/Kuala_Lumpur')
    CURRENCY_PREFIX = os.environ.get('CURRENCY_PREFIX', 'RM')
    SHOP_ADDRESS_LINES = _env_list('SHOP_ADDRESS_LINES', [
        "E-G-12, Pangsapuri Putra Raya",
        "Jalan PP 32, Seksyen 2",
        "Taman Pinggiran Putra",
        "43300 Seri Kembangan, Selangor",
        "Business Reg. No: 202503190421 (003752485-M)",
    ])
    # Watermark and logo images are not shipped with the code; deployments put them in ASSET_FOLDER.
    # Missing images are reported at startup and documents render without them.
    ASSET_FOLDER = os.environ.get('ASSET_FOLDER', os.path.join(BASE_DIR, 'static', 'assets'))
    WATERMARK_IMAGE = os.environ.get('WATERMARK_IMAGE', 'revline_bg_cropped.png')
    LOGO_IMAGE = os.environ.get('LOGO_IMAGE', 'revline_bg_cropped.png')
    WATERMARK_OPACITY = float(os.environ.get('WATERMARK_OPACITY', '0.08'))
    # "-" or "0" for services the catalog does not track a quantity for
    QUANTITY_ZERO_DISPLAY = os.environ.get('QUANTITY_ZERO_DISPLAY', '-')
    SHOW_PAYMENT_STATUS = _env_bool('SHOW_PAYMENT_STATUS', True)
    INVOICE_VARIANT = os.environ.get('INVOICE_VARIANT', 'quantity')
    DEFAULT_OUTPUT_FORMAT = os.environ.get('DEFAULT_OUTPUT_FORMAT', 'pdf')

    # HTTP surface
    RATELIMIT_DEFAULT = os.environ.get('RATELIMIT_DEFAULT', '1000 per day;200 per hour')
    LOGS_DIR = os.environ.get('LOGS_DIR', os.path.join(BASE_DIR, 'logs'))
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')


class DevConfig(Config):
    """Development configuration"""
    DEBUG = True
    FLASK_HOST = '0.0.0.0'
    FLASK_PORT = 5000
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'DEBUG')
    CORS_ORIGINS = [
        "http://localhost:5173",
        "http://127.0.0.1:5173",
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]


class TestConfig(Config):
    """Test configuration - no real backend, no rate limits"""
    TESTING = True
    DEBUG = False
    ORDER_API_URL = 'http://backend.test'
    RATELIMIT_ENABLED = False
    ASSET_FOLDER = str(Path(__file__).resolve().parent / 'tests' / 'assets')
    LOGS_DIR = os.environ.get('LOGS_DIR', os.path.join(Config.BASE_DIR, 'logs'))
    CORS_ORIGINS = ["http://localhost:5173"]


class ProductionConfig(Config):
    """Production configuration"""
    DEBUG = False
    FLASK_HOST = '::'
    FLASK_PORT = 5000
    CORS_ORIGINS = _env_list('CORS_ORIGINS', ["https://admin.revlinemotorworks.com"])


CONFIGS = {
    'development': DevConfig,
    'testing': TestConfig,
    'production': ProductionConfig,
}


def get_config(name=None):
    """Pick the config class from APP_ENV (development by default)."""
    name = name or os.environ.get('APP_ENV', 'development')
    return CONFIGS.get(name.lower(), DevConfig)
