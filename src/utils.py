import os
import re
import copy
import shutil
import tempfile
import logging
import logging.handlers
import yaml
from datetime import datetime
from typing import Dict, Any, Optional
from urllib.parse import urlparse
from dotenv import load_dotenv


def load_config(config_path: Optional[str] = 'config.yaml') -> Dict[str, Any]:
    """Load configuration from YAML file with environment variable overrides."""
    # Load environment variables
    load_dotenv()

    config = get_default_config()
    if config_path and os.path.exists(config_path):
        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                file_config = yaml.safe_load(f) or {}
            config = deep_merge(config, file_config)
        except Exception as e:
            logging.warning(f"Could not load config from {config_path}: {e}")

    # Override with environment variables
    config = apply_env_overrides(config)

    return config


def get_default_config() -> Dict[str, Any]:
    """Get default configuration values."""
    return {
        'timeouts': {
            'page_load': 10,
            'sidebar_expansion': 3,
            'click_retry': 2,
            'animation': 0.8,
            'scroll': 2,
            'scroll_settle': 0.3,
            'network_idle': 5,
        },
        'pdf': {
            'width': '800px',
            'margins': {
                'top': '40px',
                'left': '40px',
                'right': '40px',
                'bottom': '0',
            },
            'print_background': True,
            'tagged': True,
            'prefer_css_page_size': True,
            'default_height': 1000,
            'height_padding': 60,
        },
        'viewport': {
            'width': 1260,  # 720 / 0.75 + 300
            'height': 400,
        },
        'browser': {
            'headless': True,
            'chrome_binary_path': None,
            'user_agent': None,
        },
        'selectors': {
            'sidebar': {
                'level1': '.theme-doc-sidebar-item-category-level-1 > .menu__list-item-collapsible',
                'collapsible': '.menu__list-item-collapsible',
                'collapsed': '.menu__list-item--collapsed > .menu__list-item-collapsible',
                'collapsed_class': 'menu__list-item--collapsed',
                'active': '.menu__list-item-collapsible--active',
                'category_level': '.theme-doc-sidebar-item-category-level-{level}',
                'link': 'a.menu__link:not([class*=menuExternalLink])',
                'button': 'button',
                'menu_link': '.menu__link',
            },
            'content': {
                'skip_to_content': '#__docusaurus_skipToContent_fallback',
                'article': 'article',
                'doc_card_list_item': 'article > section.row > article[class*=docCardListItem]',
                'page_content': 'article > section.row > *',
            },
        },
        'retry': {
            'strategies': ['click', 'force_click', 'javascript_click'],
        },
        'styles': {
            'column_fix': """
      .col--6 {
        --ifm-col-width: calc(12 / 12 * 100%);
      }
      code[class*="codeBlockLines_"]{
         white-space: pre-wrap !important;
      }
    """,
        },
        'cleanup': {
            'clean_temp_files': True,
        },
        'directories': {
            'temp_base': '.',
        },
        'logging': {
            'level': 'INFO',
            'log_to_file': False,
            'log_filename': 'docexport.log',
            'logs_dir': 'logs',
        },
    }


def merge_config(overrides: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """Overlay ``overrides`` on the defaults, merging nested sections key by key."""
    return deep_merge(get_default_config(), overrides or {})


def deep_merge(base: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively merge ``overrides`` into a copy of ``base``."""
    merged = copy.deepcopy(base)
    for key, value in overrides.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def apply_env_overrides(config: Dict[str, Any]) -> Dict[str, Any]:
    """Apply environment variable overrides to configuration."""
    env_mappings = {
        'DOCEXPORT_PAGE_LOAD_TIMEOUT': ('timeouts', 'page_load', float),
        'DOCEXPORT_HEADLESS': ('browser', 'headless', lambda x: x.lower() == 'true'),
        'DOCEXPORT_PDF_WIDTH': ('pdf', 'width', str),
        'DOCEXPORT_LOG_LEVEL': ('logging', 'level', str),
    }

    for env_var, (section, key, converter) in env_mappings.items():
        value = os.getenv(env_var)
        if value is not None:
            try:
                converted_value = converter(value)
                config[section][key] = converted_value
            except (ValueError, TypeError) as e:
                logging.warning(f"Invalid value for {env_var}: {value} - {e}")

    return config


def setup_logging(logging_config: Dict[str, Any]) -> logging.Logger:
    """Setup logging configuration."""
    level = getattr(logging, logging_config.get('level', 'INFO').upper(), logging.INFO)

    # Configure logging
    logger = logging.getLogger()
    logger.setLevel(level)

    # Clear existing handlers
    logger.handlers.clear()

    # Console handler
    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)

    # Create formatter
    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    # File handler
    if logging_config.get('log_to_file', False):
        logs_dir = logging_config.get('logs_dir', 'logs')
        os.makedirs(logs_dir, exist_ok=True)
        log_filename = os.path.join(logs_dir, logging_config.get('log_filename', 'docexport.log'))

        file_handler = logging.handlers.RotatingFileHandler(
            log_filename,
            maxBytes=10*1024*1024,  # 10MB
            backupCount=5,
            encoding='utf-8'
        )
        file_handler.setLevel(logging.DEBUG)  # File gets all logs
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger


def validate_url(url: str) -> bool:
    """Check that the URL is an absolute http(s) URL."""
    parsed = urlparse(url)
    return parsed.scheme in ('http', 'https') and bool(parsed.netloc)


_CSS_UNITS_PER_INCH = {
    'px': 96.0,
    'in': 1.0,
    'cm': 2.54,
    'mm': 25.4,
    'pt': 72.0,
}


def css_length_to_inches(value) -> float:
    """Convert a CSS length such as ``"800px"`` or ``"1cm"`` to inches.

    Bare numbers are treated as pixels.
    """
    if isinstance(value, (int, float)):
        return float(value) / _CSS_UNITS_PER_INCH['px']

    match = re.fullmatch(r'\s*(-?\d+(?:\.\d+)?)\s*([a-z]*)\s*', str(value).lower())
    if not match:
        raise ValueError(f"Unsupported CSS length: {value!r}")

    number, unit = float(match.group(1)), match.group(2) or 'px'
    if unit not in _CSS_UNITS_PER_INCH:
        raise ValueError(f"Unsupported CSS unit: {unit!r}")
    return number / _CSS_UNITS_PER_INCH[unit]


def ensure_directory(dir_path: str) -> None:
    """Create a directory (and parents) if it does not exist."""
    os.makedirs(dir_path, exist_ok=True)


def create_temp_directory(base_path: str = '.', prefix: str = 'pdfsTemp') -> str:
    """Create a uniquely named working directory under ``base_path``."""
    ensure_directory(base_path)
    return tempfile.mkdtemp(prefix=prefix, dir=os.path.abspath(base_path))


def remove_directory(dir_path: str) -> None:
    """Remove a directory tree if it exists."""
    if dir_path and os.path.exists(dir_path):
        shutil.rmtree(dir_path, ignore_errors=True)


def resolve_output_path(output_path: str) -> Dict[str, str]:
    """Resolve output directory and filename from a path."""
    full_path = os.path.abspath(output_path)
    return {
        'dir': os.path.dirname(full_path),
        'filename': os.path.basename(full_path),
        'full_path': full_path,
    }


def build_output_filename(output_path: str, version: Optional[str] = None,
                          date: Optional[datetime] = None) -> str:
    """Append an optional document version and a YYYYMMDD date stamp to the filename."""
    resolved = resolve_output_path(output_path)
    basename, ext = os.path.splitext(resolved['filename'])
    stamp = (date or datetime.now()).strftime('%Y%m%d')

    parts = [basename]
    if version:
        parts.append(version)
    parts.append(stamp)

    return os.path.join(resolved['dir'], f"{'-'.join(parts)}{ext}")
