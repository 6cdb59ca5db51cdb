import os
import sys
from dataclasses import dataclass
from urllib.parse import urlparse
from dotenv import load_dotenv

from constants import DATA_SERVICE_MAX_ROWS
from utils.normalize import ValidationError, to_int

load_dotenv()


def _print_setup_hint(headline: str, lines) -> None:
    print("\n" + "=" * 70, file=sys.stderr)
    print(f"FATAL: {headline}", file=sys.stderr)
    print("=" * 70, file=sys.stderr)
    for line in lines:
        print(line, file=sys.stderr)
    print("=" * 70 + "\n", file=sys.stderr)


def _int_env(name: str, default: int) -> int:
    try:
        value = to_int(os.getenv(name, "").strip(), default=default, field=name)
    except ValidationError as e:
        raise RuntimeError(f"{name} must be an integer: {e}")
    if value <= 0:
        raise RuntimeError(f"{name} must be positive, got {value}")
    return value


@dataclass(frozen=True)
class DataSourceConfig:
    """
    Connection settings for the remote data service.

    Built explicitly (tests) or from the environment (from_env). The
    aggregation code receives this object and never reads os.environ.
    """
    base_url: str
    api_key: str
    page_size: int = 1000
    timeout_seconds: float = 30
    max_workers: int = 4

    @classmethod
    def from_env(cls) -> 'DataSourceConfig':
        """
        Read DATA_SERVICE_* variables.

        DATA_SERVICE_URL and DATA_SERVICE_KEY are REQUIRED. The URL must be
        http(s); the client appends /rest/v1 itself.
        """
        base_url = os.getenv('DATA_SERVICE_URL')
        api_key = os.getenv('DATA_SERVICE_KEY')

        if not base_url or not api_key:
            missing = [name for name, value in (
                ('DATA_SERVICE_URL', base_url),
                ('DATA_SERVICE_KEY', api_key),
            ) if not value]
            _print_setup_hint(
                f"{', '.join(missing)} not set!",
                [
                    "\nThe KPI backend reads everything from the remote data service.",
                    "\nAdd to your .env file:",
                    "  DATA_SERVICE_URL=https://<project>.example.co",
                    "  DATA_SERVICE_KEY=<service key>",
                ],
            )
            raise RuntimeError(f"{', '.join(missing)} required.")

        parsed = urlparse(base_url)
        if parsed.scheme not in ('http', 'https') or not parsed.netloc:
            _print_setup_hint(
                "DATA_SERVICE_URL must be an http(s) URL!",
                [
                    f"\nReceived: {base_url[:50]}...",
                    "\nExpected format: https://host[:port]",
                ],
            )
            raise RuntimeError("DATA_SERVICE_URL must be an http(s) URL.")

        page_size = _int_env('DATA_SERVICE_PAGE_SIZE', DATA_SERVICE_MAX_ROWS)
        if page_size > DATA_SERVICE_MAX_ROWS:
            _print_setup_hint(
                f"DATA_SERVICE_PAGE_SIZE={page_size} exceeds the service row cap!",
                [f"\nThe data service returns at most {DATA_SERVICE_MAX_ROWS} rows per call."],
            )
            raise RuntimeError(f"DATA_SERVICE_PAGE_SIZE must be <= {DATA_SERVICE_MAX_ROWS}.")

        return cls(
            base_url=base_url.rstrip('/'),
            api_key=api_key,
            page_size=page_size,
            timeout_seconds=_int_env('DATA_SERVICE_TIMEOUT', 30),
            max_workers=_int_env('DATA_SERVICE_MAX_WORKERS', 4),
        )


class Config:
    SECRET_KEY = os.getenv('SECRET_KEY', 'dev-secret-key')
    DEBUG = os.getenv('FLASK_DEBUG', 'False').lower() == 'true'

    # Request usage logging (see api/middleware/request_logging.py)
    REQUEST_LOG_ENABLED = os.getenv('REQUEST_LOG_ENABLED', 'true').lower() == 'true'
    REQUEST_LOG_SAMPLE_RATE = os.getenv('REQUEST_LOG_SAMPLE_RATE', '0.0')
    REQUEST_LOG_ENDPOINTS = os.getenv('REQUEST_LOG_ENDPOINTS', '')

    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO').upper()
