"""
Configuration management using python-dotenv for environment variables
"""
import os
from dataclasses import dataclass
from typing import Any, Dict, Optional
from pathlib import Path
from dotenv import load_dotenv

PROJECT_ROOT = Path(__file__).resolve().parent.parent

# Load environment variables from .env file
env_path = PROJECT_ROOT / '.env'
load_dotenv(dotenv_path=env_path)


class ENVConfig:
    """Environment-specific configuration for the payment collaborators"""

    @property
    def applepay_config(self) -> Dict[str, str]:
        """Get Apple Pay merchant configuration"""
        return {
            'merchant_id': os.getenv('APPLE_MERCHANT_ID', ''),
            'display_name': os.getenv('APPLE_MERCHANT_DISPLAY_NAME', ''),
            'domain': os.getenv('APPLE_MERCHANT_DOMAIN', ''),
        }

    @property
    def authorize_net_config(self) -> Dict[str, str]:
        """Get Authorize.Net gateway configuration"""
        return {
            'mode': os.getenv('AUTHORIZE_NET_MODE', 'sandbox'),
            'api_login_id': os.getenv('AUTHORIZE_NET_API_LOGIN_ID', ''),
        }


class AppConfig:
    """Application-level configuration settings"""

    @property
    def server_config(self) -> Dict[str, Any]:
        """Get server configuration"""
        return {
            'host': os.getenv('SERVER_HOST', 'localhost'),
            'port': int(os.getenv('SERVER_PORT', '3000')),
            'debug': os.getenv('DEBUG', 'False').lower() == 'true',
            'log_level': 'debug' if os.getenv('DEBUG') else 'info'
        }

    @property
    def cors_config(self) -> Dict[str, Any]:
        """Get CORS configuration"""
        return {
            'allow_origins': os.getenv('CORS_ORIGINS', '*').split(','),
            'allow_methods': os.getenv('CORS_METHODS', 'GET,POST,PUT,DELETE,OPTIONS').split(','),
            'allow_headers': os.getenv('CORS_HEADERS', '*').split(',')
        }

    @property
    def deploy_config(self) -> Dict[str, Any]:
        """Get deployment layout: run mode and build/public directories"""
        app_env = os.getenv('APP_ENV', 'development').lower()
        return {
            'app_env': app_env,
            'packaged': app_env == 'production',
            'public_dir': Path(os.getenv('PUBLIC_DIR', str(PROJECT_ROOT / 'public'))),
            'dist_dir': Path(os.getenv('DIST_DIR', str(PROJECT_ROOT / 'dist'))),
        }


@dataclass(frozen=True)
class DeployConfig:
    """Immutable deployment settings, fixed when the process starts.

    ``packaged`` switches on the static asset mount and the SPA fallback.
    ``cwd`` pins the working directory used for cwd-relative candidates;
    when left as None it is read on every request.
    """
    packaged: bool = False
    public_dir: Path = PROJECT_ROOT / 'public'
    dist_dir: Path = PROJECT_ROOT / 'dist'
    app_env: str = 'development'
    cwd: Optional[Path] = None

    @classmethod
    def from_app_config(cls, config: Optional['AppConfig'] = None) -> 'DeployConfig':
        deploy = (config or app_config).deploy_config
        return cls(
            packaged=deploy['packaged'],
            public_dir=deploy['public_dir'].resolve(),
            dist_dir=deploy['dist_dir'].resolve(),
            app_env=deploy['app_env'],
        )

    def working_dir(self) -> Path:
        return self.cwd if self.cwd is not None else Path.cwd()


# Create singleton instances
env_config = ENVConfig()
app_config = AppConfig()
