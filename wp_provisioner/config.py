# wp_provisioner/config.py

from typing import Dict, List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from wp_provisioner.core.models import LayoutMode


DEFAULT_PACKAGES = [
    "apache2",
    "mysql-server",
    "php",
    "libapache2-mod-php",
    "php-mysql",
    "unzip",
    "certbot",
    "python3-certbot-apache",
    "php-curl",
    "php-mbstring",
    "php-xml",
    "php-xmlrpc",
    "php-gd",
    "php-zip",
    "php-bcmath",
    "php-intl",
]

DEFAULT_PHP_LIMITS = {
    "upload_max_filesize": "64M",
    "post_max_size": "64M",
    "memory_limit": "256M",
    "max_execution_time": "300",
}


class ProvisionerSettings(BaseSettings):
    """Provisioner configuration from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="WP_PROVISION_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Layout
    layout: LayoutMode = LayoutMode.VHOST
    www_root: str = "/var/www"
    default_web_root: str = "/var/www/html"

    # Apache
    apache_sites_available: str = "/etc/apache2/sites-available"
    apache_sites_enabled: str = "/etc/apache2/sites-enabled"
    apache_global_conf: str = "/etc/apache2/apache2.conf"
    apache_service: str = "apache2"
    default_site_name: str = "000-default"

    # PHP
    php_ini_glob: str = "/etc/php/*/apache2/php.ini"
    php_limits: Dict[str, str] = Field(default_factory=lambda: dict(DEFAULT_PHP_LIMITS))

    # Packages
    packages: List[str] = Field(default_factory=lambda: list(DEFAULT_PACKAGES))
    upgrade_system: bool = True

    # Host
    service_user: str = "www-data"
    service_group: str = "www-data"
    ledger_dir: str = "/root"
    lock_dir: str = "/run/lock"
    scratch_dir: str = "/tmp"

    # MySQL
    mysql_binary: str = "mysql"
    db_charset: str = "utf8mb4"
    db_collation: str = "utf8mb4_unicode_ci"
    db_host: str = "localhost"

    # WordPress
    wordpress_url: str = "https://wordpress.org/latest.zip"
    salt_url: str = "https://api.wordpress.org/secret-key/1.1/salt/"

    # TLS
    issue_certificate: bool = True
    cert_email: str = ""
    letsencrypt_live_dir: str = "/etc/letsencrypt/live"

    # Network
    http_timeout: int = 60
    retry_attempts: int = 3
    retry_backoff_seconds: float = 2.0
    command_timeout: int = 1800

    # Password policy
    password_length: int = 24
    password_alphabet: str = (
        "abcdefghijklmnopqrstuvwxyz"
        "ABCDEFGHIJKLMNOPQRSTUVWXYZ"
        "0123456789"
        "!#%+-.:=@^_~"
    )
