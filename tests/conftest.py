#tests\conftest.py

"""Pytest configuration and fixtures."""

import os
from contextlib import contextmanager

import pytest

from wp_provisioner.adapters.host import LocalHost
from wp_provisioner.config import ProvisionerSettings
from wp_provisioner.core.errors import CommandError, SaltFetchError
from wp_provisioner.core.events import EventEmitter, MultiEventEmitter, RecordingEventEmitter
from wp_provisioner.core.factory import TargetFactory
from wp_provisioner.credentials.generator import PasswordPolicy
from wp_provisioner.credentials.salts import SALT_NAMES
from wp_provisioner.executor.executor import StepExecutor
from wp_provisioner.infrastructure.file.ledger import FileLedgerRepository
from wp_provisioner.pipeline.wordpress import build_wordpress_pipeline
from wp_provisioner.service import ProvisioningService


WP_CONFIG_SAMPLE = """<?php
/**
 * The base configuration for WordPress
 *
 * @package WordPress
 */

// ** Database settings - You can get this info from your web host ** //
/** The name of the database for WordPress */
define( 'DB_NAME', 'database_name_here' );

/** Database username */
define( 'DB_USER', 'username_here' );

/** Database password */
define( 'DB_PASSWORD', 'password_here' );

/** Database hostname */
define( 'DB_HOST', 'localhost' );

/** Database charset to use in creating database tables. */
define( 'DB_CHARSET', 'utf8mb4' );

/**#@+
 * Authentication unique keys and salts.
 */
define( 'AUTH_KEY',         'put your unique phrase here' );
define( 'SECURE_AUTH_KEY',  'put your unique phrase here' );
define( 'LOGGED_IN_KEY',    'put your unique phrase here' );
define( 'NONCE_KEY',        'put your unique phrase here' );
define( 'AUTH_SALT',        'put your unique phrase here' );
define( 'SECURE_AUTH_SALT', 'put your unique phrase here' );
define( 'LOGGED_IN_SALT',   'put your unique phrase here' );
define( 'NONCE_SALT',       'put your unique phrase here' );

/**#@-*/

$table_prefix = 'wp_';

define( 'WP_DEBUG', false );

if ( ! defined( 'ABSPATH' ) ) {
\tdefine( 'ABSPATH', __DIR__ . '/' );
}

require_once ABSPATH . 'wp-settings.php';
"""

APACHE_GLOBAL_CONF = """DefaultRuntimeDir ${APACHE_RUN_DIR}
<Directory />
\tOptions FollowSymLinks
\tAllowOverride None
\tRequire all denied
</Directory>

<Directory /usr/share>
\tAllowOverride None
\tRequire all granted
</Directory>

<Directory /var/www/>
\tOptions Indexes FollowSymLinks
\tAllowOverride None
\tRequire all granted
</Directory>
"""

DEFAULT_SITE_CONF = """<VirtualHost *:80>
\tServerAdmin webmaster@localhost
\tDocumentRoot /var/www/html
\tErrorLog ${APACHE_LOG_DIR}/error.log
\tCustomLog ${APACHE_LOG_DIR}/access.log combined
</VirtualHost>
"""

PHP_INI = """[PHP]
engine = On
; upload_max_filesize = 1M
max_execution_time = 30
memory_limit = 128M
post_max_size = 8M
upload_max_filesize = 2M
"""


def make_salt_block(seed: str = "x") -> str:
    return "".join(
        f"define('{name}',{' ' * (17 - len(name))}'{seed}-{name.lower()}-Q!@#{{}}<>');\n"
        for name in SALT_NAMES
    )


# ============================================
# JOURNAL (which step mutated what)
# ============================================

class Journal(EventEmitter):
    """Event emitter that also attributes every fake mutation to a step."""

    def __init__(self):
        self.current_step = None
        self.entries = []

    def emit(self, events):
        for event in events:
            if event.event_type == "step.started":
                self.current_step = event.step_id

    def record(self, action: str):
        self.entries.append((self.current_step, action))

    def mark(self) -> int:
        return len(self.entries)

    def since(self, mark: int):
        return self.entries[mark:]


# ============================================
# FAKE COLLABORATORS
# ============================================

class FakePackages:
    def __init__(self, journal):
        self._journal = journal
        self.installed = set()

    def missing(self, packages):
        return [p for p in packages if p not in self.installed]

    def install(self, packages, upgrade=True):
        self._journal.record("apt-get install")
        self.installed.update(packages)


class FakeApache:
    def __init__(self, journal):
        self._journal = journal
        self.enabled = set()
        self.reload_fails = False
        self.calls = []

    def is_site_enabled(self, site_config):
        return os.path.basename(site_config) in self.enabled

    def enable_site(self, site_config):
        self._journal.record("a2ensite")
        self.enabled.add(os.path.basename(site_config))

    def reload(self):
        self._journal.record("reload")
        self.calls.append("reload")
        if self.reload_fails:
            raise CommandError(["systemctl", "reload", "apache2"], 1, "failed")

    def restart(self):
        self._journal.record("restart")
        self.calls.append("restart")

    def reload_or_restart(self):
        try:
            self.reload()
        except CommandError:
            self.restart()


class FakeDatabase:
    def __init__(self, journal):
        self._journal = journal
        self.databases = set()
        self.users = {}
        self.grants = set()
        self.options = {}

    def database_exists(self, name):
        return name in self.databases

    def user_exists(self, user, host):
        return (user, host) in self.users

    def site_urls(self, database):
        return self.options.get(database)

    def create_database(self, name, charset, collation):
        self._journal.record("CREATE DATABASE")
        self.databases.add(name)

    def create_user(self, user, host, password):
        self._journal.record("CREATE USER")
        self.users[(user, host)] = password

    def grant_database(self, database, user, host):
        self._journal.record("GRANT")
        self.grants.add((database, user, host))

    def set_password(self, user, host, password):
        self._journal.record("ALTER USER")
        self.users[(user, host)] = password

    def update_site_urls(self, database, url):
        self._journal.record("UPDATE wp_options")
        for key in self.options.get(database, {}):
            self.options[database][key] = url


class FakeArchive:
    def __init__(self, journal, root):
        self._journal = journal
        self._root = root
        self.fetches = 0

    @contextmanager
    def unpacked(self):
        self._journal.record("download")
        self.fetches += 1
        source = os.path.join(self._root, f"unpack-{self.fetches}", "wordpress")
        os.makedirs(os.path.join(source, "wp-content", "themes"))
        os.makedirs(os.path.join(source, "wp-includes"))
        files = {
            "index.php": "<?php\n",
            "wp-settings.php": "<?php\n",
            "wp-config-sample.php": WP_CONFIG_SAMPLE,
            "wp-content/index.php": "<?php\n",
            "wp-includes/version.php": "<?php\n$wp_version = '6.6';\n",
        }
        for name, content in files.items():
            with open(os.path.join(source, name), "w", encoding="utf-8") as fh:
                fh.write(content)
        yield source


class FakeCertbot:
    def __init__(self, journal):
        self._journal = journal
        self.issued = set()
        self.emails = {}
        self.fail = False

    def has_certificate(self, domain):
        return domain in self.issued

    def issue(self, domains, email):
        self._journal.record("certbot")
        self.emails[domains[0]] = email
        if self.fail:
            raise CommandError(["certbot"], 1, "DNS problem: NXDOMAIN")
        self.issued.add(domains[0])


class FakeSalts:
    def __init__(self):
        self.fail = False
        self.fetches = 0

    def fetch_salt_block(self):
        self.fetches += 1
        if self.fail:
            raise SaltFetchError("cannot fetch salts: connection refused")
        return make_salt_block(str(self.fetches))


class RecordingHost(LocalHost):
    """Real filesystem under tmp_path; ownership changes are only recorded."""

    def __init__(self, journal):
        self._journal = journal
        self.chowned = []

    def chown(self, path, user, group):
        self.chowned.append((path, user, group))

    def ensure_dir(self, path, mode, user, group):
        self._journal.record(f"ensure_dir {path}")
        super().ensure_dir(path, mode, user, group)

    def chown_tree(self, root, user, group):
        self._journal.record(f"chown_tree {root}")
        super().chown_tree(root, user, group)

    def chmod_tree(self, root, dir_mode, file_mode):
        self._journal.record(f"chmod_tree {root}")
        super().chmod_tree(root, dir_mode, file_mode)

    def write_atomic(self, path, text, mode=0o644):
        self._journal.record(f"write {path}")
        super().write_atomic(path, text, mode)

    def clear_dir(self, path):
        self._journal.record(f"clear {path}")
        super().clear_dir(path)

    def copy_contents(self, source, dest):
        self._journal.record(f"copy {dest}")
        super().copy_contents(source, dest)


# ============================================
# FIXTURES
# ============================================

@pytest.fixture
def settings(tmp_path):
    """Settings with every host path moved under tmp_path."""
    apache = tmp_path / "etc" / "apache2"
    (apache / "sites-available").mkdir(parents=True)
    (apache / "sites-enabled").mkdir(parents=True)
    www = tmp_path / "var" / "www"
    (www / "html").mkdir(parents=True)

    (apache / "apache2.conf").write_text(APACHE_GLOBAL_CONF.replace("/var/www/", f"{www}/"))
    (apache / "sites-available" / "000-default.conf").write_text(
        DEFAULT_SITE_CONF.replace("/var/www/html", str(www / "html"))
    )

    php_ini = tmp_path / "etc" / "php" / "8.1" / "apache2" / "php.ini"
    php_ini.parent.mkdir(parents=True)
    php_ini.write_text(PHP_INI)

    (www / "html" / "index.html").write_text("<html>It works!</html>\n")

    return ProvisionerSettings(
        _env_file=None,
        www_root=str(www),
        default_web_root=str(www / "html"),
        apache_sites_available=str(apache / "sites-available"),
        apache_sites_enabled=str(apache / "sites-enabled"),
        apache_global_conf=str(apache / "apache2.conf"),
        php_ini_glob=str(tmp_path / "etc" / "php" / "*" / "apache2" / "php.ini"),
        ledger_dir=str(tmp_path / "root"),
        lock_dir=str(tmp_path / "run" / "lock"),
        scratch_dir=str(tmp_path / "tmp"),
        letsencrypt_live_dir=str(tmp_path / "etc" / "letsencrypt" / "live"),
        retry_backoff_seconds=0,
    )


@pytest.fixture
def factory(settings):
    return TargetFactory(settings)


@pytest.fixture
def journal():
    return Journal()


@pytest.fixture
def recorder():
    return RecordingEventEmitter()


@pytest.fixture
def host(journal):
    return RecordingHost(journal)


@pytest.fixture
def fakes(journal, tmp_path):
    """The external systems of one simulated machine."""
    class Machine:
        packages = FakePackages(journal)
        apache = FakeApache(journal)
        database = FakeDatabase(journal)
        archive = FakeArchive(journal, str(tmp_path / "downloads"))
        certbot = FakeCertbot(journal)
        salts = FakeSalts()

    return Machine


@pytest.fixture
def password_policy(settings):
    return PasswordPolicy.build(settings.password_length, settings.password_alphabet)


@pytest.fixture
def make_service(settings, factory, fakes, host, journal, recorder, password_policy):
    """Build a service on the shared fake machine (optionally with other settings)."""
    def build(run_settings=None):
        run_settings = run_settings or settings
        run_factory = TargetFactory(run_settings)
        return ProvisioningService(
            settings=run_settings,
            factory=run_factory,
            ledger=FileLedgerRepository(run_factory),
            executor=StepExecutor(MultiEventEmitter([journal, recorder])),
            packages=fakes.packages,
            apache=fakes.apache,
            database=fakes.database,
            archive=fakes.archive,
            certbot=fakes.certbot,
            salts=fakes.salts,
            host=host,
            password_policy=password_policy,
            pipeline=build_wordpress_pipeline,
        )

    return build


@pytest.fixture
def service(make_service):
    return make_service()
