#tests\test_templating.py

"""Test wp-config.php, php.ini and Apache config rendering."""

import pytest

from wp_provisioner.core.errors import TemplateError
from wp_provisioner.templating.apache import (
    document_root, enable_overrides, point_default_site, render_vhost,
)
from wp_provisioner.templating.php_ini import read_ini_directives, set_ini_directives
from wp_provisioner.templating.wp_config import (
    parse_define, php_quote, php_unquote, render, substitute_define,
)

from tests.conftest import (
    APACHE_GLOBAL_CONF, DEFAULT_SITE_CONF, PHP_INI, WP_CONFIG_SAMPLE, make_salt_block,
)


CREDENTIALS = {
    "DB_NAME": "wp_example_com",
    "DB_USER": "wp_example_com_user",
    "DB_PASSWORD": "s3cr3t!#%+-.:=@^_~",
}


class TestWpConfig:
    """Test line-oriented wp-config.php rendering."""

    def test_substitutes_credentials(self):
        """Test the three database defines carry the new values."""
        rendered = render(WP_CONFIG_SAMPLE, CREDENTIALS, make_salt_block())

        for name, value in CREDENTIALS.items():
            assert parse_define(rendered, name) == value
        assert parse_define(rendered, "DB_HOST") == "localhost"

    def test_other_lines_unchanged(self):
        """Test lines outside the substituted defines are carried over byte for byte."""
        rendered = render(WP_CONFIG_SAMPLE, CREDENTIALS, make_salt_block())

        before = [
            line for line in WP_CONFIG_SAMPLE.splitlines()
            if not any(f"'{name}'" in line for name in CREDENTIALS)
            and "put your unique phrase here" not in line
        ]
        after = [
            line for line in rendered.splitlines()
            if not any(f"'{name}'" in line for name in CREDENTIALS)
            and "-Q!@#" not in line
        ]
        assert before == after

    def test_keeps_define_formatting(self):
        """Test spacing inside define( ... ) survives substitution."""
        rendered = render(WP_CONFIG_SAMPLE, CREDENTIALS, make_salt_block())

        assert "define( 'DB_NAME', 'wp_example_com' );" in rendered.splitlines()

    def test_salt_block_replaces_placeholders(self):
        """Test the placeholder salts are replaced in place."""
        salts = make_salt_block("fresh")
        rendered = render(WP_CONFIG_SAMPLE, CREDENTIALS, salts)

        assert "put your unique phrase here" not in rendered
        assert salts in rendered
        assert rendered.index(salts) < rendered.index("$table_prefix")

    def test_salt_block_appended_when_absent(self):
        """Test templates without salts get the block at the end."""
        template = "<?php\ndefine('DB_NAME', 'x');\ndefine('DB_USER', 'x');\ndefine('DB_PASSWORD', 'x');"
        rendered = render(template, CREDENTIALS, make_salt_block())

        assert rendered.endswith(make_salt_block())
        assert "define('DB_PASSWORD', 's3cr3t!#%+-.:=@^_~');\n" in rendered

    def test_empty_salt_block_refused(self):
        """Test rendering without salts is refused."""
        with pytest.raises(TemplateError):
            render(WP_CONFIG_SAMPLE, CREDENTIALS, "  \n")

    def test_missing_define_refused(self):
        """Test a template lacking a substituted define raises TemplateError."""
        template = WP_CONFIG_SAMPLE.replace("define( 'DB_USER', 'username_here' );", "")

        with pytest.raises(TemplateError, match="DB_USER"):
            render(template, CREDENTIALS, make_salt_block())

    def test_first_match_only(self):
        """Test only the first define of a name is rewritten."""
        lines = [
            "define('DB_NAME', 'one');\n",
            "define('DB_NAME', 'two');\n",
        ]
        substitute_define(lines, "DB_NAME", "new")

        assert lines == ["define('DB_NAME', 'new');\n", "define('DB_NAME', 'two');\n"]

    def test_double_quoted_define(self):
        """Test double-quoted defines are recognized."""
        lines = ['define("DB_NAME", "database_name_here");\r\n']
        substitute_define(lines, "DB_NAME", "wp_example_com")

        assert lines == ["define(\"DB_NAME\", 'wp_example_com');\r\n"]

    def test_commented_define_ignored(self):
        """Test a commented-out define is not a match."""
        lines = ["// define('DB_NAME', 'old');\n", "define('DB_NAME', 'x');\n"]
        substitute_define(lines, "DB_NAME", "new")

        assert lines[0] == "// define('DB_NAME', 'old');\n"
        assert lines[1] == "define('DB_NAME', 'new');\n"

    @pytest.mark.parametrize("value", [
        "plain",
        "it's",
        "back\\slash",
        "ends-with-backslash\\",
        "\\'mixed\\\\'",
        "$dollar{brace}",
    ])
    def test_quoting_round_trips(self, value):
        """Test any password reads back identically from the rendered file."""
        lines = ["define( 'DB_PASSWORD', 'password_here' );\n"]
        substitute_define(lines, "DB_PASSWORD", value)

        assert parse_define("".join(lines), "DB_PASSWORD") == value
        assert php_unquote(php_quote(value)) == value


class TestPhpIni:
    """Test php.ini directive editing."""

    LIMITS = {
        "upload_max_filesize": "64M",
        "post_max_size": "64M",
        "memory_limit": "256M",
        "max_execution_time": "300",
    }

    def test_sets_active_directives(self):
        """Test active directives are rewritten and comments kept."""
        updated = set_ini_directives(PHP_INI, self.LIMITS)
        active = read_ini_directives(updated)

        for name, value in self.LIMITS.items():
            assert active[name] == value
        assert "; upload_max_filesize = 1M" in updated
        assert active["engine"] == "On"

    def test_appends_missing_directive(self):
        """Test a directive absent from the file is appended."""
        updated = set_ini_directives("[PHP]\nengine = On", {"memory_limit": "256M"})

        assert updated == "[PHP]\nengine = On\nmemory_limit = 256M\n"

    def test_idempotent(self):
        """Test applying the same limits twice changes nothing."""
        once = set_ini_directives(PHP_INI, self.LIMITS)

        assert set_ini_directives(once, self.LIMITS) == once

    def test_later_lines_win(self):
        """Test duplicate directives resolve to the last one."""
        active = read_ini_directives("memory_limit = 1M\nmemory_limit = 2M\n")

        assert active["memory_limit"] == "2M"


class TestApacheConfig:
    """Test Apache site and global config editing."""

    def test_render_vhost(self, factory):
        """Test the vhost serves the domain and its www alias."""
        target = factory.create("example.com")
        text = render_vhost(target)

        assert "ServerName example.com" in text
        assert "ServerAlias www.example.com" in text
        assert document_root(text) == target.web_root
        assert "${APACHE_LOG_DIR}/example.com_error.log" in text
        assert "AllowOverride All" in text

    def test_point_default_site(self):
        """Test the stock site is repointed at a new web root."""
        updated = point_default_site(DEFAULT_SITE_CONF, "/srv/www/html")

        assert document_root(updated) == "/srv/www/html"
        assert "ServerAdmin webmaster@localhost" in updated

    def test_point_default_site_directory_block(self):
        """Test <Directory> blocks follow the new web root."""
        text = "DocumentRoot /var/www/html\n<Directory /var/www/html>\n</Directory>\n"

        assert point_default_site(text, "/srv/site") == (
            "DocumentRoot /srv/site\n<Directory /srv/site>\n</Directory>\n"
        )

    def test_enable_overrides_scoped(self):
        """Test only the /var/www block gains AllowOverride All."""
        updated = enable_overrides(APACHE_GLOBAL_CONF, "/var/www")
        blocks = updated.split("</Directory>")

        assert "AllowOverride None" in blocks[0]
        assert "AllowOverride None" in blocks[1]
        assert "AllowOverride All" in blocks[2]
        assert updated.count("AllowOverride All") == 1

    def test_enable_overrides_idempotent(self):
        """Test a second pass changes nothing."""
        once = enable_overrides(APACHE_GLOBAL_CONF, "/var/www/")

        assert enable_overrides(once, "/var/www/") == once
