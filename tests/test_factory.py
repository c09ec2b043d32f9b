#tests\test_factory.py

"""Test domain validation and derived target facts."""

import os

import pytest

from wp_provisioner.core.errors import UsageError
from wp_provisioner.core.factory import MAX_DB_NAME, MAX_DB_USER, TargetFactory
from wp_provisioner.core.models import LayoutMode
from wp_provisioner.core.validation import clean_name, normalize_domain


class TestNormalizeDomain:
    """Test domain normalization and rejection."""

    def test_lowercases_and_strips(self):
        """Test whitespace, case and a trailing dot are normalized away."""
        assert normalize_domain("  Example.COM. ") == "example.com"

    @pytest.mark.parametrize("domain", [
        "",
        "   ",
        "localhost",
        "www.example.com",
        "-bad.com",
        "bad-.com",
        "exa mple.com",
        "a..com",
        "ex_ample.com",
        "a" * 64 + ".com",
    ])
    def test_rejects_invalid(self, domain):
        """Test invalid domains raise UsageError."""
        with pytest.raises(UsageError):
            normalize_domain(domain)

    def test_rejects_none(self):
        """Test a missing domain raises UsageError."""
        with pytest.raises(UsageError):
            normalize_domain(None)

    def test_clean_name(self):
        """Test identifier cleaning maps punctuation to underscores."""
        assert clean_name("example.com") == "example_com"
        assert clean_name("my-site.co.uk") == "my_site_co_uk"
        assert clean_name(".example.") == "example"


class TestTargetFactory:
    """Test target derivation in both layouts."""

    # -------------------------
    # VHOST LAYOUT
    # -------------------------

    def test_vhost_layout(self, factory, settings):
        """Test example.com maps onto its own directory, site and database."""
        target = factory.create("example.com")

        assert target.layout == LayoutMode.VHOST
        assert target.web_root == os.path.join(settings.www_root, "example.com", "public_html")
        assert target.site_config == os.path.join(
            settings.apache_sites_available, "example.com.conf"
        )
        assert target.db_name == "wp_example_com"
        assert target.db_user == "wp_example_com_user"
        assert target.ledger_path == os.path.join(settings.ledger_dir, ".example.com_db_creds")
        assert target.cert_email == "admin@example.com"
        assert target.db_password is None

    def test_urls_and_aliases(self, factory):
        """Test site URL, install URL and aliases."""
        target = factory.create("example.com")

        assert target.site_url == "https://example.com"
        assert target.install_url == "https://example.com/wp-admin/install.php"
        assert target.aliases == ["example.com", "www.example.com"]

    def test_password_not_in_repr(self, factory):
        """Test the password never shows up in a repr."""
        target = factory.create("example.com", db_password="hunter2hunter2")

        assert "hunter2hunter2" not in repr(target)

    # -------------------------
    # DEFAULT LAYOUT
    # -------------------------

    def test_default_layout(self, factory, settings):
        """Test the default layout reuses the stock web root and site."""
        target = factory.create("example.com", layout=LayoutMode.DEFAULT)

        assert target.web_root == settings.default_web_root
        assert target.site_config == os.path.join(
            settings.apache_sites_available, "000-default.conf"
        )
        assert target.db_name == "wp_example_com"
        assert target.ledger_path.endswith(".example.com_db_creds")

    def test_layout_from_settings(self, settings):
        """Test the layout falls back to settings."""
        default_settings = settings.model_copy(update={"layout": LayoutMode.DEFAULT})
        target = TargetFactory(default_settings).create("example.com")

        assert target.layout == LayoutMode.DEFAULT

    def test_cert_email_from_settings(self, settings):
        """Test a configured contact address wins over admin@domain."""
        custom = settings.model_copy(update={"cert_email": "ops@example.net"})
        target = TargetFactory(custom).create("example.com")

        assert target.cert_email == "ops@example.net"

    # -------------------------
    # NAME DERIVATION
    # -------------------------

    def test_hyphen_and_dot_do_not_collide(self):
        """Test domains that clean to the same stem get distinct names."""
        dotted = TargetFactory.database_names("my.site.com")
        hyphen = TargetFactory.database_names("my-site.com")

        assert dotted == ("wp_my_site_com", "wp_my_site_com_user")
        assert hyphen[0] != dotted[0]
        assert hyphen[1] != dotted[1]
        assert hyphen[0].startswith("wp_my_site_com_")

    def test_long_domain_fits_mysql_limits(self):
        """Test long domains are truncated and stay distinct."""
        first = TargetFactory.database_names("a" * 60 + ".example.com")
        second = TargetFactory.database_names("a" * 60 + ".example.org")

        for db_name, db_user in (first, second):
            assert len(db_name) <= MAX_DB_NAME
            assert len(db_user) <= MAX_DB_USER
            assert db_user.endswith("_user")

        assert first != second

    def test_derivation_is_deterministic(self, factory):
        """Test the same domain always yields the same facts."""
        assert factory.create("Example.com") == factory.create("example.com")
