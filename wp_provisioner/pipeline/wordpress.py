# wp_provisioner/pipeline/wordpress.py

"""Single-site WordPress pipeline definition."""

from typing import List

from wp_provisioner.core.models import FailurePolicy
from wp_provisioner.executor.step import Step
from wp_provisioner.pipeline import application_steps as app
from wp_provisioner.pipeline import database_steps as db
from wp_provisioner.pipeline import system_steps as system
from wp_provisioner.pipeline import tls_steps as tls


def build_wordpress_pipeline(issue_certificate: bool = True) -> List[Step]:
    """Return the ordered steps; the certificate step is left out when disabled."""
    steps = [
        Step(
            step_id="install-packages",
            name="Install system packages",
            order=1,
            check=system.packages_installed,
            apply=system.install_packages,
        ),
        Step(
            step_id="provision-vhost",
            name="Provision web root and vhost",
            order=2,
            depends_on=["install-packages"],
            check=system.vhost_provisioned,
            apply=system.provision_vhost,
        ),
        Step(
            step_id="tune-php",
            name="Tune PHP runtime limits",
            order=3,
            depends_on=["install-packages"],
            apply=system.tune_php,
            verify=system.php_limits_applied,
        ),
        Step(
            step_id="create-database",
            name="Create database and user",
            order=4,
            depends_on=["install-packages"],
            check=db.database_provisioned,
            apply=db.create_database,
        ),
        Step(
            step_id="fetch-wordpress",
            name="Fetch and unpack WordPress",
            order=5,
            depends_on=["provision-vhost"],
            check=app.config_present,
            apply=app.fetch_wordpress,
            verify=app.wordpress_unpacked,
        ),
        Step(
            step_id="render-config",
            name="Render wp-config.php",
            order=6,
            depends_on=["create-database", "fetch-wordpress"],
            check=app.config_current,
            apply=app.render_config,
        ),
        Step(
            step_id="content-permissions",
            name="Fix wp-content permissions",
            order=7,
            depends_on=["fetch-wordpress"],
            apply=app.fix_content_permissions,
            verify=app.uploads_present,
        ),
        Step(
            step_id="update-site-url",
            name="Update persisted site URL",
            order=8,
            depends_on=["create-database"],
            check=db.site_url_current,
            apply=db.update_site_url,
            on_failure=FailurePolicy.WARN,
        ),
        Step(
            step_id="issue-certificate",
            name="Issue TLS certificate",
            order=9,
            depends_on=["provision-vhost"],
            check=tls.certificate_present,
            apply=tls.issue_certificate,
            on_failure=FailurePolicy.WARN,
        ),
        Step(
            step_id="final-reload",
            name="Reload web server",
            order=10,
            check=tls.webserver_settled,
            apply=tls.final_reload,
        ),
    ]

    if not issue_certificate:
        steps = [s for s in steps if s.step_id != "issue-certificate"]

    return steps
