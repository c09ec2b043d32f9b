# wp_provisioner/run_provision.py
"""Command-line entry point: wp-provision."""

import argparse
import logging
import sys

from pydantic import ValidationError

from wp_provisioner.config import ProvisionerSettings
from wp_provisioner.container import build_service
from wp_provisioner.core.errors import (
    CorruptState, PasswordPolicyError, ProvisioningError, RunInProgress,
    StepFailed, UsageError,
)
from wp_provisioner.core.models import LayoutMode
from wp_provisioner.core.validation import normalize_domain

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_USAGE = 2
EXIT_CORRUPT = 3
EXIT_IN_PROGRESS = 4

COMMANDS = {"install", "rotate-password", "show"}

GREEN = "\033[32m"
RESET = "\033[0m"


# -------------------------
# Arguments
# -------------------------

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="wp-provision",
        description="Idempotent single-site WordPress provisioning (Apache, PHP, MySQL).",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")

    # Also accepted after the command; SUPPRESS keeps a leading -v from being reset
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "-v", "--verbose", action="store_true", default=argparse.SUPPRESS, help="debug logging"
    )

    sub = parser.add_subparsers(dest="command", required=True)

    install = sub.add_parser("install", parents=[common], help="provision or resume a site (default)")
    install.add_argument("domain", nargs="?", help="bare domain, e.g. example.com")
    install.add_argument(
        "--layout",
        choices=[mode.value for mode in LayoutMode],
        help="vhost: /var/www/<domain>/public_html; default: /var/www/html",
    )
    install.add_argument("--email", help="certificate contact (default admin@<domain>)")
    install.add_argument("--no-tls", action="store_true", help="skip certificate issuance")
    install.add_argument("--skip-upgrade", action="store_true", help="no apt-get upgrade")
    install.add_argument(
        "--force", action="store_true",
        help="replace unrecognized web-root contents without asking",
    )

    rotate = sub.add_parser("rotate-password", parents=[common], help="generate a new database password")
    rotate.add_argument("domain")

    show = sub.add_parser("show", parents=[common], help="print the ledger (without the password)")
    show.add_argument("domain")

    return parser


def parse_args(argv):
    argv = list(argv)
    # "wp-provision example.com" means install
    positionals = [a for a in argv if not a.startswith("-")]
    if not positionals or positionals[0] not in COMMANDS:
        argv.insert(0, "install")
    return build_parser().parse_args(argv)


# -------------------------
# Interaction
# -------------------------

def prompt_domain() -> str:
    if not sys.stdin.isatty():
        raise UsageError("domain is required (no terminal to prompt on)")

    domain = input("Enter your domain name (e.g. example.com): ").strip()
    if not domain:
        raise UsageError("No domain entered.")
    return domain


def confirm_on_tty(question: str) -> bool:
    answer = input(f"{question} [y/N] ").strip().lower()
    return answer in ("y", "yes")


def link(url: str) -> str:
    """Green OSC-8 hyperlink on terminals, plain text elsewhere."""
    if not sys.stdout.isatty():
        return url
    return f"\033]8;;{url}\a{GREEN}{url}{RESET}\033]8;;\a"


# -------------------------
# Commands
# -------------------------

def settings_for(args) -> ProvisionerSettings:
    settings = ProvisionerSettings()
    updates = {}

    if getattr(args, "layout", None):
        updates["layout"] = LayoutMode(args.layout)
    if getattr(args, "email", None):
        updates["cert_email"] = args.email
    if getattr(args, "no_tls", False):
        updates["issue_certificate"] = False
    if getattr(args, "skip_upgrade", False):
        updates["upgrade_system"] = False

    return settings.model_copy(update=updates) if updates else settings


def run_install(args, service) -> int:
    domain = normalize_domain(args.domain or prompt_domain())
    confirm = confirm_on_tty if sys.stdin.isatty() else None

    print(f"=== Starting/resuming install for {domain} ===")
    result = service.install(domain, force=args.force, confirm=confirm)
    target = result.target

    warned = result.report.warned_steps()

    print("=== Done ===")
    print(f"Website files: {target.web_root}")
    print(f"DB name: {target.db_name}")
    print(f"DB user: {target.db_user}")
    print(f"DB credentials saved in {target.ledger_path} (owner-only)")
    if warned:
        print(f"Completed with warnings in: {', '.join(warned)}")
    print(f"Visit: {link(target.install_url)}")
    return EXIT_OK


def run_rotate(args, service) -> int:
    target = service.rotate_password(normalize_domain(args.domain))
    print(f"New database password for {target.db_user} saved in {target.ledger_path}")
    return EXIT_OK


def run_show(args, service) -> int:
    target = service.show(normalize_domain(args.domain))
    if target is None:
        print(f"No ledger for {args.domain}", file=sys.stderr)
        return EXIT_FAILED

    print(f"DOMAIN={target.domain}")
    print(f"WEB_ROOT={target.web_root}")
    print(f"DB_NAME={target.db_name}")
    print(f"DB_USER={target.db_user}")
    print(f"CERT_EMAIL={target.cert_email}")
    print(f"LEDGER={target.ledger_path}")
    return EXIT_OK


HANDLERS = {
    "install": run_install,
    "rotate-password": run_rotate,
    "show": run_show,
}


def main(argv=None, service_factory=build_service) -> int:
    """Main entry point."""
    args = parse_args(sys.argv[1:] if argv is None else argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    try:
        settings = settings_for(args)
        service = service_factory(settings)
        return HANDLERS[args.command](args, service)

    except (UsageError, PasswordPolicyError) as e:
        print(f"Usage error: {e}", file=sys.stderr)
        return EXIT_USAGE
    except ValidationError as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        return EXIT_USAGE
    except CorruptState as e:
        print(f"❌ Inconsistent state, manual intervention needed: {e}", file=sys.stderr)
        return EXIT_CORRUPT
    except RunInProgress as e:
        print(f"❌ {e}", file=sys.stderr)
        return EXIT_IN_PROGRESS
    except StepFailed as e:
        print(f"❌ Provisioning stopped at step '{e.step_id}': {e.cause}", file=sys.stderr)
        print("Fix the cause and re-run; completed steps will be skipped.", file=sys.stderr)
        return EXIT_FAILED
    except ProvisioningError as e:
        print(f"❌ {e}", file=sys.stderr)
        return EXIT_FAILED
    except KeyboardInterrupt:
        logger.info("🛑 Interrupted; re-run to resume")
        return EXIT_FAILED


if __name__ == "__main__":
    sys.exit(main())
