# wp_provisioner/adapters/database.py
"""MySQL collaborator, driven through the mysql client over the root socket."""

import logging
from typing import Dict, Optional

logger = logging.getLogger(__name__)


def sql_string(value: str) -> str:
    """Quote a value as a MySQL string literal."""
    escaped = value.replace("\\", "\\\\").replace("'", "\\'")
    return f"'{escaped}'"


def sql_identifier(name: str) -> str:
    """Quote an identifier with backticks."""
    return "`" + name.replace("`", "``") + "`"


class MySQLAdmin:
    """
    Administrative access to the local MySQL server.

    Statements go to the client on stdin, so passwords never appear on a
    command line or in logs.
    """

    def __init__(self, runner, binary: str = "mysql", table_prefix: str = "wp_"):
        self._runner = runner
        self._binary = binary
        self._options_table = f"{table_prefix}options"

    # -------------------------
    # QUERIES
    # -------------------------

    def database_exists(self, name: str) -> bool:
        rows = self._query(
            "SELECT SCHEMA_NAME FROM INFORMATION_SCHEMA.SCHEMATA "
            f"WHERE SCHEMA_NAME = {sql_string(name)};"
        )
        return bool(rows)

    def user_exists(self, user: str, host: str) -> bool:
        rows = self._query(
            "SELECT User FROM mysql.user "
            f"WHERE User = {sql_string(user)} AND Host = {sql_string(host)};"
        )
        return bool(rows)

    def table_exists(self, database: str, table: str) -> bool:
        rows = self._query(
            "SELECT TABLE_NAME FROM INFORMATION_SCHEMA.TABLES "
            f"WHERE TABLE_SCHEMA = {sql_string(database)} "
            f"AND TABLE_NAME = {sql_string(table)};"
        )
        return bool(rows)

    def site_urls(self, database: str) -> Optional[Dict[str, str]]:
        """siteurl/home values, or None while WordPress has no tables yet."""
        if not self.table_exists(database, self._options_table):
            return None

        rows = self._query(
            f"SELECT option_name, option_value FROM {sql_identifier(self._options_table)} "
            "WHERE option_name IN ('siteurl', 'home');",
            database=database,
        )
        urls = {}
        for row in rows:
            name, _, value = row.partition("\t")
            urls[name] = value
        return urls

    # -------------------------
    # MUTATIONS
    # -------------------------

    def create_database(self, name: str, charset: str, collation: str) -> None:
        self._execute(
            f"CREATE DATABASE IF NOT EXISTS {sql_identifier(name)} "
            f"CHARACTER SET {charset} COLLATE {collation};"
        )
        logger.info(f"[mysql] database {name} ready")

    def create_user(self, user: str, host: str, password: str) -> None:
        self._execute(
            f"CREATE USER IF NOT EXISTS {sql_string(user)}@{sql_string(host)} "
            f"IDENTIFIED BY {sql_string(password)};"
        )
        logger.info(f"[mysql] user {user}@{host} ready")

    def grant_database(self, database: str, user: str, host: str) -> None:
        self._execute(
            f"GRANT ALL PRIVILEGES ON {sql_identifier(database)}.* "
            f"TO {sql_string(user)}@{sql_string(host)};\n"
            "FLUSH PRIVILEGES;"
        )
        logger.info(f"[mysql] granted {database}.* to {user}@{host}")

    def set_password(self, user: str, host: str, password: str) -> None:
        self._execute(
            f"ALTER USER {sql_string(user)}@{sql_string(host)} "
            f"IDENTIFIED BY {sql_string(password)};\n"
            "FLUSH PRIVILEGES;"
        )
        logger.info(f"[mysql] password changed for {user}@{host}")

    def update_site_urls(self, database: str, url: str) -> None:
        self._execute(
            f"UPDATE {sql_identifier(self._options_table)} "
            f"SET option_value = {sql_string(url)} "
            "WHERE option_name IN ('siteurl', 'home');",
            database=database,
        )
        logger.info(f"[mysql] site URL set to {url}")

    # -------------------------
    # CLIENT
    # -------------------------

    def _argv(self, database: Optional[str]):
        argv = [self._binary, "-N", "-B"]
        if database:
            argv.append(database)
        return argv

    def _execute(self, sql: str, database: Optional[str] = None) -> None:
        self._runner.run(self._argv(database), input=sql)

    def _query(self, sql: str, database: Optional[str] = None):
        result = self._runner.run(self._argv(database), input=sql)
        return [line for line in result.stdout.splitlines() if line.strip()]
