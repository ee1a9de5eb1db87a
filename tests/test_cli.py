"""Tests for the operator command-line interface."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import patch

import pytest

from kolhub.cli import build_parser, main
from kolhub.config import Settings
from kolhub.persistence import Gateway, close_db, init_db


@pytest.fixture(autouse=True)
def _cli_settings(settings: Settings):
    with patch("kolhub.cli.get_settings", return_value=settings):
        yield


class TestBuildParser:
    """Tests for argument parser construction."""

    def test_create_user_defaults_to_admin(self) -> None:
        args = build_parser().parse_args([
            "create-user",
            "--username",
            "root",
            "--email",
            "root@example.com",
            "--password",
            "Passw0rd!",
        ])
        assert args.command == "create-user"
        assert args.role == "ADMIN"
        assert args.db is None

    def test_rejects_unknown_role(self) -> None:
        with pytest.raises(SystemExit):
            build_parser().parse_args([
                "create-user",
                "--username",
                "root",
                "--email",
                "root@example.com",
                "--password",
                "Passw0rd!",
                "--role",
                "OWNER",
            ])

    def test_requires_a_subcommand(self) -> None:
        with pytest.raises(SystemExit):
            build_parser().parse_args([])


class TestInitDb:
    def test_creates_schema(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        db_path = tmp_path / "data" / "kolhub.db"

        assert main(["init-db", "--db", str(db_path)]) == 0

        assert db_path.exists()
        assert "Database ready" in capsys.readouterr().out
        conn = init_db(db_path)
        assert Gateway(conn).count("users") == 0
        close_db(conn)


class TestCreateUser:
    def _run(self, db_path: Path, username: str = "root", password: str = "Passw0rd!") -> int:
        return main([
            "create-user",
            "--username",
            username,
            "--email",
            f"{username}@example.com",
            "--password",
            password,
            "--db",
            str(db_path),
        ])

    def test_creates_admin(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        db_path = tmp_path / "kolhub.db"

        assert self._run(db_path) == 0

        assert "User root created successfully." in capsys.readouterr().out
        conn = init_db(db_path)
        user = Gateway(conn).find_first("users")
        close_db(conn)
        assert user["role"] == "ADMIN"
        assert user["password"] != "Passw0rd!"

    def test_duplicate_fails(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        db_path = tmp_path / "kolhub.db"
        self._run(db_path)

        assert self._run(db_path) == 1
        assert "already registered" in capsys.readouterr().out

    def test_weak_password_fails(self, tmp_path: Path) -> None:
        assert self._run(tmp_path / "kolhub.db", password="weak") == 1
