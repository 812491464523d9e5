"""Tests for the batch command-line driver."""

import pytest

from entity_generator import cli

USERS = (
    "CREATE TABLE users (user_id_ varchar(40) NOT NULL, age_ integer NOT NULL, "
    "balance_ numeric(16,2) NULL, CONSTRAINT users_pk PRIMARY KEY (user_id_));\n"
)
NO_KEY = "CREATE TABLE notes (body_ text);\n"


@pytest.fixture
def sql_file(tmp_path):
    path = tmp_path / "schema.sql"
    path.write_text(USERS, encoding="utf-8")
    return path


def test_generates_files(sql_file, tmp_path):
    output = tmp_path / "out"

    exit_code = cli.main([str(sql_file), "-o", str(output)])

    assert exit_code == 0
    entity = output / "com" / "a1stream" / "domain" / "entity" / "Users.java"
    assert entity.exists()
    assert (output / "com" / "a1stream" / "domain" / "vo" / "UsersVO.java").exists()
    assert (
        output / "com" / "a1stream" / "domain" / "repository" / "UsersRepository.java"
    ).exists()


def test_failed_table_does_not_stop_batch(tmp_path):
    sql_file = tmp_path / "schema.sql"
    sql_file.write_text(NO_KEY + USERS, encoding="utf-8")
    output = tmp_path / "out"

    exit_code = cli.main([str(sql_file), "-o", str(output)])

    assert exit_code == 1
    assert (output / "com" / "a1stream" / "domain" / "entity" / "Users.java").exists()
    assert not list(output.rglob("Notes*.java"))


def test_output_cleared_unless_kept(sql_file, tmp_path):
    output = tmp_path / "out"
    output.mkdir()
    stale = output / "Stale.java"
    stale.write_text("x", encoding="utf-8")

    cli.main([str(sql_file), "-o", str(output), "--keep-output"])
    assert stale.exists()

    cli.main([str(sql_file), "-o", str(output)])
    assert not stale.exists()


def test_config_file(sql_file, tmp_path):
    config = tmp_path / "generator.ini"
    config.write_text(
        "[generator]\nentity_package = org.sample.model\n", encoding="utf-8"
    )
    output = tmp_path / "out"

    exit_code = cli.main([str(sql_file), "-o", str(output), "--config", str(config)])

    assert exit_code == 0
    assert (output / "org" / "sample" / "model" / "Users.java").exists()


def test_invalid_config_file(sql_file, tmp_path):
    config = tmp_path / "generator.ini"
    config.write_text("[generator]\nnot_a_setting = 1\n", encoding="utf-8")

    assert cli.main([str(sql_file), "--config", str(config)]) == 1


def test_missing_sql_file(tmp_path):
    assert cli.main([str(tmp_path / "absent.sql"), "-o", str(tmp_path / "o")]) == 1


def test_no_create_table(tmp_path):
    sql_file = tmp_path / "empty.sql"
    sql_file.write_text("SELECT 1;\n", encoding="utf-8")

    assert cli.main([str(sql_file), "-o", str(tmp_path / "o")]) == 1


def test_prompts_for_file(sql_file, tmp_path, monkeypatch):
    monkeypatch.setattr(cli.Prompt, "ask", lambda *args, **kwargs: str(sql_file))
    output = tmp_path / "out"

    assert cli.main(["-o", str(output)]) == 0
    assert any(output.rglob("Users.java"))


def test_init_config(tmp_path):
    path = tmp_path / "rc.ini"

    assert cli.main(["--init-config", "--config", str(path)]) == 0
    assert "[generator]" in path.read_text(encoding="utf-8")


def test_show_code(sql_file, tmp_path, capsys):
    cli.main([str(sql_file), "-o", str(tmp_path / "out"), "--show-code"])

    assert "UsersRepository" in capsys.readouterr().out
