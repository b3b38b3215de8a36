import pytest

from catalog_api import cli
from catalog_api.config import Settings


@pytest.fixture
def file_settings(tmp_path):
    return Settings(
        _env_file=None,
        DATABASE_URL=f"sqlite:///{tmp_path / 'data' / 'catalog.db'}",
        UPLOAD_DIR=str(tmp_path / "uploads"),
        BCRYPT_ROUNDS=4,
    )


@pytest.mark.unit
def test_init_db_creates_database_file(file_settings, tmp_path):
    assert cli.main(["init-db"], settings=file_settings) == 0
    assert (tmp_path / "data" / "catalog.db").is_file()


@pytest.mark.unit
def test_create_user(file_settings, capsys):
    assert cli.main(["create-user", "editor", "--password", "secret123"], settings=file_settings) == 0
    assert "Created user editor" in capsys.readouterr().out

    assert cli.main(["create-user", "editor", "--password", "secret123"], settings=file_settings) == 1
    assert "Username already exists" in capsys.readouterr().err


@pytest.mark.unit
def test_create_user_rejects_short_password(file_settings, capsys):
    assert cli.main(["create-user", "editor", "--password", "123"], settings=file_settings) == 1
    assert "password 6+ characters" in capsys.readouterr().err


@pytest.mark.unit
def test_command_is_required():
    with pytest.raises(SystemExit):
        cli.main([])
