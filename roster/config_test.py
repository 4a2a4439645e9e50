from roster.config import get_settings


def test_get_settings_defaults(tmp_path, monkeypatch):
    monkeypatch.delenv("POSTGRES_HOST", raising=False)
    monkeypatch.delenv("PLAYER_UPDATE_OMITTED_TEAM", raising=False)

    settings = get_settings(str(tmp_path / "missing.env"))

    assert settings.POSTGRES_HOST == "localhost"
    assert settings.PLAYER_UPDATE_OMITTED_TEAM == "clear"
    assert settings.API_PREFIX == ""


def test_get_settings_from_env_file(tmp_path, monkeypatch):
    for var in ("POSTGRES_USER", "POSTGRES_PASSWORD", "POSTGRES_DB", "POSTGRES_PORT"):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.delenv("POSTGRES_HOST", raising=False)
    monkeypatch.delenv("PLAYER_UPDATE_OMITTED_TEAM", raising=False)
    env_file = tmp_path / ".env"
    env_file.write_text(
        "POSTGRES_HOST=db\nPOSTGRES_PORT=6543\nPLAYER_UPDATE_OMITTED_TEAM=keep\n"
        "SOMETHING_ELSE=ignored\n"
    )

    settings = get_settings(str(env_file))

    assert settings.PLAYER_UPDATE_OMITTED_TEAM == "keep"
    assert settings.POSTGRES_DSN == (
        "postgresql://roster_user:roster_password@db:6543/roster_db"
    )
