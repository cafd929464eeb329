import pytest

from prh_virre.exceptions import ConfigError
from prh_virre.models import (
    AccessToken,
    Attachment,
    ClientConfig,
    Credentials,
    DEFAULT_BASE_URL,
    FinancialStatements,
)


def test_credentials_repr_hides_secrets() -> None:
    creds = Credentials("client-id", "top-secret", "user", "hunter2")
    text = repr(creds)
    assert "client-id" in text
    assert "user" in text
    assert "top-secret" not in text
    assert "hunter2" not in text


def test_credentials_validate_names_first_missing_field() -> None:
    with pytest.raises(ConfigError) as exc:
        Credentials("client-id", "", "", "pw").validate()
    assert exc.value.field == "client_secret"


def test_credentials_from_env_mapping() -> None:
    creds = Credentials.from_env({
        "PRH_VIRRE_CLIENT_ID": "id",
        "PRH_VIRRE_CLIENT_SECRET": "secret",
        "PRH_VIRRE_USER_NAME": "user",
        "PRH_VIRRE_PASSWORD": "pw",
    })
    assert creds == Credentials("id", "secret", "user", "pw")
    creds.validate()


def test_client_config_defaults_and_env() -> None:
    config = ClientConfig()
    assert config.base_url == DEFAULT_BASE_URL
    assert config.client_timeout.total == pytest.approx(120.0)

    config = ClientConfig.from_env({"PRH_VIRRE_TIMEOUT": "30000"})
    assert config.base_url == DEFAULT_BASE_URL
    assert config.timeout == 30000


def test_access_token_from_response() -> None:
    token = AccessToken.from_response({
        "access_token": "abc",
        "expires_in": 3600,
        "scope": "openid",
        "id_token": "jwt",
        "token_type": "bearer",
    })
    assert token.expires_in == 3600.0
    assert token.authorization == "Bearer abc"
    assert "abc" not in repr(token)


def test_access_token_from_response_requires_fields() -> None:
    with pytest.raises(KeyError):
        AccessToken.from_response({"expires_in": 10})  # type: ignore[typeddict-item]
    with pytest.raises(ValueError):
        AccessToken.from_response({"access_token": "abc", "expires_in": "soon"})  # type: ignore[typeddict-item]


def test_save_attachments(tmp_path) -> None:
    statements = FinancialStatements(
        metadata={"businessId": "1234567-8"},  # type: ignore[typeddict-item]
        attachments=[
            Attachment("report.pdf", "application/pdf", "file1", b"PDF"),
            Attachment("../../escape.xml", "application/xml", "file2", b""),
        ],
    )

    paths = statements.save_attachments(tmp_path / "out")

    assert paths == [tmp_path / "out" / "report.pdf", tmp_path / "out" / "escape.xml"]
    assert paths[0].read_bytes() == b"PDF"
    assert paths[1].read_bytes() == b""
    assert statements.attachments[0].size == 3


def test_client_config_rejects_non_numeric_timeout() -> None:
    with pytest.raises(ConfigError) as exc:
        ClientConfig.from_env({"PRH_VIRRE_TIMEOUT": "soon"})
    assert exc.value.field == "PRH_VIRRE_TIMEOUT"
    assert "PRH_VIRRE_TIMEOUT" in str(exc.value)


def test_save_attachments_keeps_duplicate_filenames(tmp_path) -> None:
    statements = FinancialStatements(
        metadata={"businessId": "1234567-8"},  # type: ignore[typeddict-item]
        attachments=[
            Attachment("report.pdf", "application/pdf", "file1", b"first"),
            Attachment("a/report.pdf", "application/pdf", "file2", b"second"),
            Attachment("report.pdf", "application/pdf", "file3", b"third"),
        ],
    )

    paths = statements.save_attachments(tmp_path)

    assert paths == [tmp_path / "report.pdf", tmp_path / "report-1.pdf", tmp_path / "report-2.pdf"]
    assert [p.read_bytes() for p in paths] == [b"first", b"second", b"third"]


@pytest.mark.parametrize("filename", ["..", "/", "."])
def test_save_attachments_falls_back_to_part_name(tmp_path, filename) -> None:
    statements = FinancialStatements(
        metadata={"businessId": "1234567-8"},  # type: ignore[typeddict-item]
        attachments=[Attachment(filename, "application/pdf", "file1", b"PDF")],
    )

    paths = statements.save_attachments(tmp_path)

    assert paths == [tmp_path / "file1"]
    assert paths[0].read_bytes() == b"PDF"


def test_save_attachments_uses_index_when_no_usable_name(tmp_path) -> None:
    statements = FinancialStatements(
        metadata={"businessId": "1234567-8"},  # type: ignore[typeddict-item]
        attachments=[Attachment("..", "application/pdf", "..", b"PDF")],
    )

    assert statements.save_attachments(tmp_path) == [tmp_path / "attachment-0"]
