"""Tests for the identity file and notification preference"""

from share_keeper.models.identity import UserIdentity
from share_keeper.services.identity_service import IdentityService, format_identity, parse_identity


class TestParseIdentity:
    """Test identity file parsing."""

    def test_written_format_round_trips(self):
        text = format_identity(UserIdentity("Ada Lovelace", "ada@example.com"))

        assert text == "[user]\n\tname  = Ada Lovelace\n\temail = ada@example.com\n"
        assert parse_identity(text) == UserIdentity("Ada Lovelace", "ada@example.com")

    def test_splits_on_first_equals(self):
        identity = parse_identity("name = a=b\nemail=x@y")

        assert identity.name == "a=b"
        assert identity.email == "x@y"

    def test_ignores_headers_and_unknown_keys(self):
        identity = parse_identity("[user]\n# comment\nsigningkey = ABC\nname = Bob\n")

        assert identity.name == "Bob"
        assert identity.email == ""

    def test_empty_text(self):
        assert not parse_identity("").is_set


class TestIdentityService:
    """Test reading and writing the identity file."""

    def test_not_configured_without_file(self, config):
        service = IdentityService(config)

        assert not service.is_configured()
        assert service.load() == UserIdentity()

    def test_set_name_and_email(self, config):
        service = IdentityService(config)

        service.set_name(" Ada ")
        service.set_email("ada@example.com")

        assert service.is_configured()
        assert service.load() == UserIdentity("Ada", "ada@example.com")

    def test_set_name_keeps_email(self, config):
        service = IdentityService(config)
        service.save(UserIdentity("Old", "keep@example.com"))

        service.set_name("New")

        assert service.load() == UserIdentity("New", "keep@example.com")

    def test_email_falls_back_to_key_file(self, config):
        config.keys_path.mkdir(parents=True)
        (config.keys_path / "share-keeper.ada@example.com.key").write_text("")
        (config.keys_path / "share-keeper.ada@example.com.key.pub").write_text("")
        service = IdentityService(config)

        assert service.email_from_key_file() == "ada@example.com"
        assert service.load().email == "ada@example.com"

    def test_file_email_wins_over_key_file(self, config):
        config.keys_path.mkdir(parents=True)
        (config.keys_path / "share-keeper.old@example.com.key").write_text("")
        service = IdentityService(config)
        service.save(UserIdentity("Ada", "new@example.com"))

        assert service.load().email == "new@example.com"

    def test_no_keys_folder(self, config):
        assert IdentityService(config).email_from_key_file() == ""


class TestNotifications:
    """Test the notify marker file."""

    def test_off_by_default(self, config):
        assert not IdentityService(config).notifications_enabled()

    def test_enable_is_idempotent(self, config):
        service = IdentityService(config)

        service.enable_notifications()
        service.enable_notifications()

        assert service.notifications_enabled()
        assert config.notify_file.exists()

    def test_toggle(self, config):
        service = IdentityService(config)

        assert service.toggle_notifications() is True
        assert service.toggle_notifications() is False
        assert not config.notify_file.exists()
