"""
Tests for the create_api_key management command.
"""

from io import StringIO

import pytest
from django.core.management import CommandError, call_command

from apps.api_keys.models import ApiKey
from apps.api_keys.services import validate_api_key


@pytest.mark.django_db
class TestCreateApiKeyCommand:
    """Tests for create_api_key."""

    def test_prints_working_secret(self) -> None:
        out = StringIO()

        call_command("create_api_key", "Partner", stdout=out)

        secret = out.getvalue().strip().splitlines()[-1]
        key = ApiKey.objects.get()
        assert key.name == "Partner"
        assert key.expires_at is None
        assert validate_api_key(secret) == key

    def test_expiry(self) -> None:
        call_command("create_api_key", "Partner", "--expires-in-days", "30", stdout=StringIO())
        assert ApiKey.objects.get().expires_at is not None

    def test_non_positive_expiry(self) -> None:
        with pytest.raises(CommandError, match="positive"):
            call_command("create_api_key", "Partner", "--expires-in-days", "0")

    def test_blank_name(self) -> None:
        with pytest.raises(CommandError, match="name is required"):
            call_command("create_api_key", "  ")
