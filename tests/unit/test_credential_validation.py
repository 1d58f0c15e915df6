import pytest

from services.auth.models import Credentials
from services.auth.validators import credential_error_field, validate_credentials


def creds(username="12345", password="pw", server="Broker-Demo"):
    return Credentials(username=username, password=password, server=server)


def test_valid_credentials_pass():
    assert validate_credentials(creds()) is None


def test_surrounding_whitespace_is_ignored():
    assert validate_credentials(creds(username="  12345 ", server=" Broker-Demo ")) is None


@pytest.mark.parametrize("username", ["", "   ", None])
def test_missing_username(username):
    assert validate_credentials(creds(username=username)) == "Username is required"


@pytest.mark.parametrize("password", ["", "  \t", None])
def test_missing_password(password):
    assert validate_credentials(creds(password=password)) == "Password is required"


@pytest.mark.parametrize("server", ["", " ", None])
def test_missing_server(server):
    assert validate_credentials(creds(server=server)) == "Server is required"


@pytest.mark.parametrize("username", ["12a45", "-123", "12 345", "1.5", "１２３"])
def test_non_numeric_username(username):
    assert validate_credentials(creds(username=username)) == "Username must be a valid account number (numeric)"


def test_first_problem_wins():
    # Empty everything reports the username; a bad username with no server reports the server
    assert validate_credentials(creds(username="", password="", server="")) == "Username is required"
    assert validate_credentials(creds(username="abc", server="")) == "Server is required"


def test_error_field_mapping():
    assert credential_error_field("Username is required") == "username"
    assert credential_error_field("Password is required") == "password"
    assert credential_error_field("Server is required") == "server"
    assert credential_error_field("something else") == "credentials"
