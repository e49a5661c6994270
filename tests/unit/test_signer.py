"""Test Signature Version 4 signing against the published IAM example."""

from datetime import datetime, timezone

from cloudwire.core.models import HttpRequest
from cloudwire.runtime.credentials import Credentials
from cloudwire.runtime.signer import SigV4Signer, signing_key

NOW = datetime(2015, 8, 30, 12, 36, 0, tzinfo=timezone.utc)
CREDS = Credentials("AKIDEXAMPLE", "wJalrXUtnFEMI/K7MDENG+bPxRfiCYEXAMPLEKEY")


def _list_users() -> HttpRequest:
    return HttpRequest(
        method="GET",
        url="https://iam.amazonaws.com/?Action=ListUsers&Version=2010-05-08",
        headers={"Content-Type": "application/x-www-form-urlencoded; charset=utf-8"},
    )


class TestSigningKey:
    def test_derived_key(self):
        key = signing_key(CREDS.secret_access_key, "20150830", "us-east-1", "iam")
        assert key.hex() == "c4afb1cc5771d871763a393e44b703571b55cc28424d1a5e86da6ed3c154a4b9"


class TestSigV4Signer:
    def test_canonical_request(self):
        request = _list_users()
        request.headers["X-Amz-Date"] = "20150830T123600Z"
        request.headers["Host"] = "iam.amazonaws.com"
        canonical, signed = SigV4Signer("iam", "us-east-1").canonical_request(request)
        assert signed == "content-type;host;x-amz-date"
        assert canonical == "\n".join(
            [
                "GET",
                "/",
                "Action=ListUsers&Version=2010-05-08",
                "content-type:application/x-www-form-urlencoded; charset=utf-8\n"
                "host:iam.amazonaws.com\n"
                "x-amz-date:20150830T123600Z\n",
                "content-type;host;x-amz-date",
                "e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855",
            ]
        )

    def test_authorization_header(self):
        request = _list_users()
        SigV4Signer("iam", "us-east-1").sign(request, CREDS, now=NOW)
        assert request.headers["X-Amz-Date"] == "20150830T123600Z"
        assert request.headers["Authorization"] == (
            "AWS4-HMAC-SHA256 "
            "Credential=AKIDEXAMPLE/20150830/us-east-1/iam/aws4_request, "
            "SignedHeaders=content-type;host;x-amz-date, "
            "Signature=5d672d79c15b13162d9279b0855cfba6789a8edb4c82c400e06b5924a6f2b5d7"
        )

    def test_session_token_is_signed(self):
        request = _list_users()
        creds = Credentials(CREDS.access_key_id, CREDS.secret_access_key, "token-123")
        SigV4Signer("iam", "us-east-1").sign(request, creds, now=NOW)
        assert request.headers["X-Amz-Security-Token"] == "token-123"
        assert "x-amz-security-token" in request.headers["Authorization"]

    def test_resigning_replaces_signature(self):
        request = _list_users()
        signer = SigV4Signer("iam", "us-east-1")
        signer.sign(request, CREDS, now=NOW)
        first = request.headers["Authorization"]
        signer.sign(request, CREDS, now=datetime(2015, 8, 30, 12, 37, tzinfo=timezone.utc))
        assert request.headers["Authorization"] != first
        assert request.headers["Authorization"].count("Signature=") == 1


class TestCredentials:
    def test_repr_hides_secret(self):
        assert "EXAMPLEKEY" not in repr(CREDS)
