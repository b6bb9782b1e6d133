import base64

import pytest

from otp_backend import create_app
from otp_backend.config import TestingConfig


def test_health(client):
    resp = client.get("/api/health")
    assert resp.status_code == 200
    assert resp.get_json() == {"status": "ok"}


def test_hotp_endpoint(client, rfc_secret):
    resp = client.get("/api/hotp", query_string={"secret": rfc_secret, "counter": 1})
    assert resp.status_code == 200
    assert resp.get_json() == {"code": "287082", "counter": 1}


def test_hotp_endpoint_digits_and_algorithm(client, rfc_secret):
    resp = client.get("/api/hotp", query_string={"secret": rfc_secret, "counter": 0, "digits": 8, "algorithm": "SHA1"})
    assert resp.get_json()["code"] == "84755224"


def test_hotp_requires_counter(client, rfc_secret):
    resp = client.get("/api/hotp", query_string={"secret": rfc_secret})
    assert resp.status_code == 400
    assert resp.get_json()["type"] == "BadRequest"


@pytest.mark.parametrize(
    "params, error_type",
    [
        ({"counter": "abc"}, "InvalidCounterError"),
        ({"counter": "-1"}, "InvalidCounterError"),
        ({"counter": "0", "digits": "six"}, "InvalidDigitsError"),
        ({"counter": "0", "digits": "0"}, "InvalidDigitsError"),
        ({"counter": "0", "algorithm": "MD5"}, "UnsupportedAlgorithmError"),
    ],
)
def test_hotp_rejects_invalid_parameters(client, rfc_secret, params, error_type):
    resp = client.get("/api/hotp", query_string=dict(params, secret=rfc_secret))
    assert resp.status_code == 400
    assert resp.get_json()["type"] == error_type


def test_hotp_rejects_invalid_secret(client):
    resp = client.get("/api/hotp", query_string={"secret": "GEZD1NBV", "counter": 0})
    assert resp.status_code == 400
    assert resp.get_json()["type"] == "InvalidEncodingError"


def test_totp_endpoint_fixed_time(client, rfc_secret):
    resp = client.get("/api/totp", query_string={"secret": rfc_secret, "time": 59, "digits": 8})
    assert resp.status_code == 200
    assert resp.get_json() == {"code": "94287082", "remaining": 1, "period": 30}


def test_totp_endpoint_current_time(client, rfc_secret):
    resp = client.get("/api/totp", query_string={"secret": rfc_secret, "period": 60})
    body = resp.get_json()
    assert resp.status_code == 200
    assert len(body["code"]) == 6
    assert 1 <= body["remaining"] <= 60


@pytest.mark.parametrize("period", ["0", "-30", "thirty"])
def test_totp_rejects_bad_period(client, rfc_secret, period):
    resp = client.get("/api/totp", query_string={"secret": rfc_secret, "period": period})
    assert resp.status_code == 400
    assert resp.get_json()["type"] == "InvalidPeriodError"


def test_totp_requires_secret(client):
    resp = client.get("/api/totp")
    assert resp.status_code == 400
    assert "secret" in resp.get_json()["error"]


def test_config_defaults_apply(rfc_secret):
    app = create_app({"TESTING": True, "OTP_DEFAULT_DIGITS": 8, "OTP_DEFAULT_PERIOD": 60})
    resp = app.test_client().get("/api/totp", query_string={"secret": rfc_secret, "time": 119})
    assert resp.get_json() == {"code": "94287082", "remaining": 1, "period": 60}


def test_generate_secret(client):
    resp = client.post("/api/secret", json={"length": 20})
    secret = resp.get_json()["secret"]
    assert resp.status_code == 200
    assert len(base64.b32decode(secret)) == 20


def test_generate_secret_default_length(client):
    resp = client.post("/api/secret")
    assert resp.status_code == 200
    assert len(resp.get_json()["secret"]) == 32


@pytest.mark.parametrize("length", [0, -1, "20", True])
def test_generate_secret_rejects_bad_length(client, length):
    resp = client.post("/api/secret", json={"length": length})
    assert resp.status_code == 400


def test_verify_totp(client, rfc_secret):
    body = {"secret": rfc_secret, "code": "94287082", "digits": 8, "time": 59}
    assert client.post("/api/verify_totp", json=body).get_json() == {"valid": True}
    body["code"] = "00000000"
    assert client.post("/api/verify_totp", json=body).get_json() == {"valid": False}


def test_verify_totp_requires_json(client):
    resp = client.post("/api/verify_totp", data="code=123456")
    assert resp.status_code == 400


def test_verify_totp_requires_code(client, rfc_secret):
    resp = client.post("/api/verify_totp", json={"secret": rfc_secret})
    assert resp.status_code == 400
    assert "code" in resp.get_json()["error"]


def test_verify_hotp(client, rfc_secret):
    resp = client.post("/api/verify_hotp", json={"secret": rfc_secret, "code": "359152", "counter": 2})
    assert resp.get_json() == {"valid": True, "next_counter": 3}

    resp = client.post("/api/verify_hotp", json={"secret": rfc_secret, "code": "359152", "counter": 0})
    assert resp.get_json() == {"valid": False, "next_counter": 0}

    resp = client.post(
        "/api/verify_hotp", json={"secret": rfc_secret, "code": "359152", "counter": 0, "look_ahead": 2}
    )
    assert resp.get_json() == {"valid": True, "next_counter": 3}


def test_verify_hotp_requires_counter(client, rfc_secret):
    resp = client.post("/api/verify_hotp", json={"secret": rfc_secret, "code": "755224"})
    assert resp.status_code == 400


def test_cors_header_present(rfc_secret):
    app = create_app(TestingConfig)
    resp = app.test_client().get(
        "/api/hotp", query_string={"secret": rfc_secret, "counter": 0}, headers={"Origin": "http://example.com"}
    )
    assert resp.headers.get("Access-Control-Allow-Origin") in ("*", "http://example.com")


def _post_raw_json(client, path, text):
    return client.post(path, data=text, content_type="application/json")


def test_verify_totp_lone_surrogate_code_is_invalid(client, rfc_secret):
    resp = _post_raw_json(client, "/api/verify_totp", '{"secret": "%s", "code": "\\ud800", "time": 59}' % rfc_secret)
    assert resp.status_code == 200
    assert resp.get_json() == {"valid": False}


def test_verify_hotp_lone_surrogate_code_is_invalid(client, rfc_secret):
    resp = _post_raw_json(client, "/api/verify_hotp", '{"secret": "%s", "code": "\\ud800", "counter": 0}' % rfc_secret)
    assert resp.status_code == 200
    assert resp.get_json() == {"valid": False, "next_counter": 0}


@pytest.mark.parametrize("digits", ["11", str(10 ** 9)])
def test_hotp_rejects_digits_above_limit(client, rfc_secret, digits):
    resp = client.get("/api/hotp", query_string={"secret": rfc_secret, "counter": 0, "digits": digits})
    assert resp.status_code == 400
    assert resp.get_json()["type"] == "InvalidDigitsError"


def test_hotp_accepts_digits_at_limit(client, rfc_secret):
    resp = client.get("/api/hotp", query_string={"secret": rfc_secret, "counter": 7, "digits": 10})
    assert resp.get_json()["code"] == "0082162583"


def test_verify_totp_rejects_digits_above_limit(client, rfc_secret):
    body = {"secret": rfc_secret, "code": "0", "digits": 10 ** 9, "time": 59}
    resp = client.post("/api/verify_totp", json=body)
    assert resp.status_code == 400
    assert resp.get_json()["type"] == "InvalidDigitsError"


def test_digits_limit_follows_config(rfc_secret):
    app = create_app({"TESTING": True, "OTP_MAX_DIGITS": 6})
    resp = app.test_client().get("/api/totp", query_string={"secret": rfc_secret, "time": 59, "digits": 8})
    assert resp.status_code == 400


@pytest.mark.parametrize("length", [TestingConfig.OTP_MAX_SECRET_LENGTH + 1, 10 ** 9])
def test_generate_secret_rejects_length_above_limit(client, length):
    resp = client.post("/api/secret", json={"length": length})
    assert resp.status_code == 400
    assert resp.get_json()["type"] == "BadRequest"


def test_generate_secret_accepts_length_at_limit(client):
    resp = client.post("/api/secret", json={"length": TestingConfig.OTP_MAX_SECRET_LENGTH})
    assert resp.status_code == 200
